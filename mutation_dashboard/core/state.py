from __future__ import annotations

import logging
from typing import Optional

from mutation_dashboard.core.exceptions import SelectionError
from mutation_dashboard.core.records import MutationDataset, MutationRecord

logger = logging.getLogger(__name__)


class ApplicationState:
    """
    Single source of truth for one dashboard session.

    Fields (read-only from outside, changed only through the methods below):

    - original_data: dataset installed by the last fresh load, used for reset
    - current_data: the active dataset, always replaced wholesale
    - selected_index: index of a record in current_data, or None
    - api_call_count: number of successful API fetches

    Invariant: selected_index is None or resolves in current_data.
    """

    def __init__(self) -> None:
        self._original_data: MutationDataset = MutationDataset.empty()
        self._current_data: MutationDataset = MutationDataset.empty()
        self._selected_index: Optional[int] = None
        self._api_call_count: int = 0
        self._loaded = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def original_data(self) -> MutationDataset:
        return self._original_data

    @property
    def current_data(self) -> MutationDataset:
        return self._current_data

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected_index

    @property
    def api_call_count(self) -> int:
        return self._api_call_count

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def selected_record(self) -> Optional[MutationRecord]:
        """Re-resolve the selection against the current dataset."""
        return self._current_data.get(self._selected_index)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def replace_dataset(self, new_data: MutationDataset, *, preserve_original: bool) -> None:
        """
        Install `new_data` as the current dataset.

        :param new_data: the replacement dataset
        :param preserve_original: when False, `new_data` also becomes the reset target
        """
        self._current_data = new_data
        if not preserve_original:
            self._original_data = new_data
        self._loaded = True

        if self._selected_index is not None and self._selected_index not in new_data:
            logger.debug("Selection cleared by dataset replacement", extra={"index": self._selected_index})
            self._selected_index = None

    def reset_to_original(self) -> None:
        """Restore the original dataset. Always deselects."""
        self._current_data = self._original_data
        self._selected_index = None

    def select(self, index: Optional[int]) -> bool:
        """
        Select the record with `index`, or clear the selection with None.

        :return: True if the selection was accepted, False for an unknown index
        """
        if index is None:
            self._selected_index = None
            return True

        try:
            record = self._current_data.require(index)
        except SelectionError as e:
            logger.debug("Ignoring selection of unknown record", extra={"index": e.index})
            return False

        self._selected_index = record.index
        return True

    def record_api_call(self) -> None:
        self._api_call_count += 1
