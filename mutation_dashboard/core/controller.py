from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Protocol, Tuple, Union

from mutation_dashboard.core.base_view import BaseView, UpdateOptions
from mutation_dashboard.core.color_scale import DEFAULT_COLOR_SCALE, ColorScale
from mutation_dashboard.core.exceptions import IngestionError, IngestionErrorKind
from mutation_dashboard.core.records import IngestionResult, MutationDataset, MutationRecord, Provenance
from mutation_dashboard.core.state import ApplicationState

logger = logging.getLogger(__name__)

SOURCE_LABELS = {
    Provenance.API: "the API",
    Provenance.UPLOAD: "the upload",
    Provenance.GENERATED: "the generator",
    Provenance.FALLBACK: "generated mock data",
    Provenance.FILES: "local files",
    Provenance.COMBINED: "combined sources",
}


@dataclass(frozen=True)
class StatusMessage:
    """Banner shown above the views. level is a Bootstrap colour name."""
    level: str
    text: str


@dataclass(frozen=True)
class RefreshSnapshot:
    """What every consumer was handed by one refresh()."""
    data: MutationDataset
    selected_index: Optional[int]
    selected_record: Optional[MutationRecord]
    color_scale: ColorScale
    view_errors: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LoadOutcome:
    """
    Result of one data-replacing request.

    - ok: the result was applied to the state
    - stale: a newer request was issued before this one completed; nothing applied
    """
    request_id: int
    ok: bool
    stale: bool = False
    result: Optional[IngestionResult] = None
    error: Optional[IngestionError] = None


class DatasetSource(Protocol):
    """What the controller needs from the data provider."""

    fallback_count: int

    async def load_initial(self) -> IngestionResult: ...

    async def fetch_from_api(self) -> IngestionResult: ...

    async def parse_upload(self, contents: Union[str, bytes], filename: Optional[str] = None) -> IngestionResult: ...

    def generate_random(self, count: int) -> IngestionResult: ...

    def combine(self, current: MutationDataset, incoming: MutationDataset) -> MutationDataset: ...


class RecordPanel(Protocol):
    """What the controller needs from the details panel."""

    id: str

    def update(self, container_id: str, record: Optional[MutationRecord], color_scale: ColorScale) -> Any: ...

    def show_error(self, message: str) -> Any: ...


class DashboardController:
    """
    Keeps the map, the scatter plot and the details panel in sync with one
    ApplicationState.

    Every state change goes through this class and ends with refresh(), which
    hands the same dataset, selection and colour scale to every view. Loads
    are tagged with increasing request ids; only the latest one may touch the
    state.

    Dash serves callbacks from several threads. Callers hold `lock` for the
    whole of one user action so each session still sees one action at a time.
    """

    def __init__(
        self,
        state: ApplicationState,
        provider: DatasetSource,
        *,
        map_view: BaseView,
        scatter_view: BaseView,
        details_panel: RecordPanel,
        details_container_id: str = "details-panel",
        color_scale_name: str = DEFAULT_COLOR_SCALE,
    ) -> None:
        self.state = state
        self.provider = provider
        self.map_view = map_view
        self.scatter_view = scatter_view
        self.details_panel = details_panel
        self.details_container_id = details_container_id
        self.color_scale_name = color_scale_name

        self.lock = threading.Lock()
        self._latest_request_id = 0
        self._status: Optional[StatusMessage] = None
        self._last_snapshot: Optional[RefreshSnapshot] = None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def views(self) -> Tuple[BaseView, BaseView]:
        return self.map_view, self.scatter_view

    @property
    def status(self) -> Optional[StatusMessage]:
        return self._status

    @property
    def last_snapshot(self) -> Optional[RefreshSnapshot]:
        return self._last_snapshot

    @property
    def latest_request_id(self) -> int:
        return self._latest_request_id

    # ------------------------------------------------------------------
    # Update protocol
    # ------------------------------------------------------------------
    def refresh(self) -> RefreshSnapshot:
        """
        Push the current state to every view.

        A view that fails shows its own error state; the others still update.
        """
        data = self.state.current_data
        selected = self.state.selected_record()
        scale = ColorScale.for_values(data.mutation_values, self.color_scale_name)

        options = UpdateOptions(
            selected_index=selected.index if selected is not None else None,
            color_scale=scale,
            on_point_click=self.on_point_click,
        )

        errors: Dict[str, str] = {}
        for view in self.views:
            try:
                view.update(data, options)
            except Exception as e:
                logger.exception("View update failed", extra={"view_id": view.id})
                errors[view.id] = str(e) or type(e).__name__
                view.show_error(errors[view.id])

        try:
            self.details_panel.update(self.details_container_id, selected, scale)
        except Exception as e:
            logger.exception("Details panel render failed")
            errors[self.details_panel.id] = str(e) or type(e).__name__
            self.details_panel.show_error("Could not display the selected record.")

        snapshot = RefreshSnapshot(
            data=data,
            selected_index=options.selected_index,
            selected_record=selected,
            color_scale=scale,
            view_errors=errors,
        )
        self._last_snapshot = snapshot
        return snapshot

    def on_point_click(self, record: MutationRecord) -> None:
        """Callback injected into the views: select the clicked point and refresh."""
        self.state.select(record.index)
        self.refresh()

    def select(self, index: Optional[int]) -> RefreshSnapshot:
        self.state.select(index)
        return self.refresh()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------
    async def load_initial(self) -> LoadOutcome:
        request_id = self._begin_request()
        return await self._run_load(
            request_id,
            self.provider.load_initial,
            preserve_original=False,
            append=False,
        )

    async def fetch_api(self, append: bool = False) -> LoadOutcome:
        request_id = self._begin_request()
        return await self._run_load(
            request_id,
            self.provider.fetch_from_api,
            preserve_original=True,
            append=append,
        )

    async def upload(
        self,
        contents: Union[str, bytes],
        filename: Optional[str] = None,
        append: bool = False,
    ) -> LoadOutcome:
        request_id = self._begin_request()
        return await self._run_load(
            request_id,
            lambda: self.provider.parse_upload(contents, filename),
            preserve_original=True,
            append=append,
        )

    def generate(self, count: int, append: bool = False) -> LoadOutcome:
        request_id = self._begin_request()
        try:
            result = self.provider.generate_random(count)
        except ValueError as e:
            return self._fail(request_id, IngestionError(IngestionErrorKind.EMPTY, str(e)))
        except IngestionError as e:
            return self._fail(request_id, e)
        return self._apply(request_id, result, preserve_original=True, append=append)

    def reset(self) -> LoadOutcome:
        # Supersedes any load still in flight
        request_id = self._begin_request()
        self.state.reset_to_original()
        self._status = StatusMessage(
            "info", f"Data reset to the original {len(self.state.current_data)} records."
        )
        logger.info("Reset to original data", extra={"request_id": request_id})
        self.refresh()
        return LoadOutcome(request_id=request_id, ok=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _begin_request(self) -> int:
        self._latest_request_id += 1
        return self._latest_request_id

    def _is_latest(self, request_id: int) -> bool:
        return request_id == self._latest_request_id

    async def _run_load(
        self,
        request_id: int,
        loader: Callable[[], Awaitable[IngestionResult]],
        *,
        preserve_original: bool,
        append: bool,
    ) -> LoadOutcome:
        try:
            result = await loader()
        except IngestionError as e:
            return self._fail(request_id, e)
        return self._apply(
            request_id,
            result,
            preserve_original=preserve_original,
            append=append,
        )

    def _apply(
        self,
        request_id: int,
        result: IngestionResult,
        *,
        preserve_original: bool,
        append: bool,
    ) -> LoadOutcome:
        if not self._is_latest(request_id):
            logger.info(
                "Discarding stale load result",
                extra={"request_id": request_id, "latest_request_id": self._latest_request_id},
            )
            return LoadOutcome(request_id=request_id, ok=False, stale=True, result=result)

        dataset = result.dataset
        if append and self.state.is_loaded:
            dataset = self.provider.combine(self.state.current_data, dataset)

        # The first dataset applied is the reset target, even if the initial load was superseded
        if not self.state.is_loaded:
            preserve_original = False
        self.state.replace_dataset(dataset, preserve_original=preserve_original)
        if result.provenance is Provenance.API:
            self.state.record_api_call()

        self._status = self._success_status(result, append)
        logger.info(
            "Dataset replaced",
            extra={
                "request_id": request_id,
                "source": result.provenance.value,
                "n_records": len(dataset),
                "dropped": result.dropped,
                "append": append,
            },
        )
        self.refresh()
        return LoadOutcome(request_id=request_id, ok=True, result=result)

    def _fail(self, request_id: int, error: IngestionError) -> LoadOutcome:
        if not self._is_latest(request_id):
            logger.info("Discarding stale load failure", extra={"request_id": request_id})
            return LoadOutcome(request_id=request_id, ok=False, stale=True, error=error)

        logger.warning(
            "Load failed; keeping previous data",
            extra={"request_id": request_id, "kind": error.kind.value, "error": error.message},
        )
        self._status = StatusMessage("danger", f"Could not load data ({error.kind.value}): {error.message}")
        self.refresh()
        return LoadOutcome(request_id=request_id, ok=False, error=error)

    @staticmethod
    def _success_status(result: IngestionResult, append: bool) -> StatusMessage:
        n = len(result.dataset)
        if result.dataset.is_fallback:
            return StatusMessage(
                "warning",
                f"Data source unavailable: showing {n} generated mock records.",
            )

        verb = "Added" if append else "Loaded"
        text = f"{verb} {n} records from {SOURCE_LABELS[result.provenance]}."
        if result.dropped:
            text += f" {result.dropped} invalid row{'s' if result.dropped != 1 else ''} dropped."
        return StatusMessage("warning" if result.dropped else "success", text)
