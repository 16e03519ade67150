from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

import pandas as pd

from mutation_dashboard.core.exceptions import SelectionError, ValidationIssue

# Synthetic fallback ("mock") records live in [0, MOCK_INDEX_LIMIT).
# User-generated records start at MOCK_INDEX_LIMIT so they never collide.
MOCK_INDEX_LIMIT = 1000

REQUIRED_FIELDS: Tuple[str, ...] = ("latitude", "longitude", "x", "y", "mutation_value")

FRAME_COLUMNS: List[str] = ["index", *REQUIRED_FIELDS]


class SourceKind(str, Enum):
    """Where a raw record came from, before normalization."""
    API = "api"
    UPLOAD = "upload"
    GENERATED = "generated"
    FILES = "files"


class Provenance(str, Enum):
    """Which source produced a whole dataset."""
    API = "api"
    UPLOAD = "upload"
    GENERATED = "generated"
    FALLBACK = "fallback"
    FILES = "files"
    COMBINED = "combined"


@dataclass(frozen=True)
class MutationRecord:
    """
    Canonical unit of the dashboard: one DNA mutation data point.

    Fields:

    - index: stable identity used for selection and lookup
    - latitude / longitude: geographic position
    - x / y: clustering-space coordinates for the scatter layout
    - mutation_value: value in [0, 1] fed to the colour scale
    - extra: descriptive fields passed through for display
    """
    index: int
    latitude: float
    longitude: float
    x: float
    y: float
    mutation_value: float
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the pass-through fields as well
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    def __hash__(self) -> int:
        return hash((self.index, self.latitude, self.longitude, self.x, self.y, self.mutation_value))

    def with_index(self, index: int) -> MutationRecord:
        return MutationRecord(
            index=index,
            latitude=self.latitude,
            longitude=self.longitude,
            x=self.x,
            y=self.y,
            mutation_value=self.mutation_value,
            extra=dict(self.extra),
        )

    def to_dict(self) -> Dict[str, Any]:
        row: Dict[str, Any] = dict(self.extra)
        row.update(
            index=self.index,
            latitude=self.latitude,
            longitude=self.longitude,
            x=self.x,
            y=self.y,
            mutation_value=self.mutation_value,
        )
        return row


class MutationDataset:
    """
    Immutable, ordered collection of MutationRecords with unique indices.

    The dataset is replaced wholesale by the state store, never edited in
    place. `provenance` records which source produced it.
    """

    def __init__(
        self,
        records: Iterable[MutationRecord] = (),
        provenance: Provenance = Provenance.GENERATED,
    ) -> None:
        self._records: Tuple[MutationRecord, ...] = tuple(records)
        self._provenance = Provenance(provenance)

        by_index: Dict[int, MutationRecord] = {}
        for rec in self._records:
            if rec.index in by_index:
                raise ValueError(f"Duplicate record index {rec.index} in dataset")
            by_index[rec.index] = rec
        self._by_index = by_index

    @classmethod
    def empty(cls) -> MutationDataset:
        return cls((), Provenance.GENERATED)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def records(self) -> Tuple[MutationRecord, ...]:
        return self._records

    @property
    def provenance(self) -> Provenance:
        return self._provenance

    @property
    def is_fallback(self) -> bool:
        return self._provenance is Provenance.FALLBACK

    @property
    def indices(self) -> List[int]:
        return [r.index for r in self._records]

    @property
    def mutation_values(self) -> List[float]:
        return [r.mutation_value for r in self._records]

    @property
    def max_index(self) -> Optional[int]:
        return max(self._by_index) if self._by_index else None

    def get(self, index: Optional[int]) -> Optional[MutationRecord]:
        if index is None:
            return None
        return self._by_index.get(index)

    def require(self, index: int) -> MutationRecord:
        try:
            return self._by_index[index]
        except (KeyError, TypeError):
            raise SelectionError(index)

    def __contains__(self, index: object) -> bool:
        return index in self._by_index

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[MutationRecord]:
        return iter(self._records)

    def __getitem__(self, position: int) -> MutationRecord:
        return self._records[position]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MutationDataset):
            return NotImplemented
        return self._records == other._records

    def __hash__(self) -> int:
        return hash(self._records)

    def __repr__(self) -> str:
        return f"MutationDataset(n={len(self)}, provenance={self._provenance.value!r})"

    # ------------------------------------------------------------------
    # Tabular view for plotting / preview
    # ------------------------------------------------------------------
    def to_frame(self) -> pd.DataFrame:
        """
        One row per record, required columns first, pass-through fields after.
        Row order matches record order.
        """
        if not self._records:
            return pd.DataFrame(columns=FRAME_COLUMNS)
        df = pd.DataFrame([r.to_dict() for r in self._records])
        extra_cols = [c for c in df.columns if c not in FRAME_COLUMNS]
        return df[FRAME_COLUMNS + extra_cols]


@dataclass
class IngestionResult:
    """
    A normalized dataset plus what was lost on the way.

    - dropped: rows rejected by the normalizer or unparseable lines
    - issues: (row position, issue) pairs explaining the dropped rows
    """
    dataset: MutationDataset
    dropped: int = 0
    issues: List[Tuple[int, ValidationIssue]] = field(default_factory=list)

    @property
    def provenance(self) -> Provenance:
        return self.dataset.provenance
