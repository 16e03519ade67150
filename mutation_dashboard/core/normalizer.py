from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from mutation_dashboard.core.exceptions import ValidationError, ValidationIssue
from mutation_dashboard.core.records import MutationRecord, SourceKind

logger = logging.getLogger(__name__)

# Canonical field -> accepted spellings (compared lower-cased, stripped)
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "index": ("index", "id"),
    "latitude": ("latitude", "lat"),
    "longitude": ("longitude", "lon", "lng", "long"),
    "x": ("x", "dim1", "umap_1"),
    "y": ("y", "dim2", "umap_2"),
    "mutation_value": ("mutation_value", "mutationvalue", "value", "random_float"),
}

REQUIRED_NUMERIC = ("latitude", "longitude", "x", "y", "mutation_value")

FIELD_RANGES: Dict[str, Tuple[Optional[float], Optional[float]]] = {
    "latitude": (-90.0, 90.0),
    "longitude": (-180.0, 180.0),
    "x": (None, None),
    "y": (None, None),
    "mutation_value": (0.0, 1.0),
}


@dataclass
class NormalizationResult:
    """
    Outcome of normalizing a batch.

    - records: accepted records, in input order
    - rejected: number of rows that failed validation
    - issues: (row position, issue) pairs for the rejected rows
    """
    records: List[MutationRecord] = field(default_factory=list)
    rejected: int = 0
    issues: List[Tuple[int, ValidationIssue]] = field(default_factory=list)


def resolve_columns(keys: Iterable[Any]) -> Dict[str, str]:
    """
    Map canonical field names to the actual keys present in a row/header.

    Matching is case-insensitive. The first key matching an alias wins,
    earlier aliases taking priority over later ones.
    """
    lowered: Dict[str, str] = {}
    for key in keys:
        norm = str(key).strip().lower()
        lowered.setdefault(norm, key)

    resolved: Dict[str, str] = {}
    for canonical, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if alias in lowered:
                resolved[canonical] = lowered[alias]
                break
    return resolved


def missing_required(keys: Iterable[Any]) -> List[str]:
    """Required fields that no column in `keys` maps to."""
    resolved = resolve_columns(keys)
    return [f for f in REQUIRED_NUMERIC if f not in resolved]


def _coerce_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return float(text)
        except ValueError:
            return None
    # numpy scalars and friends
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def coerce_index(value: Any) -> Optional[int]:
    """
    Return `value` as a non-negative int, or None when it is not one.
    Integral floats ("3", "3.0", 3.0) are accepted.
    """
    num = _coerce_float(value)
    if num is None or not math.isfinite(num) or num < 0 or not num.is_integer():
        return None
    return int(num)


def _validate_field(name: str, raw: Any) -> Tuple[Optional[float], Optional[ValidationIssue]]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None, ValidationIssue("missing_field", f"'{name}' is missing")

    num = _coerce_float(raw)
    if num is None:
        return None, ValidationIssue("not_numeric", f"'{name}' is not numeric: {raw!r}")
    if not math.isfinite(num):
        return None, ValidationIssue("not_finite", f"'{name}' is not finite: {raw!r}")

    lo, hi = FIELD_RANGES[name]
    if (lo is not None and num < lo) or (hi is not None and num > hi):
        return None, ValidationIssue(
            "out_of_range", f"'{name}'={num} outside [{lo}, {hi}]"
        )
    return num, None


def normalize(
    raw: Mapping[str, Any],
    source_kind: SourceKind,
    *,
    fallback_index: Optional[int] = None,
) -> MutationRecord:
    """
    Convert one raw row into a MutationRecord.

    :param raw: a mapping from API JSON, a CSV row (all strings) or the generator
    :param source_kind: where the row came from (kept for diagnostics)
    :param fallback_index: index to assign when the row carries no usable one
    :return: the normalized record

    Raises:
        ValidationError: listing every problem found in the row
    """
    if not isinstance(raw, Mapping):
        raise ValidationError(
            [ValidationIssue("not_a_record", f"Expected a mapping, got {type(raw).__name__}")]
        )

    columns = resolve_columns(raw.keys())
    issues: List[ValidationIssue] = []
    values: Dict[str, float] = {}

    for name in REQUIRED_NUMERIC:
        key = columns.get(name)
        num, issue = _validate_field(name, raw.get(key) if key is not None else None)
        if issue is not None:
            issues.append(issue)
        else:
            values[name] = num

    index: Optional[int] = None
    if "index" in columns:
        index = coerce_index(raw[columns["index"]])
    if index is None:
        index = fallback_index
    if index is None:
        issues.append(ValidationIssue("missing_index", "no usable 'index' and none assigned"))

    if issues:
        raise ValidationError(issues)

    used_keys = set(columns.values())
    extra = {k: v for k, v in raw.items() if k not in used_keys}

    return MutationRecord(
        index=index,
        latitude=values["latitude"],
        longitude=values["longitude"],
        x=values["x"],
        y=values["y"],
        mutation_value=values["mutation_value"],
        extra=extra,
    )


def normalize_batch(
    rows: Sequence[Mapping[str, Any]],
    source_kind: SourceKind,
    *,
    start_index: int = 0,
) -> NormalizationResult:
    """
    Normalize a batch, dropping (and counting) rows that fail validation.

    Indices present in a row are passed through. Rows without a usable index
    get the next integer >= start_index not already taken by any row in the
    batch. A row repeating an index already accepted is rejected.
    """
    explicit: Set[int] = set()
    for row in rows:
        if isinstance(row, Mapping):
            key = resolve_columns(row.keys()).get("index")
            if key is not None:
                idx = coerce_index(row[key])
                if idx is not None:
                    explicit.add(idx)

    result = NormalizationResult()
    taken: Set[int] = set()
    next_free = start_index

    for pos, row in enumerate(rows):
        while next_free in explicit or next_free in taken:
            next_free += 1

        try:
            rec = normalize(row, source_kind, fallback_index=next_free)
        except ValidationError as e:
            result.rejected += 1
            result.issues.extend((pos, issue) for issue in e.issues)
            continue

        if rec.index in taken:
            result.rejected += 1
            result.issues.append(
                (pos, ValidationIssue("duplicate_index", f"index {rec.index} already used in this batch"))
            )
            continue

        taken.add(rec.index)
        result.records.append(rec)

    if result.rejected:
        logger.info(
            "Dropped invalid records",
            extra={
                "source": source_kind.value,
                "n_records": len(result.records),
                "dropped": result.rejected,
            },
        )
    return result
