from __future__ import annotations

import pytest

from mutation_dashboard.core.exceptions import ValidationError
from mutation_dashboard.core.normalizer import (
    coerce_index,
    missing_required,
    normalize,
    normalize_batch,
    resolve_columns,
)
from mutation_dashboard.core.records import SourceKind


def _raw(**overrides):
    row = {
        "index": 7,
        "latitude": 13.75,
        "longitude": 100.5,
        "x": -1.25,
        "y": 2.5,
        "mutation_value": 0.42,
    }
    row.update(overrides)
    return row


def _codes(exc_info):
    return [issue.code for issue in exc_info.value.issues]


def test_normalize_valid_record():
    rec = normalize(_raw(DNA_mutation_code="c.88C>T"), SourceKind.API)

    assert rec.index == 7
    assert rec.latitude == 13.75
    assert rec.longitude == 100.5
    assert rec.x == -1.25
    assert rec.y == 2.5
    assert rec.mutation_value == 0.42
    assert dict(rec.extra) == {"DNA_mutation_code": "c.88C>T"}


def test_normalize_accepts_aliases_case_insensitively():
    raw = {"ID": "3", "Lat": "1.5", "LNG": "103.8", "Dim1": "0.5", "umap_2": "-0.5", "Value": "1"}

    rec = normalize(raw, SourceKind.UPLOAD)

    assert (rec.index, rec.latitude, rec.longitude, rec.x, rec.y, rec.mutation_value) == (
        3, 1.5, 103.8, 0.5, -0.5, 1.0,
    )
    assert dict(rec.extra) == {}


def test_normalize_random_float_alias():
    raw = _raw()
    del raw["mutation_value"]
    raw["random_float"] = 0.9

    assert normalize(raw, SourceKind.API).mutation_value == 0.9


@pytest.mark.parametrize(
    "overrides, code",
    [
        ({"latitude": 91}, "out_of_range"),
        ({"longitude": -180.5}, "out_of_range"),
        ({"mutation_value": 1.01}, "out_of_range"),
        ({"mutation_value": -0.1}, "out_of_range"),
        ({"x": "abc"}, "not_numeric"),
        ({"y": True}, "not_numeric"),
        ({"x": float("nan")}, "not_finite"),
        ({"y": "inf"}, "not_finite"),
        ({"latitude": None}, "missing_field"),
        ({"longitude": "  "}, "missing_field"),
    ],
)
def test_normalize_rejects_invalid_fields(overrides, code):
    with pytest.raises(ValidationError) as exc_info:
        normalize(_raw(**overrides), SourceKind.API)
    assert code in _codes(exc_info)


def test_normalize_reports_every_issue():
    with pytest.raises(ValidationError) as exc_info:
        normalize({"index": 1, "latitude": 200}, SourceKind.UPLOAD)

    codes = _codes(exc_info)
    assert codes.count("missing_field") == 4
    assert "out_of_range" in codes


def test_normalize_bounds_are_inclusive():
    rec = normalize(_raw(latitude=-90, longitude=180, mutation_value=0), SourceKind.API)
    assert (rec.latitude, rec.longitude, rec.mutation_value) == (-90.0, 180.0, 0.0)


def test_normalize_uses_fallback_index_when_missing():
    raw = _raw()
    del raw["index"]

    assert normalize(raw, SourceKind.GENERATED, fallback_index=12).index == 12

    with pytest.raises(ValidationError) as exc_info:
        normalize(raw, SourceKind.GENERATED)
    assert _codes(exc_info) == ["missing_index"]


def test_normalize_rejects_non_mapping():
    with pytest.raises(ValidationError) as exc_info:
        normalize(["not", "a", "row"], SourceKind.API)
    assert _codes(exc_info) == ["not_a_record"]


@pytest.mark.parametrize(
    "value, expected",
    [(3, 3), ("3", 3), ("3.0", 3), (3.0, 3), (-1, None), (2.5, None), ("x", None), (None, None), (True, None)],
)
def test_coerce_index(value, expected):
    assert coerce_index(value) == expected


def test_resolve_columns_prefers_canonical_names():
    cols = resolve_columns(["value", "Mutation_Value", "lat", "Latitude"])
    assert cols["mutation_value"] == "Mutation_Value"
    assert cols["latitude"] == "Latitude"


def test_missing_required_lists_absent_fields():
    assert missing_required(["index", "lat", "lon", "x"]) == ["y", "mutation_value"]
    assert missing_required(["lat", "lon", "x", "y", "value"]) == []


def test_normalize_batch_assigns_free_indices_around_explicit_ones():
    rows = [_raw(index=0), {k: v for k, v in _raw().items() if k != "index"}, _raw(index=1)]

    result = normalize_batch(rows, SourceKind.UPLOAD)

    assert [r.index for r in result.records] == [0, 2, 1]
    assert result.rejected == 0


def test_normalize_batch_start_index():
    rows = [{k: v for k, v in _raw().items() if k != "index"} for _ in range(3)]

    result = normalize_batch(rows, SourceKind.GENERATED, start_index=1000)

    assert [r.index for r in result.records] == [1000, 1001, 1002]


def test_normalize_batch_drops_invalid_and_duplicate_rows():
    rows = [
        _raw(index=1),
        _raw(index=2, latitude=123),
        _raw(index=1, mutation_value=0.1),
        "garbage",
        _raw(index=3),
    ]

    result = normalize_batch(rows, SourceKind.API)

    assert [r.index for r in result.records] == [1, 3]
    assert result.rejected == 3
    positions = {pos for pos, _ in result.issues}
    assert positions == {1, 2, 3}
    assert any(issue.code == "duplicate_index" for _, issue in result.issues)


def test_normalize_batch_indices_are_distinct():
    rows = [_raw(index=5), {"latitude": 1, "longitude": 1, "x": 0, "y": 0, "value": 0.5}] * 4

    result = normalize_batch(rows, SourceKind.UPLOAD)

    indices = [r.index for r in result.records]
    assert len(indices) == len(set(indices))
