from __future__ import annotations

import asyncio
import base64
from pathlib import Path

import httpx
import pytest

from mutation_dashboard.core.exceptions import IngestionError, IngestionErrorKind
from mutation_dashboard.core.records import MOCK_INDEX_LIMIT, MutationDataset, MutationRecord, Provenance
from mutation_dashboard.services.api_client import MutationApiClient
from mutation_dashboard.services.data_provider import DataProvider, InitialFiles
from mutation_dashboard.services.generator import MutationGenerator

ROWS = [
    {"index": 0, "latitude": 1.0, "longitude": 100.0, "x": 0.5, "y": -0.5, "mutation_value": 0.1},
    {"index": 1, "latitude": 2.0, "longitude": 101.0, "x": 1.5, "y": -1.5, "mutation_value": 0.7},
]


def _provider(handler=None, **kwargs) -> DataProvider:
    client = None
    if handler is not None:
        client = MutationApiClient("http://api.test", transport=httpx.MockTransport(handler))
    kwargs.setdefault("fallback_count", 25)
    return DataProvider(client, MutationGenerator(seed=9), **kwargs)


def _down(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("unreachable", request=request)


def _write_files(tmp_path: Path) -> InitialFiles:
    geo = tmp_path / "geo.csv"
    scatter = tmp_path / "scatter.csv"
    geo.write_text(
        "index,latitude,longitude,mutation_value,DNA_mutation_code\n"
        "0,13.7,100.5,0.8,c.1A>G\n"
        "1,1.3,103.8,0.2,c.2C>T\n"
        "2,-6.2,106.8,0.5,c.3G>A\n"
    )
    scatter.write_text("index,X,Y\n0,-4.8,3.2\n1,2.1,-5.6\n")
    return InitialFiles(geo=geo, scatter=scatter)


def _rec(index: int) -> MutationRecord:
    return MutationRecord(index=index, latitude=0.0, longitude=0.0, x=0.0, y=0.0, mutation_value=0.5)


# ----------------------------------------------------------------------
# load_initial
# ----------------------------------------------------------------------
def test_load_initial_prefers_api():
    result = asyncio.run(_provider(lambda r: httpx.Response(200, json=ROWS)).load_initial())

    assert result.provenance is Provenance.API
    assert result.dataset.indices == [0, 1]


def test_load_initial_falls_back_to_files(tmp_path):
    provider = _provider(_down, initial_files=_write_files(tmp_path))

    result = asyncio.run(provider.load_initial())

    assert result.provenance is Provenance.FILES
    # Row 2 has no clustering coordinates
    assert result.dataset.indices == [0, 1]
    assert result.dropped == 1
    rec = result.dataset.get(0)
    assert (rec.x, rec.y) == (-4.8, 3.2)
    assert rec.extra["DNA_mutation_code"] == "c.1A>G"


def test_load_initial_falls_back_to_mock_data(tmp_path):
    missing = InitialFiles(geo=tmp_path / "nope.csv", scatter=tmp_path / "nope2.csv")
    provider = _provider(_down, initial_files=missing)

    result = asyncio.run(provider.load_initial())

    assert result.dataset.is_fallback
    assert len(result.dataset) == 25
    assert all(0 <= i < MOCK_INDEX_LIMIT for i in result.dataset.indices)


def test_load_initial_without_api_client():
    result = asyncio.run(_provider(None).load_initial())
    assert result.provenance is Provenance.FALLBACK


def test_fallback_count_must_fit_mock_range():
    with pytest.raises(ValueError):
        _provider(None, fallback_count=MOCK_INDEX_LIMIT + 1)
    with pytest.raises(ValueError):
        _provider(None, fallback_count=0)


# ----------------------------------------------------------------------
# fetch_from_api
# ----------------------------------------------------------------------
def test_fetch_drops_invalid_rows():
    rows = ROWS + [{"index": 5, "latitude": 95, "longitude": 0, "x": 0, "y": 0, "mutation_value": 0.1}]

    result = asyncio.run(_provider(lambda r: httpx.Response(200, json={"data": rows})).fetch_from_api())

    assert result.dataset.indices == [0, 1]
    assert result.dropped == 1
    assert result.issues[0][0] == 2


def test_fetch_with_no_valid_rows_is_empty():
    provider = _provider(lambda r: httpx.Response(200, json=[{"index": 1}]))

    with pytest.raises(IngestionError) as exc_info:
        asyncio.run(provider.fetch_from_api())
    assert exc_info.value.kind is IngestionErrorKind.EMPTY


def test_fetch_without_client_is_network_error():
    with pytest.raises(IngestionError) as exc_info:
        asyncio.run(_provider(None).fetch_from_api())
    assert exc_info.value.kind is IngestionErrorKind.NETWORK


# ----------------------------------------------------------------------
# parse_upload
# ----------------------------------------------------------------------
def test_parse_upload_data_url():
    text = "index;lat;lon;x;y;value\n3;1.0;100.0;0;0;0.4\n4;2.0;101.0;1;1;1.4\n5;3.0;102.0;2;2;0.9\n"
    contents = "data:text/csv;base64," + base64.b64encode(text.encode()).decode()

    result = asyncio.run(_provider(None).parse_upload(contents, "sample.csv"))

    assert result.provenance is Provenance.UPLOAD
    assert result.dataset.indices == [3, 5]
    assert result.dropped == 1


def test_parse_upload_without_index_column_assigns_indices():
    text = "lat,lon,x,y,value\n1,100,0,0,0.1\n2,101,1,1,0.2\n"

    result = asyncio.run(_provider(None).parse_upload(text))

    assert result.dataset.indices == [0, 1]


def test_parse_upload_missing_column_is_parse_error():
    with pytest.raises(IngestionError) as exc_info:
        asyncio.run(_provider(None).parse_upload("index,lat,lon\n1,2,3\n"))
    assert exc_info.value.kind is IngestionErrorKind.PARSE


def test_parse_upload_all_rows_invalid_is_empty():
    with pytest.raises(IngestionError) as exc_info:
        asyncio.run(_provider(None).parse_upload("lat,lon,x,y,value\n100,0,0,0,0.5\n"))
    assert exc_info.value.kind is IngestionErrorKind.EMPTY


def test_parse_upload_size_limit():
    provider = _provider(None, max_upload_bytes=16)
    with pytest.raises(IngestionError):
        asyncio.run(provider.parse_upload("lat,lon,x,y,value\n1,100,0,0,0.1\n"))


# ----------------------------------------------------------------------
# generate_random
# ----------------------------------------------------------------------
def test_generate_random_indices_start_above_mock_range():
    result = _provider(None).generate_random(40)

    indices = result.dataset.indices
    assert result.provenance is Provenance.GENERATED
    assert len(indices) == 40 == len(set(indices))
    assert min(indices) == MOCK_INDEX_LIMIT


def test_generate_random_bad_counts():
    provider = _provider(None)
    with pytest.raises(IngestionError) as exc_info:
        provider.generate_random(0)
    assert exc_info.value.kind is IngestionErrorKind.EMPTY
    with pytest.raises(ValueError):
        provider.generate_random(-1)


# ----------------------------------------------------------------------
# load_files / combine
# ----------------------------------------------------------------------
def test_load_files_requires_index_and_coordinates(tmp_path):
    geo = tmp_path / "geo.csv"
    scatter = tmp_path / "scatter.csv"
    geo.write_text("index,lat,lon,value\n0,1,100,0.5\n")
    scatter.write_text("index,X\n0,1\n")

    with pytest.raises(IngestionError) as exc_info:
        _provider(None).load_files(geo, scatter)
    assert exc_info.value.kind is IngestionErrorKind.PARSE


def test_combine_renumbers_colliding_indices():
    current = MutationDataset([_rec(0), _rec(1)], Provenance.API)
    incoming = MutationDataset([_rec(1), _rec(5)], Provenance.UPLOAD)

    combined = DataProvider.combine(current, incoming)

    assert combined.provenance is Provenance.COMBINED
    assert combined.indices == [0, 1, 6, 5]


def test_combine_with_empty_current():
    incoming = MutationDataset([_rec(3)], Provenance.UPLOAD)
    assert DataProvider.combine(MutationDataset.empty(), incoming).indices == [3]
