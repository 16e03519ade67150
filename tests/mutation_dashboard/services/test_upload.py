from __future__ import annotations

import base64

import pytest

from mutation_dashboard.core.exceptions import IngestionError, IngestionErrorKind
from mutation_dashboard.services.upload import decode_contents, parse_table, sniff_delimiter

CSV = "index,latitude,longitude,x,y,mutation_value\n1,1.5,103.8,0.1,0.2,0.3\n2,13.7,100.5,-1,2,0.9\n"


def _data_url(text: str, mime: str = "text/csv") -> str:
    return f"data:{mime};base64," + base64.b64encode(text.encode("utf-8")).decode("ascii")


def test_decode_data_url():
    assert decode_contents(_data_url(CSV)) == CSV


def test_decode_strips_byte_order_mark():
    assert decode_contents(("\ufeff" + CSV).encode("utf-8")) == CSV
    assert decode_contents("\ufeff" + CSV) == CSV


def test_decode_rejects_corrupted_base64():
    with pytest.raises(IngestionError) as exc_info:
        decode_contents("data:text/csv;base64,@@@not-base64@@@")
    assert exc_info.value.kind is IngestionErrorKind.PARSE


def test_decode_rejects_non_utf8():
    with pytest.raises(IngestionError):
        decode_contents(b"\xff\xfe\x00bad")


def test_decode_enforces_size_limit():
    with pytest.raises(IngestionError) as exc_info:
        decode_contents(_data_url(CSV), max_bytes=10)
    assert "limit" in exc_info.value.message

    assert decode_contents(CSV, max_bytes=len(CSV)) == CSV


@pytest.mark.parametrize("delimiter", [",", ";", "\t", "|"])
def test_sniff_delimiter(delimiter):
    assert sniff_delimiter(CSV.replace(",", delimiter)) == delimiter


def test_parse_semicolon_file_with_aliases():
    text = "ID;Lat;Lon;Dim1;Dim2;Value;gene\n1;1.5;103.8;0.1;0.2;0.3;TP53\n"

    table = parse_table(text)

    assert table.columns == ["ID", "Lat", "Lon", "Dim1", "Dim2", "Value", "gene"]
    assert table.rows == [
        {"ID": "1", "Lat": "1.5", "Lon": "103.8", "Dim1": "0.1", "Dim2": "0.2", "Value": "0.3", "gene": "TP53"}
    ]
    assert table.malformed == 0


def test_parse_counts_malformed_lines():
    text = CSV + "3,1,1,1,1,0.5,unexpected,extra\n4,2.0,101.0,0,0,0.1\n"

    table = parse_table(text)

    assert [r["index"] for r in table.rows] == ["1", "2", "4"]
    assert table.malformed == 1


def test_parse_short_lines_become_missing_values():
    table = parse_table(CSV + "5,1.0,100.0\n")

    last = table.rows[-1]
    assert last["index"] == "5"
    assert last["x"] is None and last["mutation_value"] is None


@pytest.mark.parametrize(
    "text",
    ["", "   \n", "index,latitude,longitude\n1,2,3\n"],
)
def test_parse_rejects_empty_or_incomplete_header(text):
    with pytest.raises(IngestionError) as exc_info:
        parse_table(text)
    assert exc_info.value.kind is IngestionErrorKind.PARSE
