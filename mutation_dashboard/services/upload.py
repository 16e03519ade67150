from __future__ import annotations

import base64
import binascii
import csv
import io
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

import pandas as pd

from mutation_dashboard.core.exceptions import IngestionError, IngestionErrorKind
from mutation_dashboard.core.normalizer import missing_required

logger = logging.getLogger(__name__)

DELIMITERS = ",;\t|"
SNIFF_BYTES = 4096


@dataclass
class ParsedTable:
    """
    Rows of an uploaded delimited file, all values as strings.

    - malformed: lines the parser could not split into the header's columns
    """
    columns: List[str]
    rows: List[Dict[str, str]] = field(default_factory=list)
    malformed: int = 0


def decode_contents(contents: Union[str, bytes], max_bytes: Optional[int] = None) -> str:
    """
    Turn an upload payload into text.

    Accepts plain text, raw bytes, or a Dash dcc.Upload data URL
    ("data:<mime>;base64,<payload>").

    Raises:
        IngestionError(PARSE): corrupted base64, undecodable bytes, or too large
    """
    if isinstance(contents, str) and contents.startswith("data:"):
        try:
            _content_type, content_string = contents.split(",", 1)
            contents = base64.b64decode(content_string, validate=True)
        except (ValueError, binascii.Error) as e:
            raise IngestionError(IngestionErrorKind.PARSE, "The uploaded file appears to be corrupted") from e

    if isinstance(contents, bytes):
        if max_bytes is not None and len(contents) > max_bytes:
            raise IngestionError(
                IngestionErrorKind.PARSE,
                f"File exceeds the {max_bytes:,} byte upload limit",
            )
        try:
            return contents.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise IngestionError(IngestionErrorKind.PARSE, "File is not UTF-8 encoded text") from e

    if max_bytes is not None and len(contents.encode("utf-8")) > max_bytes:
        raise IngestionError(
            IngestionErrorKind.PARSE,
            f"File exceeds the {max_bytes:,} byte upload limit",
        )
    return contents.lstrip("\ufeff")


def sniff_delimiter(text: str) -> str:
    header = text.splitlines()[0] if text else ""
    try:
        return csv.Sniffer().sniff(text[:SNIFF_BYTES], delimiters=DELIMITERS).delimiter
    except csv.Error:
        # Single-column or irregular files: pick the most frequent candidate in the header
        counts = {d: header.count(d) for d in DELIMITERS}
        best = max(counts, key=counts.get)
        return best if counts[best] else ","


def parse_table(text: str) -> ParsedTable:
    """
    Parse delimited text with a header row.

    Raises:
        IngestionError(PARSE): no header, or header missing required columns
    """
    if not text.strip():
        raise IngestionError(IngestionErrorKind.PARSE, "File is empty")

    bad_lines: List[List[str]] = []

    def _skip_bad_line(line: List[str]) -> None:
        bad_lines.append(line)
        return None

    try:
        df = pd.read_csv(
            io.StringIO(text),
            sep=sniff_delimiter(text),
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_skip_bad_line,
        )
    except pd.errors.EmptyDataError as e:
        raise IngestionError(IngestionErrorKind.PARSE, "File has no header row") from e
    except (pd.errors.ParserError, csv.Error) as e:
        raise IngestionError(IngestionErrorKind.PARSE, f"Could not parse file: {e}") from e

    columns = [str(c).strip() for c in df.columns]
    df.columns = columns

    missing = missing_required(columns)
    if missing:
        raise IngestionError(
            IngestionErrorKind.PARSE,
            f"Header is missing required column(s): {', '.join(missing)}",
        )

    # Short lines are padded with NaN; treat those cells as missing
    df = df.astype(object).where(pd.notna(df), None)
    rows = df.to_dict(orient="records")
    if bad_lines:
        logger.info("Skipped malformed lines in upload", extra={"malformed": len(bad_lines)})
    return ParsedTable(columns=columns, rows=rows, malformed=len(bad_lines))
