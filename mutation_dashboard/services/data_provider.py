from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import pandas as pd

from mutation_dashboard.core.exceptions import IngestionError, IngestionErrorKind
from mutation_dashboard.core.normalizer import coerce_index, normalize_batch, resolve_columns
from mutation_dashboard.core.records import (
    MOCK_INDEX_LIMIT,
    IngestionResult,
    MutationDataset,
    MutationRecord,
    Provenance,
    SourceKind,
)
from mutation_dashboard.services.api_client import MutationApiClient
from mutation_dashboard.services.generator import MutationGenerator
from mutation_dashboard.services.upload import decode_contents, parse_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InitialFiles:
    """Local geo + clustering CSVs joined on 'index'."""
    geo: Path
    scatter: Path


def _read_csv(path: Path) -> pd.DataFrame:
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=False, skipinitialspace=True)
    except OSError as e:
        raise IngestionError(IngestionErrorKind.NETWORK, f"Could not read {path}: {e}") from e
    except pd.errors.EmptyDataError as e:
        raise IngestionError(IngestionErrorKind.PARSE, f"{path} has no header row") from e
    except pd.errors.ParserError as e:
        raise IngestionError(IngestionErrorKind.PARSE, f"Could not parse {path}: {e}") from e
    df.columns = [str(c).strip() for c in df.columns]
    return df


class DataProvider:
    """
    Produces normalized datasets from every ingestion source.

    Each operation returns an IngestionResult or raises IngestionError.
    `load_initial` is the exception: it always returns data, falling back
    to synthetic records flagged with Provenance.FALLBACK.
    """

    def __init__(
        self,
        api_client: Optional[MutationApiClient],
        generator: MutationGenerator,
        *,
        initial_files: Optional[InitialFiles] = None,
        fallback_count: int = 50,
        max_upload_bytes: Optional[int] = None,
    ) -> None:
        if not 0 < fallback_count <= MOCK_INDEX_LIMIT:
            raise ValueError(f"fallback_count must be in 1..{MOCK_INDEX_LIMIT}, got {fallback_count}")
        self.api_client = api_client
        self.generator = generator
        self.initial_files = initial_files
        self.fallback_count = fallback_count
        self.max_upload_bytes = max_upload_bytes

    # ------------------------------------------------------------------
    # Initial load
    # ------------------------------------------------------------------
    async def load_initial(self) -> IngestionResult:
        """
        API first, then the configured local files, then synthetic fallback data.
        """
        try:
            return await self.fetch_from_api()
        except IngestionError as e:
            logger.warning("Initial API load failed", extra={"kind": e.kind.value, "error": e.message})

        if self.initial_files is not None:
            try:
                return await asyncio.to_thread(
                    self.load_files, self.initial_files.geo, self.initial_files.scatter
                )
            except IngestionError as e:
                logger.warning("Initial file load failed", extra={"kind": e.kind.value, "error": e.message})

        logger.warning("Falling back to generated mock data", extra={"n_records": self.fallback_count})
        rows = self.generator.generate_rows(self.fallback_count, start_index=0)
        norm = normalize_batch(rows, SourceKind.GENERATED, start_index=0)
        return IngestionResult(
            dataset=MutationDataset(norm.records, Provenance.FALLBACK),
            dropped=norm.rejected,
            issues=norm.issues,
        )

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------
    async def fetch_from_api(self) -> IngestionResult:
        """
        Raises:
            IngestionError: NETWORK / PARSE from the client, EMPTY if no row survives
        """
        if self.api_client is None:
            raise IngestionError(IngestionErrorKind.NETWORK, "No API endpoint configured")

        rows = await self.api_client.fetch_rows()
        norm = normalize_batch(rows, SourceKind.API)
        if not norm.records:
            raise IngestionError(
                IngestionErrorKind.EMPTY,
                f"API returned no usable records ({len(rows)} rows, {norm.rejected} invalid)",
            )
        return IngestionResult(
            dataset=MutationDataset(norm.records, Provenance.API),
            dropped=norm.rejected,
            issues=norm.issues,
        )

    async def parse_upload(
        self,
        contents: Union[str, bytes],
        filename: Optional[str] = None,
    ) -> IngestionResult:
        """
        Parse an uploaded delimited file off the event loop.

        Raises:
            IngestionError(PARSE): undecodable content or missing required columns
            IngestionError(EMPTY): no row survived normalization
        """
        return await asyncio.to_thread(self._parse_upload, contents, filename)

    def _parse_upload(self, contents: Union[str, bytes], filename: Optional[str]) -> IngestionResult:
        text = decode_contents(contents, self.max_upload_bytes)
        table = parse_table(text)
        norm = normalize_batch(table.rows, SourceKind.UPLOAD)

        dropped = norm.rejected + table.malformed
        if not norm.records:
            raise IngestionError(
                IngestionErrorKind.EMPTY,
                f"No valid rows in {filename or 'upload'} ({dropped} dropped)",
            )

        logger.info(
            "Parsed upload",
            extra={"upload_name": filename, "n_records": len(norm.records), "dropped": dropped},
        )
        return IngestionResult(
            dataset=MutationDataset(norm.records, Provenance.UPLOAD),
            dropped=dropped,
            issues=norm.issues,
        )

    def generate_random(self, count: int) -> IngestionResult:
        """
        `count` synthetic records numbered from MOCK_INDEX_LIMIT upwards.

        Raises:
            ValueError: if count is negative
            IngestionError(EMPTY): if count is zero
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if count == 0:
            raise IngestionError(IngestionErrorKind.EMPTY, "Nothing to generate (count is 0)")

        rows = self.generator.generate_rows(count, start_index=MOCK_INDEX_LIMIT)
        norm = normalize_batch(rows, SourceKind.GENERATED, start_index=MOCK_INDEX_LIMIT)
        return IngestionResult(
            dataset=MutationDataset(norm.records, Provenance.GENERATED),
            dropped=norm.rejected,
            issues=norm.issues,
        )

    def load_files(self, geo_path: Union[str, Path], scatter_path: Union[str, Path]) -> IngestionResult:
        """
        Join a geographic CSV with a clustering CSV on 'index'.

        Geo rows without a clustering match keep no x/y and are dropped by the
        normalizer.
        """
        geo = _read_csv(Path(geo_path))
        scatter = _read_csv(Path(scatter_path))

        geo_cols = resolve_columns(geo.columns)
        scatter_cols = resolve_columns(scatter.columns)
        for name, cols in (("geo", geo_cols), ("scatter", scatter_cols)):
            if "index" not in cols:
                raise IngestionError(IngestionErrorKind.PARSE, f"The {name} file has no 'index' column")
        if "x" not in scatter_cols or "y" not in scatter_cols:
            raise IngestionError(IngestionErrorKind.PARSE, "The scatter file needs X and Y columns")

        # Clustering coordinates come from the scatter file only
        geo = geo.drop(columns=[geo_cols[k] for k in ("x", "y") if k in geo_cols])
        geo["_key"] = geo[geo_cols["index"]].map(coerce_index).astype("Int64")

        coords = pd.DataFrame(
            {
                "_key": scatter[scatter_cols["index"]].map(coerce_index).astype("Int64"),
                "x": scatter[scatter_cols["x"]],
                "y": scatter[scatter_cols["y"]],
            }
        ).dropna(subset=["_key"]).drop_duplicates(subset=["_key"])

        merged = geo.merge(coords, on="_key", how="left").drop(columns=["_key"])
        merged = merged.astype(object).where(pd.notna(merged), None)

        norm = normalize_batch(merged.to_dict(orient="records"), SourceKind.FILES)
        if not norm.records:
            raise IngestionError(IngestionErrorKind.EMPTY, "Local files produced no usable records")

        logger.info(
            "Loaded local files",
            extra={"geo": str(geo_path), "scatter": str(scatter_path), "n_records": len(norm.records)},
        )
        return IngestionResult(
            dataset=MutationDataset(norm.records, Provenance.FILES),
            dropped=norm.rejected,
            issues=norm.issues,
        )

    # ------------------------------------------------------------------
    # Combination
    # ------------------------------------------------------------------
    @staticmethod
    def combine(current: MutationDataset, incoming: MutationDataset) -> MutationDataset:
        """
        New dataset with `incoming` appended after `current`.

        Incoming records whose index is already used are renumbered above the
        highest index in use; the others keep their index.
        """
        seen = set(current.indices)
        taken = seen | set(incoming.indices)
        highest = [m for m in (current.max_index, incoming.max_index) if m is not None]
        next_free = max(highest) + 1 if highest else 0

        combined: List[MutationRecord] = list(current)
        for rec in incoming:
            if rec.index in seen:
                while next_free in taken:
                    next_free += 1
                rec = rec.with_index(next_free)
                taken.add(next_free)
            seen.add(rec.index)
            combined.append(rec)

        return MutationDataset(combined, Provenance.COMBINED)
