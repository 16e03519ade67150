from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import numpy as np

logger = logging.getLogger(__name__)

# Geographic window of the reference data (South-East Asia)
LAT_RANGE = (-15.0, 25.0)
LON_RANGE = (80.0, 130.0)

# Clustering-space layout
CENTRE_RANGE = (-8.0, 8.0)
SPREAD_RANGE = (0.5, 1.4)

BASES = ("A", "T", "G", "C")
MAX_POSITION = 5000


class MutationGenerator:
    """
    Produces synthetic raw mutation rows.

    X/Y are drawn as loose Gaussian blobs around `n_clusters` random centres
    so the scatter plot shows groupings; cluster sizes are uneven. Rows are
    raw dicts and go through the normalizer like any other source.
    """

    def __init__(self, seed: Optional[int] = None, n_clusters: int = 4):
        if n_clusters < 1:
            raise ValueError("n_clusters must be >= 1")
        self.n_clusters = n_clusters
        self._rng = np.random.default_rng(seed)

    def mutation_code(self) -> str:
        pos = int(self._rng.integers(0, MAX_POSITION))
        ref, alt = self._rng.choice(BASES, size=2)
        return f"c.{pos}{ref}>{alt}"

    def generate_rows(self, count: int, start_index: int = 0) -> List[Dict[str, Any]]:
        """
        :param count: number of rows to produce
        :param start_index: first index; rows are numbered consecutively from it
        :return: list of raw row dicts
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        if count == 0:
            return []

        rng = self._rng
        centres = rng.uniform(*CENTRE_RANGE, size=(self.n_clusters, 2))
        spreads = rng.uniform(*SPREAD_RANGE, size=self.n_clusters)
        weights = rng.dirichlet(np.full(self.n_clusters, 2.0))
        assignment = rng.choice(self.n_clusters, size=count, p=weights)

        xy = centres[assignment] + rng.normal(size=(count, 2)) * spreads[assignment, None]
        lat = rng.uniform(*LAT_RANGE, size=count)
        lon = rng.uniform(*LON_RANGE, size=count)
        values = rng.uniform(0.0, 1.0, size=count)

        rows: List[Dict[str, Any]] = []
        for i in range(count):
            rows.append(
                {
                    "index": start_index + i,
                    "latitude": float(lat[i]),
                    "longitude": float(lon[i]),
                    "x": float(xy[i, 0]),
                    "y": float(xy[i, 1]),
                    "mutation_value": float(values[i]),
                    "DNA_mutation_code": self.mutation_code(),
                    "cluster": f"C{int(assignment[i])}",
                }
            )

        logger.debug("Generated synthetic rows", extra={"n_records": count, "start_index": start_index})
        return rows
