"""
Write a pair of demo CSVs for the local-file initial load:

- data/mutations_geo.csv       index, latitude, longitude, mutation_value, DNA_mutation_code
- data/mutations_clusters.csv  index, X, Y, cluster

Rows go through the normalizer first, so the files only hold records the
dashboard will accept.

Usage: python scripts/mock_mutations_csv.py [n_records] [seed]
"""
import sys
from pathlib import Path

from mutation_dashboard.core.normalizer import normalize_batch
from mutation_dashboard.core.records import MutationDataset, Provenance, SourceKind
from mutation_dashboard.services.generator import MutationGenerator

n_records = int(sys.argv[1]) if len(sys.argv) > 1 else 200
seed = int(sys.argv[2]) if len(sys.argv) > 2 else 7

rows = MutationGenerator(seed=seed, n_clusters=5).generate_rows(n_records)
dataset = MutationDataset(normalize_batch(rows, SourceKind.GENERATED).records, Provenance.FILES)
frame = dataset.to_frame()

geo = frame[["index", "latitude", "longitude", "mutation_value", "DNA_mutation_code"]]
clusters = frame[["index", "x", "y", "cluster"]].rename(columns={"x": "X", "y": "Y"})

out = Path("data")
out.mkdir(exist_ok=True)
geo.to_csv(out / "mutations_geo.csv", index=False, float_format="%.6f")
clusters.to_csv(out / "mutations_clusters.csv", index=False, float_format="%.6f")
print("wrote", out / "mutations_geo.csv", out / "mutations_clusters.csv", len(frame))
