from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from mutation_dashboard.core.color_scale import DEFAULT_COLOR_SCALE

DEFAULT_API_URL = "https://be.asiapgi.dev/obs-f-demo"


@dataclass(frozen=True)
class ApiConfig:
    """Remote endpoint. url=None disables API fetches."""
    url: Optional[str] = DEFAULT_API_URL
    timeout: float = 10.0


@dataclass(frozen=True)
class GeneratorConfig:
    count: int = 50
    seed: Optional[int] = None
    n_clusters: int = 4


@dataclass(frozen=True)
class InitialFilesConfig:
    """Local geo + clustering CSVs used when the API is down. Both or neither."""
    geo: Optional[Path] = None
    scatter: Optional[Path] = None

    @property
    def enabled(self) -> bool:
        return self.geo is not None and self.scatter is not None


@dataclass(frozen=True)
class AppConfig:
    config_root: Path
    ui_title: str = "DNA Mutation Dashboard"
    subtitle: str = "Geographic and clustering views of mutation records"
    api: ApiConfig = field(default_factory=ApiConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    initial_files: InitialFilesConfig = field(default_factory=InitialFilesConfig)
    color_scale: str = DEFAULT_COLOR_SCALE
    max_sessions: int = 64
    max_upload_bytes: Optional[int] = 5_000_000
