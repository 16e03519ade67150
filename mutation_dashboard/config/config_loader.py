from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple, Type, Union

from mutation_dashboard.config.model import (
    ApiConfig,
    AppConfig,
    GeneratorConfig,
    InitialFilesConfig,
)
from mutation_dashboard.core.color_scale import ColorScale
from mutation_dashboard.core.exceptions import ConfigError
from mutation_dashboard.core.records import MOCK_INDEX_LIMIT

logger = logging.getLogger(__name__)

GLOBAL_CONFIG_NAME = "global.json"
API_URL_ENV = "MUTATION_DASHBOARD_API_URL"

_MISSING = object()


def _get(
    raw: Mapping[str, Any],
    key: str,
    types: Union[Type, Tuple[Type, ...]],
    default: Any,
    *,
    section: str = "",
    nullable: bool = False,
) -> Any:
    value = raw.get(key, _MISSING)
    if value is _MISSING:
        return default
    if value is None and nullable:
        return None
    # bool is an int subclass; no setting is boolean
    if isinstance(value, bool) or not isinstance(value, types):
        name = f"{section}.{key}" if section else key
        raise ConfigError(f"'{name}' has the wrong type ({type(value).__name__})")
    return value


def _section(raw: Mapping[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{key}' must be an object")
    return value


def _resolve_path(root: Path, value: Optional[str]) -> Optional[Path]:
    if value is None:
        return None
    path = Path(value)
    if not path.is_absolute():
        path = (root / path).resolve()
    return path


def _parse_api(raw: Mapping[str, Any]) -> ApiConfig:
    section = _section(raw, "api")
    url = _get(section, "url", str, ApiConfig.url, section="api", nullable=True)
    timeout = float(_get(section, "timeout", (int, float), ApiConfig.timeout, section="api"))
    if timeout <= 0:
        raise ConfigError("'api.timeout' must be positive")

    env_url = os.getenv(API_URL_ENV)
    if env_url is not None:
        # An empty value disables the API
        url = env_url.strip() or None
        logger.info("API URL overridden from environment", extra={"env": API_URL_ENV})
    return ApiConfig(url=url, timeout=timeout)


def _parse_generator(raw: Mapping[str, Any]) -> GeneratorConfig:
    section = _section(raw, "generator")
    count = _get(section, "count", int, GeneratorConfig.count, section="generator")
    seed = _get(section, "seed", int, None, section="generator", nullable=True)
    n_clusters = _get(section, "n_clusters", int, GeneratorConfig.n_clusters, section="generator")
    if not 0 < count <= MOCK_INDEX_LIMIT:
        raise ConfigError(f"'generator.count' must be in 1..{MOCK_INDEX_LIMIT}")
    if n_clusters < 1:
        raise ConfigError("'generator.n_clusters' must be >= 1")
    return GeneratorConfig(count=count, seed=seed, n_clusters=n_clusters)


def _parse_initial_files(root: Path, raw: Mapping[str, Any]) -> InitialFilesConfig:
    section = _section(raw, "initial_files")
    geo = _get(section, "geo", str, None, section="initial_files", nullable=True)
    scatter = _get(section, "scatter", str, None, section="initial_files", nullable=True)
    if (geo is None) != (scatter is None):
        raise ConfigError("'initial_files' needs both 'geo' and 'scatter', or neither")
    return InitialFilesConfig(geo=_resolve_path(root, geo), scatter=_resolve_path(root, scatter))


def load_app_config(root: Union[Path, str]) -> AppConfig:
    """
    Read <root>/global.json into an AppConfig.

    A missing file yields the defaults; malformed JSON or wrongly typed
    values raise ConfigError.
    """
    root = Path(root)
    logger.info("Loading app config", extra={"config_root": str(root)})

    global_path = root / GLOBAL_CONFIG_NAME
    if global_path.is_file():
        try:
            with global_path.open(encoding="utf-8") as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(f"Invalid JSON in {global_path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"{global_path} must contain a JSON object")
    else:
        logger.warning("No global config found; using defaults", extra={"config_root": str(root)})
        raw = {}

    color_scale = _get(raw, "color_scale", str, AppConfig.color_scale)
    try:
        ColorScale(name=color_scale)
    except ValueError as e:
        raise ConfigError(f"'color_scale': {e}") from e

    max_sessions = _get(raw, "max_sessions", int, AppConfig.max_sessions)
    if max_sessions < 1:
        raise ConfigError("'max_sessions' must be >= 1")

    max_upload_bytes = _get(raw, "max_upload_bytes", int, AppConfig.max_upload_bytes, nullable=True)
    if max_upload_bytes is not None and max_upload_bytes < 1:
        raise ConfigError("'max_upload_bytes' must be positive")

    return AppConfig(
        config_root=root,
        ui_title=_get(raw, "ui_title", str, AppConfig.ui_title),
        subtitle=_get(raw, "subtitle", str, AppConfig.subtitle),
        api=_parse_api(raw),
        generator=_parse_generator(raw),
        initial_files=_parse_initial_files(root, raw),
        color_scale=color_scale,
        max_sessions=max_sessions,
        max_upload_bytes=max_upload_bytes,
    )
