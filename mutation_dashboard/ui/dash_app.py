from __future__ import annotations

import logging
import os
from functools import partial
from pathlib import Path
from typing import Optional, Union

import dash_bootstrap_components as dbc
import httpx
from dash import Dash

from mutation_dashboard.config.config_loader import load_app_config
from mutation_dashboard.core.view_registry import ViewRegistry
from mutation_dashboard.services.session_service import SessionManager, build_controller
from mutation_dashboard.ui.callbacks.callbacks_dashboard import register_dashboard_callbacks
from mutation_dashboard.ui.context import AppContext
from mutation_dashboard.ui.ids import IDs
from mutation_dashboard.ui.layout.build_layout import build_layout

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "MUTATION_DASHBOARD_CONFIG"


def _build_view_registry() -> ViewRegistry:
    from mutation_dashboard.views import MapView, ScatterView

    registry = ViewRegistry()
    registry.register(MapView)
    registry.register(ScatterView)
    return registry


def create_dash_app(
    config_root: Optional[Union[Path, str]] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dash:
    """
    Build the Dash app.

    :param config_root: directory holding global.json; defaults to
                        $MUTATION_DASHBOARD_CONFIG, then ./config
    :param transport: optional httpx transport for the API client (tests)
    """
    if config_root is None:
        config_root = os.getenv(CONFIG_DIR_ENV, "config")

    # 1) Load Config
    config = load_app_config(Path(config_root))

    # 2) Views + per-session controllers
    registry = _build_view_registry()
    factory = partial(
        build_controller,
        config,
        registry,
        map_container_id=IDs.Control.MAP_GRAPH,
        scatter_container_id=IDs.Control.SCATTER_GRAPH,
        details_container_id=IDs.Control.DETAILS_PANEL,
        transport=transport,
    )
    sessions = SessionManager(factory, max_sessions=config.max_sessions)

    # 3) App Context
    ctx = AppContext(config=config, registry=registry, sessions=sessions)

    assets_path = Path(__file__).parent / "assets"
    app = Dash(
        __name__,
        external_stylesheets=[dbc.themes.FLATLY],
        assets_folder=str(assets_path),
    )
    app.title = config.ui_title

    # A function, so every page load gets its own session id
    app.layout = partial(build_layout, ctx)

    register_dashboard_callbacks(app, ctx)

    logger.info(
        "Dash app created",
        extra={"api_url": config.api.url, "max_sessions": config.max_sessions},
    )
    return app
