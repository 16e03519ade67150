from __future__ import annotations

import asyncio
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Tuple

import dash_bootstrap_components as dbc
import plotly.graph_objs as go
from dash import html

from mutation_dashboard.core.base_view import BaseView
from mutation_dashboard.core.controller import DashboardController, StatusMessage
from mutation_dashboard.services.session_service import SessionManager
from mutation_dashboard.ui.ids import IDs

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardInputs:
    """Values of the dispatch callback's inputs and states for one trigger."""
    upload_contents: Optional[str] = None
    upload_name: Optional[str] = None
    generate_count: Any = None
    append: bool = False
    map_click: Any = None
    scatter_click: Any = None


def _ensure_loaded(controller: DashboardController, session_id: str) -> None:
    if controller.state.is_loaded:
        return
    outcome = asyncio.run(controller.load_initial())
    logger.info(
        "Initial load finished",
        extra={"session_id": session_id, "ok": outcome.ok, "n_records": len(controller.state.current_data)},
    )


@contextmanager
def session_controller(sessions: SessionManager, session_id: str) -> Iterator[DashboardController]:
    """
    Hold the session's lock for one whole callback: initial load, the
    triggered action and reading back the rendered outputs.
    """
    controller, _created = sessions.get_or_create(session_id)
    with controller.lock:
        _ensure_loaded(controller, session_id)
        yield controller


def ensure_controller(sessions: SessionManager, session_id: str) -> DashboardController:
    """
    Look up the session's controller, creating it (and running the initial
    load) on first use or after the session was evicted.
    """
    with session_controller(sessions, session_id) as controller:
        return controller


def coerce_count(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        count = float(value)
    except (TypeError, ValueError):
        return None
    if not count.is_integer():
        return None
    return int(count)


def handle_trigger(controller: DashboardController, triggered_id: Optional[str], inputs: DashboardInputs) -> None:
    """
    Route one UI trigger to the matching controller operation.

    The session store firing (page load) needs no action: session_controller
    has already done the initial load.
    """
    c = IDs.Control
    if triggered_id == c.FETCH_API_BTN:
        asyncio.run(controller.fetch_api(append=inputs.append))
    elif triggered_id == c.UPLOAD:
        if inputs.upload_contents:
            asyncio.run(controller.upload(inputs.upload_contents, inputs.upload_name, append=inputs.append))
    elif triggered_id == c.GENERATE_BTN:
        count = coerce_count(inputs.generate_count)
        if count is None:
            count = controller.provider.fallback_count
        controller.generate(count, append=inputs.append)
    elif triggered_id == c.RESET_BTN:
        controller.reset()
    elif triggered_id == c.CLEAR_SELECTION_BTN:
        controller.select(None)
    elif triggered_id == c.MAP_GRAPH:
        _click(controller.map_view, inputs.map_click)
    elif triggered_id == c.SCATTER_GRAPH:
        _click(controller.scatter_view, inputs.scatter_click)


def _click(view: BaseView, click_data: Any) -> None:
    # The view calls back into the controller, which refreshes everything
    view.handle_click(click_data)


def status_component(status: Optional[StatusMessage]) -> Any:
    if status is None:
        return None
    return dbc.Alert(status.text, color=status.level, className="mb-0 py-2", dismissable=True)


def counter_text(controller: DashboardController) -> str:
    state = controller.state
    parts = [f"{len(state.current_data)} records", f"{state.api_call_count} API calls"]
    if state.selected_index is not None:
        parts.append(f"selected #{state.selected_index}")
    return " · ".join(parts)


def render_outputs(controller: DashboardController) -> Tuple[go.Figure, go.Figure, Any, Any, str]:
    return (
        controller.map_view.figure,
        controller.scatter_view.figure,
        controller.details_panel.content,
        status_component(controller.status),
        counter_text(controller),
    )


def error_outputs(message: str) -> Tuple[go.Figure, go.Figure, Any, Any, str]:
    fig = BaseView.error_figure(message)
    return (
        fig,
        fig,
        html.Em("Details unavailable.", className="text-muted small"),
        dbc.Alert(message, color="danger", className="mb-0 py-2"),
        "",
    )
