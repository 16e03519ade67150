from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

import dash
from dash import Input, Output, State, exceptions

from mutation_dashboard.ui.callbacks.callbacks_utils import (
    DashboardInputs,
    error_outputs,
    handle_trigger,
    render_outputs,
    session_controller,
)
from mutation_dashboard.ui.ids import IDs

if TYPE_CHECKING:
    from mutation_dashboard.ui.context import AppContext

logger = logging.getLogger(__name__)


def register_dashboard_callbacks(app: dash.Dash, ctx: AppContext) -> None:
    # ---------------------------------------------------------
    # Every user action -> controller -> all views
    # ---------------------------------------------------------
    @app.callback(
        Output(IDs.Control.MAP_GRAPH, "figure"),
        Output(IDs.Control.SCATTER_GRAPH, "figure"),
        Output(IDs.Control.DETAILS_PANEL, "children"),
        Output(IDs.Control.STATUS_BANNER, "children"),
        Output(IDs.Control.RECORD_COUNTER, "children"),
        Input(IDs.Store.SESSION_ID, "data"),
        Input(IDs.Control.FETCH_API_BTN, "n_clicks"),
        Input(IDs.Control.UPLOAD, "contents"),
        Input(IDs.Control.GENERATE_BTN, "n_clicks"),
        Input(IDs.Control.RESET_BTN, "n_clicks"),
        Input(IDs.Control.CLEAR_SELECTION_BTN, "n_clicks"),
        Input(IDs.Control.MAP_GRAPH, "clickData"),
        Input(IDs.Control.SCATTER_GRAPH, "clickData"),
        State(IDs.Control.UPLOAD, "filename"),
        State(IDs.Control.GENERATE_COUNT, "value"),
        State(IDs.Control.APPEND_SWITCH, "value"),
    )
    def dispatch_dashboard_action(
        session_id: Optional[str],
        _fetch_clicks: Optional[int],
        upload_contents: Optional[str],
        _generate_clicks: Optional[int],
        _reset_clicks: Optional[int],
        _clear_clicks: Optional[int],
        map_click: Any,
        scatter_click: Any,
        upload_name: Optional[str],
        generate_count: Any,
        append: Optional[bool],
    ):
        if not session_id:
            raise exceptions.PreventUpdate

        triggered_id = dash.ctx.triggered_id
        inputs = DashboardInputs(
            upload_contents=upload_contents,
            upload_name=upload_name,
            generate_count=generate_count,
            append=bool(append),
            map_click=map_click,
            scatter_click=scatter_click,
        )

        try:
            # One action per session at a time; Dash may run callbacks concurrently
            with session_controller(ctx.sessions, session_id) as controller:
                handle_trigger(controller, triggered_id, inputs)
                return render_outputs(controller)
        except Exception:
            logger.exception(
                "Error in dispatch_dashboard_action",
                extra={"session_id": session_id, "trigger": str(triggered_id)},
            )
            return error_outputs(
                "The app hit an unexpected error. "
                "If this keeps happening, grab the logs and open an issue."
            )
