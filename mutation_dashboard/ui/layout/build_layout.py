from __future__ import annotations

from typing import TYPE_CHECKING

import dash_bootstrap_components as dbc
from dash import dcc, html

from mutation_dashboard.ui.ids import IDs
from mutation_dashboard.ui.layout.build_controls_panel import build_controls_panel
from mutation_dashboard.ui.layout.build_details_panel import build_details_panel
from mutation_dashboard.ui.layout.build_navbar import build_navbar
from mutation_dashboard.ui.layout.build_plot_panel import build_plot_panel

if TYPE_CHECKING:
    from mutation_dashboard.ui.context import AppContext


def build_layout(ctx: AppContext) -> dbc.Container:
    """
    Called on every page load: each load gets a fresh session id and
    therefore its own controller.
    """
    return dbc.Container(
        fluid=True,
        className="md-root",
        children=[
            build_navbar(ctx.config),
            dcc.Store(
                id=IDs.Store.SESSION_ID,
                data=ctx.sessions.new_session_id(),
                storage_type="memory",
            ),
            html.Div(id=IDs.Control.STATUS_BANNER, className="mt-3"),
            dbc.Row(
                [
                    dbc.Col(
                        [build_controls_panel(ctx.config), build_details_panel()],
                        md=3,
                        className="mt-3",
                    ),
                    dbc.Col(
                        build_plot_panel("Mutation Map", IDs.Control.MAP_GRAPH),
                        md=5,
                        className="mt-3",
                    ),
                    dbc.Col(
                        build_plot_panel("Clustering View", IDs.Control.SCATTER_GRAPH),
                        md=4,
                        className="mt-3",
                    ),
                ],
                className="gx-3",
            ),
        ],
    )
