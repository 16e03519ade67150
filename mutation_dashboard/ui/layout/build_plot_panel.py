from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html


def build_plot_panel(title: str, graph_id: str, height: str = "520px") -> dbc.Card:
    return dbc.Card(
        [
            dbc.CardHeader(
                html.Div([html.Strong(title)], className="d-flex align-items-center"),
                className="p-2",
            ),
            dbc.CardBody(
                dcc.Loading(
                    id=f"{graph_id}-loading",
                    type="default",
                    children=dcc.Graph(
                        id=graph_id,
                        style={"height": height},
                        config={"responsive": True, "displaylogo": False},
                    ),
                ),
                className="md-plot-body",
            ),
        ],
        className="md-plotcard h-100",
    )
