from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import html

from mutation_dashboard.config.model import AppConfig
from mutation_dashboard.ui.ids import IDs


def build_navbar(config: AppConfig) -> dbc.Navbar:
    return dbc.Navbar(
        dbc.Container(
            fluid=True,
            children=[
                html.Div(
                    [
                        html.H2(config.ui_title, className="mb-0"),
                        html.Small(config.subtitle, className="text-muted", id="navbar-subtitle"),
                    ],
                    className="d-flex flex-column justify-content-center",
                ),
                html.Div(
                    id=IDs.Control.RECORD_COUNTER,
                    className="ms-auto text-muted small md-counter",
                ),
            ],
        ),
        dark=False,
        className="shadow-sm md-navbar",
    )
