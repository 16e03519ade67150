from __future__ import annotations

import dash_bootstrap_components as dbc
from dash import dcc, html

from mutation_dashboard.config.model import AppConfig
from mutation_dashboard.core.records import MOCK_INDEX_LIMIT
from mutation_dashboard.ui.ids import IDs


def build_controls_panel(config: AppConfig) -> dbc.Card:
    return dbc.Card(
        [
            dbc.CardHeader("Data", className="fw-semibold"),
            dbc.CardBody(
                [
                    dbc.Button(
                        "Fetch API Data",
                        id=IDs.Control.FETCH_API_BTN,
                        color="primary",
                        className="w-100 mb-2",
                        disabled=not config.api.url,
                    ),
                    dcc.Upload(
                        id=IDs.Control.UPLOAD,
                        children=dbc.Button(
                            "Upload CSV",
                            id=IDs.Control.UPLOAD_BTN,
                            color="secondary",
                            className="w-100",
                        ),
                        accept=".csv,.tsv,.txt,text/csv,text/plain",
                        multiple=False,
                        className="mb-2",
                    ),
                    dbc.InputGroup(
                        [
                            dbc.Input(
                                id=IDs.Control.GENERATE_COUNT,
                                type="number",
                                min=1,
                                max=MOCK_INDEX_LIMIT,
                                step=1,
                                value=config.generator.count,
                            ),
                            dbc.Button("Generate Random", id=IDs.Control.GENERATE_BTN, color="secondary"),
                        ],
                        className="mb-2",
                    ),
                    dbc.Switch(
                        id=IDs.Control.APPEND_SWITCH,
                        label="Append instead of replace",
                        value=False,
                        className="mb-3",
                    ),
                    html.Hr(),
                    dbc.Button(
                        "Reset Data",
                        id=IDs.Control.RESET_BTN,
                        color="danger",
                        outline=True,
                        className="w-100 mb-2",
                    ),
                    dbc.Button(
                        "Clear selection",
                        id=IDs.Control.CLEAR_SELECTION_BTN,
                        color="secondary",
                        outline=True,
                        className="w-100",
                    ),
                ]
            ),
        ],
        className="md-sidebar",
    )
