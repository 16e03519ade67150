from __future__ import annotations

import dash_bootstrap_components as dbc

from mutation_dashboard.ui.ids import IDs


def build_details_panel() -> dbc.Card:
    return dbc.Card(
        [
            dbc.CardHeader("Mutation Details", className="fw-semibold"),
            dbc.CardBody(id=IDs.Control.DETAILS_PANEL),
        ],
        className="md-details mt-3",
    )
