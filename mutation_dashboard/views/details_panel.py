from __future__ import annotations

from typing import Any, List, Optional

import dash_bootstrap_components as dbc
from dash import html

from mutation_dashboard.core.color_scale import ColorScale
from mutation_dashboard.core.records import MutationRecord


class DetailsPanel:
    """
    Details of the selected record.

    Pure rendering: no callback back into the core. The swatch colour comes
    from the same ColorScale the graphs use.
    """

    id = "details"
    label = "Mutation Details"

    def __init__(self) -> None:
        self._content: Any = self.render("", None, ColorScale())

    @property
    def content(self) -> Any:
        return self._content

    def update(self, container_id: str, record: Optional[MutationRecord], color_scale: ColorScale) -> Any:
        self._content = self.render(container_id, record, color_scale)
        return self._content

    def show_error(self, message: str) -> Any:
        self._content = dbc.Alert(message, color="danger", className="mb-0 small")
        return self._content

    @staticmethod
    def render(container_id: str, record: Optional[MutationRecord], color_scale: ColorScale) -> html.Div:
        if record is None:
            return html.Div(
                html.Em("Click a point on the map or the scatter plot to see its details."),
                className="text-muted small",
                **({"id": f"{container_id}-content"} if container_id else {}),
            )

        color = color_scale(record.mutation_value)
        rows: List[Any] = [
            _row("Index", str(record.index)),
            _row("Latitude", f"{record.latitude:.4f}"),
            _row("Longitude", f"{record.longitude:.4f}"),
            _row("Cluster X", f"{record.x:.4f}"),
            _row("Cluster Y", f"{record.y:.4f}"),
            _row(
                "Mutation value",
                html.Span(
                    [
                        html.Span(
                            className="md-swatch me-2",
                            style={
                                "display": "inline-block",
                                "width": "12px",
                                "height": "12px",
                                "borderRadius": "50%",
                                "backgroundColor": color,
                            },
                        ),
                        f"{record.mutation_value:.4f}",
                    ]
                ),
            ),
        ]
        for key, value in record.extra.items():
            rows.append(_row(str(key), "" if value is None else str(value)))

        return html.Div(
            [
                html.H6(f"Record {record.index}", className="mb-2"),
                html.Table(html.Tbody(rows), className="table table-sm mb-0 small"),
            ],
            **({"id": f"{container_id}-content"} if container_id else {}),
            **{"data-color": color},
        )


def _row(label: str, value: Any) -> html.Tr:
    return html.Tr([html.Th(label, className="fw-semibold"), html.Td(value)])
