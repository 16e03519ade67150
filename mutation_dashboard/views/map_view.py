from __future__ import annotations

from typing import List

import plotly.graph_objs as go

from mutation_dashboard.core.base_view import BaseView, UpdateOptions
from mutation_dashboard.core.records import MutationDataset, MutationRecord

SELECTED_SIZE = 16
POINT_SIZE = 8


def hover_text(rec: MutationRecord) -> str:
    code = rec.extra.get("DNA_mutation_code")
    lines = [f"Index: {rec.index}"]
    if code:
        lines.append(f"Mutation: {code}")
    lines.append(f"Value: {rec.mutation_value:.3f}")
    lines.append(f"Lat/Lon: {rec.latitude:.2f}, {rec.longitude:.2f}")
    return "<br>".join(lines)


class MapView(BaseView):
    """
    Geographic view of all records

    - lat/lon from each record
    - colour from the shared colour scale
    - selected record drawn larger with a dark outline, on top
    """

    id = "map"
    label = "Mutation Map"

    def render_figure(self, data: MutationDataset, options: UpdateOptions) -> go.Figure:
        if len(data) == 0:
            return self.empty_figure("No mutation records to display.")

        scale = options.color_scale
        records: List[MutationRecord] = list(data)
        colors = scale.colors(r.mutation_value for r in records)

        fig = go.Figure()
        fig.add_trace(
            go.Scattergeo(
                lat=[r.latitude for r in records],
                lon=[r.longitude for r in records],
                customdata=[r.index for r in records],
                text=[hover_text(r) for r in records],
                hoverinfo="text",
                mode="markers",
                marker=dict(
                    size=POINT_SIZE,
                    color=colors,
                    line=dict(width=0.5, color="#ffffff"),
                    opacity=0.85,
                ),
                name="mutations",
                showlegend=False,
            )
        )

        # Invisible trace carrying the colour bar
        lo, hi = scale.domain
        fig.add_trace(
            go.Scattergeo(
                lat=[None],
                lon=[None],
                mode="markers",
                marker=dict(
                    colorscale=scale.plotly_scale,
                    cmin=lo,
                    cmax=hi,
                    color=[lo],
                    showscale=True,
                    colorbar=dict(title="Mutation value", tickvals=scale.colorbar_ticks()),
                ),
                hoverinfo="skip",
                showlegend=False,
            )
        )

        selected = data.get(options.selected_index)
        if selected is not None:
            fig.add_trace(
                go.Scattergeo(
                    lat=[selected.latitude],
                    lon=[selected.longitude],
                    customdata=[selected.index],
                    text=[hover_text(selected)],
                    hoverinfo="text",
                    mode="markers",
                    marker=dict(
                        size=SELECTED_SIZE,
                        color=scale(selected.mutation_value),
                        line=dict(width=2.5, color="#212529"),
                    ),
                    name="selected",
                    showlegend=False,
                )
            )

        fig.update_geos(
            showcountries=True,
            showland=True,
            landcolor="#f2f2f2",
            countrycolor="#bbbbbb",
            fitbounds="locations",
            projection_type="natural earth",
        )
        fig.update_layout(
            title=self.label,
            margin=dict(l=10, r=10, t=40, b=10),
            uirevision=self.container_id,
            clickmode="event",
        )
        return fig
