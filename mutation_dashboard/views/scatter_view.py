from __future__ import annotations

from typing import List

import plotly.graph_objs as go

from mutation_dashboard.core.base_view import BaseView, UpdateOptions
from mutation_dashboard.core.color_scale import ColorScale
from mutation_dashboard.core.records import MutationDataset, MutationRecord
from mutation_dashboard.views.map_view import POINT_SIZE, SELECTED_SIZE, hover_text


class ScatterView(BaseView):
    """
    Clustering-space scatter plot

    - X/Y from each record's clustering coordinates
    - colour from the shared colour scale
    - selected record drawn larger with a dark outline, on top
    """

    id = "scatter"
    label = "Clustering View"

    def __init__(
        self,
        container_id: str,
        color_scale: ColorScale,
        x_label: str = "Dimension 1",
        y_label: str = "Dimension 2",
    ):
        super().__init__(container_id, color_scale)
        self.x_label = x_label
        self.y_label = y_label

    def render_figure(self, data: MutationDataset, options: UpdateOptions) -> go.Figure:
        if len(data) == 0:
            return self.empty_figure("No mutation records to display.")

        scale = options.color_scale
        records: List[MutationRecord] = list(data)

        fig = go.Figure()
        fig.add_trace(
            go.Scattergl(
                x=[r.x for r in records],
                y=[r.y for r in records],
                customdata=[r.index for r in records],
                text=[hover_text(r) for r in records],
                hoverinfo="text",
                mode="markers",
                marker=dict(
                    size=POINT_SIZE,
                    color=scale.colors(r.mutation_value for r in records),
                    line=dict(width=0.5, color="#ffffff"),
                    opacity=0.85,
                ),
                name="mutations",
                showlegend=False,
            )
        )

        selected = data.get(options.selected_index)
        if selected is not None:
            fig.add_trace(
                go.Scattergl(
                    x=[selected.x],
                    y=[selected.y],
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

        fig.update_layout(
            title=self.label,
            xaxis_title=self.x_label,
            yaxis_title=self.y_label,
            margin=dict(l=40, r=40, t=40, b=40),
            uirevision=self.container_id,
            clickmode="event",
        )
        return fig
