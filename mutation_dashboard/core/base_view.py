from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Optional

import plotly.graph_objs as go

from mutation_dashboard.core.color_scale import ColorScale
from mutation_dashboard.core.records import MutationDataset, MutationRecord

logger = logging.getLogger(__name__)

PointClickHandler = Callable[[MutationRecord], None]


@dataclass(frozen=True)
class UpdateOptions:
    """
    Snapshot pushed to every view on refresh.

    The same instance is handed to all views of one refresh, so they cannot
    disagree about selection or colours.
    """
    selected_index: Optional[int]
    color_scale: ColorScale
    on_point_click: Optional[PointClickHandler] = None


class BaseView(ABC):
    """
    Abstract base class for the graph views (map and scatter).

    Defines the contract that every view in the app must follow
    - expose an 'id' - used internally
    - expose a 'label' - used for UI/human-readable applications
    - implement 'render_figure' - build the Plotly figure for a dataset + options
    - 'update' is called by the controller on every refresh; it keeps the
      options so that 'handle_click' can call back into the controller
    """

    id: str = None
    label: str = None

    def __init__(self, container_id: str, color_scale: ColorScale):
        self.container_id = container_id
        self.color_scale = color_scale
        self._data: MutationDataset = MutationDataset.empty()
        self._options: Optional[UpdateOptions] = None
        self._figure: go.Figure = self.empty_figure("No data loaded yet.")

    @classmethod
    def create(cls, container_id: str, *, color_scale: ColorScale, **options: Any) -> BaseView:
        return cls(container_id, color_scale, **options)

    @property
    def figure(self) -> go.Figure:
        return self._figure

    @property
    def data(self) -> MutationDataset:
        return self._data

    @property
    def options(self) -> Optional[UpdateOptions]:
        return self._options

    def update(self, data: MutationDataset, options: UpdateOptions) -> go.Figure:
        """
        Render the full dataset and highlight the selected point.
        :param data: the current dataset
        :param options: selection, colour scale and click callback for this refresh
        :return: the Plotly figure now held by the view
        """
        figure = self.render_figure(data, options)
        # Only commit once rendering succeeded
        self._data = data
        self._options = options
        self.color_scale = options.color_scale
        self._figure = figure
        return figure

    @abstractmethod
    def render_figure(self, data: MutationDataset, options: UpdateOptions) -> go.Figure:
        raise NotImplementedError()

    def handle_click(self, click_data: Any) -> Optional[MutationRecord]:
        """
        Translate a Dash `clickData` payload into the injected on_point_click call.

        :return: the clicked record, or None if the payload did not resolve
        """
        index = self.clicked_index(click_data)
        if index is None:
            return None

        record = self._data.get(index)
        if record is None:
            logger.debug("Click on unknown point", extra={"view_id": self.id, "index": index})
            return None

        if self._options is not None and self._options.on_point_click is not None:
            self._options.on_point_click(record)
        return record

    @staticmethod
    def clicked_index(click_data: Any) -> Optional[int]:
        if not isinstance(click_data, dict):
            return None
        points = click_data.get("points") or []
        if not points:
            return None
        custom = points[0].get("customdata")
        if isinstance(custom, (list, tuple)):
            custom = custom[0] if custom else None
        if isinstance(custom, bool) or custom is None:
            return None
        try:
            return int(custom)
        except (TypeError, ValueError):
            return None

    def show_error(self, message: str) -> go.Figure:
        self._figure = self.error_figure(message)
        return self._figure

    # ------------------------------------------------------------------
    # Common helpers for all views
    # ------------------------------------------------------------------
    @staticmethod
    def empty_figure(message: str) -> go.Figure:
        """
        Standardised 'no data' figure used by all views.
        """
        fig = go.Figure()
        fig.add_annotation(
            text=message,
            showarrow=False,
            xref="paper",
            yref="paper",
            x=0.5,
            y=0.5,
        )
        fig.update_xaxes(visible=False)
        fig.update_yaxes(visible=False)
        fig.update_layout(margin=dict(l=40, r=40, t=40, b=40))
        return fig

    @classmethod
    def error_figure(cls, details: str) -> go.Figure:
        return cls.empty_figure(f"Something went wrong while rendering this view.<br>{details}")
