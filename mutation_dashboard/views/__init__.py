from .map_view import MapView
from .scatter_view import ScatterView
from .details_panel import DetailsPanel

__all__ = ["MapView", "ScatterView", "DetailsPanel"]
