from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from plotly.colors import get_colorscale, sample_colorscale
from plotly.exceptions import PlotlyError

DEFAULT_COLOR_SCALE = "Viridis"
DEFAULT_DOMAIN: Tuple[float, float] = (0.0, 1.0)


@dataclass(frozen=True)
class ColorScale:
    """
    Continuous mapping from mutation_value to a colour string.

    Shared by the map, the scatter plot and the details panel so that a
    record is drawn with exactly the same colour everywhere.
    """
    name: str = DEFAULT_COLOR_SCALE
    domain: Tuple[float, float] = DEFAULT_DOMAIN

    def __post_init__(self) -> None:
        try:
            get_colorscale(self.name)
        except PlotlyError as e:
            raise ValueError(f"Unknown colour scale {self.name!r}") from e
        lo, hi = self.domain
        if not (math.isfinite(lo) and math.isfinite(hi)) or hi <= lo:
            raise ValueError(f"Invalid colour domain {self.domain!r}")

    @classmethod
    def for_values(cls, values: Iterable[float], name: str = DEFAULT_COLOR_SCALE) -> ColorScale:
        """
        Build a scale whose domain is the extent of `values`, clamped to [0, 1].
        Empty or single-valued inputs fall back to the full [0, 1] domain.
        """
        finite = [v for v in values if v is not None and math.isfinite(v)]
        if not finite:
            return cls(name=name)
        lo = max(0.0, min(finite))
        hi = min(1.0, max(finite))
        if hi <= lo:
            return cls(name=name)
        return cls(name=name, domain=(lo, hi))

    @property
    def plotly_scale(self) -> list:
        """[[position, colour], ...] pairs, as Plotly colour bars expect."""
        return get_colorscale(self.name)

    def position(self, value: float) -> float:
        """Position of `value` on the scale, in [0, 1]."""
        lo, hi = self.domain
        t = (value - lo) / (hi - lo)
        return min(1.0, max(0.0, t))

    def __call__(self, value: float) -> str:
        return sample_colorscale(get_colorscale(self.name), [self.position(value)])[0]

    def colors(self, values: Iterable[float]) -> List[str]:
        positions = [self.position(v) for v in values]
        if not positions:
            return []
        return sample_colorscale(get_colorscale(self.name), positions)

    def colorbar_ticks(self, n: int = 5) -> List[float]:
        lo, hi = self.domain
        if n < 2:
            return [lo]
        step = (hi - lo) / (n - 1)
        return [round(lo + i * step, 4) for i in range(n)]
