from __future__ import annotations

import pytest

from mutation_dashboard.core.color_scale import ColorScale
from mutation_dashboard.core.view_registry import ViewRegistry
from mutation_dashboard.views import DetailsPanel, MapView, ScatterView


def _registry() -> ViewRegistry:
    registry = ViewRegistry()
    registry.register(MapView)
    registry.register(ScatterView)
    return registry


def test_create_builds_fresh_instances():
    registry = _registry()
    scale = ColorScale()

    a = registry.create("map", "map-graph", color_scale=scale)
    b = registry.create("map", "map-graph", color_scale=scale)

    assert isinstance(a, MapView)
    assert a is not b
    assert a.container_id == "map-graph"


def test_create_forwards_view_options():
    view = _registry().create("scatter", "sc", color_scale=ColorScale(), x_label="UMAP 1", y_label="UMAP 2")

    assert isinstance(view, ScatterView)
    assert (view.x_label, view.y_label) == ("UMAP 1", "UMAP 2")


def test_register_rejects_duplicates_and_non_views():
    registry = _registry()

    with pytest.raises(ValueError):
        registry.register(MapView)
    with pytest.raises(TypeError):
        registry.register(DetailsPanel)


def test_unknown_view_id():
    with pytest.raises(KeyError):
        _registry().create("heatmap", "x", color_scale=ColorScale())
