from __future__ import annotations
from typing import Any, Dict, Type

from .base_view import BaseView


class ViewRegistry:
    """
    Registry for graph view classes so each session can build its own views

    Purpose:
    - Decouples the session/UI layer from hardcoded view implementations by exposing {@link create(view_id, container_id)}
    - Lets tests swap in recording doubles by registering a different class under the same id

    Design Notes:
    - Stores the subclasses of {@link BaseView}, not instances; every session gets fresh
      instances because views hold that session's click callback
    - Enforces variants:
        * only {@link BaseView} subclasses can be registered
        * each view 'id' is unique across the registry
    """

    def __init__(self):
        self._views: Dict[str, Type[BaseView]] = {}

    def register(self, view_cls: Type[BaseView]) -> None:
        """
        Register a {@link BaseView} with the registry

        :param view_cls: the subclass of {@link BaseView}

        Raises:
            TypeError: if view_cls is not a subclass of {@link BaseView}
            ValueError: if a view with same 'id' already exists
        """

        if not isinstance(view_cls, type) or not issubclass(view_cls, BaseView):
            raise TypeError(f"View '{getattr(view_cls, 'id', view_cls)}' must be a subclass of BaseView")

        if view_cls.id in self._views:
            raise ValueError(f"View '{view_cls.id}' already registered")

        self._views[view_cls.id] = view_cls

    def create(self, view_id: str, container_id: str, **options: Any) -> BaseView:
        """
        Instantiate a view through its `create` factory.
        :param view_id: the id of the view
        :param container_id: the Dash component id the view renders into
        :param options: keyword options forwarded to the view's `create`
        :return: the instantiated view

        Raises:
            KeyError: if no view with the given id exists in the registry
        """
        try:
            cls = self._views[view_id]
        except KeyError:
            raise KeyError(f"View '{view_id}' not found")
        return cls.create(container_id, **options)
