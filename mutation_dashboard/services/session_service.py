from __future__ import annotations

import logging
import threading
import uuid
from collections import OrderedDict
from typing import Callable, Iterator, Mapping, Optional, Tuple

import httpx

from mutation_dashboard.config.model import AppConfig
from mutation_dashboard.core.color_scale import ColorScale
from mutation_dashboard.core.controller import DashboardController
from mutation_dashboard.core.state import ApplicationState
from mutation_dashboard.core.view_registry import ViewRegistry
from mutation_dashboard.services.api_client import MutationApiClient
from mutation_dashboard.services.data_provider import DataProvider, InitialFiles
from mutation_dashboard.services.generator import MutationGenerator
from mutation_dashboard.views.details_panel import DetailsPanel

logger = logging.getLogger(__name__)

ControllerFactory = Callable[[], DashboardController]


def build_provider(
    config: AppConfig,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DataProvider:
    api_client = None
    if config.api.url:
        api_client = MutationApiClient(config.api.url, timeout=config.api.timeout, transport=transport)

    initial_files = None
    if config.initial_files.enabled:
        initial_files = InitialFiles(geo=config.initial_files.geo, scatter=config.initial_files.scatter)

    return DataProvider(
        api_client,
        MutationGenerator(seed=config.generator.seed, n_clusters=config.generator.n_clusters),
        initial_files=initial_files,
        fallback_count=config.generator.count,
        max_upload_bytes=config.max_upload_bytes,
    )


def build_controller(
    config: AppConfig,
    registry: ViewRegistry,
    *,
    map_container_id: str,
    scatter_container_id: str,
    details_container_id: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DashboardController:
    """
    Wire a fresh state, provider and set of views for one session.
    """
    color_scale = ColorScale(name=config.color_scale)
    return DashboardController(
        ApplicationState(),
        build_provider(config, transport=transport),
        map_view=registry.create("map", map_container_id, color_scale=color_scale),
        scatter_view=registry.create("scatter", scatter_container_id, color_scale=color_scale),
        details_panel=DetailsPanel(),
        details_container_id=details_container_id,
        color_scale_name=config.color_scale,
    )


class SessionManager(Mapping[str, DashboardController]):
    """
    One DashboardController per browser page session, bounded LRU.

    Dash callbacks are stateless; the page keeps only its session id (in a
    dcc.Store) and every callback looks its controller up here. The least
    recently used session is dropped once `max_sessions` is exceeded.

    Lookups are thread-safe; serializing actions within a session is up to
    the caller, through the controller's lock.
    """

    def __init__(self, factory: ControllerFactory, max_sessions: int = 64):
        if max_sessions < 1:
            raise ValueError("max_sessions must be >= 1")
        self._factory = factory
        self._max_sessions = max_sessions
        self._sessions: "OrderedDict[str, DashboardController]" = OrderedDict()
        self._guard = threading.Lock()

    @staticmethod
    def new_session_id() -> str:
        return uuid.uuid4().hex

    def __getitem__(self, session_id: str) -> DashboardController:
        with self._guard:
            controller = self._sessions[session_id]
            self._sessions.move_to_end(session_id)
        return controller

    def __iter__(self) -> Iterator[str]:
        with self._guard:
            return iter(list(self._sessions))

    def __len__(self) -> int:
        return len(self._sessions)

    def get_or_create(self, session_id: str) -> Tuple[DashboardController, bool]:
        """
        :return: (controller, created) - created is True for a new session,
                 which still needs its initial load
        """
        with self._guard:
            if session_id in self._sessions:
                self._sessions.move_to_end(session_id)
                return self._sessions[session_id], False

            controller = self._factory()
            self._sessions[session_id] = controller
            logger.info("Session created", extra={"session_id": session_id, "n_sessions": len(self._sessions)})

            while len(self._sessions) > self._max_sessions:
                evicted, _ = self._sessions.popitem(last=False)
                logger.info("Session evicted", extra={"session_id": evicted})
            return controller, True
