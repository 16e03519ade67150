from __future__ import annotations

from dataclasses import dataclass

from mutation_dashboard.config.model import AppConfig
from mutation_dashboard.core.view_registry import ViewRegistry
from mutation_dashboard.services.session_service import SessionManager


@dataclass
class AppContext:
    """
    Holds shared state for the Dash app: the loaded config, the view registry
    and the per-session controllers. This is passed into layout + callback
    registration functions instead of using module-level globals.
    """
    config: AppConfig
    registry: ViewRegistry
    sessions: SessionManager
