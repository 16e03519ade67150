"""
Core domain layer: mutation records and datasets, the application state,
the view base class and the view registry
"""

from .records import MutationDataset, MutationRecord, Provenance, SourceKind
from .state import ApplicationState
from .base_view import BaseView, UpdateOptions
from .view_registry import ViewRegistry

__all__ = [
    "MutationDataset",
    "MutationRecord",
    "Provenance",
    "SourceKind",
    "ApplicationState",
    "BaseView",
    "UpdateOptions",
    "ViewRegistry",
]
