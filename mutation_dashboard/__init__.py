"""
Top-level package for the DNA mutation dashboard.

This package exposes the core architecture (state, views, UI adapters).
Most code should import from submodules such as:
    mutation_dashboard.core
    mutation_dashboard.services
    mutation_dashboard.views
    mutation_dashboard.ui
"""

__all__: list[str] = []
