"""
Config package for mutation_dashboard.

Responsible for:
- config models (AppConfig, ApiConfig, ...)
- loading config/global.json with environment overrides
"""

from .model import ApiConfig, AppConfig, GeneratorConfig, InitialFilesConfig
from .config_loader import load_app_config
