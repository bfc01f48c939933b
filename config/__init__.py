"""Creative Usage Dashboard - Configuration Module.

This module provides YAML-backed storage of the Google Sheets feeding
each dashboard project.
"""

from .config_manager import (
    ConfigError,
    ConfigManager,
    DashboardConfig,
    ProjectConfig,
    build_csv_export_url,
    normalize_sheet_url,
)

__all__ = [
    "ConfigManager",
    "ConfigError",
    "DashboardConfig",
    "ProjectConfig",
    "build_csv_export_url",
    "normalize_sheet_url",
]
