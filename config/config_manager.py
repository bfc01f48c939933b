"""Project configuration management for the creative dashboard.

This module provides storage and retrieval of the per-project Google Sheet
settings. Configuration is stored as YAML in the ~/.creative-dashboard/
directory.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

SHEETS_BASE_URL = "https://docs.google.com/spreadsheets/d/"
# Bare spreadsheet IDs are longer than this
MIN_SPREADSHEET_ID_LENGTH = 20


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


def normalize_sheet_url(value: str) -> str:
    """Expand a bare spreadsheet ID into a spreadsheet URL.

    Args:
        value: Spreadsheet URL or ID as typed by the user.

    Returns:
        The full spreadsheet URL, or the value unchanged when it already
        looks like one.

    Examples:
        >>> normalize_sheet_url("1AbCdEfGhIjKlMnOpQrStUvWxYz")
        'https://docs.google.com/spreadsheets/d/1AbCdEfGhIjKlMnOpQrStUvWxYz'
    """
    value = (value or "").strip()
    if value and "docs.google.com" not in value and len(value) > MIN_SPREADSHEET_ID_LENGTH:
        return f"{SHEETS_BASE_URL}{value}"
    return value


def build_csv_export_url(url: str, gid: str) -> str:
    """CSV export URL for one tab of a spreadsheet."""
    return f"{url.rstrip('/')}/export?format=csv&gid={gid}"


class ProjectConfig(BaseModel):
    """One Google Sheet feeding the dashboard."""

    name: str
    emoji: str = ""
    url: str = ""
    gid: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.url) and self.gid != ""

    @property
    def csv_url(self) -> str:
        return build_csv_export_url(self.url, self.gid)


def _default_projects() -> Dict[str, ProjectConfig]:
    return {
        "SnellCoin": ProjectConfig(name="SnellCoin", emoji="🪙", url="", gid="0"),
        "EarnTube": ProjectConfig(name="EarnTube", emoji="📺", url="", gid=""),
    }


class DashboardConfig(BaseModel):
    """Dashboard configuration."""

    projects: Dict[str, ProjectConfig] = Field(default_factory=_default_projects)
    refresh_interval_seconds: int = 300  # 5 minutes
    request_timeout_seconds: float = 30.0
    retry_delay_seconds: float = 1.0
    log_level: str = "INFO"

    @property
    def is_configured(self) -> bool:
        """True when every project has a URL and a tab gid."""
        return all(project.is_configured for project in self.projects.values())

    def sheet_urls(self) -> Dict[str, str]:
        """CSV export URLs keyed by project, for configured projects only."""
        return {
            key: project.csv_url
            for key, project in self.projects.items()
            if project.is_configured
        }


class ConfigManager:
    """Manages dashboard configuration storage.

    Attributes:
        config_dir: Path to the configuration directory.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".creative-dashboard"
    CONFIG_FILE = "config.yaml"

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        """Initialize the configuration manager.

        Args:
            config_dir: Custom configuration directory path.
        """
        self.config_dir = config_dir or self.DEFAULT_CONFIG_DIR
        self._config: Optional[DashboardConfig] = None

    def _ensure_config_dir(self) -> None:
        """Create the configuration directory if it doesn't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

    @property
    def config_path(self) -> Path:
        """Path to the YAML configuration file."""
        return self.config_dir / self.CONFIG_FILE

    def save(self, config: DashboardConfig) -> None:
        """Save configuration to disk.

        Args:
            config: The configuration to save.

        Raises:
            ConfigError: If save operation fails.
        """
        self._ensure_config_dir()

        try:
            serialized = yaml.safe_dump(config.model_dump(), allow_unicode=True, sort_keys=False)
            self.config_path.write_text(serialized, encoding="utf-8")
            os.chmod(self.config_path, 0o600)
            self._config = config
            logger.info(f"Configuration saved to {self.config_path}")
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to save configuration: {e}") from e

    def load(self) -> DashboardConfig:
        """Load configuration from disk.

        Returns:
            The loaded DashboardConfig.

        Raises:
            ConfigError: If configuration doesn't exist or can't be loaded.
        """
        if not self.config_path.exists():
            raise ConfigError(
                f"Configuration not found at {self.config_path}. "
                "Run 'creative-dashboard configure' to set up."
            )

        try:
            data = yaml.safe_load(self.config_path.read_text(encoding="utf-8")) or {}
            if not isinstance(data, dict):
                raise ConfigError(f"Invalid configuration format in {self.config_path}")
            self._config = DashboardConfig(**data)
            return self._config
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid configuration format: {e}") from e
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration values: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to load configuration: {e}") from e

    def get_config(self) -> DashboardConfig:
        """Get the current configuration.

        Falls back to the default projects when nothing has been saved yet.

        Returns:
            The current DashboardConfig.
        """
        if self._config is None:
            if self.is_configured():
                self._config = self.load()
            else:
                self._config = DashboardConfig()
        return self._config

    def update_project(
        self,
        key: str,
        url: Optional[str] = None,
        gid: Optional[str] = None,
        name: Optional[str] = None,
        emoji: Optional[str] = None,
    ) -> ProjectConfig:
        """Add a project or change its settings.

        Args:
            key: Project key.
            url: Spreadsheet URL or bare spreadsheet ID.
            gid: Sheet tab gid.
            name: Display name (defaults to the key for new projects).
            emoji: Display emoji.

        Returns:
            The saved ProjectConfig.
        """
        config = self.get_config()
        projects = dict(config.projects)
        current = projects.get(key) or ProjectConfig(name=key)

        updated = current.model_copy(
            update={
                "url": normalize_sheet_url(url) if url is not None else current.url,
                "gid": gid.strip() if gid is not None else current.gid,
                "name": name if name is not None else current.name,
                "emoji": emoji if emoji is not None else current.emoji,
            }
        )
        projects[key] = updated
        self.save(config.model_copy(update={"projects": projects}))
        return updated

    def remove_project(self, key: str) -> None:
        """Remove a project.

        Raises:
            ConfigError: If the project is unknown.
        """
        config = self.get_config()
        if key not in config.projects:
            raise ConfigError(f"Unknown project: {key}")
        projects = {k: v for k, v in config.projects.items() if k != key}
        self.save(config.model_copy(update={"projects": projects}))

    def is_configured(self) -> bool:
        """Check if a configuration file exists.

        Returns:
            True if configuration file exists.
        """
        return self.config_path.exists()

    def reset(self) -> None:
        """Delete the configuration file."""
        if self.config_path.exists():
            self.config_path.unlink()
        self._config = None
        logger.info("Configuration reset complete")
