"""Configuration for the panel wizard: YAML file plus environment overrides."""

from __future__ import annotations
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import yaml


class ConfigError(Exception):
    """Configuration error."""
    pass


@dataclass
class PanelConfig:
    url: str = ""
    token: str = ""               # value of the panel's auth_token session cookie
    timeout_seconds: float = 10.0
    verify_ssl: bool = True

    @property
    def servers_url(self) -> str:
        return f"{self.url}/servers"


@dataclass
class LoggingConfig:
    file: str = ""                # empty keeps the default log file

    @property
    def file_path(self) -> Optional[Path]:
        return Path(self.file).expanduser() if self.file else None


@dataclass
class Config:
    panel: PanelConfig = field(default_factory=PanelConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    source: Optional[Path] = None

    CONFIG_PATHS = [
        Path.home() / ".config" / "panel-wizard" / "config.yaml",
        Path.home() / ".config" / "panel-wizard" / "config.yml",
        Path("config.yaml"),
        Path("config.yml"),
    ]

    @classmethod
    def find_config_file(cls) -> Optional[Path]:
        """Find the first existing config file."""
        for path in cls.CONFIG_PATHS:
            if path.exists():
                return path
        return None

    @classmethod
    def load(
        cls,
        path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "Config":
        """Load configuration from YAML, then apply PANEL_URL / PANEL_TOKEN."""
        env = os.environ if environ is None else environ
        if path is None:
            path = cls.find_config_file()
        elif not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        data: dict = {}
        if path is not None:
            try:
                with open(path) as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(f"Failed to read config file {path}: {e}")
            if not isinstance(data, dict):
                raise ConfigError(f"Config file {path} must contain a mapping")

        config = cls(source=path)

        if "panel" in data:
            panel = data["panel"] or {}
            try:
                config.panel = PanelConfig(
                    url=str(panel.get("url") or ""),
                    token=str(panel.get("token") or ""),
                    timeout_seconds=float(panel.get("timeout_seconds", 10.0)),
                    verify_ssl=bool(panel.get("verify_ssl", True)),
                )
            except (AttributeError, TypeError, ValueError) as e:
                raise ConfigError(f"Invalid panel section in {path}: {e}")

        if "logging" in data:
            section = data["logging"] or {}
            if not isinstance(section, dict):
                raise ConfigError(f"Invalid logging section in {path}")
            config.logging = LoggingConfig(file=str(section.get("file") or ""))

        if env.get("PANEL_URL"):
            config.panel.url = env["PANEL_URL"]
        if env.get("PANEL_TOKEN"):
            config.panel.token = env["PANEL_TOKEN"]

        config.panel.url = config.panel.url.rstrip("/")

        if not config.panel.url:
            searched = "\n".join(f"  - {p}" for p in cls.CONFIG_PATHS)
            raise ConfigError(
                "Panel URL is required (panel.url or PANEL_URL). Searched:\n" + searched
            )
        if config.panel.timeout_seconds <= 0:
            raise ConfigError("panel.timeout_seconds must be positive")

        return config
