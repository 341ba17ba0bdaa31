"""Configuration management for Upgrade Risk."""

import logging
from pathlib import Path
from typing import Any

import toml

from upgrade_risk.models import RiskLevel

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILENAME = ".upgrade-risk.toml"


class Config:
    """Application configuration."""

    def __init__(self, config_file: Path | None = None) -> None:
        """Initialize configuration.

        Args:
            config_file: Optional path to configuration file
        """
        self.config_file = config_file
        self._config: dict[str, Any] = self._load_config()

    def _load_config(self) -> dict[str, Any]:
        """Load configuration from file or defaults."""
        config: dict[str, Any] = self._get_defaults()

        if self.config_file and self.config_file.exists():
            try:
                file_config = toml.load(self.config_file)
                _merge(config, file_config)
                logger.debug(f"Loaded config from {self.config_file}")
            except toml.TomlDecodeError as e:
                logger.warning(f"Invalid TOML in config file {self.config_file}: {e}")
            except OSError as e:
                logger.warning(f"Error loading config file {self.config_file}: {e}")

        return config

    @staticmethod
    def _get_defaults() -> dict[str, Any]:
        """Get default configuration values."""
        return {
            "analysis": {
                "public_entry_hints": [],
                "max_changelog_tokens": 4000,
            },
            "ci": {
                "fail_on": "high",
                "fail_on_unknown": False,
            },
            "output": {
                "color": True,
                "format": "terminal",  # or "json"
            },
        }

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., "ci.fail_on")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value: Any = self._config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    @property
    def public_entry_hints(self) -> list[str]:
        """Get configured public entry point paths."""
        hints = self.get("analysis.public_entry_hints", [])
        if isinstance(hints, str):
            return [hints]
        return [str(h) for h in hints or []]

    @property
    def max_changelog_tokens(self) -> int:
        """Get token budget for changelog findings."""
        return int(self.get("analysis.max_changelog_tokens", 4000))

    @property
    def fail_on(self) -> RiskLevel:
        """Get the lowest risk level that fails a CI check."""
        value = str(self.get("ci.fail_on", "high")).lower()
        try:
            return RiskLevel(value)
        except ValueError:
            logger.warning(f"Unknown ci.fail_on level {value!r}, using 'high'")
            return RiskLevel.HIGH

    @property
    def fail_on_unknown(self) -> bool:
        """Check if an unknown verdict fails a CI check."""
        return bool(self.get("ci.fail_on_unknown", False))

    @property
    def color(self) -> bool:
        """Check if terminal output is colored."""
        return bool(self.get("output.color", True))

    @property
    def output_format(self) -> str:
        """Get default output format."""
        return str(self.get("output.format", "terminal"))


def _merge(base: dict[str, Any], override: dict[str, Any]) -> None:
    """Merge ``override`` into ``base`` one section level deep."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key].update(value)
        else:
            base[key] = value


def find_config_file(start: Path | None = None) -> Path | None:
    """Find the project config file in a directory.

    Args:
        start: Directory to look in (defaults to the working directory)

    Returns:
        Path to the config file, or None if there is none
    """
    candidate = (start or Path.cwd()) / DEFAULT_CONFIG_FILENAME
    return candidate if candidate.is_file() else None


# Global config instance
_config: Config | None = None


def get_config(config_file: Path | None = None) -> Config:
    """Get or create global configuration instance.

    Args:
        config_file: Optional path to configuration file; passing one
            reloads the global instance from that file

    Returns:
        Config instance
    """
    global _config

    if _config is None or config_file is not None:
        _config = Config(config_file)

    return _config


def reset_config() -> None:
    """Drop the global configuration instance."""
    global _config
    _config = None
