"""Configuration loader with 3-tier settings precedence."""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import SettingsValidationError
from ..logging.config import get_logger
from .defaults import AppParams, DefaultConfig, LoggingParams, Settings, get_default_config
from .validation import AppParamsValidator, SettingsValidator

logger = get_logger(__name__)

CONFIG_FILENAME = "focusflow.yaml"
CONFIG_DIR_ENV = "FOCUSFLOW_CONFIG_DIR"


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            env_dir = os.environ.get(CONFIG_DIR_ENV)
            config_dir = Path(env_dir) if env_dir else Path.home() / ".focusflow"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load the YAML config file, or an empty mapping when absent."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        return file_config or {}

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration sections.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Config file
        3. Compiled-in defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, self.load_file_config())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def app_params(self, overrides: Optional[dict[str, Any]] = None) -> AppParams:
        """Build runtime wiring parameters."""
        section = self._known_fields(AppParams, self.merge_config(overrides).get("app") or {})

        errors = AppParamsValidator.validate_app_params(section)
        if errors:
            logger.warning(
                "App parameters rejected, using defaults",
                config_dir=str(self.config_dir),
                errors=[f"{err.field}: {err.message}" for err in errors]
            )
            rejected = {err.field for err in errors}
            section = {k: v for k, v in section.items() if k not in rejected}

        return AppParams(**section)

    def logging_params(self, overrides: Optional[dict[str, Any]] = None) -> LoggingParams:
        """Build logging parameters."""
        section = self.merge_config(overrides).get("logging") or {}
        return LoggingParams(**self._known_fields(LoggingParams, section))

    def default_settings(self, overrides: Optional[dict[str, Any]] = None) -> Settings:
        """
        Build the startup settings before persisted user edits are applied.

        Invalid values from the config file fall back to compiled-in defaults.
        """
        section = self.merge_config(overrides).get("settings") or {}
        candidate = Settings(**self._known_fields(Settings, section))

        try:
            return SettingsValidator.normalize_settings(candidate)
        except SettingsValidationError as e:
            logger.warning(
                "Config file settings rejected, using defaults",
                config_dir=str(self.config_dir),
                errors=[f"{err.field}: {err.message}" for err in e.errors]
            )
            return self.defaults.settings

    def _known_fields(self, cls: type, section: dict[str, Any]) -> dict[str, Any]:
        """Drop keys the target dataclass does not declare."""
        names = {f.name for f in fields(cls)}
        unknown = set(section) - names
        if unknown:
            logger.warning(
                "Ignoring unknown config keys",
                section=cls.__name__,
                keys=sorted(unknown)
            )
        return {k: v for k, v in section.items() if k in names}

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name, _field in obj.__dataclass_fields__.items():
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
