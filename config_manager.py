"""Configuration management for the listbox engine."""

from __future__ import annotations

import configparser
import os
from dataclasses import dataclass, fields
from typing import Any, ClassVar, Dict, Mapping, Tuple

from constants import LOG_LEVELS, TYPEAHEAD_IDLE_MS, TYPEAHEAD_MAX_LENGTH
from logging_utils import logger


class ConfigValidationError(ValueError):
    """Raised when configuration values fail validation."""


@dataclass(frozen=True)
class EngineSettings:
    """Typed engine configuration with validation helpers."""

    typeahead_idle_ms: int = TYPEAHEAD_IDLE_MS
    typeahead_max_length: int = TYPEAHEAD_MAX_LENGTH
    wrap_navigation: bool = True
    strict_transitions: bool = False
    log_level: str = "INFO"

    _BOOL_KEYS: ClassVar[Tuple[str, ...]] = ("wrap_navigation", "strict_transitions")
    _INT_KEYS: ClassVar[Tuple[str, ...]] = ("typeahead_idle_ms", "typeahead_max_length")

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(item.name for item in fields(cls))

    @classmethod
    def from_raw(cls, raw: Mapping[str, str]) -> "EngineSettings":
        """Create an instance from raw string values."""

        defaults = cls()
        data: Dict[str, Any] = {
            name: getattr(defaults, name) for name in cls.field_names()
        }

        for key, value in raw.items():
            if key not in data:
                continue
            data[key] = cls._coerce_value(key, value)

        instance = cls(**data)
        instance._validate()
        return instance

    @classmethod
    def _coerce_value(cls, key: str, value: str) -> Any:
        """Coerce raw string configuration values into their typed form."""

        if key in cls._BOOL_KEYS:
            normalized = value.strip().lower()
            if normalized in {"true", "1", "yes", "on"}:
                return True
            if normalized in {"false", "0", "no", "off"}:
                return False
            raise ConfigValidationError(f"{key} must be true/false, yes/no, or 1/0")
        if key in cls._INT_KEYS:
            try:
                return int(value)
            except ValueError as exc:
                raise ConfigValidationError(f"{key} must be an integer") from exc
        if key == "log_level":
            return value.strip().upper()
        return value.strip()

    def _validate(self) -> None:
        """Validate configuration values and raise if invalid."""

        if self.typeahead_idle_ms <= 0:
            raise ConfigValidationError("typeahead_idle_ms must be greater than zero")
        if self.typeahead_max_length <= 0:
            raise ConfigValidationError(
                "typeahead_max_length must be greater than zero"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}"
            )

    def to_raw_dict(self) -> Dict[str, str]:
        """Serialize settings back to string values for configparser."""

        return {
            "typeahead_idle_ms": str(self.typeahead_idle_ms),
            "typeahead_max_length": str(self.typeahead_max_length),
            "wrap_navigation": str(self.wrap_navigation).lower(),
            "strict_transitions": str(self.strict_transitions).lower(),
            "log_level": self.log_level,
        }


class Config:
    """INI-backed settings store that falls back to defaults on bad input."""

    def __init__(self, config_file: str = "listbox.ini"):
        self.config = configparser.ConfigParser()
        self.config_file = config_file
        self.settings: EngineSettings = EngineSettings()
        self.load()

    def load(self) -> None:
        """Load configuration, creating the file when missing."""
        try:
            if os.path.exists(self.config_file):
                self.config.read(self.config_file, encoding="utf-8")
                self._load_settings_from_parser()
            else:
                self._reset_to_defaults()
                logger.info("Created new configuration file: %s", self.config_file)
        except (OSError, configparser.Error) as exc:
            logger.error("Error loading configuration: %s", exc)
            self._reset_to_defaults()

    def _reset_to_defaults(self) -> None:
        self.settings = EngineSettings()
        self.config["DEFAULT"] = self.settings.to_raw_dict()
        self.save()

    def _load_settings_from_parser(self) -> None:
        try:
            raw_defaults: Mapping[str, str] = dict(self.config["DEFAULT"])
            self.settings = EngineSettings.from_raw(raw_defaults)
            self.config["DEFAULT"] = self.settings.to_raw_dict()
            self.save()
        except (ConfigValidationError, KeyError) as exc:
            logger.warning(
                "Invalid configuration detected. Resetting to defaults: %s", exc
            )
            self._reset_to_defaults()

    def save(self) -> None:
        """Persist the current settings."""
        try:
            with open(self.config_file, "w", encoding="utf-8") as config_file:
                self.config.write(config_file)
            logger.debug("Configuration saved successfully")
        except OSError as exc:
            logger.error("Error saving configuration: %s", exc)

    def get(self, key: str, fallback: Any = None) -> Any:
        """Return the raw string form of a setting."""
        if key in EngineSettings.field_names():
            return self.settings.to_raw_dict()[key]
        return fallback

    def get_typed(self, key: str, fallback: Any = None) -> Any:
        """Return a setting in its typed form."""

        if key in EngineSettings.field_names():
            return getattr(self.settings, key)
        return fallback

    def set(self, key: str, value: str) -> None:
        """Set a configuration value with validation."""
        if key not in EngineSettings.field_names():
            raise ValueError(f"Unknown configuration key: {key}")
        try:
            raw_values = self.settings.to_raw_dict()
            raw_values[key] = str(value)
            self.settings = EngineSettings.from_raw(raw_values)
        except ConfigValidationError as exc:
            logger.error("Invalid value for config key %s: %s", key, exc)
            raise ValueError(f"Invalid value for {key}: {exc}") from exc
        self.config["DEFAULT"] = self.settings.to_raw_dict()
        self.save()

    def update_settings(self, values: Mapping[str, Any]) -> None:
        """Apply several values at once; nothing is persisted if any is invalid."""

        unknown = set(values).difference(EngineSettings.field_names())
        if unknown:
            raise ValueError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")
        raw_values = self.settings.to_raw_dict()
        for key, value in values.items():
            raw_values[key] = str(value).lower() if isinstance(value, bool) else str(value)
        try:
            settings = EngineSettings.from_raw(raw_values)
        except ConfigValidationError as exc:
            logger.error("Rejected configuration update: %s", exc)
            raise ValueError(str(exc)) from exc
        self.settings = settings
        self.config["DEFAULT"] = self.settings.to_raw_dict()
        self.save()


__all__ = ["EngineSettings", "Config", "ConfigValidationError"]
