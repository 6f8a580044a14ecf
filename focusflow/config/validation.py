"""Settings validation utilities."""

import math
from dataclasses import asdict, dataclass
from typing import Any

from ..errors import SettingsValidationError
from .defaults import BOOLEAN_SETTINGS, SETTING_LIMITS, Settings


@dataclass(frozen=True)
class FieldError:
    """Represents a single settings validation failure."""
    field: str
    message: str
    value: Any


def _parse_int(value: Any) -> Any:
    """Parse integer-like input the way a numeric form field would.

    Returns None when the value is not numeric.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class SettingsValidator:
    """Validates and normalizes timer settings."""

    @staticmethod
    def validate_settings(params: dict[str, Any]) -> list[FieldError]:
        """Validate settings given as a field-name mapping."""
        errors = []

        for name, (minimum, _maximum) in SETTING_LIMITS.items():
            if name not in params:
                continue
            value = params[name]
            parsed = _parse_int(value)
            if parsed is None:
                errors.append(FieldError(
                    field=name,
                    message="Must be a whole number",
                    value=value
                ))
            elif parsed < minimum:
                errors.append(FieldError(
                    field=name,
                    message=f"Must be at least {minimum}",
                    value=value
                ))

        for name in BOOLEAN_SETTINGS:
            if name in params and not isinstance(params[name], bool):
                errors.append(FieldError(
                    field=name,
                    message="Must be a boolean",
                    value=params[name]
                ))

        unknown = set(params) - set(SETTING_LIMITS) - set(BOOLEAN_SETTINGS)
        for name in sorted(unknown):
            errors.append(FieldError(
                field=name,
                message="Unknown setting",
                value=params[name]
            ))

        return errors

    @staticmethod
    def normalize_value(name: str, value: Any) -> Any:
        """
        Validate one setting and return its normalized value.

        Numeric settings are parsed to ``int`` and clamped to their maximum.

        Raises:
            SettingsValidationError: If the value is rejected
        """
        errors = SettingsValidator.validate_settings({name: value})
        if errors:
            raise SettingsValidationError(
                f"Invalid setting {name}: {errors[0].message} (got: {value!r})",
                errors=errors,
                field=name,
                value=value
            )

        if name in SETTING_LIMITS:
            _minimum, maximum = SETTING_LIMITS[name]
            return min(_parse_int(value), maximum)
        return value

    @staticmethod
    def normalize_settings(settings: Settings) -> Settings:
        """
        Validate a complete settings object and clamp numeric fields.

        Raises:
            SettingsValidationError: If any field is rejected
        """
        params = asdict(settings)
        errors = SettingsValidator.validate_settings(params)
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value!r})" for err in errors]
            raise SettingsValidationError(
                "Invalid settings: " + "; ".join(error_msgs),
                errors=errors
            )

        normalized = {
            name: SettingsValidator.normalize_value(name, params[name])
            for name in SETTING_LIMITS
        }
        return Settings(**{**params, **normalized})


class AppParamsValidator:
    """Validates runtime wiring parameters from the ``app`` config section."""

    @staticmethod
    def validate_app_params(params: dict[str, Any]) -> list[FieldError]:
        """Tick interval must be positive; auto-start delay must not be negative."""
        errors = []

        for name, allow_zero in (("tick_interval_seconds", False), ("auto_start_delay_seconds", True)):
            if name not in params:
                continue
            value = params[name]
            if (isinstance(value, bool) or not isinstance(value, (int, float))
                    or not math.isfinite(value)):
                errors.append(FieldError(field=name, message="Must be a number", value=value))
            elif value < 0 or (value == 0 and not allow_zero):
                errors.append(FieldError(
                    field=name,
                    message="Must not be negative" if allow_zero else "Must be positive",
                    value=value
                ))

        if "background_writes" in params and not isinstance(params["background_writes"], bool):
            errors.append(FieldError(
                field="background_writes",
                message="Must be a boolean",
                value=params["background_writes"]
            ))

        return errors
