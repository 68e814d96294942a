"""
Settings loader (``cashbook_config.loader``).

Reads YAML files and turns the merged mapping into a ``CashbookSettings``.
Runtime callers go through ``cashbook_config.get_active_settings()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown, missing or ill-typed keys  -> ``ConfigurationError``.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from cashbook_config.schema import CashbookSettings
from cashbook_kernel.domain.records import BookSegment
from cashbook_kernel.exceptions import ConfigurationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ConfigurationError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Settings file must contain a mapping", source=str(path))
    return data


def merge_settings(base: dict[str, Any], override: dict[str, Any], source: str) -> dict[str, Any]:
    """Shallow merge; ``override`` may only name keys the settings define."""
    unknown = set(override) - CashbookSettings.field_names()
    if unknown:
        raise ConfigurationError(f"Unknown settings: {sorted(unknown)}", source=source)
    merged = dict(base)
    merged.update(override)
    return merged


def _string_list(data: dict[str, Any], key: str, source: str) -> tuple[str, ...]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigurationError(f"{key} must be a list of strings", source=source)
    return tuple(value)


def _positive_int(data: dict[str, Any], key: str, source: str, allow_zero: bool = False) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{key} must be an integer", source=source)
    if value < 0 or (value == 0 and not allow_zero):
        raise ConfigurationError(f"{key} must be positive", source=source)
    return value


def parse_settings(data: dict[str, Any], source: str = "<memory>") -> CashbookSettings:
    """
    Build settings from a complete mapping.

    Raises:
        ConfigurationError: a key is missing, unknown or has the wrong type.
    """
    names = CashbookSettings.field_names()
    unknown = set(data) - names
    if unknown:
        raise ConfigurationError(f"Unknown settings: {sorted(unknown)}", source=source)
    missing = names - set(data)
    if missing:
        raise ConfigurationError(f"Missing settings: {sorted(missing)}", source=source)

    try:
        default_segment = BookSegment(str(data["default_segment"]).lower())
    except ValueError as exc:
        raise ConfigurationError(
            f"default_segment must be one of {[s.value for s in BookSegment]}",
            source=source,
        ) from exc

    try:
        tolerance = Decimal(str(data["import_duplicate_tolerance"]))
    except InvalidOperation as exc:
        raise ConfigurationError("import_duplicate_tolerance must be a number", source=source) from exc
    if tolerance < 0:
        raise ConfigurationError("import_duplicate_tolerance must not be negative", source=source)

    return CashbookSettings(
        database_url=str(data["database_url"]),
        default_segment=default_segment,
        duplicate_window_ms=_positive_int(data, "duplicate_window_ms", source, allow_zero=True),
        import_duplicate_tolerance=tolerance,
        category_priority=_string_list(data, "category_priority", source),
        fee_heads=_string_list(data, "fee_heads", source),
        fee_reference_sentinel=str(data["fee_reference_sentinel"]),
        fee_category_suffix=str(data["fee_category_suffix"]),
        fee_notes_prefix=str(data["fee_notes_prefix"]),
        fiscal_years_back=_positive_int(data, "fiscal_years_back", source, allow_zero=True),
        fiscal_years_forward=_positive_int(data, "fiscal_years_forward", source, allow_zero=True),
        page_size=_positive_int(data, "page_size", source),
    )
