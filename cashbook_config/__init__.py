"""
cashbook_config -- single public entrypoint for cash book settings.

Responsibility:
    ``get_active_settings()`` is the only way to obtain settings at
    runtime.  It loads the packaged ``defaults.yaml``, applies an optional
    override file and returns a frozen ``CashbookSettings``.

Architecture position:
    Configuration -- sits above ``cashbook_kernel`` and below
    ``cashbook_ingestion`` / ``cashbook_services``.  The kernel never imports
    from this package; services receive plain values from the settings.

Failure modes:
    - ``FileNotFoundError`` -- override file does not exist.
    - ``ConfigurationError`` -- unknown, missing or ill-typed keys.

Every successful call emits a ``CASHBOOK_CONFIG_TRACE`` log entry naming
the files that produced the settings.
"""

from __future__ import annotations

from pathlib import Path

from cashbook_config.loader import load_yaml_file, merge_settings, parse_settings
from cashbook_config.schema import CashbookSettings
from cashbook_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_settings(override_path: Path | str | None = None) -> CashbookSettings:
    """
    Load the packaged defaults, then ``override_path`` if given.

    Raises:
        FileNotFoundError: ``override_path`` does not exist.
        ConfigurationError: the merged settings are invalid.
    """
    sources = [str(DEFAULTS_PATH)]
    data = load_yaml_file(DEFAULTS_PATH)
    if override_path is not None:
        override_path = Path(override_path)
        data = merge_settings(data, load_yaml_file(override_path), str(override_path))
        sources.append(str(override_path))

    settings = parse_settings(data, source=sources[-1])

    _logger.info(
        "CASHBOOK_CONFIG_TRACE",
        extra={
            "trace_type": "CASHBOOK_CONFIG_TRACE",
            "sources": sources,
            "default_segment": settings.default_segment.value,
            "duplicate_window_ms": settings.duplicate_window_ms,
            "category_priority_count": len(settings.category_priority),
            "fee_head_count": len(settings.fee_heads),
        },
    )
    return settings


__all__ = [
    "CashbookSettings",
    "DEFAULTS_PATH",
    "get_active_settings",
]
