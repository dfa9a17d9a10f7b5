"""
Persistence of the application preferences document.

The document is a JSON file at ``Settings.PREFERENCES_FILE``. A missing file
means "all defaults". Writes go to a temporary sibling first and are moved
into place so a crash never leaves a truncated document.
"""

from __future__ import annotations

import logging
from pathlib import Path

from budgetflow.config import get_settings
from budgetflow.domain.errors import ExternalStoreError
from budgetflow.preferences import (
    AppPreferences,
    default_preferences,
    dump_preferences,
    load_preferences,
)

logger = logging.getLogger(__name__)


def _path(path: Path | None) -> Path:
    return path if path is not None else get_settings().PREFERENCES_FILE


def get_preferences(path: Path | None = None) -> AppPreferences:
    """Read the stored preferences merged over the defaults."""
    target = _path(path)
    if not target.exists():
        logger.debug("get_preferences: %s not found, using defaults", target)
        return default_preferences()
    try:
        raw = target.read_text(encoding="utf-8")
    except OSError as exc:
        raise ExternalStoreError(f"Cannot read preferences file {target}: {exc}") from exc
    return load_preferences(raw)


def save_preferences(prefs: AppPreferences, path: Path | None = None) -> AppPreferences:
    """Write *prefs* to the preferences file and return them."""
    target = _path(path)
    tmp = target.with_suffix(target.suffix + ".tmp")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp.write_text(dump_preferences(prefs), encoding="utf-8")
        tmp.replace(target)
    except OSError as exc:
        raise ExternalStoreError(f"Cannot write preferences file {target}: {exc}") from exc
    logger.info("Preferences saved to %s", target)
    return prefs


def update_preferences(changes: dict, path: Path | None = None) -> AppPreferences:
    """Merge *changes* over the stored preferences and persist the result."""
    merged = load_preferences(changes, base=get_preferences(path))
    return save_preferences(merged, path)


def import_preferences(raw: bytes | str, path: Path | None = None) -> AppPreferences:
    """Replace the stored preferences with an uploaded document merged over the defaults."""
    prefs = load_preferences(raw)
    logger.info("Importing preferences document (%d bytes)", len(raw))
    return save_preferences(prefs, path)


def reset_preferences(path: Path | None = None) -> AppPreferences:
    return save_preferences(default_preferences(), path)
