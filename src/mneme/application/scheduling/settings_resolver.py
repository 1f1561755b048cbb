"""
Settings resolution: turn a possibly partial or absent raw record into
complete Settings.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_camel

from mneme.domain.scheduling.models import Settings
from mneme.domain.scheduling.ports import SettingsRepository

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = Settings()

# Column names used by older settings tables
LEGACY_KEYS = {
    "hard_interval_multiplier": ("hard_interval",),
    "new_interval_percentage": ("new_interval",),
}


def resolve_settings(raw: Settings | Mapping[str, Any] | None) -> Settings:
    """
    Produce complete Settings from a raw record.

    Absent records yield the defaults. Present records are merged field by
    field over the defaults: missing or null fields, and fields that fail
    validation, keep their default value. Never raises.

    Keys may be snake_case, camelCase or a legacy column name.
    """
    if raw is None:
        return DEFAULT_SETTINGS
    if isinstance(raw, Settings):
        return raw

    merged = _collect_fields(raw)

    try:
        return Settings(**merged)
    except ValidationError as exc:
        invalid = {str(err["loc"][0]) for err in exc.errors() if err["loc"]}
        logger.warning(f"Invalid settings fields {sorted(invalid) or exc}; using defaults for them")
        merged = {k: v for k, v in merged.items() if k not in invalid}

    try:
        return Settings(**merged)
    except ValidationError as exc:
        # Cross-field errors (e.g. maximum below minimum) have no field location
        logger.warning(f"Settings record rejected, using defaults: {exc}")
        return DEFAULT_SETTINGS


async def load_settings(repo: SettingsRepository, user_id: str) -> Settings:
    """
    Fetch and resolve a learner's settings.

    A failing settings store is treated as an absent record.
    """
    try:
        raw = await repo.get_settings(user_id)
    except Exception as e:
        logger.warning(f"Failed to fetch settings for user={user_id}: {e}")
        raw = None
    return resolve_settings(raw)


def _collect_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for name in Settings.model_fields:
        for key in (name, to_camel(name), *LEGACY_KEYS.get(name, ())):
            value = raw.get(key)
            if value is not None:
                merged[name] = value
                break
    return merged
