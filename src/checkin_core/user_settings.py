"""Persistence of the per-user settings blob."""
import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from .local_cache import LocalCache
from .models import UserSettings

logger = logging.getLogger(__name__)


def settings_key(user_id: Optional[str]) -> str:
    return f"userSettings:{user_id or 'local'}"


def save_user_settings(cache: LocalCache, settings: UserSettings) -> bool:
    """Write the settings blob; failures are logged by the cache."""
    return cache.set(settings_key(settings.user_id), settings.model_dump_json())


def load_user_settings(cache: LocalCache, user_id: Optional[str]) -> UserSettings:
    """
    Load settings for a user, creating and persisting defaults on first use.

    Blobs from older revisions without scoring or thresholds sections are
    completed with defaults. An unreadable blob is replaced by defaults.
    """
    blob = cache.get_json(settings_key(user_id))

    if isinstance(blob, dict):
        try:
            settings = UserSettings.model_validate(blob)
            if settings.user_id is None:
                settings.user_id = user_id
            return settings
        except ValidationError as e:
            logger.error(f"[SETTINGS] Discarding invalid settings for {user_id}: {e}")

    settings = UserSettings(user_id=user_id)
    save_user_settings(cache, settings)
    logger.info(f"[SETTINGS] Created default settings for {user_id}")
    return settings


def _merge(base: dict, updates: Mapping[str, Any]) -> dict:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_settings_update(settings: UserSettings, updates: Mapping[str, Any]) -> UserSettings:
    """
    Return a validated copy of settings with updates applied.

    Nested sections (thresholds, scoring, scoring.weights) are merged key
    by key, so a partial section only touches the fields it names.
    """
    return UserSettings.model_validate(_merge(settings.model_dump(), updates))
