from __future__ import annotations

import time

from .models import PreferenceProfile, PreferenceUpdate

_profiles: dict[str, PreferenceProfile] = {}


def get_preferences(user_id: str) -> PreferenceProfile | None:
    return _profiles.get(user_id)


def upsert_preferences(user_id: str, update: PreferenceUpdate) -> PreferenceProfile:
    """Create the profile on first save, replace its fields afterwards."""
    now = time.time()
    existing = _profiles.get(user_id)
    profile = PreferenceProfile(
        user_id=user_id,
        created_at=existing.created_at if existing else now,
        updated_at=now,
        **update.model_dump(),
    )
    _profiles[user_id] = profile
    return profile


def update_budget(user_id: str, budget_max: float) -> PreferenceProfile:
    """Set only ``budget_max``, keeping every other saved field."""
    existing = _profiles.get(user_id)
    if existing is None:
        return upsert_preferences(user_id, PreferenceUpdate(budget_max=budget_max))
    profile = existing.model_copy(update={"budget_max": budget_max, "updated_at": time.time()})
    _profiles[user_id] = profile
    return profile


def delete_preferences(user_id: str) -> bool:
    """Delete the profile; return whether one existed."""
    return _profiles.pop(user_id, None) is not None


def clear_preferences() -> None:
    _profiles.clear()
