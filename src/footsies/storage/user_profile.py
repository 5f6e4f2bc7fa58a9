"""User profile persistence (JSON + fcntl.flock + atomic write)."""

import fcntl
import json
import os
import tempfile
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError

from footsies.models.session import utc_now
from footsies.models.user_profile import UserProfile
from footsies.storage.errors import StorageError, safe_document_name


def get_profile_path(data_dir: Path, user_id: str) -> Path:
    profiles_dir = data_dir / "users"
    profiles_dir.mkdir(parents=True, exist_ok=True)
    return profiles_dir / f"{safe_document_name(user_id)}.json"


def load_profile(data_dir: Path, user_id: str) -> UserProfile | None:
    """Read a profile document. Returns None if the user has none."""
    path = get_profile_path(data_dir, user_id)
    if not path.exists():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            data = json.load(f)
            fcntl.flock(f, fcntl.LOCK_UN)
        return UserProfile(**data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise StorageError(f"Corrupt profile document for {user_id!r}") from e


def save_profile(data_dir: Path, profile: UserProfile) -> None:
    path = get_profile_path(data_dir, profile.user_id)
    profile.updated_at = utc_now()
    with tempfile.NamedTemporaryFile(
        "w", dir=path.parent, delete=False, suffix=".json", encoding="utf-8"
    ) as tmp:
        json.dump(profile.model_dump(mode="json"), tmp)
    os.replace(tmp.name, path)


def create_profile(data_dir: Path, profile: UserProfile) -> UserProfile:
    """Store a signup profile. Refuses to overwrite an existing user."""
    if get_profile_path(data_dir, profile.user_id).exists():
        raise StorageError(f"Profile already exists for {profile.user_id!r}")
    save_profile(data_dir, profile)
    return profile


def modify_profile(
    data_dir: Path, user_id: str, mutate: Callable[[UserProfile], None]
) -> UserProfile | None:
    """Load, mutate and save a profile under its exclusive lock.

    Returns None (and calls nothing) when the user has no profile. If
    ``mutate`` raises, nothing is written.
    """
    path = get_profile_path(data_dir, user_id)
    lock_path = path.with_suffix(".lock")
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)
        profile = load_profile(data_dir, user_id)
        if profile is None:
            return None
        mutate(profile)
        save_profile(data_dir, profile)
    return profile


def update_profile(data_dir: Path, user_id: str, **fields) -> UserProfile | None:
    """Merge fields into a stored profile under an exclusive lock."""

    def merge(profile: UserProfile) -> None:
        for key, value in fields.items():
            setattr(profile, key, value)

    return modify_profile(data_dir, user_id, merge)


def record_session_saved(
    data_dir: Path, user_id: str, timestamp: datetime
) -> UserProfile | None:
    """Bump total_sessions and stamp last_training_date after a session save."""

    def stamp(profile: UserProfile) -> None:
        profile.total_sessions += 1
        profile.last_training_date = timestamp

    return modify_profile(data_dir, user_id, stamp)
