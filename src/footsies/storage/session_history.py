"""Append-only training session history per user."""

import fcntl
import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path

from footsies.models.session import TrainingSession
from footsies.storage.errors import StorageError, safe_document_name


def get_history_path(data_dir: Path, user_id: str) -> Path:
    sessions_dir = data_dir / "sessions"
    sessions_dir.mkdir(parents=True, exist_ok=True)
    return sessions_dir / f"{safe_document_name(user_id)}.json"


def _read_history(history_path: Path) -> dict:
    if not history_path.exists():
        return {"sessions": []}
    try:
        data = json.loads(history_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise StorageError(f"Corrupt session history: {history_path.name}") from e
    if not isinstance(data.get("sessions"), list):
        raise StorageError(f"Malformed session history: {history_path.name}")
    return data


def append_session(data_dir: Path, user_id: str, session: TrainingSession) -> str:
    """Append a session record to the user's history and return its id."""
    history_path = get_history_path(data_dir, user_id)

    lock_path = history_path.with_suffix(".lock")
    with open(lock_path, "w") as lock_file:
        fcntl.flock(lock_file, fcntl.LOCK_EX)

        data = _read_history(history_path)
        data["sessions"].append(session.model_dump(mode="json"))
        with tempfile.NamedTemporaryFile(
            "w", dir=history_path.parent, delete=False, suffix=".json", encoding="utf-8"
        ) as tmp:
            json.dump(data, tmp, indent=2)
        os.replace(tmp.name, history_path)

    return session.id


def _timestamp_key(record: dict) -> tuple[bool, datetime]:
    """Sort key on the parsed timestamp; unparseable records sort oldest."""
    try:
        moment = datetime.fromisoformat(record["timestamp"])
    except (KeyError, TypeError, ValueError):
        return False, datetime.min.replace(tzinfo=timezone.utc)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return True, moment


def list_sessions(data_dir: Path, user_id: str, limit: int | None = None) -> list[dict]:
    """Raw session records, newest first.

    Records are returned unvalidated so that read-side aggregation can skip
    individual malformed entries instead of failing the whole history.
    """
    data = _read_history(get_history_path(data_dir, user_id))
    records = [r for r in data["sessions"] if isinstance(r, dict)]
    records.sort(key=_timestamp_key, reverse=True)
    if limit is not None:
        records = records[:limit]
    return records
