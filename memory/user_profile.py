"""User preference stores."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Dict

from models.preferences import UserPreferences


class PreferenceStore:
    """Interface for keyed UserPreferences persistence.

    ``get`` never fails for an unknown user: a default record is created and
    stored on first read.
    """

    def get(self, user_id: str) -> UserPreferences:
        raise NotImplementedError

    def put(self, user_id: str, preferences: UserPreferences) -> None:
        raise NotImplementedError


class InMemoryPreferenceStore(PreferenceStore):
    def __init__(self) -> None:
        self._records: Dict[str, UserPreferences] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> UserPreferences:
        with self._lock:
            return self._records.setdefault(user_id, UserPreferences())

    def put(self, user_id: str, preferences: UserPreferences) -> None:
        with self._lock:
            self._records[user_id] = preferences


class JSONPreferenceStore(PreferenceStore):
    """Simple JSON-backed preference store, one file per user."""

    def __init__(self, base_dir: str = "data/preferences") -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _profile_path(self, user_id: str) -> Path:
        return self.base_dir / f"{user_id}.json"

    def get(self, user_id: str) -> UserPreferences:
        with self._lock:
            path = self._profile_path(user_id)
            if not path.exists():
                preferences = UserPreferences()
                path.write_text(json.dumps({"user_id": user_id, "preferences": preferences.to_dict()}, indent=2))
                return preferences

            data = json.loads(path.read_text())
            return UserPreferences.from_dict(data.get("preferences", {}))

    def put(self, user_id: str, preferences: UserPreferences) -> None:
        with self._lock:
            path = self._profile_path(user_id)
            path.write_text(json.dumps({"user_id": user_id, "preferences": preferences.to_dict()}, indent=2))


def build_preference_store(path: str | None) -> PreferenceStore:
    """JSON store under ``path`` when configured, otherwise in-memory."""

    if path:
        return JSONPreferenceStore(base_dir=path)
    return InMemoryPreferenceStore()


__all__ = ["PreferenceStore", "InMemoryPreferenceStore", "JSONPreferenceStore", "build_preference_store"]
