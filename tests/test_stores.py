from __future__ import annotations

import json
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.errors import OutfitNotFoundError
from memory.outfit_store import OutfitStore
from memory.user_profile import InMemoryPreferenceStore, JSONPreferenceStore, build_preference_store
from models.outfit import Outfit
from models.preferences import StylePreference, UserPreferences
from models.taxonomy import Formality


def test_json_store_creates_default_profile(tmp_path) -> None:
    store = JSONPreferenceStore(base_dir=str(tmp_path / "prefs"))

    preferences = store.get("user-1")

    saved = json.loads((tmp_path / "prefs" / "user-1.json").read_text())
    assert preferences == UserPreferences()
    assert saved["user_id"] == "user-1"
    assert saved["preferences"]["colors"]["neutral"] == ["black", "white", "gray", "navy", "beige"]


def test_json_store_round_trips_updates(tmp_path) -> None:
    store = JSONPreferenceStore(base_dir=str(tmp_path))
    updated = UserPreferences(
        style=StylePreference(primary="classic", secondary=["modern"], formality=Formality.BUSINESS),
        brands=["acme"],
    ).with_colors(preferred=["red"], avoided=["orange"])

    store.put("user-1", updated)

    assert JSONPreferenceStore(base_dir=str(tmp_path)).get("user-1") == updated


def test_in_memory_store_defaults_and_overwrites() -> None:
    store = InMemoryPreferenceStore()

    assert store.get("user-1") == UserPreferences()
    store.put("user-1", UserPreferences(brands=["acme"]))
    assert store.get("user-1").brands == ["acme"]


def test_build_preference_store_picks_backend(tmp_path) -> None:
    assert isinstance(build_preference_store(None), InMemoryPreferenceStore)
    assert isinstance(build_preference_store(str(tmp_path)), JSONPreferenceStore)


def test_outfit_store_lists_newest_first() -> None:
    store = OutfitStore()
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    older = Outfit(user_id="user-1", name="older", rating=4.0, updated_at=base)
    newer = Outfit(user_id="user-1", name="newer", rating=2.0, updated_at=base + timedelta(days=1))
    unrated = Outfit(user_id="user-1", name="unrated", updated_at=base + timedelta(days=2))
    other = Outfit(user_id="user-2", name="other", rating=5.0)
    for outfit in (older, newer, unrated, other):
        store.save(outfit)

    assert [o.name for o in store.list_for_user("user-1")] == ["unrated", "newer", "older"]
    assert [o.name for o in store.list_for_user("user-1", rated_only=True)] == ["newer", "older"]
    assert [o.name for o in store.list_for_user("user-1", limit=1)] == ["unrated"]
    assert store.find("missing") is None
    with pytest.raises(OutfitNotFoundError):
        store.get("missing")
