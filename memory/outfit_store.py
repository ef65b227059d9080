"""In-memory outfit persistence used by the feedback loop."""

from __future__ import annotations

import threading
from typing import Dict, List, Optional

from logic.errors import OutfitNotFoundError
from models.outfit import Outfit


class OutfitStore:
    """Keeps the latest version of each outfit, keyed by id."""

    def __init__(self) -> None:
        self._outfits: Dict[str, Outfit] = {}
        self._lock = threading.Lock()

    def save(self, outfit: Outfit) -> Outfit:
        with self._lock:
            self._outfits[outfit.id] = outfit
        return outfit

    def get(self, outfit_id: str) -> Outfit:
        with self._lock:
            outfit = self._outfits.get(outfit_id)
        if outfit is None:
            raise OutfitNotFoundError(f"Outfit '{outfit_id}' not found.")
        return outfit

    def find(self, outfit_id: str) -> Optional[Outfit]:
        with self._lock:
            return self._outfits.get(outfit_id)

    def list_for_user(self, user_id: str, rated_only: bool = False, limit: Optional[int] = None) -> List[Outfit]:
        """Most recently updated first."""

        with self._lock:
            outfits = [outfit for outfit in self._outfits.values() if outfit.user_id == user_id]
        if rated_only:
            outfits = [outfit for outfit in outfits if outfit.rating is not None]
        outfits.sort(key=lambda outfit: outfit.updated_at, reverse=True)
        return outfits[:limit] if limit is not None else outfits


__all__ = ["OutfitStore"]
