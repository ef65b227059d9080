"""Outfit schemas and body-slot composition rules."""

from __future__ import annotations

import dataclasses
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

from logic.errors import SlotConflictError
from models.taxonomy import (
    CATEGORY_POSITIONS,
    EXCLUSIVE_POSITIONS,
    POSITION_KEYWORDS,
    Category,
    Formality,
    OutfitCreator,
    Position,
    Season,
    WeatherCondition,
    parse_enum,
    parse_enum_list,
)
from models.wardrobe_item import WardrobeItem


def slot_for_item(item: WardrobeItem) -> Position:
    """Return the body position an item occupies.

    Category decides the default slot; subcategory keywords refine it for
    categories that span several slots (hats among accessories, leggings among
    activewear).
    """

    subcategory = (item.subcategory or "").lower()
    for position, keywords in POSITION_KEYWORDS.get(item.category, {}).items():
        if any(keyword in subcategory for keyword in keywords):
            return position
    return CATEGORY_POSITIONS[item.category]


@dataclass(frozen=True)
class OutfitItem:
    item: WardrobeItem
    position: Position
    is_optional: bool = False

    @classmethod
    def for_item(cls, item: WardrobeItem, is_optional: bool = False) -> "OutfitItem":
        return cls(item=item, position=slot_for_item(item), is_optional=is_optional)


@dataclass
class Outfit:
    """A named combination of wardrobe items."""

    user_id: str
    name: str
    items: List[OutfitItem] = field(default_factory=list)
    occasions: List[str] = field(default_factory=list)
    seasons: List[Season] = field(default_factory=list)
    formality: Formality = Formality.CASUAL
    weather_conditions: List[WeatherCondition] = field(default_factory=list)
    created_by: OutfitCreator = OutfitCreator.USER
    is_favorite: bool = False
    is_public: bool = False
    times_worn: int = 0
    rating: Optional[float] = None
    ai_score: Optional[float] = None
    style_tips: List[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.formality = parse_enum(Formality, self.formality)
        self.created_by = parse_enum(OutfitCreator, self.created_by)
        self.seasons = parse_enum_list(Season, self.seasons)
        self.weather_conditions = parse_enum_list(WeatherCondition, self.weather_conditions)
        self.validate_composition()

    def validate_composition(self) -> None:
        counts = Counter(entry.position for entry in self.items if not entry.is_optional)
        conflicts = sorted(
            position.value for position, count in counts.items() if position in EXCLUSIVE_POSITIONS and count > 1
        )
        if conflicts:
            raise SlotConflictError(f"Outfit '{self.name}' has more than one required item in: {conflicts}")

    @property
    def wardrobe_items(self) -> List[WardrobeItem]:
        return [entry.item for entry in self.items]

    @property
    def required_items(self) -> List[OutfitItem]:
        return [entry for entry in self.items if not entry.is_optional]

    @property
    def is_incomplete(self) -> bool:
        return not self.required_items

    @property
    def is_complete(self) -> bool:
        positions = {entry.position for entry in self.items}
        has_body = Position.MIDDLE in positions or {Position.TOP, Position.BOTTOM} <= positions
        return has_body and Position.FOOTWEAR in positions

    def sorted_items(self) -> List[OutfitItem]:
        return sorted(self.items, key=lambda entry: entry.position.sort_order)

    def has_category(self, category: Category) -> bool:
        return any(entry.item.category is category for entry in self.items)

    def replace(self, **changes: Any) -> "Outfit":
        changes.setdefault("updated_at", datetime.now(timezone.utc))
        return dataclasses.replace(self, **changes)


__all__ = ["Outfit", "OutfitItem", "slot_for_item"]
