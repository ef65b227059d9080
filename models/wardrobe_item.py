"""Wardrobe item data model and helpers."""

from __future__ import annotations

import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from models.taxonomy import (
    Category,
    Formality,
    Pattern,
    Season,
    parse_enum,
    parse_enum_list,
    validate_category,
)

if TYPE_CHECKING:
    from logic.validation import ClothingAnalysis

# Target formalities each item formality may be worn to.
_FORMALITY_TARGETS: Dict[Formality, List[Formality]] = {
    Formality.CASUAL: [Formality.CASUAL, Formality.MIXED],
    Formality.SMART_CASUAL: [Formality.CASUAL, Formality.SMART_CASUAL, Formality.MIXED],
    Formality.BUSINESS: [Formality.SMART_CASUAL, Formality.BUSINESS, Formality.MIXED],
    Formality.FORMAL: [Formality.BUSINESS, Formality.FORMAL, Formality.MIXED],
}


def _ensure_list(value: Any) -> List[Any]:
    """Coerce a scalar or iterable into a list."""

    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


@dataclass(frozen=True)
class ClothingColor:
    """A named color with an optional ``#RRGGBB`` hex code."""

    name: str
    hex_code: Optional[str] = None
    is_primary: bool = False

    @classmethod
    def coerce(cls, value: Any) -> "ClothingColor":
        if isinstance(value, ClothingColor):
            return value
        if isinstance(value, dict):
            return cls(
                name=str(value.get("name", "")).strip(),
                hex_code=value.get("hex_code") or value.get("hexCode"),
                is_primary=bool(value.get("is_primary", value.get("isPrimary", False))),
            )
        return cls(name=str(value).strip())


@dataclass
class WardrobeItem:
    """Represents an item in the user's wardrobe."""

    id: str
    user_id: str
    name: str
    category: Category
    subcategory: Optional[str] = None
    brand: Optional[str] = None
    colors: List[ClothingColor] = field(default_factory=list)
    patterns: List[Pattern] = field(default_factory=list)
    materials: List[str] = field(default_factory=list)
    formality: Formality = Formality.CASUAL
    seasons: List[Season] = field(default_factory=list)
    occasions: List[str] = field(default_factory=list)
    is_favorite: bool = False
    times_worn: int = 0
    last_worn: Optional[datetime] = None
    is_archived: bool = False

    def __post_init__(self) -> None:
        self.category = validate_category(self.category)
        self.formality = parse_enum(Formality, self.formality)
        self.colors = [ClothingColor.coerce(color) for color in _ensure_list(self.colors)]
        self.patterns = parse_enum_list(Pattern, _ensure_list(self.patterns))
        self.materials = [str(m).strip() for m in _ensure_list(self.materials) if str(m).strip()]
        self.seasons = parse_enum_list(Season, _ensure_list(self.seasons))
        self.occasions = [str(o) for o in _ensure_list(self.occasions)]
        if self.times_worn < 0:
            raise ValueError("times_worn cannot be negative")

    @property
    def primary_color(self) -> Optional[ClothingColor]:
        for color in self.colors:
            if color.is_primary:
                return color
        return self.colors[0] if self.colors else None

    @property
    def is_frequently_worn(self) -> bool:
        return self.times_worn > 10

    def is_appropriate_for_season(self, season: Season) -> bool:
        return not self.seasons or season in self.seasons

    def is_appropriate_for_formality(self, target: Formality) -> bool:
        """Coarse adjacency check used to pre-filter generation candidates."""

        if self.formality is Formality.MIXED:
            return True
        return target in _FORMALITY_TARGETS[self.formality]

    def replace(self, **changes: Any) -> "WardrobeItem":
        """Return a copy with ``changes`` applied; the original is untouched."""

        return dataclasses.replace(self, **changes)

    def mark_as_worn(self, when: Optional[datetime] = None) -> "WardrobeItem":
        return self.replace(
            times_worn=self.times_worn + 1,
            last_worn=when or datetime.now(timezone.utc),
        )


def from_raw_metadata(metadata: Dict[str, Any]) -> WardrobeItem:
    """Factory to build a :class:`WardrobeItem` from loose ingestion metadata."""

    required_fields = ["user_id", "name", "category"]
    missing = [name for name in required_fields if not metadata.get(name)]
    if missing:
        raise ValueError(f"Missing required fields for WardrobeItem: {missing}")

    return WardrobeItem(
        id=str(metadata.get("id") or uuid.uuid4()),
        user_id=str(metadata["user_id"]),
        name=str(metadata["name"]),
        category=str(metadata["category"]),
        subcategory=metadata.get("subcategory"),
        brand=metadata.get("brand"),
        colors=_ensure_list(metadata.get("colors")),
        patterns=_ensure_list(metadata.get("patterns")),
        materials=_ensure_list(metadata.get("materials")),
        formality=metadata.get("formality") or Formality.CASUAL,
        seasons=_ensure_list(metadata.get("seasons")),
        occasions=_ensure_list(metadata.get("occasions")),
        is_favorite=bool(metadata.get("is_favorite", False)),
        times_worn=int(metadata.get("times_worn", 0)),
        is_archived=bool(metadata.get("is_archived", False)),
    )


def from_clothing_analysis(analysis: "ClothingAnalysis", user_id: str, name: str) -> WardrobeItem:
    """Create a new wardrobe item from a vision analysis result."""

    return WardrobeItem(
        id=str(uuid.uuid4()),
        user_id=user_id,
        name=name,
        category=analysis.category,
        subcategory=analysis.subcategory,
        colors=[
            ClothingColor(name=color.name, hex_code=color.hex_code, is_primary=color.is_primary)
            for color in analysis.colors
        ],
        patterns=list(analysis.patterns),
        materials=list(analysis.materials),
        formality=analysis.formality,
        seasons=list(analysis.seasons),
        occasions=list(analysis.occasions),
    )


def group_by_category(items: Iterable[WardrobeItem]) -> Dict[Category, List[WardrobeItem]]:
    grouped: Dict[Category, List[WardrobeItem]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item)
    return grouped


__all__ = [
    "ClothingColor",
    "WardrobeItem",
    "from_raw_metadata",
    "from_clothing_analysis",
    "group_by_category",
]
