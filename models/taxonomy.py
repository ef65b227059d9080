"""Canonical taxonomy definitions for wardrobe items and outfits.

This module centralises the enumerations shared by the engine: clothing
categories, patterns, formality levels, seasons, weather conditions and the
body-position slots outfits are composed from. Helper functions keep parsing
of loose strings consistent across models, stores and the scoring logic.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Dict, Iterable, List, Optional, Type, TypeVar

E = TypeVar("E", bound=Enum)


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower().replace(" ", "_").replace("-", "_")


class Category(str, Enum):
    TOPS = "tops"
    BOTTOMS = "bottoms"
    OUTERWEAR = "outerwear"
    DRESSES = "dresses"
    SHOES = "shoes"
    ACCESSORIES = "accessories"
    UNDERWEAR = "underwear"
    ACTIVEWEAR = "activewear"
    SLEEPWEAR = "sleepwear"
    SWIMWEAR = "swimwear"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class Pattern(str, Enum):
    SOLID = "solid"
    STRIPES = "stripes"
    POLKA_DOTS = "polka_dots"
    FLORAL = "floral"
    PLAID = "plaid"
    CHECKERED = "checkered"
    GEOMETRIC = "geometric"
    ABSTRACT = "abstract"
    ANIMAL = "animal"
    PAISLEY = "paisley"
    HOUNDSTOOTH = "houndstooth"
    ARGYLE = "argyle"
    CAMOUFLAGE = "camouflage"
    TRIBAL = "tribal"
    VINTAGE = "vintage"


class Formality(str, Enum):
    """Formality levels; ``MIXED`` is a wildcard outside the ordered scale."""

    CASUAL = "casual"
    SMART_CASUAL = "smart_casual"
    BUSINESS = "business"
    FORMAL = "formal"
    MIXED = "mixed"

    @property
    def display_name(self) -> str:
        return {
            "casual": "Casual",
            "smart_casual": "Smart Casual",
            "business": "Business",
            "formal": "Formal",
            "mixed": "Mixed",
        }[self.value]


FORMALITY_SCALE: List[Formality] = [
    Formality.CASUAL,
    Formality.SMART_CASUAL,
    Formality.BUSINESS,
    Formality.FORMAL,
]


class Season(str, Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL = "fall"
    WINTER = "winter"

    @classmethod
    def for_date(cls, when: date | datetime | None = None) -> "Season":
        """Return the northern-hemisphere meteorological season for a date."""

        month = (when or date.today()).month
        if 3 <= month <= 5:
            return cls.SPRING
        if 6 <= month <= 8:
            return cls.SUMMER
        if 9 <= month <= 11:
            return cls.FALL
        return cls.WINTER


# Seasons an item can borrow from when its own season does not match.
ADJACENT_SEASONS: Dict[Season, List[Season]] = {
    Season.SPRING: [Season.SUMMER, Season.FALL],
    Season.SUMMER: [Season.SPRING, Season.FALL],
    Season.FALL: [Season.SPRING, Season.WINTER],
    Season.WINTER: [Season.FALL, Season.SPRING],
}


class WeatherCondition(str, Enum):
    """Condition tags used by the outfit heuristics.

    ``HOT``, ``COLD`` and ``HUMID`` are never reported by a provider; they are
    derived from raw readings. ``STORMY`` and ``FOGGY`` are provider tags that
    the heuristics read as rainy and cloudy respectively.
    """

    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    SNOWY = "snowy"
    WINDY = "windy"
    STORMY = "stormy"
    FOGGY = "foggy"
    HOT = "hot"
    COLD = "cold"
    HUMID = "humid"
    DRY = "dry"


PROVIDER_CONDITION_ALIASES: Dict[WeatherCondition, WeatherCondition] = {
    WeatherCondition.STORMY: WeatherCondition.RAINY,
    WeatherCondition.FOGGY: WeatherCondition.CLOUDY,
}


class OutfitCreator(str, Enum):
    USER = "user"
    AI = "ai"
    COLLABORATIVE = "collaborative"


class Position(str, Enum):
    """Body-position slots, declared in display order."""

    HEADWEAR = "headwear"
    OUTERWEAR = "outerwear"
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"
    FOOTWEAR = "footwear"
    ACCESSORIES = "accessories"
    UNDERWEAR = "underwear"

    @property
    def sort_order(self) -> int:
        return list(Position).index(self)


# Slots that may hold at most one non-optional item.
EXCLUSIVE_POSITIONS = frozenset({Position.TOP, Position.BOTTOM, Position.FOOTWEAR, Position.HEADWEAR})

CATEGORY_POSITIONS: Dict[Category, Position] = {
    Category.TOPS: Position.TOP,
    Category.BOTTOMS: Position.BOTTOM,
    Category.OUTERWEAR: Position.OUTERWEAR,
    Category.DRESSES: Position.MIDDLE,
    Category.SHOES: Position.FOOTWEAR,
    Category.ACCESSORIES: Position.ACCESSORIES,
    Category.UNDERWEAR: Position.UNDERWEAR,
    Category.ACTIVEWEAR: Position.TOP,
    Category.SLEEPWEAR: Position.MIDDLE,
    Category.SWIMWEAR: Position.MIDDLE,
}

# Subcategory keywords that move an item out of its category's default slot.
POSITION_KEYWORDS: Dict[Category, Dict[Position, List[str]]] = {
    Category.ACCESSORIES: {
        Position.HEADWEAR: ["hat", "cap", "beanie", "visor", "beret"],
    },
    Category.ACTIVEWEAR: {
        Position.BOTTOM: ["pants", "leggings", "shorts", "joggers", "sweatpants"],
        Position.FOOTWEAR: ["shoes", "sneakers", "trainers"],
    },
}

NEUTRAL_COLOR_NAMES = frozenset(
    {"black", "white", "gray", "grey", "navy", "beige", "cream", "khaki", "brown", "tan"}
)

DEFAULT_NEUTRAL_PREFERENCES = ["black", "white", "gray", "navy", "beige"]

COLOR_MAP = {
    "navy blue": "navy",
    "grey": "gray",
    "off white": "white",
    "off-white": "white",
}


def parse_enum(enum_cls: Type[E], value: E | str) -> E:
    """Coerce a loose string (any case, spaces or dashes) into an enum member.

    Raises a :class:`ValueError` listing the allowed values on failure.
    """

    if isinstance(value, enum_cls):
        return value
    key = _normalize_key(str(value))
    for member in enum_cls:
        if member.value == key:
            return member
    raise ValueError(
        f"Unsupported {enum_cls.__name__.lower()} '{value}'. Allowed: {[m.value for m in enum_cls]}"
    )


def parse_enum_list(enum_cls: Type[E], values: Iterable[E | str] | None) -> List[E]:
    """Parse and deduplicate a list of enum values, preserving order."""

    parsed: List[E] = []
    for value in values or []:
        member = parse_enum(enum_cls, value)
        if member not in parsed:
            parsed.append(member)
    return parsed


def validate_category(value: Category | str) -> Category:
    """Validate and normalise a category value."""

    return parse_enum(Category, value)


def normalize_color_name(raw_string: str) -> str:
    """Map a raw color string to the lower-case name used in preference lists."""

    key = raw_string.strip().lower()
    return COLOR_MAP.get(key, key)


def is_neutral_color_name(name: Optional[str]) -> bool:
    return bool(name) and name.strip().lower() in NEUTRAL_COLOR_NAMES


__all__ = [
    "Category",
    "Pattern",
    "Formality",
    "FORMALITY_SCALE",
    "Season",
    "ADJACENT_SEASONS",
    "WeatherCondition",
    "PROVIDER_CONDITION_ALIASES",
    "OutfitCreator",
    "Position",
    "EXCLUSIVE_POSITIONS",
    "CATEGORY_POSITIONS",
    "POSITION_KEYWORDS",
    "NEUTRAL_COLOR_NAMES",
    "DEFAULT_NEUTRAL_PREFERENCES",
    "parse_enum",
    "parse_enum_list",
    "validate_category",
    "normalize_color_name",
    "is_neutral_color_name",
]
