"""Weather-driven filtering and ranking of wardrobe items.

Items are classified once against keyword tables (materials, names, colors)
and the resulting traits drive three decisions: whether an item suits the
temperature band, whether it survives every active weather condition, and
how highly it ranks among the items that do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from models.taxonomy import Category, Pattern, Season, WeatherCondition
from models.wardrobe_item import WardrobeItem
from models.weather import CurrentWeather, DailyForecast, engine_condition

logger = logging.getLogger(__name__)


class TemperatureBand(str, Enum):
    FREEZING = "freezing"
    COLD = "cold"
    COOL = "cool"
    MILD = "mild"
    WARM = "warm"
    HOT = "hot"

    @classmethod
    def from_celsius(cls, temperature: float) -> "TemperatureBand":
        for upper, band in _BAND_UPPER_BOUNDS:
            if temperature < upper:
                return band
        return cls.HOT


_BAND_UPPER_BOUNDS: List[Tuple[float, TemperatureBand]] = [
    (0.0, TemperatureBand.FREEZING),
    (10.0, TemperatureBand.COLD),
    (18.0, TemperatureBand.COOL),
    (25.0, TemperatureBand.MILD),
    (30.0, TemperatureBand.WARM),
]


class Trait(str, Enum):
    WARM = "warm"
    LIGHT = "light"
    BREATHABLE = "breathable"
    WATER_RESISTANT = "water_resistant"
    LIGHT_COLOR = "light_color"
    DARK_COLOR = "dark_color"
    LIGHT_FABRIC = "light_fabric"
    DELICATE_FABRIC = "delicate_fabric"
    FLOWING = "flowing"
    FORMAL_FOOTWEAR = "formal_footwear"
    HEAVY_FABRIC = "heavy_fabric"
    HEAVY_OUTERWEAR = "heavy_outerwear"
    MEDIUM_OUTERWEAR = "medium_outerwear"
    LIGHT_OUTERWEAR = "light_outerwear"
    WIND_RESISTANT = "wind_resistant"
    WEATHER_RESISTANT_FOOTWEAR = "weather_resistant_footwear"
    BREATHABLE_FOOTWEAR = "breathable_footwear"
    WARM_FOOTWEAR = "warm_footwear"
    SUN_PROTECTION = "sun_protection"
    WARM_ACCESSORY = "warm_accessory"
    WATER_RESISTANT_ACCESSORY = "water_resistant_accessory"
    SECURE_ACCESSORY = "secure_accessory"


MATERIALS = "materials"
NAME = "name"
SUBCATEGORY = "subcategory"
COLORS = "colors"


@dataclass(frozen=True)
class KeywordRule:
    """One trait: substring keywords and the item fields searched for them."""

    trait: Trait
    keywords: Tuple[str, ...]
    fields: FrozenSet[str]
    categories: Optional[FrozenSet[Category]] = None

    def matches(self, item: WardrobeItem) -> bool:
        if self.categories is not None and item.category not in self.categories:
            return False
        haystacks: List[str] = []
        if MATERIALS in self.fields:
            haystacks.extend(material.lower() for material in item.materials)
        if NAME in self.fields:
            haystacks.append(item.name.lower())
        if SUBCATEGORY in self.fields and item.subcategory:
            haystacks.append(item.subcategory.lower())
        if COLORS in self.fields:
            haystacks.extend(color.name.lower() for color in item.colors)
        return any(keyword in text for text in haystacks for keyword in self.keywords)


def _rules(trait: Trait, keywords: Sequence[str], fields: Iterable[str], categories=None) -> List[KeywordRule]:
    return [
        KeywordRule(
            trait=trait,
            keywords=tuple(keywords),
            fields=frozenset(fields),
            categories=frozenset(categories) if categories else None,
        )
    ]


_GARMENT = (NAME, SUBCATEGORY)

KEYWORD_RULES: List[KeywordRule] = [
    *_rules(Trait.WARM, ["wool", "cashmere", "fleece", "down", "fur", "flannel", "thermal"], [MATERIALS]),
    *_rules(Trait.WARM, ["sweater", "hoodie", "coat", "jacket", "boots", "winter"], _GARMENT),
    *_rules(Trait.LIGHT, ["cotton", "linen", "silk", "rayon", "bamboo", "mesh"], [MATERIALS]),
    *_rules(Trait.LIGHT, ["t-shirt", "tank top", "shorts", "sandals", "dress"], _GARMENT),
    *_rules(Trait.BREATHABLE, ["cotton", "linen", "bamboo", "modal", "moisture-wicking"], [MATERIALS]),
    *_rules(
        Trait.WATER_RESISTANT,
        ["nylon", "polyester", "rubber", "vinyl", "waterproof", "water-resistant"],
        [MATERIALS],
    ),
    *_rules(Trait.WATER_RESISTANT, ["raincoat", "trench", "windbreaker", "parka"], _GARMENT),
    *_rules(Trait.LIGHT_COLOR, ["white", "cream", "beige", "light", "pale", "pastel"], [COLORS]),
    *_rules(Trait.DARK_COLOR, ["black", "navy", "dark", "deep"], [COLORS]),
    *_rules(Trait.LIGHT_FABRIC, ["cotton", "linen", "silk", "chiffon", "georgette"], [MATERIALS]),
    *_rules(Trait.DELICATE_FABRIC, ["silk", "cashmere", "suede", "velvet", "lace"], [MATERIALS]),
    *_rules(Trait.FLOWING, ["dress", "skirt", "scarf", "cape", "poncho"], _GARMENT),
    *_rules(
        Trait.FORMAL_FOOTWEAR,
        ["heels", "dress shoes", "oxfords", "loafers"],
        _GARMENT,
        categories=[Category.SHOES],
    ),
    *_rules(Trait.HEAVY_FABRIC, ["denim", "wool", "leather", "canvas", "corduroy"], [MATERIALS]),
    *_rules(Trait.HEAVY_OUTERWEAR, ["coat", "parka", "puffer", "down"], _GARMENT),
    *_rules(Trait.MEDIUM_OUTERWEAR, ["jacket", "cardigan", "blazer"], _GARMENT),
    *_rules(Trait.LIGHT_OUTERWEAR, ["vest", "light jacket", "windbreaker"], _GARMENT),
    *_rules(Trait.WIND_RESISTANT, ["windbreaker", "shell", "jacket"], _GARMENT),
    *_rules(Trait.WEATHER_RESISTANT_FOOTWEAR, ["boots", "rain boots", "waterproof"], _GARMENT),
    *_rules(
        Trait.BREATHABLE_FOOTWEAR,
        ["sandals", "canvas", "mesh", "breathable"],
        (NAME, SUBCATEGORY, MATERIALS),
    ),
    *_rules(Trait.WARM_FOOTWEAR, ["boots", "winter", "wool", "fur", "lined"], (NAME, SUBCATEGORY, MATERIALS)),
    *_rules(Trait.SUN_PROTECTION, ["hat", "cap", "sunglasses", "visor"], _GARMENT),
    *_rules(Trait.WARM_ACCESSORY, ["scarf", "gloves", "hat", "beanie", "mittens"], _GARMENT),
    *_rules(Trait.WATER_RESISTANT_ACCESSORY, ["umbrella", "waterproof bag", "rain hat"], _GARMENT),
    *_rules(Trait.SECURE_ACCESSORY, ["belt", "watch", "small bag"], _GARMENT),
]

VERSATILE_COLORS = frozenset({"black", "white", "gray", "navy", "beige"})

# Category suitability per engine condition, used by outfit scoring.
CATEGORY_CONDITION_SUITABILITY: Dict[WeatherCondition, Dict[Category, float]] = {}


def _suitability_row(conditions: Sequence[WeatherCondition], values: Sequence[float]) -> None:
    categories = [
        Category.TOPS,
        Category.BOTTOMS,
        Category.DRESSES,
        Category.OUTERWEAR,
        Category.SHOES,
        Category.ACCESSORIES,
        Category.ACTIVEWEAR,
        Category.SWIMWEAR,
    ]
    row = dict(zip(categories, values))
    for condition in conditions:
        CATEGORY_CONDITION_SUITABILITY[condition] = row


_suitability_row([WeatherCondition.SUNNY, WeatherCondition.HOT], [1.0, 1.0, 1.0, 0.3, 0.9, 1.0, 1.0, 1.0])
_suitability_row([WeatherCondition.COLD, WeatherCondition.SNOWY], [1.0, 1.0, 0.7, 1.0, 1.0, 1.0, 0.8, 0.1])
_suitability_row([WeatherCondition.RAINY], [0.9, 0.9, 0.7, 1.0, 0.8, 0.9, 0.9, 0.2])
_suitability_row([WeatherCondition.WINDY], [0.9, 1.0, 0.8, 1.0, 1.0, 0.7, 0.9, 0.3])
_suitability_row([WeatherCondition.HUMID], [0.9, 0.9, 1.0, 0.4, 0.8, 0.9, 1.0, 1.0])
_suitability_row([WeatherCondition.DRY, WeatherCondition.CLOUDY], [1.0, 1.0, 1.0, 0.8, 1.0, 1.0, 1.0, 0.8])

MISSING_CATEGORY_SUITABILITY = 0.8


def category_suitability(category: Category, condition: WeatherCondition) -> float:
    row = CATEGORY_CONDITION_SUITABILITY.get(engine_condition(condition), {})
    return row.get(category, MISSING_CATEGORY_SUITABILITY)


# (season the item is tagged for, comparison, threshold, credit) per current season.
_SEASONAL_CREDITS: Dict[Season, List[Tuple[Season, str, float, float]]] = {
    Season.SPRING: [(Season.SUMMER, ">", 20.0, 0.6), (Season.WINTER, "<", 15.0, 0.4)],
    Season.SUMMER: [(Season.SPRING, "<", 25.0, 0.6), (Season.FALL, "<", 30.0, 0.3)],
    Season.FALL: [(Season.WINTER, "<", 15.0, 0.6), (Season.SPRING, ">", 15.0, 0.4)],
    Season.WINTER: [(Season.FALL, ">", 5.0, 0.5), (Season.SPRING, ">", 10.0, 0.3)],
}

MIN_SEASONAL_FLEXIBILITY = 0.3
ACCESSORY_LIMIT = 3


@dataclass
class RecommendedItems:
    tops: List[WardrobeItem] = field(default_factory=list)
    bottoms: List[WardrobeItem] = field(default_factory=list)
    dresses: List[WardrobeItem] = field(default_factory=list)
    outerwear: List[WardrobeItem] = field(default_factory=list)
    shoes: List[WardrobeItem] = field(default_factory=list)
    accessories: List[WardrobeItem] = field(default_factory=list)

    @property
    def has_recommendations(self) -> bool:
        return bool(self.tops or self.bottoms or self.dresses or self.shoes)

    @property
    def requires_outerwear(self) -> bool:
        return bool(self.outerwear)

    def pool(self, category: Category) -> List[WardrobeItem]:
        return {
            Category.TOPS: self.tops,
            Category.BOTTOMS: self.bottoms,
            Category.DRESSES: self.dresses,
            Category.OUTERWEAR: self.outerwear,
            Category.SHOES: self.shoes,
            Category.ACCESSORIES: self.accessories,
        }.get(category, [])


class WeatherSuitabilityModel:
    """Decides which items suit given weather and in what order to try them."""

    def __init__(self, rules: Optional[Sequence[KeywordRule]] = None) -> None:
        self.rules = list(rules) if rules is not None else list(KEYWORD_RULES)

    def classify(self, item: WardrobeItem) -> Set[Trait]:
        return {rule.trait for rule in self.rules if rule.matches(item)}

    def is_neutral_clothing(self, traits: Set[Trait]) -> bool:
        return Trait.WARM not in traits and Trait.LIGHT not in traits

    # -- seasons -------------------------------------------------------

    def seasonal_flexibility(self, item: WardrobeItem, season: Season, temperature: float) -> float:
        if not item.seasons or season in item.seasons:
            return 1.0
        score = 0.0
        for tagged, comparison, threshold, credit in _SEASONAL_CREDITS[season]:
            if tagged not in item.seasons:
                continue
            if (comparison == ">" and temperature > threshold) or (comparison == "<" and temperature < threshold):
                score += credit
        return score

    # -- temperature ---------------------------------------------------

    def suits_band(self, traits: Set[Trait], band: TemperatureBand) -> bool:
        neutral = self.is_neutral_clothing(traits)
        if band in (TemperatureBand.FREEZING, TemperatureBand.COLD):
            return Trait.WARM in traits or neutral
        if band is TemperatureBand.COOL:
            return neutral or Trait.LIGHT in traits
        if band is TemperatureBand.MILD:
            return True
        if band is TemperatureBand.WARM:
            return Trait.LIGHT in traits or neutral
        return Trait.LIGHT in traits

    def suits_temperature_range(self, item: WardrobeItem, traits: Set[Trait], day: DailyForecast) -> bool:
        if day.temperature_range > 15:
            return self.is_neutral_clothing(traits) or item.category is Category.OUTERWEAR
        return self.suits_band(traits, TemperatureBand.from_celsius(day.avg_temperature))

    # -- conditions ----------------------------------------------------

    def suits_condition(self, item: WardrobeItem, traits: Set[Trait], condition: WeatherCondition) -> bool:
        condition = engine_condition(condition)
        if condition is WeatherCondition.RAINY:
            return Trait.FORMAL_FOOTWEAR not in traits and Trait.DELICATE_FABRIC not in traits
        if condition is WeatherCondition.SNOWY:
            return Trait.WATER_RESISTANT in traits or Trait.WARM in traits
        if condition is WeatherCondition.SUNNY:
            return Trait.DARK_COLOR not in traits or Trait.LIGHT_FABRIC in traits
        if condition is WeatherCondition.WINDY:
            return Trait.FLOWING not in traits or item.category is Category.OUTERWEAR
        if condition is WeatherCondition.HOT:
            return Trait.BREATHABLE in traits and Trait.LIGHT_COLOR in traits
        if condition is WeatherCondition.COLD:
            return Trait.WARM in traits or item.category is Category.OUTERWEAR
        if condition is WeatherCondition.HUMID:
            return Trait.BREATHABLE in traits and Trait.HEAVY_FABRIC not in traits
        return True

    def suits_conditions(
        self, item: WardrobeItem, traits: Set[Trait], conditions: Sequence[WeatherCondition]
    ) -> bool:
        return all(self.suits_condition(item, traits, condition) for condition in conditions)

    # -- appropriateness -----------------------------------------------

    def is_item_appropriate(self, item: WardrobeItem, weather: CurrentWeather, season: Season) -> bool:
        if self.seasonal_flexibility(item, season, weather.temperature) < MIN_SEASONAL_FLEXIBILITY:
            return False
        traits = self.classify(item)
        if not self.suits_band(traits, TemperatureBand.from_celsius(weather.temperature)):
            return False
        return self.suits_conditions(item, traits, weather.outfit_conditions)

    def is_item_appropriate_for_forecast(self, item: WardrobeItem, day: DailyForecast, season: Season) -> bool:
        if self.seasonal_flexibility(item, season, day.avg_temperature) < MIN_SEASONAL_FLEXIBILITY:
            return False
        traits = self.classify(item)
        if not self.suits_temperature_range(item, traits, day):
            return False
        return self.suits_conditions(item, traits, day.outfit_conditions)

    def filter_items(
        self, items: Iterable[WardrobeItem], weather: CurrentWeather, season: Season
    ) -> List[WardrobeItem]:
        return [item for item in items if self.is_item_appropriate(item, weather, season)]

    def filter_items_for_forecast(
        self, items: Iterable[WardrobeItem], day: DailyForecast, season: Season
    ) -> List[WardrobeItem]:
        return [item for item in items if self.is_item_appropriate_for_forecast(item, day, season)]

    # -- ranking -------------------------------------------------------

    def _band_fit(self, item: WardrobeItem, traits: Set[Trait], band: TemperatureBand) -> float:
        neutral = self.is_neutral_clothing(traits)
        if band in (TemperatureBand.FREEZING, TemperatureBand.COLD):
            perfect = Trait.WARM in traits and item.category is not Category.SHOES
            good = Trait.WARM in traits or neutral
        elif band is TemperatureBand.HOT:
            perfect = Trait.LIGHT in traits and Trait.BREATHABLE in traits
            good = Trait.LIGHT in traits or (neutral and Trait.BREATHABLE in traits)
        elif band is TemperatureBand.WARM:
            perfect = False
            good = Trait.LIGHT in traits or (neutral and Trait.BREATHABLE in traits)
        elif band is TemperatureBand.MILD:
            perfect = neutral
            good = True
        else:
            perfect = False
            good = True
        if perfect:
            return 4.0
        if good:
            return 2.0
        return 1.0

    def versatility(self, item: WardrobeItem) -> float:
        score = 0.0
        if any(color.name.lower() in VERSATILE_COLORS for color in item.colors):
            score += 0.5
        if not item.patterns or Pattern.SOLID in item.patterns:
            score += 0.3
        if item.category in (Category.TOPS, Category.BOTTOMS):
            score += 0.2
        return score

    def item_score(
        self, item: WardrobeItem, band: TemperatureBand, conditions: Sequence[WeatherCondition]
    ) -> float:
        traits = self.classify(item)
        score = self._band_fit(item, traits, band)
        condition_votes = [1.0 if self.suits_condition(item, traits, c) else -1.0 for c in conditions]
        score += sum(condition_votes) / max(len(condition_votes), 1) * 3.0
        score += self.versatility(item) * 2.0
        if item.is_favorite:
            score += 1.0
        if item.is_frequently_worn:
            score -= 0.5
        return score

    def prioritize(
        self, items: Sequence[WardrobeItem], band: TemperatureBand, conditions: Sequence[WeatherCondition]
    ) -> List[WardrobeItem]:
        return sorted(items, key=lambda item: self.item_score(item, band, conditions), reverse=True)

    def outerwear_for(
        self, items: Sequence[WardrobeItem], temperature: float, conditions: Sequence[WeatherCondition]
    ) -> List[WardrobeItem]:
        rainy = WeatherCondition.RAINY in conditions
        windy = WeatherCondition.WINDY in conditions
        if temperature >= 20 and not rainy and not windy:
            return []

        def keep(item: WardrobeItem) -> bool:
            traits = self.classify(item)
            if temperature < 5:
                return Trait.HEAVY_OUTERWEAR in traits
            if temperature < 15:
                return Trait.MEDIUM_OUTERWEAR in traits or Trait.HEAVY_OUTERWEAR in traits
            if rainy:
                return Trait.WATER_RESISTANT in traits
            if windy:
                return Trait.WIND_RESISTANT in traits
            return Trait.LIGHT_OUTERWEAR in traits or Trait.MEDIUM_OUTERWEAR in traits

        return sorted((item for item in items if keep(item)), key=lambda item: item.times_worn)

    def footwear_score(self, item: WardrobeItem, temperature: float, conditions: Sequence[WeatherCondition]) -> float:
        traits = self.classify(item)
        score = 1.0
        if WeatherCondition.RAINY in conditions and Trait.WEATHER_RESISTANT_FOOTWEAR in traits:
            score += 2.0
        if temperature > 25 and Trait.BREATHABLE_FOOTWEAR in traits:
            score += 1.5
        if temperature < 5 and Trait.WARM_FOOTWEAR in traits:
            score += 2.0
        if item.is_favorite:
            score += 0.5
        return score

    def shoes_for(
        self, items: Sequence[WardrobeItem], temperature: float, conditions: Sequence[WeatherCondition]
    ) -> List[WardrobeItem]:
        def keep(item: WardrobeItem) -> bool:
            traits = self.classify(item)
            if WeatherCondition.RAINY in conditions or WeatherCondition.SNOWY in conditions:
                return Trait.WEATHER_RESISTANT_FOOTWEAR in traits
            if temperature > 25:
                return Trait.BREATHABLE_FOOTWEAR in traits
            if temperature < 5:
                return Trait.WARM_FOOTWEAR in traits
            return True

        kept = [item for item in items if keep(item)]
        return sorted(kept, key=lambda item: self.footwear_score(item, temperature, conditions), reverse=True)

    def accessories_for(
        self, items: Sequence[WardrobeItem], conditions: Sequence[WeatherCondition]
    ) -> List[WardrobeItem]:
        relevance = [
            (WeatherCondition.SUNNY, Trait.SUN_PROTECTION),
            (WeatherCondition.COLD, Trait.WARM_ACCESSORY),
            (WeatherCondition.RAINY, Trait.WATER_RESISTANT_ACCESSORY),
            (WeatherCondition.WINDY, Trait.SECURE_ACCESSORY),
        ]

        def keep(item: WardrobeItem) -> bool:
            traits = self.classify(item)
            if any(condition in conditions and trait in traits for condition, trait in relevance):
                return True
            return item.category is Category.ACCESSORIES

        return [item for item in items if keep(item)][:ACCESSORY_LIMIT]

    def _recommend(
        self,
        appropriate: Sequence[WardrobeItem],
        temperature: float,
        conditions: Sequence[WeatherCondition],
    ) -> RecommendedItems:
        grouped: Dict[Category, List[WardrobeItem]] = {}
        for item in appropriate:
            grouped.setdefault(item.category, []).append(item)
        band = TemperatureBand.from_celsius(temperature)
        recommended = RecommendedItems(
            tops=self.prioritize(grouped.get(Category.TOPS, []), band, conditions),
            bottoms=self.prioritize(grouped.get(Category.BOTTOMS, []), band, conditions),
            dresses=self.prioritize(grouped.get(Category.DRESSES, []), band, conditions),
            outerwear=self.outerwear_for(grouped.get(Category.OUTERWEAR, []), temperature, conditions),
            shoes=self.shoes_for(grouped.get(Category.SHOES, []), temperature, conditions),
            accessories=self.accessories_for(grouped.get(Category.ACCESSORIES, []), conditions),
        )
        logger.debug(
            "recommended %d tops, %d bottoms, %d dresses, %d shoes at %s",
            len(recommended.tops),
            len(recommended.bottoms),
            len(recommended.dresses),
            len(recommended.shoes),
            band.value,
        )
        return recommended

    def recommended_items(
        self, items: Sequence[WardrobeItem], weather: CurrentWeather, season: Season
    ) -> RecommendedItems:
        appropriate = self.filter_items(items, weather, season)
        return self._recommend(appropriate, weather.temperature, weather.outfit_conditions)

    def recommended_items_for_forecast(
        self, items: Sequence[WardrobeItem], day: DailyForecast, season: Season
    ) -> RecommendedItems:
        """Rank a day's forecast-appropriate items as if at its average temperature."""

        appropriate = self.filter_items_for_forecast(items, day, season)
        return self._recommend(appropriate, day.avg_temperature, day.outfit_conditions)


__all__ = [
    "TemperatureBand",
    "Trait",
    "KeywordRule",
    "KEYWORD_RULES",
    "CATEGORY_CONDITION_SUITABILITY",
    "category_suitability",
    "RecommendedItems",
    "WeatherSuitabilityModel",
]
