"""Combinatorial outfit assembly with transparent diagnostics."""
from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from models.formality import dominant_formality
from models.outfit import Outfit, OutfitItem
from models.taxonomy import Category, Formality, OutfitCreator, Season, WeatherCondition
from models.wardrobe_item import WardrobeItem
from models.weather import DailyForecast

logger = logging.getLogger(__name__)

OPTIONAL_CATEGORIES = (Category.ACCESSORIES, Category.OUTERWEAR)
OUTERWEAR_TRIGGERS = (WeatherCondition.COLD, WeatherCondition.RAINY)

Namer = Callable[[Sequence[WardrobeItem]], str]


@dataclass(frozen=True)
class GenerationLimits:
    """Prefix bounds per category and the overall outfit cap."""

    max_outfits: int
    dresses: int
    dress_shoes: int
    tops: int
    bottoms: int
    shoes: int


AD_HOC_LIMITS = GenerationLimits(max_outfits=50, dresses=10, dress_shoes=5, tops=15, bottoms=10, shoes=5)
FORECAST_LIMITS = GenerationLimits(max_outfits=10, dresses=3, dress_shoes=3, tops=4, bottoms=3, shoes=2)


@dataclass
class CategoryPools:
    """Ordered candidate lists per category, most preferred first."""

    tops: List[WardrobeItem] = field(default_factory=list)
    bottoms: List[WardrobeItem] = field(default_factory=list)
    dresses: List[WardrobeItem] = field(default_factory=list)
    shoes: List[WardrobeItem] = field(default_factory=list)
    outerwear: List[WardrobeItem] = field(default_factory=list)
    accessories: List[WardrobeItem] = field(default_factory=list)

    @classmethod
    def from_items(cls, items: Iterable[WardrobeItem]) -> "CategoryPools":
        pools = cls()
        for item in items:
            target = pools.pool(item.category)
            if target is not None:
                target.append(item)
        return pools

    @classmethod
    def from_recommendations(cls, recommended) -> "CategoryPools":
        return cls(
            tops=list(recommended.tops),
            bottoms=list(recommended.bottoms),
            dresses=list(recommended.dresses),
            shoes=list(recommended.shoes),
            outerwear=list(recommended.outerwear),
            accessories=list(recommended.accessories),
        )

    def pool(self, category: Category) -> Optional[List[WardrobeItem]]:
        return {
            Category.TOPS: self.tops,
            Category.BOTTOMS: self.bottoms,
            Category.DRESSES: self.dresses,
            Category.SHOES: self.shoes,
            Category.OUTERWEAR: self.outerwear,
            Category.ACCESSORIES: self.accessories,
        }.get(category)

    def counts(self) -> Dict[str, int]:
        return {
            "tops": len(self.tops),
            "bottoms": len(self.bottoms),
            "dresses": len(self.dresses),
            "shoes": len(self.shoes),
            "outerwear": len(self.outerwear),
            "accessories": len(self.accessories),
        }


@dataclass(frozen=True)
class OutfitTemplate:
    """Fields stamped onto every generated outfit.

    ``formality`` of ``None`` takes the most common formality of the items.
    """

    user_id: str
    formality: Optional[Formality]
    conditions: List[WeatherCondition] = field(default_factory=list)
    occasions: List[str] = field(default_factory=list)
    seasons: List[Season] = field(default_factory=list)
    namer: Optional[Namer] = None


@dataclass(frozen=True)
class GenerationResult:
    outfits: List[Outfit]
    diagnostics: Dict[str, object]


def prefilter_items(
    items: Iterable[WardrobeItem], formality: Formality, season: Optional[Season] = None
) -> List[WardrobeItem]:
    """Drop archived items, items unfit for ``formality`` and, when given, out-of-season items."""

    kept = []
    for item in items:
        if item.is_archived or not item.is_appropriate_for_formality(formality):
            continue
        if season is not None and not item.is_appropriate_for_season(season):
            continue
        kept.append(item)
    return kept


def name_outfit(items: Sequence[WardrobeItem], formality: Formality, occasions: Sequence[str]) -> str:
    """Build a display name from colors, occasion and the garments involved."""

    primary_colors = [item.primary_color.name for item in items if item.primary_color][:2]
    color_part = " & ".join(primary_colors) + " " if primary_colors else ""
    occasion = occasions[0] if occasions else formality.display_name
    categories = {item.category for item in items}
    if Category.DRESSES in categories:
        return f"{color_part}{occasion} Dress Look"
    if Category.OUTERWEAR in categories:
        return f"{color_part}Layered {occasion} Outfit"
    return f"{color_part}{occasion} Ensemble"


def forecast_weather_prefix(day: DailyForecast) -> str:
    if day.precipitation_chance > 50:
        return "Rainy Day"
    if day.temp_max > 25:
        return "Warm Weather"
    if day.temp_min < 10:
        return "Cool Weather"
    return "Perfect Weather"


def name_forecast_outfit(items: Sequence[WardrobeItem], day: DailyForecast) -> str:
    prefix = forecast_weather_prefix(day)
    elements: List[str] = []
    primary_colors = [item.primary_color.name for item in items if item.primary_color][:2]
    if primary_colors:
        elements.append(" & ".join(primary_colors))
    categories = {item.category for item in items}
    if Category.DRESSES in categories:
        elements.append("Dress")
    elif Category.OUTERWEAR in categories:
        elements.append("Layered")
    if not elements:
        return f"{prefix} {day.weekday_name} Look"
    return f"{prefix} {' & '.join(elements)} Outfit"


class OutfitCombinationGenerator:
    """Enumerates dress-based then separates-based outfits under a cap.

    Optional pieces are chosen with the injected ``rng``; with
    ``deterministic=True`` the first (most recommended) piece is taken instead.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        limits: GenerationLimits = AD_HOC_LIMITS,
        deterministic: bool = False,
    ) -> None:
        self.rng = rng or random.Random(42)
        self.limits = limits
        self.deterministic = deterministic

    def _pick(self, pool: Sequence[WardrobeItem]) -> Optional[WardrobeItem]:
        if not pool:
            return None
        if self.deterministic:
            return pool[0]
        return self.rng.choice(list(pool))

    def _augment(
        self, core: List[WardrobeItem], pools: CategoryPools, add_outerwear: bool
    ) -> List[OutfitItem]:
        entries = [OutfitItem.for_item(item) for item in core]
        accessory = self._pick(pools.accessories)
        if accessory is not None:
            entries.append(OutfitItem.for_item(accessory, is_optional=True))
        if add_outerwear:
            outerwear = self._pick(pools.outerwear)
            if outerwear is not None:
                entries.append(OutfitItem.for_item(outerwear, is_optional=True))
        return entries

    def _build(self, entries: List[OutfitItem], template: OutfitTemplate) -> Outfit:
        items = [entry.item for entry in entries]
        formality = template.formality or dominant_formality(items) or Formality.CASUAL
        if template.namer is not None:
            name = template.namer(items)
        else:
            name = name_outfit(items, formality, template.occasions)
        return Outfit(
            user_id=template.user_id,
            name=name,
            items=entries,
            occasions=list(template.occasions),
            seasons=list(template.seasons),
            formality=formality,
            weather_conditions=list(template.conditions),
            created_by=OutfitCreator.AI,
        )

    def generate(
        self,
        pools: CategoryPools,
        template: OutfitTemplate,
        dress_outerwear: Optional[bool] = None,
        separates_outerwear: Optional[bool] = None,
        limits: Optional[GenerationLimits] = None,
    ) -> GenerationResult:
        """Generate at most ``limits.max_outfits`` outfits from ``pools``.

        Outerwear is layered on when the template's conditions include cold or
        rain unless the caller decides per strategy.
        """

        limits = limits or self.limits
        wants_outerwear = any(condition in OUTERWEAR_TRIGGERS for condition in template.conditions)
        if dress_outerwear is None:
            dress_outerwear = wants_outerwear
        if separates_outerwear is None:
            separates_outerwear = wants_outerwear

        outfits: List[Outfit] = []
        diagnostics: Dict[str, object] = {
            "pool_counts": pools.counts(),
            "cap": limits.max_outfits,
            "dress_based": 0,
            "separates_based": 0,
            "capped": False,
        }
        if limits.max_outfits <= 0:
            return GenerationResult(outfits=outfits, diagnostics=diagnostics)

        for dress in pools.dresses[: limits.dresses]:
            for shoe in pools.shoes[: limits.dress_shoes]:
                entries = self._augment([dress, shoe], pools, dress_outerwear)
                outfits.append(self._build(entries, template))
                diagnostics["dress_based"] = int(diagnostics["dress_based"]) + 1
                if len(outfits) >= limits.max_outfits:
                    diagnostics["capped"] = True
                    logger.info("Outfit cap %s reached during dress combinations", limits.max_outfits)
                    return GenerationResult(outfits=outfits, diagnostics=diagnostics)

        for top in pools.tops[: limits.tops]:
            for bottom in pools.bottoms[: limits.bottoms]:
                for shoe in pools.shoes[: limits.shoes]:
                    entries = self._augment([top, bottom, shoe], pools, separates_outerwear)
                    outfits.append(self._build(entries, template))
                    diagnostics["separates_based"] = int(diagnostics["separates_based"]) + 1
                    if len(outfits) >= limits.max_outfits:
                        diagnostics["capped"] = True
                        logger.info("Outfit cap %s reached during separates combinations", limits.max_outfits)
                        return GenerationResult(outfits=outfits, diagnostics=diagnostics)

        logger.info("Generated %s outfit combinations", len(outfits))
        return GenerationResult(outfits=outfits, diagnostics=diagnostics)


__all__ = [
    "AD_HOC_LIMITS",
    "FORECAST_LIMITS",
    "CategoryPools",
    "GenerationLimits",
    "GenerationResult",
    "OutfitCombinationGenerator",
    "OutfitTemplate",
    "forecast_weather_prefix",
    "name_forecast_outfit",
    "name_outfit",
    "prefilter_items",
]
