"""Weighted scoring and ranking of candidate outfits."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from models.color_theory import ColorHarmonyAnalyzer
from models.formality import FormalityCompatibilityModel
from models.outfit import Outfit
from models.preferences import UserPreferences
from models.taxonomy import ADJACENT_SEASONS, Formality, Season, WeatherCondition, normalize_color_name
from models.wardrobe_item import WardrobeItem
from logic.weather_suitability import category_suitability

logger = logging.getLogger(__name__)

WEIGHTS = {
    "color_harmony": 40.0,
    "formality_match": 30.0,
    "weather_appropriate": 20.0,
    "user_preference": 10.0,
}

# Lower bound of each grade, best first.
GRADE_TABLE = [
    (90.0, "A+"),
    (85.0, "A"),
    (80.0, "A-"),
    (75.0, "B+"),
    (70.0, "B"),
    (65.0, "B-"),
    (60.0, "C+"),
    (55.0, "C"),
    (50.0, "C-"),
]
GRADE_ORDER = [grade for _, grade in GRADE_TABLE] + ["D"]

NO_COLOR_HARMONY = 0.5
NEUTRAL_PREFERENCE = 0.5


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def grade_for(total: float) -> str:
    for lower, grade in GRADE_TABLE:
        if total >= lower:
            return grade
    return "D"


@dataclass(frozen=True)
class OutfitScore:
    color_harmony: float
    formality_match: float
    weather_appropriate: float
    user_preference: float

    def __post_init__(self) -> None:
        for name in WEIGHTS:
            object.__setattr__(self, name, _clamp(getattr(self, name)))

    @property
    def breakdown(self) -> Dict[str, float]:
        """Points contributed by each sub-score, out of its weight."""

        return {name: getattr(self, name) * weight for name, weight in WEIGHTS.items()}

    @property
    def total(self) -> float:
        return sum(self.breakdown.values())

    @property
    def grade(self) -> str:
        return grade_for(self.total)

    @property
    def is_high_quality(self) -> bool:
        return self.total >= 80

    @property
    def needs_improvement(self) -> bool:
        return self.total < 60


@dataclass(frozen=True)
class ScoredOutfit:
    outfit: Outfit
    score: OutfitScore
    diagnostics: Dict[str, object] = field(default_factory=dict)


class OutfitScoringEngine:
    """Combines color, formality, weather and preference fit into one score."""

    def __init__(
        self,
        color_analyzer: Optional[ColorHarmonyAnalyzer] = None,
        formality_model: Optional[FormalityCompatibilityModel] = None,
    ) -> None:
        self.color_analyzer = color_analyzer or ColorHarmonyAnalyzer()
        self.formality_model = formality_model or FormalityCompatibilityModel()

    def color_harmony(self, items: Sequence[WardrobeItem]) -> float:
        colors = [color for item in items for color in item.colors]
        if not colors:
            return NO_COLOR_HARMONY
        patterns = [pattern for item in items for pattern in item.patterns]
        harmony = self.color_analyzer.set_harmony(colors)
        pattern_score = self.color_analyzer.pattern_compatibility(patterns)
        return harmony * 0.7 + pattern_score * 0.3

    def seasonal_appropriateness(self, item: WardrobeItem, season: Season) -> float:
        if not item.seasons:
            return 0.8
        if season in item.seasons:
            return 1.0
        if any(adjacent in item.seasons for adjacent in ADJACENT_SEASONS[season]):
            return 0.6
        return 0.3

    def weather_appropriateness(
        self, items: Sequence[WardrobeItem], conditions: Sequence[WeatherCondition], season: Season
    ) -> float:
        if not items:
            return 0.0
        total = 0.0
        for item in items:
            condition_factor = 1.0
            for condition in conditions:
                condition_factor *= category_suitability(item.category, condition)
            total += self.seasonal_appropriateness(item, season) * condition_factor
        return total / len(items)

    def color_preference(self, items: Sequence[WardrobeItem], preferences: UserPreferences) -> float:
        names = [normalize_color_name(color.name) for item in items for color in item.colors]
        if not names:
            return NEUTRAL_PREFERENCE
        preferred = {normalize_color_name(c) for c in preferences.colors.preferred}
        avoided = {normalize_color_name(c) for c in preferences.colors.avoided}
        neutral = {normalize_color_name(c) for c in preferences.colors.neutral}
        score = NEUTRAL_PREFERENCE
        for name in names:
            if name in preferred:
                score += 0.3
            elif name in avoided:
                score -= 0.4
            elif name in neutral:
                score += 0.1
        return _clamp(score)

    def brand_preference(self, items: Sequence[WardrobeItem], preferences: UserPreferences) -> float:
        preferred = {brand.lower() for brand in preferences.brands}
        if not preferred or not items:
            return NEUTRAL_PREFERENCE
        matching = sum(1 for item in items if item.brand and item.brand.lower() in preferred)
        return NEUTRAL_PREFERENCE + 0.5 * matching / len(items)

    def user_preference(self, items: Sequence[WardrobeItem], preferences: Optional[UserPreferences]) -> float:
        if preferences is None:
            return NEUTRAL_PREFERENCE
        scores = [self.color_preference(items, preferences)]
        if preferences.style is not None:
            scores.append(self.formality_model.outfit_formality_score(items, preferences.style.formality))
        scores.append(self.brand_preference(items, preferences))
        return sum(scores) / len(scores)

    def score(
        self,
        items: Sequence[WardrobeItem],
        target_formality: Formality,
        conditions: Sequence[WeatherCondition] = (),
        preferences: Optional[UserPreferences] = None,
        season: Optional[Season] = None,
    ) -> OutfitScore:
        season = season or Season.for_date()
        result = OutfitScore(
            color_harmony=self.color_harmony(items),
            formality_match=self.formality_model.outfit_formality_score(items, target_formality),
            weather_appropriate=self.weather_appropriateness(items, conditions, season),
            user_preference=self.user_preference(items, preferences),
        )
        logger.debug("scored %d items -> %.1f (%s)", len(items), result.total, result.grade)
        return result

    def score_outfit(
        self,
        outfit: Outfit,
        preferences: Optional[UserPreferences] = None,
        season: Optional[Season] = None,
        conditions: Optional[Sequence[WeatherCondition]] = None,
    ) -> ScoredOutfit:
        score = self.score(
            outfit.wardrobe_items,
            outfit.formality,
            outfit.weather_conditions if conditions is None else conditions,
            preferences,
            season,
        )
        return ScoredOutfit(outfit=outfit.replace(ai_score=score.total), score=score)

    def rank(
        self,
        outfits: Sequence[Outfit],
        preferences: Optional[UserPreferences] = None,
        season: Optional[Season] = None,
        conditions: Optional[Sequence[WeatherCondition]] = None,
    ) -> List[ScoredOutfit]:
        """Score every outfit and sort best first; ties keep input order."""

        scored = [self.score_outfit(outfit, preferences, season, conditions) for outfit in outfits]
        return sorted(scored, key=lambda entry: entry.score.total, reverse=True)


__all__ = [
    "WEIGHTS",
    "GRADE_TABLE",
    "GRADE_ORDER",
    "grade_for",
    "OutfitScore",
    "ScoredOutfit",
    "OutfitScoringEngine",
]
