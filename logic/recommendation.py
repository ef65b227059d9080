"""End-to-end outfit suggestions and multi-day forecast planning.

The pipeline wires the weather model, the combination generator and the
scoring engine together. Collaborators are injected so tests can substitute
any of them; :meth:`OutfitRecommender.from_config` builds the default set.
"""

from __future__ import annotations

import dataclasses
import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence

from logic.errors import EmptyWardrobeError, MissingUserError, NoSuitableItemsError
from logic.outfit_builder import (
    AD_HOC_LIMITS,
    FORECAST_LIMITS,
    CategoryPools,
    OutfitCombinationGenerator,
    OutfitTemplate,
    name_forecast_outfit,
    prefilter_items,
)
from logic.outfit_scoring import OutfitScoringEngine, ScoredOutfit, grade_for
from logic.weather_suitability import WeatherSuitabilityModel
from models.preferences import UserPreferences
from models.taxonomy import Category, Formality, Season, WeatherCondition
from models.wardrobe_item import WardrobeItem
from models.weather import CurrentWeather, DailyForecast, WeatherForecast
from stylist_app.config import EngineConfig
from stylist_app.logging_config import log_event
from tools.observability import instrument_operation
from tools.weather_provider import WeatherProvider, WeatherProviderError

logger = logging.getLogger(__name__)

CORE_CATEGORIES = (Category.TOPS, Category.BOTTOMS, Category.DRESSES, Category.SHOES)
FORECAST_OCCASIONS = ["Daily Wear"]


@dataclass(frozen=True)
class DayPlan:
    day: DailyForecast
    suggestions: List[ScoredOutfit] = field(default_factory=list)


@dataclass(frozen=True)
class WeekSummary:
    average_score: float
    days_planned: int
    total_suggestions: int
    dominant_colors: List[str]
    recommended_formalities: List[Formality]

    @property
    def average_grade(self) -> str:
        return grade_for(self.average_score)


@dataclass(frozen=True)
class ForecastPlan:
    days: List[DayPlan]
    summary: Optional[WeekSummary]

    def suggestions_for(self, day: date) -> List[ScoredOutfit]:
        for plan in self.days:
            if plan.day.day == day:
                return plan.suggestions
        return []


def summarize_week(days: Sequence[DayPlan]) -> Optional[WeekSummary]:
    """Aggregate a plan; ``None`` when no day produced a suggestion."""

    suggestions = [entry for plan in days for entry in plan.suggestions]
    if not suggestions:
        return None
    colors = Counter(
        color.name for entry in suggestions for item in entry.outfit.wardrobe_items for color in item.colors
    )
    formalities = Counter(entry.outfit.formality for entry in suggestions)
    return WeekSummary(
        average_score=sum(entry.score.total for entry in suggestions) / len(suggestions),
        days_planned=sum(1 for plan in days if plan.suggestions),
        total_suggestions=len(suggestions),
        dominant_colors=[name for name, _ in colors.most_common(3)],
        recommended_formalities=[level for level, _ in formalities.most_common(2)],
    )


def fetch_weather_or_none(provider: Optional[WeatherProvider], location: Optional[str]) -> Optional[CurrentWeather]:
    """Fetch current weather, degrading to ``None`` when it is unavailable."""

    if provider is None or not location:
        return None
    try:
        return provider.get_current_weather(location)
    except (WeatherProviderError, ValueError) as exc:
        logger.warning("Weather unavailable, continuing without it: %s", exc)
        return None


class OutfitRecommender:
    """Produces ranked outfit suggestions for one user's wardrobe."""

    def __init__(
        self,
        weather_model: Optional[WeatherSuitabilityModel] = None,
        generator: Optional[OutfitCombinationGenerator] = None,
        scoring_engine: Optional[OutfitScoringEngine] = None,
        forecast_generator: Optional[OutfitCombinationGenerator] = None,
        suggestion_limit: int = 10,
        forecast_days: int = 5,
        forecast_top_n: int = 5,
    ) -> None:
        self.weather_model = weather_model or WeatherSuitabilityModel()
        self.generator = generator or OutfitCombinationGenerator(limits=AD_HOC_LIMITS)
        self.forecast_generator = forecast_generator or OutfitCombinationGenerator(
            limits=FORECAST_LIMITS, deterministic=True
        )
        self.scoring_engine = scoring_engine or OutfitScoringEngine()
        self.suggestion_limit = suggestion_limit
        self.forecast_days = forecast_days
        self.forecast_top_n = forecast_top_n

    @classmethod
    def from_config(cls, config: EngineConfig) -> "OutfitRecommender":
        ad_hoc = dataclasses.replace(AD_HOC_LIMITS, max_outfits=config.max_outfits)
        forecast = dataclasses.replace(FORECAST_LIMITS, max_outfits=config.forecast_max_outfits)
        return cls(
            generator=OutfitCombinationGenerator(rng=random.Random(config.random_seed), limits=ad_hoc),
            forecast_generator=OutfitCombinationGenerator(limits=forecast, deterministic=True),
            suggestion_limit=config.suggestion_limit,
            forecast_days=config.forecast_days,
            forecast_top_n=config.forecast_top_n,
        )

    def _weather_pools(
        self, candidates: List[WardrobeItem], weather: CurrentWeather, season: Season
    ) -> CategoryPools:
        recommended = self.weather_model.recommended_items(candidates, weather, season)
        pools = CategoryPools.from_recommendations(recommended)
        unfiltered = CategoryPools.from_items(candidates)
        fallbacks = []
        for category in CORE_CATEGORIES:
            pool = pools.pool(category)
            if not pool and unfiltered.pool(category):
                pool.extend(unfiltered.pool(category))
                fallbacks.append(category.value)
        if fallbacks:
            log_event(
                logger,
                logging.WARNING,
                "weather_filter_fallback",
                categories=fallbacks,
                temperature=weather.temperature,
            )
        return pools

    @instrument_operation("suggest_outfits")
    def suggest(
        self,
        user_id: Optional[str],
        wardrobe: Sequence[WardrobeItem],
        preferences: Optional[UserPreferences] = None,
        formality: Formality = Formality.CASUAL,
        occasions: Optional[Sequence[str]] = None,
        conditions: Optional[Sequence[WeatherCondition]] = None,
        weather: Optional[CurrentWeather] = None,
        season: Optional[Season] = None,
        limit: Optional[int] = None,
    ) -> List[ScoredOutfit]:
        """Return the best outfits for ``formality``; an empty list means no suggestions."""

        if not user_id:
            raise MissingUserError()
        if not wardrobe:
            raise EmptyWardrobeError()

        season = season or Season.for_date()
        candidates = prefilter_items(wardrobe, formality, season=None if weather else season)
        if not candidates:
            raise NoSuitableItemsError()

        if weather is not None:
            active_conditions = list(weather.outfit_conditions)
            pools = self._weather_pools(candidates, weather, season)
        else:
            active_conditions = list(conditions or [])
            pools = CategoryPools.from_items(candidates)

        template = OutfitTemplate(
            user_id=user_id,
            formality=formality,
            conditions=active_conditions,
            occasions=list(occasions or []),
            seasons=[season],
        )
        generated = self.generator.generate(pools, template)
        ranked = self.scoring_engine.rank(generated.outfits, preferences, season)
        top = ranked[: limit if limit is not None else self.suggestion_limit]
        log_event(
            logger,
            logging.INFO,
            "outfits_suggested",
            user_id=user_id,
            generated=len(generated.outfits),
            returned=len(top),
            weather_driven=weather is not None,
        )
        return top

    def plan_day(
        self,
        user_id: str,
        wardrobe: Sequence[WardrobeItem],
        preferences: Optional[UserPreferences],
        day: DailyForecast,
        season: Season,
    ) -> DayPlan:
        active = [item for item in wardrobe if not item.is_archived]
        recommended = self.weather_model.recommended_items_for_forecast(active, day, season)
        if not recommended.has_recommendations:
            logger.info("No forecast-appropriate items for %s", day.day.isoformat())
            return DayPlan(day=day)

        template = OutfitTemplate(
            user_id=user_id,
            formality=None,
            conditions=day.outfit_conditions,
            occasions=list(FORECAST_OCCASIONS),
            seasons=[season],
            namer=lambda items: name_forecast_outfit(items, day),
        )
        layered = day.temp_min < 15 or day.precipitation_chance > 30
        generated = self.forecast_generator.generate(
            CategoryPools.from_recommendations(recommended),
            template,
            dress_outerwear=layered,
            separates_outerwear=layered or day.wind_speed > 20,
        )
        ranked = self.scoring_engine.rank(generated.outfits, preferences, season)
        return DayPlan(day=day, suggestions=ranked[: self.forecast_top_n])

    @instrument_operation("plan_forecast")
    def plan_forecast(
        self,
        user_id: Optional[str],
        wardrobe: Sequence[WardrobeItem],
        preferences: Optional[UserPreferences],
        forecast: WeatherForecast,
        season: Optional[Season] = None,
    ) -> ForecastPlan:
        if not user_id:
            raise MissingUserError()
        if not wardrobe:
            raise EmptyWardrobeError()

        season = season or Season.for_date()
        days = [
            self.plan_day(user_id, wardrobe, preferences, day, season)
            for day in forecast.next_days(self.forecast_days)
        ]
        summary = summarize_week(days)
        per_day: Dict[str, int] = {plan.day.day.isoformat(): len(plan.suggestions) for plan in days}
        log_event(logger, logging.INFO, "forecast_planned", user_id=user_id, suggestions_per_day=per_day)
        return ForecastPlan(days=days, summary=summary)


__all__ = [
    "DayPlan",
    "ForecastPlan",
    "OutfitRecommender",
    "WeekSummary",
    "fetch_weather_or_none",
    "summarize_week",
]
