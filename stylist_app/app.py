"""Engine bootstrap."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from logic.recommendation import ForecastPlan, OutfitRecommender, fetch_weather_or_none
from logic.outfit_scoring import ScoredOutfit
from memory.outfit_store import OutfitStore
from memory.preference_learning import OutfitInsights, PreferenceLearningService
from memory.user_profile import PreferenceStore, build_preference_store
from models.taxonomy import Formality, Season
from models.wardrobe_item import WardrobeItem
from stylist_app.config import EngineConfig
from stylist_app.logging_config import configure_logging, get_logger, log_event, operation_context
from tools.weather_provider import OpenWeatherProvider, WeatherProvider, WeatherProviderError

LOGGER = get_logger(__name__)


class StylistApp:
    """Wires together the stores, the recommender and the feedback loop."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        weather_provider: Optional[WeatherProvider] = None,
        preference_store: Optional[PreferenceStore] = None,
        outfit_store: Optional[OutfitStore] = None,
        recommender: Optional[OutfitRecommender] = None,
    ) -> None:
        self.config = config or EngineConfig.from_env()
        configure_logging(self.config.log_level)

        if weather_provider is None and self.config.openweather_api_key:
            weather_provider = OpenWeatherProvider(self.config.openweather_api_key)
        self.weather_provider = weather_provider
        self.preference_store = preference_store or build_preference_store(self.config.preference_store_path)
        self.outfit_store = outfit_store or OutfitStore()
        self.recommender = recommender or OutfitRecommender.from_config(self.config)
        self.learning = PreferenceLearningService(self.preference_store, self.outfit_store)

    def suggest_outfits(
        self,
        user_id: str,
        wardrobe: Sequence[WardrobeItem],
        formality: Formality = Formality.CASUAL,
        occasions: Optional[Sequence[str]] = None,
        location: Optional[str] = None,
        season: Optional[Season] = None,
    ) -> List[ScoredOutfit]:
        """Suggest outfits using stored preferences and, when reachable, live weather.

        Suggestions are kept in the outfit store so they can be rated by id.
        """

        with operation_context("app:suggest_outfits", user_id=user_id) as correlation_id:
            preferences = self.preference_store.get(user_id) if user_id else None
            weather = fetch_weather_or_none(self.weather_provider, location or self.config.default_location)
            suggestions = self.recommender.suggest(
                user_id,
                wardrobe,
                preferences=preferences,
                formality=formality,
                occasions=occasions,
                weather=weather,
                season=season,
            )
            for entry in suggestions:
                self.outfit_store.save(entry.outfit)
            log_event(
                LOGGER,
                logging.INFO,
                "app_suggestions_ready",
                correlation_id=correlation_id,
                count=len(suggestions),
                weather_available=weather is not None,
            )
            return suggestions

    def plan_week(
        self,
        user_id: str,
        wardrobe: Sequence[WardrobeItem],
        location: Optional[str] = None,
        season: Optional[Season] = None,
    ) -> Optional[ForecastPlan]:
        """Plan outfits for the upcoming days; ``None`` when no forecast is available."""

        location = location or self.config.default_location
        if self.weather_provider is None or not location:
            LOGGER.warning("No weather provider or location configured; cannot plan from a forecast")
            return None
        with operation_context("app:plan_week", user_id=user_id):
            try:
                forecast = self.weather_provider.get_forecast(location, days=self.config.forecast_days)
            except (WeatherProviderError, ValueError) as exc:
                LOGGER.warning("Forecast unavailable: %s", exc)
                return None
            preferences = self.preference_store.get(user_id) if user_id else None
            plan = self.recommender.plan_forecast(user_id, wardrobe, preferences, forecast, season=season)
            for day in plan.days:
                for entry in day.suggestions:
                    self.outfit_store.save(entry.outfit)
            return plan

    def rate_outfit(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.learning.submit_feedback(user_id, payload)

    def insights(self, user_id: str) -> OutfitInsights:
        return self.learning.compute_insights(user_id)


__all__ = ["StylistApp"]
