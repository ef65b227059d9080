"""Weather provider abstractions and OpenWeatherMap payload decoding."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Dict, List, Optional

import requests
from pydantic import ValidationError

from logic.validation import OpenWeatherCurrentPayload, OpenWeatherForecastEntry, OpenWeatherForecastPayload
from models.taxonomy import WeatherCondition
from models.weather import CurrentWeather, DailyForecast, WeatherForecast

LOGGER = logging.getLogger(__name__)

DEFAULT_FORECAST_DAYS = 5


class WeatherProviderError(RuntimeError):
    """Raised when weather cannot be fetched or decoded."""


def condition_from_openweather_id(condition_id: int) -> WeatherCondition:
    """Map an OpenWeatherMap condition code to a condition tag."""

    if 200 <= condition_id < 600:
        return WeatherCondition.RAINY
    if 600 <= condition_id < 700:
        return WeatherCondition.SNOWY
    if 700 <= condition_id < 800:
        return WeatherCondition.FOGGY
    if condition_id == 800:
        return WeatherCondition.SUNNY
    if 800 < condition_id < 900:
        return WeatherCondition.CLOUDY
    return WeatherCondition.CLOUDY


def _utc(timestamp: int) -> datetime:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def parse_openweather_current(payload: dict) -> CurrentWeather:
    """Decode an OpenWeatherMap current-weather response."""

    parsed = OpenWeatherCurrentPayload.model_validate(payload)
    return CurrentWeather(
        temperature=parsed.main.temp,
        feels_like=parsed.main.feels_like,
        temp_min=parsed.main.temp_min,
        temp_max=parsed.main.temp_max,
        humidity=parsed.main.humidity,
        wind_speed=parsed.wind.speed,
        condition=condition_from_openweather_id(parsed.weather[0].id),
        location=parsed.name or None,
        timestamp=_utc(parsed.dt),
    )


def _daily_from_entries(day: date, entries: List[OpenWeatherForecastEntry]) -> DailyForecast:
    mins = [entry.main.temp_min if entry.main.temp_min is not None else entry.main.temp for entry in entries]
    maxes = [entry.main.temp_max if entry.main.temp_max is not None else entry.main.temp for entry in entries]
    # The midday entry is most representative; fall back to the first.
    representative = next((entry for entry in entries if _utc(entry.dt).hour == 12), entries[0])
    return DailyForecast(
        day=day,
        temp_min=min(mins),
        temp_max=max(maxes),
        condition=condition_from_openweather_id(representative.weather[0].id),
        humidity=int(sum(entry.main.humidity for entry in entries) / len(entries)),
        wind_speed=sum(entry.wind.speed for entry in entries) / len(entries),
        precipitation_chance=int(round(max(entry.pop for entry in entries) * 100)),
    )


def parse_openweather_forecast(payload: dict, days: int = DEFAULT_FORECAST_DAYS) -> WeatherForecast:
    """Group a 3-hourly OpenWeatherMap forecast into daily summaries."""

    parsed = OpenWeatherForecastPayload.model_validate(payload)
    grouped: Dict[date, List[OpenWeatherForecastEntry]] = defaultdict(list)
    for entry in parsed.entries:
        grouped[_utc(entry.dt).date()].append(entry)
    daily = [_daily_from_entries(day, grouped[day]) for day in sorted(grouped)]
    return WeatherForecast(location=parsed.city.name, days=daily[:days])


class WeatherProvider(ABC):
    """Abstract weather provider interface."""

    @abstractmethod
    def get_current_weather(self, location: str) -> CurrentWeather:
        """Return current conditions for a location."""

    @abstractmethod
    def get_forecast(self, location: str, days: int = DEFAULT_FORECAST_DAYS) -> WeatherForecast:
        """Return up to ``days`` daily forecasts for a location."""


class OpenWeatherProvider(WeatherProvider):
    """OpenWeatherMap client with schema validation."""

    BASE_URL = "https://api.openweathermap.org/data/2.5"

    def __init__(
        self,
        api_key: str,
        timeout_seconds: float = 5.0,
        units: str = "metric",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.units = units
        self.session = session or requests.Session()

    def _fetch(self, endpoint: str, location: str) -> dict:
        if not location:
            raise ValueError("location is required for weather lookups")
        params = {"q": location, "appid": self.api_key, "units": self.units}
        try:
            response = self.session.get(f"{self.BASE_URL}/{endpoint}", params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            LOGGER.error("Weather API unreachable", exc_info=exc)
            raise WeatherProviderError(f"Weather request to '{endpoint}' failed") from exc

    def get_current_weather(self, location: str) -> CurrentWeather:
        LOGGER.info("Fetching current weather")
        payload = self._fetch("weather", location)
        try:
            return parse_openweather_current(payload)
        except ValidationError as exc:
            LOGGER.error("Weather payload schema validation failed", exc_info=exc)
            raise WeatherProviderError("Unexpected current weather payload") from exc

    def get_forecast(self, location: str, days: int = DEFAULT_FORECAST_DAYS) -> WeatherForecast:
        LOGGER.info("Fetching %s day forecast", days)
        payload = self._fetch("forecast", location)
        try:
            return parse_openweather_forecast(payload, days=days)
        except ValidationError as exc:
            LOGGER.error("Forecast payload schema validation failed", exc_info=exc)
            raise WeatherProviderError("Unexpected forecast payload") from exc


class StaticWeatherProvider(WeatherProvider):
    """Offline deterministic weather provider for tests and embedding."""

    def __init__(self, current: CurrentWeather, forecast: Optional[WeatherForecast] = None) -> None:
        self.current = current
        self.forecast = forecast or WeatherForecast(location=current.location or "", days=[])

    def get_current_weather(self, location: str) -> CurrentWeather:
        LOGGER.info("Returning static weather")
        return self.current

    def get_forecast(self, location: str, days: int = DEFAULT_FORECAST_DAYS) -> WeatherForecast:
        return WeatherForecast(location=self.forecast.location, days=self.forecast.next_days(days))


__all__ = [
    "WeatherProvider",
    "WeatherProviderError",
    "OpenWeatherProvider",
    "StaticWeatherProvider",
    "condition_from_openweather_id",
    "parse_openweather_current",
    "parse_openweather_forecast",
]
