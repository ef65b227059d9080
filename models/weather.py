"""Weather readings consumed by the outfit heuristics."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional

from models.taxonomy import PROVIDER_CONDITION_ALIASES, WeatherCondition, parse_enum

HOT_THRESHOLD_C = 25.0
COLD_THRESHOLD_C = 10.0
HUMID_THRESHOLD = 70
WINDY_THRESHOLD = 15.0
PRECIPITATION_THRESHOLD = 50


def _dedupe(conditions: List[WeatherCondition]) -> List[WeatherCondition]:
    seen: List[WeatherCondition] = []
    for condition in conditions:
        if condition not in seen:
            seen.append(condition)
    return seen


def engine_condition(condition: WeatherCondition) -> WeatherCondition:
    """Map a provider tag into the vocabulary the heuristics understand."""

    return PROVIDER_CONDITION_ALIASES.get(condition, condition)


@dataclass(frozen=True)
class CurrentWeather:
    temperature: float
    humidity: int
    wind_speed: float
    condition: WeatherCondition
    feels_like: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    location: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        object.__setattr__(self, "condition", parse_enum(WeatherCondition, self.condition))

    @property
    def outfit_conditions(self) -> List[WeatherCondition]:
        conditions = [engine_condition(self.condition)]
        if self.temperature > HOT_THRESHOLD_C:
            conditions.append(WeatherCondition.HOT)
        if self.temperature < COLD_THRESHOLD_C:
            conditions.append(WeatherCondition.COLD)
        if self.humidity > HUMID_THRESHOLD:
            conditions.append(WeatherCondition.HUMID)
        if self.wind_speed > WINDY_THRESHOLD:
            conditions.append(WeatherCondition.WINDY)
        return _dedupe(conditions)


@dataclass(frozen=True)
class DailyForecast:
    day: date
    temp_min: float
    temp_max: float
    condition: WeatherCondition
    humidity: int = 50
    wind_speed: float = 0.0
    precipitation_chance: int = 0

    def __post_init__(self) -> None:
        object.__setattr__(self, "condition", parse_enum(WeatherCondition, self.condition))
        if self.temp_min > self.temp_max:
            raise ValueError(f"temp_min {self.temp_min} exceeds temp_max {self.temp_max}")

    @property
    def avg_temperature(self) -> float:
        return (self.temp_min + self.temp_max) / 2

    @property
    def temperature_range(self) -> float:
        return self.temp_max - self.temp_min

    @property
    def weekday_name(self) -> str:
        return self.day.strftime("%A")

    @property
    def outfit_conditions(self) -> List[WeatherCondition]:
        conditions = [engine_condition(self.condition)]
        if self.temp_max > HOT_THRESHOLD_C:
            conditions.append(WeatherCondition.HOT)
        if self.temp_min < COLD_THRESHOLD_C:
            conditions.append(WeatherCondition.COLD)
        if self.humidity > HUMID_THRESHOLD:
            conditions.append(WeatherCondition.HUMID)
        if self.wind_speed > WINDY_THRESHOLD:
            conditions.append(WeatherCondition.WINDY)
        if self.precipitation_chance > PRECIPITATION_THRESHOLD:
            if self.condition is WeatherCondition.SNOWY:
                conditions.append(WeatherCondition.SNOWY)
            else:
                conditions.append(WeatherCondition.RAINY)
        return _dedupe(conditions)

    def as_current(self) -> CurrentWeather:
        """Collapse the day into a single reading at its average temperature."""

        return CurrentWeather(
            temperature=self.avg_temperature,
            humidity=self.humidity,
            wind_speed=self.wind_speed,
            condition=self.condition,
            temp_min=self.temp_min,
            temp_max=self.temp_max,
            timestamp=datetime.combine(self.day, datetime.min.time(), tzinfo=timezone.utc),
        )


@dataclass(frozen=True)
class WeatherForecast:
    location: str
    days: List[DailyForecast] = field(default_factory=list)

    def next_days(self, count: int = 5) -> List[DailyForecast]:
        return sorted(self.days, key=lambda day: day.day)[:count]


__all__ = ["CurrentWeather", "DailyForecast", "WeatherForecast", "engine_condition"]
