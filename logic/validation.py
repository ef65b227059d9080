"""Pydantic schemas for payloads crossing the engine boundary."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from models.taxonomy import Category, Formality, Pattern, Season, parse_enum, parse_enum_list


class AnalyzedColor(BaseModel):
    name: str = Field(min_length=1)
    hex_code: Optional[str] = Field(default=None, pattern=r"^#?[0-9A-Fa-f]{6}$")
    is_primary: bool = False


class ClothingAnalysis(BaseModel):
    """Structured result of the vision provider for one garment photo."""

    category: Category
    subcategory: Optional[str] = None
    colors: List[AnalyzedColor] = []
    patterns: List[Pattern] = []
    formality: Formality = Formality.CASUAL
    materials: List[str] = []
    seasons: List[Season] = []
    occasions: List[str] = []
    condition: Optional[str] = None
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, value: Any) -> Category:
        return parse_enum(Category, value)

    @field_validator("formality", mode="before")
    @classmethod
    def _coerce_formality(cls, value: Any) -> Formality:
        return parse_enum(Formality, value)

    @field_validator("patterns", mode="before")
    @classmethod
    def _coerce_patterns(cls, value: Any) -> List[Pattern]:
        return parse_enum_list(Pattern, value)

    @field_validator("seasons", mode="before")
    @classmethod
    def _coerce_seasons(cls, value: Any) -> List[Season]:
        return parse_enum_list(Season, value)


class OpenWeatherCondition(BaseModel):
    id: int
    main: str = ""
    description: str = ""


class OpenWeatherMain(BaseModel):
    temp: float
    feels_like: Optional[float] = None
    temp_min: Optional[float] = None
    temp_max: Optional[float] = None
    humidity: int = Field(ge=0, le=100)


class OpenWeatherWind(BaseModel):
    speed: float = Field(default=0.0, ge=0.0)


class OpenWeatherCurrentPayload(BaseModel):
    """Subset of the OpenWeatherMap ``/weather`` response the engine reads."""

    name: str = ""
    dt: int
    main: OpenWeatherMain
    weather: List[OpenWeatherCondition] = Field(min_length=1)
    wind: OpenWeatherWind = OpenWeatherWind()


class OpenWeatherForecastEntry(BaseModel):
    dt: int
    main: OpenWeatherMain
    weather: List[OpenWeatherCondition] = Field(min_length=1)
    wind: OpenWeatherWind = OpenWeatherWind()
    pop: float = Field(default=0.0, ge=0.0, le=1.0)


class OpenWeatherCity(BaseModel):
    name: str = ""


class OpenWeatherForecastPayload(BaseModel):
    """Subset of the OpenWeatherMap 3-hourly ``/forecast`` response."""

    city: OpenWeatherCity = OpenWeatherCity()
    entries: List[OpenWeatherForecastEntry] = Field(alias="list")


class FeedbackPayload(BaseModel):
    """Rating plus optional detailed feedback submitted for an outfit."""

    outfit_id: str = Field(min_length=1)
    rating: float = Field(ge=1.0, le=5.0)
    too_formal: bool = False
    too_casual: bool = False
    too_formal_for: List[str] = []
    too_casual_for: List[str] = []
    liked_colors: List[str] = []
    disliked_colors: List[str] = []
    comments: Optional[str] = None


class ValidationResult(BaseModel):
    """Wrapper returned to callers when validation fails."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    return ValidationResult(message=message, details=exc.errors(include_url=False)).model_dump()


__all__ = [
    "AnalyzedColor",
    "ClothingAnalysis",
    "OpenWeatherCurrentPayload",
    "OpenWeatherForecastPayload",
    "OpenWeatherForecastEntry",
    "FeedbackPayload",
    "ValidationResult",
    "validation_failure",
]
