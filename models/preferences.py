"""User preference record mutated by the feedback loop."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from models.taxonomy import DEFAULT_NEUTRAL_PREFERENCES, Formality, parse_enum


class BodyType:
    RECTANGLE = "rectangle"
    PEAR = "pear"
    APPLE = "apple"
    HOURGLASS = "hourglass"
    INVERTED_TRIANGLE = "inverted_triangle"

    ALL = (RECTANGLE, PEAR, APPLE, HOURGLASS, INVERTED_TRIANGLE)


@dataclass(frozen=True)
class StylePreference:
    primary: str
    secondary: List[str] = field(default_factory=list)
    formality: Formality = Formality.CASUAL

    def __post_init__(self) -> None:
        object.__setattr__(self, "formality", parse_enum(Formality, self.formality))

    def replace(self, **changes: Any) -> "StylePreference":
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class ColorPreferences:
    preferred: List[str] = field(default_factory=list)
    avoided: List[str] = field(default_factory=list)
    neutral: List[str] = field(default_factory=lambda: list(DEFAULT_NEUTRAL_PREFERENCES))

    def replace(self, **changes: Any) -> "ColorPreferences":
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True)
class BudgetRange:
    min: float
    max: float
    currency: str = "USD"

    def __post_init__(self) -> None:
        if self.min < 0 or self.max < self.min:
            raise ValueError(f"Invalid budget range {self.min}-{self.max}")


@dataclass(frozen=True)
class UserPreferences:
    """Preference state for one user.

    Records are immutable; ``replace``/``with_colors`` return an updated copy
    that callers write back to the preference store as a whole.
    """

    style: Optional[StylePreference] = None
    occasions: List[str] = field(default_factory=list)
    colors: ColorPreferences = field(default_factory=ColorPreferences)
    brands: List[str] = field(default_factory=list)
    body_type: Optional[str] = None
    budget: Optional[BudgetRange] = None

    def __post_init__(self) -> None:
        if self.body_type is not None and self.body_type not in BodyType.ALL:
            raise ValueError(f"Unsupported body type '{self.body_type}'. Allowed: {list(BodyType.ALL)}")

    def replace(self, **changes: Any) -> "UserPreferences":
        return dataclasses.replace(self, **changes)

    def with_colors(self, **changes: Any) -> "UserPreferences":
        return self.replace(colors=self.colors.replace(**changes))

    def to_dict(self) -> Dict[str, Any]:
        payload = dataclasses.asdict(self)
        if self.style is not None:
            payload["style"]["formality"] = self.style.formality.value
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "UserPreferences":
        style = payload.get("style")
        colors = payload.get("colors") or {}
        budget = payload.get("budget")
        return cls(
            style=StylePreference(**style) if style else None,
            occasions=list(payload.get("occasions", [])),
            colors=ColorPreferences(
                preferred=list(colors.get("preferred", [])),
                avoided=list(colors.get("avoided", [])),
                neutral=list(colors.get("neutral", DEFAULT_NEUTRAL_PREFERENCES)),
            ),
            brands=list(payload.get("brands", [])),
            body_type=payload.get("body_type"),
            budget=BudgetRange(**budget) if budget else None,
        )


__all__ = ["BodyType", "StylePreference", "ColorPreferences", "BudgetRange", "UserPreferences"]
