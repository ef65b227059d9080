"""Feedback loop that turns outfit ratings into preference updates."""

from __future__ import annotations

import logging
import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from logic.errors import InvalidRatingError, NoRatedOutfitsError
from logic.validation import FeedbackPayload, validation_failure
from models.formality import step_down, step_up
from models.outfit import Outfit
from models.preferences import StylePreference, UserPreferences
from models.taxonomy import Formality, normalize_color_name
from memory.outfit_store import OutfitStore
from memory.user_profile import PreferenceStore
from stylist_app.logging_config import log_event, operation_context
from tools.observability import instrument_operation

logger = logging.getLogger(__name__)

LIKED_THRESHOLD = 4.0
DISLIKED_THRESHOLD = 2.0
DEFAULT_STYLE_PRIMARY = "classic"
DEFAULT_STYLE_SECONDARY = ["modern"]


@dataclass(frozen=True)
class OutfitFeedback:
    """Detailed feedback that accompanies a rating."""

    too_formal: bool = False
    too_casual: bool = False
    too_formal_for: List[str] = field(default_factory=list)
    too_casual_for: List[str] = field(default_factory=list)
    liked_colors: List[str] = field(default_factory=list)
    disliked_colors: List[str] = field(default_factory=list)
    comments: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: FeedbackPayload) -> "OutfitFeedback":
        return cls(
            too_formal=payload.too_formal,
            too_casual=payload.too_casual,
            too_formal_for=list(payload.too_formal_for),
            too_casual_for=list(payload.too_casual_for),
            liked_colors=list(payload.liked_colors),
            disliked_colors=list(payload.disliked_colors),
            comments=payload.comments,
        )

    @property
    def flags_too_formal(self) -> bool:
        return self.too_formal or bool(self.too_formal_for)

    @property
    def flags_too_casual(self) -> bool:
        return self.too_casual or bool(self.too_casual_for)


@dataclass(frozen=True)
class OutfitInsights:
    total_rated_outfits: int
    average_rating: float
    favorite_colors: List[str]
    least_favorite_colors: List[str]
    preferred_formality: Optional[Formality]
    favorite_occasions: List[str]
    best_outfits: List[Outfit]
    improvement_suggestions: List[str]


def validate_rating(rating: float) -> float:
    if not 1.0 <= rating <= 5.0:
        raise InvalidRatingError()
    return float(rating)


def _outfit_color_names(outfit: Outfit) -> List[str]:
    return [color.name for item in outfit.wardrobe_items for color in item.colors]


def _learned_color_names(outfit: Outfit) -> List[str]:
    return [normalize_color_name(name) for name in _outfit_color_names(outfit)]


def _append_unique(values: List[str], value: str) -> List[str]:
    return values if value in values else [*values, value]


def _remove_ci(values: Iterable[str], value: str) -> List[str]:
    return [existing for existing in values if normalize_color_name(existing) != value]


def _top_by_frequency(values: Iterable[str], limit: int) -> List[str]:
    return [value for value, _ in Counter(values).most_common(limit)]


def _ordered_difference(values: Iterable[str], excluded: Iterable[str]) -> List[str]:
    excluded_set = set(excluded)
    result: List[str] = []
    for value in values:
        if value not in excluded_set and value not in result:
            result.append(value)
    return result


class PreferenceLearningService:
    """Applies ratings and detailed feedback to stored user preferences.

    Read-modify-write of a user's record is serialised with a per-user lock so
    concurrent ratings cannot lose updates.
    """

    def __init__(self, preference_store: PreferenceStore, outfit_store: Optional[OutfitStore] = None) -> None:
        self.preference_store = preference_store
        self.outfit_store = outfit_store or OutfitStore()
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _user_lock(self, user_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(user_id, threading.Lock())

    # -- pure updates ----------------------------------------------------

    def apply_rating(self, outfit: Outfit, rating: float, preferences: UserPreferences) -> UserPreferences:
        """Return preferences updated for one rating; 2 < rating < 4 changes nothing."""

        rating = validate_rating(rating)
        if rating >= LIKED_THRESHOLD:
            return self._apply_liked(outfit, preferences)
        if rating <= DISLIKED_THRESHOLD:
            return self._apply_disliked(outfit, preferences)
        return preferences

    def _apply_liked(self, outfit: Outfit, preferences: UserPreferences) -> UserPreferences:
        preferred = list(preferences.colors.preferred)
        avoided = list(preferences.colors.avoided)
        neutral = {normalize_color_name(color) for color in preferences.colors.neutral}
        for color in _learned_color_names(outfit):
            if color not in preferred and color not in neutral:
                preferred.append(color)
            avoided = _remove_ci(avoided, color)

        occasions = list(preferences.occasions)
        for occasion in outfit.occasions:
            occasions = _append_unique(occasions, occasion)

        brands = list(preferences.brands)
        for item in outfit.wardrobe_items:
            if item.brand and item.brand.lower() not in {brand.lower() for brand in brands}:
                brands.append(item.brand.lower())

        style = preferences.style
        if style is None:
            style = StylePreference(
                primary=DEFAULT_STYLE_PRIMARY,
                secondary=list(DEFAULT_STYLE_SECONDARY),
                formality=outfit.formality,
            )
        elif style.formality != outfit.formality:
            style = style.replace(formality=Formality.MIXED)

        return preferences.replace(
            colors=preferences.colors.replace(preferred=preferred, avoided=avoided),
            occasions=occasions,
            brands=brands,
            style=style,
        )

    def _apply_disliked(self, outfit: Outfit, preferences: UserPreferences) -> UserPreferences:
        preferred = list(preferences.colors.preferred)
        avoided = list(preferences.colors.avoided)
        neutral = {normalize_color_name(color) for color in preferences.colors.neutral}
        for color in _learned_color_names(outfit):
            if color not in avoided and color not in neutral:
                avoided.append(color)
            preferred = _remove_ci(preferred, color)
        return preferences.with_colors(preferred=preferred, avoided=avoided)

    def apply_detailed_feedback(
        self, feedback: OutfitFeedback, outfit: Outfit, preferences: UserPreferences
    ) -> UserPreferences:
        updated = preferences
        if updated.style is not None:
            if feedback.flags_too_formal:
                updated = updated.replace(style=updated.style.replace(formality=step_down(outfit.formality)))
            if feedback.flags_too_casual:
                updated = updated.replace(style=updated.style.replace(formality=step_up(outfit.formality)))

        preferred = list(updated.colors.preferred)
        avoided = list(updated.colors.avoided)
        for color in (normalize_color_name(name) for name in feedback.disliked_colors):
            avoided = _append_unique(avoided, color)
            preferred = _remove_ci(preferred, color)
        for color in (normalize_color_name(name) for name in feedback.liked_colors):
            preferred = _append_unique(preferred, color)
            avoided = _remove_ci(avoided, color)
        return updated.with_colors(preferred=preferred, avoided=avoided)

    # -- stored updates --------------------------------------------------

    def record_detailed_feedback(self, feedback: OutfitFeedback, outfit: Outfit, user_id: str) -> UserPreferences:
        with self._user_lock(user_id):
            current = self.preference_store.get(user_id)
            updated = self.apply_detailed_feedback(feedback, outfit, current)
            self.preference_store.put(user_id, updated)
        return updated

    @instrument_operation("record_rating")
    def record_rating(
        self,
        user_id: str,
        outfit: Outfit,
        rating: float,
        feedback: Optional[OutfitFeedback] = None,
    ) -> UserPreferences:
        """Store the rating on the outfit, then learn from it and its feedback."""

        rating = validate_rating(rating)
        rated = outfit.replace(rating=rating, is_favorite=outfit.is_favorite or rating >= LIKED_THRESHOLD)
        self.outfit_store.save(rated)

        with self._user_lock(user_id):
            preferences = self.apply_rating(outfit, rating, self.preference_store.get(user_id))
            if feedback is not None:
                preferences = self.apply_detailed_feedback(feedback, outfit, preferences)
            self.preference_store.put(user_id, preferences)

        log_event(
            logger,
            logging.INFO,
            "outfit_rated",
            user_id=user_id,
            outfit_id=outfit.id,
            rating=rating,
            detailed=feedback is not None,
        )
        return preferences

    def record_rating_by_id(
        self, user_id: str, outfit_id: str, rating: float, feedback: Optional[OutfitFeedback] = None
    ) -> UserPreferences:
        return self.record_rating(user_id, self.outfit_store.get(outfit_id), rating, feedback)

    def submit_feedback(self, user_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Validate a raw feedback payload and record it against a stored outfit."""

        with operation_context("feedback:submit", user_id=user_id) as correlation_id:
            try:
                request = FeedbackPayload.model_validate(payload)
            except ValidationError as exc:
                log_event(
                    logger,
                    logging.WARNING,
                    "feedback_rejected",
                    correlation_id=correlation_id,
                    error_count=len(exc.errors()),
                )
                return validation_failure("Invalid feedback payload", exc)

            feedback = OutfitFeedback.from_payload(request)
            has_details = feedback != OutfitFeedback(comments=feedback.comments)
            preferences = self.record_rating_by_id(
                user_id, request.outfit_id, request.rating, feedback if has_details else None
            )
            return {
                "status": "recorded",
                "outfit_id": request.outfit_id,
                "rating": request.rating,
                "preferences": preferences.to_dict(),
            }

    # -- insights --------------------------------------------------------

    def compute_insights(self, user_id: str, limit: int = 50) -> OutfitInsights:
        rated = self.outfit_store.list_for_user(user_id, rated_only=True, limit=limit)
        if not rated:
            raise NoRatedOutfitsError()

        high = [outfit for outfit in rated if outfit.rating >= LIKED_THRESHOLD]
        low = [outfit for outfit in rated if outfit.rating <= DISLIKED_THRESHOLD]
        high_colors = [name for outfit in high for name in _outfit_color_names(outfit)]
        low_colors = [name for outfit in low for name in _outfit_color_names(outfit)]
        formality_counts = Counter(outfit.formality for outfit in high)

        suggestions: List[str] = []
        colors_to_avoid = _ordered_difference(low_colors, high_colors)
        if colors_to_avoid:
            suggestions.append(f"Consider avoiding these colors: {', '.join(colors_to_avoid)}")
        favored = _ordered_difference(high_colors, low_colors)
        if favored:
            suggestions.append(f"You seem to prefer these colors: {', '.join(favored)}")
        if len(formality_counts) == 1:
            only = next(iter(formality_counts))
            suggestions.append(f"You prefer {only.display_name} outfits")

        return OutfitInsights(
            total_rated_outfits=len(rated),
            average_rating=sum(outfit.rating for outfit in rated) / len(rated),
            favorite_colors=_top_by_frequency(high_colors, 5),
            least_favorite_colors=_top_by_frequency(low_colors, 3),
            preferred_formality=formality_counts.most_common(1)[0][0] if formality_counts else None,
            favorite_occasions=_top_by_frequency((o for outfit in high for o in outfit.occasions), 5),
            best_outfits=high[:5],
            improvement_suggestions=suggestions,
        )


__all__ = [
    "OutfitFeedback",
    "OutfitInsights",
    "PreferenceLearningService",
    "validate_rating",
]
