"""Feedback loop coverage: ratings, detailed feedback and insights."""
from __future__ import annotations

import sys
import threading
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.errors import InvalidRatingError, NoRatedOutfitsError, OutfitNotFoundError
from memory.outfit_store import OutfitStore
from memory.preference_learning import OutfitFeedback, PreferenceLearningService
from memory.user_profile import InMemoryPreferenceStore
from models.outfit import Outfit, OutfitItem
from models.preferences import ColorPreferences, StylePreference, UserPreferences
from models.taxonomy import Category, Formality
from models.wardrobe_item import ClothingColor, WardrobeItem


def _item(item_id: str, category: Category, colors=(), **overrides) -> WardrobeItem:
    data = {
        "id": item_id,
        "user_id": "user-1",
        "name": item_id,
        "category": category,
        "colors": [ClothingColor(name) for name in colors],
    }
    data.update(overrides)
    return WardrobeItem(**data)


def _outfit(
    top_colors=("Red",),
    bottom_colors=("Black",),
    formality: Formality = Formality.CASUAL,
    occasions=("Date Night",),
    brand=None,
) -> Outfit:
    items = [
        _item("top", Category.TOPS, top_colors, brand=brand, formality=formality),
        _item("bottom", Category.BOTTOMS, bottom_colors, formality=formality),
    ]
    return Outfit(
        user_id="user-1",
        name="look",
        items=[OutfitItem.for_item(item) for item in items],
        occasions=list(occasions),
        formality=formality,
    )


def _service() -> PreferenceLearningService:
    return PreferenceLearningService(InMemoryPreferenceStore(), OutfitStore())


def test_liked_outfit_adds_colors_occasions_brands_and_style() -> None:
    service = _service()

    updated = service.apply_rating(_outfit(brand="Acme"), 5, UserPreferences())

    assert updated.colors.preferred == ["red"]
    assert updated.occasions == ["Date Night"]
    assert updated.brands == ["acme"]
    assert updated.style == StylePreference(primary="classic", secondary=["modern"], formality=Formality.CASUAL)


def test_liked_outfit_with_other_formality_widens_to_mixed() -> None:
    service = _service()
    preferences = UserPreferences(style=StylePreference(primary="classic", formality=Formality.CASUAL))

    updated = service.apply_rating(_outfit(formality=Formality.BUSINESS), 4, preferences)

    assert updated.style.formality is Formality.MIXED


def test_middle_ratings_change_nothing() -> None:
    service = _service()
    preferences = UserPreferences(colors=ColorPreferences(preferred=["green"]))

    for rating in (2.5, 3, 3.9):
        assert service.apply_rating(_outfit(), rating, preferences) is preferences


def test_rating_ratchet_moves_color_between_lists() -> None:
    service = _service()

    liked = service.apply_rating(_outfit(), 5, UserPreferences())
    disliked = service.apply_rating(_outfit(), 1, liked)
    liked_again = service.apply_rating(_outfit(), 4, disliked)

    assert (liked.colors.preferred, liked.colors.avoided) == (["red"], [])
    assert (disliked.colors.preferred, disliked.colors.avoided) == ([], ["red"])
    assert (liked_again.colors.preferred, liked_again.colors.avoided) == (["red"], [])


def test_neutral_colors_are_never_learned() -> None:
    service = _service()

    liked = service.apply_rating(_outfit(top_colors=("Navy",), bottom_colors=("White",)), 5, UserPreferences())
    disliked = service.apply_rating(_outfit(top_colors=("Navy",), bottom_colors=("White",)), 1, liked)

    assert liked.colors.preferred == []
    assert disliked.colors.avoided == []


def test_color_aliases_resolve_to_learned_names() -> None:
    service = _service()

    liked = service.apply_rating(_outfit(top_colors=("Grey",), bottom_colors=("Navy Blue",)), 5, UserPreferences())
    disliked = service.apply_rating(_outfit(top_colors=("RED",), bottom_colors=("Off-White",)), 1, liked)

    assert liked.colors.preferred == []
    assert disliked.colors.avoided == ["red"]


@pytest.mark.parametrize("rating", [0, 0.99, 5.01, 10])
def test_out_of_range_ratings_are_rejected(rating: float) -> None:
    service = _service()

    with pytest.raises(InvalidRatingError):
        service.apply_rating(_outfit(), rating, UserPreferences())
    with pytest.raises(InvalidRatingError):
        service.record_rating("user-1", _outfit(), rating)


@pytest.mark.parametrize(
    "outfit_formality, expected",
    [(Formality.BUSINESS, Formality.SMART_CASUAL), (Formality.FORMAL, Formality.BUSINESS)],
)
def test_too_formal_feedback_steps_down_from_the_outfit(outfit_formality: Formality, expected: Formality) -> None:
    service = _service()
    outfit = _outfit(formality=outfit_formality)

    updated = service.record_rating("user-1", outfit, 5.0, OutfitFeedback(too_formal=True))

    assert updated.style.formality is expected
    assert service.preference_store.get("user-1") == updated


def test_too_casual_for_occasion_steps_up() -> None:
    service = _service()
    preferences = UserPreferences(style=StylePreference(primary="classic"))
    feedback = OutfitFeedback(too_casual_for=["work"])

    updated = service.apply_detailed_feedback(feedback, _outfit(formality=Formality.SMART_CASUAL), preferences)

    assert updated.style.formality is Formality.BUSINESS


def test_formality_feedback_without_style_is_ignored() -> None:
    service = _service()

    updated = service.apply_detailed_feedback(OutfitFeedback(too_formal=True), _outfit(), UserPreferences())

    assert updated.style is None


def test_explicit_color_feedback_moves_colors() -> None:
    service = _service()
    preferences = UserPreferences(colors=ColorPreferences(preferred=["orange"], avoided=["teal"]))
    feedback = OutfitFeedback(liked_colors=["Teal"], disliked_colors=["Orange"])

    updated = service.apply_detailed_feedback(feedback, _outfit(), preferences)

    assert updated.colors.preferred == ["teal"]
    assert updated.colors.avoided == ["orange"]


def test_record_rating_stores_rated_outfit_and_marks_favorites() -> None:
    service = _service()
    liked = _outfit()
    disliked = _outfit(top_colors=("Orange",))

    service.record_rating("user-1", liked, 4.5)
    service.record_rating("user-1", disliked, 2)

    stored_liked = service.outfit_store.get(liked.id)
    stored_disliked = service.outfit_store.get(disliked.id)
    assert stored_liked.rating == 4.5 and stored_liked.is_favorite
    assert stored_disliked.rating == 2.0 and not stored_disliked.is_favorite
    assert liked.rating is None


def test_record_rating_by_id_requires_a_known_outfit() -> None:
    service = _service()

    with pytest.raises(OutfitNotFoundError):
        service.record_rating_by_id("user-1", "missing", 4)

    outfit = service.outfit_store.save(_outfit())
    updated = service.record_rating_by_id("user-1", outfit.id, 5)
    assert "red" in updated.colors.preferred


def test_concurrent_ratings_do_not_lose_updates() -> None:
    service = _service()
    colors = [f"color-{index}" for index in range(20)]
    outfits = [_outfit(top_colors=(color,), bottom_colors=("Black",)) for color in colors]

    threads = [threading.Thread(target=service.record_rating, args=("user-1", outfit, 5)) for outfit in outfits]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(service.preference_store.get("user-1").colors.preferred) == sorted(colors)


def test_insights_summarise_rated_outfits() -> None:
    service = _service()
    service.record_rating("user-1", _outfit(top_colors=("Red",)), 5)
    service.record_rating("user-1", _outfit(top_colors=("Blue",)), 4)
    service.record_rating("user-1", _outfit(top_colors=("Orange",), occasions=("Work",)), 1)

    insights = service.compute_insights("user-1")

    assert insights.total_rated_outfits == 3
    assert insights.average_rating == pytest.approx(10 / 3)
    assert insights.favorite_colors[0] == "Black"
    assert set(insights.favorite_colors) == {"Black", "Red", "Blue"}
    assert insights.least_favorite_colors[0] in {"Orange", "Black"}
    assert insights.preferred_formality is Formality.CASUAL
    assert insights.favorite_occasions == ["Date Night"]
    assert len(insights.best_outfits) == 2
    assert "Consider avoiding these colors: Orange" in insights.improvement_suggestions
    assert "You prefer Casual outfits" in insights.improvement_suggestions


def test_insights_require_rated_outfits() -> None:
    service = _service()
    service.outfit_store.save(_outfit())

    with pytest.raises(NoRatedOutfitsError):
        service.compute_insights("user-1")


def test_submit_feedback_validates_and_records() -> None:
    service = _service()
    outfit = service.outfit_store.save(_outfit(formality=Formality.BUSINESS))

    result = service.submit_feedback(
        "user-1", {"outfit_id": outfit.id, "rating": 5, "too_formal": True, "disliked_colors": ["Red"]}
    )

    assert result["status"] == "recorded"
    assert result["preferences"]["style"]["formality"] == "smart_casual"
    assert result["preferences"]["colors"]["avoided"] == ["red"]
    assert service.outfit_store.get(outfit.id).rating == 5.0


def test_submit_feedback_rejects_invalid_payload() -> None:
    service = _service()

    result = service.submit_feedback("user-1", {"outfit_id": "abc", "rating": 9})

    assert result["status"] == "needs_review"
    assert result["details"][0]["loc"] == ("rating",)
