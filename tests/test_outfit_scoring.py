from __future__ import annotations

import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.outfit_scoring import GRADE_ORDER, OutfitScore, OutfitScoringEngine, grade_for
from models.outfit import Outfit, OutfitItem
from models.preferences import ColorPreferences, StylePreference, UserPreferences
from models.taxonomy import Category, Formality, Pattern, Season, WeatherCondition
from models.wardrobe_item import ClothingColor, WardrobeItem


def _item(item_id: str, category: Category, **overrides) -> WardrobeItem:
    data = {"id": item_id, "user_id": "user-1", "name": item_id, "category": category}
    data.update(overrides)
    return WardrobeItem(**data)


def _outfit(items, formality: Formality = Formality.CASUAL) -> Outfit:
    return Outfit(
        user_id="user-1",
        name="candidate",
        items=[OutfitItem.for_item(item) for item in items],
        formality=formality,
    )


@pytest.mark.parametrize(
    "total, grade",
    [(100, "A+"), (90, "A+"), (89.99, "A"), (80, "A-"), (72.5, "B"), (60, "C+"), (50, "C-"), (49.9, "D"), (0, "D")],
)
def test_grade_boundaries(total: float, grade: str) -> None:
    assert grade_for(total) == grade


def test_grades_never_improve_as_total_drops() -> None:
    totals = [value / 2 for value in range(200, -1, -1)]
    ranks = [GRADE_ORDER.index(grade_for(total)) for total in totals]

    assert ranks == sorted(ranks)


def test_score_components_are_clamped_and_weighted() -> None:
    perfect = OutfitScore(1.0, 1.0, 1.0, 1.0)
    clamped = OutfitScore(1.5, -0.2, 0.5, 0.5)

    assert perfect.total == pytest.approx(100.0)
    assert perfect.is_high_quality
    assert clamped.color_harmony == 1.0
    assert clamped.formality_match == 0.0
    assert clamped.total == pytest.approx(40 + 0 + 10 + 5)
    assert clamped.needs_improvement
    assert clamped.breakdown["weather_appropriate"] == pytest.approx(10.0)


def test_items_without_colors_get_neutral_harmony() -> None:
    engine = OutfitScoringEngine()

    assert engine.color_harmony([_item("a", Category.TOPS), _item("b", Category.BOTTOMS)]) == 0.5


def test_color_harmony_blends_colors_and_patterns() -> None:
    engine = OutfitScoringEngine()
    items = [
        _item("a", Category.TOPS, colors=[ClothingColor("Red", "#FF0000")], patterns=[Pattern.FLORAL]),
        _item("b", Category.BOTTOMS, colors=[ClothingColor("Cyan", "#00FFFF")], patterns=[Pattern.PLAID]),
    ]

    assert engine.color_harmony(items) == pytest.approx(1.0 * 0.7 + 0.2 * 0.3)


def test_weather_appropriateness_combines_season_and_conditions() -> None:
    engine = OutfitScoringEngine()
    items = [
        _item("top", Category.TOPS, seasons=[Season.SUMMER]),
        _item("coat", Category.OUTERWEAR, seasons=[Season.WINTER]),
    ]

    score = engine.weather_appropriateness(items, [WeatherCondition.HOT], Season.SUMMER)

    assert score == pytest.approx((1.0 * 1.0 + 0.3 * 0.3) / 2)
    assert engine.weather_appropriateness([], [WeatherCondition.HOT], Season.SUMMER) == 0.0


def test_seasonal_appropriateness_levels() -> None:
    engine = OutfitScoringEngine()

    assert engine.seasonal_appropriateness(_item("a", Category.TOPS), Season.FALL) == 0.8
    assert engine.seasonal_appropriateness(_item("b", Category.TOPS, seasons=["fall"]), Season.FALL) == 1.0
    assert engine.seasonal_appropriateness(_item("c", Category.TOPS, seasons=["winter"]), Season.FALL) == 0.6
    assert engine.seasonal_appropriateness(_item("d", Category.TOPS, seasons=["summer"]), Season.WINTER) == 0.3


def test_preference_defaults_to_neutral_without_profile() -> None:
    engine = OutfitScoringEngine()

    assert engine.user_preference([_item("a", Category.TOPS)], None) == 0.5


def test_color_preference_rewards_preferred_and_penalises_avoided() -> None:
    engine = OutfitScoringEngine()
    preferences = UserPreferences(colors=ColorPreferences(preferred=["red"], avoided=["orange"]))
    red = [_item("a", Category.TOPS, colors=[ClothingColor("Red")])]
    orange = [_item("b", Category.TOPS, colors=[ClothingColor("Orange")])]
    black = [_item("c", Category.TOPS, colors=[ClothingColor("Black")])]

    assert engine.color_preference(red, preferences) == pytest.approx(0.8)
    assert engine.color_preference(orange, preferences) == pytest.approx(0.1)
    assert engine.color_preference(black, preferences) == pytest.approx(0.6)
    grey = [_item("d", Category.TOPS, colors=[ClothingColor("Grey")])]
    assert engine.color_preference(grey, preferences) == pytest.approx(0.6)


def test_user_preference_includes_style_and_brand() -> None:
    engine = OutfitScoringEngine()
    preferences = UserPreferences(
        style=StylePreference(primary="classic", formality=Formality.CASUAL),
        brands=["acme"],
    )
    items = [
        _item("a", Category.TOPS, brand="Acme"),
        _item("b", Category.BOTTOMS, brand="Other"),
    ]

    expected = (0.5 + 1.0 + (0.5 + 0.5 * 1 / 2)) / 3
    assert engine.user_preference(items, preferences) == pytest.approx(expected)


def test_scores_stay_in_bounds() -> None:
    engine = OutfitScoringEngine()
    items = [
        _item("a", Category.TOPS, colors=[ClothingColor("Red", "#FF0000")], formality=Formality.FORMAL),
        _item("b", Category.SWIMWEAR, colors=[ClothingColor("Lime", "#80FF00")], seasons=["summer"]),
    ]

    score = engine.score(items, Formality.CASUAL, [WeatherCondition.SNOWY, WeatherCondition.COLD], season=Season.WINTER)

    for value in (score.color_harmony, score.formality_match, score.weather_appropriate, score.user_preference):
        assert 0.0 <= value <= 1.0
    assert 0.0 <= score.total <= 100.0


def test_rank_orders_best_first_and_stamps_ai_score() -> None:
    engine = OutfitScoringEngine()
    matching = _outfit([_item("tee", Category.TOPS), _item("jeans", Category.BOTTOMS)], Formality.CASUAL)
    clashing = _outfit(
        [
            _item("gown", Category.DRESSES, formality=Formality.FORMAL),
            _item("flip-flops", Category.SHOES, formality=Formality.CASUAL),
        ],
        Formality.CASUAL,
    )

    ranked = engine.rank([clashing, matching], season=Season.SUMMER)

    assert [entry.outfit.id for entry in ranked] == [matching.id, clashing.id]
    assert ranked[0].outfit.ai_score == pytest.approx(ranked[0].score.total)
    assert matching.ai_score is None
