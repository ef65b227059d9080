from __future__ import annotations

import random
import sys
from datetime import date
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.errors import SlotConflictError
from logic.outfit_builder import (
    AD_HOC_LIMITS,
    FORECAST_LIMITS,
    CategoryPools,
    GenerationLimits,
    OutfitCombinationGenerator,
    OutfitTemplate,
    name_forecast_outfit,
    name_outfit,
    prefilter_items,
)
from models.outfit import Outfit, OutfitItem
from models.taxonomy import Category, Formality, OutfitCreator, Position, Season, WeatherCondition
from models.wardrobe_item import ClothingColor, WardrobeItem
from models.weather import DailyForecast


def _item(item_id: str, category: Category, **overrides) -> WardrobeItem:
    data = {"id": item_id, "user_id": "user-1", "name": item_id, "category": category}
    data.update(overrides)
    return WardrobeItem(**data)


def _build_items(tops: int, bottoms: int, shoes: int, accessories: int = 0) -> CategoryPools:
    return CategoryPools(
        tops=[_item(f"top-{i}", Category.TOPS) for i in range(tops)],
        bottoms=[_item(f"bottom-{i}", Category.BOTTOMS) for i in range(bottoms)],
        shoes=[_item(f"shoe-{i}", Category.SHOES) for i in range(shoes)],
        accessories=[_item(f"accessory-{i}", Category.ACCESSORIES) for i in range(accessories)],
    )


def _template(**overrides) -> OutfitTemplate:
    data = {"user_id": "user-1", "formality": Formality.CASUAL}
    data.update(overrides)
    return OutfitTemplate(**data)


def test_generation_respects_ad_hoc_cap() -> None:
    generator = OutfitCombinationGenerator()

    result = generator.generate(_build_items(20, 20, 10), _template())

    assert len(result.outfits) == AD_HOC_LIMITS.max_outfits
    assert result.diagnostics["capped"] is True
    assert result.diagnostics["separates_based"] == 50


def test_generation_respects_forecast_cap_and_smaller_cap() -> None:
    pools = _build_items(20, 20, 10)

    forecast = OutfitCombinationGenerator(limits=FORECAST_LIMITS, deterministic=True).generate(pools, _template())
    small = OutfitCombinationGenerator().generate(
        pools, _template(), limits=GenerationLimits(7, 10, 5, 15, 10, 5)
    )

    assert len(forecast.outfits) == FORECAST_LIMITS.max_outfits
    assert len(small.outfits) == 7


def test_prefix_bounds_limit_combinations_below_cap() -> None:
    generator = OutfitCombinationGenerator(limits=FORECAST_LIMITS)

    result = generator.generate(_build_items(2, 2, 1), _template())

    assert len(result.outfits) == 4
    assert result.diagnostics["capped"] is False


def test_dresses_are_combined_before_separates() -> None:
    pools = _build_items(1, 1, 1)
    pools.dresses = [_item("dress-0", Category.DRESSES)]

    result = OutfitCombinationGenerator().generate(pools, _template())

    assert [outfit.has_category(Category.DRESSES) for outfit in result.outfits] == [True, False]
    assert result.diagnostics["dress_based"] == 1
    assert result.diagnostics["separates_based"] == 1


def test_missing_bottoms_yields_no_separates() -> None:
    result = OutfitCombinationGenerator().generate(_build_items(3, 0, 2), _template())

    assert result.outfits == []


def test_every_outfit_has_one_required_item_per_exclusive_slot() -> None:
    result = OutfitCombinationGenerator().generate(_build_items(3, 3, 2, accessories=2), _template())

    for outfit in result.outfits:
        required_positions = [entry.position for entry in outfit.required_items]
        assert required_positions.count(Position.TOP) == 1
        assert required_positions.count(Position.BOTTOM) == 1
        assert required_positions.count(Position.FOOTWEAR) == 1
        assert outfit.is_complete
        assert outfit.created_by is OutfitCreator.AI


def test_seeded_generators_make_identical_choices() -> None:
    pools = _build_items(3, 3, 2, accessories=6)
    first = OutfitCombinationGenerator(rng=random.Random(7)).generate(pools, _template())
    second = OutfitCombinationGenerator(rng=random.Random(7)).generate(pools, _template())

    def picks(result):
        return [[item.id for item in outfit.wardrobe_items] for outfit in result.outfits]

    assert picks(first) == picks(second)


def test_deterministic_generator_takes_first_optional_piece() -> None:
    pools = _build_items(1, 1, 1, accessories=3)

    result = OutfitCombinationGenerator(deterministic=True).generate(pools, _template())

    optional = [entry.item.id for entry in result.outfits[0].items if entry.is_optional]
    assert optional == ["accessory-0"]


def test_outerwear_is_layered_for_cold_conditions_only() -> None:
    pools = _build_items(1, 1, 1)
    pools.outerwear = [_item("coat", Category.OUTERWEAR)]
    generator = OutfitCombinationGenerator(deterministic=True)

    cold = generator.generate(pools, _template(conditions=[WeatherCondition.COLD]))
    sunny = generator.generate(pools, _template(conditions=[WeatherCondition.SUNNY]))
    forced = generator.generate(pools, _template(), separates_outerwear=True)

    assert cold.outfits[0].has_category(Category.OUTERWEAR)
    assert not sunny.outfits[0].has_category(Category.OUTERWEAR)
    assert forced.outfits[0].has_category(Category.OUTERWEAR)


def test_two_required_tops_conflict() -> None:
    first = OutfitItem.for_item(_item("top-a", Category.TOPS))
    second = OutfitItem.for_item(_item("top-b", Category.TOPS))

    with pytest.raises(SlotConflictError):
        Outfit(user_id="user-1", name="Double top", items=[first, second])


def test_optional_duplicates_are_allowed() -> None:
    hat = _item("hat", Category.ACCESSORIES, subcategory="hat")
    cap = _item("cap", Category.ACCESSORIES, subcategory="cap")
    outfit = Outfit(
        user_id="user-1",
        name="Hats",
        items=[OutfitItem.for_item(hat), OutfitItem.for_item(cap, is_optional=True)],
    )

    assert [entry.position for entry in outfit.items] == [Position.HEADWEAR, Position.HEADWEAR]


def test_prefilter_applies_formality_adjacency_archive_and_season() -> None:
    items = [
        _item("tee", Category.TOPS, formality=Formality.CASUAL),
        _item("blazer", Category.TOPS, formality=Formality.BUSINESS),
        _item("anything", Category.TOPS, formality=Formality.MIXED),
        _item("old", Category.TOPS, is_archived=True),
        _item("parka", Category.OUTERWEAR, seasons=[Season.WINTER]),
    ]

    casual = prefilter_items(items, Formality.CASUAL)
    summer = prefilter_items(items, Formality.CASUAL, season=Season.SUMMER)

    assert [item.id for item in casual] == ["tee", "anything", "parka"]
    assert [item.id for item in summer] == ["tee", "anything"]


def test_outfit_names_describe_colors_occasion_and_garments() -> None:
    top = _item("top", Category.TOPS, colors=[ClothingColor("Red", "#FF0000", True)])
    bottom = _item("bottom", Category.BOTTOMS, colors=[ClothingColor("Black", "#000000")])
    coat = _item("coat", Category.OUTERWEAR, colors=[ClothingColor("Camel")])
    dress = _item("dress", Category.DRESSES, colors=[ClothingColor("Blue")])
    plain_shoe = _item("shoe", Category.SHOES)

    assert name_outfit([top, bottom, plain_shoe], Formality.CASUAL, ["Date Night"]) == "Red & Black Date Night Ensemble"
    assert name_outfit([dress, plain_shoe], Formality.FORMAL, []) == "Blue Formal Dress Look"
    assert name_outfit([top, bottom, coat], Formality.BUSINESS, []) == "Red & Black Layered Business Outfit"


def test_forecast_names_lead_with_weather() -> None:
    rainy = DailyForecast(
        day=date(2024, 6, 3), temp_min=12, temp_max=18, condition=WeatherCondition.RAINY, precipitation_chance=80
    )
    mild = DailyForecast(day=date(2024, 6, 3), temp_min=15, temp_max=22, condition=WeatherCondition.CLOUDY)
    dress = _item("dress", Category.DRESSES, colors=[ClothingColor("Blue")])

    assert name_forecast_outfit([dress], rainy) == "Rainy Day Blue & Dress Outfit"
    assert name_forecast_outfit([_item("shoe", Category.SHOES)], mild) == "Perfect Weather Monday Look"
