"""Formality distance scoring on the ordered casual-to-formal scale."""

from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, Optional, Sequence

from models.taxonomy import FORMALITY_SCALE, Category, Formality
from models.wardrobe_item import WardrobeItem

DISTANCE_SCORES: Dict[int, float] = {0: 1.0, 1: 0.8, 2: 0.4, 3: 0.1}

CATEGORY_WEIGHTS: Dict[Category, float] = {
    Category.DRESSES: 2.0,
    Category.TOPS: 1.5,
    Category.BOTTOMS: 1.5,
    Category.SHOES: 1.3,
    Category.OUTERWEAR: 1.2,
    Category.ACCESSORIES: 0.8,
    Category.ACTIVEWEAR: 0.9,
    Category.UNDERWEAR: 0.1,
    Category.SLEEPWEAR: 0.1,
    Category.SWIMWEAR: 0.1,
}


def step_down(level: Formality) -> Formality:
    """One notch toward casual; mixed collapses to casual."""

    if level is Formality.MIXED:
        return Formality.CASUAL
    index = FORMALITY_SCALE.index(level)
    return FORMALITY_SCALE[max(0, index - 1)]


def step_up(level: Formality) -> Formality:
    """One notch toward formal; mixed resolves to formal."""

    if level is Formality.MIXED:
        return Formality.FORMAL
    index = FORMALITY_SCALE.index(level)
    return FORMALITY_SCALE[min(len(FORMALITY_SCALE) - 1, index + 1)]


def dominant_formality(items: Iterable[WardrobeItem]) -> Optional[Formality]:
    counts = Counter(item.formality for item in items)
    if not counts:
        return None
    return counts.most_common(1)[0][0]


class FormalityCompatibilityModel:
    """Graduated compatibility between item formality and a target."""

    def level_compatibility(self, level: Formality, target: Formality) -> float:
        if level == target or Formality.MIXED in (level, target):
            return 1.0
        distance = abs(FORMALITY_SCALE.index(level) - FORMALITY_SCALE.index(target))
        return DISTANCE_SCORES.get(distance, 0.0)

    def item_compatibility(self, item: WardrobeItem, target: Formality) -> float:
        return self.level_compatibility(item.formality, target)

    def outfit_formality_score(self, items: Sequence[WardrobeItem], target: Formality) -> float:
        if not items:
            return 0.0
        total_weight = 0.0
        weighted = 0.0
        for item in items:
            weight = CATEGORY_WEIGHTS.get(item.category, 1.0)
            weighted += self.item_compatibility(item, target) * weight
            total_weight += weight
        return weighted / total_weight if total_weight else 0.0


__all__ = [
    "FormalityCompatibilityModel",
    "CATEGORY_WEIGHTS",
    "step_down",
    "step_up",
    "dominant_formality",
]
