"""Color harmony helpers built on hue relationships of the color wheel."""
from __future__ import annotations

import logging
import re
from itertools import combinations
from typing import Iterable, List, Optional, Sequence, Tuple

from models.taxonomy import Pattern, is_neutral_color_name
from models.wardrobe_item import ClothingColor

logger = logging.getLogger(__name__)

UNKNOWN_HARMONY = 0.5
NEUTRAL_HARMONY = 0.9

# (target angle, tolerance, score); first match wins.
_HUE_RELATIONSHIPS: List[Tuple[str, Sequence[float], float, float]] = [
    ("complementary", (180.0,), 15.0, 1.0),
    ("analogous", (0.0,), 30.0, 0.95),
    ("triadic", (120.0,), 15.0, 0.85),
    ("split-complementary", (150.0, 210.0), 15.0, 0.8),
    ("tetradic", (90.0, 270.0), 10.0, 0.75),
]

_COMPATIBLE_PATTERN_PAIRS = {
    frozenset({Pattern.STRIPES, Pattern.POLKA_DOTS}),
    frozenset({Pattern.STRIPES, Pattern.FLORAL}),
    frozenset({Pattern.GEOMETRIC, Pattern.ABSTRACT}),
    frozenset({Pattern.PLAID, Pattern.SOLID}),
    frozenset({Pattern.CHECKERED, Pattern.SOLID}),
    frozenset({Pattern.PAISLEY, Pattern.SOLID}),
    frozenset({Pattern.ANIMAL, Pattern.SOLID}),
    frozenset({Pattern.HOUNDSTOOTH, Pattern.SOLID}),
    frozenset({Pattern.ARGYLE, Pattern.SOLID}),
}

# Upper bounds (exclusive) of each named hue bucket, in degrees.
_HUE_BUCKETS: List[Tuple[float, str]] = [
    (15.0, "Red"),
    (45.0, "Orange"),
    (75.0, "Yellow"),
    (150.0, "Green"),
    (210.0, "Cyan"),
    (270.0, "Blue"),
    (300.0, "Purple"),
    (345.0, "Pink"),
    (360.0, "Red"),
]

BASIC_NEUTRALS: List[ClothingColor] = [
    ClothingColor(name="Black", hex_code="#000000"),
    ClothingColor(name="White", hex_code="#FFFFFF"),
    ClothingColor(name="Gray", hex_code="#808080"),
    ClothingColor(name="Navy", hex_code="#000080"),
]

MAX_SUGGESTIONS = 8
_HEX_DIGITS = re.compile(r"[0-9A-Fa-f]{6}")


def hex_to_rgb(hex_code: Optional[str]) -> Optional[Tuple[float, float, float]]:
    """Parse ``#RRGGBB`` into 0-1 channel values; ``None`` when malformed."""

    if not hex_code:
        return None
    digits = hex_code.strip().lstrip("#")
    if not _HEX_DIGITS.fullmatch(digits):
        return None
    value = int(digits, 16)
    return (
        ((value >> 16) & 0xFF) / 255.0,
        ((value >> 8) & 0xFF) / 255.0,
        (value & 0xFF) / 255.0,
    )


def rgb_to_hsl(red: float, green: float, blue: float) -> Tuple[float, float, float]:
    """Return hue in degrees with saturation and lightness in 0-1."""

    high = max(red, green, blue)
    low = min(red, green, blue)
    lightness = (high + low) / 2
    delta = high - low
    if delta == 0:
        return 0.0, 0.0, lightness

    saturation = delta / (2 - high - low) if lightness > 0.5 else delta / (high + low)
    if high == red:
        hue = ((green - blue) / delta) % 6
    elif high == green:
        hue = (blue - red) / delta + 2
    else:
        hue = (red - green) / delta + 4
    return (hue * 60) % 360, saturation, lightness


def hex_to_hsl(hex_code: Optional[str]) -> Optional[Tuple[float, float, float]]:
    rgb = hex_to_rgb(hex_code)
    if rgb is None:
        return None
    return rgb_to_hsl(*rgb)


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    chroma = (1 - abs(2 * lightness - 1)) * saturation
    x = chroma * (1 - abs((hue / 60) % 2 - 1))
    m = lightness - chroma / 2
    sector = int(hue % 360 // 60)
    red, green, blue = [
        (chroma, x, 0.0),
        (x, chroma, 0.0),
        (0.0, chroma, x),
        (0.0, x, chroma),
        (x, 0.0, chroma),
        (chroma, 0.0, x),
    ][sector]
    channels = [round((channel + m) * 255) for channel in (red, green, blue)]
    return "#" + "".join(f"{max(0, min(255, channel)):02X}" for channel in channels)


def hue_name(hue: float) -> str:
    hue = hue % 360
    for upper, name in _HUE_BUCKETS:
        if hue < upper:
            return name
    return "Red"


def hue_difference(first: float, second: float) -> float:
    """Minimal angle between two hues, 0-180 degrees."""

    diff = abs(first - second) % 360
    return 360 - diff if diff > 180 else diff


def is_neutral(color: ClothingColor) -> bool:
    return is_neutral_color_name(color.name)


class ColorHarmonyAnalyzer:
    """Scores color pairs, color sets and pattern mixes."""

    def pairwise_harmony(self, first: ClothingColor, second: ClothingColor) -> float:
        if is_neutral(first) or is_neutral(second):
            return NEUTRAL_HARMONY

        first_hsl = hex_to_hsl(first.hex_code)
        second_hsl = hex_to_hsl(second.hex_code)
        if first_hsl is None or second_hsl is None:
            logger.debug("missing hex for %s/%s, using default harmony", first.name, second.name)
            return UNKNOWN_HARMONY

        angle = hue_difference(first_hsl[0], second_hsl[0])
        for _, targets, tolerance, score in _HUE_RELATIONSHIPS:
            if any(abs(angle - target) <= tolerance for target in targets):
                return score
        return max(0.2, 1.0 - angle / 180.0)

    def relationship(self, first: ClothingColor, second: ClothingColor) -> str:
        """Name the hue relationship behind :meth:`pairwise_harmony`."""

        if is_neutral(first) or is_neutral(second):
            return "neutral"
        first_hsl = hex_to_hsl(first.hex_code)
        second_hsl = hex_to_hsl(second.hex_code)
        if first_hsl is None or second_hsl is None:
            return "unknown"
        angle = hue_difference(first_hsl[0], second_hsl[0])
        for name, targets, tolerance, _ in _HUE_RELATIONSHIPS:
            if any(abs(angle - target) <= tolerance for target in targets):
                return name
        return "contrast"

    def set_harmony(self, colors: Sequence[ClothingColor]) -> float:
        pairs = list(combinations(colors, 2))
        if not pairs:
            return 1.0
        return sum(self.pairwise_harmony(a, b) for a, b in pairs) / len(pairs)

    def pattern_pair_compatibility(self, first: Pattern, second: Pattern) -> float:
        if first == second or Pattern.SOLID in (first, second):
            return 1.0
        if frozenset({first, second}) in _COMPATIBLE_PATTERN_PAIRS:
            return 1.0
        return 0.2

    def pattern_compatibility(self, patterns: Iterable[Pattern]) -> float:
        unique: List[Pattern] = []
        for pattern in patterns:
            if pattern not in unique:
                unique.append(pattern)
        if len(unique) <= 1:
            return 1.0
        if len(unique) > 3:
            return 0.1
        pairs = list(combinations(unique, 2))
        return sum(self.pattern_pair_compatibility(a, b) for a, b in pairs) / len(pairs)

    def suggest_complementary_colors(self, base: ClothingColor) -> List[ClothingColor]:
        """Return up to eight colors that pair well with ``base``."""

        base_hsl = hex_to_hsl(base.hex_code)
        if base_hsl is None:
            return list(BASIC_NEUTRALS)

        hue, saturation, lightness = base_hsl
        suggestions: List[ClothingColor] = []
        for offset in (180.0, 30.0, -30.0, 120.0, 240.0):
            shifted = (hue + offset) % 360
            suggestions.append(
                ClothingColor(name=hue_name(shifted), hex_code=hsl_to_hex(shifted, saturation, lightness))
            )
        suggestions.extend(BASIC_NEUTRALS)

        unique: List[ClothingColor] = []
        for color in suggestions:
            if color not in unique:
                unique.append(color)
        logger.debug("suggested %d colors for %s", len(unique), base.name)
        return unique[:MAX_SUGGESTIONS]


__all__ = [
    "ColorHarmonyAnalyzer",
    "BASIC_NEUTRALS",
    "hex_to_rgb",
    "hex_to_hsl",
    "rgb_to_hsl",
    "hsl_to_hex",
    "hue_name",
    "hue_difference",
    "is_neutral",
]
