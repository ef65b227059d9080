"""Typed failures raised by the recommendation engine."""

from __future__ import annotations


class RecommendationError(Exception):
    """Base class for engine failures a caller can render to the user."""

    default_message = "Outfit recommendation failed."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class MissingUserError(RecommendationError, LookupError):
    default_message = "User not found. Please log in again."


class EmptyWardrobeError(RecommendationError, ValueError):
    default_message = "Your wardrobe is empty. Add some clothing items to generate outfits."


class NoSuitableItemsError(RecommendationError, ValueError):
    default_message = "No suitable items found for the selected criteria. Try adjusting your filters."


class SlotConflictError(RecommendationError, ValueError):
    """Two required items compete for the same exclusive body slot."""

    default_message = "Outfit has conflicting items in an exclusive slot."


class InvalidRatingError(RecommendationError, ValueError):
    default_message = "Rating must be between 1 and 5."


class OutfitNotFoundError(RecommendationError, LookupError):
    default_message = "Outfit not found."


class NoRatedOutfitsError(RecommendationError, LookupError):
    default_message = "No rated outfits yet. Rate a few outfits to see insights."


__all__ = [
    "RecommendationError",
    "MissingUserError",
    "EmptyWardrobeError",
    "NoSuitableItemsError",
    "SlotConflictError",
    "InvalidRatingError",
    "OutfitNotFoundError",
    "NoRatedOutfitsError",
]
