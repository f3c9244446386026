"""
errors.py

Purpose:
    Exception taxonomy shared by every pipeline stage.

    Stage errors (ValidationError, InferenceError, CatalogError) are raised
    where the problem is detected. The RecommendationEngine converts each of
    them, exactly once, into one of the terminal RecommendationError
    subclasses below, chaining the stage error as __cause__.
"""
from __future__ import annotations

from typing import Optional


class NutriFitError(Exception):
    """Base class for all recommender errors."""


# ----------------------------------------------------------------------
# Stage errors
# ----------------------------------------------------------------------
class ValidationError(NutriFitError):
    """A user-entered field is missing or cannot be parsed."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message


class InferenceError(NutriFitError):
    """The scorer is unavailable, failed, or returned degenerate output."""


class CatalogError(NutriFitError):
    """The recipe source could not be read or has an unusable header."""


class EmptyCatalogError(CatalogError):
    """The recipe source was readable but produced no usable rows."""


# ----------------------------------------------------------------------
# Terminal pipeline outcomes
# ----------------------------------------------------------------------
class RecommendationError(NutriFitError):
    """Terminal outcome of a single recommend() call."""

    user_message: str = "Something went wrong."
    is_fault: bool = True

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail or self.user_message)
        self.detail = detail


class InvalidInput(RecommendationError):
    user_message = "Please fill in all fields correctly."

    def __init__(self, detail: str = "", field: Optional[str] = None) -> None:
        super().__init__(detail)
        self.field = field


class InferenceFailed(RecommendationError):
    user_message = "The recommendation model is unavailable right now."


class CatalogUnavailable(RecommendationError):
    user_message = "Recipe data is unavailable right now."


class NoRecommendations(RecommendationError):
    """Nothing in the catalog matched the predicted cluster. Not a fault."""

    user_message = "No recipes available for your profile yet."
    is_fault = False

    def __init__(self, cluster_id: int, meal_plan=None) -> None:
        super().__init__(f"no recipes tagged with cluster {cluster_id}")
        self.cluster_id = cluster_id
        self.meal_plan = meal_plan
