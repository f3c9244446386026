"""
engine.py

Cluster-based meal plan recommender.

Pipeline for one request (no state is kept between requests):

  Validating  -> vectorize(profile)               InvalidInput on failure
  Predicting  -> ClusterPredictor.predict(vector)  InferenceFailed on failure
  Retrieving  -> RecipeCatalog.load() (lazy)       CatalogUnavailable on failure
  Filtering   -> filter_by_cluster(cluster_id)     NoRecommendations when empty
  Bucketing   -> bucket_meals(records)             morning / afternoon / evening

Nothing is retried: every failure ends the request with one of the
RecommendationError subclasses from nutrifit.errors.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Tuple

from nutrifit.datasets.base import RecipeRecord
from nutrifit.datasets.recipe_catalog import RecipeCatalog
from nutrifit.errors import (
    CatalogError,
    CatalogUnavailable,
    InferenceError,
    InferenceFailed,
    InvalidInput,
    NoRecommendations,
    ValidationError,
)
from nutrifit.features.vectorizer import UserProfile, vectorize
from nutrifit.inference.predictor import ClusterPredictor
from nutrifit.logging_utils import get_logger

logger = get_logger(__name__)

MEAL_SLOTS: Tuple[str, ...] = ("morning", "afternoon", "evening")
SLOT_SIZE = 3


@dataclass(frozen=True)
class MealPlan:
    morning: Tuple[RecipeRecord, ...] = ()
    afternoon: Tuple[RecipeRecord, ...] = ()
    evening: Tuple[RecipeRecord, ...] = ()
    cluster_id: Optional[int] = None
    # Matches past the nine slot positions; never shown in a slot.
    overflow: Tuple[RecipeRecord, ...] = field(default=(), repr=False)

    def slots(self) -> Dict[str, Tuple[RecipeRecord, ...]]:
        return {name: getattr(self, name) for name in MEAL_SLOTS}

    def is_empty(self) -> bool:
        return not (self.morning or self.afternoon or self.evening)


def bucket_meals(records: Sequence[RecipeRecord], cluster_id: Optional[int] = None) -> MealPlan:
    """Split records, in order, into three consecutive windows of SLOT_SIZE."""
    records = tuple(records)
    windows = [records[i * SLOT_SIZE:(i + 1) * SLOT_SIZE] for i in range(len(MEAL_SLOTS))]
    return MealPlan(
        morning=windows[0],
        afternoon=windows[1],
        evening=windows[2],
        cluster_id=cluster_id,
        overflow=records[len(MEAL_SLOTS) * SLOT_SIZE:],
    )


class RecommendationEngine:
    def __init__(
        self,
        predictor: ClusterPredictor,
        catalog: RecipeCatalog,
        *,
        inference_timeout_s: Optional[float] = None,
        catalog_timeout_s: Optional[float] = None,
    ) -> None:
        self.predictor = predictor
        self.catalog = catalog
        self.inference_timeout_s = inference_timeout_s
        self.catalog_timeout_s = catalog_timeout_s

    # ------------------------------------------------------------------
    # Public APIs
    # ------------------------------------------------------------------
    def recommend(self, profile: UserProfile) -> MealPlan:
        """
        Recommend up to nine recipes for a profile, three per meal slot.

        Raises:
            InvalidInput, InferenceFailed, CatalogUnavailable: hard failures.
            NoRecommendations: the predicted cluster has no recipes (not a fault).
        """
        try:
            vector = vectorize(profile)
        except ValidationError as exc:
            logger.info(
                "Rejected profile: %s",
                exc,
                extra={
                    "invoking_func": "RecommendationEngine.recommend",
                    "invoking_purpose": "Validate user profile",
                    "next_step": "Report invalid input",
                    "resolution": f"Correct the '{exc.field}' field",
                },
            )
            raise InvalidInput(str(exc), field=exc.field) from exc

        try:
            cluster_id = self.predictor.predict_within(vector, self.inference_timeout_s)
        except InferenceError as exc:
            logger.error(
                "Cluster prediction failed: %s",
                exc,
                extra={
                    "invoking_func": "RecommendationEngine.recommend",
                    "invoking_purpose": "Predict body cluster",
                    "next_step": "Report model unavailable",
                    "resolution": "Check NUTRIFIT_MODEL_PATH and the model artifact",
                },
            )
            raise InferenceFailed(str(exc)) from exc
        logger.info("Predicted cluster %d", cluster_id)

        try:
            self.catalog.load_within(self.catalog_timeout_s)
        except CatalogError as exc:
            logger.error(
                "Recipe catalog unavailable: %s",
                exc,
                extra={
                    "invoking_func": "RecommendationEngine.recommend",
                    "invoking_purpose": "Load recipe catalog",
                    "next_step": "Report data unavailable",
                    "resolution": "Check NUTRIFIT_RECIPES_CSV",
                },
            )
            raise CatalogUnavailable(str(exc)) from exc

        matches = self.catalog.filter_by_cluster(cluster_id)
        if not matches:
            logger.warning(
                "No recipes found for cluster %d",
                cluster_id,
                extra={
                    "invoking_func": "RecommendationEngine.recommend",
                    "invoking_purpose": "Filter catalog by cluster",
                    "next_step": "Report nothing found",
                    "resolution": "Tag recipes with this cluster in the CSV",
                },
            )
            raise NoRecommendations(cluster_id, meal_plan=bucket_meals((), cluster_id))

        plan = bucket_meals(matches, cluster_id)
        for slot, recipes in plan.slots().items():
            logger.debug("%s: %s", slot, [r.name for r in recipes])
        if plan.overflow:
            logger.info("%d matching recipes did not fit a meal slot", len(plan.overflow))
        return plan

    def recommend_from_form(
        self,
        *,
        weight: Optional[str],
        height: Optional[str],
        age: Optional[str],
        gender: Optional[str],
        activity_level: Optional[str],
        target_weight: Optional[str],
    ) -> MealPlan:
        """Parse raw form strings, then recommend()."""
        try:
            profile = UserProfile.from_form(
                weight=weight,
                height=height,
                age=age,
                gender=gender,
                activity_level=activity_level,
                target_weight=target_weight,
            )
        except ValidationError as exc:
            raise InvalidInput(str(exc), field=exc.field) from exc
        return self.recommend(profile)
