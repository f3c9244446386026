"""
recommendation_example.py

Example usage of the RecommendationEngine.

Run:
  python -m nutrifit.recommendation.recommendation_example \
      --weight 70 --height 175 --age 30 --gender Male \
      --activity "Lightly Active" --target "65 Kg"

Requires:
  NUTRIFIT_MODEL_PATH   (joblib classifier, default models_store/cluster_clf.joblib)
  NUTRIFIT_RECIPES_CSV  (default data/recipes.csv)
"""
from __future__ import annotations

import argparse
from typing import List, Optional

from nutrifit.config import get_settings
from nutrifit.datasets.recipe_catalog import RecipeCatalog
from nutrifit.errors import (
    InferenceError,
    InferenceFailed,
    InvalidInput,
    RecommendationError,
    ValidationError,
)
from nutrifit.features.vectorizer import UserProfile, vectorize
from nutrifit.inference.predictor import ClusterPredictor
from nutrifit.inference.scorers import JoblibModelScorer
from nutrifit.logging_utils import RUN_ID, get_logger
from nutrifit.recommendation.engine import MealPlan, RecommendationEngine

logger = get_logger("recommendation_example")


def _print_plan(plan: MealPlan) -> None:
    print(f"Cluster {plan.cluster_id}")
    for slot, recipes in plan.slots().items():
        print(f"{slot.capitalize()}:")
        if not recipes:
            print("    (none)")
        for r in recipes:
            print(f"    - {r.name}  {r.calories} kcal  [{r.type}]")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--weight", required=True)
    ap.add_argument("--height", required=True)
    ap.add_argument("--age", required=True)
    ap.add_argument("--gender", required=True, help="Male or Female")
    ap.add_argument("--activity", required=True)
    ap.add_argument("--target", required=True, help='Target weight, e.g. "65 Kg"')
    ap.add_argument("--model", default=None, help="Override NUTRIFIT_MODEL_PATH")
    ap.add_argument("--csv", default=None, help="Override NUTRIFIT_RECIPES_CSV")
    args = ap.parse_args(argv)

    settings = get_settings()
    logger.info("Run %s started", RUN_ID)
    catalog = RecipeCatalog(args.csv or settings.recipes_csv)

    # Reject bad form input before touching the model
    try:
        profile = UserProfile.from_form(
            weight=args.weight,
            height=args.height,
            age=args.age,
            gender=args.gender,
            activity_level=args.activity,
            target_weight=args.target,
        )
        vectorize(profile)
    except ValidationError as exc:
        logger.info("Rejected form input: %s", exc)
        print(InvalidInput.user_message)
        return 1

    try:
        with JoblibModelScorer(args.model or settings.model_path) as scorer:
            engine = RecommendationEngine(
                ClusterPredictor(scorer),
                catalog,
                inference_timeout_s=settings.inference_timeout_s,
                catalog_timeout_s=settings.catalog_timeout_s,
            )
            plan = engine.recommend(profile)
    except InferenceError:
        # Model could not even be opened
        print(InferenceFailed.user_message)
        return 1
    except RecommendationError as exc:
        print(exc.user_message)
        return 1 if exc.is_fault else 0

    _print_plan(plan)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
