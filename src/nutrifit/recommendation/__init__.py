"""
Recommendation layer (NutriFit)

This package composes the pipeline pieces into one request flow:
  - features.vectorizer   (profile -> 6-float row)
  - inference.predictor   (row -> cluster id)
  - datasets.recipe_catalog (cluster id -> tagged recipes)

and splits the matches into the three meal slots. It holds no state across
requests; the only long-lived object it touches is the cached catalog.
"""
from nutrifit.recommendation.engine import MealPlan, RecommendationEngine, bucket_meals

__all__ = ["MealPlan", "RecommendationEngine", "bucket_meals"]
