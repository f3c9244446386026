"""
NutriFit recipe recommender.

Predicts a body/health cluster from a six-field profile with a pre-trained
scikit-learn classifier, then serves the recipes tagged with that cluster as
a three-slot meal plan (morning / afternoon / evening).
"""
