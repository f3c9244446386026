# src/nutrifit/inference/predictor.py
"""
predictor.py

Purpose:
    Reduce a classifier's score row to one cluster id.

The scorer is any callable taking the 6-float feature row and returning one
score per cluster label (a flat row, or a single-row batch of shape (1, k)).
The predictor knows nothing else about it.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence

import numpy as np

from nutrifit.concurrency import CallTimedOut, call_with_timeout
from nutrifit.errors import InferenceError
from nutrifit.features.vectorizer import FeatureVector
from nutrifit.logging_utils import get_logger

logger = get_logger("predictor")

Scorer = Callable[[Sequence[float]], Sequence[float]]


class ClusterPredictor:
    def __init__(self, scorer: Scorer) -> None:
        self.scorer = scorer

    def predict(self, vector: FeatureVector) -> int:
        """
        Arg-max over the scorer's output. Ties go to the lowest index.

        Raises:
            InferenceError: the scorer raised, or returned nothing usable.
        """
        row = vector.as_row()
        logger.debug("Input row: %s", row)
        try:
            raw = self.scorer(row)
        except InferenceError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise InferenceError(f"scorer failed: {exc}") from exc
        return self._argmax(raw)

    def predict_within(self, vector: FeatureVector, timeout: Optional[float]) -> int:
        """Time-bounded predict(); an overrun raises InferenceError."""
        try:
            return call_with_timeout(lambda: self.predict(vector), timeout)
        except CallTimedOut as exc:
            raise InferenceError(f"scorer did not answer within {timeout}s") from exc

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _argmax(raw) -> int:
        if raw is None:
            raise InferenceError("scorer returned no output")
        try:
            scores = np.asarray(raw, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InferenceError(f"scorer returned non-numeric output: {raw!r}") from exc

        # Single-row batch -> flat row
        if scores.ndim == 2 and scores.shape[0] == 1:
            scores = scores[0]
        if scores.ndim != 1:
            raise InferenceError(f"expected one score row, got shape {scores.shape}")
        if scores.size == 0:
            raise InferenceError("scorer returned an empty score row")
        if not np.all(np.isfinite(scores)):
            raise InferenceError(f"scorer returned non-finite scores: {scores.tolist()}")

        # np.argmax returns the first occurrence of the max
        cluster_id = int(scores.argmax())
        logger.debug("Raw scores: %s -> cluster %d", scores.tolist(), cluster_id)
        return cluster_id
