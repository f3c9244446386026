# src/nutrifit/inference/scorers.py
"""
scorers.py

Purpose:
    Own the cluster classifier as a scoped resource.

Expected artifact (default path, configurable via NUTRIFIT_MODEL_PATH):
  - models_store/cluster_clf.joblib   (scikit-learn estimator or Pipeline
                                       trained on the 6-column profile row)

Usage:
    with JoblibModelScorer.from_settings() as scorer:
        predictor = ClusterPredictor(scorer)
        ...

The model is loaded on __enter__ and released on __exit__, whatever happened
inside the block.
"""
from __future__ import annotations

import os
from typing import Any, List, Optional, Sequence

import joblib
import numpy as np

from nutrifit.errors import InferenceError
from nutrifit.logging_utils import get_logger

logger = get_logger("scorers")


class JoblibModelScorer:
    """Scores one feature row with a joblib-serialized sklearn classifier."""

    def __init__(self, model_path: str) -> None:
        self.model_path = model_path
        self._model: Optional[Any] = None

    @classmethod
    def from_settings(cls, settings=None) -> "JoblibModelScorer":
        if settings is None:
            from nutrifit.config import get_settings

            settings = get_settings()
        return cls(settings.model_path)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @property
    def is_open(self) -> bool:
        return self._model is not None

    def open(self) -> "JoblibModelScorer":
        if self._model is not None:
            return self
        if not os.path.exists(self.model_path):
            raise InferenceError(f"model artifact not found: {self.model_path}")
        try:
            model = joblib.load(self.model_path)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Failed to load cluster model '%s': %s",
                self.model_path,
                exc,
                extra={
                    "invoking_func": "JoblibModelScorer.open",
                    "invoking_purpose": "Load cluster model artifact",
                    "next_step": "Raise InferenceError",
                    "resolution": "Check joblib file integrity / sklearn version",
                },
            )
            raise InferenceError(f"could not load model {self.model_path}: {exc}") from exc

        if not (hasattr(model, "predict_proba") or hasattr(model, "decision_function")):
            raise InferenceError(
                f"model in {self.model_path} exposes neither predict_proba nor decision_function"
            )
        self._model = model
        logger.info(
            "Loaded cluster model %s (%s)",
            self.model_path,
            type(model).__name__,
            extra={
                "invoking_func": "JoblibModelScorer.open",
                "invoking_purpose": "Load cluster model artifact",
                "next_step": "Serve single-row predictions",
                "resolution": "",
            },
        )
        return self

    def close(self) -> None:
        self._model = None

    def __enter__(self) -> "JoblibModelScorer":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Scoring
    # ------------------------------------------------------------------
    def __call__(self, row: Sequence[float]) -> List[float]:
        if self._model is None:
            raise InferenceError("scorer is closed; use it inside a 'with' block")
        X = np.asarray([row], dtype=float)
        if hasattr(self._model, "predict_proba"):
            out = np.asarray(self._model.predict_proba(X), dtype=float)
        else:
            out = np.asarray(self._model.decision_function(X), dtype=float)
        scores = out.reshape(len(X), -1)[0]
        if out.ndim == 1 and len(scores) == 1:
            # Binary margin models give one signed distance per row; positive favours classes_[1]
            scores = np.array([-scores[0], scores[0]])

        n_classes = self._n_classes()
        if n_classes is not None and len(scores) != n_classes:
            raise InferenceError(
                f"model returned {len(scores)} scores for {n_classes} cluster labels"
            )
        return [float(x) for x in scores]

    def _n_classes(self) -> Optional[int]:
        classes = getattr(self._model, "classes_", None)
        if classes is None and hasattr(self._model, "steps"):
            # Some sklearn pipelines expose classes_ on last step only
            classes = getattr(self._model.steps[-1][1], "classes_", None)
        return None if classes is None else len(classes)
