"""
config.py

Purpose:
    Provide a single function get_settings() that reads the recommender's
    runtime settings (model artifact, recipe CSV, log level, optional
    timeouts) from environment variables.

Usage:
    from nutrifit.config import get_settings
"""
from __future__ import annotations
import os       # os module to read environment variables

from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv      # Load environment variables from .env file

load_dotenv()  # loads .env

DEFAULT_MODEL_PATH = os.path.join("models_store", "cluster_clf.joblib")
DEFAULT_RECIPES_CSV = os.path.join("data", "recipes.csv")


@dataclass(frozen=True)
class Settings:
    model_path: str
    recipes_csv: str
    log_level: str = "INFO"
    inference_timeout_s: Optional[float] = None   # None = unbounded
    catalog_timeout_s: Optional[float] = None


def _optional_float(name: str) -> Optional[float]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number of seconds, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


# Settings are read on every call so tests can monkeypatch the environment.
def get_settings() -> Settings:
    """Build Settings from env vars, falling back to repo-relative defaults."""
    return Settings(
        model_path=os.environ.get("NUTRIFIT_MODEL_PATH") or DEFAULT_MODEL_PATH,
        recipes_csv=os.environ.get("NUTRIFIT_RECIPES_CSV") or DEFAULT_RECIPES_CSV,
        log_level=(os.environ.get("NUTRIFIT_LOG_LEVEL") or "INFO").upper(),
        inference_timeout_s=_optional_float("NUTRIFIT_INFERENCE_TIMEOUT_S"),
        catalog_timeout_s=_optional_float("NUTRIFIT_CATALOG_TIMEOUT_S"),
    )
