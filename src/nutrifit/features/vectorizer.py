# src/nutrifit/features/vectorizer.py
"""
vectorizer.py

Purpose:
    Turn a user's body profile into the 6-float row the cluster classifier
    was trained on:

        [weight, height, age, gender_code, activity_multiplier, target_weight]

    Two layers:
      - UserProfile.from_form(): boundary parse of the raw strings a form
        submits (trims, strips the "Kg" suffix, parses numbers).
      - vectorize(): pure encoding of a UserProfile into a FeatureVector.
        Gender and activity labels are only validated here.

Any bad field raises ValidationError naming the field; no partial vector is
ever produced.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from nutrifit.errors import ValidationError

Number = Union[int, float]

FEATURE_ORDER: Tuple[str, ...] = (
    "weight",
    "height",
    "age",
    "gender_code",
    "activity_multiplier",
    "target_weight",
)

GENDER_CODES: Dict[str, float] = {
    "Male": 1.0,
    "Female": 0.0,
}

# Keys are the form labels with inner whitespace removed ("Lightly Active" -> "LightlyActive")
ACTIVITY_MULTIPLIERS: Dict[str, float] = {
    "InActive": 1.2,
    "LightlyActive": 1.375,
    "ModeratelyActive": 1.55,
    "VeryActive": 1.725,
    "ExtraActive": 1.9,
}

_UNIT_SUFFIX_RE = re.compile(r"\s*kg\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class UserProfile:
    weight: float
    height: float
    age: int
    gender: str               # "Male" / "Female"
    activity_level: str       # e.g. "Lightly Active"
    target_weight: float

    @classmethod
    def from_form(
        cls,
        *,
        weight: Optional[str],
        height: Optional[str],
        age: Optional[str],
        gender: Optional[str],
        activity_level: Optional[str],
        target_weight: Optional[str],
    ) -> "UserProfile":
        """Parse raw form strings. Raises ValidationError on the first bad field."""
        return cls(
            weight=_parse_float("weight", weight),
            height=_parse_float("height", height),
            age=_parse_int("age", age),
            gender=_require_text("gender", gender),
            activity_level=_require_text("activity_level", activity_level),
            target_weight=_parse_float("target_weight", _strip_unit(target_weight)),
        )


@dataclass(frozen=True)
class FeatureVector:
    weight: float
    height: float
    age: float
    gender_code: float
    activity_multiplier: float
    target_weight: float

    def as_row(self) -> List[float]:
        """Values in FEATURE_ORDER, ready for a single-row model call."""
        return [float(getattr(self, name)) for name in FEATURE_ORDER]

    def __len__(self) -> int:
        return len(FEATURE_ORDER)


def vectorize(profile: UserProfile) -> FeatureVector:
    """
    Encode a profile. Pure and deterministic.

    Raises:
        ValidationError: unknown gender / activity label, or a numeric
        field that is missing, non-finite or not positive.
    """
    gender_code = GENDER_CODES.get(_label_key(profile.gender, keep_spaces=True))
    if gender_code is None:
        raise ValidationError("gender", f"expected one of {sorted(GENDER_CODES)}, got {profile.gender!r}")

    multiplier = ACTIVITY_MULTIPLIERS.get(_label_key(profile.activity_level))
    if multiplier is None:
        raise ValidationError(
            "activity_level",
            f"expected one of {sorted(ACTIVITY_MULTIPLIERS)}, got {profile.activity_level!r}",
        )

    if isinstance(profile.age, bool) or not isinstance(profile.age, int):
        raise ValidationError("age", f"must be a whole number, got {profile.age!r}")

    return FeatureVector(
        weight=_check_positive("weight", profile.weight),
        height=_check_positive("height", profile.height),
        age=_check_positive("age", profile.age),
        gender_code=gender_code,
        activity_multiplier=multiplier,
        target_weight=_check_positive("target_weight", profile.target_weight),
    )


# ----------------------------------------------------------------------
# Internal helpers
# ----------------------------------------------------------------------
def _label_key(label: Optional[str], keep_spaces: bool = False) -> str:
    if not isinstance(label, str):
        return ""
    if keep_spaces:
        return label.strip()
    return re.sub(r"\s+", "", label)


def _check_positive(field: str, value: Optional[Number]) -> float:
    if value is None or isinstance(value, bool):
        raise ValidationError(field, "is required")
    try:
        f = float(value)
    except (TypeError, ValueError):
        raise ValidationError(field, f"must be a number, got {value!r}") from None
    if not math.isfinite(f) or f <= 0:
        raise ValidationError(field, f"must be a positive number, got {value!r}")
    return f


def _require_text(field: str, raw: Optional[str]) -> str:
    if raw is None or not str(raw).strip():
        raise ValidationError(field, "is required")
    return str(raw).strip()


def _strip_unit(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    return _UNIT_SUFFIX_RE.sub("", str(raw))


def _parse_float(field: str, raw: Optional[str]) -> float:
    s = _require_text(field, raw)
    try:
        value = float(s)
    except ValueError:
        raise ValidationError(field, f"must be a number, got {raw!r}") from None
    return _check_positive(field, value)


def _parse_int(field: str, raw: Optional[str]) -> int:
    s = _require_text(field, raw)
    try:
        value = int(s)
    except ValueError:
        raise ValidationError(field, f"must be a whole number, got {raw!r}") from None
    _check_positive(field, value)
    return value
