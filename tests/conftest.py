"""
Shared fixtures: small in-memory recipe catalogs and fake scorers.
"""
import io
import logging

import pytest

from nutrifit.datasets.recipe_catalog import RecipeCatalog
from nutrifit.features.vectorizer import UserProfile

HEADER = "name,calories,type,image,cluster\n"


def make_csv(rows):
    """rows: iterable of (name, calories, type, image, cluster) tuples."""
    lines = [",".join(str(c) for c in row) for row in rows]
    return HEADER + "\n".join(lines) + "\n"


@pytest.fixture(autouse=True)
def _capture_debug_logs(caplog):
    caplog.set_level(logging.DEBUG)


@pytest.fixture
def profile():
    return UserProfile(
        weight=70.0,
        height=175.0,
        age=30,
        gender="Male",
        activity_level="Lightly Active",
        target_weight=65.0,
    )


@pytest.fixture
def cluster_one_rows():
    # 10 cluster-1 rows interleaved with other clusters and one malformed value
    rows = []
    for i in range(10):
        rows.append((f"Recipe {i}", 100 + i, "Lauk", f"r{i}.jpg", 1))
        if i % 3 == 0:
            rows.append((f"Other {i}", 200 + i, "Sayur", f"o{i}.jpg", 0))
    rows.append(("Broken", 300, "Snack", "b.jpg", "one"))
    return rows


@pytest.fixture
def catalog(cluster_one_rows):
    return RecipeCatalog(io.StringIO(make_csv(cluster_one_rows)))


class FixedScorer:
    """Returns the same scores every call and remembers the rows it saw."""

    def __init__(self, scores):
        self.scores = scores
        self.calls = []

    def __call__(self, row):
        self.calls.append(list(row))
        return self.scores


@pytest.fixture
def fixed_scorer():
    return FixedScorer
