import time

import numpy as np
import pytest

from nutrifit.errors import InferenceError
from nutrifit.features.vectorizer import vectorize
from nutrifit.inference.predictor import ClusterPredictor


def test_argmax_picks_highest_score(profile, fixed_scorer):
    scorer = fixed_scorer([0.1, 0.7, 0.2])
    assert ClusterPredictor(scorer).predict(vectorize(profile)) == 1
    assert scorer.calls == [[70.0, 175.0, 30.0, 1.0, 1.375, 65.0]]


def test_tie_goes_to_lowest_index(profile, fixed_scorer):
    assert ClusterPredictor(fixed_scorer([0.4, 0.4, 0.1])).predict(vectorize(profile)) == 0
    assert ClusterPredictor(fixed_scorer([0.1, 0.45, 0.45])).predict(vectorize(profile)) == 1


def test_single_row_batch_is_flattened(profile, fixed_scorer):
    scorer = fixed_scorer(np.array([[0.05, 0.15, 0.8]]))
    assert ClusterPredictor(scorer).predict(vectorize(profile)) == 2


def test_deterministic(profile, fixed_scorer):
    predictor = ClusterPredictor(fixed_scorer([0.3, 0.2, 0.5]))
    vec = vectorize(profile)
    assert {predictor.predict(vec) for _ in range(5)} == {2}


@pytest.mark.parametrize(
    "scores",
    [None, [], [[]], [[0.1, 0.9], [0.9, 0.1]], ["a", "b"], [0.1, float("nan")]],
)
def test_degenerate_output_raises(profile, fixed_scorer, scores):
    with pytest.raises(InferenceError):
        ClusterPredictor(fixed_scorer(scores)).predict(vectorize(profile))


def test_scorer_exception_is_wrapped(profile):
    def boom(row):
        raise RuntimeError("interpreter crashed")

    with pytest.raises(InferenceError) as ei:
        ClusterPredictor(boom).predict(vectorize(profile))
    assert isinstance(ei.value.__cause__, RuntimeError)


def test_predict_within_no_timeout_behaves_like_predict(profile, fixed_scorer):
    predictor = ClusterPredictor(fixed_scorer([0.1, 0.7, 0.2]))
    assert predictor.predict_within(vectorize(profile), None) == 1
    assert predictor.predict_within(vectorize(profile), 5.0) == 1


def test_predict_within_times_out(profile):
    def slow(row):
        time.sleep(0.5)
        return [1.0]

    with pytest.raises(InferenceError, match="within"):
        ClusterPredictor(slow).predict_within(vectorize(profile), 0.05)
