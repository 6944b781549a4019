"""Unit tests for evaluation primitives."""

import numpy as np
import pandas as pd
import pytest

from hyperml.exceptions import EvaluationError
from hyperml.model_factory.evaluation import (
    EvaluationContext,
    evaluate_binary,
    evaluate_multiclass,
    evaluate_regression,
)
from hyperml.model_factory.evaluation.evaluation_functions import (
    PROBES,
    is_vector_column,
)


@pytest.fixture
def context():
    return EvaluationContext(label_column="label")


@pytest.fixture
def binary_predictions():
    return pd.DataFrame(
        {
            "label": [False, True, True, False, True],
            "LabelKey": [1, 2, 2, 1, 2],
            "Score": [-2.0, 1.5, 0.3, -0.1, -0.4],
            "Probability": [0.1, 0.8, 0.6, 0.45, 0.4],
            "PredictedLabel": [False, True, True, False, False],
        }
    )


@pytest.fixture
def multiclass_predictions():
    scores = [np.array(p) for p in ([0.8, 0.1, 0.1], [0.1, 0.7, 0.2], [0.2, 0.2, 0.6], [0.5, 0.4, 0.1])]
    return pd.DataFrame(
        {
            "label": ["a", "b", "c", "b"],
            "LabelKey": [1, 2, 3, 2],
            "Score": pd.Series(scores, dtype=object),
            "PredictedLabel": ["a", "b", "c", "a"],
        }
    )


class TestEvaluateBinary:
    """Test suite for evaluate_binary."""

    def test_metrics(self, binary_predictions, context):
        result = evaluate_binary(binary_predictions, context)

        assert list(result) == ["Accuracy", "F1Score", "AUC"]
        assert result["Accuracy"] == pytest.approx(0.8)
        assert result["F1Score"] == pytest.approx(0.8)
        assert result["AUC"] == pytest.approx(5 / 6)

    def test_requires_probability(self, binary_predictions, context):
        with pytest.raises(EvaluationError, match="missing columns"):
            evaluate_binary(binary_predictions.drop(columns=["Probability"]), context)

    def test_requires_both_classes(self, binary_predictions, context):
        only_positive = binary_predictions[binary_predictions["LabelKey"] == 2]

        with pytest.raises(EvaluationError, match="Both classes"):
            evaluate_binary(only_positive, context)

    def test_rejects_more_than_two_keys(self, binary_predictions, context):
        frame = binary_predictions.copy()
        frame.loc[0, "LabelKey"] = 3

        with pytest.raises(EvaluationError, match="at most two"):
            evaluate_binary(frame, context)

    def test_unlabelled_rows_are_ignored(self, binary_predictions, context):
        frame = binary_predictions.copy()
        frame.loc[4, "LabelKey"] = 0

        assert evaluate_binary(frame, context)["Accuracy"] == pytest.approx(1.0)


class TestEvaluateRegression:
    """Test suite for evaluate_regression."""

    def test_metrics(self, context):
        frame = pd.DataFrame({"label": [1.0, 2.0, 3.0, 4.0], "Score": [1.0, 2.0, 3.0, 5.0]})
        result = evaluate_regression(frame, context)

        assert list(result) == ["RSquared", "RMSE"]
        assert result["RMSE"] == pytest.approx(0.5)
        assert result["RSquared"] == pytest.approx(1 - 1 / 5)

    def test_rejects_vector_score(self, multiclass_predictions, context):
        with pytest.raises(EvaluationError, match="numeric"):
            evaluate_regression(multiclass_predictions, context)

    def test_rejects_all_missing_labels(self, context):
        frame = pd.DataFrame({"label": [np.nan, np.nan], "Score": [1.0, 2.0]})

        with pytest.raises(EvaluationError, match="No labelled rows"):
            evaluate_regression(frame, context)


class TestEvaluateMulticlass:
    """Test suite for evaluate_multiclass."""

    def test_metrics(self, multiclass_predictions, context):
        result = evaluate_multiclass(multiclass_predictions, context)

        assert list(result) == ["MicroAccuracy", "MacroAccuracy"]
        assert result["MicroAccuracy"] == pytest.approx(0.75)
        # per-class recall: a=1, b=0.5, c=1
        assert result["MacroAccuracy"] == pytest.approx(2.5 / 3)

    def test_rejects_scalar_score(self, binary_predictions, context):
        with pytest.raises(EvaluationError, match="vector-valued"):
            evaluate_multiclass(binary_predictions, context)


class TestHelpers:
    """Test suite for helper functions and the probe table."""

    def test_is_vector_column(self, multiclass_predictions, binary_predictions):
        assert is_vector_column(multiclass_predictions["Score"])
        assert not is_vector_column(binary_predictions["Score"])
        assert not is_vector_column(pd.Series([], dtype=object))

    def test_probe_order(self):
        assert [name for name, _ in PROBES] == ["binary", "regression", "multiclass"]
