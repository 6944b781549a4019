"""
Evaluation primitives for prediction frames.

Each evaluator inspects the columns written by the pipeline and raises
``EvaluationError`` when the frame does not have the shape it needs. Rows
whose label is missing are ignored.
"""

from collections.abc import Mapping, Sequence
from types import MappingProxyType

import numpy as np
import pandas as pd
from pandas.api.types import is_bool_dtype, is_numeric_dtype
from sklearn.metrics import (
    accuracy_score,
    balanced_accuracy_score,
    f1_score,
    mean_squared_error,
    r2_score,
    roc_auc_score,
)

from hyperml.exceptions import EvaluationError
from hyperml.model_factory.evaluation.context import EvaluationContext
from hyperml.model_factory.protocols import Frame, PredictionEvaluator
from hyperml.tasks import MLTask

BINARY_METRICS = ("Accuracy", "F1Score", "AUC")
REGRESSION_METRICS = ("RSquared", "RMSE")
MULTICLASS_METRICS = ("MicroAccuracy", "MacroAccuracy")


def require_columns(predictions: Frame, columns: Sequence[str]) -> None:
    missing = [c for c in columns if c not in predictions.columns]
    if missing:
        raise EvaluationError(f"Prediction frame is missing columns: {missing}")


def is_vector_column(column: pd.Series) -> bool:
    """True if every cell of ``column`` holds a 1D array."""
    if column.dtype != object or len(column) == 0:
        return False
    return all(isinstance(v, np.ndarray) and v.ndim == 1 for v in column)


def is_scalar_numeric(column: pd.Series) -> bool:
    return is_numeric_dtype(column) or is_bool_dtype(column)


def evaluate_binary(predictions: Frame, context: EvaluationContext) -> dict[str, float]:
    """Accuracy, F1 and ROC AUC of the positive (second) label key."""
    cols = context.columns
    require_columns(predictions, [cols.label_key, cols.probability])

    probability = predictions[cols.probability]
    if not is_numeric_dtype(probability):
        raise EvaluationError("Probability column is not numeric")

    keys = predictions[cols.label_key].to_numpy(dtype=np.int64)
    known = keys > 0
    keys = keys[known]
    probability = probability.to_numpy(dtype=np.float64)[known]

    if keys.size == 0:
        raise EvaluationError("No labelled rows to evaluate")
    if keys.max() > 2:
        raise EvaluationError(f"Expected at most two label keys, found {np.unique(keys).size}")

    y_true = (keys == 2).astype(np.int64)
    if np.unique(y_true).size < 2:
        raise EvaluationError("Both classes must be present to compute AUC")

    y_pred = (probability >= context.decision_threshold).astype(np.int64)
    return {
        "Accuracy": float(accuracy_score(y_true, y_pred)),
        "F1Score": float(f1_score(y_true, y_pred, zero_division=0.0)),
        "AUC": float(roc_auc_score(y_true, probability)),
    }


def evaluate_regression(predictions: Frame, context: EvaluationContext) -> dict[str, float]:
    """R squared and root mean squared error of a scalar score."""
    cols = context.columns
    require_columns(predictions, [context.label_column, cols.score])

    label = predictions[context.label_column]
    score = predictions[cols.score]
    if not (is_scalar_numeric(label) and is_scalar_numeric(score)):
        raise EvaluationError("Regression needs a numeric label and a numeric scalar score")

    y_true = label.to_numpy(dtype=np.float64)
    y_pred = score.to_numpy(dtype=np.float64)
    known = ~np.isnan(y_true)
    if not known.any():
        raise EvaluationError("No labelled rows to evaluate")

    y_true, y_pred = y_true[known], y_pred[known]
    return {
        "RSquared": float(r2_score(y_true, y_pred)),
        "RMSE": float(np.sqrt(mean_squared_error(y_true, y_pred))),
    }


def evaluate_multiclass(predictions: Frame, context: EvaluationContext) -> dict[str, float]:
    """Micro accuracy (overall) and macro accuracy (mean per-class recall)."""
    cols = context.columns
    require_columns(predictions, [context.label_column, cols.score, cols.predicted_label])

    if not is_vector_column(predictions[cols.score]):
        raise EvaluationError("Score column is not vector-valued")

    known = predictions[context.label_column].notna().to_numpy()
    if not known.any():
        raise EvaluationError("No labelled rows to evaluate")

    y_true = predictions[context.label_column].to_numpy()[known]
    y_pred = predictions[cols.predicted_label].to_numpy()[known]
    return {
        "MicroAccuracy": float(accuracy_score(y_true, y_pred)),
        "MacroAccuracy": float(balanced_accuracy_score(y_true, y_pred)),
    }


# Probe order used by the metrics extractor
PROBES: tuple[tuple[str, PredictionEvaluator], ...] = (
    ("binary", evaluate_binary),
    ("regression", evaluate_regression),
    ("multiclass", evaluate_multiclass),
)

TASK_EVALUATORS: Mapping[MLTask, PredictionEvaluator] = MappingProxyType(
    {
        MLTask.BINARY_CLASSIFICATION: evaluate_binary,
        MLTask.REGRESSION: evaluate_regression,
        MLTask.MULTICLASS_CLASSIFICATION: evaluate_multiclass,
    }
)
