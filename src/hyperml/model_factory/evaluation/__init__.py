"""Evaluation module for scoring prediction frames."""

from .context import EvaluationContext
from .evaluation_functions import (
    PROBES,
    TASK_EVALUATORS,
    evaluate_binary,
    evaluate_multiclass,
    evaluate_regression,
)

__all__ = [
    "EvaluationContext",
    "PROBES",
    "TASK_EVALUATORS",
    "evaluate_binary",
    "evaluate_multiclass",
    "evaluate_regression",
]
