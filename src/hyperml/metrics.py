"""
Task-oblivious metrics extractor.

``ModelMetrics`` does not know which task produced the predictions. It tries
the binary, regression and multiclass evaluators in that fixed order and keeps
the metrics of the first one that succeeds. The order matters: a frame can
satisfy more than one evaluator, and the first match wins. When every probe
fails the only metric is ``Info = -1``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

import pandas as pd

from hyperml.exceptions import EvaluationError
from hyperml.model_factory.evaluation import PROBES, TASK_EVALUATORS, EvaluationContext
from hyperml.tasks import MLTask

logger = logging.getLogger(__name__)

INFO_KEY = "Info"
INFO_SENTINEL = -1.0


def format_metric(value: float) -> str:
    """Render a metric value, dropping the fraction of whole numbers (``-1`` not ``-1.0``)."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return str(value)


class ModelMetrics:
    """
    Evaluation metrics for a prediction frame.

    Metrics keep insertion order. The key set depends only on which probe
    succeeded first:

    - binary: ``Accuracy``, ``F1Score``, ``AUC``
    - regression: ``RSquared``, ``RMSE``
    - multiclass: ``MicroAccuracy``, ``MacroAccuracy``
    - none: ``Info`` (-1)
    """

    def __init__(
        self,
        context: EvaluationContext,
        predictions: pd.DataFrame,
        training_data: Optional[pd.DataFrame] = None,
        task: Optional[MLTask] = None,
    ):
        """
        Score predictions, probing the evaluators unless ``task`` is given.

        Args:
            context: Column layout of the prediction frame
            predictions: Output of a fitted pipeline on labelled data
            training_data: Dataset the model was fitted on
            task: Score with this task's evaluator only, without probing

        Raises:
            EvaluationError: If ``task`` is given and its evaluator does not apply
        """
        self.context = context
        self.training_data = training_data
        self.probe: Optional[str] = None
        self._metrics: dict[str, float] = {}

        if task is not None:
            self._evaluate_task(task, predictions)
            return

        for name, evaluator in PROBES:
            try:
                result = evaluator(predictions, context)
            except Exception as exc:
                logger.debug(f"{name} evaluation probe failed: {exc}")
                continue
            self.probe = name
            self._metrics.update(result)
            break
        else:
            self._metrics[INFO_KEY] = INFO_SENTINEL

    @classmethod
    def for_task(
        cls,
        task: MLTask,
        context: EvaluationContext,
        predictions: pd.DataFrame,
        training_data: Optional[pd.DataFrame] = None,
    ) -> ModelMetrics:
        """
        Score predictions with the evaluator of ``task`` directly.

        Produces the same key sets as probing but never falls through to
        another evaluator; evaluation errors propagate.

        Raises:
            EvaluationError: If ``task`` has no evaluator or the frame does not fit it
        """
        return cls(context, predictions, training_data, task=task)

    def _evaluate_task(self, task: MLTask, predictions: pd.DataFrame) -> None:
        evaluator = TASK_EVALUATORS.get(task)
        if evaluator is None:
            raise EvaluationError(f"No evaluator for task {task}")
        self._metrics.update(evaluator(predictions, self.context))
        self.probe = str(task)

    def get_all_metrics(self) -> dict[str, float]:
        """Get all evaluation metrics in insertion order."""
        return dict(self._metrics)

    def get_metric(self, name: str) -> float:
        """Get a metric by name, NaN if absent."""
        return self._metrics.get(name, math.nan)

    def print_metrics(self) -> str:
        """Render the metrics as ``Model Metrics:`` followed by one line per entry."""
        lines = ["Model Metrics:"]
        lines.extend(f"{key}: {format_metric(value)}" for key, value in self._metrics.items())
        return "\n".join(lines) + "\n"

    def __contains__(self, name: Any) -> bool:
        return name in self._metrics

    def __str__(self) -> str:
        return self.print_metrics()

    def __repr__(self) -> str:
        return f"ModelMetrics(probe={self.probe!r}, metrics={self._metrics})"
