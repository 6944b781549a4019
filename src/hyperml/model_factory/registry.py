"""
Task registry: the finite table from task to trainer stage.

Unsupported tasks are a lookup miss, not a branch, so coverage can be asserted
against ``MLTask`` at import time.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from hyperml.exceptions import UnsupportedTaskError
from hyperml.model_factory.estimation import (
    BinaryClassificationTrainer,
    ClusteringTrainer,
    MulticlassClassificationTrainer,
    RegressionTrainer,
    TrainerStage,
)
from hyperml.model_factory.protocols import TaskTrainer
from hyperml.tasks import MLTask

TRAINERS: Mapping[MLTask, type[TrainerStage]] = MappingProxyType(
    {
        MLTask.BINARY_CLASSIFICATION: BinaryClassificationTrainer,
        MLTask.MULTICLASS_CLASSIFICATION: MulticlassClassificationTrainer,
        MLTask.REGRESSION: RegressionTrainer,
        MLTask.CLUSTERING: ClusteringTrainer,
    }
)

FINE_TUNABLE: frozenset[MLTask] = frozenset(
    {
        MLTask.BINARY_CLASSIFICATION,
        MLTask.MULTICLASS_CLASSIFICATION,
        MLTask.REGRESSION,
    }
)


class TaskRegistry:
    """Lookup of trainer stages by task."""

    def __init__(
        self,
        trainers: Mapping[MLTask, type[TrainerStage]] = TRAINERS,
        fine_tunable: frozenset[MLTask] = FINE_TUNABLE,
    ):
        self._trainers = MappingProxyType(dict(trainers))
        self._fine_tunable = frozenset(fine_tunable)
        self.validate_registry()

    def validate_registry(self) -> None:
        """Check that the table is consistent with ``MLTask``."""
        for task, trainer in self._trainers.items():
            if not isinstance(task, MLTask):
                raise TypeError(f"Registry key {task!r} is not an MLTask")
            if trainer.task is not task:
                raise TypeError(
                    f"{trainer.__name__} trains {trainer.task}, registered for {task}"
                )
        extra = self._fine_tunable - set(self._trainers)
        if extra:
            raise ValueError(f"Fine-tunable tasks without a trainer: {sorted(extra)}")

    def supports(self, task: MLTask) -> bool:
        return task in self._trainers

    def supports_fine_tuning(self, task: MLTask) -> bool:
        return task in self._fine_tunable

    def supported_tasks(self) -> list[MLTask]:
        return [t for t in MLTask if t in self._trainers]

    def fine_tunable_tasks(self) -> list[MLTask]:
        return [t for t in MLTask if t in self._fine_tunable]

    def unsupported_tasks(self) -> list[MLTask]:
        return [t for t in MLTask if t not in self._trainers]

    def require(self, task: Any, operation: str = "train") -> type[TrainerStage]:
        """Return the trainer class for ``task`` or raise ``UnsupportedTaskError``."""
        allowed = self._trainers if operation == "train" else self._fine_tunable
        if task not in allowed:
            raise UnsupportedTaskError(task, operation)
        return self._trainers[task]

    def get_trainer(self, task: Any, operation: str = "train", **params: Any) -> TaskTrainer:
        """Construct an unfitted trainer stage for ``task``."""
        trainer_cls = self.require(task, operation)
        return trainer_cls(**params)


# Default registry instance
registry = TaskRegistry()
