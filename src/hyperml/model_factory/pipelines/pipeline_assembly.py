"""
Pipeline assembly for hyperml models.

This module provides functions for creating the full training pipeline
(feature assembly, label key encoding, trainer), the trainer-only pipeline
used for fine-tuning, and the composition of fitted pipelines by append.
"""

from typing import Any

from sklearn.pipeline import Pipeline

from hyperml.config import HyperMLConfig
from hyperml.model_factory.pipelines.stages import FeatureConcatenator, LabelKeyEncoder
from hyperml.model_factory.protocols import FrameTransformer
from hyperml.model_factory.registry import TaskRegistry, registry
from hyperml.tasks import MLTask


def trainer_params(
    task: MLTask,
    label_column: str,
    runtime_config: HyperMLConfig,
    max_iterations: int | None = None,
    l2_regularization: float | None = None,
) -> dict[str, Any]:
    """
    Collect constructor parameters for the trainer of ``task``.

    Args:
        task: Task whose trainer is being built
        label_column: Raw label column name
        runtime_config: Runtime configuration supplying defaults
        max_iterations: Overrides the configured default when given
        l2_regularization: Overrides the configured default when given

    Returns:
        Keyword arguments for the trainer class
    """
    defaults = runtime_config.trainer
    params: dict[str, Any] = {
        "label_column": label_column,
        "max_iterations": defaults.max_iterations if max_iterations is None else max_iterations,
        "l2_regularization": (
            defaults.l2_regularization if l2_regularization is None else l2_regularization
        ),
        "columns": runtime_config.columns,
        "scale_features": defaults.scale_features,
        "random_state": runtime_config.seed,
    }
    if task is MLTask.BINARY_CLASSIFICATION:
        params["threshold"] = runtime_config.evaluation.decision_threshold
    elif task is MLTask.CLUSTERING:
        params["n_clusters"] = defaults.n_clusters
    return params


def get_pipeline(
    task: MLTask,
    feature_columns: list[str],
    label_column: str,
    runtime_config: HyperMLConfig,
    task_registry: TaskRegistry = registry,
) -> Pipeline:
    """
    Create the complete, unfitted training pipeline.

    The label key encoding stage is included for every task.

    Raises:
        UnsupportedTaskError: If ``task`` has no trainer
    """
    trainer = task_registry.get_trainer(
        task, "train", **trainer_params(task, label_column, runtime_config)
    )
    columns = runtime_config.columns
    return Pipeline([
        ("features", FeatureConcatenator(feature_columns, output_column=columns.features)),
        ("label_key", LabelKeyEncoder(label_column, output_column=columns.label_key)),
        ("trainer", trainer),
    ])


def get_trainer_pipeline(
    task: MLTask,
    label_column: str,
    runtime_config: HyperMLConfig,
    max_iterations: int,
    l2_regularization: float,
    task_registry: TaskRegistry = registry,
) -> Pipeline:
    """
    Create a trainer-only pipeline for fine-tuning.

    Raises:
        UnsupportedTaskError: If ``task`` cannot be fine-tuned
    """
    trainer = task_registry.get_trainer(
        task,
        "fine_tune",
        **trainer_params(
            task, label_column, runtime_config, max_iterations, l2_regularization
        ),
    )
    return Pipeline([("trainer", trainer)])


def append_pipeline(base: Pipeline, extension: Pipeline, prefix: str) -> Pipeline:
    """
    Compose two fitted pipelines without refitting either.

    The returned pipeline owns a new step list; the fitted stages of ``base``
    are shared read-only.
    """
    taken = {name for name, _ in base.steps}
    steps: list[tuple[str, FrameTransformer]] = list(base.steps)
    for name, step in extension.steps:
        new_name = f"{prefix}_{name}"
        suffix = 1
        while new_name in taken:
            suffix += 1
            new_name = f"{prefix}{suffix}_{name}"
        taken.add(new_name)
        steps.append((new_name, step))
    return Pipeline(steps)
