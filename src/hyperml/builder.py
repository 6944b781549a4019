"""
Fluent model builder.

Every configuration call returns a new ``ModelBuilder``; builders are never
mutated, so a partially configured builder can be shared and branched safely.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Generic, Optional, TypeVar, Union

import pandas as pd

from hyperml.config import HyperMLConfig, config
from hyperml.data import DatasetSchema, load_from_enumerable, load_from_text_file
from hyperml.exceptions import ConfigurationError
from hyperml.feature_spec import FeatureSpec
from hyperml.model_factory.pipelines.pipeline_assembly import get_pipeline
from hyperml.model_factory.registry import TaskRegistry, registry
from hyperml.tasks import MLTask
from hyperml.trained_model import TrainedModel

logger = logging.getLogger(__name__)

TData = TypeVar("TData")
TLabel = TypeVar("TLabel")


class ModelBuilder(Generic[TData, TLabel]):
    """
    Immutable configuration for training a model.

    Example:
        model = (
            create_model_builder(HousingRecord, float)
            .set_task(MLTask.REGRESSION)
            .with_features("size", "rooms")
            .with_label("price")
            .train(records)
        )
    """

    def __init__(
        self,
        record_type: Optional[type] = None,
        label_type: Optional[type] = None,
        task: Optional[Union[MLTask, str]] = None,
        features: tuple[str, ...] = (),
        label: Optional[str] = None,
        dataset: Optional[pd.DataFrame] = None,
        runtime_config: HyperMLConfig = config,
        task_registry: TaskRegistry = registry,
    ):
        self._record_type = record_type
        self._label_type = label_type
        self._task = task
        self._features = tuple(features)
        self._label = label
        self._dataset = dataset
        self._runtime_config = runtime_config
        self._task_registry = task_registry

    def _replace(self, **changes: Any) -> ModelBuilder[TData, TLabel]:
        state = {
            "record_type": self._record_type,
            "label_type": self._label_type,
            "task": self._task,
            "features": self._features,
            "label": self._label,
            "dataset": self._dataset,
            "runtime_config": self._runtime_config,
            "task_registry": self._task_registry,
        }
        state.update(changes)
        return type(self)(**state)

    # ----- configuration -----------------------------------------------------

    def set_task(self, task: Union[MLTask, str]) -> ModelBuilder[TData, TLabel]:
        """
        Configure the ML task (classification, regression, etc.).

        Unknown task names are kept as given and rejected by ``train``.
        """
        try:
            task = MLTask.parse(task)
        except ValueError:
            logger.warning(f"Unknown task {task!r}; training will reject it")
        return self._replace(task=task)

    def with_features(self, *feature_columns: str) -> ModelBuilder[TData, TLabel]:
        """Set the input columns (features), replacing any previous list."""
        return self._replace(features=tuple(feature_columns))

    def with_label(self, label_column: str) -> ModelBuilder[TData, TLabel]:
        """Set the target column (label)."""
        return self._replace(label=label_column)

    def with_config(self, runtime_config: HyperMLConfig) -> ModelBuilder[TData, TLabel]:
        """Use a different runtime configuration (seed, column names, defaults)."""
        return self._replace(runtime_config=runtime_config)

    def load_data(
        self,
        file_path: Union[str, Path],
        has_header: bool = True,
        separator: str = ",",
    ) -> ModelBuilder[TData, TLabel]:
        """
        Load training data from a delimited text file.

        The loaded dataset takes precedence over any data passed to ``train``.
        """
        dataset = load_from_text_file(
            file_path,
            has_header=has_header,
            separator=separator,
            record_type=self._record_type,
        )
        return self._replace(dataset=dataset)

    # ----- read-only state ---------------------------------------------------

    @property
    def task(self) -> Optional[Union[MLTask, str]]:
        return self._task

    @property
    def features(self) -> tuple[str, ...]:
        return self._features

    @property
    def label(self) -> Optional[str]:
        return self._label

    @property
    def dataset(self) -> Optional[pd.DataFrame]:
        return self._dataset

    @property
    def feature_spec(self) -> FeatureSpec:
        """The validated feature specification.

        Raises:
            ConfigurationError: If features or label are missing
        """
        if not self._features:
            raise ConfigurationError("At least one feature column must be set before training")
        if not self._label:
            raise ConfigurationError("A label column must be set before training")
        return FeatureSpec(features=self._features, label=self._label)

    # ----- training ----------------------------------------------------------

    def train(
        self, training_data: Optional[Union[Iterable[TData], pd.DataFrame]] = None
    ) -> TrainedModel:
        """
        Train a model on ``training_data`` (or the dataset from ``load_data``).

        Configuration is validated before any data is read.

        Raises:
            ConfigurationError: If features, label or task are not set
            UnsupportedTaskError: If the task has no trainer
        """
        feature_spec = self.feature_spec
        if self._task is None:
            raise ConfigurationError("A task must be set before training")
        self._task_registry.require(self._task, "train")

        if self._dataset is not None:
            dataset = self._dataset
        elif training_data is not None:
            dataset = load_from_enumerable(training_data, self._record_type)
        else:
            raise ConfigurationError("No training data: pass data to train() or call load_data()")

        clashes = self._runtime_config.columns.reserved & set(dataset.columns)
        if clashes:
            raise ConfigurationError(f"Dataset uses reserved column names: {sorted(clashes)}")

        pipeline = get_pipeline(
            self._task,
            list(feature_spec.features),
            feature_spec.label,
            self._runtime_config,
            task_registry=self._task_registry,
        )

        logger.info(
            f"Training {self._task} model on {len(dataset)} rows "
            f"with features {list(feature_spec.features)} and label '{feature_spec.label}'"
        )
        fitted = pipeline.fit(dataset)

        return TrainedModel(
            pipeline=fitted,
            training_data=dataset,
            task=self._task,
            feature_spec=feature_spec,
            runtime_config=self._runtime_config,
            schema=DatasetSchema.from_frame(dataset),
            record_type=self._record_type,
            label_type=self._label_type,
            task_registry=self._task_registry,
        )

    def __repr__(self) -> str:
        return (
            f"ModelBuilder(task={self._task}, features={list(self._features)}, "
            f"label={self._label!r}, dataset_loaded={self._dataset is not None})"
        )


def create_model_builder(
    record_type: Optional[type] = None,
    label_type: Optional[type] = None,
) -> ModelBuilder:
    """
    Create a new model builder.

    Args:
        record_type: Type of the input records (dataclass, pydantic model, ...)
        label_type: Type predictions are converted to

    Returns:
        An unconfigured ModelBuilder
    """
    return ModelBuilder(record_type=record_type, label_type=label_type)
