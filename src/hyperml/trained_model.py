"""
Trained model lifecycle: prediction, evaluation, persistence and fine-tuning.

A ``TrainedModel`` exclusively owns a fitted sklearn pipeline. The pipeline is
never refitted. Fine-tuning and loading produce new instances.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any, Optional, Union

import joblib
import pandas as pd
from sklearn.pipeline import Pipeline

from hyperml.config import HyperMLConfig, TuningConfig, config
from hyperml.data import DatasetSchema, load_from_enumerable
from hyperml.feature_spec import FeatureSpec
from hyperml.inference import PredictionEngine, project_labels
from hyperml.metrics import ModelMetrics
from hyperml.model_factory.evaluation import EvaluationContext
from hyperml.model_factory.pipelines.pipeline_assembly import (
    append_pipeline,
    get_trainer_pipeline,
)
from hyperml.model_factory.registry import TaskRegistry, registry
from hyperml.tasks import MLTask

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FineTuningMixin:
    """
    Fine-tuning capability for trained models.

    The stored ``TuningConfig`` is for introspection only: ``fine_tune`` uses
    the hyperparameters passed to the call.
    """

    tuning: TuningConfig

    def get_maximum_number_of_iterations(self) -> int:
        return self.tuning.max_iterations

    def set_maximum_number_of_iterations(self, iterations: int) -> None:
        self.tuning.max_iterations = iterations

    def get_l2_regularization(self) -> float:
        return self.tuning.l2_regularization

    def set_l2_regularization(self, regularization: float) -> None:
        self.tuning.l2_regularization = regularization

    def fine_tune(
        self,
        finetuning_data: Union[Iterable[Any], pd.DataFrame],
        maximum_number_of_iterations: int = 100,
        l2_regularization: float = 0.01,
    ) -> TrainedModel:
        """
        Fit a new trainer stage on additional data and append it to this model.

        The existing stages are not refitted: the data goes through the frozen
        pipeline first, the new trainer is fitted on that output, and the
        result is ``existing stages + new trainer``.

        Args:
            finetuning_data: Labelled records to fine-tune on
            maximum_number_of_iterations: Solver iterations for the new trainer
            l2_regularization: L2 penalty for the new trainer

        Returns:
            A new fine-tuned model; this model is left untouched

        Raises:
            UnsupportedTaskError: For Clustering, Recommendation and Anomaly
        """
        self.task_registry.require(self.task, "fine_tune")
        call_params = TuningConfig(
            max_iterations=maximum_number_of_iterations,
            l2_regularization=l2_regularization,
        )

        data = load_from_enumerable(finetuning_data, self.record_type, self.schema.column_names)
        trainer_pipeline = get_trainer_pipeline(
            self.task,
            self.feature_spec.label,
            self.runtime_config,
            max_iterations=call_params.max_iterations,
            l2_regularization=call_params.l2_regularization,
            task_registry=self.task_registry,
        )

        logger.info(
            f"Fine-tuning {self.task} model on {len(data)} rows "
            f"(max_iterations={call_params.max_iterations}, "
            f"l2_regularization={call_params.l2_regularization})"
        )
        intermediate = self.pipeline.transform(data)
        fitted = trainer_pipeline.fit(intermediate)
        final_pipeline = append_pipeline(self.pipeline, fitted, prefix="fine_tune")

        return TrainedModel(
            pipeline=final_pipeline,
            training_data=data,
            task=self.task,
            feature_spec=self.feature_spec,
            runtime_config=self.runtime_config,
            record_type=self.record_type,
            label_type=self.label_type,
            base_model=self,
            tuning=self.tuning.model_copy(),
            task_registry=self.task_registry,
        )


class TrainedModel(FineTuningMixin):
    """
    A fitted pipeline together with the task and data it was trained for.

    ``predict`` goes through one lazily created ``PredictionEngine`` owned by
    this instance; calls are serialized with a lock. ``predict_batch`` and
    ``evaluate`` do not use the engine.
    """

    def __init__(
        self,
        pipeline: Pipeline,
        training_data: pd.DataFrame,
        task: MLTask,
        feature_spec: FeatureSpec,
        runtime_config: HyperMLConfig = config,
        schema: Optional[DatasetSchema] = None,
        record_type: Optional[type] = None,
        label_type: Optional[type] = None,
        base_model: Optional[TrainedModel] = None,
        tuning: Optional[TuningConfig] = None,
        task_registry: TaskRegistry = registry,
    ):
        self._pipeline = pipeline
        self._training_data = training_data
        self._schema = schema or DatasetSchema.from_frame(training_data)
        self._task = task
        self._feature_spec = feature_spec
        self._base_model = base_model

        self.runtime_config = runtime_config
        self.record_type = record_type
        self.label_type = label_type
        self.tuning = tuning or TuningConfig()
        self.task_registry = task_registry

        self._engine: Optional[PredictionEngine] = None
        self._engine_lock = threading.Lock()

    # ----- read-only state ---------------------------------------------------

    @property
    def pipeline(self) -> Pipeline:
        return self._pipeline

    @property
    def training_data(self) -> pd.DataFrame:
        return self._training_data

    @property
    def schema(self) -> DatasetSchema:
        return self._schema

    @property
    def task(self) -> MLTask:
        return self._task

    @property
    def feature_spec(self) -> FeatureSpec:
        return self._feature_spec

    @property
    def base_model(self) -> Optional[TrainedModel]:
        """The model this one was fine-tuned from, if any."""
        return self._base_model

    def lineage(self) -> list[TrainedModel]:
        """Models from the original training run down to this one."""
        chain: list[TrainedModel] = []
        model: Optional[TrainedModel] = self
        while model is not None:
            chain.append(model)
            model = model.base_model
        return chain[::-1]

    # ----- inference ---------------------------------------------------------

    def _get_engine(self) -> PredictionEngine:
        if self._engine is None:
            self._engine = PredictionEngine(
                pipeline=self._pipeline,
                schema=self._schema,
                feature_columns=list(self._feature_spec.features),
                output_column=self.runtime_config.columns.predicted_label,
                record_type=self.record_type,
                label_type=self.label_type,
            )
        return self._engine

    def predict(self, data: Any) -> Any:
        """Predict the label of a single record."""
        with self._engine_lock:
            return self._get_engine().predict(data)

    def predict_batch(self, data: Union[Iterable[Any], pd.DataFrame]) -> Iterator[Any]:
        """Predict labels for a collection, preserving input order."""
        frame = load_from_enumerable(data, self.record_type, self._schema.column_names)
        predictions = self._pipeline.transform(frame)
        return project_labels(
            predictions, self.runtime_config.columns.predicted_label, self.label_type
        )

    # ----- evaluation --------------------------------------------------------

    def evaluate(
        self, test_data: Union[Iterable[Any], pd.DataFrame], strict: bool = False
    ) -> ModelMetrics:
        """
        Evaluate the model on labelled test data.

        By default the task is not passed to the metrics extractor, which
        detects it by probing. With ``strict=True`` the evaluator of this
        model's task is used directly and its errors propagate.
        """
        frame = load_from_enumerable(test_data, self.record_type, self._schema.column_names)
        predictions = self._pipeline.transform(frame)
        context = EvaluationContext.from_config(self._feature_spec.label, self.runtime_config)

        if strict:
            return ModelMetrics.for_task(self._task, context, predictions, self._training_data)
        return ModelMetrics(context, predictions, self._training_data)

    # ----- persistence -------------------------------------------------------

    def save_model(self, file_path: PathLike) -> None:
        """Serialize the fitted pipeline and training schema to ``file_path``."""
        artifact = {
            "pipeline": self._pipeline,
            "schema": self._schema.model_dump(),
            "metadata": {
                "format_version": self.runtime_config.artifact_format_version,
                "task": self._task.value,
                "feature_spec": self._feature_spec.model_dump(),
            },
        }
        joblib.dump(artifact, file_path)
        logger.info(f"Model saved to {file_path}")

    def load_model(self, file_path: PathLike) -> TrainedModel:
        """
        Load a fitted pipeline from ``file_path``.

        The returned model keeps this model's schema, task, feature spec and
        training data; the schema stored in the artifact is not used.
        """
        artifact = read_artifact(file_path)
        return TrainedModel(
            pipeline=artifact["pipeline"],
            training_data=self._training_data,
            task=self._task,
            feature_spec=self._feature_spec,
            runtime_config=self.runtime_config,
            schema=self._schema,
            record_type=self.record_type,
            label_type=self.label_type,
            task_registry=self.task_registry,
        )

    def __repr__(self) -> str:
        return (
            f"TrainedModel(task={self._task}, features={list(self._feature_spec.features)}, "
            f"label={self._feature_spec.label!r}, stages={len(self._pipeline.steps)})"
        )


def read_artifact(file_path: PathLike) -> dict[str, Any]:
    """Read a model artifact written by ``TrainedModel.save_model``."""
    artifact = joblib.load(file_path)
    if not isinstance(artifact, dict) or "pipeline" not in artifact:
        raise ValueError(f"{file_path} is not a hyperml model artifact")
    logger.info(f"Model loaded from {file_path}")
    return artifact


def load_model(
    file_path: PathLike,
    record_type: Optional[type] = None,
    label_type: Optional[type] = None,
    runtime_config: HyperMLConfig = config,
) -> TrainedModel:
    """
    Rebuild a model entirely from an artifact, using its stored metadata.

    The training data of the returned model is an empty frame with the
    stored schema's columns.
    """
    artifact = read_artifact(file_path)
    metadata = artifact.get("metadata", {})
    if "task" not in metadata or "feature_spec" not in metadata:
        raise ValueError(f"{file_path} has no task metadata; load it from a TrainedModel")

    schema = DatasetSchema.model_validate(artifact["schema"])
    return TrainedModel(
        pipeline=artifact["pipeline"],
        training_data=pd.DataFrame(columns=schema.column_names),
        task=MLTask.parse(metadata["task"]),
        feature_spec=FeatureSpec.model_validate(metadata["feature_spec"]),
        runtime_config=runtime_config,
        schema=schema,
        record_type=record_type,
        label_type=label_type,
    )
