"""
Trainer stages wrapping scikit-learn estimators.

Each trainer reads the assembled feature-vector column (and, when supervised,
the label or label-key column), fits an sklearn estimator and, on transform,
writes the prediction columns ``Score``, ``PredictedLabel`` and, for binary
classification, ``Probability``.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.cluster import KMeans
from sklearn.linear_model import LogisticRegression, Ridge
from sklearn.pipeline import Pipeline, make_pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.utils.validation import check_is_fitted

from hyperml.config import ColumnConfig
from hyperml.model_factory.pipelines.stages import stack_vectors, vectors_to_column
from hyperml.model_factory.protocols import Array, Frame
from hyperml.tasks import MLTask

logger = logging.getLogger(__name__)


class TrainerStage(BaseEstimator, TransformerMixin):
    """Base class for task trainers.

    Parameters
    ----------
    label_column : str
        Name of the raw label column.
    max_iterations : int, default=100
        Maximum solver iterations (values below 1 are raised to 1).
    l2_regularization : float, default=0.01
        L2 penalty per training example.
    columns : ColumnConfig, optional
        Pipeline column names.
    scale_features : bool, default=True
        Standardize the feature vector before the estimator.
    random_state : int, default=42
        Random seed for reproducibility.
    """

    task: ClassVar[MLTask]

    def __init__(
        self,
        label_column: str = "Label",
        max_iterations: int = 100,
        l2_regularization: float = 0.01,
        columns: ColumnConfig | None = None,
        scale_features: bool = True,
        random_state: int = 42,
    ):
        self.label_column = label_column
        self.max_iterations = max_iterations
        self.l2_regularization = l2_regularization
        self.columns = columns
        self.scale_features = scale_features
        self.random_state = random_state

    # ----- sklearn surface ---------------------------------------------------

    def fit(self, X: Frame, y: Any = None) -> TrainerStage:
        cols = self._columns
        features = stack_vectors(X[cols.features])
        features, target = self._training_target(X, features)

        logger.info(
            f"Fitting {type(self).__name__} on {features.shape[0]} rows "
            f"x {features.shape[1]} features"
        )
        self.n_features_in_ = features.shape[1]
        self.estimator_ = self._wrap(self._build_estimator(features.shape[0]))
        self.estimator_.fit(features, target)
        return self

    def transform(self, X: Frame) -> Frame:
        check_is_fitted(self, "estimator_")
        cols = self._columns

        out = X.copy()
        features = stack_vectors(X[cols.features], width=self.n_features_in_)
        if features.shape[0] == 0:
            self._write_empty(out)
            return out

        self._write_predictions(out, features)
        return out

    # ----- hooks -------------------------------------------------------------

    def _training_target(self, X: Frame, features: Array) -> tuple[Array, Any]:
        raise NotImplementedError

    def _build_estimator(self, n_samples: int) -> BaseEstimator:
        raise NotImplementedError

    def _write_predictions(self, out: Frame, features: Array) -> None:
        raise NotImplementedError

    def _write_empty(self, out: Frame) -> None:
        cols = self._columns
        out[cols.score] = pd.Series(dtype=np.float64, index=out.index)
        out[cols.predicted_label] = pd.Series(dtype=object, index=out.index)

    # ----- helpers -----------------------------------------------------------

    @property
    def _columns(self) -> ColumnConfig:
        return self.columns or ColumnConfig()

    @property
    def _iterations(self) -> int:
        return max(1, int(self.max_iterations))

    def _penalty(self, n_samples: int) -> float:
        """Total L2 penalty for ``n_samples`` rows (penalty is per example)."""
        return float(self.l2_regularization) * max(n_samples, 1)

    def _wrap(self, estimator: BaseEstimator) -> BaseEstimator | Pipeline:
        if self.scale_features:
            return make_pipeline(StandardScaler(), estimator)
        return estimator

    def _keyed_target(self, X: Frame, features: Array) -> tuple[Array, Array]:
        """Rows with a known label key, and their keys."""
        keys = X[self._columns.label_key].to_numpy(dtype=np.int64)
        known = keys > 0
        self._remember_labels(X[known], keys[known])
        return features[known], keys[known]

    def _remember_labels(self, X: Frame, keys: np.ndarray) -> None:
        """Record the raw label value behind each key for decoding predictions."""
        self.classes_ = np.unique(keys)
        raw = X[self.label_column].to_numpy()
        self.class_labels_ = np.array(
            [raw[np.argmax(keys == k)] for k in self.classes_]
        )


class BinaryClassificationTrainer(TrainerStage):
    """L2-regularized logistic regression solved by dual coordinate descent."""

    task = MLTask.BINARY_CLASSIFICATION

    def __init__(
        self,
        label_column: str = "Label",
        max_iterations: int = 100,
        l2_regularization: float = 0.01,
        columns: ColumnConfig | None = None,
        scale_features: bool = True,
        random_state: int = 42,
        threshold: float = 0.5,
    ):
        super().__init__(
            label_column=label_column,
            max_iterations=max_iterations,
            l2_regularization=l2_regularization,
            columns=columns,
            scale_features=scale_features,
            random_state=random_state,
        )
        self.threshold = threshold

    def _training_target(self, X, features):
        features, keys = self._keyed_target(X, features)
        if len(self.classes_) != 2:
            raise ValueError(
                "Binary classification requires exactly two label values, "
                f"found {len(self.classes_)}"
            )
        return features, (keys == self.classes_[1]).astype(np.int64)

    def _build_estimator(self, n_samples):
        return LogisticRegression(
            dual=True,
            solver="liblinear",
            C=1.0 / max(self._penalty(n_samples), 1e-6),
            max_iter=self._iterations,
            random_state=self.random_state,
        )

    def _write_predictions(self, out, features):
        cols = self._columns
        probability = self.estimator_.predict_proba(features)[:, 1]
        positive = (probability >= self.threshold).astype(np.intp)

        out[cols.score] = self.estimator_.decision_function(features)
        out[cols.probability] = probability
        out[cols.predicted_label] = self.class_labels_[positive]

    def _write_empty(self, out):
        super()._write_empty(out)
        out[self._columns.probability] = pd.Series(dtype=np.float64, index=out.index)


class MulticlassClassificationTrainer(TrainerStage):
    """Multinomial (maximum entropy) logistic regression."""

    task = MLTask.MULTICLASS_CLASSIFICATION

    def _training_target(self, X, features):
        return self._keyed_target(X, features)

    def _build_estimator(self, n_samples):
        return LogisticRegression(
            solver="lbfgs",
            C=1.0 / max(self._penalty(n_samples), 1e-6),
            max_iter=self._iterations,
            random_state=self.random_state,
        )

    def _write_predictions(self, out, features):
        cols = self._columns
        probabilities = self.estimator_.predict_proba(features)

        out[cols.score] = vectors_to_column(probabilities, out.index)
        out[cols.predicted_label] = self.class_labels_[np.argmax(probabilities, axis=1)]


class RegressionTrainer(TrainerStage):
    """L2-regularized linear regression (ridge)."""

    task = MLTask.REGRESSION

    def _training_target(self, X, features):
        target = pd.to_numeric(X[self.label_column]).to_numpy(dtype=np.float64)
        known = ~np.isnan(target)
        return features[known], target[known]

    def _build_estimator(self, n_samples):
        return Ridge(
            alpha=self._penalty(n_samples),
            max_iter=self._iterations,
            random_state=self.random_state,
        )

    def _write_predictions(self, out, features):
        cols = self._columns
        score = self.estimator_.predict(features).astype(np.float64)

        out[cols.score] = score
        out[cols.predicted_label] = score


class ClusteringTrainer(TrainerStage):
    """K-means clustering. Cluster ids in ``PredictedLabel`` are 1-based."""

    task = MLTask.CLUSTERING

    def __init__(
        self,
        label_column: str = "Label",
        max_iterations: int = 100,
        l2_regularization: float = 0.01,
        columns: ColumnConfig | None = None,
        scale_features: bool = True,
        random_state: int = 42,
        n_clusters: int = 5,
    ):
        super().__init__(
            label_column=label_column,
            max_iterations=max_iterations,
            l2_regularization=l2_regularization,
            columns=columns,
            scale_features=scale_features,
            random_state=random_state,
        )
        self.n_clusters = n_clusters

    def _training_target(self, X, features):
        return features, None

    def _build_estimator(self, n_samples):
        return KMeans(
            n_clusters=self.n_clusters,
            max_iter=self._iterations,
            n_init="auto",
            random_state=self.random_state,
        )

    def _write_predictions(self, out, features):
        cols = self._columns
        distances = self.estimator_.transform(features)

        out[cols.score] = vectors_to_column(distances, out.index)
        out[cols.predicted_label] = np.argmin(distances, axis=1).astype(np.uint32) + 1
