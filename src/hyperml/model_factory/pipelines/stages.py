"""
Data preparation stages for hyperml pipelines.

Every stage is a scikit-learn compatible transformer that takes a DataFrame
and returns a copy with additional columns, so stages can be chained in an
sklearn ``Pipeline`` and fitted pipelines can be extended by appending.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np
import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.utils.validation import check_is_fitted

from hyperml.model_factory.protocols import Array, Frame


def stack_vectors(column: pd.Series, width: int | None = None) -> Array:
    """Stack a column of per-row vectors into a 2D float matrix."""
    if len(column) == 0:
        return np.empty((0, width or 0), dtype=np.float64)
    return np.vstack(column.to_numpy()).astype(np.float64, copy=False)


def vectors_to_column(matrix: Array, index: pd.Index) -> pd.Series:
    """Store each row of a 2D matrix as one vector-valued cell."""
    return pd.Series(list(matrix), index=index, dtype=object)


class FeatureConcatenator(BaseEstimator, TransformerMixin):
    """Assemble named numeric columns into a single feature-vector column.

    Column order in ``input_columns`` defines the order inside the vector.
    """

    def __init__(
        self,
        input_columns: Sequence[str] = (),
        output_column: str = "Features",
    ):
        self.input_columns = input_columns
        self.output_column = output_column

    def fit(self, X: Frame, y=None) -> FeatureConcatenator:
        self._check_columns(X, list(self.input_columns))
        self.input_columns_ = list(self.input_columns)
        self.n_features_ = len(self.input_columns_)
        return self

    def transform(self, X: Frame) -> Frame:
        check_is_fitted(self, "input_columns_")
        self._check_columns(X, self.input_columns_)

        out = X.copy()
        values = X[self.input_columns_].to_numpy(dtype=np.float64)
        out[self.output_column] = vectors_to_column(values, X.index)
        return out

    @staticmethod
    def _check_columns(X: Frame, columns: list[str]) -> None:
        missing = [c for c in columns if c not in X.columns]
        if missing:
            raise ValueError(f"Missing required features: {missing}")


class LabelKeyEncoder(BaseEstimator, TransformerMixin):
    """Map label values into a 1-based key space.

    Keys follow the sorted order of the distinct labels seen during fit.
    Missing or unseen values map to key 0. The raw label column is kept and
    the keys are written to ``output_column``. The stage is applied for every
    task, including those whose trainers never read the keys.
    """

    def __init__(self, input_column: str = "Label", output_column: str = "LabelKey"):
        self.input_column = input_column
        self.output_column = output_column

    def fit(self, X: Frame, y=None) -> LabelKeyEncoder:
        if self.input_column not in X.columns:
            raise ValueError(f"Label column '{self.input_column}' not found in data")

        observed = pd.unique(X[self.input_column].dropna())
        self.categories_ = pd.Index(np.sort(np.asarray(observed)))
        return self

    def transform(self, X: Frame) -> Frame:
        check_is_fitted(self, "categories_")

        out = X.copy()
        if self.input_column not in X.columns:
            out[self.output_column] = np.zeros(len(X), dtype=np.int64)
            return out

        codes = self.categories_.get_indexer(X[self.input_column])
        out[self.output_column] = codes.astype(np.int64) + 1
        return out

