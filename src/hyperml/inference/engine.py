"""
Single-row prediction engine.

The engine keeps per-instance state between calls (the last transformed row
and a call counter) and is therefore NOT safe for concurrent use. Callers that
share an engine across threads must serialize access; ``TrainedModel.predict``
does this with a lock.
"""

import logging
from collections.abc import Iterator
from typing import Any, Optional

import pandas as pd
from sklearn.pipeline import Pipeline

from hyperml.data import DatasetSchema, load_from_enumerable

logger = logging.getLogger(__name__)


def cast_label(value: Any, label_type: Optional[type] = None) -> Any:
    """Convert one predicted value to ``label_type`` (plain Python scalar if None)."""
    if label_type is not None:
        return label_type(value)
    return value.item() if hasattr(value, "item") else value


def project_labels(
    predictions: pd.DataFrame, column: str, label_type: Optional[type] = None
) -> Iterator[Any]:
    """Yield the predicted label of every row, in row order."""
    for value in predictions[column].to_numpy():
        yield cast_label(value, label_type)


class PredictionEngine:
    """
    Runs a fitted pipeline on exactly one record at a time.

    Not thread-safe: holds mutable state owned by a single model instance.
    """

    def __init__(
        self,
        pipeline: Pipeline,
        schema: DatasetSchema,
        feature_columns: list[str],
        output_column: str,
        record_type: Optional[type] = None,
        label_type: Optional[type] = None,
    ):
        self.pipeline = pipeline
        self.schema = schema
        self.feature_columns = list(feature_columns)
        self.output_column = output_column
        self.record_type = record_type
        self.label_type = label_type

        self.last_output: Optional[pd.DataFrame] = None
        self.prediction_count = 0

    def predict(self, item: Any) -> Any:
        """Predict the label of a single record."""
        row = load_from_enumerable([item], self.record_type)
        missing = self.schema.missing_columns(row, self.feature_columns)
        if missing:
            raise ValueError(f"Missing required features: {missing}")

        self.last_output = self.pipeline.transform(row)
        self.prediction_count += 1
        return next(project_labels(self.last_output, self.output_column, self.label_type))
