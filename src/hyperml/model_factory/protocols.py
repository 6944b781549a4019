"""
Protocols for the hyperml model factory (pandas/NumPy only).

Conventions
-----------
- Frames: pandas DataFrames. Every pipeline stage takes a frame and returns a
  copy with extra columns; nothing is mutated in place.
- Vector-valued columns (features, multiclass scores, cluster distances) hold
  one 1D float array per cell.
- Keys: label keys are 1-based integers, 0 marks a missing or unseen label.

These are structural types (Protocols) to decouple components while preserving type safety.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

import numpy as np
import pandas as pd
from numpy.typing import NDArray

# ----- Common type aliases ----------------------------------------------------

Array = NDArray[np.float64]
Frame = pd.DataFrame
Metrics = Mapping[str, float]


# ----- Pipeline stages --------------------------------------------------------

@runtime_checkable
class FrameTransformer(Protocol):
    """Sklearn-compatible stage mapping a frame to an enriched frame."""

    def fit(self, X: Frame, y: Any = None) -> FrameTransformer:
        ...

    def transform(self, X: Frame) -> Frame:
        ...

    def get_params(self, deep: bool = True) -> dict[str, Any]:
        ...


@runtime_checkable
class TaskTrainer(FrameTransformer, Protocol):
    """Trainer stage: fits on the feature vector and writes prediction columns."""

    max_iterations: int
    l2_regularization: float


# ----- Evaluation -------------------------------------------------------------

@runtime_checkable
class PredictionEvaluator(Protocol):
    """Scores a prediction frame, raising ``EvaluationError`` when it does not apply."""

    def __call__(self, predictions: Frame, context: Any) -> Metrics:
        ...
