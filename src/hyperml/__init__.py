"""
HyperML - fluent training, evaluation, persistence and fine-tuning of
scikit-learn models.

Use ``create_model_builder`` to configure a task, feature and label columns,
then ``train`` to get a ``TrainedModel``.
"""

from .builder import ModelBuilder, create_model_builder
from .config import HyperMLConfig, TuningConfig, config
from .exceptions import (
    ConfigurationError,
    EvaluationError,
    HyperMLError,
    UnsupportedTaskError,
)
from .feature_spec import FeatureSpec
from .metrics import ModelMetrics
from .tasks import MLTask
from .trained_model import TrainedModel, load_model

__all__ = [
    # Entry point
    "create_model_builder",
    "ModelBuilder",
    # Models
    "TrainedModel",
    "ModelMetrics",
    "load_model",
    # Configuration
    "MLTask",
    "FeatureSpec",
    "HyperMLConfig",
    "TuningConfig",
    "config",
    # Errors
    "HyperMLError",
    "ConfigurationError",
    "UnsupportedTaskError",
    "EvaluationError",
]
