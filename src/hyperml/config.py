"""
Centralized configuration management for hyperml.

This module provides type-safe configuration classes using Pydantic for the
pipeline column layout, trainer defaults, evaluation and fine-tuning.
"""

import os

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ColumnConfig(BaseModel):
    """Names of the columns produced by pipeline stages."""

    model_config = ConfigDict(frozen=True)

    features: str = "Features"
    label_key: str = "LabelKey"
    score: str = "Score"
    probability: str = "Probability"
    predicted_label: str = "PredictedLabel"

    @property
    def reserved(self) -> set[str]:
        """Column names the pipeline writes and user data must not use."""
        return {
            self.features,
            self.label_key,
            self.score,
            self.probability,
            self.predicted_label,
        }


class TrainerConfig(BaseModel):
    """Default hyperparameters for the initial training run."""

    model_config = ConfigDict(frozen=True)

    max_iterations: int = Field(default=100, ge=0, description="Solver iterations")
    l2_regularization: float = Field(
        default=0.01, ge=0.0, description="L2 penalty strength"
    )
    n_clusters: int = Field(
        default=int(os.getenv("HYPERML_N_CLUSTERS", "5")),
        ge=1,
        description="Number of centroids for clustering",
    )
    scale_features: bool = Field(
        default=True, description="Standardize the feature vector inside trainers"
    )


class EvaluationConfig(BaseModel):
    """Configuration for the evaluation primitives."""

    model_config = ConfigDict(frozen=True)

    decision_threshold: float = Field(
        default=0.5, gt=0.0, lt=1.0, description="Binary probability cut-off"
    )


class TuningConfig(BaseModel):
    """Fine-tuning hyperparameters attached to a trained model.

    Kept independent from the values passed to ``fine_tune`` directly.
    """

    model_config = ConfigDict(validate_assignment=True)

    max_iterations: int = Field(default=100, ge=0)
    l2_regularization: float = Field(default=0.01, ge=0.0)


class HyperMLConfig(BaseModel):
    """Main runtime configuration."""

    model_config = ConfigDict(frozen=True)

    seed: int = Field(default=42, description="Random seed for every trainer")
    columns: ColumnConfig = Field(default_factory=ColumnConfig)
    trainer: TrainerConfig = Field(default_factory=TrainerConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    artifact_format_version: int = 1

    @field_validator("seed", mode="before")
    @classmethod
    def validate_seed(cls, v):
        """Load the seed from the environment if not provided."""
        if v is None or v == "":
            env_val = os.environ.get("HYPERML_SEED")
            return int(env_val) if env_val else 42
        return int(v)


# Global configuration instance
config = HyperMLConfig(seed=os.environ.get("HYPERML_SEED"))
