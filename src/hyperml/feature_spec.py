"""
Feature specification: which columns feed the model and which one is the label.
"""

from pydantic import BaseModel, ConfigDict, field_validator


class FeatureSpec(BaseModel):
    """Ordered feature columns plus the label column. Immutable."""

    model_config = ConfigDict(frozen=True)

    features: tuple[str, ...]
    label: str

    @field_validator("features")
    @classmethod
    def validate_features(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Validate the feature list is non-empty."""
        if not v:
            raise ValueError("At least one feature column is required")
        return v

    @property
    def columns(self) -> list[str]:
        """Every column the pipeline reads, features first."""
        return [*self.features, self.label]
