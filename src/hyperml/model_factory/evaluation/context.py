"""
Evaluation context handed to the metrics extractor.
"""

from pydantic import BaseModel, ConfigDict, Field

from hyperml.config import ColumnConfig, HyperMLConfig


class EvaluationContext(BaseModel):
    """Column layout and thresholds needed to read a prediction frame."""

    model_config = ConfigDict(frozen=True)

    label_column: str
    columns: ColumnConfig = Field(default_factory=ColumnConfig)
    decision_threshold: float = Field(default=0.5, gt=0.0, lt=1.0)

    @classmethod
    def from_config(cls, label_column: str, runtime_config: HyperMLConfig) -> "EvaluationContext":
        return cls(
            label_column=label_column,
            columns=runtime_config.columns,
            decision_threshold=runtime_config.evaluation.decision_threshold,
        )
