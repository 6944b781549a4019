"""
Supported machine learning task types.
"""

from enum import Enum


class MLTask(str, Enum):
    """Learning objective selected on a model builder."""

    BINARY_CLASSIFICATION = "BinaryClassification"
    MULTICLASS_CLASSIFICATION = "MulticlassClassification"
    REGRESSION = "Regression"
    CLUSTERING = "Clustering"
    RECOMMENDATION = "Recommendation"
    ANOMALY = "Anomaly"

    @classmethod
    def parse(cls, value: "MLTask | str") -> "MLTask":
        """Resolve an enum member from a member, its value or its name."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.name):
                return member
        raise ValueError(
            f"Unknown task: {value!r}. Available: {[m.value for m in cls]}"
        )

    def __str__(self) -> str:
        return self.value
