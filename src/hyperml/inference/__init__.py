"""Single-row and batch inference over fitted pipelines."""

from .engine import PredictionEngine, cast_label, project_labels

__all__ = ["PredictionEngine", "cast_label", "project_labels"]
