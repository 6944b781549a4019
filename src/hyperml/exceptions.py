"""
Exception hierarchy for the hyperml package.

Configuration problems are raised before any data is read. Evaluation errors
signal that a prediction frame does not fit a given evaluator; the metrics
extractor relies on them to detect the task family.
"""

from __future__ import annotations

from typing import Any


class HyperMLError(Exception):
    """Base class for all hyperml errors."""


class ConfigurationError(HyperMLError, ValueError):
    """Raised when a model builder is not fully configured."""


class UnsupportedTaskError(ConfigurationError):
    """Raised when a task has no trainer for the requested operation."""

    def __init__(self, task: Any, operation: str = "train"):
        self.task = task
        self.operation = operation
        super().__init__(f"Task type {task} not supported for {operation}.")


class EvaluationError(HyperMLError):
    """Raised when predictions cannot be scored by an evaluator."""
