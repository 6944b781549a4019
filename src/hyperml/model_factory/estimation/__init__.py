"""Trainer stages, one per supported task family."""

from .trainers import (
    BinaryClassificationTrainer,
    ClusteringTrainer,
    MulticlassClassificationTrainer,
    RegressionTrainer,
    TrainerStage,
)

__all__ = [
    "TrainerStage",
    "BinaryClassificationTrainer",
    "MulticlassClassificationTrainer",
    "RegressionTrainer",
    "ClusteringTrainer",
]
