"""
Integration tests for the train, evaluate, persist and fine-tune workflow.

Tests the complete path from raw records or a delimited file to metrics and
predictions, going through the public package API only.
"""

import logging
import os
from unittest.mock import patch

import pandas as pd
import pytest

import hyperml
from hyperml import HyperMLConfig, MLTask, create_model_builder, load_model


class TestBinaryWorkflow:
    """Integration tests for a binary classification run."""

    def test_train_evaluate_predict(self, record_types, binary_train, binary_test):
        model = (
            create_model_builder(record_types["binary"], bool)
            .set_task(MLTask.BINARY_CLASSIFICATION)
            .with_features("x1", "x2")
            .with_label("label")
            .train(binary_train)
        )
        metrics = model.evaluate(binary_test)

        assert set(metrics.get_all_metrics()) == {"Accuracy", "F1Score", "AUC"}
        for name in ("Accuracy", "F1Score", "AUC"):
            assert 0.0 <= metrics.get_metric(name) <= 1.0
        assert metrics.print_metrics().startswith("Model Metrics:")
        assert model.predict(binary_test[0]) in (True, False)

    def test_file_workflow(self, record_types, binary_train, binary_test, tmp_path):
        train_path = tmp_path / "train.csv"
        pd.DataFrame([vars(r) for r in binary_train]).to_csv(train_path, index=False)

        model = (
            create_model_builder(record_types["binary"], bool)
            .load_data(train_path)
            .set_task("BinaryClassification")
            .with_features("x1", "x2")
            .with_label("label")
            .train()
        )
        model_path = tmp_path / "model.joblib"
        model.save_model(model_path)
        restored = load_model(model_path, record_types["binary"], bool)

        assert list(restored.predict_batch(binary_test)) == list(model.predict_batch(binary_test))
        assert restored.evaluate(binary_test).get_all_metrics() == model.evaluate(binary_test).get_all_metrics()

    def test_fine_tune_then_evaluate(self, record_types, binary_train, binary_test):
        model = (
            create_model_builder(record_types["binary"], bool)
            .set_task(MLTask.BINARY_CLASSIFICATION)
            .with_features("x1", "x2")
            .with_label("label")
            .train(binary_train)
        )

        tuned = model.fine_tune(binary_test, maximum_number_of_iterations=20, l2_regularization=0.05)
        metrics = tuned.evaluate(binary_test)

        assert set(metrics.get_all_metrics()) == {"Accuracy", "F1Score", "AUC"}
        assert len(tuned.pipeline.steps) == len(model.pipeline.steps) + 1


class TestConfiguredWorkflow:
    """Integration tests driven by runtime configuration."""

    def test_seed_makes_runs_reproducible(self, record_types, multiclass_train, multiclass_test):
        builder = (
            create_model_builder(record_types["multiclass"])
            .with_config(HyperMLConfig(seed=7))
            .set_task(MLTask.CLUSTERING)
            .with_features("x1", "x2")
            .with_label("color")
        )

        first = list(builder.train(multiclass_train).predict_batch(multiclass_test))
        second = list(builder.train(multiclass_train).predict_batch(multiclass_test))

        assert first == second

    def test_seed_from_environment(self):
        with patch.dict(os.environ, {"HYPERML_SEED": "123"}):
            assert HyperMLConfig(seed=None).seed == 123

    def test_training_is_logged(self, record_types, regression_train, caplog):
        builder = (
            create_model_builder(record_types["regression"], float)
            .set_task(MLTask.REGRESSION)
            .with_features("size", "rooms")
            .with_label("price")
        )

        with caplog.at_level(logging.INFO, logger="hyperml"):
            builder.train(regression_train)

        assert any("Training Regression model" in r.getMessage() for r in caplog.records)


def test_public_api():
    for name in ("create_model_builder", "ModelBuilder", "TrainedModel", "ModelMetrics", "load_model"):
        assert hasattr(hyperml, name)


@pytest.mark.parametrize("task", [MLTask.RECOMMENDATION, MLTask.ANOMALY])
def test_unsupported_tasks_report_their_name(record_types, binary_train, task):
    builder = (
        create_model_builder(record_types["binary"])
        .set_task(task)
        .with_features("x1")
        .with_label("label")
    )

    with pytest.raises(hyperml.UnsupportedTaskError, match=task.value):
        builder.train(binary_train)
