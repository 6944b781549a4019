"""Unit tests for the single-row prediction engine."""

import numpy as np
import pandas as pd
import pytest

from hyperml.config import HyperMLConfig
from hyperml.data import DatasetSchema
from hyperml.inference import PredictionEngine, cast_label, project_labels
from hyperml.model_factory.pipelines.pipeline_assembly import get_pipeline
from hyperml.tasks import MLTask


@pytest.fixture
def fitted():
    frame = pd.DataFrame(
        {
            "a": [0.0, 0.2, 0.9, 1.1, 0.1, 1.0],
            "label": ["no", "no", "yes", "yes", "no", "yes"],
        }
    )
    pipeline = get_pipeline(MLTask.BINARY_CLASSIFICATION, ["a"], "label", HyperMLConfig(seed=0))
    return pipeline.fit(frame), DatasetSchema.from_frame(frame)


def test_cast_label():
    assert cast_label(np.float64(1.5)) == 1.5
    assert type(cast_label(np.int64(2))) is int
    assert cast_label(np.uint32(3), str) == "3"


def test_project_labels_keeps_order():
    frame = pd.DataFrame({"PredictedLabel": [3, 1, 2]})

    assert list(project_labels(frame, "PredictedLabel")) == [3, 1, 2]


class TestPredictionEngine:
    """Test suite for single-row prediction."""

    def test_predicts_original_labels(self, fitted):
        pipeline, schema = fitted
        engine = PredictionEngine(pipeline, schema, ["a"], "PredictedLabel", label_type=str)

        assert engine.predict({"a": 1.2}) == "yes"
        assert engine.predict({"a": -0.1}) == "no"

    def test_tracks_state(self, fitted):
        pipeline, schema = fitted
        engine = PredictionEngine(pipeline, schema, ["a"], "PredictedLabel")

        engine.predict({"a": 0.5})

        assert engine.prediction_count == 1
        assert len(engine.last_output) == 1
        assert "Probability" in engine.last_output.columns

    def test_missing_feature(self, fitted):
        pipeline, schema = fitted
        engine = PredictionEngine(pipeline, schema, ["a"], "PredictedLabel")

        with pytest.raises(ValueError, match="Missing required features"):
            engine.predict({"b": 1.0})
        assert engine.prediction_count == 0
