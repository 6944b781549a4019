import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pytest

# Add the src directory to the Python path so imports work correctly
PROJECT_ROOT = Path(__file__).parent.parent
SRC_PATH = PROJECT_ROOT / "src"
sys.path.insert(0, str(SRC_PATH))


@dataclass
class BinaryRecord:
    x1: float
    x2: float
    label: bool


@dataclass
class MulticlassRecord:
    x1: float
    x2: float
    color: str


@dataclass
class RegressionRecord:
    size: float
    rooms: float
    price: float


def make_binary_records(n_samples: int = 200, seed: int = 0) -> list[BinaryRecord]:
    rng = np.random.default_rng(seed)
    x = rng.normal(size=(n_samples, 2))
    noise = rng.normal(scale=0.3, size=n_samples)
    label = x[:, 0] + x[:, 1] + noise > 0
    return [BinaryRecord(float(a), float(b), bool(c)) for (a, b), c in zip(x, label)]


def make_multiclass_records(n_per_class: int = 50, seed: int = 0) -> list[MulticlassRecord]:
    rng = np.random.default_rng(seed)
    centers = {"red": (0.0, 0.0), "green": (5.0, 0.0), "blue": (0.0, 5.0)}
    records = []
    for color, (cx, cy) in centers.items():
        points = rng.normal(size=(n_per_class, 2)) * 0.7 + (cx, cy)
        records.extend(MulticlassRecord(float(a), float(b), color) for a, b in points)
    order = rng.permutation(len(records))
    return [records[i] for i in order]


def make_regression_records(n_samples: int = 200, seed: int = 0) -> list[RegressionRecord]:
    rng = np.random.default_rng(seed)
    size = rng.uniform(50, 200, size=n_samples)
    rooms = rng.integers(1, 6, size=n_samples).astype(float)
    price = 3.0 * size + 20.0 * rooms + 15.0 + rng.normal(scale=5.0, size=n_samples)
    return [RegressionRecord(float(s), float(r), float(p)) for s, r, p in zip(size, rooms, price)]


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def record_types():
    """Record dataclasses used by the sample datasets."""
    return {
        "binary": BinaryRecord,
        "multiclass": MulticlassRecord,
        "regression": RegressionRecord,
    }


@pytest.fixture
def binary_train():
    return make_binary_records(200, seed=0)


@pytest.fixture
def binary_test():
    return make_binary_records(80, seed=1)


@pytest.fixture
def multiclass_train():
    return make_multiclass_records(50, seed=0)


@pytest.fixture
def multiclass_test():
    return make_multiclass_records(20, seed=1)


@pytest.fixture
def regression_train():
    return make_regression_records(200, seed=0)


@pytest.fixture
def regression_test():
    return make_regression_records(60, seed=1)


# Configure pytest to show more detailed output for failed assertions
def pytest_configure(config):
    """Configure pytest settings."""
    config.option.verbose = True
