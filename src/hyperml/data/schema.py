"""
Dataset schema captured when a pipeline is fitted.
"""

from __future__ import annotations

from collections.abc import Iterable

import pandas as pd
from pydantic import BaseModel, ConfigDict


class DatasetSchema(BaseModel):
    """Ordered ``(column, dtype)`` pairs of a tabular dataset."""

    model_config = ConfigDict(frozen=True)

    columns: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_frame(cls, df: pd.DataFrame) -> DatasetSchema:
        return cls(columns=tuple((str(c), str(t)) for c, t in df.dtypes.items()))

    @property
    def column_names(self) -> list[str]:
        return [name for name, _ in self.columns]

    def missing_columns(
        self, df: pd.DataFrame, required: Iterable[str] | None = None
    ) -> list[str]:
        """Return required columns absent from ``df`` (all schema columns by default)."""
        required = self.column_names if required is None else required
        return [c for c in required if c not in df.columns]

    def __len__(self) -> int:
        return len(self.columns)
