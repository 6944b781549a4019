"""
Data loading utilities.

Turns delimited text files and in-memory record collections into the pandas
DataFrames that pipeline stages operate on.
"""

import dataclasses
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd
from pydantic import BaseModel

logger = logging.getLogger(__name__)


def record_columns(record_type: Optional[type]) -> list[str]:
    """
    Get the ordered column names declared by a record type.

    Supports dataclasses, pydantic models, named tuples and annotated classes.
    Returns an empty list when the type declares nothing usable.
    """
    if record_type is None:
        return []
    if dataclasses.is_dataclass(record_type):
        return [f.name for f in dataclasses.fields(record_type)]
    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        return list(record_type.model_fields)
    if hasattr(record_type, "_fields"):
        return list(record_type._fields)
    return [
        name
        for name in getattr(record_type, "__annotations__", {})
        if not name.startswith("_")
    ]


def record_to_dict(item: Any) -> dict[str, Any]:
    """Convert a single record into a column -> value mapping."""
    if isinstance(item, Mapping):
        return dict(item)
    if dataclasses.is_dataclass(item) and not isinstance(item, type):
        return dataclasses.asdict(item)
    if isinstance(item, BaseModel):
        return item.model_dump()
    if hasattr(item, "_asdict"):
        return dict(item._asdict())
    if hasattr(item, "__dict__"):
        return {k: v for k, v in vars(item).items() if not k.startswith("_")}
    raise TypeError(f"Cannot convert record of type {type(item).__name__} to a row")


def load_from_enumerable(
    items: Union[Iterable[Any], pd.DataFrame],
    record_type: Optional[type] = None,
    columns: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Adapt an in-memory collection of records into a DataFrame.

    Args:
        items: Records (dataclasses, pydantic models, mappings, ...) or a DataFrame
        record_type: Declared record type, used for the columns of empty input
        columns: Columns of empty input when the record type declares none

    Returns:
        DataFrame with one row per record, in input order
    """
    if isinstance(items, pd.DataFrame):
        return items.reset_index(drop=True).copy()

    rows = [record_to_dict(item) for item in items]
    declared = record_columns(record_type)

    if not rows:
        return pd.DataFrame(columns=declared or list(columns or ()))

    df = pd.DataFrame.from_records(rows)
    if declared:
        ordered = [c for c in declared if c in df.columns]
        df = df[ordered + [c for c in df.columns if c not in ordered]]
    return df


def load_from_text_file(
    path: Union[str, Path],
    has_header: bool = True,
    separator: str = ",",
    record_type: Optional[type] = None,
) -> pd.DataFrame:
    """
    Load a delimited text file.

    Args:
        path: Path to the file
        has_header: Whether the first line holds column names
        separator: Single-character field separator
        record_type: Record type naming the columns of header-less files

    Returns:
        Loaded DataFrame
    """
    names = None if has_header else (record_columns(record_type) or None)

    logger.info(f"Loading data from {path}")
    df = pd.read_csv(
        path,
        sep=separator,
        header=0 if has_header else None,
        names=names,
        skipinitialspace=True,
    )
    df.columns = [str(c) for c in df.columns]
    logger.info(f"Loaded {len(df)} rows with {len(df.columns)} columns")
    return df
