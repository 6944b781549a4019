"""Tabular data adapters: delimited text, in-memory records and schemas."""

from .loaders import load_from_enumerable, load_from_text_file, record_columns
from .schema import DatasetSchema

__all__ = [
    "DatasetSchema",
    "load_from_enumerable",
    "load_from_text_file",
    "record_columns",
]
