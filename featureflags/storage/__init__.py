"""
Storage module for feature records.

Provides:
- SQLAlchemy-backed record store (sqlite, PostgreSQL, ...)
- In-memory record store
- JSON value codec
"""

from .base import GLOBAL_SCOPE, MAX_KEY_LENGTH, FeatureRecord, RecordStore, validate_key
from .codec import JSONValue, decode_value, encode_value, parse_cli_value, validate_value
from .database import (
    Base,
    FeatureDatabase,
    FeatureModel,
    SQLFeatureStore,
    create_sql_store,
)
from .memory import InMemoryFeatureStore

__all__ = [
    "GLOBAL_SCOPE",
    "MAX_KEY_LENGTH",
    "FeatureRecord",
    "RecordStore",
    "validate_key",
    "JSONValue",
    "decode_value",
    "encode_value",
    "parse_cli_value",
    "validate_value",
    "Base",
    "FeatureDatabase",
    "FeatureModel",
    "SQLFeatureStore",
    "create_sql_store",
    "InMemoryFeatureStore",
]
