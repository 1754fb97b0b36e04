"""Feature store — engine protocol, SQLite engine and the per-domain adapter."""

from navrelay.store.adapter import (
    FeatureStoreAdapter,
    StoreInternalError,
    StoreValidationError,
)
from navrelay.store.engine import (
    FeatureSource,
    FeatureStoreEngine,
    IdentifierFilter,
    StoreEngineError,
)
from navrelay.store.sqlite_engine import SQLiteFeatureSource, SQLiteFeatureStore

__all__ = [
    "FeatureSource",
    "FeatureStoreAdapter",
    "FeatureStoreEngine",
    "IdentifierFilter",
    "SQLiteFeatureSource",
    "SQLiteFeatureStore",
    "StoreEngineError",
    "StoreInternalError",
    "StoreValidationError",
]
