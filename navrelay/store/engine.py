"""Feature-store engine protocol and identifier filters.

The engine is the spatially-indexed persistence layer behind the feature
store adapter.  It offers schema creation (a no-op when the schema already
exists), feature-source lookup, batch insertion, filtered removal and
disposal.  Engine I/O problems surface as ``StoreEngineError``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

from navrelay.models.features import FeatureRecord, FeatureSchema


class StoreEngineError(IOError):
    """Raised by an engine when a store operation cannot be completed."""


class IdentifierFilter(BaseModel):
    """An "identifier in (...)" filter over a feature type.

    Only identifier-based removal is supported; geometry never takes part
    in delete filters.
    """

    model_config = ConfigDict(frozen=True)

    ids: tuple[str, ...]
    attribute: str = "id"

    @classmethod
    def of(cls, *ids: str, attribute: str = "id") -> IdentifierFilter:
        return cls(ids=ids, attribute=attribute)

    def to_ecql(self) -> str:
        """Render as ECQL, e.g. ``id in ('aton.uk.001')``."""
        quoted = ", ".join("'" + i.replace("'", "''") + "'" for i in self.ids)
        return f"{self.attribute} in ({quoted})"

    def __str__(self) -> str:
        return self.to_ecql()


@runtime_checkable
class FeatureSource(Protocol):
    """A writable handle onto one feature type of the store."""

    @property
    def type_name(self) -> str:
        ...


@runtime_checkable
class FeatureStoreEngine(Protocol):
    """What the adapter needs from the store engine."""

    def create_schema(self, schema: FeatureSchema) -> None:
        """Create the schema; must be a no-op when it already exists."""
        ...

    def get_feature_source(self, type_name: str) -> FeatureSource:
        ...

    def add_features(self, handle: FeatureSource, batch: Sequence[FeatureRecord]) -> Any:
        ...

    def remove_features(self, handle: FeatureSource, filter: IdentifierFilter) -> Any:
        ...

    def dispose(self) -> None:
        ...
