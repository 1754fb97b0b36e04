"""Shared test fixtures for navrelay."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest

from navrelay.core.envelope_bus import EnvelopeBus
from navrelay.core.geometry_codec import encode_point
from navrelay.models.domains import PublicationDomain
from navrelay.models.envelopes import Envelope
from navrelay.models.features import FeatureRecord, FeatureSchema
from navrelay.routing.sinks.memory import MemoryPushTransport
from navrelay.store.engine import IdentifierFilter, StoreEngineError
from navrelay.store.sqlite_engine import SQLiteFeatureStore

S125_XML = (
    '<?xml version="1.0" encoding="UTF-8"?>'
    "<S125:Dataset><member><S125:VirtualAISAidToNavigation>"
    "<idCode>aton.uk.001</idCode>"
    "</S125:VirtualAISAidToNavigation></member></S125:Dataset>"
)


# ---------------------------------------------------------------------------
# Fake store engine
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FakeFeatureSource:
    type_name: str


class RecordingEngine:
    """Store engine double that records every call.

    Set ``fail_on`` to a method name ("create_schema", "add_features",
    "remove_features", "get_feature_source") to make it raise
    ``StoreEngineError``.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, Any]] = []
        self.fail_on: set[str] = set()
        self.disposed = 0

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail_on:
            raise StoreEngineError(f"{name} failed: disk on fire")

    def create_schema(self, schema: FeatureSchema) -> None:
        self._record("create_schema", schema)

    def get_feature_source(self, type_name: str) -> FakeFeatureSource:
        self._record("get_feature_source", type_name)
        return FakeFeatureSource(type_name)

    def add_features(self, handle: FakeFeatureSource, batch: Sequence[FeatureRecord]) -> None:
        self._record("add_features", handle, list(batch))

    def remove_features(self, handle: FakeFeatureSource, filter: IdentifierFilter) -> None:
        self._record("remove_features", handle, filter)

    def dispose(self) -> None:
        self.disposed += 1

    def calls_to(self, name: str) -> list[tuple[Any, ...]]:
        return [args for n, args in self.calls if n == name]


@pytest.fixture
def engine() -> RecordingEngine:
    """Provide a fresh recording store engine."""
    return RecordingEngine()


@pytest.fixture
def sqlite_store(tmp_path: Path) -> SQLiteFeatureStore:
    """Provide a SQLite feature store backed by a temp database."""
    store = SQLiteFeatureStore(tmp_path / "features.db")
    yield store
    store.dispose()


@pytest.fixture
def transport() -> MemoryPushTransport:
    """Provide an in-memory push transport."""
    return MemoryPushTransport()


@pytest.fixture
def bus() -> EnvelopeBus:
    """Provide a sequential envelope bus."""
    bus = EnvelopeBus()
    yield bus
    bus.close()


# ---------------------------------------------------------------------------
# Envelope factories shared across test modules
# ---------------------------------------------------------------------------


@pytest.fixture
def make_envelope() -> Callable[..., Envelope]:
    """Factory fixture: build a creation envelope with sensible defaults."""

    def _factory(
        domain: PublicationDomain = PublicationDomain.ATON,
        id: str = "aton.uk.001",
        **overrides: Any,
    ) -> Envelope:
        defaults: dict[str, Any] = {
            "domain": domain,
            "id": id,
            "geometry": encode_point(1.594, 53.61),
            "payload": S125_XML,
        }
        defaults.update(overrides)
        return Envelope(**defaults)

    return _factory


@pytest.fixture
def aton_envelope(make_envelope: Callable[..., Envelope]) -> Envelope:
    """Convenience: the AtoN creation envelope of the reference scenario."""
    return make_envelope(payload="<xml/>")
