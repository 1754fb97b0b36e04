"""Unit tests for the dispatch routers and the push sink.

Covers classification (creation / deletion / unknown), malformed-envelope
discards, the live-push topic layout, store adapter lookup, and router
lifecycle against the bus.
"""

from __future__ import annotations

import logging
from typing import Any

import pytest

from navrelay.core.geometry_codec import encode_point
from navrelay.models.domains import PublicationDomain
from navrelay.models.envelopes import Envelope
from navrelay.models.features import FeatureRecord, schema_for
from navrelay.routing.dispatcher import LivePushRouter, StorePersistenceRouter
from navrelay.routing.sinks import PushSink, PushTransport
from navrelay.routing.sinks.memory import MemoryPushTransport
from navrelay.store.adapter import StoreInternalError
from navrelay.store.engine import IdentifierFilter


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _ExplodingTransport:
    """A push transport that always raises."""

    @property
    def transport_name(self) -> str:
        return "exploding"

    def send(self, topic: str, payload: Any) -> None:
        raise ConnectionError("viewer socket closed")


def _started_store_router(engine, bus) -> StorePersistenceRouter:
    router = StorePersistenceRouter(engine)
    assert router.start(bus) is True
    return router


# ---------------------------------------------------------------------------
# Test: LivePushRouter
# ---------------------------------------------------------------------------


class TestLivePushRouter:
    def test_creation_pushed_to_prefixed_topic(self, transport, aton_envelope):
        router = LivePushRouter(PushSink(transport), prefix="topic")

        assert router.handle(aton_envelope) is True
        assert transport.sent == [("topic/aton", aton_envelope)]

    @pytest.mark.parametrize(
        "domain, topic",
        [
            (PublicationDomain.NAVIGATION_WARNING, "relay/navigation-warning"),
            (PublicationDomain.ADMIN_ATON, "relay/admin-aton"),
        ],
    )
    def test_topic_per_domain(self, transport, make_envelope, domain, topic):
        router = LivePushRouter(PushSink(transport), prefix="/relay/")
        router.handle(make_envelope(domain=domain))
        assert transport.sent[0][0] == topic

    def test_payload_forwarded_unchanged(self, transport, make_envelope):
        big = "<x>" + "a" * 100_000 + "</x>"
        router = LivePushRouter(PushSink(transport))
        router.handle(make_envelope(payload=big))
        assert transport.sent[0][1].payload == big

    def test_deletion_not_pushed(self, transport):
        router = LivePushRouter(PushSink(transport))
        env = Envelope.deletion(PublicationDomain.ATON, "aton.uk.001")

        assert router.handle(env) is False
        assert transport.sent == []

    def test_non_string_payload_discarded(self, transport, caplog):
        router = LivePushRouter(PushSink(transport))
        env = Envelope.model_construct(
            domain=PublicationDomain.ATON,
            id="aton.uk.001",
            geometry=encode_point(1.594, 53.61),
            payload={"this is just": "not a string"},
        )

        assert router.handle(env) is False
        assert transport.sent == []
        assert "erroneous format" in caplog.text

    def test_push_failure_is_swallowed(self, aton_envelope, caplog):
        router = LivePushRouter(PushSink(_ExplodingTransport()))
        assert router.handle(aton_envelope) is True
        assert "viewer socket closed" in caplog.text

    def test_start_stop_subscription(self, bus, transport):
        router = LivePushRouter(PushSink(transport))
        router.start(bus)
        assert bus.subscribers == [router.handle]
        router.stop(bus)
        assert bus.subscribers == []


# ---------------------------------------------------------------------------
# Test: StorePersistenceRouter
# ---------------------------------------------------------------------------


class TestStorePersistenceRouter:
    def test_adapter_per_creation_domain(self, engine):
        router = StorePersistenceRouter(engine)
        assert set(router.adapters) == set(PublicationDomain.creation_domains())
        assert router.adapter_for(PublicationDomain.ATON_DEL) is router.adapter_for(
            PublicationDomain.ATON
        )

    def test_creation_written_once(self, engine, bus, aton_envelope):
        router = _started_store_router(engine, bus)

        assert router.handle(aton_envelope) is True

        writes = engine.calls_to("add_features")
        assert len(writes) == 1
        handle, batch = writes[0]
        assert handle.type_name == "S125"
        assert batch == [
            FeatureRecord(id="aton.uk.001", geometry=encode_point(1.594, 53.61), content="<xml/>")
        ]

    def test_deletion_uses_identifier_filter(self, engine, bus):
        router = _started_store_router(engine, bus)

        router.handle(Envelope.deletion(PublicationDomain.ADMIN_ATON, "test_aton"))

        removals = engine.calls_to("remove_features")
        assert len(removals) == 1
        handle, id_filter = removals[0]
        assert handle.type_name == "S201"
        assert id_filter == IdentifierFilter.of("test_aton")
        assert id_filter.to_ecql() == "id in ('test_aton')"

    def test_unknown_domain_discarded(self, engine, bus, caplog):
        caplog.set_level(logging.INFO)
        router = _started_store_router(engine, bus)
        env = Envelope.model_construct(domain="radar", id="r-1", geometry=None, payload="x")

        assert router.handle(env) is False
        assert engine.calls_to("add_features") == []
        assert "unrecognised domain" in caplog.text

    def test_missing_id_discarded(self, engine, bus):
        router = _started_store_router(engine, bus)
        env = Envelope.model_construct(domain=PublicationDomain.ATON_DEL, id="", geometry=None, payload=None)

        assert router.handle(env) is False
        assert engine.calls_to("remove_features") == []

    def test_missing_geometry_discarded(self, engine, bus):
        router = _started_store_router(engine, bus)
        env = Envelope.model_construct(
            domain=PublicationDomain.ATON, id="aton.uk.001", geometry=None, payload="<xml/>"
        )

        assert router.handle(env) is False
        assert engine.calls_to("add_features") == []

    def test_domain_without_schema_discarded(self, engine, bus, aton_envelope):
        warnings_only = {
            PublicationDomain.NAVIGATION_WARNING: schema_for(PublicationDomain.NAVIGATION_WARNING)
        }
        router = StorePersistenceRouter(engine, schemas=warnings_only)
        router.start(bus)
        assert router.handle(aton_envelope) is False

    def test_store_failure_propagates(self, engine, bus, aton_envelope):
        router = _started_store_router(engine, bus)
        engine.fail_on.add("add_features")

        with pytest.raises(StoreInternalError, match="disk on fire"):
            router.handle(aton_envelope)

    def test_start_without_engine_is_inert(self, bus, caplog):
        router = StorePersistenceRouter(None)

        assert router.start(bus) is False
        assert bus.subscribers == []
        assert "Unable to connect" in caplog.text
        assert not any(a.is_live for a in router.adapters.values())

    def test_start_creates_every_schema(self, engine, bus):
        _started_store_router(engine, bus)
        created = {args[0].type_name for args in engine.calls_to("create_schema")}
        assert created == {"S125", "S124", "S201"}

    def test_stop_unsubscribes_and_disposes(self, engine, bus):
        router = _started_store_router(engine, bus)
        router.stop(bus)
        assert bus.subscribers == []
        assert engine.disposed == 1
        assert not any(a.is_live for a in router.adapters.values())

    def test_stop_without_start_is_safe(self, bus):
        StorePersistenceRouter(None).stop(bus)


# ---------------------------------------------------------------------------
# Test: PushSink
# ---------------------------------------------------------------------------


class TestPushSink:
    def test_single_send(self, transport):
        PushSink(transport).push("topic/aton", "value")
        assert transport.sent == [("topic/aton", "value")]

    def test_memory_transport_protocol_compliance(self):
        assert isinstance(MemoryPushTransport(), PushTransport)
