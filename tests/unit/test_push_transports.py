"""Tests for the push transports — memory history and local JSON files."""

from __future__ import annotations

from navrelay.routing.sinks import PushSink, PushTransport
from navrelay.routing.sinks.local_file import LocalFilePushTransport
from navrelay.routing.sinks.memory import MemoryPushTransport


class TestMemoryPushTransport:
    def test_records_in_order(self):
        transport = MemoryPushTransport()
        transport.send("topic/aton", "a")
        transport.send("topic/admin-aton", "b")
        assert transport.sent == [("topic/aton", "a"), ("topic/admin-aton", "b")]

    def test_messages_for_topic(self):
        transport = MemoryPushTransport()
        transport.send("topic/aton", "a")
        transport.send("topic/admin-aton", "b")
        transport.send("topic/aton", "c")
        assert transport.messages_for("topic/aton") == ["a", "c"]

    def test_bounded_history(self):
        transport = MemoryPushTransport(max_history=2)
        for i in range(5):
            transport.send("t", i)
        assert transport.sent == [("t", 3), ("t", 4)]

    def test_clear(self):
        transport = MemoryPushTransport()
        transport.send("t", 1)
        transport.clear()
        assert transport.sent == []


class TestLocalFilePushTransport:
    def test_protocol_compliance(self, tmp_path):
        transport = LocalFilePushTransport(tmp_path)
        assert isinstance(transport, PushTransport)
        assert transport.transport_name == "local_file"

    def test_envelope_written_under_topic_dir(self, tmp_path, aton_envelope):
        transport = LocalFilePushTransport(tmp_path)
        PushSink(transport).push("topic/aton", aton_envelope)

        (path,) = transport.list_messages("topic/aton")
        assert path.parent == tmp_path / "topic" / "aton"
        assert path.name == f"{aton_envelope.envelope_id}.json"

        data = transport.read_message(path)
        assert data["id"] == "aton.uk.001"
        assert data["payload"] == "<xml/>"
        assert data["geometry"]["type"] == "Point"

    def test_plain_payload(self, tmp_path):
        transport = LocalFilePushTransport(tmp_path)
        transport.send("topic/aton", {"hello": "viewer"})
        (path,) = transport.list_messages("topic/aton")
        assert transport.read_message(path) == {"hello": "viewer"}

    def test_topic_cannot_escape_base(self, tmp_path):
        base = tmp_path / "push"
        transport = LocalFilePushTransport(base)
        transport.send("../../etc", {"x": 1})
        assert not (tmp_path / "etc").exists()
        assert len(transport.list_messages("etc")) == 1

    def test_unknown_topic_is_empty(self, tmp_path):
        assert LocalFilePushTransport(tmp_path).list_messages("topic/none") == []
