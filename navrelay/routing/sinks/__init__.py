"""Push transport protocol and the push sink adapter.

All push transports implement the ``PushTransport`` protocol: a
``transport_name`` property and a ``send(topic, payload)`` method.  The
live-push router hands every accepted creation envelope to a ``PushSink``,
which forwards it to the transport unchanged.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from navrelay.routing.sinks.push import PushSink


@runtime_checkable
class PushTransport(Protocol):
    """Protocol that every live-viewer push transport must implement.

    Attributes
    ----------
    transport_name : str
        A human-readable identifier for the transport instance
        (e.g. ``"memory"``, ``"local_file"``).
    """

    @property
    def transport_name(self) -> str:
        ...

    def send(self, topic: str, payload: Any) -> None:
        """Fire-and-forget delivery of *payload* to *topic* subscribers.

        Parameters
        ----------
        topic:
            Destination such as ``"topic/aton"``.
        payload:
            The envelope being pushed.
        """
        ...


__all__ = ["PushSink", "PushTransport"]
