"""Push sink — forwards classified envelopes to the live-viewer transport."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from navrelay.routing.sinks import PushTransport

logger = logging.getLogger(__name__)


class PushSink:
    """Single-call adapter over a ``PushTransport``.

    No acknowledgement is awaited and nothing is buffered or coalesced
    here; the value is handed to the transport as-is.
    """

    def __init__(self, transport: PushTransport) -> None:
        self._transport = transport

    @property
    def transport(self) -> PushTransport:
        return self._transport

    def push(self, topic: str, value: Any) -> None:
        logger.debug("Pushing to %s via %s", topic, self._transport.transport_name)
        self._transport.send(topic, value)
