"""Publisher — the inbound boundary that turns publish/delete calls into envelopes.

Raw coordinate lists are classified by the geometry codec here, once, so
everything past the bus only sees typed envelopes.
"""

from __future__ import annotations

import logging

from navrelay.core import geometry_codec
from navrelay.core.envelope_bus import EnvelopeBus
from navrelay.core.geometry_codec import Coordinates
from navrelay.models.domains import PublicationDomain
from navrelay.models.envelopes import Envelope
from navrelay.models.geometry import DEFAULT_SRID

logger = logging.getLogger(__name__)


class Publisher:
    """Builds envelopes for producers and publishes them on the bus.

    Invalid input (odd coordinate lists, empty ids, deletion domains used
    for creation) raises ``ValueError`` to the caller before anything is
    published.
    """

    def __init__(self, bus: EnvelopeBus, srid: int = DEFAULT_SRID) -> None:
        self._bus = bus
        self._srid = srid

    def publish(
        self,
        domain: PublicationDomain,
        id: str,
        coordinates: Coordinates,
        content: str,
    ) -> Envelope:
        """Publish *content* for *id* with a geometry classified from *coordinates*."""
        geometry = geometry_codec.encode(coordinates, self._srid)
        return self._send(Envelope.creation(domain, id, geometry, content))

    def publish_point(
        self,
        domain: PublicationDomain,
        id: str,
        x: float,
        y: float,
        content: str,
    ) -> Envelope:
        """Publish *content* for *id* located at the point ``(x, y)``."""
        geometry = geometry_codec.encode_point(x, y, self._srid)
        return self._send(Envelope.creation(domain, id, geometry, content))

    def delete(self, domain: PublicationDomain, id: str) -> Envelope:
        """Publish the deletion of *id*; *domain* may be either variant."""
        return self._send(Envelope.deletion(domain, id))

    def _send(self, envelope: Envelope) -> Envelope:
        delivered = self._bus.publish(envelope)
        logger.info(
            "Published %s %s to %d subscriber(s)", envelope.domain.tag, envelope.id, delivered
        )
        return envelope
