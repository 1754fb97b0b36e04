"""Dispatch routers — classify bus envelopes and invoke exactly one action.

Two routers subscribe to the same bus independently:

* ``LivePushRouter`` forwards creation envelopes to the push sink under
  ``"<prefix>/<domain tag>"``.  Deletions are not pushed to viewers.
* ``StorePersistenceRouter`` writes creation envelopes to the feature store
  and turns deletion envelopes into identifier-filtered deletes.

Malformed envelopes and unknown domains are logged and discarded; nothing
escapes the router for them.  Store failures propagate to whoever drives
the dispatch cycle (the bus logs them); push failures are logged and
swallowed.  Routers keep no per-envelope state.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from navrelay.models.domains import PublicationDomain
from navrelay.models.envelopes import Envelope
from navrelay.models.features import FEATURE_SCHEMAS, FeatureRecord, FeatureSchema
from navrelay.models.geometry import GeometryValue
from navrelay.store.adapter import FeatureStoreAdapter

if TYPE_CHECKING:
    from navrelay.core.envelope_bus import EnvelopeBus
    from navrelay.routing.sinks import PushSink
    from navrelay.store.engine import FeatureStoreEngine

logger = logging.getLogger(__name__)


class DispatchRouter:
    """Shared classification algorithm; subclasses provide the actions."""

    router_name = "dispatch"

    def handle(self, envelope: Envelope) -> bool:
        """Classify *envelope* and run the matching action.

        Returns ``True`` when a downstream action was invoked and ``False``
        when the envelope was discarded.
        """
        domain = PublicationDomain.from_tag(getattr(envelope, "domain", None))
        if domain is None:
            logger.info(
                "%s: discarding envelope with unrecognised domain %r",
                self.router_name,
                getattr(envelope, "domain", None),
            )
            return False

        envelope_id = getattr(envelope, "id", None)
        if not isinstance(envelope_id, str) or not envelope_id.strip():
            logger.warning(
                "%s: received a %s envelope without an identifier", self.router_name, domain.tag
            )
            return False

        if domain.is_deletion:
            return self.on_deletion(domain, envelope)

        if not isinstance(getattr(envelope, "payload", None), str):
            logger.warning(
                "%s: received a %s message with erroneous format (id=%s)",
                self.router_name,
                domain.tag,
                envelope_id,
            )
            return False

        if not isinstance(getattr(envelope, "geometry", None), GeometryValue):
            logger.warning(
                "%s: received a %s message without a geometry (id=%s)",
                self.router_name,
                domain.tag,
                envelope_id,
            )
            return False

        return self.on_creation(domain, envelope)

    def on_creation(self, domain: PublicationDomain, envelope: Envelope) -> bool:
        raise NotImplementedError

    def on_deletion(self, domain: PublicationDomain, envelope: Envelope) -> bool:
        raise NotImplementedError


class LivePushRouter(DispatchRouter):
    """Forwards creation envelopes to live viewers.

    Parameters
    ----------
    sink:
        The push sink to forward to.
    prefix:
        The general destination prefix; topics are ``"<prefix>/<tag>"``.
    """

    router_name = "live_push"

    def __init__(self, sink: PushSink, prefix: str = "topic") -> None:
        self._sink = sink
        self._prefix = prefix.strip("/")

    def topic_for(self, domain: PublicationDomain) -> str:
        return f"{self._prefix}/{domain.tag}"

    def on_creation(self, domain: PublicationDomain, envelope: Envelope) -> bool:
        topic = self.topic_for(domain)
        logger.debug("Received %s message with UID: %s", domain.tag, envelope.id)
        try:
            self._sink.push(topic, envelope)
        except Exception:
            logger.exception("Push to %s failed for %s", topic, envelope.id)
        return True

    def on_deletion(self, domain: PublicationDomain, envelope: Envelope) -> bool:
        # TODO: push deletion notices once the viewer can remove features
        logger.debug("live_push: %s deletions are not forwarded (id=%s)", domain.tag, envelope.id)
        return False

    def start(self, bus: EnvelopeBus) -> None:
        logger.info("Live push router is booting up...")
        bus.subscribe(self.handle)

    def stop(self, bus: EnvelopeBus) -> None:
        logger.info("Live push router is shutting down...")
        bus.unsubscribe(self.handle)


class StorePersistenceRouter(DispatchRouter):
    """Persists creation envelopes and applies deletions in the feature store.

    One ``FeatureStoreAdapter`` is built per schema of *schemas* and looked
    up by the envelope's domain (deletion variants share their creation
    domain's adapter).

    Parameters
    ----------
    engine:
        The feature store engine, or ``None`` when it is unavailable.
    schemas:
        Schemas keyed by creation domain.  Defaults to every known domain.
    """

    router_name = "store_persistence"

    def __init__(
        self,
        engine: FeatureStoreEngine | None,
        schemas: Mapping[PublicationDomain, FeatureSchema] | None = None,
    ) -> None:
        self._engine = engine
        self._adapters: dict[PublicationDomain, FeatureStoreAdapter] = {
            domain: FeatureStoreAdapter(schema, engine)
            for domain, schema in (schemas or FEATURE_SCHEMAS).items()
        }
        self._subscribed = False

    @property
    def adapters(self) -> dict[PublicationDomain, FeatureStoreAdapter]:
        return dict(self._adapters)

    def adapter_for(self, domain: PublicationDomain) -> FeatureStoreAdapter | None:
        return self._adapters.get(domain.creation_variant())

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def on_creation(self, domain: PublicationDomain, envelope: Envelope) -> bool:
        adapter = self.adapter_for(domain)
        if adapter is None:
            logger.info("store_persistence: no schema for %s, discarding", domain.tag)
            return False
        adapter.write(
            FeatureRecord(id=envelope.id, geometry=envelope.geometry, content=envelope.payload)
        )
        return True

    def on_deletion(self, domain: PublicationDomain, envelope: Envelope) -> bool:
        adapter = self.adapter_for(domain)
        if adapter is None:
            logger.info("store_persistence: no schema for %s, discarding", domain.tag)
            return False
        adapter.delete(envelope.id)
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, bus: EnvelopeBus) -> bool:
        """Start every adapter and subscribe to *bus*.

        When the engine is unavailable the router logs an error, stays
        inert and does not subscribe; ``False`` is returned.
        """
        logger.info("Feature store persistence router is booting up...")
        if self._engine is None:
            logger.error("Unable to connect to the feature store")
            return False

        for adapter in self._adapters.values():
            adapter.start()

        bus.subscribe(self.handle)
        self._subscribed = True
        return True

    def stop(self, bus: EnvelopeBus) -> None:
        """Unsubscribe, release the handles and dispose the engine."""
        logger.info("Feature store persistence router is shutting down...")
        if self._subscribed:
            bus.unsubscribe(self.handle)
            self._subscribed = False
        for adapter in self._adapters.values():
            adapter.stop()
        if self._engine is not None:
            self._engine.dispose()
