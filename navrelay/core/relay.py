"""Relay — wires the bus, both routers, the store adapters and the push sink.

``Relay`` is the process-level object: construct it (optionally injecting
an engine or push transport), call ``start()``, publish through
``relay.publisher``, and ``stop()`` on shutdown.  If the feature store
cannot be opened the relay still runs with live push only.
"""

from __future__ import annotations

import logging
from typing import Any

from navrelay.config import RelayConfig
from navrelay.config import config as default_config
from navrelay.core.envelope_bus import EnvelopeBus
from navrelay.core.publisher import Publisher
from navrelay.routing.dispatcher import LivePushRouter, StorePersistenceRouter
from navrelay.routing.sinks import PushSink, PushTransport
from navrelay.routing.sinks.memory import MemoryPushTransport
from navrelay.store.engine import FeatureStoreEngine, StoreEngineError
from navrelay.store.sqlite_engine import SQLiteFeatureStore

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def open_engine(config: RelayConfig) -> FeatureStoreEngine | None:
    """Open the configured feature store, or ``None`` when unavailable."""
    if not config.store_enabled:
        logger.warning("Feature store disabled by configuration")
        return None
    try:
        return SQLiteFeatureStore(config.store_path)
    except (StoreEngineError, OSError) as exc:
        logger.error("Unable to open feature store at %s: %s", config.store_path, exc)
        return None


class Relay:
    """The assembled publish/subscribe relay.

    Parameters
    ----------
    config:
        Relay configuration; the module-level ``navrelay.config.config``
        when omitted.
    engine:
        Feature store engine.  When omitted it is opened from ``config``;
        pass ``None`` explicitly to run without a store.
    transport:
        Push transport for live viewers.  Defaults to an in-memory one.
    """

    def __init__(
        self,
        config: RelayConfig | None = None,
        *,
        engine: FeatureStoreEngine | None = _UNSET,
        transport: PushTransport | None = None,
    ) -> None:
        self._config = config or default_config
        self._engine = open_engine(self._config) if engine is _UNSET else engine
        self._transport = transport or MemoryPushTransport()

        self.bus = EnvelopeBus(max_workers=self._config.bus_max_workers)
        self.push_router = LivePushRouter(
            PushSink(self._transport), prefix=self._config.push_prefix
        )
        self.store_router = StorePersistenceRouter(self._engine)
        self.publisher = Publisher(self.bus, srid=self._config.default_srid)
        self._store_live = False

    @property
    def engine(self) -> FeatureStoreEngine | None:
        return self._engine

    @property
    def transport(self) -> PushTransport:
        return self._transport

    @property
    def store_live(self) -> bool:
        """Whether the store-persistence router subscribed to the bus."""
        return self._store_live

    def start(self) -> Relay:
        """Subscribe both routers.

        If the store router fails to start, everything already started is
        stopped again (bus closed, engine disposed) before re-raising.
        """
        self.push_router.start(self.bus)
        try:
            self._store_live = self.store_router.start(self.bus)
        except Exception:
            logger.error("Relay start-up failed, shutting down")
            self.stop()
            raise
        logger.info(
            "Relay started (push prefix=%s, store=%s)",
            self._config.push_prefix,
            "live" if self._store_live else "disabled",
        )
        return self

    def stop(self) -> None:
        self.push_router.stop(self.bus)
        self.store_router.stop(self.bus)
        self.bus.close()
        self._store_live = False
        logger.info("Relay stopped")

    def __enter__(self) -> Relay:
        return self.start()

    def __exit__(self, *exc: Any) -> None:
        self.stop()
