"""Envelope bus — an in-process publish/subscribe channel for envelopes.

Every subscriber receives every published envelope exactly once.  A
failing subscriber is logged and does not prevent delivery to the others;
there is no replay once all subscribers have been notified.

With ``max_workers > 1`` each subscriber is invoked on its own worker
thread, so the live-push and store-persistence routers process the same
envelope concurrently.  ``publish`` returns once every delivery finished.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from pydantic import ValidationError

from navrelay.models.envelopes import Envelope

logger = logging.getLogger(__name__)

Subscriber = Callable[[Envelope], Any]


class EnvelopeValidationError(ValueError):
    """Raised when a raw envelope fails validation."""


class EnvelopeBus:
    """Fans envelopes out to all subscribers.

    Parameters
    ----------
    max_workers:
        Size of the delivery thread pool.  ``None`` or ``1`` delivers
        sequentially on the publishing thread, in subscription order.
    """

    def __init__(self, max_workers: int | None = None) -> None:
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        if max_workers and max_workers > 1:
            self._executor = ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix="navrelay-bus"
            )

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def subscribe(self, subscriber: Subscriber) -> None:
        """Register a subscriber.  Subscribing twice is a no-op."""
        with self._lock:
            if subscriber not in self._subscribers:
                self._subscribers.append(subscriber)
                logger.info("Subscribed %s", _name_of(subscriber))

    def unsubscribe(self, subscriber: Subscriber) -> None:
        with self._lock:
            try:
                self._subscribers.remove(subscriber)
                logger.info("Unsubscribed %s", _name_of(subscriber))
            except ValueError:
                pass

    @property
    def subscribers(self) -> list[Subscriber]:
        with self._lock:
            return list(self._subscribers)

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    def publish(self, envelope: Envelope) -> int:
        """Deliver an envelope to every subscriber.

        Returns the number of subscribers that handled the envelope without
        raising.  Subscriber errors are logged, never re-raised.
        """
        subscribers = self.subscribers
        if not subscribers:
            logger.warning(
                "No subscribers registered, envelope %s dropped",
                getattr(envelope, "envelope_id", None),
            )
            return 0

        if self._executor is None:
            outcomes = [self._deliver(s, envelope) for s in subscribers]
        else:
            futures = [
                self._executor.submit(self._deliver, s, envelope) for s in subscribers
            ]
            outcomes = [f.result() for f in futures]

        delivered = sum(outcomes)
        if delivered < len(subscribers):
            logger.warning(
                "Envelope %s (%s): %d/%d subscribers succeeded",
                getattr(envelope, "envelope_id", None),
                _tag_of(envelope),
                delivered,
                len(subscribers),
            )
        return delivered

    @staticmethod
    def _deliver(subscriber: Subscriber, envelope: Envelope) -> bool:
        try:
            subscriber(envelope)
            return True
        except Exception:
            logger.exception(
                "Subscriber %s failed for envelope %s (%s id=%s)",
                _name_of(subscriber),
                getattr(envelope, "envelope_id", None),
                _tag_of(envelope),
                getattr(envelope, "id", None),
            )
            return False

    def close(self) -> None:
        """Drop all subscribers and stop the delivery pool."""
        with self._lock:
            self._subscribers.clear()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Receive (deserialize + validate)
    # ------------------------------------------------------------------

    def receive(self, raw_json: bytes | str) -> Envelope:
        """Deserialize and validate a raw JSON envelope."""
        try:
            if isinstance(raw_json, bytes):
                raw_json = raw_json.decode("utf-8")
            data = json.loads(raw_json)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise EnvelopeValidationError(f"Invalid JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise EnvelopeValidationError(
                f"Envelope must be a JSON object, got {type(data).__name__}"
            )

        if not data.get("domain"):
            raise EnvelopeValidationError("Missing domain field")

        try:
            return Envelope.model_validate(data)
        except ValidationError as exc:
            raise EnvelopeValidationError(f"Envelope validation failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @staticmethod
    def serialize(envelope: Envelope) -> bytes:
        """Serialize an envelope to canonical JSON bytes."""
        return canonical_json_bytes(envelope.model_dump(mode="json"))


def canonical_json_bytes(obj: Any) -> bytes:
    """Deterministic, sorted, compact JSON bytes."""
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def _name_of(subscriber: Subscriber) -> str:
    owner = getattr(subscriber, "__self__", None)
    name = getattr(owner, "router_name", None)
    if name:
        return name
    return getattr(subscriber, "__qualname__", repr(subscriber))


def _tag_of(envelope: Any) -> Any:
    # unvalidated envelopes may carry a bare tag string or nothing
    domain = getattr(envelope, "domain", None)
    return getattr(domain, "tag", domain)
