"""In-memory push transport — keeps a bounded history of pushed messages.

Used by the in-process relay when no external viewer transport is
configured, and by tests to observe what the live-push router sends.
"""

from __future__ import annotations

import collections
import threading
from typing import Any


class MemoryPushTransport:
    """Records ``(topic, payload)`` pairs in arrival order.

    Parameters
    ----------
    max_history:
        Oldest messages are discarded once this many are held.
    """

    def __init__(self, max_history: int = 1024) -> None:
        self._sent: collections.deque[tuple[str, Any]] = collections.deque(
            maxlen=max_history
        )
        self._lock = threading.Lock()

    @property
    def transport_name(self) -> str:
        return "memory"

    def send(self, topic: str, payload: Any) -> None:
        with self._lock:
            self._sent.append((topic, payload))

    @property
    def sent(self) -> list[tuple[str, Any]]:
        with self._lock:
            return list(self._sent)

    def messages_for(self, topic: str) -> list[Any]:
        return [payload for t, payload in self.sent if t == topic]

    def clear(self) -> None:
        with self._lock:
            self._sent.clear()
