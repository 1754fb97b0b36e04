"""Local file push transport — writes pushed envelopes to local JSON files.

Layout: {base_path}/{topic}/{envelope_id}.json

Each pushed envelope is serialized to canonical JSON so a viewer (or an
operator) can tail the directory of a topic.
"""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from navrelay.core.envelope_bus import canonical_json_bytes

logger = logging.getLogger(__name__)


class LocalFilePushTransport:
    """Writes each pushed payload to its own JSON file.

    Parameters
    ----------
    base_path:
        Root directory for pushed messages.  Defaults to ``.navrelay/push``.
    """

    def __init__(self, base_path: Path | str | None = None) -> None:
        self._base = Path(base_path) if base_path else Path(".navrelay/push")
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def transport_name(self) -> str:
        return "local_file"

    def send(self, topic: str, payload: Any) -> None:
        """Write *payload* under the directory of *topic*.

        Topic separators become sub-directories, so ``topic/aton`` lands
        in ``{base_path}/topic/aton/``.
        """
        target_dir = self._topic_dir(topic)
        target_dir.mkdir(parents=True, exist_ok=True)

        if isinstance(payload, BaseModel):
            data = payload.model_dump(mode="json")
            name = getattr(payload, "envelope_id", None) or uuid.uuid4().hex
        else:
            data = payload
            name = uuid.uuid4().hex

        target_file = target_dir / f"{name}.json"
        target_file.write_bytes(canonical_json_bytes(data))

        logger.debug("LocalFilePushTransport: wrote %s to %s", name, target_file)

    def list_messages(self, topic: str) -> list[Path]:
        """List all message files pushed to *topic*."""
        topic_dir = self._topic_dir(topic)
        if not topic_dir.exists():
            return []
        return sorted(topic_dir.glob("*.json"))

    def read_message(self, path: Path) -> dict:
        """Read and parse a single message file."""
        return json.loads(path.read_bytes())

    def _topic_dir(self, topic: str) -> Path:
        parts = [p for p in topic.split("/") if p and p not in (".", "..")]
        return self._base.joinpath(*parts)
