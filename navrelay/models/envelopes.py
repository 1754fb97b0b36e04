"""Typed envelopes moved across the relay bus.

An envelope is built once at the producing boundary and never mutated.
Creation envelopes carry both a geometry and a payload; deletion envelopes
carry neither.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from navrelay.models.domains import PublicationDomain
from navrelay.models.geometry import GeometryValue


class Envelope(BaseModel):
    """The unit of data published on the bus.

    Attributes
    ----------
    domain:
        The publication domain (content-type) of the envelope.
    id:
        The type-specific identifier, e.g. an AtoN UID.
    geometry:
        Present for creation envelopes, absent for deletions.
    payload:
        The opaque encoded content (usually S-100 GML/XML).  Present for
        creation envelopes, absent for deletions.
    """

    model_config = ConfigDict(frozen=True)

    envelope_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    domain: PublicationDomain
    id: str
    geometry: GeometryValue | None = None
    payload: str | None = None

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Envelope id must be a non-empty string")
        return value

    @model_validator(mode="after")
    def _check_presence(self) -> Envelope:
        has_geometry = self.geometry is not None
        has_payload = self.payload is not None
        if has_geometry != has_payload:
            raise ValueError("geometry and payload must be both present or both absent")
        if has_payload == self.domain.is_deletion:
            expected = "absent" if self.domain.is_deletion else "present"
            raise ValueError(
                f"{self.domain.tag} envelopes must have geometry and payload {expected}"
            )
        return self

    @property
    def is_deletion(self) -> bool:
        return self.domain.is_deletion

    @classmethod
    def creation(
        cls,
        domain: PublicationDomain,
        id: str,
        geometry: GeometryValue,
        payload: str,
    ) -> Envelope:
        """Build a creation envelope."""
        return cls(domain=domain, id=id, geometry=geometry, payload=payload)

    @classmethod
    def deletion(cls, domain: PublicationDomain, id: str) -> Envelope:
        """Build a deletion envelope; creation domains map to their deletion variant."""
        return cls(domain=domain.deletion_variant(), id=id)
