"""Feature-store schemas and records.

One ``FeatureSchema`` exists per creation domain, each describing the
attribute triple {identifier, geometry, content}.  Records are written
whole; a re-publish of the same id is a fresh write.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from navrelay.models.domains import PublicationDomain
from navrelay.models.envelopes import Envelope
from navrelay.models.geometry import DEFAULT_SRID, GeometryValue


class FeatureSchema(BaseModel):
    """The attribute contract registered with the feature store for a domain."""

    model_config = ConfigDict(frozen=True)

    type_name: str
    domain: PublicationDomain
    id_attribute: str = "id"
    geometry_attribute: str = "geometry"
    content_attribute: str = "content"
    geometry_type: str = "Geometry"
    srid: int = DEFAULT_SRID

    def encode_type(self) -> str:
        """Render the schema as a compact type spec.

        >>> FEATURE_SCHEMAS[PublicationDomain.ATON].encode_type()
        'id:String,*geometry:Geometry:srid=4326,content:String'
        """
        return (
            f"{self.id_attribute}:String,"
            f"*{self.geometry_attribute}:{self.geometry_type}:srid={self.srid},"
            f"{self.content_attribute}:String"
        )


class FeatureRecord(BaseModel):
    """A single row conforming to a ``FeatureSchema``."""

    model_config = ConfigDict(frozen=True)

    id: str
    geometry: GeometryValue
    content: str

    @classmethod
    def from_envelope(cls, envelope: Envelope) -> FeatureRecord:
        if envelope.is_deletion:
            raise ValueError("Deletion envelopes do not produce feature records")
        return cls(id=envelope.id, geometry=envelope.geometry, content=envelope.payload)


FEATURE_SCHEMAS: dict[PublicationDomain, FeatureSchema] = {
    domain: FeatureSchema(type_name=domain.type_name, domain=domain)
    for domain in PublicationDomain.creation_domains()
}


def schema_for(domain: PublicationDomain) -> FeatureSchema:
    """Return the schema of a domain; deletion variants share their creation schema."""
    return FEATURE_SCHEMAS[domain.creation_variant()]
