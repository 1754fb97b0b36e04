"""navrelay data models — all Pydantic v2, all frozen (immutable)."""

from navrelay.models.domains import PublicationDomain
from navrelay.models.envelopes import Envelope
from navrelay.models.features import (
    FEATURE_SCHEMAS,
    FeatureRecord,
    FeatureSchema,
    schema_for,
)
from navrelay.models.geometry import DEFAULT_SRID, GeometryKind, GeometryValue

__all__ = [
    # domains
    "PublicationDomain",
    # geometry
    "DEFAULT_SRID",
    "GeometryKind",
    "GeometryValue",
    # envelopes
    "Envelope",
    # features
    "FEATURE_SCHEMAS",
    "FeatureRecord",
    "FeatureSchema",
    "schema_for",
]
