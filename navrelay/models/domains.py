"""Publication domains — the closed set of content-types carried by the bus.

Each domain has a lower-kebab-case ``tag`` used both as the bus content-type
and as the push-topic suffix.  Every creation domain is paired with exactly
one deletion domain carrying the same identifier attribute.
"""

from __future__ import annotations

from enum import Enum


class PublicationDomain(str, Enum):
    """The publication types supported by the relay."""

    ATON = "aton"
    ATON_DEL = "aton-delete"
    NAVIGATION_WARNING = "navigation-warning"
    NAVIGATION_WARNING_DEL = "navigation-warning-delete"
    ADMIN_ATON = "admin-aton"
    ADMIN_ATON_DEL = "admin-aton-delete"

    @property
    def tag(self) -> str:
        return self.value

    @property
    def is_deletion(self) -> bool:
        return self in _DELETION_PAIRS

    @property
    def identifier_attribute(self) -> str:
        """Name of the identifier attribute the domain carries."""
        return _IDENTIFIER_ATTRIBUTES[self.creation_variant()]

    @property
    def type_name(self) -> str:
        """Feature-store type name shared by a domain and its deletion variant."""
        return _TYPE_NAMES[self.creation_variant()]

    def creation_variant(self) -> PublicationDomain:
        return _DELETION_PAIRS.get(self, self)

    def deletion_variant(self) -> PublicationDomain:
        if self.is_deletion:
            return self
        return _CREATION_PAIRS[self]

    @classmethod
    def from_tag(cls, tag: object) -> PublicationDomain | None:
        """Resolve a content-type tag, returning ``None`` when unknown."""
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            return None

    @classmethod
    def creation_domains(cls) -> list[PublicationDomain]:
        return [d for d in cls if not d.is_deletion]

    @classmethod
    def deletion_domains(cls) -> list[PublicationDomain]:
        return [d for d in cls if d.is_deletion]


# deletion variant -> creation variant
_DELETION_PAIRS: dict[PublicationDomain, PublicationDomain] = {
    PublicationDomain.ATON_DEL: PublicationDomain.ATON,
    PublicationDomain.NAVIGATION_WARNING_DEL: PublicationDomain.NAVIGATION_WARNING,
    PublicationDomain.ADMIN_ATON_DEL: PublicationDomain.ADMIN_ATON,
}

_CREATION_PAIRS: dict[PublicationDomain, PublicationDomain] = {
    creation: deletion for deletion, creation in _DELETION_PAIRS.items()
}

_IDENTIFIER_ATTRIBUTES: dict[PublicationDomain, str] = {
    PublicationDomain.ATON: "aton-uid",
    PublicationDomain.NAVIGATION_WARNING: "warning-id",
    PublicationDomain.ADMIN_ATON: "admin-aton-uid",
}

# S-125 AtoN, S-124 navigational warning, S-201 administrative AtoN
_TYPE_NAMES: dict[PublicationDomain, str] = {
    PublicationDomain.ATON: "S125",
    PublicationDomain.NAVIGATION_WARNING: "S124",
    PublicationDomain.ADMIN_ATON: "S201",
}
