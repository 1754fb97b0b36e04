"""Feature store adapter — one schema and one writable handle per domain.

The adapter is generic over ``FeatureSchema``: the store-persistence router
selects the adapter for an envelope's domain from a lookup table instead of
carrying one hand-written class per S-100 product.

Error kinds
-----------
``StoreValidationError``
    ``write``/``delete`` attempted without a live handle.
``StoreInternalError``
    Any engine I/O failure during schema creation, write or delete,
    chained to the original ``StoreEngineError``.
"""

from __future__ import annotations

import logging

from navrelay.models.features import FeatureRecord, FeatureSchema
from navrelay.store.engine import (
    FeatureSource,
    FeatureStoreEngine,
    IdentifierFilter,
    StoreEngineError,
)

logger = logging.getLogger(__name__)


class StoreValidationError(ValueError):
    """Raised when a store operation is attempted without a live handle."""


class StoreInternalError(RuntimeError):
    """Raised when the store engine fails; carries the original message."""


class FeatureStoreAdapter:
    """Owns the schema and writable handle of one feature type.

    Parameters
    ----------
    schema:
        The schema registered for the adapter's domain.
    engine:
        The store engine, or ``None`` when the store is unavailable; the
        adapter then stays inert and ``start()`` returns ``False``.
    """

    def __init__(self, schema: FeatureSchema, engine: FeatureStoreEngine | None) -> None:
        self._schema = schema
        self._engine = engine
        self._handle: FeatureSource | None = None

    @property
    def schema(self) -> FeatureSchema:
        return self._schema

    @property
    def is_live(self) -> bool:
        """Whether the adapter holds a writable handle."""
        return self._handle is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> bool:
        """Create the schema if needed and acquire the writable handle.

        Returns ``False`` (and logs) when no engine is available.

        Raises
        ------
        StoreInternalError
            If the engine fails to create the schema or open the handle.
        """
        if self._engine is None:
            logger.error(
                "Unable to connect to the feature store, %s adapter disabled",
                self._schema.type_name,
            )
            return False

        self.create_schema_if_absent(self._schema)
        try:
            self._handle = self._engine.get_feature_source(self._schema.type_name)
        except StoreEngineError as exc:
            logger.error("Cannot open feature source %s: %s", self._schema.type_name, exc)
            raise StoreInternalError(str(exc)) from exc
        return True

    def stop(self) -> None:
        """Release the handle.  Safe when ``start()`` never succeeded."""
        if self._handle is not None:
            logger.info("Releasing feature source %s", self._schema.type_name)
        self._handle = None

    def create_schema_if_absent(self, schema: FeatureSchema) -> None:
        """Register *schema* with the engine; a no-op when it already exists."""
        if self._engine is None:
            raise StoreValidationError("No valid feature store engine detected.")
        logger.info("Creating schema %s: %s", schema.type_name, schema.encode_type())
        try:
            # repeat calls are no-ops by engine contract
            self._engine.create_schema(schema)
        except StoreEngineError as exc:
            logger.error("Schema creation failed for %s: %s", schema.type_name, exc)
            raise StoreInternalError(str(exc)) from exc
        logger.info("Schema %s created", schema.type_name)

    # ------------------------------------------------------------------
    # Write / delete
    # ------------------------------------------------------------------

    def write(self, record: FeatureRecord) -> None:
        """Submit *record* to the store as a one-element batch."""
        handle = self._require_handle()
        try:
            self._engine.add_features(handle, [record])
        except StoreEngineError as exc:
            logger.error("Writing %s/%s failed: %s", self._schema.type_name, record.id, exc)
            raise StoreInternalError(str(exc)) from exc
        logger.debug("Wrote %s feature %s", self._schema.type_name, record.id)

    def delete(self, id: str) -> None:
        """Remove every feature whose identifier equals *id*."""
        handle = self._require_handle()
        if not id:
            raise StoreValidationError("A valid identifier is required for deletion.")
        id_filter = IdentifierFilter.of(id, attribute=self._schema.id_attribute)
        try:
            self._engine.remove_features(handle, id_filter)
        except StoreEngineError as exc:
            logger.error("Deleting %s/%s failed: %s", self._schema.type_name, id, exc)
            raise StoreInternalError(str(exc)) from exc
        logger.debug("Removed %s features matching %s", self._schema.type_name, id_filter)

    def _require_handle(self) -> FeatureSource:
        if self._handle is None:
            raise StoreValidationError(
                f"No live feature store handle for {self._schema.type_name}."
            )
        return self._handle

    def __repr__(self) -> str:
        state = "live" if self.is_live else "inert"
        return f"FeatureStoreAdapter(type_name={self._schema.type_name!r}, {state})"
