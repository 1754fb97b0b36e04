"""SQLite-backed feature-store engine with a bounding-box index.

Layout: one table per feature type (``S125``, ``S124``, ``S201``), keyed by
the feature id, holding the geometry as GeoJSON and WKT, its SRID, the
opaque content and the geometry's bounding box.  The bounding-box columns
are indexed so ``get_features(..., bbox=...)`` is an index range scan.

Design:
- ``create_schema`` is ``CREATE TABLE IF NOT EXISTS``: repeat calls are no-ops.
- ``add_features`` upserts by id (re-publishing replaces the feature).
- ``remove_features`` deletes by identifier filter only.
- WAL journal mode for concurrent readers.
"""

from __future__ import annotations

import json
import logging
import re
import sqlite3
import threading
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from navrelay.models.features import FeatureRecord, FeatureSchema
from navrelay.models.geometry import GeometryValue
from navrelay.store.engine import IdentifierFilter, StoreEngineError

logger = logging.getLogger(__name__)

_TYPE_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")

# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_REGISTRY = """
CREATE TABLE IF NOT EXISTS feature_schemas (
    type_name     TEXT PRIMARY KEY,
    domain        TEXT NOT NULL,
    encoded_type  TEXT NOT NULL
);
"""

_CREATE_FEATURES = """
CREATE TABLE IF NOT EXISTS "{table}" (
    id            TEXT PRIMARY KEY,
    geometry      TEXT NOT NULL,
    wkt           TEXT NOT NULL,
    srid          INTEGER NOT NULL,
    content       TEXT NOT NULL,
    minx          REAL NOT NULL,
    miny          REAL NOT NULL,
    maxx          REAL NOT NULL,
    maxy          REAL NOT NULL
);
"""

_CREATE_IDX_BBOX = """
CREATE INDEX IF NOT EXISTS "idx_{table}_bbox" ON "{table}"(minx, maxx, miny, maxy);
"""


@dataclass(frozen=True)
class SQLiteFeatureSource:
    """Handle onto one feature table."""

    type_name: str
    id_attribute: str = "id"


class SQLiteFeatureStore:
    """A small spatially-indexed feature store on top of SQLite.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file, created if it does not exist.
        ``":memory:"`` keeps everything in memory for the process lifetime.
    """

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = str(db_path)
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        try:
            self._db: sqlite3.Connection | None = sqlite3.connect(
                self._db_path, check_same_thread=False
            )
            self._db.execute("PRAGMA journal_mode=WAL")
            self._db.execute(_CREATE_REGISTRY)
            self._db.commit()
        except sqlite3.Error as exc:
            raise StoreEngineError(f"Cannot open feature store {self._db_path}: {exc}") from exc
        logger.info("SQLiteFeatureStore: opened %s", self._db_path)

    # ------------------------------------------------------------------
    # Engine protocol
    # ------------------------------------------------------------------

    def create_schema(self, schema: FeatureSchema) -> None:
        table = self._table(schema.type_name)
        with self._cursor() as db:
            db.execute(_CREATE_FEATURES.format(table=table))
            db.execute(_CREATE_IDX_BBOX.format(table=table))
            db.execute(
                "INSERT OR IGNORE INTO feature_schemas (type_name, domain, encoded_type) "
                "VALUES (?, ?, ?)",
                (schema.type_name, schema.domain.tag, schema.encode_type()),
            )

    def get_feature_source(self, type_name: str) -> SQLiteFeatureSource:
        with self._cursor() as db:
            row = db.execute(
                "SELECT type_name FROM feature_schemas WHERE type_name = ?",
                (type_name,),
            ).fetchone()
        if row is None:
            raise StoreEngineError(f"Schema does not exist: {type_name}")
        return SQLiteFeatureSource(type_name=type_name)

    def add_features(
        self, handle: SQLiteFeatureSource, batch: Sequence[FeatureRecord]
    ) -> list[str]:
        """Insert or replace every record of the batch; returns their ids."""
        table = self._table(handle.type_name)
        rows = []
        for record in batch:
            minx, miny, maxx, maxy = record.geometry.bounds
            rows.append(
                (
                    record.id,
                    json.dumps(record.geometry.to_geojson()),
                    record.geometry.wkt,
                    record.geometry.srid,
                    record.content,
                    minx,
                    miny,
                    maxx,
                    maxy,
                )
            )
        with self._cursor() as db:
            db.executemany(
                f'INSERT OR REPLACE INTO "{table}" '
                "(id, geometry, wkt, srid, content, minx, miny, maxx, maxy) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                rows,
            )
        logger.debug("SQLiteFeatureStore: wrote %d feature(s) to %s", len(rows), table)
        return [r[0] for r in rows]

    def remove_features(self, handle: SQLiteFeatureSource, filter: IdentifierFilter) -> int:
        """Delete the features matching *filter*; returns how many were removed."""
        table = self._table(handle.type_name)
        if filter.attribute != handle.id_attribute:
            raise StoreEngineError(
                f"Unsupported filter attribute {filter.attribute!r} on {table}"
            )
        if not filter.ids:
            return 0
        placeholders = ", ".join("?" for _ in filter.ids)
        with self._cursor() as db:
            cur = db.execute(
                f'DELETE FROM "{table}" WHERE id IN ({placeholders})', filter.ids
            )
            removed = cur.rowcount
        logger.debug("SQLiteFeatureStore: %s removed %d feature(s)", filter, removed)
        return removed

    def dispose(self) -> None:
        """Close the database connection.  Safe to call more than once."""
        with self._lock:
            if self._db is not None:
                self._db.close()
                self._db = None
                logger.info("SQLiteFeatureStore: closed %s", self._db_path)

    # ------------------------------------------------------------------
    # Queries (read-only)
    # ------------------------------------------------------------------

    def list_schemas(self) -> list[tuple[str, str, str]]:
        """Return ``(type_name, domain, encoded_type)`` for every schema."""
        with self._cursor() as db:
            return db.execute(
                "SELECT type_name, domain, encoded_type FROM feature_schemas ORDER BY type_name"
            ).fetchall()

    def get_features(
        self,
        type_name: str,
        bbox: tuple[float, float, float, float] | None = None,
    ) -> list[FeatureRecord]:
        """Return stored features, optionally those whose bbox intersects *bbox*.

        *bbox* is ``(minx, miny, maxx, maxy)``.
        """
        table = self._table(type_name)
        sql = f'SELECT id, geometry, srid, content FROM "{table}"'
        params: tuple[float, ...] = ()
        if bbox is not None:
            minx, miny, maxx, maxy = bbox
            sql += " WHERE maxx >= ? AND minx <= ? AND maxy >= ? AND miny <= ?"
            params = (minx, maxx, miny, maxy)
        sql += " ORDER BY id"
        with self._cursor() as db:
            rows = db.execute(sql, params).fetchall()
        return [
            FeatureRecord(
                id=row[0],
                geometry=GeometryValue.from_geojson(json.loads(row[1]), srid=row[2]),
                content=row[3],
            )
            for row in rows
        ]

    def count(self, type_name: str) -> int:
        table = self._table(type_name)
        with self._cursor() as db:
            return db.execute(f'SELECT COUNT(*) FROM "{table}"').fetchone()[0]

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _table(type_name: str) -> str:
        if not _TYPE_NAME_RE.match(type_name):
            raise StoreEngineError(f"Invalid feature type name: {type_name!r}")
        return type_name

    def _cursor(self) -> _Transaction:
        return _Transaction(self)


class _Transaction:
    """Serialises access to the shared connection and maps sqlite errors."""

    def __init__(self, store: SQLiteFeatureStore) -> None:
        self._store = store

    def __enter__(self) -> sqlite3.Connection:
        self._store._lock.acquire()
        if self._store._db is None:
            self._store._lock.release()
            raise StoreEngineError("Feature store has been disposed")
        return self._store._db

    def __exit__(self, exc_type, exc, tb) -> bool:
        db = self._store._db
        try:
            if exc_type is None:
                db.commit()
            else:
                db.rollback()
        finally:
            self._store._lock.release()
        if isinstance(exc, sqlite3.Error):
            raise StoreEngineError(str(exc)) from exc
        return False
