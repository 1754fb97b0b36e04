"""Geometry values carried by envelopes.

A ``GeometryValue`` is a GeoJSON-shaped, immutable description of a Point,
LineString or Polygon plus the SRID of its coordinate reference system.
The SRID is metadata only; coordinates are never re-projected.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator
from shapely.geometry import LineString, Point, Polygon, mapping
from shapely.geometry.base import BaseGeometry

DEFAULT_SRID = 4326


class GeometryKind(str, Enum):
    """GeoJSON geometry type names supported by the relay."""

    POINT = "Point"
    LINESTRING = "LineString"
    POLYGON = "Polygon"


class GeometryValue(BaseModel):
    """An immutable Point, LineString or single-ring Polygon.

    ``coordinates`` follows the GeoJSON layout: ``[x, y]`` for a point,
    ``[[x, y], ...]`` for a line string and ``[[[x, y], ...]]`` for a polygon.
    """

    model_config = ConfigDict(frozen=True)

    type: GeometryKind
    coordinates: tuple[float, float] | tuple[tuple[float, float], ...] | tuple[
        tuple[tuple[float, float], ...], ...
    ]
    srid: int = DEFAULT_SRID

    @model_validator(mode="after")
    def _check_shape(self) -> GeometryValue:
        if self.type is GeometryKind.POINT:
            if not _is_pair(self.coordinates):
                raise ValueError("Point coordinates must be a single [x, y] pair")
        elif self.type is GeometryKind.LINESTRING:
            if not _is_pair_sequence(self.coordinates) or len(self.coordinates) < 2:
                raise ValueError("LineString needs at least 2 coordinate pairs")
        else:
            if len(self.coordinates) != 1 or not _is_pair_sequence(self.coordinates[0]):
                raise ValueError("Polygon must have exactly one ring of coordinate pairs")
            ring = self.coordinates[0]
            if len(ring) < 4:
                raise ValueError("Polygon ring needs at least 4 coordinate pairs")
            if tuple(ring[0]) != tuple(ring[-1]):
                raise ValueError("Polygon ring must be closed (first == last)")
        return self

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def points(self) -> list[tuple[float, float]]:
        """All coordinate pairs, in order."""
        if self.type is GeometryKind.POINT:
            return [tuple(self.coordinates)]
        if self.type is GeometryKind.LINESTRING:
            return [tuple(p) for p in self.coordinates]
        return [tuple(p) for p in self.coordinates[0]]

    @property
    def bounds(self) -> tuple[float, float, float, float]:
        """``(minx, miny, maxx, maxy)`` of the geometry."""
        xs = [p[0] for p in self.points]
        ys = [p[1] for p in self.points]
        return min(xs), min(ys), max(xs), max(ys)

    def to_geojson(self) -> dict[str, Any]:
        """Return a plain GeoJSON geometry mapping (lists, not tuples)."""
        return {"type": self.type.value, "coordinates": _as_lists(self.coordinates)}

    def to_shape(self) -> BaseGeometry:
        """Build the equivalent shapely geometry."""
        if self.type is GeometryKind.POINT:
            return Point(self.coordinates)
        if self.type is GeometryKind.LINESTRING:
            return LineString(self.points)
        return Polygon(self.points)

    @property
    def wkt(self) -> str:
        return self.to_shape().wkt

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_shape(cls, shape: BaseGeometry, srid: int | None = None) -> GeometryValue:
        """Wrap a shapely Point, LineString or Polygon.

        Polygon interiors are not supported and are rejected.
        """
        if isinstance(shape, Polygon) and len(shape.interiors):
            raise ValueError("Polygons with interior rings are not supported")
        return cls.model_validate({**mapping(shape), "srid": srid or DEFAULT_SRID})

    @classmethod
    def from_geojson(cls, data: dict[str, Any], srid: int | None = None) -> GeometryValue:
        return cls.model_validate({**data, "srid": srid or data.get("srid") or DEFAULT_SRID})


def _is_pair(value: Any) -> bool:
    return (
        isinstance(value, (tuple, list))
        and len(value) == 2
        and all(isinstance(v, (int, float)) for v in value)
    )


def _is_pair_sequence(value: Any) -> bool:
    return isinstance(value, (tuple, list)) and all(_is_pair(p) for p in value)


def _as_lists(value: Any) -> Any:
    if isinstance(value, (tuple, list)):
        return [_as_lists(v) for v in value]
    return value
