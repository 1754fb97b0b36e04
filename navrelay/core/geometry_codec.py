"""Geometry codec — coordinate lists to geometry values and back to filter literals.

``encode`` classifies a list of coordinate pairs into a Point, LineString
or Polygon.  ``to_filter_literal`` renders a geometry (or its GeoJSON form)
as an ECQL-style WKT literal for store filters and fails soft: absent or
malformed input yields an empty string, which callers treat as "no geometry
constraint".  Numbers are always written as floats, so an integer
coordinate ``1`` renders as ``1.0``; both parse to the same ECQL value.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from shapely.geometry import LineString, Point, Polygon

from navrelay.models.geometry import DEFAULT_SRID, GeometryKind, GeometryValue

logger = logging.getLogger(__name__)

Coordinates = Sequence[float] | Sequence[Sequence[float]]


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def to_pairs(coords: Coordinates) -> list[tuple[float, float]]:
    """Normalise a flat ``[x1, y1, x2, y2, ...]`` list or a list of pairs.

    Raises
    ------
    ValueError
        If a flat list has an odd length or a pair does not have two values.
    """
    items = list(coords)
    if not items:
        return []

    if all(isinstance(c, (int, float)) for c in items):
        if len(items) % 2:
            raise ValueError(
                f"Flat coordinate lists must have an even length, got {len(items)}"
            )
        return [(float(items[i]), float(items[i + 1])) for i in range(0, len(items), 2)]

    pairs: list[tuple[float, float]] = []
    for item in items:
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise ValueError(f"Coordinate pairs must have exactly two values: {item!r}")
        pairs.append((float(item[0]), float(item[1])))
    return pairs


def encode(coords: Coordinates, srid: int | None = None) -> GeometryValue:
    """Classify a coordinate list into a geometry value.

    With ``n`` coordinate pairs:

    * ``n <= 1`` gives a Point (``(0, 0)`` when the list is empty);
    * ``n`` of 2 or 3 gives a LineString, too few points to close a ring;
    * ``n >= 4`` gives a Polygon when the first pair equals the last pair,
      using every point as the ring, otherwise a LineString.

    The ring is never auto-closed.
    """
    pairs = to_pairs(coords)
    n = len(pairs)

    if n <= 1:
        x, y = pairs[0] if pairs else (0.0, 0.0)
        shape = Point(x, y)
    elif n < 4 or pairs[0] != pairs[-1]:
        shape = LineString(pairs)
    else:
        shape = Polygon(pairs)

    return GeometryValue.from_shape(shape, srid or DEFAULT_SRID)


def encode_point(x: float, y: float, srid: int | None = None) -> GeometryValue:
    """Build a Point directly, bypassing classification."""
    return GeometryValue.from_shape(Point(float(x), float(y)), srid or DEFAULT_SRID)


def invert_coordinates(value: GeometryValue) -> GeometryValue:
    """Swap the x and y of every coordinate, e.g. lat/lon to lon/lat."""
    swapped = [(y, x) for x, y in value.points]
    if value.type is GeometryKind.POINT:
        coordinates: Any = swapped[0]
    elif value.type is GeometryKind.LINESTRING:
        coordinates = swapped
    else:
        coordinates = [swapped]
    return GeometryValue(type=value.type, coordinates=coordinates, srid=value.srid)


# ---------------------------------------------------------------------------
# Decoding to filter literals
# ---------------------------------------------------------------------------


def to_filter_literal(value: GeometryValue | Mapping[str, Any] | None) -> str:
    """Render a geometry as a ``POINT (x y)`` / ``POLYGON ((x1 y1, ...))`` literal.

    Returns ``""`` when *value* is absent or malformed (unknown or missing
    type, non-array coordinates).  Never raises.
    """
    if value is None:
        return ""

    if isinstance(value, GeometryValue):
        try:
            data: Mapping[str, Any] = value.to_geojson()
        except (AttributeError, TypeError, ValueError) as exc:
            logger.debug("Unusable geometry value: %s", exc)
            return ""
    elif isinstance(value, Mapping):
        data = value
    else:
        logger.debug("Cannot build a filter literal from %s", type(value).__name__)
        return ""

    kind = data.get("type")
    coordinates = data.get("coordinates")
    if not isinstance(coordinates, (list, tuple)):
        return ""

    try:
        if kind == GeometryKind.POINT.value:
            return f"POINT ({_format_pair(coordinates)})"
        if kind == GeometryKind.LINESTRING.value:
            return f"LINESTRING ({_format_pairs(coordinates)})"
        if kind == GeometryKind.POLYGON.value:
            rings = ", ".join(f"({_format_pairs(ring)})" for ring in coordinates)
            return f"POLYGON ({rings})"
    except (TypeError, ValueError, IndexError) as exc:
        logger.debug("Malformed %s coordinates: %s", kind, exc)
        return ""

    return ""


def _format_number(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Not a coordinate value: {value!r}")
    return repr(float(value))


def _format_pair(pair: Any) -> str:
    if not isinstance(pair, (list, tuple)) or len(pair) < 2:
        raise ValueError(f"Not a coordinate pair: {pair!r}")
    return f"{_format_number(pair[0])} {_format_number(pair[1])}"


def _format_pairs(pairs: Any) -> str:
    if not isinstance(pairs, (list, tuple)) or not pairs:
        raise ValueError(f"Not a coordinate sequence: {pairs!r}")
    return ", ".join(_format_pair(p) for p in pairs)
