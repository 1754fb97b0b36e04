"""Tests for the geometry codec — classification, literals, soft failure."""

from __future__ import annotations

import pytest

from navrelay.core.geometry_codec import (
    encode,
    encode_point,
    invert_coordinates,
    to_filter_literal,
    to_pairs,
)
from navrelay.models.geometry import GeometryKind, GeometryValue


class TestToPairs:
    def test_flat_list(self):
        assert to_pairs([1, 2, 3, 4]) == [(1.0, 2.0), (3.0, 4.0)]

    def test_list_of_pairs(self):
        assert to_pairs([(1, 2), [3, 4]]) == [(1.0, 2.0), (3.0, 4.0)]

    def test_empty(self):
        assert to_pairs([]) == []

    def test_odd_flat_list_rejected(self):
        with pytest.raises(ValueError, match="even length"):
            to_pairs([1, 2, 3])

    def test_bad_pair_rejected(self):
        with pytest.raises(ValueError, match="exactly two values"):
            to_pairs([(1, 2, 3)])


class TestEncodeClassification:
    def test_empty_is_origin_point(self):
        geom = encode([])
        assert geom.type is GeometryKind.POINT
        assert geom.points == [(0.0, 0.0)]

    def test_single_pair_is_point(self):
        geom = encode([1.594, 53.61])
        assert geom.type is GeometryKind.POINT
        assert geom.points == [(1.594, 53.61)]

    @pytest.mark.parametrize(
        "coords",
        [
            [0, 0, 1, 1],
            [0, 0, 1, 1, 2, 0],
            [0, 0, 1, 1, 0, 0],  # 3 pairs closed is still too few for a ring
        ],
    )
    def test_two_or_three_pairs_is_linestring(self, coords):
        geom = encode(coords)
        assert geom.type is GeometryKind.LINESTRING
        assert len(geom.points) == len(coords) // 2

    def test_open_four_pairs_is_linestring(self):
        geom = encode([0, 0, 1, 0, 1, 1, 0, 1])
        assert geom.type is GeometryKind.LINESTRING
        assert len(geom.points) == 4

    def test_closed_four_pairs_is_polygon(self):
        coords = [0, 0, 1, 0, 1, 1, 0, 0]
        geom = encode(coords)
        assert geom.type is GeometryKind.POLYGON
        assert geom.points == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 0.0)]

    def test_closed_ring_with_repeated_first_point(self):
        geom = encode([1, 2, 1, -2, -1, -2, -1, 2, 1, 2])
        assert geom.type is GeometryKind.POLYGON
        assert geom.points == [(1, 2), (1, -2), (-1, -2), (-1, 2), (1, 2)]

    def test_ring_is_not_auto_closed(self):
        geom = encode([1, 2, 1, -2, -1, -2, -1, 2])
        assert geom.type is GeometryKind.LINESTRING
        assert geom.points[-1] == (-1.0, 2.0)

    def test_default_srid(self):
        assert encode([1, 2]).srid == 4326

    def test_explicit_srid_is_metadata_only(self):
        geom = encode([1, 2, 3, 4], srid=3857)
        assert geom.srid == 3857
        assert geom.points == [(1.0, 2.0), (3.0, 4.0)]


class TestEncodePoint:
    def test_always_point(self):
        geom = encode_point(1.594, 53.61)
        assert geom.type is GeometryKind.POINT
        assert geom.to_geojson() == {"type": "Point", "coordinates": [1.594, 53.61]}

    def test_srid(self):
        assert encode_point(0, 0, srid=4258).srid == 4258


class TestFilterLiteral:
    def test_point(self):
        assert to_filter_literal(encode_point(1.594, 53.61)) == "POINT (1.594 53.61)"

    def test_linestring(self):
        assert to_filter_literal(encode([0, 0, 1, 1])) == "LINESTRING (0.0 0.0, 1.0 1.0)"

    def test_polygon(self):
        literal = to_filter_literal(encode([0, 0, 1, 0, 1, 1, 0, 0]))
        assert literal == "POLYGON ((0.0 0.0, 1.0 0.0, 1.0 1.0, 0.0 0.0))"

    def test_geojson_mapping_accepted(self):
        data = {"type": "Point", "coordinates": [53.61, 1.594]}
        assert to_filter_literal(data) == "POINT (53.61 1.594)"

    def test_integer_coordinates_written_as_floats(self):
        assert to_filter_literal({"type": "Point", "coordinates": [1, 2]}) == "POINT (1.0 2.0)"

    def test_round_trip_preserves_pairs_in_order(self):
        coords = [1, 2, 1, -2, -1, -2, -1, 2, 1, 2]
        literal = to_filter_literal(encode(coords))
        assert literal == "POLYGON ((1.0 2.0, 1.0 -2.0, -1.0 -2.0, -1.0 2.0, 1.0 2.0))"

    @pytest.mark.parametrize(
        "value",
        [
            None,
            {},
            {"type": "Point"},
            {"type": "Circle", "coordinates": [0, 0]},
            {"coordinates": [0, 0]},
            {"type": "Point", "coordinates": "0 0"},
            {"type": "Point", "coordinates": ["a", "b"]},
            {"type": "Point", "coordinates": [1]},
            {"type": "Polygon", "coordinates": [0, 1, 2]},
            {"type": "Polygon", "coordinates": [[]]},
            "POINT (0 0)",
            42,
            GeometryValue.model_construct(coordinates=[1, 2]),
            GeometryValue.model_construct(type="Point", coordinates=[1, 2]),
        ],
    )
    def test_malformed_returns_empty(self, value):
        assert to_filter_literal(value) == ""


class TestInvertCoordinates:
    def test_point(self):
        assert invert_coordinates(encode_point(53.61, 1.594)).points == [(1.594, 53.61)]

    def test_polygon_stays_closed(self):
        geom = invert_coordinates(encode([0, 1, 2, 1, 2, 3, 0, 1]))
        assert geom.type is GeometryKind.POLYGON
        assert geom.points == [(1, 0), (1, 2), (3, 2), (1, 0)]

    def test_keeps_srid(self):
        geom = GeometryValue(type="Point", coordinates=(1, 2), srid=3857)
        assert invert_coordinates(geom).srid == 3857
