"""
Unit tests for tidepool/core/tiling.py
"""

import random
import re

import pytest

from tidepool.core.tiling import GridTiler, TileId, tile_center, tile_id
from tidepool.utils.constants import METERS_PER_DEGREE_LAT
from tidepool.utils.error_handling import InvalidCoordinateError

SAN_FRANCISCO = (37.7749, -122.4194)


class TestTileId:
    """Coordinate -> tile id mapping."""

    def test_string_format(self):
        """Tile ids render as grid_{m}_m_{x}_{y}."""
        value = str(tile_id(SAN_FRANCISCO))
        assert re.match(r"^grid_150_m_\d+_\d+$", value)

    def test_deterministic(self):
        assert tile_id(SAN_FRANCISCO) == tile_id(SAN_FRANCISCO)

    def test_parse_round_trip(self):
        tile = tile_id(SAN_FRANCISCO, 300)
        assert TileId.parse(str(tile)) == tile

    @pytest.mark.parametrize("value", ["", "grid_150_m_1", "tile_150_m_1_2", "37.77,-122.41"])
    def test_parse_rejects_other_strings(self, value):
        with pytest.raises(ValueError):
            TileId.parse(value)

    def test_resolution_is_part_of_identity(self):
        assert str(tile_id(SAN_FRANCISCO, 150)).startswith("grid_150_m_")
        assert str(tile_id(SAN_FRANCISCO, 500)).startswith("grid_500_m_")
        assert tile_id(SAN_FRANCISCO, 150) != tile_id(SAN_FRANCISCO, 500)

    @pytest.mark.parametrize("coordinate", [(91.0, 0.0), (-90.5, 0.0), (0.0, 180.5), (float("nan"), 0.0)])
    def test_out_of_range_rejected(self, coordinate):
        with pytest.raises(InvalidCoordinateError):
            tile_id(coordinate)

    def test_non_positive_resolution_rejected(self):
        with pytest.raises(ValueError):
            tile_id(SAN_FRANCISCO, 0)

    def test_poles_and_antimeridian_do_not_fail(self):
        for coordinate in [(90.0, 0.0), (-90.0, 0.0), (0.0, 180.0), (0.0, -180.0)]:
            assert str(tile_id(coordinate)).startswith("grid_150_m_")


class TestCellBoundaries:
    """Points in one cell share an id; crossing a boundary changes one axis."""

    def test_points_within_cell_share_id(self):
        tile = tile_id(SAN_FRANCISCO)
        lat, lon = tile_center(tile)
        d_lat = 150 / METERS_PER_DEGREE_LAT
        for offset in (-0.3, -0.1, 0.0, 0.2, 0.3):
            assert tile_id((lat + offset * d_lat, lon)) == tile
        for offset in (-0.0004, 0.0, 0.0004):
            assert tile_id((lat, lon + offset)) == tile

    def test_crossing_row_boundary_changes_only_y(self):
        tile = tile_id(SAN_FRANCISCO)
        _, lon = tile_center(tile)
        d_lat = 150 / METERS_PER_DEGREE_LAT
        boundary = (tile.y + 1) * d_lat - 90.0
        below = tile_id((boundary - 1e-9, lon))
        above = tile_id((boundary + 1e-9, lon))
        assert below.x == above.x
        assert above.y == below.y + 1

    def test_crossing_column_boundary_changes_only_x(self):
        tiler = GridTiler(150)
        lat, lon = tile_center(tiler.tile_id(SAN_FRANCISCO))
        tile = tiler.tile_id((lat, lon))
        # Walk east until the column changes
        step = 1e-6
        edge_lon = lon
        while tiler.tile_id((lat, edge_lon)).x == tile.x:
            edge_lon += step
        crossed = tiler.tile_id((lat, edge_lon))
        assert crossed.y == tile.y
        assert crossed.x == tile.x + 1


class TestTileCenter:
    """tile_center is a right inverse of tile_id."""

    def test_center_maps_back_to_same_tile(self):
        rng = random.Random(42)
        for _ in range(200):
            coordinate = (rng.uniform(-80, 80), rng.uniform(-179.9, 179.9))
            meters = rng.choice([50, 150, 1000])
            tile = tile_id(coordinate, meters)
            assert tile_id(tile_center(tile), meters) == tile


class TestGridTiler:
    def test_string_matches_function(self):
        tiler = GridTiler(250)
        assert tiler.tile_id_string(SAN_FRANCISCO) == str(tile_id(SAN_FRANCISCO, 250))

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            GridTiler(-1)
