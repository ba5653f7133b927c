"""
Spatial Tiling

Deterministic mapping from a (lat, lon) coordinate to a coarse grid cell.

Uses a local equirectangular approximation: the cell height in degrees is
fixed by 111,000 m per degree of latitude, the cell width is widened by
1 / cos(latitude) so cells stay roughly square away from the equator.
Tile ids are only ever compared for equality, never used for distance math.

Out-of-range coordinates are rejected with InvalidCoordinateError.
"""

from __future__ import annotations
import math
import re
from dataclasses import dataclass

from tidepool.geo_utils import Coordinate, meters_per_degree_lon, validate_coordinate
from tidepool.utils.constants import DEFAULT_METERS_PER_TILE, METERS_PER_DEGREE_LAT, TILE_ID_PREFIX

_TILE_ID_PATTERN = re.compile(rf"^{TILE_ID_PREFIX}_(\d+)_m_(-?\d+)_(-?\d+)$")


@dataclass(frozen=True)
class TileId:
    """
    Grid cell identifier.

    Attributes:
        x: Column index counted from longitude -180
        y: Row index counted from latitude -90
        meters_per_tile: Cell size the indices were computed at
    """
    x: int
    y: int
    meters_per_tile: int

    def __str__(self) -> str:
        return f"{TILE_ID_PREFIX}_{self.meters_per_tile}_m_{self.x}_{self.y}"

    @classmethod
    def parse(cls, value: str) -> "TileId":
        """Parse the stable string form back into a TileId."""
        match = _TILE_ID_PATTERN.match(value.strip())
        if not match:
            raise ValueError(f"Not a tile id: '{value}'")
        meters, x, y = (int(g) for g in match.groups())
        return cls(x=x, y=y, meters_per_tile=meters)


def _deltas(lat: float, meters_per_tile: int):
    d_lat = meters_per_tile / METERS_PER_DEGREE_LAT
    d_lon = meters_per_tile / meters_per_degree_lon(lat)
    return d_lat, d_lon


def tile_id(coordinate: Coordinate, meters_per_tile: int = DEFAULT_METERS_PER_TILE) -> TileId:
    """
    Map a coordinate to its grid cell.

    Args:
        coordinate: (lat, lon) in degrees
        meters_per_tile: Cell edge length in meters

    Returns:
        TileId for the cell containing the coordinate

    Raises:
        InvalidCoordinateError: If the coordinate is out of range
        ValueError: If meters_per_tile is not positive
    """
    if meters_per_tile <= 0:
        raise ValueError(f"meters_per_tile must be positive, got {meters_per_tile}")
    lat, lon = validate_coordinate(coordinate)
    d_lat, d_lon = _deltas(lat, meters_per_tile)
    x = int(math.floor((lon + 180.0) / d_lon))
    y = int(math.floor((lat + 90.0) / d_lat))
    return TileId(x=x, y=y, meters_per_tile=int(meters_per_tile))


def tile_center(tile: TileId) -> Coordinate:
    """
    Approximate centre of a tile.

    The column width depends on latitude, so the inverse evaluates it at the
    row's centre latitude. tile_id(tile_center(t)) == t for any tile produced
    by tile_id.
    """
    d_lat = tile.meters_per_tile / METERS_PER_DEGREE_LAT
    lat = (tile.y + 0.5) * d_lat - 90.0
    _, d_lon = _deltas(lat, tile.meters_per_tile)
    lon = (tile.x + 0.5) * d_lon - 180.0
    return lat, lon


class GridTiler:
    """Tiler bound to a fixed resolution."""

    def __init__(self, meters_per_tile: int = DEFAULT_METERS_PER_TILE):
        if meters_per_tile <= 0:
            raise ValueError(f"meters_per_tile must be positive, got {meters_per_tile}")
        self.meters_per_tile = int(meters_per_tile)

    def tile_id(self, coordinate: Coordinate) -> TileId:
        return tile_id(coordinate, self.meters_per_tile)

    def tile_id_string(self, coordinate: Coordinate) -> str:
        return str(self.tile_id(coordinate))

    def __repr__(self) -> str:
        return f"GridTiler(meters_per_tile={self.meters_per_tile})"
