"""
Geo Utilities Module

Small geodesy helpers shared by tiling, the home gate and heat rendering.
Coordinates are (lat, lon) tuples in degrees throughout the package.
"""

from __future__ import annotations
import math
from typing import Tuple

from tidepool.utils.constants import EARTH_RADIUS_M, METERS_PER_DEGREE_LAT, MIN_COS_LATITUDE
from tidepool.utils.error_handling import InvalidCoordinateError

Coordinate = Tuple[float, float]


def validate_coordinate(coordinate: Coordinate) -> Coordinate:
    """
    Reject coordinates outside [-90, 90] x [-180, 180] (and NaN).

    Returns:
        The coordinate as a (lat, lon) tuple of floats

    Raises:
        InvalidCoordinateError: If the coordinate is out of range
    """
    lat, lon = float(coordinate[0]), float(coordinate[1])
    if math.isnan(lat) or math.isnan(lon):
        raise InvalidCoordinateError(f"NaN coordinate: ({lat}, {lon})")
    if not -90.0 <= lat <= 90.0 or not -180.0 <= lon <= 180.0:
        raise InvalidCoordinateError(f"Coordinate out of range: ({lat}, {lon})")
    return lat, lon


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two points in meters"""
    rlat1, rlon1, rlat2, rlon2 = map(math.radians, (lat1, lon1, lat2, lon2))
    dlat, dlon = rlat2 - rlat1, rlon2 - rlon1
    a = math.sin(dlat/2)**2 + math.cos(rlat1)*math.cos(rlat2)*math.sin(dlon/2)**2
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(a))


def distance_m(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance between two (lat, lon) coordinates in meters."""
    return haversine_m(a[0], a[1], b[0], b[1])


def meters_per_degree_lon(lat: float) -> float:
    """Meters per degree of longitude at a latitude (equirectangular approximation)."""
    return METERS_PER_DEGREE_LAT * max(math.cos(math.radians(lat)), MIN_COS_LATITUDE)


def offset_coordinate(base: Coordinate, meters_north: float, meters_east: float) -> Coordinate:
    """
    Offset a coordinate by a local north/east displacement in meters.

    Uses the same 111,000 m/deg approximation as the tiler; accurate enough
    for offsets of a few hundred meters.
    """
    lat, lon = base
    delta_lat = meters_north / METERS_PER_DEGREE_LAT
    delta_lon = meters_east / meters_per_degree_lon(lat)
    return lat + delta_lat, lon + delta_lon
