"""
Viewport Projection

Render-space transforms for the heat compositor. A viewport maps (lat, lon)
to pixel coordinates (x right, y down) and knows its pixel size. Any object
with `width`, `height` and `project(lat, lon)` works; `project_many` is used
when present.

WebMercatorViewport follows the web map convention: WGS84 (EPSG:4326) is
reprojected to Web Mercator (EPSG:3857) with pyproj, then scaled and
translated so the centre coordinate lands in the middle of the surface.
"""

import math
from typing import Protocol, Sequence, Tuple

import numpy as np
import pyproj

from tidepool.geo_utils import Coordinate, validate_coordinate

# Coordinate Reference Systems
WGS84 = pyproj.CRS("EPSG:4326")  # GPS coordinates (lat/lon)
WEB_MERCATOR = pyproj.CRS("EPSG:3857")  # Web map standard

# Transformers
wgs84_to_webmerc = pyproj.Transformer.from_crs(WGS84, WEB_MERCATOR, always_xy=True)

# Web Mercator meters per pixel at zoom 0 for 256 px tiles
WEB_MERCATOR_M_PER_PX_Z0 = 156543.03392804097


class Viewport(Protocol):
    width: int
    height: int

    def project(self, lat: float, lon: float) -> Tuple[float, float]: ...


class WebMercatorViewport:
    """
    Args:
        center: (lat, lon) shown at the middle of the surface
        ground_meters_per_pixel: Ground resolution at the centre latitude
        width: Surface width in pixels
        height: Surface height in pixels
    """

    def __init__(self, center: Coordinate, ground_meters_per_pixel: float, width: int, height: int):
        if ground_meters_per_pixel <= 0:
            raise ValueError(f"ground_meters_per_pixel must be positive, got {ground_meters_per_pixel}")
        if width <= 0 or height <= 0:
            raise ValueError(f"Viewport size must be positive, got {width}x{height}")
        self.center = validate_coordinate(center)
        self.ground_meters_per_pixel = float(ground_meters_per_pixel)
        self.width = int(width)
        self.height = int(height)
        # Mercator stretches ground distances by 1 / cos(lat)
        self._merc_per_px = self.ground_meters_per_pixel / math.cos(math.radians(self.center[0]))
        self._cx, self._cy = wgs84_to_webmerc.transform(self.center[1], self.center[0])

    @classmethod
    def from_zoom(cls, center: Coordinate, zoom: float, width: int, height: int) -> "WebMercatorViewport":
        """Viewport at a web map zoom level (256 px tiles)."""
        lat = validate_coordinate(center)[0]
        merc_per_px = WEB_MERCATOR_M_PER_PX_Z0 / (2 ** zoom)
        return cls(center, merc_per_px * math.cos(math.radians(lat)), width, height)

    def project(self, lat: float, lon: float) -> Tuple[float, float]:
        mx, my = wgs84_to_webmerc.transform(lon, lat)
        return self._to_pixels(mx, my)

    def project_many(self, points: Sequence[Coordinate]) -> np.ndarray:
        """Project (lat, lon) points; returns an (n, 2) array of pixel coordinates."""
        if len(points) == 0:
            return np.empty((0, 2))
        arr = np.asarray(points, dtype=np.float64)
        mx, my = wgs84_to_webmerc.transform(arr[:, 1], arr[:, 0])
        x, y = self._to_pixels(np.asarray(mx), np.asarray(my))
        return np.column_stack([x, y])

    def _to_pixels(self, mx, my):
        x = (mx - self._cx) / self._merc_per_px + self.width / 2.0
        y = self.height / 2.0 - (my - self._cy) / self._merc_per_px
        return x, y

    def __repr__(self) -> str:
        return (
            f"WebMercatorViewport({self.width}x{self.height}, "
            f"{self.ground_meters_per_pixel:.2f} m/px)"
        )


def project_points(viewport: Viewport, points: Sequence[Coordinate]) -> np.ndarray:
    """Project through viewport.project_many when available, else point by point."""
    project_many = getattr(viewport, "project_many", None)
    if project_many is not None:
        return np.asarray(project_many(points), dtype=np.float64).reshape(-1, 2)
    if len(points) == 0:
        return np.empty((0, 2))
    return np.array([viewport.project(lat, lon) for lat, lon in points], dtype=np.float64)
