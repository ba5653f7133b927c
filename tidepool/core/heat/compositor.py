"""
Heat Blob Compositor

Turns clusters of presence points into a clipped, radially graded density
field. Per group:

1. Project the points to pixels through the caller's viewport
2. Convex hull of the projected points (fewer than 3 vertices: skip)
3. Per-point radius in pixels from the local projection scale
   (radius of 1 px or less: skip)
4. Clip to the hull outline stroked with width 2r, round joins and caps
5. Radial gradient from the point centroid out to the farthest hull vertex
   plus one radius, with inner/mid/outer alpha stops scaled by intensity

Groups are summed as premultiplied colour (additive, "plus lighter") so
overlapping venues reinforce, and the total alpha is capped by a ceiling at
composite time so dense areas never saturate.

render() and render_circles() are pure functions of their inputs: the
compositor holds only immutable settings and each call allocates its own
surface, so they can run on every redraw.
"""

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import matplotlib.colors as mcolors
import matplotlib.image as mimage
import numpy as np
import shapely
from shapely.geometry import LinearRing, Point, Polygon

from tidepool.common.config import HeatRenderingSettings, ReportingConfig
from tidepool.core.heat.hull import convex_hull
from tidepool.core.heat.projection import Viewport, project_points
from tidepool.geo_utils import Coordinate, offset_coordinate, validate_coordinate
from tidepool.utils.constants import MIN_HULL_POINTS, MIN_RADIUS_PX

logger = logging.getLogger(__name__)


def _clamp_unit(value: float) -> float:
    value = float(value)
    if math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class HeatBlobGroup:
    """
    One venue's contributor points.

    Attributes:
        points: (lat, lon) sample points
        base_intensity: Heat intensity, clamped to [0, 1]
        radius_m: Per-point radius in meters (> 0)
        label: Optional name, used only in logs
    """
    points: Tuple[Coordinate, ...]
    base_intensity: float
    radius_m: float
    label: str = ""

    def __post_init__(self):
        if not self.radius_m > 0:
            raise ValueError(f"radius_m must be positive, got {self.radius_m}")
        object.__setattr__(self, "points", tuple(validate_coordinate(p) for p in self.points))
        object.__setattr__(self, "base_intensity", _clamp_unit(self.base_intensity))

    def with_intensity(self, intensity: float) -> "HeatBlobGroup":
        return HeatBlobGroup(self.points, intensity, self.radius_m, self.label)


@dataclass(frozen=True)
class HeatCircle:
    """A single intensity disk, e.g. one aggregated tile."""
    center: Coordinate
    radius_m: float
    intensity: float
    label: str = ""

    def __post_init__(self):
        if not self.radius_m > 0:
            raise ValueError(f"radius_m must be positive, got {self.radius_m}")
        object.__setattr__(self, "center", validate_coordinate(self.center))
        object.__setattr__(self, "intensity", _clamp_unit(self.intensity))


@dataclass(frozen=True)
class BlobGeometry:
    """Render-space geometry of one group, in pixels."""
    hull: List[Tuple[float, float]]
    centroid: Tuple[float, float]
    radius_px: float
    end_radius_px: float
    clip: Polygon


def radius_in_pixels(reference: Coordinate, radius_m: float, viewport: Viewport) -> float:
    """Project `reference` and the point `radius_m` east of it; return their pixel distance."""
    east = offset_coordinate(reference, 0.0, radius_m)
    x0, y0 = viewport.project(*reference)
    x1, y1 = viewport.project(*east)
    return math.hypot(x1 - x0, y1 - y0)


class HeatBlobCompositor:
    """
    Args:
        settings: Colours, stops, alpha ramps and ceiling
        light_mode: Boost alphas for light map styles
        high_contrast: Boost alphas further for accessibility
    """

    def __init__(
        self,
        settings: Optional[HeatRenderingSettings] = None,
        light_mode: bool = False,
        high_contrast: bool = False,
    ):
        self.settings = settings or HeatRenderingSettings()
        self.light_mode = light_mode
        self.high_contrast = high_contrast
        self._inner_rgb = mcolors.to_rgb(self.settings.inner_color)
        self._outer_rgb = mcolors.to_rgb(self.settings.outer_color)

    @classmethod
    def from_config(cls, reporting: ReportingConfig, **kwargs) -> "HeatBlobCompositor":
        return cls(reporting.heat_rendering, **kwargs)

    def alpha_stops(self, intensity: float) -> Tuple[float, float, float]:
        """Inner, mid and outer alpha for an intensity in [0, 1]."""
        s = self.settings
        i = _clamp_unit(intensity)
        inner = s.inner_alpha.base + s.inner_alpha.per_intensity * i
        mid = s.mid_alpha.base + s.mid_alpha.per_intensity * i
        outer = s.outer_alpha

        if self.light_mode:
            inner += s.light_mode_boost
            mid += s.light_mode_boost
            outer = s.light_mode_outer_alpha
        if self.high_contrast:
            inner += s.high_contrast_boost
            mid += s.high_contrast_boost
            outer += s.high_contrast_outer_boost

        return min(inner, 1.0), min(mid, 1.0), min(outer, 1.0)

    def gradient(self, intensity: float) -> mcolors.LinearSegmentedColormap:
        """RGBA colormap over normalised distance from the gradient centre."""
        inner, mid, outer = self.alpha_stops(intensity)
        stops = self.settings.gradient_stops
        return mcolors.LinearSegmentedColormap.from_list(
            "heat_blob",
            [
                (stops[0], (*self._inner_rgb, inner)),
                (stops[1], (*self._inner_rgb, mid)),
                (stops[2], (*self._outer_rgb, outer)),
            ],
        )

    def blob_geometry(self, group: HeatBlobGroup, viewport: Viewport) -> Optional[BlobGeometry]:
        """Hull, centroid, radius and clip region for a group; None when it should be skipped."""
        if len(group.points) < MIN_HULL_POINTS or group.base_intensity <= 0:
            return None

        projected = project_points(viewport, group.points)
        projected = projected[np.all(np.isfinite(projected), axis=1)]
        if projected.shape[0] < MIN_HULL_POINTS:
            return None

        hull = convex_hull([tuple(p) for p in projected])
        if len(hull) < MIN_HULL_POINTS:
            return None

        radius_px = radius_in_pixels(group.points[0], group.radius_m, viewport)
        if not math.isfinite(radius_px) or radius_px <= MIN_RADIUS_PX:
            return None

        cx, cy = projected.mean(axis=0)
        max_hull_dist = max(math.hypot(x - cx, y - cy) for x, y in hull)
        clip = LinearRing(hull).buffer(radius_px, cap_style="round", join_style="round")

        return BlobGeometry(
            hull=hull,
            centroid=(float(cx), float(cy)),
            radius_px=radius_px,
            end_radius_px=max_hull_dist + radius_px,
            clip=clip,
        )

    def render(self, groups: Iterable[HeatBlobGroup], viewport: Viewport) -> np.ndarray:
        """
        Composite heat blobs onto a new transparent surface.

        Returns:
            float32 array of shape (height, width, 4), straight (non-premultiplied) RGBA in [0, 1]
        """
        accum = self._new_accumulator(viewport)
        drawn = skipped = 0
        for group in groups:
            geometry = self.blob_geometry(group, viewport)
            if geometry is None:
                skipped += 1
                continue
            self._paint(accum, geometry.clip, geometry.centroid, geometry.end_radius_px,
                        self.gradient(group.base_intensity))
            drawn += 1
        logger.debug(f"Rendered {drawn} heat blobs ({skipped} skipped)")
        return self._finish(accum)

    def render_circles(self, circles: Iterable[HeatCircle], viewport: Viewport) -> np.ndarray:
        """Composite intensity disks (gradient out to each radius) with the same blending as render()."""
        accum = self._new_accumulator(viewport)
        for circle in circles:
            if circle.intensity <= 0:
                continue
            radius_px = radius_in_pixels(circle.center, circle.radius_m, viewport)
            if not math.isfinite(radius_px) or radius_px <= MIN_RADIUS_PX:
                continue
            cx, cy = viewport.project(*circle.center)
            disk = Point(cx, cy).buffer(radius_px)
            self._paint(accum, disk, (cx, cy), radius_px, self.gradient(circle.intensity))
        return self._finish(accum)

    @staticmethod
    def _new_accumulator(viewport: Viewport) -> np.ndarray:
        return np.zeros((int(viewport.height), int(viewport.width), 4), dtype=np.float64)

    @staticmethod
    def _paint(accum: np.ndarray, clip: Polygon, centre: Tuple[float, float], end_radius: float,
               cmap: mcolors.Colormap) -> None:
        height, width = accum.shape[:2]
        minx, miny, maxx, maxy = clip.bounds
        x0, x1 = max(0, int(math.floor(minx))), min(width, int(math.ceil(maxx)) + 1)
        y0, y1 = max(0, int(math.floor(miny))), min(height, int(math.ceil(maxy)) + 1)
        if x0 >= x1 or y0 >= y1:
            return

        # Sample at pixel centres
        xs, ys = np.meshgrid(np.arange(x0, x1) + 0.5, np.arange(y0, y1) + 0.5)
        inside = shapely.contains_xy(clip, xs, ys)
        if not inside.any():
            return

        t = np.hypot(xs[inside] - centre[0], ys[inside] - centre[1]) / end_radius
        rgba = cmap(np.clip(t, 0.0, 1.0))
        premultiplied = np.empty_like(rgba)
        premultiplied[:, :3] = rgba[:, :3] * rgba[:, 3:4]
        premultiplied[:, 3] = rgba[:, 3]

        window = accum[y0:y1, x0:x1]
        window[inside] += premultiplied

    def _finish(self, accum: np.ndarray) -> np.ndarray:
        """Clamp the additive sum, apply the alpha ceiling and un-premultiply."""
        np.clip(accum, 0.0, 1.0, out=accum)
        alpha = accum[..., 3]
        ceiling = self.settings.alpha_ceiling
        over = alpha > ceiling
        if over.any():
            accum[over] *= (ceiling / alpha[over])[:, None]

        surface = np.zeros(accum.shape, dtype=np.float32)
        visible = accum[..., 3] > 0
        surface[visible, :3] = np.clip(accum[visible, :3] / accum[visible, 3:4], 0.0, 1.0)
        surface[..., 3] = accum[..., 3]
        return surface


def apply_heat_weights(groups: Sequence[HeatBlobGroup], weights: Sequence[float]) -> List[HeatBlobGroup]:
    """Scale each group's intensity by its viewer heat weight."""
    if len(groups) != len(weights):
        raise ValueError(f"Got {len(weights)} weights for {len(groups)} groups")
    return [group.with_intensity(group.base_intensity * w) for group, w in zip(groups, weights)]


def save_png(surface: np.ndarray, path: Union[str, Path]) -> Path:
    """Write a rendered RGBA surface as a transparent PNG overlay."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    mimage.imsave(path, np.clip(surface, 0.0, 1.0), format="png")
    logger.info(f"Saved heat overlay: {path}")
    return path
