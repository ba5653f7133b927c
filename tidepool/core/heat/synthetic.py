"""
Synthetic Heat Generator

Stand-in heat data for demos and offline rendering when no aggregated
presence is available. Each venue gets a fixed, deterministic pattern of ten
jittered points so renders are reproducible.
"""

from typing import List, Optional, Tuple

from tidepool.common.config import ReportingConfig, SyntheticVenue, SyntheticVenueSettings
from tidepool.core.heat.compositor import HeatBlobGroup, HeatCircle
from tidepool.geo_utils import Coordinate, offset_coordinate
from tidepool.utils.constants import DEFAULT_PER_POINT_RADIUS_M

# (meters_north, meters_east, intensity_scale)
JITTER_PATTERN: Tuple[Tuple[float, float, float], ...] = (
    (0.0, 0.0, 1.00),
    (8.0, 5.0, 0.85),
    (-10.0, 12.0, 0.78),
    (15.0, -6.0, 0.70),
    (-14.0, -9.0, 0.72),
    (22.0, 3.0, 0.60),
    (-6.0, 18.0, 0.65),
    (5.0, -16.0, 0.68),
    (12.0, -12.0, 0.62),
    (-18.0, 7.0, 0.58),
)


def jitter_points(center: Coordinate) -> List[Coordinate]:
    return [offset_coordinate(center, north, east) for north, east, _ in JITTER_PATTERN]


def venue_group(venue: SyntheticVenue, radius_m: float = DEFAULT_PER_POINT_RADIUS_M) -> HeatBlobGroup:
    """One blob group of jittered points around a venue."""
    points = jitter_points((venue.lat, venue.lon))
    return HeatBlobGroup(tuple(points), venue.base_intensity, radius_m, label=venue.name)


def venue_circles(venue: SyntheticVenue, radius_m: float = DEFAULT_PER_POINT_RADIUS_M) -> List[HeatCircle]:
    """Per-point circles for a venue, each scaled by its jitter intensity."""
    center = (venue.lat, venue.lon)
    return [
        HeatCircle(offset_coordinate(center, north, east), radius_m, venue.base_intensity * scale,
                   label=venue.name)
        for north, east, scale in JITTER_PATTERN
    ]


def synthetic_groups(settings: Optional[SyntheticVenueSettings] = None) -> List[HeatBlobGroup]:
    settings = settings or SyntheticVenueSettings()
    return [venue_group(v, settings.per_point_radius_m) for v in settings.venues]


def groups_from_config(reporting: ReportingConfig) -> List[HeatBlobGroup]:
    return synthetic_groups(reporting.synthetic_venues)
