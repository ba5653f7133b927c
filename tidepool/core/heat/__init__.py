"""
Heat Rendering Module

Modules:
- hull.py - Monotone chain convex hull
- projection.py - Web Mercator viewport and point projection
- compositor.py - Clipped radial-gradient blobs, intensity disks, PNG output
- records.py - Aggregated (tile id, intensity) records as HeatCircles
- synthetic.py - Jittered synthetic venue groups for demos and tests
"""

from tidepool.core.heat.compositor import (
    BlobGeometry,
    HeatBlobCompositor,
    HeatBlobGroup,
    HeatCircle,
    apply_heat_weights,
    save_png,
)
from tidepool.core.heat.hull import convex_hull
from tidepool.core.heat.projection import Viewport, WebMercatorViewport, project_points
from tidepool.core.heat.records import circles_from_tiles, load_tile_records
from tidepool.core.heat.synthetic import groups_from_config, synthetic_groups, venue_circles, venue_group

__all__ = [
    "BlobGeometry",
    "HeatBlobCompositor",
    "HeatBlobGroup",
    "HeatCircle",
    "Viewport",
    "WebMercatorViewport",
    "apply_heat_weights",
    "circles_from_tiles",
    "convex_hull",
    "groups_from_config",
    "load_tile_records",
    "project_points",
    "save_png",
    "synthetic_groups",
    "venue_circles",
    "venue_group",
]
