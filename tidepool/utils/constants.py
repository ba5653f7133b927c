"""
Application Constants

This module contains all application-wide constants to avoid magic numbers
and improve maintainability.
"""

# Geodesy
METERS_PER_DEGREE_LAT = 111_000.0
EARTH_RADIUS_M = 6_371_000.0
MIN_COS_LATITUDE = 1e-6  # Floor for cos(lat) near the poles

# Tiling
DEFAULT_METERS_PER_TILE = 150
TILE_ID_PREFIX = "grid"

# Home presence gate (450 ft / 550 ft band around the 500 ft hide radius)
DEFAULT_HOME_INNER_RADIUS_M = 137.16
DEFAULT_HOME_OUTER_RADIUS_M = 167.64

# Presence reporter timing (seconds)
DEFAULT_MIN_INTERVAL_SECONDS = 15.0
DEFAULT_MAX_INTERVAL_SECONDS = 45.0
DEFAULT_PER_TILE_MIN_INTERVAL_SECONDS = 60.0
DEFAULT_THROTTLE_TTL_SECONDS = 3600.0
DEFAULT_MAX_TRACKED_TILES = 1024
MS_PER_SECOND = 1000

# Interest vectors
DEFAULT_SOURCE_WEIGHT = 0.5
QUALITY_FAIR_THRESHOLD = 0.25
QUALITY_GOOD_THRESHOLD = 0.50
QUALITY_EXCELLENT_THRESHOLD = 0.75
DEFAULT_TOP_INTERESTS = 10

# Heat weight derivation
DEFAULT_HEAT_WEIGHT_SLOPE = 0.8
DEFAULT_HEAT_WEIGHT_INTERCEPT = 0.2
DEFAULT_HEAT_WEIGHT_FLOOR = 0.15
DEFAULT_SIGMOID_STEEPNESS = 8.0
DEFAULT_SIGMOID_MIDPOINT = 0.5

# Heat blob rendering
MIN_HULL_POINTS = 3
MIN_RADIUS_PX = 1.0
GRADIENT_STOPS = (0.0, 0.55, 1.0)
DEFAULT_ALPHA_CEILING = 0.85
DEFAULT_PER_POINT_RADIUS_M = 40.0
