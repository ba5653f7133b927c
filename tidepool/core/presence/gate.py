"""
Home Presence Gate

Hysteresis state machine deciding whether the user's own presence may leave
the device. Two thresholds around the home coordinate form a band:

- hidden  -> visible only once the distance reaches the outer radius
- visible -> hidden only once the distance drops below the inner radius

Inside the band the previous state holds, so GPS noise near a single
boundary cannot make presence flicker on and off around the user's home.
Without a home the gate is always open. The gate only answers; it never
emits anything itself.
"""

import logging
from typing import Optional

from tidepool.geo_utils import Coordinate, distance_m, validate_coordinate
from tidepool.utils.constants import DEFAULT_HOME_INNER_RADIUS_M, DEFAULT_HOME_OUTER_RADIUS_M
from tidepool.utils.error_handling import ConfigError

logger = logging.getLogger(__name__)


class HomePresenceGate:
    """
    Args:
        home: Home coordinate, or None for an always-open gate
        inner_radius_m: Hide threshold (meters)
        outer_radius_m: Show threshold (meters), strictly greater than inner
    """

    def __init__(
        self,
        home: Optional[Coordinate] = None,
        inner_radius_m: float = DEFAULT_HOME_INNER_RADIUS_M,
        outer_radius_m: float = DEFAULT_HOME_OUTER_RADIUS_M,
    ):
        if inner_radius_m <= 0 or inner_radius_m >= outer_radius_m:
            raise ConfigError(
                f"Home gate requires 0 < inner < outer, got inner={inner_radius_m} outer={outer_radius_m}"
            )
        self.inner_radius_m = float(inner_radius_m)
        self.outer_radius_m = float(outer_radius_m)
        self._home: Optional[Coordinate] = validate_coordinate(home) if home is not None else None
        self._visible = False
        self._initialized = False

    @property
    def home(self) -> Optional[Coordinate]:
        return self._home

    @property
    def visible(self) -> bool:
        """Current gate state; always True when no home is set."""
        return True if self._home is None else self._visible

    @property
    def initialized(self) -> bool:
        """False until the first sample has been evaluated for the current home."""
        return self._initialized

    @property
    def midpoint_radius_m(self) -> float:
        return (self.inner_radius_m + self.outer_radius_m) / 2.0

    def set_home(self, home: Optional[Coordinate]) -> None:
        """Replace the home coordinate and re-arm the gate in the hidden state."""
        self._home = validate_coordinate(home) if home is not None else None
        self._visible = False
        self._initialized = False
        logger.debug("Home gate re-armed" if home is not None else "Home gate cleared")

    def update(self, distance_from_home_m: float, force: bool = False) -> bool:
        """
        Feed one distance-from-home observation.

        Args:
            distance_from_home_m: Distance between the sample and home (meters)
            force: Evaluate against the single midpoint threshold instead of
                the hysteresis band (initialisation only)

        Returns:
            True if presence may be emitted
        """
        if self._home is None:
            self._initialized = True
            return True

        d = float(distance_from_home_m)
        previous = self._visible
        if force:
            self._visible = d >= self.midpoint_radius_m
        elif not self._visible:
            if d >= self.outer_radius_m:
                self._visible = True
        elif d < self.inner_radius_m:
            self._visible = False
        self._initialized = True

        if previous != self._visible:
            logger.debug(f"Home gate {'opened' if self._visible else 'closed'}")
        return self._visible

    def update_coordinate(self, coordinate: Coordinate, force: bool = False) -> bool:
        """Feed a sample coordinate; the distance to home is computed here."""
        if self._home is None:
            return self.update(0.0, force=force)
        return self.update(distance_m(self._home, validate_coordinate(coordinate)), force=force)

    def __repr__(self) -> str:
        return (
            f"HomePresenceGate(home_set={self._home is not None}, visible={self.visible}, "
            f"inner={self.inner_radius_m}, outer={self.outer_radius_m})"
        )
