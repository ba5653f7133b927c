"""
Presence Core Module

Decides when, and whether, a coarse tile identifier may leave the device.

Modules:
- models.py - PresenceSample, TileEmission and collaborator protocols
- gate.py - Home hysteresis gate
- reporter.py - Jittered, per-tile throttled tile reporter
"""

from tidepool.core.presence.gate import HomePresenceGate
from tidepool.core.presence.models import (
    LocationProvider,
    LoggingTileSink,
    PresenceSample,
    StaticLocationProvider,
    TileEmission,
)
from tidepool.core.presence.reporter import PresenceReporter

__all__ = [
    "HomePresenceGate",
    "LocationProvider",
    "LoggingTileSink",
    "PresenceReporter",
    "PresenceSample",
    "StaticLocationProvider",
    "TileEmission",
]
