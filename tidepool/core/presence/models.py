"""
Presence Data Models

Contains the transient sample type, the outbound emission record and the
collaborator protocols consumed by the reporter.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

from pydantic import BaseModel, Field, field_validator

from tidepool.core.tiling import TileId
from tidepool.geo_utils import Coordinate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PresenceSample:
    """A location fix. Never leaves the device."""
    coordinate: Coordinate
    timestamp: float  # epoch seconds
    accuracy_m: Optional[float] = None


class TileEmission(BaseModel):
    """
    Outbound presence record delivered to the tile sink.

    Attributes:
        tile_id: Stable tile string, e.g. "grid_150_m_33690_94016"
        epoch_ms: Emission time in epoch milliseconds
        jitter_ms: Randomised delay applied before the tick that emitted it
    """
    tile_id: str = Field(..., min_length=1, description="Stable tile id string")
    epoch_ms: int = Field(..., ge=0, description="Emission time (epoch ms)")
    jitter_ms: int = Field(..., ge=0, description="Applied scheduling jitter (ms)")

    model_config = {"frozen": True}

    @field_validator('tile_id')
    @classmethod
    def validate_tile_id(cls, v: str) -> str:
        """Only tile ids may be emitted; raw coordinates are rejected."""
        TileId.parse(v)
        return v


class LocationProvider(Protocol):
    """Pull-style location collaborator consulted on every tick."""

    @property
    def is_authorized(self) -> bool: ...

    @property
    def home(self) -> Optional[Coordinate]: ...

    def latest_sample(self) -> Optional[PresenceSample]: ...


class StaticLocationProvider:
    """In-memory location provider; samples are pushed by the owner."""

    def __init__(self, home: Optional[Coordinate] = None, is_authorized: bool = True):
        self._home = home
        self._authorized = is_authorized
        self._latest: Optional[PresenceSample] = None

    @property
    def is_authorized(self) -> bool:
        return self._authorized

    @is_authorized.setter
    def is_authorized(self, value: bool) -> None:
        self._authorized = bool(value)

    @property
    def home(self) -> Optional[Coordinate]:
        return self._home

    def set_home(self, home: Optional[Coordinate]) -> None:
        self._home = home

    def push(self, sample: PresenceSample) -> None:
        self._latest = sample

    def clear(self) -> None:
        self._latest = None

    def latest_sample(self) -> Optional[PresenceSample]:
        return self._latest


class LoggingTileSink:
    """Tile sink that records and logs emissions instead of sending them."""

    def __init__(self):
        self.emissions: List[TileEmission] = []

    def __call__(self, emission: TileEmission) -> None:
        self.emissions.append(emission)
        logger.info(
            f"would send tile_id={emission.tile_id} epoch_ms={emission.epoch_ms} "
            f"client_jitter_ms={emission.jitter_ms}"
        )
