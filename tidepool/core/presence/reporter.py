"""
Presence Reporter

Schedules jittered, throttled emission of tile identifiers. Raw coordinates
never reach the sink: every tick resolves the latest sample to a coarse tile
and emits only its string id, an epoch timestamp and the jitter applied.

Two mechanisms resist trajectory reconstruction from reporting cadence:
- temporal jitter: each tick is a fresh single-shot timer armed with a
  uniformly random delay in [min_interval_s, max_interval_s]
- spatial throttling: a tile is emitted at most once per
  per_tile_min_interval_s

Missing provider, missing sample, unauthorised location and a closed home
gate are all silent no-ops. Stopping cancels the pending timer; the throttle
history survives stop/start within a session and is cleared only by reset().
max_tracked_tiles is a soft cap: entries still inside the throttle window are
kept even when that exceeds it.
"""

import asyncio
import logging
import random
import time
from typing import Callable, Dict, Optional

from tidepool.common.config import ReporterSettings, ReportingConfig
from tidepool.core.presence.gate import HomePresenceGate
from tidepool.core.presence.models import LocationProvider, TileEmission
from tidepool.core.tiling import GridTiler
from tidepool.utils.constants import MS_PER_SECOND
from tidepool.utils.error_handling import InvalidCoordinateError, safe_execute

logger = logging.getLogger(__name__)

TileSink = Callable[[TileEmission], None]


class PresenceReporter:
    """
    Args:
        provider: Location collaborator (may be None; ticks are then no-ops)
        gate: Home hysteresis gate consulted before every emission
        sink: Callable receiving each TileEmission
        tiler: Grid tiler (defaults to 150 m cells)
        settings: Interval, throttle and eviction settings
        clock: Returns the current time in epoch seconds
        rng: Random source for jitter
    """

    def __init__(
        self,
        provider: Optional[LocationProvider],
        gate: HomePresenceGate,
        sink: TileSink,
        tiler: Optional[GridTiler] = None,
        settings: Optional[ReporterSettings] = None,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
    ):
        self.provider = provider
        self.gate = gate
        self.sink = sink
        self.tiler = tiler or GridTiler()
        self.settings = settings or ReporterSettings()
        self._clock = clock
        self._rng = rng or random.Random()

        self._last_emission: Dict[str, float] = {}
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._handle: Optional[asyncio.TimerHandle] = None
        self._generation = 0
        self._running = False
        self._pending_delay_s = 0.0
        self._applied_jitter_ms = 0

    @classmethod
    def from_config(
        cls,
        provider: Optional[LocationProvider],
        sink: TileSink,
        reporting: ReportingConfig,
        **kwargs,
    ) -> "PresenceReporter":
        """Build a reporter (and its gate and tiler) from reporting.yml settings."""
        gate = HomePresenceGate(
            home=provider.home if provider is not None else None,
            inner_radius_m=reporting.home_gate.inner_radius_m,
            outer_radius_m=reporting.home_gate.outer_radius_m,
        )
        return cls(
            provider=provider,
            gate=gate,
            sink=sink,
            tiler=GridTiler(reporting.tiling.meters_per_tile),
            settings=reporting.reporter,
            **kwargs,
        )

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def tracked_tiles(self) -> int:
        return len(self._last_emission)

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Arm the first tick. Calling start on a running reporter does nothing."""
        if self._running:
            return
        self._loop = loop or asyncio.get_running_loop()
        self._running = True
        logger.info("Presence reporter started")
        self._schedule_next()

    def stop(self) -> None:
        """Cancel the pending tick. Throttle history is kept."""
        if not self._running and self._handle is None:
            return
        self._running = False
        self._generation += 1
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        logger.info("Presence reporter stopped")

    def reset(self) -> None:
        """Forget all per-tile throttle history."""
        self._last_emission.clear()

    def next_delay(self) -> float:
        """Draw the next jittered delay in seconds."""
        return self._rng.uniform(self.settings.min_interval_s, self.settings.max_interval_s)

    def _schedule_next(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
        self._pending_delay_s = self.next_delay()
        self._handle = self._loop.call_later(self._pending_delay_s, self._on_timer, self._generation)

    def _on_timer(self, generation: int) -> None:
        # A handle from before the last stop() must never tick
        if not self._running or generation != self._generation:
            return
        self._handle = None
        self._applied_jitter_ms = int(round(self._pending_delay_s * MS_PER_SECOND))
        try:
            self.tick()
        finally:
            self._applied_jitter_ms = 0
            if self._running and generation == self._generation:
                self._schedule_next()

    def _evict_expired(self, now: float) -> None:
        ttl = self.settings.throttle_ttl_s
        expired = [tile for tile, at in self._last_emission.items() if now - at > ttl]
        for tile in expired:
            del self._last_emission[tile]

        overflow = len(self._last_emission) - self.settings.max_tracked_tiles
        if overflow <= 0:
            return
        # Entries still inside the throttle window are never dropped
        window = self.settings.per_tile_min_interval_s
        idle = sorted(
            (item for item in self._last_emission.items() if now - item[1] >= window),
            key=lambda item: item[1],
        )
        for tile, _ in idle[:overflow]:
            del self._last_emission[tile]
        if len(self._last_emission) > self.settings.max_tracked_tiles:
            logger.debug(
                f"Tracking {len(self._last_emission)} tiles (cap {self.settings.max_tracked_tiles}); "
                f"remaining entries are inside the throttle window"
            )

    def tick(self) -> Optional[TileEmission]:
        """
        Run one reporting step.

        Returns:
            The emitted TileEmission, or None when nothing was emitted
        """
        provider = self.provider
        if provider is None or not provider.is_authorized:
            return None
        sample = provider.latest_sample()
        if sample is None:
            return None

        home = provider.home
        if home is not None:
            home = (float(home[0]), float(home[1]))

        try:
            if home != self.gate.home:
                self.gate.set_home(home)
            visible = self.gate.update_coordinate(sample.coordinate, force=not self.gate.initialized)
            if not visible:
                return None
            tile = str(self.tiler.tile_id(sample.coordinate))
        except InvalidCoordinateError as e:
            logger.warning(f"Skipping presence tick: {e}")
            return None

        now = self._clock()

        last = self._last_emission.get(tile)
        if last is not None and now - last < self.settings.per_tile_min_interval_s:
            logger.debug(f"Throttled repeat emission for {tile}")
            return None

        emission = TileEmission(
            tile_id=tile,
            epoch_ms=int(now * MS_PER_SECOND),
            jitter_ms=self._applied_jitter_ms,
        )
        self._last_emission[tile] = now
        self._evict_expired(now)
        safe_execute(self.sink, emission, error_context=f"Tile sink failed for {tile}")
        return emission
