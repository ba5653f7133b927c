"""
Interest Profile

Explicit state container for the user's interest vector. Data sources signal
"something changed" through notify_changed(); the profile recomputes
synchronously and hands the new snapshot to subscribers. A change signal that
arrives while a recompute is running is coalesced into one follow-up run, so
the latest state always wins and recomputation never re-enters itself.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from tidepool.common.config import HeatWeightSettings, InterestRulebook
from tidepool.core.interest.aggregator import InterestAggregator
from tidepool.core.interest.encoder import InterestVector, VectorQuality, assess_quality, encode
from tidepool.core.interest.similarity import (
    cosine_similarity,
    diversity,
    diversity_description,
    heat_weight,
    top_interests,
)
from tidepool.utils.error_handling import safe_execute

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileSnapshot:
    """One recompute result. Replaced wholesale on every recompute."""
    vector: InterestVector
    quality: VectorQuality
    tag_weights: Dict[str, float]
    active_sources: List[str]
    updated_at: float


@dataclass
class InterestInsights:
    top_interests: List[str]
    dominant_categories: List[str]
    diversity_score: float
    quality: VectorQuality
    active_sources: List[str] = field(default_factory=list)

    @property
    def diversity_description(self) -> str:
        return diversity_description(self.diversity_score)


class InterestProfile:
    """
    Args:
        aggregator: Aggregator over the registered data sources
        heat_settings: Parameters for heat_weight_for()
        clock: Returns the current time in epoch seconds
    """

    def __init__(
        self,
        aggregator: InterestAggregator,
        heat_settings: Optional[HeatWeightSettings] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.aggregator = aggregator
        self.heat_settings = heat_settings or HeatWeightSettings()
        self._clock = clock
        self._snapshot: Optional[ProfileSnapshot] = None
        self._listeners: List[Callable[[ProfileSnapshot], None]] = []
        self._computing = False
        self._pending = False
        self.recompute_count = 0

    @property
    def rulebook(self) -> InterestRulebook:
        return self.aggregator.rulebook

    @property
    def snapshot(self) -> Optional[ProfileSnapshot]:
        return self._snapshot

    @property
    def vector(self) -> InterestVector:
        if self._snapshot is None:
            return InterestVector.zeros(self.rulebook.vocabulary)
        return self._snapshot.vector

    @property
    def quality(self) -> VectorQuality:
        return self._snapshot.quality if self._snapshot else VectorQuality.POOR

    def subscribe(self, listener: Callable[[ProfileSnapshot], None]) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify_changed(self) -> Optional[ProfileSnapshot]:
        """
        Recompute after a source change.

        Re-entrant calls (e.g. from a listener or a data source) only mark a
        follow-up run and return the current snapshot, which is None while
        the very first recompute is still running.
        """
        if self._computing:
            self._pending = True
            return self._snapshot

        self._computing = True
        try:
            while True:
                self._pending = False
                self._snapshot = self._compute()
                for listener in list(self._listeners):
                    safe_execute(listener, self._snapshot, error_context="Profile listener failed")
                if not self._pending:
                    break
        finally:
            self._computing = False
        return self._snapshot

    def _compute(self) -> ProfileSnapshot:
        vocabulary = self.rulebook.vocabulary
        result = self.aggregator.run()
        vector = encode(result.tag_weights, vocabulary)
        quality = assess_quality(
            result.tag_weights, result.active_source_count, result.total_sources, vocabulary
        )
        self.recompute_count += 1
        logger.debug(
            f"Interest vector recomputed: {len(result.tag_weights)} tags, "
            f"{result.active_source_count}/{result.total_sources} sources, quality={quality}"
        )
        return ProfileSnapshot(
            vector=vector,
            quality=quality,
            tag_weights=dict(result.tag_weights),
            active_sources=list(result.active_sources),
            updated_at=self._clock(),
        )

    def similarity_to(self, other: InterestVector, strict: bool = True) -> float:
        return cosine_similarity(self.vector, other, strict=strict)

    def heat_weight_for(self, other: InterestVector, strict: bool = True) -> float:
        """Heat intensity for presence whose aggregate interests are `other`."""
        return heat_weight(self.similarity_to(other, strict=strict), self.heat_settings)

    def dominant_categories(self, limit: int = 3) -> List[str]:
        vector = self.vector
        if vector.is_zero:
            return []
        scores = {
            category: sum(vector.weight(tag) for tag in tags)
            for category, tags in self.rulebook.categories.items()
        }
        ranked = sorted(scores.items(), key=lambda item: (-item[1], item[0]))
        return [category for category, score in ranked[:limit] if score > 0]

    def insights(self) -> InterestInsights:
        vector = self.vector
        return InterestInsights(
            top_interests=[tag for tag, _ in top_interests(vector, limit=5)],
            dominant_categories=self.dominant_categories(),
            diversity_score=diversity(vector),
            quality=self.quality,
            active_sources=list(self._snapshot.active_sources) if self._snapshot else [],
        )
