"""
Interest Data Sources

Concrete DataSource implementations. Each turns its own records into raw
tag counts; normalisation and vocabulary filtering happen in the aggregator.
The integrations that fetch the records (OAuth, photo scanning, storage)
live outside this package.
"""

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from tidepool.common.config import InterestRulebook

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60
RECENCY_DECAY_DAYS = 90.0
VISIT_CAP = 10
HIGH_RATING = 4


class StaticTagSource:
    """Source backed by a fixed tag -> count mapping."""

    def __init__(self, name: str, tags: Optional[Mapping[str, float]] = None):
        self.name = name
        self._tags: Dict[str, float] = dict(tags or {})

    def update(self, tags: Mapping[str, float]) -> None:
        self._tags = dict(tags)

    def get_interest_tags(self) -> Dict[str, float]:
        return dict(self._tags)


@dataclass
class FavoritePlace:
    """A saved place (in-app favourite, saved map location or photo cluster)."""
    name: str
    category: str
    rating: int = 3
    visit_count: int = 0
    tags: List[str] = field(default_factory=list)
    created_at: float = field(default_factory=time.time)

    def interest_weight(self, now: Optional[float] = None) -> float:
        """Blend of rating, visit frequency and recency, in [0, 1]."""
        now = time.time() if now is None else now
        rating_weight = max(0, min(self.rating, 5)) / 5.0
        visit_weight = min(self.visit_count / VISIT_CAP, 1.0)
        days = max(0.0, (now - self.created_at) / SECONDS_PER_DAY)
        recency_weight = math.exp(-days / RECENCY_DECAY_DAYS)
        return rating_weight * 0.5 + visit_weight * 0.3 + recency_weight * 0.2


class FavoritesSource:
    """
    Tags from saved places: category tags, user tags and a highly_rated tag
    for places rated 4 or above, each weighted by the place's interest weight.
    """

    def __init__(
        self,
        name: str,
        rulebook: InterestRulebook,
        places: Optional[Sequence[FavoritePlace]] = None,
        clock=time.time,
    ):
        self.name = name
        self.rulebook = rulebook
        self.places: List[FavoritePlace] = list(places or [])
        self._clock = clock

    def get_interest_tags(self) -> Dict[str, float]:
        now = self._clock()
        counts: Dict[str, float] = {}
        for place in self.places:
            weight = max(1, int(place.interest_weight(now) * 10))

            category_tags = self.rulebook.categories.get(place.category.lower())
            if category_tags is None:
                logger.debug(f"Unknown place category '{place.category}' for '{place.name}'")
                category_tags = []
            for tag in category_tags:
                counts[tag] = counts.get(tag, 0) + weight

            for tag in place.tags:
                tag = tag.lower()
                counts[tag] = counts.get(tag, 0) + weight

            if place.rating >= HIGH_RATING:
                counts["highly_rated"] = counts.get("highly_rated", 0) + weight
        return counts


class AgeRangeSource:
    """
    Signed content-appropriateness weights for the user's age bracket.

    Negative weights deprioritise adult venues for younger users. The source
    only contributes when the user has authorised sharing their bracket.
    """

    def __init__(self, rulebook: InterestRulebook, bracket: str = "unknown", authorized: bool = False,
                 name: str = "age_range"):
        self.name = name
        self.rulebook = rulebook
        self.bracket = bracket
        self.authorized = authorized

    def get_interest_tags(self) -> Dict[str, float]:
        if not self.authorized:
            return {}
        tags = self.rulebook.age_brackets.get(self.bracket)
        if tags is None:
            logger.warning(f"Unknown age bracket '{self.bracket}'")
            return {}
        return dict(tags)


def normalize_genre(genre: str) -> str:
    return genre.strip().lower().replace("-", " ").replace("_", " ")


def map_genre_to_tags(genre: str, genre_map: Mapping[str, List[str]]) -> List[str]:
    """
    Map a streaming-service genre string to interest tags.

    Exact match first, then the longest table key contained in (or
    containing) the genre, then the genre itself plus "music".
    """
    normalized = normalize_genre(genre)
    if not normalized:
        return []
    if normalized in genre_map:
        return list(genre_map[normalized])

    partial = [key for key in genre_map if key in normalized or normalized in key]
    if partial:
        best = max(partial, key=lambda key: (len(key), key))
        return list(genre_map[best])

    return [normalized.replace(" ", "_"), "music"]


class GenreTagSource:
    """Tags derived from a list of listening genres (one entry per artist/track genre)."""

    def __init__(self, name: str, rulebook: InterestRulebook, genres: Optional[Sequence[str]] = None,
                 base_weight: int = 1):
        self.name = name
        self.rulebook = rulebook
        self.genres: List[str] = list(genres or [])
        self.base_weight = base_weight

    def get_interest_tags(self) -> Dict[str, float]:
        counts: Dict[str, float] = {}
        for genre in self.genres:
            for tag in map_genre_to_tags(genre, self.rulebook.genres):
                counts[tag] = counts.get(tag, 0) + self.base_weight
        return counts
