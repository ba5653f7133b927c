"""
Interest Core Module

Turns tags from pluggable data sources into a comparable interest vector.

Modules:
- aggregator.py - Tag normalisation, vocabulary filtering, weighted summation
- sources.py - DataSource implementations (favourites, age range, genres)
- encoder.py - TF-IDF-like vector encoding and quality grading
- similarity.py - Cosine similarity, diversity, heat weight mapping
- profile.py - Recompute-on-change state container and insights
"""

from tidepool.core.interest.aggregator import AggregationResult, DataSource, InterestAggregator, aggregate
from tidepool.core.interest.encoder import InterestVector, VectorQuality, assess_quality, encode
from tidepool.core.interest.profile import InterestInsights, InterestProfile, ProfileSnapshot
from tidepool.core.interest.similarity import cosine_similarity, diversity, heat_weight
from tidepool.core.interest.sources import (
    AgeRangeSource,
    FavoritePlace,
    FavoritesSource,
    GenreTagSource,
    StaticTagSource,
)

__all__ = [
    "AgeRangeSource",
    "AggregationResult",
    "DataSource",
    "FavoritePlace",
    "FavoritesSource",
    "GenreTagSource",
    "InterestAggregator",
    "InterestInsights",
    "InterestProfile",
    "InterestVector",
    "ProfileSnapshot",
    "StaticTagSource",
    "VectorQuality",
    "aggregate",
    "assess_quality",
    "cosine_similarity",
    "diversity",
    "encode",
    "heat_weight",
]
