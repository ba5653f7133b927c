"""
Interest Aggregation

Merges weighted tags from independently queried data sources into one
tag -> weight map restricted to the closed vocabulary.

Every raw tag is normalised (trimmed, lowercased, separators folded to
underscores, synonym-mapped) before the vocabulary check; tags outside the
vocabulary are dropped without error. Each source's counts are multiplied by
that source's reliability scale before summation.

Signed sources (age-range filtering) may push totals below zero. Negative
totals are kept as-is: they are the deprioritisation mechanism, not an error.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from tidepool.common.config import InterestRulebook
from tidepool.utils.constants import DEFAULT_SOURCE_WEIGHT
from tidepool.utils.error_handling import safe_execute

logger = logging.getLogger(__name__)

TagCounts = Union[Mapping[str, float], Iterable[Tuple[str, float]]]


class DataSource(Protocol):
    """Anything that can report interest tag counts."""

    name: str

    def get_interest_tags(self) -> Mapping[str, float]: ...


def normalize_tag(tag: str, synonyms: Mapping[str, str]) -> str:
    """Lowercase a raw tag, fold spaces/hyphens to underscores and apply synonyms."""
    key = tag.strip().lower().replace("-", "_").replace(" ", "_")
    return synonyms.get(key, key)


def _iter_counts(counts: TagCounts) -> Iterable[Tuple[str, float]]:
    if isinstance(counts, Mapping):
        return counts.items()
    return counts


def aggregate(
    sources: Mapping[str, TagCounts],
    weights: Mapping[str, float],
    vocabulary: Sequence[str],
    synonyms: Optional[Mapping[str, str]] = None,
    default_weight: float = DEFAULT_SOURCE_WEIGHT,
) -> Dict[str, float]:
    """
    Aggregate per-source tag counts into vocabulary-restricted weights.

    Args:
        sources: Source name -> tag counts (mapping or (tag, count) pairs)
        weights: Source name -> reliability scale
        vocabulary: Closed vocabulary
        synonyms: Raw tag -> canonical tag
        default_weight: Scale for sources missing from weights

    Returns:
        Dictionary of canonical tag -> accumulated weight; keys are always a
        subset of the vocabulary. Values may be negative.
    """
    synonyms = synonyms or {}
    vocab = set(vocabulary)
    aggregated: Dict[str, float] = {}

    for source_name, counts in sources.items():
        scale = weights.get(source_name)
        if scale is None:
            logger.warning(f"No weight configured for source '{source_name}', using {default_weight}")
            scale = default_weight

        dropped = 0
        for raw_tag, count in _iter_counts(counts):
            tag = normalize_tag(raw_tag, synonyms)
            if tag not in vocab:
                dropped += 1
                continue
            aggregated[tag] = aggregated.get(tag, 0.0) + float(count) * scale

        if dropped:
            logger.debug(f"Dropped {dropped} out-of-vocabulary tags from '{source_name}'")

    return aggregated


@dataclass
class AggregationResult:
    """Aggregated tag weights plus which sources contributed."""
    tag_weights: Dict[str, float]
    active_sources: List[str] = field(default_factory=list)
    total_sources: int = 0

    @property
    def active_source_count(self) -> int:
        return len(self.active_sources)


class InterestAggregator:
    """
    Collects tags from a list of DataSource objects and aggregates them
    against the rulebook. Sources are treated identically regardless of the
    integration behind them; adding one never changes this class.
    """

    def __init__(self, rulebook: InterestRulebook, sources: Optional[List[DataSource]] = None):
        self.rulebook = rulebook
        self.sources: List[DataSource] = list(sources or [])

    def add_source(self, source: DataSource) -> None:
        if any(existing.name == source.name for existing in self.sources):
            raise ValueError(f"Data source '{source.name}' already registered")
        self.sources.append(source)

    def remove_source(self, name: str) -> bool:
        before = len(self.sources)
        self.sources = [s for s in self.sources if s.name != name]
        return len(self.sources) != before

    def collect(self) -> Dict[str, Dict[str, float]]:
        """Query every source. A failing source is logged and contributes nothing."""
        collected: Dict[str, Dict[str, float]] = {}
        for source in self.sources:
            tags = safe_execute(
                source.get_interest_tags,
                default=None,
                error_context=f"Data source '{source.name}' failed",
            )
            collected[source.name] = dict(tags) if tags else {}
        return collected

    def run(self) -> AggregationResult:
        collected = self.collect()
        tag_weights = aggregate(
            collected,
            self.rulebook.source_weights,
            self.rulebook.vocabulary,
            self.rulebook.synonyms,
            self.rulebook.default_source_weight,
        )
        active = [name for name, tags in collected.items() if tags]
        return AggregationResult(
            tag_weights=tag_weights,
            active_sources=active,
            total_sources=len(self.sources),
        )
