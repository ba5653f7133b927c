"""
Interest Vector Encoding

Converts aggregated tag weights into a fixed-length, unit-normalised vector
over the ordered vocabulary, and grades how much data the vector rests on.

Scoring is TF-IDF-like: term frequency is weight / total weight, and the
inverse-frequency term uses the tag's own weight as a stand-in for document
frequency, ln(|V| / max(1, weight)). There is no corpus behind it; this is a
deliberate simplification, not a true IDF. A consequence is that tags whose
weight exceeds the vocabulary size score negative. Negative components (from
signed sources or from that term) are preserved through normalisation.
"""

import logging
from enum import IntEnum
from typing import Dict, List, Mapping, Sequence, Tuple

import numpy as np

from tidepool.utils.constants import (
    QUALITY_EXCELLENT_THRESHOLD,
    QUALITY_FAIR_THRESHOLD,
    QUALITY_GOOD_THRESHOLD,
)

logger = logging.getLogger(__name__)


class VectorQuality(IntEnum):
    """Ordinal data-coverage grade of an interest vector."""
    POOR = 0       # < 25% coverage
    FAIR = 1       # 25-50%
    GOOD = 2       # 50-75%
    EXCELLENT = 3  # >= 75%

    @property
    def description(self) -> str:
        return {
            VectorQuality.POOR: "Limited data",
            VectorQuality.FAIR: "Some data",
            VectorQuality.GOOD: "Good data",
            VectorQuality.EXCELLENT: "Rich data",
        }[self]

    def __str__(self) -> str:
        return self.name.lower()


class InterestVector:
    """
    Read-only float vector over an ordered vocabulary.

    Always unit length, or exactly zero when nothing matched.
    """

    __slots__ = ("values", "vocabulary")

    def __init__(self, values, vocabulary: Sequence[str]):
        array = np.array(values, dtype=np.float64)
        if array.ndim != 1 or array.shape[0] != len(vocabulary):
            raise ValueError(
                f"Vector of shape {array.shape} does not match vocabulary of {len(vocabulary)} terms"
            )
        array.setflags(write=False)
        self.values = array
        self.vocabulary: Tuple[str, ...] = tuple(vocabulary)

    @classmethod
    def zeros(cls, vocabulary: Sequence[str]) -> "InterestVector":
        return cls(np.zeros(len(vocabulary)), vocabulary)

    def __len__(self) -> int:
        return self.values.shape[0]

    def __eq__(self, other) -> bool:
        if not isinstance(other, InterestVector):
            return NotImplemented
        return self.vocabulary == other.vocabulary and np.array_equal(self.values, other.values)

    def __repr__(self) -> str:
        return f"InterestVector(terms={len(self)}, non_zero={int(np.count_nonzero(self.values))})"

    @property
    def is_zero(self) -> bool:
        return not np.any(self.values)

    @property
    def magnitude(self) -> float:
        return float(np.linalg.norm(self.values))

    def weight(self, tag: str) -> float:
        """Component for a vocabulary term (0.0 for unknown terms)."""
        try:
            return float(self.values[self.vocabulary.index(tag)])
        except ValueError:
            return 0.0

    def as_dict(self, include_zero: bool = False) -> Dict[str, float]:
        return {
            term: float(value)
            for term, value in zip(self.vocabulary, self.values)
            if include_zero or value != 0.0
        }

    def to_list(self) -> List[float]:
        return [float(v) for v in self.values]


def encode(tag_weights: Mapping[str, float], vocabulary: Sequence[str]) -> InterestVector:
    """
    Encode tag weights as a unit-normalised InterestVector.

    Args:
        tag_weights: Canonical tag -> accumulated weight
        vocabulary: Ordered closed vocabulary

    Returns:
        InterestVector; the all-zero vector when no tags match, when the total
        weight is not positive, or when every component scores zero
    """
    vocab_size = len(vocabulary)
    present = {term: float(tag_weights[term]) for term in vocabulary if term in tag_weights}
    if not present:
        return InterestVector.zeros(vocabulary)

    total = sum(present.values())
    if total <= 0:
        # Signed sources outweighed everything else: deprioritised, not an error
        logger.info(f"Total interest weight {total:.3f} is not positive; using zero vector")
        return InterestVector.zeros(vocabulary)

    vector = np.zeros(vocab_size, dtype=np.float64)
    for index, term in enumerate(vocabulary):
        weight = present.get(term)
        if weight is None:
            continue
        tf = weight / total
        idf = np.log(vocab_size / max(1.0, weight))
        vector[index] = tf * idf

    magnitude = np.linalg.norm(vector)
    if magnitude == 0:
        return InterestVector.zeros(vocabulary)
    return InterestVector(vector / magnitude, vocabulary)


def assess_quality(
    tag_weights: Mapping[str, float],
    active_source_count: int,
    total_sources: int,
    vocabulary: Sequence[str],
) -> VectorQuality:
    """
    Grade coverage as the mean of the active-source ratio and the fraction of
    the vocabulary that received any weight.
    """
    source_ratio = active_source_count / total_sources if total_sources > 0 else 0.0
    vocab = set(vocabulary)
    tag_coverage = len([t for t in tag_weights if t in vocab]) / len(vocab) if vocab else 0.0
    coverage = (min(source_ratio, 1.0) + tag_coverage) / 2.0

    if coverage >= QUALITY_EXCELLENT_THRESHOLD:
        return VectorQuality.EXCELLENT
    if coverage >= QUALITY_GOOD_THRESHOLD:
        return VectorQuality.GOOD
    if coverage >= QUALITY_FAIR_THRESHOLD:
        return VectorQuality.FAIR
    return VectorQuality.POOR
