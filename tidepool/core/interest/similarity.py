"""
Similarity Engine

Cosine similarity, interest diversity and the similarity -> heat weight
mapping consumed by the heat compositor.

Vectors built over different vocabularies are a versioning error, not a
"dissimilar" result: by default they raise VocabularyMismatchError after an
ERROR log. Non-strict callers get 0.0 and the same log line.
"""

import logging
import math
from typing import List, Optional, Tuple, Union

import numpy as np

from tidepool.common.config import HeatWeightSettings
from tidepool.core.interest.encoder import InterestVector
from tidepool.utils.constants import DEFAULT_TOP_INTERESTS
from tidepool.utils.error_handling import VocabularyMismatchError

logger = logging.getLogger(__name__)

VectorLike = Union[InterestVector, np.ndarray, List[float]]


def _as_array(vector: VectorLike) -> np.ndarray:
    if isinstance(vector, InterestVector):
        return vector.values
    return np.asarray(vector, dtype=np.float64)


def _check_compatible(a: VectorLike, b: VectorLike, strict: bool) -> bool:
    left, right = _as_array(a), _as_array(b)
    mismatch = left.shape != right.shape
    if not mismatch and isinstance(a, InterestVector) and isinstance(b, InterestVector):
        mismatch = a.vocabulary != b.vocabulary

    if mismatch:
        logger.error(
            f"Interest vector vocabulary mismatch ({left.shape[0]} vs {right.shape[0]} terms); "
            f"vectors were encoded against different vocabulary versions"
        )
        if strict:
            raise VocabularyMismatchError(left.shape[0], right.shape[0])
        return False
    return True


def cosine_similarity(a: VectorLike, b: VectorLike, strict: bool = True) -> float:
    """
    Cosine of the angle between two interest vectors.

    Returns:
        Similarity in [-1, 1]; 0.0 when either vector is all zero

    Raises:
        VocabularyMismatchError: If the vectors differ in layout and strict is True
    """
    if not _check_compatible(a, b, strict):
        return 0.0
    left, right = _as_array(a), _as_array(b)
    norm_a = np.linalg.norm(left)
    norm_b = np.linalg.norm(right)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    similarity = float(np.dot(left, right) / (norm_a * norm_b))
    return max(-1.0, min(1.0, similarity))


def diversity(vector: VectorLike) -> float:
    """
    Normalised Shannon entropy of the positive components.

    Negative components are clamped to zero, the remaining magnitudes are
    treated as a distribution and the entropy is divided by ln(n).

    Returns:
        Score in [0, 1]; 0.0 when fewer than two components are positive
    """
    values = np.clip(_as_array(vector), 0.0, None)
    positive = values[values > 0]
    if positive.size < 2:
        return 0.0
    p = positive / positive.sum()
    entropy = float(-np.sum(p * np.log(p)))
    return max(0.0, min(1.0, entropy / math.log(positive.size)))


def diversity_description(score: float) -> str:
    if score >= 0.8:
        return "Very diverse interests"
    if score >= 0.6:
        return "Diverse interests"
    if score >= 0.4:
        return "Focused interests"
    if score >= 0.2:
        return "Narrow interests"
    return "Very focused interests"


def top_interests(vector: InterestVector, limit: int = DEFAULT_TOP_INTERESTS) -> List[Tuple[str, float]]:
    """Highest positive components as (tag, weight), strongest first."""
    pairs = [(tag, float(w)) for tag, w in zip(vector.vocabulary, vector.values) if w > 0]
    pairs.sort(key=lambda pair: (-pair[1], pair[0]))
    return pairs[:limit]


def heat_weight(similarity: float, settings: Optional[HeatWeightSettings] = None) -> float:
    """
    Map viewer/venue similarity to a heat intensity in [floor, 1].

    The floor keeps dissimilar presence faintly visible: rendering nothing
    would itself reveal information by absence.

    Modes:
        linear: clamp(slope * s + intercept, floor, 1)
        sigmoid: floor + (1 - floor) / (1 + exp(-steepness * (s - midpoint)))
    """
    settings = settings or HeatWeightSettings()
    s = float(similarity)
    if math.isnan(s):
        s = 0.0

    if settings.mode == "sigmoid":
        logistic = 1.0 / (1.0 + math.exp(-settings.steepness * (s - settings.midpoint)))
        weight = settings.floor + (1.0 - settings.floor) * logistic
    else:
        weight = settings.slope * s + settings.intercept

    return max(settings.floor, min(1.0, weight))
