"""Sample-level classifiers and the codebook/k-NN dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from handcode.codebook import match_codebook
from handcode.types import (
    Codebook,
    GestureClass,
    GestureLibrary,
    RecognitionResult,
    RecognizerMode,
)

DEFAULT_THRESHOLD = 0.6
DEFAULT_K = 3


@dataclass(frozen=True)
class Neighbour:
    """One stored sample and its distance to the query."""

    gesture_class: GestureClass
    distance: float


@dataclass
class _Vote:
    gesture_class: GestureClass
    count: int
    best: float


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Unweighted ``sqrt(sum((a - b)^2)) / n``."""
    d = a - b
    return float(np.sqrt(np.dot(d, d)) / a.shape[0])


def rank_neighbours(features: np.ndarray, library: GestureLibrary) -> List[Neighbour]:
    """Distance from ``features`` to every same-dimension sample, nearest first."""
    dim = features.shape[0]
    neighbours = [
        Neighbour(gesture_class, euclidean_distance(features, sample.features))
        for gesture_class in library
        for sample in gesture_class.samples
        if sample.dim == dim
    ]
    neighbours.sort(key=lambda n: n.distance)
    return neighbours


def knn_classify(
    features: np.ndarray,
    library: GestureLibrary,
    k: int = DEFAULT_K,
    threshold: float = DEFAULT_THRESHOLD,
) -> Optional[RecognitionResult]:
    """Majority vote among the ``k`` nearest stored samples.

    Ties in vote count go to the class whose nearest voter is closest. The
    winner is rejected when that nearest voter lies beyond ``threshold``.

    Args:
        features: Live feature vector.
        library: Library whose samples are searched.
        k: Neighbourhood size (clamped to at least 1).
        threshold: Global acceptance distance.

    Returns:
        RecognitionResult with the winner's best distance, or None.
    """
    neighbours = rank_neighbours(features, library)
    if not neighbours:
        return None

    votes: Dict[str, _Vote] = {}
    for n in neighbours[:max(1, k)]:
        code = n.gesture_class.code
        vote = votes.get(code)
        if vote is None:
            votes[code] = _Vote(n.gesture_class, 1, n.distance)
        else:
            vote.count += 1
            vote.best = min(vote.best, n.distance)

    winner = min(votes.values(), key=lambda v: (-v.count, v.best))
    if winner.best > threshold:
        return None

    return RecognitionResult(
        class_id=winner.gesture_class.id,
        class_code=winner.gesture_class.code,
        class_name=winner.gesture_class.name,
        distance=winner.best,
    )


def nearest_sample(
    features: np.ndarray,
    library: GestureLibrary,
    threshold: float = DEFAULT_THRESHOLD,
) -> Optional[RecognitionResult]:
    """Brute-force nearest sample; the ``k = 1`` case of ``knn_classify``."""
    return knn_classify(features, library, k=1, threshold=threshold)


def classify(
    features: np.ndarray,
    library: GestureLibrary,
    codebook: Optional[Codebook],
    mode: RecognizerMode = RecognizerMode.CODEBOOK,
    k: int = DEFAULT_K,
    threshold: float = DEFAULT_THRESHOLD,
    fallback: bool = True,
) -> Optional[RecognitionResult]:
    """Classify one feature vector.

    Codebook mode matches against class means first and, when ``fallback``
    is set, retries with k-NN if the codebook accepts nothing. k-NN mode
    searches the raw samples directly.
    """
    if mode is RecognizerMode.CODEBOOK:
        if codebook is not None:
            result = match_codebook(features, codebook)
            if result is not None:
                return result
        if not fallback:
            return None

    return knn_classify(features, library, k=k, threshold=threshold)


__all__ = [
    "DEFAULT_THRESHOLD",
    "DEFAULT_K",
    "Neighbour",
    "euclidean_distance",
    "rank_neighbours",
    "knn_classify",
    "nearest_sample",
    "classify",
]
