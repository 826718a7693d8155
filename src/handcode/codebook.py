"""Codebook construction and nearest-mean matching.

Each class with samples is reduced to a mean feature vector and an
acceptance radius derived from how spread out its own samples are:

    threshold = mu + max(MIN_RADIUS, k_factor * sd)

where ``mu``/``sd`` are the mean and population standard deviation of the
samples' weighted distances to the class mean. Tight classes get a narrow
radius, loosely recorded classes a wide one.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from handcode.types import (
    Codebook,
    CodebookEntry,
    FEATURE_DIM,
    FINGERTIP_INDICES,
    GestureLibrary,
    RecognitionResult,
)

logger = logging.getLogger(__name__)

MIN_SD = 0.01
MIN_RADIUS = 0.05
DEFAULT_K_FACTOR = 2.0


def default_weights(dim: int, tip_weight: float = 2.0, base_weight: float = 1.0) -> np.ndarray:
    """Weight fingertip x/y pairs higher than every other feature."""
    w = np.full(dim, base_weight, dtype=np.float64)
    for idx in FINGERTIP_INDICES:
        xi = idx * 2
        if xi < dim:
            w[xi] = tip_weight
        if xi + 1 < dim:
            w[xi + 1] = tip_weight
    return w


def resolve_weights(weights: Optional[Sequence[float]], dim: int) -> np.ndarray:
    """Use ``weights`` when it matches ``dim``, else the default weighting."""
    if weights is not None:
        w = np.asarray(weights, dtype=np.float64).reshape(-1)
        if w.shape[0] == dim:
            return w
    return default_weights(dim)


def weighted_distance(a: np.ndarray, b: np.ndarray, w: np.ndarray) -> float:
    """``sqrt(sum(w * (a - b)^2)) / n`` over the shared dimensionality n."""
    n = a.shape[0]
    d = a - b
    return float(np.sqrt(np.sum(w * d * d)) / n)


def build_codebook(
    library: GestureLibrary,
    weights: Optional[Sequence[float]] = None,
    k_factor: float = DEFAULT_K_FACTOR,
) -> Codebook:
    """Build a codebook for every class of ``library`` that has samples.

    Args:
        library: Gesture library snapshot.
        weights: Optional feature weighting; ignored for classes whose
            dimensionality it does not match.
        k_factor: Threshold looseness multiplier.

    Returns:
        A new Codebook. Classes without usable samples are left out.
    """
    entries: List[CodebookEntry] = []
    dim = 0

    for gesture_class in library:
        if not gesture_class.samples:
            continue

        dim = gesture_class.samples[0].dim
        feats = gesture_class.feature_matrix()
        skipped = len(gesture_class.samples) - feats.shape[0]
        if skipped:
            logger.warning(
                "Class %s: skipped %d sample(s) with dimension != %d",
                gesture_class.name, skipped, dim,
            )

        mean = feats.mean(axis=0)
        sigma = feats.std(axis=0)
        w = resolve_weights(weights, dim)

        dists = np.array([weighted_distance(f, mean, w) for f in feats])
        mu = float(dists.mean())
        sd = max(float(dists.std()), MIN_SD)
        threshold = mu + max(MIN_RADIUS, k_factor * sd)

        entries.append(CodebookEntry(
            class_id=gesture_class.id,
            class_code=gesture_class.code,
            class_name=gesture_class.name,
            mean=mean,
            sigma=sigma,
            threshold=threshold,
            sample_distances=tuple(float(d) for d in dists),
        ))

    codebook = Codebook(
        entries=tuple(entries),
        weights=resolve_weights(weights, dim or FEATURE_DIM),
    )
    logger.debug(
        "Built codebook: %d entries, k_factor=%.2f", len(codebook.entries), k_factor,
    )
    return codebook


def match_codebook(features: np.ndarray, codebook: Codebook) -> Optional[RecognitionResult]:
    """Find the nearest class mean and accept it against its own threshold.

    Entries whose dimensionality differs from ``features`` are skipped.

    Returns:
        RecognitionResult for the nearest class when within its threshold,
        otherwise None.
    """
    dim = features.shape[0]
    w = resolve_weights(codebook.weights, dim)

    best: Optional[CodebookEntry] = None
    best_dist = float("inf")
    for entry in codebook.entries:
        if entry.mean.shape[0] != dim:
            continue
        d = weighted_distance(features, entry.mean, w)
        if d < best_dist:
            best, best_dist = entry, d

    if best is None or best_dist > best.threshold:
        return None

    return RecognitionResult(
        class_id=best.class_id,
        class_code=best.class_code,
        class_name=best.class_name,
        distance=best_dist,
    )


__all__ = [
    "MIN_SD",
    "MIN_RADIUS",
    "DEFAULT_K_FACTOR",
    "default_weights",
    "resolve_weights",
    "weighted_distance",
    "build_codebook",
    "match_codebook",
]
