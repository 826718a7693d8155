"""Pose to feature-vector extraction.

A pose is centred on the palm and divided by the wrist to middle-MCP
distance, so the resulting vector ignores where the hand is in the frame and
how large it appears. In-plane rotation is kept: pointing left and pointing
right are different gestures.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Optional

import numpy as np

from handcode.types import (
    HandLandmarkIndex,
    LANDMARK_COUNT,
    PALM_BASE_INDICES,
)

MIN_SCALE = 1e-4


def as_landmark_array(pose: Any, landmark_count: int = LANDMARK_COUNT) -> Optional[np.ndarray]:
    """Coerce a pose into an ``(N, 2)`` float array.

    Accepts a sequence of Point2 (or anything with ``x``/``y``), of
    ``{"x": .., "y": ..}`` mappings, of ``(x, y)`` / ``(x, y, z)`` tuples,
    or an array of shape ``(N, 2|3)``.

    Returns:
        The array, or None when the pose is missing, has the wrong number
        of landmarks, or contains non-finite coordinates.
    """
    if pose is None:
        return None

    if isinstance(pose, np.ndarray):
        arr = pose
    else:
        try:
            points = list(pose)
        except TypeError:
            return None
        if len(points) != landmark_count:
            return None
        if points and isinstance(points[0], dict):
            try:
                arr = np.array([(p["x"], p["y"]) for p in points], dtype=np.float64)
            except (KeyError, TypeError, ValueError):
                return None
        elif points and hasattr(points[0], "x"):
            try:
                arr = np.array([(p.x, p.y) for p in points], dtype=np.float64)
            except (AttributeError, TypeError, ValueError):
                return None
        else:
            try:
                arr = np.asarray(points, dtype=np.float64)
            except (TypeError, ValueError):
                return None

    if arr.ndim != 2 or arr.shape[0] != landmark_count or arr.shape[1] < 2:
        return None

    arr = np.asarray(arr[:, :2], dtype=np.float64)
    if not np.all(np.isfinite(arr)):
        return None
    return arr


def palm_center(points: np.ndarray) -> np.ndarray:
    """Unweighted mean of the wrist and the four finger base joints."""
    return points[list(PALM_BASE_INDICES)].mean(axis=0)


def scale_reference(points: np.ndarray) -> float:
    """Wrist to middle-finger MCP distance, floored at ``MIN_SCALE``."""
    wrist = points[HandLandmarkIndex.WRIST]
    middle_mcp = points[HandLandmarkIndex.MIDDLE_FINGER_MCP]
    return max(MIN_SCALE, float(np.hypot(*(wrist - middle_mcp))))


def extract_features(pose: Any, landmark_count: int = LANDMARK_COUNT) -> np.ndarray:
    """Convert one pose into a normalized feature vector.

    Args:
        pose: Landmarks in any form accepted by ``as_landmark_array``.
            Validation is the caller's job; an invalid pose raises.
        landmark_count: Expected number of landmarks.

    Returns:
        Array of shape ``(2 * landmark_count,)`` laid out as x0, y0, x1, y1, ...

    Raises:
        ValueError: If the pose cannot be read as a landmark array.
    """
    points = as_landmark_array(pose, landmark_count)
    if points is None:
        raise ValueError(f"pose is not a sequence of {landmark_count} finite 2D landmarks")

    center = palm_center(points)
    scale = scale_reference(points)
    return ((points - center) / scale).reshape(-1)


def compute_gesture_code(class_id: str, name: str) -> str:
    """Stable class code: hex MD5 of ``"{id}:{name}"``."""
    return hashlib.md5(f"{class_id}:{name}".encode("utf-8")).hexdigest()


def compute_sample_hash(features) -> str:
    """Hex MD5 of the JSON-serialised feature list."""
    values = [float(v) for v in np.asarray(features, dtype=np.float64).reshape(-1)]
    payload = json.dumps(values, separators=(",", ":"))
    return hashlib.md5(payload.encode("utf-8")).hexdigest()


__all__ = [
    "MIN_SCALE",
    "as_landmark_array",
    "palm_center",
    "scale_reference",
    "extract_features",
    "compute_gesture_code",
    "compute_sample_hash",
]
