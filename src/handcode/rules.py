"""Rule-based gesture detection from finger geometry.

Needs no recorded samples, so it can label poses before any library exists.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

import numpy as np

from handcode.features import as_landmark_array
from handcode.types import HandLandmarkIndex, LANDMARK_COUNT, Point2


class RuleGesture(Enum):
    """Gestures the rule-based detector can report."""

    NONE = "none"
    OPEN_PALM = "open_palm"
    FIST = "fist"
    PINCH = "pinch"
    POINT = "point"
    VICTORY = "victory"


# (mcp, pip, tip) per non-thumb finger.
_FINGERS = (
    (HandLandmarkIndex.INDEX_FINGER_MCP, HandLandmarkIndex.INDEX_FINGER_PIP, HandLandmarkIndex.INDEX_FINGER_TIP),
    (HandLandmarkIndex.MIDDLE_FINGER_MCP, HandLandmarkIndex.MIDDLE_FINGER_PIP, HandLandmarkIndex.MIDDLE_FINGER_TIP),
    (HandLandmarkIndex.RING_FINGER_MCP, HandLandmarkIndex.RING_FINGER_PIP, HandLandmarkIndex.RING_FINGER_TIP),
    (HandLandmarkIndex.PINKY_MCP, HandLandmarkIndex.PINKY_PIP, HandLandmarkIndex.PINKY_TIP),
)


def _dist(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.hypot(*(a - b)))


class RuleBasedDetector:
    """Classify a pose as one of RuleGesture from finger extension.

    A finger counts as extended when its MCP→tip distance exceeds the
    MCP→PIP distance by ``extension_ratio`` and ``min_reach`` palm lengths.
    Thumb and index tips closer than ``pinch_ratio`` palm lengths is a pinch.
    Ambiguous finger combinations keep the previous frame's gesture.

    Args:
        extension_ratio: Tip/PIP distance ratio for an extended finger.
        min_reach: Minimum MCP→tip distance in palm lengths.
        pinch_ratio: Maximum thumb-index tip distance in palm lengths.
    """

    def __init__(
        self,
        extension_ratio: float = 1.2,
        min_reach: float = 0.7,
        pinch_ratio: float = 0.4,
    ):
        self._extension_ratio = extension_ratio
        self._min_reach = min_reach
        self._pinch_ratio = pinch_ratio
        self._last = RuleGesture.NONE

    def detect(self, landmarks) -> Tuple[RuleGesture, Optional[Point2]]:
        """Detect the gesture of one pose.

        Returns:
            Tuple of (gesture, anchor). The anchor is the index tip while
            pinching and the middle-finger MCP otherwise; None (with
            RuleGesture.NONE) for a missing or malformed pose.
        """
        points = as_landmark_array(landmarks, LANDMARK_COUNT)
        if points is None:
            return RuleGesture.NONE, None

        scale = _dist(points[HandLandmarkIndex.WRIST], points[HandLandmarkIndex.MIDDLE_FINGER_MCP])
        index, middle, ring, pinky = (
            self._is_extended(points, mcp, pip, tip, scale) for mcp, pip, tip in _FINGERS
        )
        pinch = _dist(
            points[HandLandmarkIndex.THUMB_TIP], points[HandLandmarkIndex.INDEX_FINGER_TIP],
        ) < scale * self._pinch_ratio

        if pinch:
            gesture = RuleGesture.PINCH
        elif index and middle and ring and pinky:
            gesture = RuleGesture.OPEN_PALM
        elif not (index or middle or ring or pinky):
            gesture = RuleGesture.FIST
        elif index and not (middle or ring or pinky):
            gesture = RuleGesture.POINT
        elif index and middle and not (ring or pinky):
            gesture = RuleGesture.VICTORY
        else:
            gesture = self._last

        anchor_idx = HandLandmarkIndex.INDEX_FINGER_TIP if pinch else HandLandmarkIndex.MIDDLE_FINGER_MCP
        anchor = Point2(float(points[anchor_idx][0]), float(points[anchor_idx][1]))
        self._last = gesture
        return gesture, anchor

    def reset(self) -> None:
        self._last = RuleGesture.NONE

    def _is_extended(self, points: np.ndarray, mcp: int, pip: int, tip: int, scale: float) -> bool:
        reach = _dist(points[mcp], points[tip])
        return reach > _dist(points[mcp], points[pip]) * self._extension_ratio and reach > scale * self._min_reach


__all__ = ["RuleGesture", "RuleBasedDetector"]
