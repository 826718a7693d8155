"""Temporal smoothing for per-frame classification.

Two independent stages:

- FeatureWindow averages the last N feature vectors to damp landmark jitter.
- StreakDebouncer only lets a class through after it has matched on
  ``min_streak`` consecutive classified frames.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Optional

import numpy as np

from handcode.types import RecognitionResult

DEFAULT_MIN_STREAK = 3


class FeatureWindow:
    """Sliding window of recent feature vectors.

    Args:
        size: Window length. ``size <= 1`` disables averaging.

    Example:
        >>> window = FeatureWindow(size=3)
        >>> smoothed = window.push(features)  # raw until 3 frames are buffered
    """

    def __init__(self, size: int = 1):
        self._size = max(1, int(size))
        self._buffer: Deque[np.ndarray] = deque(maxlen=self._size)

    @property
    def size(self) -> int:
        return self._size

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def is_full(self) -> bool:
        return len(self._buffer) == self._size

    def push(self, features: np.ndarray) -> np.ndarray:
        """Add a frame and return the vector the classifier should see.

        Returns:
            The element-wise mean of the window once it is full, otherwise
            ``features`` unchanged.
        """
        if self._size <= 1:
            return features

        # Vectors of another dimensionality cannot be averaged with the buffer.
        if self._buffer and self._buffer[-1].shape != features.shape:
            self._buffer.clear()

        self._buffer.append(features)
        if len(self._buffer) < self._size:
            return features
        return np.mean(np.stack(self._buffer), axis=0)

    def resize(self, size: int) -> None:
        """Change the window length; buffered frames are discarded."""
        self._size = max(1, int(size))
        self._buffer = deque(maxlen=self._size)

    def clear(self) -> None:
        self._buffer.clear()


class StreakDebouncer:
    """Consecutive-match gate over per-frame classification results.

    States are "no candidate" and "candidate C with streak N". A frame that
    matches C increments N, a frame that matches another class restarts at
    1 with the new class, and a frame with no match leaves the state as is.
    Every frame on which N >= ``min_streak`` is confirmed.

    Args:
        min_streak: Consecutive matches required before confirming.
    """

    def __init__(self, min_streak: int = DEFAULT_MIN_STREAK):
        self.min_streak = max(1, int(min_streak))
        self._code: Optional[str] = None
        self._streak = 0
        self._pending: Optional[RecognitionResult] = None

    @property
    def candidate_code(self) -> Optional[str]:
        return self._code

    @property
    def streak(self) -> int:
        return self._streak

    @property
    def pending(self) -> Optional[RecognitionResult]:
        """Latest match for the current candidate that is not yet confirmed."""
        return self._pending

    def update(self, result: Optional[RecognitionResult]) -> Optional[RecognitionResult]:
        """Feed one frame's classification.

        Returns:
            ``result`` when its class is confirmed on this frame, else None.
        """
        if result is None:
            return None

        if result.class_code == self._code:
            self._streak += 1
        else:
            self._code = result.class_code
            self._streak = 1

        if self._streak >= self.min_streak:
            self._pending = None
            return result

        self._pending = result
        return None

    def reset(self) -> None:
        self._code = None
        self._streak = 0
        self._pending = None


__all__ = ["DEFAULT_MIN_STREAK", "FeatureWindow", "StreakDebouncer"]
