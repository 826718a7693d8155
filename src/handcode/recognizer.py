"""GestureRecognizer: per-frame gesture recognition over a gesture library.

Per frame: landmarks → features → sliding window → codebook (or k-NN)
→ streak debounce → observer callback.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Callable, Dict, Optional, Sequence

import numpy as np

from handcode.classifier import classify
from handcode.codebook import build_codebook
from handcode.config import RecognizerConfig
from handcode.features import as_landmark_array, extract_features
from handcode.smoothing import FeatureWindow, StreakDebouncer
from handcode.types import (
    Codebook,
    GestureLibrary,
    LANDMARK_COUNT,
    RecognitionResult,
    RecognizerMode,
)

logger = logging.getLogger(__name__)

GestureCallback = Callable[[RecognitionResult], Any]


class GestureRecognizer:
    """Recognizes gestures from a stream of hand poses.

    All state (codebook, window, streak, observers) belongs to one instance,
    so one recognizer per tracked hand works without interference. Not
    thread-safe: call it from a single loop.

    Args:
        config: Recognizer options (default: RecognizerConfig()).

    Example:
        >>> recognizer = GestureRecognizer()
        >>> recognizer.set_library(library)
        >>> recognizer.on(library.code_for("OpenPalm"), lambda r: print(r.class_name))
        >>> for pose in poses:
        ...     result = recognizer.recognize_from_landmarks(pose)
    """

    def __init__(self, config: Optional[RecognizerConfig] = None):
        # Own copy; the setters below mutate it.
        self._config = replace(config) if config is not None else RecognizerConfig()
        self._library: Optional[GestureLibrary] = None
        self._codebook: Optional[Codebook] = None
        self._window = FeatureWindow(self._config.window_size)
        self._debouncer = StreakDebouncer(self._config.min_streak)
        self._observers: Dict[str, GestureCallback] = {}

    # ========== State ==========

    @property
    def config(self) -> RecognizerConfig:
        return self._config

    @property
    def library(self) -> Optional[GestureLibrary]:
        return self._library

    @property
    def codebook(self) -> Optional[Codebook]:
        return self._codebook

    @property
    def pending(self) -> Optional[RecognitionResult]:
        """Latest match still waiting for streak confirmation, if any."""
        return self._debouncer.pending

    @property
    def streak(self) -> int:
        return self._debouncer.streak

    # ========== Configuration ==========

    def set_library(self, library: GestureLibrary) -> None:
        """Replace the library, rebuild the codebook and reset smoothing."""
        self._library = library
        self._rebuild_codebook()
        self._debouncer.reset()
        self._window.clear()
        logger.info(
            "Library set: %d classes, %d samples, %d codebook entries",
            len(library), library.sample_count, len(self._codebook),
        )

    def set_threshold(self, threshold: float) -> None:
        self._config.threshold = float(threshold)

    def set_mode(self, mode) -> None:
        """Select "codebook" or "knn".

        Raises:
            ValueError: If ``mode`` is not a known mode.
        """
        self._config.mode = RecognizerMode.from_string(mode)

    def set_k(self, k: int) -> None:
        self._config.k = max(1, int(k))

    def set_window_size(self, size: int) -> None:
        """Change the averaging window; the partially filled buffer is dropped."""
        self._config.window_size = max(1, int(size))
        self._window.resize(self._config.window_size)

    def set_min_streak(self, min_streak: int) -> None:
        self._config.min_streak = max(1, int(min_streak))
        self._debouncer.min_streak = self._config.min_streak

    def set_weights(self, weights: Optional[Sequence[float]]) -> None:
        self._config.weights = [float(w) for w in weights] if weights is not None else None
        self._rebuild_codebook()

    def set_k_factor(self, k_factor: float) -> None:
        self._config.k_factor = float(k_factor)
        self._rebuild_codebook()

    def set_fallback(self, enabled: bool) -> None:
        self._config.fallback = bool(enabled)

    def on(self, code: str, callback: GestureCallback) -> None:
        """Register the observer for a class code, replacing any previous one."""
        self._observers[code] = callback

    def off(self, code: str) -> None:
        self._observers.pop(code, None)

    def reset(self) -> None:
        """Forget the sliding window and the current streak."""
        self._window.clear()
        self._debouncer.reset()

    # ========== Recognition ==========

    def recognize_from_landmarks(self, landmarks) -> Optional[RecognitionResult]:
        """Process one frame of landmarks.

        Args:
            landmarks: 21 hand landmarks, or None when no hand was found.

        Returns:
            The confirmed RecognitionResult, or None when nothing was
            recognized, the match is not yet confirmed, no library is set,
            or the pose is malformed.
        """
        if self._library is None:
            return None

        points = as_landmark_array(landmarks, LANDMARK_COUNT)
        if points is None:
            return None

        return self._process(extract_features(points))

    def recognize_from_features(self, features) -> Optional[RecognitionResult]:
        """Process one frame given an already extracted feature vector."""
        if self._library is None or features is None:
            return None

        try:
            vec = np.asarray(features, dtype=np.float64).reshape(-1)
        except (TypeError, ValueError):
            return None
        if vec.size == 0 or not np.all(np.isfinite(vec)):
            return None

        return self._process(vec)

    def _process(self, features: np.ndarray) -> Optional[RecognitionResult]:
        smoothed = self._window.push(features)

        match = classify(
            smoothed,
            self._library,
            self._codebook,
            mode=self._config.mode,
            k=self._config.k,
            threshold=self._config.threshold,
            fallback=self._config.fallback,
        )

        confirmed = self._debouncer.update(match)
        if confirmed is None:
            return None

        logger.debug(
            "Confirmed %s (distance=%.4f, streak=%d)",
            confirmed.class_name, confirmed.distance, self._debouncer.streak,
        )
        callback = self._observers.get(confirmed.class_code)
        if callback is not None:
            callback(confirmed)
        return confirmed

    def _rebuild_codebook(self) -> None:
        if self._library is None:
            return
        # Built completely before the swap.
        codebook = build_codebook(
            self._library,
            weights=self._config.weights,
            k_factor=self._config.k_factor,
        )
        self._codebook = codebook


__all__ = ["GestureRecognizer", "GestureCallback"]
