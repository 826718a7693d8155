"""Gesture recognition domain types.

Poses, samples, the gesture library and the derived codebook.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np


class HandLandmarkIndex:
    """MediaPipe hand landmark indices.

    21 landmarks per hand: the wrist, then four joints for each of the
    thumb, index, middle, ring and pinky fingers.

    Example:
        >>> thumb_tip = pose[HandLandmarkIndex.THUMB_TIP]
        >>> index_tip = pose[HandLandmarkIndex.INDEX_FINGER_TIP]
    """

    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_FINGER_MCP = 5
    INDEX_FINGER_PIP = 6
    INDEX_FINGER_DIP = 7
    INDEX_FINGER_TIP = 8
    MIDDLE_FINGER_MCP = 9
    MIDDLE_FINGER_PIP = 10
    MIDDLE_FINGER_DIP = 11
    MIDDLE_FINGER_TIP = 12
    RING_FINGER_MCP = 13
    RING_FINGER_PIP = 14
    RING_FINGER_DIP = 15
    RING_FINGER_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


LANDMARK_COUNT = 21
FEATURE_DIM = 2 * LANDMARK_COUNT

# Wrist + the four finger base joints; their mean is the palm center.
PALM_BASE_INDICES: Tuple[int, ...] = (
    HandLandmarkIndex.WRIST,
    HandLandmarkIndex.INDEX_FINGER_MCP,
    HandLandmarkIndex.MIDDLE_FINGER_MCP,
    HandLandmarkIndex.RING_FINGER_MCP,
    HandLandmarkIndex.PINKY_MCP,
)

FINGERTIP_INDICES: Tuple[int, ...] = (
    HandLandmarkIndex.THUMB_TIP,
    HandLandmarkIndex.INDEX_FINGER_TIP,
    HandLandmarkIndex.MIDDLE_FINGER_TIP,
    HandLandmarkIndex.RING_FINGER_TIP,
    HandLandmarkIndex.PINKY_TIP,
)


class RecognizerMode(Enum):
    """Classification strategy used by GestureRecognizer."""

    CODEBOOK = "codebook"
    KNN = "knn"

    @classmethod
    def from_string(cls, value) -> "RecognizerMode":
        """Parse a mode name ("codebook" or "knn"), case-insensitive.

        Raises:
            ValueError: If the name is not a known mode.
        """
        if isinstance(value, cls):
            return value
        normalized = str(value).strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        valid = ", ".join(m.value for m in cls)
        raise ValueError(f"Unknown recognizer mode: {value!r} (expected one of: {valid})")


@dataclass(frozen=True)
class Point2:
    """A single landmark coordinate."""

    x: float
    y: float


@dataclass(frozen=True, eq=False)
class Sample:
    """One labeled feature vector, owned by its GestureClass.

    Attributes:
        class_id: Identifier of the owning class.
        class_name: Display name of the owning class.
        class_code: Code of the owning class (see compute_gesture_code).
        features: Normalized feature vector, shape (2 * landmarks,).
        sample_hash: Content hash of the features.
        source_path: Where the sample was loaded from ("" if recorded live).
    """

    class_id: str
    class_name: str
    class_code: str
    features: np.ndarray
    sample_hash: str = ""
    source_path: str = ""

    @property
    def dim(self) -> int:
        return int(self.features.shape[0])


@dataclass
class GestureClass:
    """A named gesture class and its samples.

    ``code`` is derived from ``(id, name)`` once and never changes; samples
    may be appended while recording.
    """

    id: str
    name: str
    code: str
    samples: List[Sample] = field(default_factory=list)

    @classmethod
    def create(cls, id: str, name: str, samples: Optional[List[Sample]] = None) -> "GestureClass":
        """Create a class with its code derived from (id, name)."""
        from handcode.features import compute_gesture_code

        return cls(id=id, name=name, code=compute_gesture_code(id, name), samples=list(samples or []))

    def add_sample(self, sample: Sample) -> None:
        self.samples.append(sample)

    def feature_matrix(self) -> np.ndarray:
        """Stack sample features that share the first sample's dimension."""
        if not self.samples:
            return np.empty((0, 0), dtype=np.float64)
        dim = self.samples[0].dim
        rows = [s.features for s in self.samples if s.dim == dim]
        return np.vstack(rows).astype(np.float64)


class GestureLibrary:
    """Gesture classes indexed by code and by name.

    Every code in ``by_name`` exists in ``by_code`` and vice versa; both
    indices are only written through ``add_class`` / ``remove_class``.

    Example:
        >>> lib = GestureLibrary()
        >>> palm = lib.add_class(GestureClass.create("1", "OpenPalm"))
        >>> lib.code_for("OpenPalm") == palm.code
        True
    """

    def __init__(self, classes: Optional[List[GestureClass]] = None):
        self.by_code: Dict[str, GestureClass] = {}
        self.by_name: Dict[str, str] = {}
        for gesture_class in classes or []:
            self.add_class(gesture_class)

    def add_class(self, gesture_class: GestureClass) -> GestureClass:
        """Insert or replace a class, keeping both indices consistent."""
        previous = self.by_code.get(gesture_class.code)
        if previous is not None and self.by_name.get(previous.name) == previous.code:
            del self.by_name[previous.name]

        # A name now pointing at a different code drops the stale class.
        stale_code = self.by_name.get(gesture_class.name)
        if stale_code is not None and stale_code != gesture_class.code:
            self.by_code.pop(stale_code, None)

        self.by_code[gesture_class.code] = gesture_class
        self.by_name[gesture_class.name] = gesture_class.code
        return gesture_class

    def remove_class(self, code: str) -> Optional[GestureClass]:
        gesture_class = self.by_code.pop(code, None)
        if gesture_class is not None and self.by_name.get(gesture_class.name) == code:
            del self.by_name[gesture_class.name]
        return gesture_class

    def add_sample(self, sample: Sample) -> GestureClass:
        """Append a sample to its class, creating the class if needed."""
        gesture_class = self.by_code.get(sample.class_code)
        if gesture_class is None:
            gesture_class = self.add_class(GestureClass(
                id=sample.class_id,
                name=sample.class_name,
                code=sample.class_code,
            ))
        gesture_class.add_sample(sample)
        return gesture_class

    def get(self, code: str) -> Optional[GestureClass]:
        return self.by_code.get(code)

    def code_for(self, name: str) -> Optional[str]:
        return self.by_name.get(name)

    @property
    def sample_count(self) -> int:
        return sum(len(c.samples) for c in self.by_code.values())

    def __len__(self) -> int:
        return len(self.by_code)

    def __iter__(self) -> Iterator[GestureClass]:
        return iter(self.by_code.values())

    def __contains__(self, code: object) -> bool:
        return code in self.by_code


@dataclass(frozen=True, eq=False)
class CodebookEntry:
    """Per-class statistics derived from the class samples.

    Attributes:
        class_id: Class identifier.
        class_code: Class code.
        class_name: Class name.
        mean: Mean feature vector.
        sigma: Per-feature population standard deviation.
        threshold: Acceptance radius (weighted distance to ``mean``).
        sample_distances: Weighted distance of each sample to ``mean``.
    """

    class_id: str
    class_code: str
    class_name: str
    mean: np.ndarray
    sigma: Optional[np.ndarray]
    threshold: float
    sample_distances: Tuple[float, ...] = ()


@dataclass(frozen=True, eq=False)
class Codebook:
    """All codebook entries of one library snapshot plus the shared weights."""

    entries: Tuple[CodebookEntry, ...]
    weights: np.ndarray

    def entry_for(self, code: str) -> Optional[CodebookEntry]:
        for entry in self.entries:
            if entry.class_code == code:
                return entry
        return None

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class RecognitionResult:
    """A successful classification. ``None`` stands for "nothing recognized"."""

    class_id: str
    class_code: str
    class_name: str
    distance: float


__all__ = [
    "HandLandmarkIndex",
    "LANDMARK_COUNT",
    "FEATURE_DIM",
    "PALM_BASE_INDICES",
    "FINGERTIP_INDICES",
    "RecognizerMode",
    "Point2",
    "Sample",
    "GestureClass",
    "GestureLibrary",
    "CodebookEntry",
    "Codebook",
    "RecognitionResult",
]
