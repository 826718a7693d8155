"""Interactive sample recording for one gesture class."""

from __future__ import annotations

import logging
from typing import List, Optional

from handcode.features import (
    as_landmark_array,
    compute_gesture_code,
    compute_sample_hash,
    extract_features,
)
from handcode.types import GestureClass, LANDMARK_COUNT, Sample

logger = logging.getLogger(__name__)


class SampleRecorder:
    """Collects feature samples for a class while recording is on.

    Args:
        class_id: Identifier of the class being recorded.
        name: Display name of the class.

    Example:
        >>> recorder = SampleRecorder("7", "Wave")
        >>> recorder.start()
        >>> for pose in poses:
        ...     recorder.record(pose)
        >>> recorder.stop()
        >>> library.add_class(recorder.to_class())
    """

    def __init__(self, class_id: str, name: str):
        self.class_id = class_id
        self.name = name
        self.code = compute_gesture_code(class_id, name)
        self._recording = False
        self._samples: List[Sample] = []

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def samples(self) -> List[Sample]:
        return list(self._samples)

    def start(self) -> None:
        self._recording = True

    def stop(self) -> None:
        self._recording = False
        logger.debug("Recorder %s stopped with %d samples", self.name, len(self._samples))

    def record(self, landmarks) -> Optional[Sample]:
        """Turn one pose into a Sample if recording.

        Returns:
            The new sample, or None when not recording or the pose is
            malformed.
        """
        if not self._recording:
            return None

        points = as_landmark_array(landmarks, LANDMARK_COUNT)
        if points is None:
            return None

        features = extract_features(points)
        sample = Sample(
            class_id=self.class_id,
            class_name=self.name,
            class_code=self.code,
            features=features,
            sample_hash=compute_sample_hash(features),
        )
        self._samples.append(sample)
        return sample

    def to_class(self) -> GestureClass:
        return GestureClass(id=self.class_id, name=self.name, code=self.code, samples=list(self._samples))

    def clear(self) -> None:
        self._samples = []


__all__ = ["SampleRecorder"]
