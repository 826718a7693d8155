"""Shared test helpers for handcode tests.

All poses are synthetic 21-point hands in image coordinates (y grows
downward). No camera or landmark model needed.
"""

import numpy as np

from handcode.features import compute_sample_hash, extract_features
from handcode.types import GestureClass, Sample

OPEN_PALM = np.array([
    (0.50, 0.90),                                             # wrist
    (0.42, 0.85), (0.36, 0.78), (0.31, 0.72), (0.27, 0.66),   # thumb
    (0.44, 0.62), (0.43, 0.52), (0.425, 0.45), (0.42, 0.39),  # index
    (0.50, 0.60), (0.50, 0.49), (0.50, 0.42), (0.50, 0.35),   # middle
    (0.56, 0.62), (0.57, 0.52), (0.575, 0.45), (0.58, 0.39),  # ring
    (0.61, 0.66), (0.63, 0.57), (0.645, 0.49), (0.66, 0.42),  # pinky
])

_CURLED = {
    # index
    6: (0.44, 0.55), 7: (0.45, 0.60), 8: (0.45, 0.66),
    # middle
    10: (0.50, 0.53), 11: (0.50, 0.59), 12: (0.50, 0.65),
    # ring
    14: (0.56, 0.55), 15: (0.555, 0.61), 16: (0.55, 0.66),
    # pinky
    18: (0.61, 0.60), 19: (0.605, 0.64), 20: (0.60, 0.68),
}


def replace_landmarks(base: np.ndarray, overrides: dict) -> np.ndarray:
    pose = base.copy()
    for idx, xy in overrides.items():
        pose[idx] = xy
    return pose


FIST = replace_landmarks(OPEN_PALM, {**_CURLED, 3: (0.35, 0.74), 4: (0.33, 0.76)})
POINT = replace_landmarks(FIST, {6: (0.43, 0.52), 7: (0.425, 0.45), 8: (0.42, 0.39)})
VICTORY = replace_landmarks(POINT, {10: (0.50, 0.49), 11: (0.50, 0.42), 12: (0.50, 0.35)})
PINCH = replace_landmarks(OPEN_PALM, {3: (0.36, 0.50), 4: (0.41, 0.40)})


def transform(pose: np.ndarray, scale: float = 1.0, offset=(0.0, 0.0), angle: float = 0.0) -> np.ndarray:
    """Rotate about the origin, scale, then translate every landmark."""
    c, s = np.cos(angle), np.sin(angle)
    rot = np.array([[c, -s], [s, c]])
    return (pose @ rot.T) * scale + np.asarray(offset)


def rotate_about_wrist(pose: np.ndarray, angle: float) -> np.ndarray:
    wrist = pose[0]
    return transform(pose - wrist, angle=angle) + wrist


def make_sample(gesture_class: GestureClass, features, source_path: str = "") -> Sample:
    features = np.asarray(features, dtype=np.float64)
    return Sample(
        class_id=gesture_class.id,
        class_name=gesture_class.name,
        class_code=gesture_class.code,
        features=features,
        sample_hash=compute_sample_hash(features),
        source_path=source_path,
    )


def make_class(class_id: str, name: str, vectors) -> GestureClass:
    """Build a GestureClass whose samples are the given feature vectors."""
    gesture_class = GestureClass.create(class_id, name)
    for vec in vectors:
        gesture_class.add_sample(make_sample(gesture_class, vec))
    return gesture_class


def jittered_features(pose: np.ndarray, count: int, seed: int, noise: float = 0.002):
    """Feature vectors of ``pose`` with small Gaussian landmark noise."""
    rng = np.random.default_rng(seed)
    return [extract_features(pose + rng.normal(0.0, noise, pose.shape)) for _ in range(count)]
