"""handcode - Real-time hand gesture recognition from 2D landmarks.

Classifies 21-point hand poses against a library of recorded gesture
samples using per-class codebook thresholds, a k-NN fallback and
streak debouncing.

Quick Start:
    >>> from handcode import GestureRecognizer, load_library
    >>> recognizer = GestureRecognizer()
    >>> recognizer.set_library(load_library("./gestures"))
    >>> recognizer.on(code, lambda r: print(f"{r.class_name} ({r.distance:.3f})"))
    >>> result = recognizer.recognize_from_landmarks(landmarks)
"""

from handcode.types import (
    HandLandmarkIndex,
    LANDMARK_COUNT,
    FEATURE_DIM,
    RecognizerMode,
    Point2,
    Sample,
    GestureClass,
    GestureLibrary,
    CodebookEntry,
    Codebook,
    RecognitionResult,
)
from handcode.features import extract_features, compute_gesture_code, compute_sample_hash
from handcode.codebook import build_codebook, match_codebook, weighted_distance, default_weights
from handcode.classifier import knn_classify, nearest_sample, classify
from handcode.smoothing import FeatureWindow, StreakDebouncer
from handcode.config import RecognizerConfig
from handcode.recognizer import GestureRecognizer
from handcode.recording import SampleRecorder
from handcode.rules import RuleBasedDetector, RuleGesture
from handcode.persistence import load_library, save_library, save_class, verify_class

__all__ = [
    "HandLandmarkIndex",
    "LANDMARK_COUNT",
    "FEATURE_DIM",
    "RecognizerMode",
    "Point2",
    "Sample",
    "GestureClass",
    "GestureLibrary",
    "CodebookEntry",
    "Codebook",
    "RecognitionResult",
    "extract_features",
    "compute_gesture_code",
    "compute_sample_hash",
    "build_codebook",
    "match_codebook",
    "weighted_distance",
    "default_weights",
    "knn_classify",
    "nearest_sample",
    "classify",
    "FeatureWindow",
    "StreakDebouncer",
    "RecognizerConfig",
    "GestureRecognizer",
    "SampleRecorder",
    "RuleBasedDetector",
    "RuleGesture",
    "load_library",
    "save_library",
    "save_class",
    "verify_class",
]
