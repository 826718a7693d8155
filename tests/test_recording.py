"""Tests for SampleRecorder."""

import numpy as np

from helpers import OPEN_PALM, transform

from handcode.config import RecognizerConfig
from handcode.features import compute_gesture_code, extract_features
from handcode.recognizer import GestureRecognizer
from handcode.recording import SampleRecorder
from handcode.types import GestureLibrary


def test_ignores_frames_until_started():
    recorder = SampleRecorder("7", "Wave")
    assert recorder.record(OPEN_PALM) is None
    assert recorder.samples == []


def test_records_while_started():
    recorder = SampleRecorder("7", "Wave")
    recorder.start()
    sample = recorder.record(OPEN_PALM)
    recorder.record(OPEN_PALM[:10])
    recorder.stop()
    recorder.record(OPEN_PALM)

    assert not recorder.is_recording
    assert len(recorder.samples) == 1
    assert sample.class_code == compute_gesture_code("7", "Wave")
    np.testing.assert_allclose(sample.features, extract_features(OPEN_PALM))
    assert len(sample.sample_hash) == 32


def test_to_class_and_clear():
    recorder = SampleRecorder("7", "Wave")
    recorder.start()
    for scale in (1.0, 2.0, 3.0):
        recorder.record(transform(OPEN_PALM, scale=scale))

    gesture_class = recorder.to_class()
    assert gesture_class.name == "Wave"
    assert len(gesture_class.samples) == 3

    recorder.clear()
    assert recorder.samples == []
    assert len(gesture_class.samples) == 3


def test_recorded_class_is_recognized():
    recorder = SampleRecorder("7", "Wave")
    recorder.start()
    for offset in ((0.0, 0.0), (0.1, 0.0), (0.0, 0.2)):
        recorder.record(transform(OPEN_PALM, offset=offset))

    recognizer = GestureRecognizer(RecognizerConfig(min_streak=1))
    recognizer.set_library(GestureLibrary([recorder.to_class()]))

    result = recognizer.recognize_from_landmarks(transform(OPEN_PALM, scale=3.0))
    assert result is not None
    assert result.class_code == recorder.code
