"""Tests for the rule-based detector."""

import pytest

from helpers import FIST, OPEN_PALM, PINCH, POINT, VICTORY, replace_landmarks, transform

from handcode.rules import RuleBasedDetector, RuleGesture
from handcode.types import Point2

# Only the ring finger extended: no rule covers it.
RING_ONLY = replace_landmarks(FIST, {14: (0.57, 0.52), 15: (0.575, 0.45), 16: (0.58, 0.39)})


@pytest.mark.parametrize(
    "pose, expected",
    [
        (OPEN_PALM, RuleGesture.OPEN_PALM),
        (FIST, RuleGesture.FIST),
        (POINT, RuleGesture.POINT),
        (VICTORY, RuleGesture.VICTORY),
        (PINCH, RuleGesture.PINCH),
    ],
)
def test_basic_gestures(pose, expected):
    gesture, _ = RuleBasedDetector().detect(pose)
    assert gesture is expected


def test_scale_and_translation_invariant():
    gesture, _ = RuleBasedDetector().detect(transform(POINT, scale=480.0, offset=(30.0, 12.0)))
    assert gesture is RuleGesture.POINT


def test_anchor_is_middle_mcp():
    _, anchor = RuleBasedDetector().detect(OPEN_PALM)
    assert anchor == Point2(0.5, 0.6)


def test_pinch_anchor_is_index_tip():
    _, anchor = RuleBasedDetector().detect(PINCH)
    assert anchor == Point2(0.42, 0.39)


def test_ambiguous_pose_keeps_previous():
    detector = RuleBasedDetector()
    assert detector.detect(RING_ONLY)[0] is RuleGesture.NONE

    detector.detect(FIST)
    assert detector.detect(RING_ONLY)[0] is RuleGesture.FIST

    detector.reset()
    assert detector.detect(RING_ONLY)[0] is RuleGesture.NONE


@pytest.mark.parametrize("pose", [None, [], OPEN_PALM[:5]])
def test_malformed_pose(pose):
    assert RuleBasedDetector().detect(pose) == (RuleGesture.NONE, None)
