"""Tests for pose feature extraction."""

import numpy as np
import pytest

from helpers import OPEN_PALM, transform

from handcode.features import (
    MIN_SCALE,
    as_landmark_array,
    compute_gesture_code,
    compute_sample_hash,
    extract_features,
    palm_center,
    scale_reference,
)
from handcode.types import FEATURE_DIM, Point2


class TestExtractFeatures:
    def test_dimensionality(self, open_palm):
        feats = extract_features(open_palm)
        assert feats.shape == (FEATURE_DIM,)

    @pytest.mark.parametrize("offset", [(0.0, 0.0), (12.5, -3.0), (-640.0, 480.0)])
    def test_translation_invariance(self, open_palm, offset):
        base = extract_features(open_palm)
        moved = extract_features(transform(open_palm, offset=offset))
        np.testing.assert_allclose(moved, base, atol=1e-9)

    @pytest.mark.parametrize("scale", [0.01, 0.5, 3.0, 1920.0])
    def test_scale_invariance(self, open_palm, scale):
        base = extract_features(open_palm)
        scaled = extract_features(transform(open_palm, scale=scale))
        np.testing.assert_allclose(scaled, base, atol=1e-9)

    def test_rotation_changes_features(self, open_palm):
        """In-plane rotation is signal, not noise."""
        base = extract_features(open_palm)
        rotated = extract_features(transform(open_palm, angle=np.pi / 2))
        assert not np.allclose(rotated, base, atol=1e-3)

    def test_layout_is_interleaved_xy(self, open_palm):
        feats = extract_features(open_palm)
        center = palm_center(open_palm)
        scale = scale_reference(open_palm)
        assert feats[0] == pytest.approx((open_palm[0, 0] - center[0]) / scale)
        assert feats[1] == pytest.approx((open_palm[0, 1] - center[1]) / scale)
        assert feats[40] == pytest.approx((open_palm[20, 0] - center[0]) / scale)
        assert feats[41] == pytest.approx((open_palm[20, 1] - center[1]) / scale)

    def test_palm_center_is_mean_of_base_joints(self, open_palm):
        expected = open_palm[[0, 5, 9, 13, 17]].mean(axis=0)
        np.testing.assert_allclose(palm_center(open_palm), expected)

    def test_degenerate_pose_uses_scale_floor(self):
        """All landmarks on one spot: scale floors instead of dividing by zero."""
        pose = np.full((21, 2), 7.0)
        assert scale_reference(pose) == MIN_SCALE
        feats = extract_features(pose)
        assert np.all(np.isfinite(feats))
        np.testing.assert_allclose(feats, 0.0)

    def test_accepts_point2_and_mappings(self, open_palm):
        points = [Point2(x, y) for x, y in open_palm]
        dicts = [{"x": x, "y": y} for x, y in open_palm]
        expected = extract_features(open_palm)
        np.testing.assert_allclose(extract_features(points), expected)
        np.testing.assert_allclose(extract_features(dicts), expected)

    def test_ignores_z_coordinate(self, open_palm):
        with_z = np.hstack([open_palm, np.linspace(0, 1, 21)[:, None]])
        np.testing.assert_allclose(extract_features(with_z), extract_features(open_palm))

    def test_invalid_pose_raises(self):
        with pytest.raises(ValueError):
            extract_features(OPEN_PALM[:20])


class TestAsLandmarkArray:
    def test_none(self):
        assert as_landmark_array(None) is None

    @pytest.mark.parametrize("count", [0, 5, 20, 22])
    def test_wrong_count(self, count):
        assert as_landmark_array([(0.0, 0.0)] * count) is None

    def test_non_finite(self, open_palm):
        pose = open_palm.copy()
        pose[3, 1] = np.nan
        assert as_landmark_array(pose) is None

    def test_non_numeric(self):
        assert as_landmark_array(["ab"] * 21) is None

    def test_tuples(self, open_palm):
        arr = as_landmark_array([tuple(p) for p in open_palm])
        assert arr.shape == (21, 2)
        assert arr.dtype == np.float64


class TestCodesAndHashes:
    def test_gesture_code_is_deterministic(self):
        assert compute_gesture_code("1", "OpenPalm") == compute_gesture_code("1", "OpenPalm")

    def test_gesture_code_depends_on_id_and_name(self):
        code = compute_gesture_code("1", "OpenPalm")
        assert code != compute_gesture_code("2", "OpenPalm")
        assert code != compute_gesture_code("1", "Fist")

    def test_gesture_code_is_md5_of_id_and_name(self):
        import hashlib

        assert compute_gesture_code("", "Fist") == hashlib.md5(b":Fist").hexdigest()

    def test_sample_hash_tracks_content(self, open_palm):
        feats = extract_features(open_palm)
        assert compute_sample_hash(feats) == compute_sample_hash(feats.copy())
        changed = feats.copy()
        changed[0] += 1e-3
        assert compute_sample_hash(changed) != compute_sample_hash(feats)
