"""Shared test fixtures for handcode tests."""

import importlib.util
import sys
from pathlib import Path

import pytest

# Load helpers module from the tests directory using importlib to avoid
# polluting sys.path.
_helpers_path = Path(__file__).resolve().parent / "helpers.py"
_spec = importlib.util.spec_from_file_location("helpers", _helpers_path)
_helpers = importlib.util.module_from_spec(_spec)
sys.modules["helpers"] = _helpers
_spec.loader.exec_module(_helpers)

from helpers import FIST, OPEN_PALM, jittered_features, make_class  # noqa: E402

from handcode.types import GestureLibrary  # noqa: E402


@pytest.fixture
def open_palm():
    return OPEN_PALM.copy()


@pytest.fixture
def fist():
    return FIST.copy()


@pytest.fixture
def palm_class():
    return make_class("1", "OpenPalm", jittered_features(OPEN_PALM, 8, seed=1))


@pytest.fixture
def fist_class():
    return make_class("2", "Fist", jittered_features(FIST, 8, seed=2))


@pytest.fixture
def library(palm_class, fist_class):
    """Two-class library: OpenPalm and Fist."""
    return GestureLibrary([palm_class, fist_class])
