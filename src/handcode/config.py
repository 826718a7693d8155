"""Configuration for GestureRecognizer.

Example:
    >>> from handcode.config import RecognizerConfig
    >>>
    >>> config = RecognizerConfig(mode="knn", k=5, window_size=3)
    >>> config = RecognizerConfig.from_yaml("recognizer.yaml")
"""

import logging
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

import yaml

from handcode.classifier import DEFAULT_K, DEFAULT_THRESHOLD
from handcode.codebook import DEFAULT_K_FACTOR
from handcode.smoothing import DEFAULT_MIN_STREAK
from handcode.types import RecognizerMode

logger = logging.getLogger(__name__)


@dataclass
class RecognizerConfig:
    """Recognizer options.

    Attributes:
        threshold: Global acceptance distance for k-NN (and the codebook
            fallback).
        mode: "codebook" or "knn". Stored as a RecognizerMode.
        k: Neighbourhood size for k-NN (>= 1).
        window_size: Frames averaged before classification (1 = off).
        min_streak: Consecutive matches required to confirm a class.
        k_factor: Codebook threshold looseness multiplier.
        weights: Optional per-feature weighting for the codebook.
        fallback: In codebook mode, retry with k-NN when the codebook
            accepts nothing.

    Example:
        >>> config = RecognizerConfig.from_dict({"mode": "knn", "k": 5})
        >>> config.mode
        <RecognizerMode.KNN: 'knn'>
    """

    threshold: float = DEFAULT_THRESHOLD
    mode: RecognizerMode = RecognizerMode.CODEBOOK
    k: int = DEFAULT_K
    window_size: int = 1
    min_streak: int = DEFAULT_MIN_STREAK
    k_factor: float = DEFAULT_K_FACTOR
    weights: Optional[List[float]] = None
    fallback: bool = True

    def __post_init__(self) -> None:
        """Normalize mode and clamp counts to >= 1."""
        self.mode = RecognizerMode.from_string(self.mode)
        self.k = max(1, int(self.k))
        self.window_size = max(1, int(self.window_size))
        self.min_streak = max(1, int(self.min_streak))
        self.threshold = float(self.threshold)
        self.k_factor = float(self.k_factor)
        if self.weights is not None:
            self.weights = [float(w) for w in self.weights]

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "RecognizerConfig":
        """Create a config from a dictionary (e.g., loaded from YAML).

        Keys may be snake_case or camelCase (``windowSize``, ``kFactor``,
        ``minStreak``). Unknown keys are logged and ignored.
        """
        data = dict(data or {})
        aliases = {"windowSize": "window_size", "kFactor": "k_factor", "minStreak": "min_streak"}
        known = {f.name for f in fields(cls)}

        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = aliases.get(key, key)
            if name not in known:
                logger.warning("Ignoring unknown recognizer option: %s", key)
                continue
            kwargs[name] = value
        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "RecognizerConfig":
        """Load a config from a YAML file.

        A top-level ``recognizer:`` section is used when present.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the document is not a mapping.
        """
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"{yaml_path}: expected a mapping of recognizer options")
        if isinstance(data.get("recognizer"), dict):
            data = data["recognizer"]
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "threshold": self.threshold,
            "mode": self.mode.value,
            "k": self.k,
            "window_size": self.window_size,
            "min_streak": self.min_streak,
            "k_factor": self.k_factor,
            "weights": list(self.weights) if self.weights is not None else None,
            "fallback": self.fallback,
        }


__all__ = ["RecognizerConfig"]
