"""
Quality bands for visualization.

Each element is put into one of four ordered bands for the selected metric.
The Jacobian ratio has a fifth band for negative or invalid ratios.
Thresholds are fixed constants.
"""

from __future__ import annotations

import numbers
import re
from enum import Enum, IntEnum
from typing import Iterable, Optional, Union


class QualityMetric(IntEnum):
    """Metric selector; the integer codes are part of the public interface."""
    ASPECT_RATIO = 1
    SKEWNESS = 2
    JACOBIAN_RATIO = 3

    @property
    def attribute(self) -> str:
        """Name of the matching field on a Quality record."""
        return self.name.lower()

    @property
    def label(self) -> str:
        return self.name.replace("_", " ").title()

    @classmethod
    def parse(cls, value: Union[int, float, str, "QualityMetric", None]) -> Optional["QualityMetric"]:
        """
        Resolve a selector to a metric.

        Numbers other than 1, 2, 3 (and None) mean "no coloring" and
        return None. Strings may be a code, a metric name or an alias.

        Raises:
            ValueError: for an unrecognized string
        """
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return None
        if isinstance(value, numbers.Integral):
            try:
                return cls(int(value))
            except ValueError:
                return None
        if isinstance(value, numbers.Real):
            # 1.0 selects aspect ratio, 1.5 selects nothing
            return cls.parse(int(value)) if float(value).is_integer() else None

        text = str(value).strip()
        if _NUMBER.match(text):
            return cls.parse(float(text))
        key = text.lower().replace("-", "_").replace(" ", "_")
        if key in _ALIASES:
            return _ALIASES[key]
        raise ValueError(
            f"Unknown quality metric '{value}'. "
            f"Use 1/2/3 or one of: {', '.join(sorted(_ALIASES))}"
        )


_NUMBER = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$")

_ALIASES = {
    "aspect_ratio": QualityMetric.ASPECT_RATIO,
    "aspect": QualityMetric.ASPECT_RATIO,
    "ar": QualityMetric.ASPECT_RATIO,
    "skewness": QualityMetric.SKEWNESS,
    "skew": QualityMetric.SKEWNESS,
    "sk": QualityMetric.SKEWNESS,
    "jacobian_ratio": QualityMetric.JACOBIAN_RATIO,
    "jacobian": QualityMetric.JACOBIAN_RATIO,
    "jr": QualityMetric.JACOBIAN_RATIO,
}


class Band(Enum):
    """Visual quality band with its display color (RGB)."""
    EXCELLENT = ("excellent", (0, 128, 0))  # green
    GOOD = ("good", (255, 255, 0))  # yellow
    POOR = ("poor", (255, 165, 0))  # orange
    BAD = ("bad", (255, 0, 0))  # red
    INVALID = ("invalid", (255, 105, 180))  # hot pink

    def __init__(self, label: str, rgb: tuple[int, int, int]):
        self.label = label
        self.rgb = rgb

    @property
    def rgba(self) -> tuple[int, int, int, int]:
        return (*self.rgb, 255)


# Lower bounds (exclusive) of EXCELLENT, GOOD, POOR, BAD
THRESHOLDS: dict[QualityMetric, tuple[float, float, float, float]] = {
    QualityMetric.ASPECT_RATIO: (0.9, 0.7, 0.6, 0.0),
    QualityMetric.SKEWNESS: (0.9, 0.75, 0.6, 0.0),
    QualityMetric.JACOBIAN_RATIO: (0.8, 0.5, 0.03, 0.0),
}


def classify(value: float, metric: QualityMetric) -> Optional[Band]:
    """
    Band of a single metric value.

    Aspect ratio and skewness values not above zero (or nan) are left
    unclassified (None). Jacobian ratios of exactly zero are BAD; anything
    below zero or nan is INVALID.
    """
    excellent, good, poor, bad = THRESHOLDS[metric]

    if value > excellent:
        return Band.EXCELLENT
    if value > good:
        return Band.GOOD
    if value > poor:
        return Band.POOR

    if metric == QualityMetric.JACOBIAN_RATIO:
        if value >= bad:
            return Band.BAD
        return Band.INVALID

    if value > bad:
        return Band.BAD
    return None


def classify_values(values: Iterable[float], metric: QualityMetric) -> list[Optional[Band]]:
    return [classify(v, metric) for v in values]
