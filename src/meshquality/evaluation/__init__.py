"""Evaluation and metrics modules."""

from meshquality.evaluation.metrics import (
    IDEAL_ANGLE,
    IDEAL_ASPECT_RATIO,
    aspect_ratio,
    jacobian_ratio,
    skewness,
)
from meshquality.evaluation.classify import (
    THRESHOLDS,
    Band,
    QualityMetric,
    classify,
)
from meshquality.evaluation.quality import (
    AggregateStatistics,
    Quality,
    QualityAggregator,
    QualityReport,
    evaluate_element,
    evaluate_quality,
)
from meshquality.evaluation.visualize import (
    build_color_mesh,
    export_color_mesh,
)

__all__ = [
    "IDEAL_ANGLE",
    "IDEAL_ASPECT_RATIO",
    "aspect_ratio",
    "jacobian_ratio",
    "skewness",
    "THRESHOLDS",
    "Band",
    "QualityMetric",
    "classify",
    "AggregateStatistics",
    "Quality",
    "QualityAggregator",
    "QualityReport",
    "evaluate_element",
    "evaluate_quality",
    # Visualization
    "build_color_mesh",
    "export_color_mesh",
]
