"""
meshquality: Element Quality Metrics

Aspect ratio, skewness and Jacobian ratio for quadrilateral and
hexahedral finite elements.
"""

__version__ = "0.1.0"

# Suppress trimesh's verbose logs by default
import logging
logging.getLogger("trimesh").setLevel(logging.WARNING)

from meshquality.core.element import Quad, Hex, MalformedElementError, make_element
from meshquality.core.diagnostics import Diagnostic, DiagnosticCode, Severity
from meshquality.core.io import load_elements, save_elements, save_report
from meshquality.evaluation import (
    Band,
    Quality,
    QualityAggregator,
    QualityMetric,
    QualityReport,
    aspect_ratio,
    evaluate_quality,
    jacobian_ratio,
    skewness,
)

__all__ = [
    "Quad",
    "Hex",
    "MalformedElementError",
    "make_element",
    "Diagnostic",
    "DiagnosticCode",
    "Severity",
    "load_elements",
    "save_elements",
    "save_report",
    "Band",
    "Quality",
    "QualityAggregator",
    "QualityMetric",
    "QualityReport",
    "aspect_ratio",
    "evaluate_quality",
    "jacobian_ratio",
    "skewness",
    "__version__",
]
