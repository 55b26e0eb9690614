"""
Per-element diagnostics.

Quality calculators never raise for bad geometry. They return their value
together with a list of ``Diagnostic`` records so that evaluation of the
remaining elements can continue.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class Severity(Enum):
    """Severity levels for diagnostics."""
    INFO = "info"
    WARNING = "warning"  # Metric is usable but suspicious
    ERROR = "error"  # Element is invalid (e.g. inverted)


class DiagnosticCode(Enum):
    """What a diagnostic is about."""
    NO_ELEMENTS = "no_elements"
    DEGENERATE_GEOMETRY = "degenerate_geometry"
    ASPECT_RATIO_OUT_OF_RANGE = "aspect_ratio_out_of_range"
    JACOBIAN_RATIO_OUT_OF_RANGE = "jacobian_ratio_out_of_range"
    INVERTED_CORNERS = "inverted_corners"
    INVERTED_ELEMENT = "inverted_element"
    NON_FINITE_METRIC = "non_finite_metric"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal finding about an element or an evaluation pass."""
    code: DiagnosticCode
    severity: Severity
    message: str
    element_id: Optional[int] = None
    metric: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "code": self.code.value,
            "severity": self.severity.value,
            "message": self.message,
            "element_id": self.element_id,
            "metric": self.metric,
        }

    def __str__(self) -> str:
        where = f"element {self.element_id}: " if self.element_id is not None else ""
        return f"[{self.severity.value}] {where}{self.message}"


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(d.severity == Severity.ERROR for d in diagnostics)


def count_by_severity(diagnostics: Iterable[Diagnostic]) -> dict[str, int]:
    counts = {s.value: 0 for s in Severity}
    for d in diagnostics:
        counts[d.severity.value] += 1
    return counts
