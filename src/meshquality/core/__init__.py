"""Core data structures."""

from meshquality.core.element import (
    Quad,
    Hex,
    Element,
    MalformedElementError,
    make_element,
)
from meshquality.core.diagnostics import Diagnostic, DiagnosticCode, Severity

__all__ = [
    "Quad",
    "Hex",
    "Element",
    "MalformedElementError",
    "make_element",
    "Diagnostic",
    "DiagnosticCode",
    "Severity",
]
