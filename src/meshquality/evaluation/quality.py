"""
Quality aggregation over an element list.

Runs the three calculators on every element, keeps one ``Quality`` record
per element in input order, reduces the records to mean values and assigns
a visual band for the selected metric.

Per-element evaluation is pure, so the pass can be split into contiguous
chunks evaluated on a thread pool. Each chunk returns its own partial sums,
which are merged after all chunks are done.
"""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Union

from meshquality.core.diagnostics import (
    Diagnostic,
    DiagnosticCode,
    Severity,
    count_by_severity,
    has_errors,
)
from meshquality.core.element import Element, Hex, Quad, MalformedElementError
from meshquality.evaluation.classify import Band, QualityMetric, classify_values
from meshquality.evaluation.metrics import aspect_ratio, jacobian_ratio, skewness

logger = logging.getLogger("meshquality.evaluation")

METRIC_FIELDS = ("aspect_ratio", "skewness", "jacobian_ratio")

# Decimal places of the reported means
MEAN_DECIMALS = 3


@dataclass(frozen=True)
class Quality:
    """Quality metrics of one element, created once per evaluation pass."""
    aspect_ratio: float
    skewness: float
    jacobian_ratio: float
    element: Element
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def element_id(self) -> int:
        return self.element.id

    def value(self, metric: QualityMetric) -> float:
        return getattr(self, metric.attribute)

    def to_dict(self) -> dict:
        return {
            "element_id": self.element.id,
            "kind": self.element.kind,
            "aspect_ratio": self.aspect_ratio,
            "skewness": self.skewness,
            "jacobian_ratio": self.jacobian_ratio,
            "diagnostics": [d.to_dict() for d in self.diagnostics],
        }


@dataclass(frozen=True)
class AggregateStatistics:
    """
    Mean metrics over an evaluation pass.

    A count of zero means "no data". The zero means of an empty pass are
    not a valid score.

    Each mean is taken over the elements whose value of that metric is
    finite, so a degenerate element (nan) does not pull the mean down.
    ``count`` still includes it.
    """
    mean_aspect_ratio: float = 0.0
    mean_skewness: float = 0.0
    mean_jacobian_ratio: float = 0.0
    count: int = 0

    @property
    def has_data(self) -> bool:
        return self.count > 0

    def to_dict(self) -> dict:
        return {
            "mean_aspect_ratio": self.mean_aspect_ratio,
            "mean_skewness": self.mean_skewness,
            "mean_jacobian_ratio": self.mean_jacobian_ratio,
            "count": self.count,
        }


@dataclass
class _PartialSums:
    """Running sums of one chunk; merged after all chunks finish."""
    sums: dict[str, float] = field(default_factory=lambda: dict.fromkeys(METRIC_FIELDS, 0.0))
    finite: dict[str, int] = field(default_factory=lambda: dict.fromkeys(METRIC_FIELDS, 0))
    count: int = 0

    def add(self, quality: Quality) -> None:
        self.count += 1
        for name in METRIC_FIELDS:
            v = getattr(quality, name)
            if math.isfinite(v):
                self.sums[name] += v
                self.finite[name] += 1

    def merge(self, other: _PartialSums) -> _PartialSums:
        merged = _PartialSums(count=self.count + other.count)
        for name in METRIC_FIELDS:
            merged.sums[name] = self.sums[name] + other.sums[name]
            merged.finite[name] = self.finite[name] + other.finite[name]
        return merged

    def mean(self, name: str) -> float:
        n = self.finite[name]
        if n == 0:
            return 0.0
        return round(self.sums[name] / n, MEAN_DECIMALS)

    def statistics(self) -> AggregateStatistics:
        return AggregateStatistics(
            mean_aspect_ratio=self.mean("aspect_ratio"),
            mean_skewness=self.mean("skewness"),
            mean_jacobian_ratio=self.mean("jacobian_ratio"),
            count=self.count,
        )


@dataclass
class QualityReport:
    """Outcome of one evaluation pass."""
    qualities: list[Quality]
    statistics: AggregateStatistics
    metric: Optional[QualityMetric] = None
    bands: list[Optional[Band]] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    elapsed_seconds: float = 0.0

    def __len__(self) -> int:
        return len(self.qualities)

    @property
    def all_diagnostics(self) -> list[Diagnostic]:
        """Run-level diagnostics followed by every element's diagnostics."""
        result = list(self.diagnostics)
        for q in self.qualities:
            result.extend(q.diagnostics)
        return result

    @property
    def has_errors(self) -> bool:
        return has_errors(self.all_diagnostics)

    def quality_for(self, element_id: int) -> Optional[Quality]:
        for q in self.qualities:
            if q.element.id == element_id:
                return q
        return None

    def band_counts(self) -> dict[str, int]:
        counts = {b.label: 0 for b in Band}
        counts["unclassified"] = 0
        for band in self.bands:
            counts[band.label if band is not None else "unclassified"] += 1
        return counts

    def to_dict(self) -> dict:
        return {
            "statistics": self.statistics.to_dict(),
            "metric": self.metric.attribute if self.metric is not None else None,
            "elements": [
                {**q.to_dict(), "band": b.label if b is not None else None}
                for q, b in zip(self.qualities, self._padded_bands())
            ],
            "diagnostics": [d.to_dict() for d in self.diagnostics],
            "diagnostic_counts": count_by_severity(self.all_diagnostics),
        }

    def _padded_bands(self) -> list[Optional[Band]]:
        if self.bands:
            return self.bands
        return [None] * len(self.qualities)

    def summary(self) -> str:
        """Return human-readable summary."""
        stats = self.statistics
        if not stats.has_data:
            return "=== Mesh Quality: no elements evaluated ==="

        lines = [
            f"=== Mesh Quality: {stats.count} elements ===",
            f"  Aspect ratio:   {stats.mean_aspect_ratio:.3f} (ideal: 1.0)",
            f"  Skewness:       {stats.mean_skewness:.3f} (ideal: 1.0)",
            f"  Jacobian ratio: {stats.mean_jacobian_ratio:.3f} (ideal: 1.0)",
        ]
        if self.metric is not None:
            lines.append(f"  Bands ({self.metric.label}):")
            for label, n in self.band_counts().items():
                if n:
                    lines.append(f"    - {label:13s} {n}")
        counts = count_by_severity(self.all_diagnostics)
        lines.append(
            f"  Diagnostics:    {counts['error']} errors, {counts['warning']} warnings"
        )
        return "\n".join(lines)


def evaluate_element(element: Element) -> Quality:
    """
    Compute all three metrics for one element.

    Raises:
        MalformedElementError: if ``element`` is not a Quad or Hex
    """
    if not isinstance(element, (Quad, Hex)):
        raise MalformedElementError(
            f"Expected a Quad or Hex element, got {type(element).__name__}"
        )

    ar, ar_diag = aspect_ratio(element)
    sk, sk_diag = skewness(element)
    jr, jr_diag = jacobian_ratio(element)

    diagnostics = ar_diag + sk_diag + jr_diag
    for name, value in zip(METRIC_FIELDS, (ar, sk, jr)):
        if not math.isfinite(value):
            diagnostics.append(Diagnostic(
                code=DiagnosticCode.NON_FINITE_METRIC,
                severity=Severity.WARNING,
                message=f"{name} is not finite and is excluded from the means",
                element_id=element.id,
                metric=name,
            ))

    for d in diagnostics:
        if d.severity == Severity.ERROR:
            logger.error(str(d))
        else:
            logger.warning(str(d))

    return Quality(
        aspect_ratio=ar,
        skewness=sk,
        jacobian_ratio=jr,
        element=element,
        diagnostics=tuple(diagnostics),
    )


def _evaluate_chunk(elements: Sequence[Element]) -> tuple[list[Quality], _PartialSums]:
    qualities = []
    partial = _PartialSums()
    for element in elements:
        quality = evaluate_element(element)
        qualities.append(quality)
        partial.add(quality)
    return qualities, partial


class QualityAggregator:
    """
    Evaluates an element list and reduces it to mean metrics and bands.

    Args:
        workers: Number of threads. 1 evaluates in the calling thread.
        chunk_size: Elements per task when ``workers > 1``. Defaults to an
            even split over the workers.
    """

    def __init__(self, workers: int = 1, chunk_size: Optional[int] = None):
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if chunk_size is not None and chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self.workers = workers
        self.chunk_size = chunk_size

    def evaluate(
        self,
        elements: Optional[Iterable[Element]],
        metric: Union[int, str, QualityMetric, None] = None,
    ) -> QualityReport:
        """
        Evaluate every element and classify by ``metric``.

        Args:
            elements: Ordered elements; None or empty yields an empty report
            metric: Coloring selector (1 = aspect ratio, 2 = skewness,
                3 = Jacobian ratio; anything else disables coloring)

        Returns:
            QualityReport with records in input order

        Raises:
            MalformedElementError: on an element that is not a Quad or Hex
        """
        start_time = time.time()
        selected = QualityMetric.parse(metric)

        element_list = list(elements) if elements is not None else []
        if not element_list:
            message = "No elements found" if elements is not None else "No element source given"
            logger.warning(message)
            return QualityReport(
                qualities=[],
                statistics=AggregateStatistics(),
                metric=selected,
                diagnostics=[Diagnostic(
                    code=DiagnosticCode.NO_ELEMENTS,
                    severity=Severity.WARNING,
                    message=message,
                )],
            )

        for element in element_list:
            if not isinstance(element, (Quad, Hex)):
                raise MalformedElementError(
                    f"Expected a Quad or Hex element, got {type(element).__name__}"
                )

        qualities, totals = self._run(element_list)
        statistics = totals.statistics()

        bands, diagnostics = self._classify(qualities, selected)

        elapsed = time.time() - start_time
        logger.info(
            f"Evaluated {statistics.count} elements in {elapsed:.3f}s: "
            f"AR {statistics.mean_aspect_ratio:.3f}, SK {statistics.mean_skewness:.3f}, "
            f"JR {statistics.mean_jacobian_ratio:.3f}"
        )

        return QualityReport(
            qualities=qualities,
            statistics=statistics,
            metric=selected,
            bands=bands,
            diagnostics=diagnostics,
            elapsed_seconds=elapsed,
        )

    def _chunks(self, elements: list[Element]) -> list[list[Element]]:
        size = self.chunk_size or max(1, math.ceil(len(elements) / self.workers))
        return [elements[i:i + size] for i in range(0, len(elements), size)]

    def _run(self, elements: list[Element]) -> tuple[list[Quality], _PartialSums]:
        if self.workers == 1 or len(elements) == 1:
            return _evaluate_chunk(elements)

        chunks = self._chunks(elements)
        logger.debug(f"Evaluating {len(elements)} elements in {len(chunks)} chunks")

        # map() keeps chunk order, so records stay in input order
        with ThreadPoolExecutor(max_workers=min(self.workers, len(chunks))) as executor:
            results = list(executor.map(_evaluate_chunk, chunks))

        qualities: list[Quality] = []
        totals = _PartialSums()
        for chunk_qualities, partial in results:
            qualities.extend(chunk_qualities)
            totals = totals.merge(partial)
        return qualities, totals

    def _classify(
        self,
        qualities: list[Quality],
        metric: Optional[QualityMetric],
    ) -> tuple[list[Optional[Band]], list[Diagnostic]]:
        if metric is None:
            return [], []

        values = [q.value(metric) for q in qualities]
        bands = classify_values(values, metric)

        diagnostics = [
            Diagnostic(
                code=DiagnosticCode.UNCLASSIFIED,
                severity=Severity.INFO,
                message=f"{metric.label} {value:.4f} falls in no band",
                element_id=q.element.id,
                metric=metric.attribute,
            )
            for q, value, band in zip(qualities, values, bands)
            if band is None
        ]
        return bands, diagnostics


def evaluate_quality(
    elements: Optional[Iterable[Element]],
    metric: Union[int, str, QualityMetric, None] = None,
    workers: int = 1,
) -> QualityReport:
    """Convenience function to evaluate an element list."""
    aggregator = QualityAggregator(workers=workers)
    return aggregator.evaluate(elements, metric)
