"""TitreEstimator — scale %coverage into a titre against a calibration well."""

from __future__ import annotations

import logging
from typing import Iterable

from fluotitre.core.exceptions import DivisionByZeroError
from fluotitre.core.models import BatchSummary, CalibrationWell, TitreEstimate

logger = logging.getLogger(__name__)


class TitreEstimator:
    """Linear titre estimation from %coverage.

    ``titre = coverage / control.percent_coverage * control.known_titre``.

    The baseline well (uninfected, known titre 0) is only checked: when its
    coverage exceeds ``baseline_tolerance`` every estimate is flagged with
    ``baseline_ok=False``. It never changes the computed titre.

    Args:
        control: Virus-only calibration well.
        baseline: Optional uninfected well.
        baseline_tolerance: Largest baseline %coverage still treated as zero.

    Raises:
        DivisionByZeroError: If the control coverage is 0.
        ValueError: If the baseline declares a non-zero titre.
    """

    def __init__(
        self,
        control: CalibrationWell,
        baseline: CalibrationWell | None = None,
        baseline_tolerance: float = 1.0,
    ) -> None:
        if control.percent_coverage == 0:
            raise DivisionByZeroError(
                "Control well has 0% coverage; titre is undefined",
                file_name=control.label,
            )
        if baseline is not None and baseline.known_titre != 0:
            raise ValueError(
                f"Baseline well must have a known titre of 0, got {baseline.known_titre}"
            )
        self.control = control
        self.baseline = baseline
        self.baseline_tolerance = baseline_tolerance
        self.baseline_ok = self._check_baseline()

    def _check_baseline(self) -> bool:
        if self.baseline is None:
            return True
        if self.baseline.percent_coverage > self.baseline_tolerance:
            logger.warning(
                "Baseline well %s has %.3f%% coverage (tolerance %.3f%%)",
                self.baseline.label or "", self.baseline.percent_coverage,
                self.baseline_tolerance,
            )
            return False
        return True

    def titre(self, percent_coverage: float) -> float:
        return (
            percent_coverage / self.control.percent_coverage
        ) * self.control.known_titre

    def estimate(self, percent_coverage: float, label: str = "") -> TitreEstimate:
        """Estimate the titre of one well."""
        return TitreEstimate(
            label=label,
            percent_coverage=float(percent_coverage),
            titre=self.titre(percent_coverage),
            baseline_ok=self.baseline_ok,
        )

    def estimate_summary(
        self,
        summary: BatchSummary,
        exclude: Iterable[str] = (),
    ) -> list[TitreEstimate]:
        """Estimate every row of a batch summary, skipping ``exclude`` labels."""
        skip = set(exclude)
        return [
            self.estimate(row.percent_coverage, label=row.label)
            for row in summary
            if row.label not in skip
        ]


def calibration_from_summary(
    summary: BatchSummary,
    label: str,
    known_titre: float,
) -> CalibrationWell:
    """Build a CalibrationWell from a summary row.

    Raises:
        KeyError: If no row has ``label``.
    """
    row = summary.find(label)
    if row is None:
        raise KeyError(f"No summary row labelled {label!r}")
    return CalibrationWell(
        known_titre=known_titre,
        percent_coverage=row.percent_coverage,
        label=row.label,
    )
