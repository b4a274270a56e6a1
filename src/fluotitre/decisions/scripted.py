"""Non-interactive decision provider for batch runs and tests."""

from __future__ import annotations

import logging
from typing import Iterable

import numpy as np

from fluotitre.core.exceptions import AbortedByUser
from fluotitre.core.models import RoiGeometry
from fluotitre.decisions.base import DecisionProvider

logger = logging.getLogger(__name__)


class ScriptedDecisionProvider(DecisionProvider):
    """Returns fixed or per-file decisions without blocking.

    Args:
        roi: ROI used for every file; the default ROI if None.
        rois: Per-file ROIs, keyed by file name. Take precedence over ``roi``.
        thresholds: Per-file threshold overrides, keyed by file name.
            Proposed thresholds are accepted for other files.
        abort_on: File names for which the operator "cancels".
        stop_on: File names for which the operator cancels the whole batch.
    """

    def __init__(
        self,
        roi: RoiGeometry | None = None,
        rois: dict[str, RoiGeometry] | None = None,
        thresholds: dict[str, float] | None = None,
        abort_on: Iterable[str] = (),
        stop_on: Iterable[str] = (),
    ) -> None:
        self._roi = roi
        self._rois = dict(rois or {})
        self._thresholds = dict(thresholds or {})
        self._abort_on = set(abort_on)
        self._stop_on = set(stop_on)
        self.roi_requests: list[str] = []
        self.threshold_requests: list[tuple[str, float]] = []

    def _check_abort(self, file_name: str) -> None:
        if file_name in self._stop_on:
            raise AbortedByUser("Batch stopped by script", file_name=file_name, stop_batch=True)
        if file_name in self._abort_on:
            raise AbortedByUser("Image skipped by script", file_name=file_name)

    def position_roi(
        self,
        default: RoiGeometry,
        image: np.ndarray,
        file_name: str,
    ) -> RoiGeometry:
        self.roi_requests.append(file_name)
        self._check_abort(file_name)
        return self._rois.get(file_name) or self._roi or default

    def confirm_threshold(
        self,
        proposed: float,
        image: np.ndarray,
        file_name: str,
    ) -> float:
        self.threshold_requests.append((file_name, proposed))
        self._check_abort(file_name)
        value = self._thresholds.get(file_name, proposed)
        if value != proposed:
            logger.debug("%s: threshold %.2f overridden to %.2f", file_name, proposed, value)
        return float(value)
