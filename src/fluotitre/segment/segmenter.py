"""Segmenter — threshold proposal, mask conversion and watershed."""

from __future__ import annotations

import logging

import numpy as np

from fluotitre.measure.thresholding import apply_threshold, compute_threshold, threshold_stats
from fluotitre.segment.watershed import watershed_split

logger = logging.getLogger(__name__)


class Segmenter:
    """Turns an 8-bit raster into a split binary mask.

    Thresholds are computed from each image alone; the segmenter keeps no
    state between images.

    Args:
        method: Automatic threshold method (default "triangle").
        dark_background: Foreground is brighter than the background.
        watershed_tolerance: Seed height for the watershed split.
    """

    def __init__(
        self,
        method: str = "triangle",
        dark_background: bool = True,
        watershed_tolerance: float = 0.5,
    ) -> None:
        if method == "manual":
            raise ValueError("Segmenter needs an automatic threshold method")
        self._method = method
        self._dark_background = dark_background
        self._tolerance = watershed_tolerance

    def propose_threshold(self, image: np.ndarray) -> float:
        """Automatic threshold for ``image``."""
        value = compute_threshold(image, method=self._method)
        logger.debug("Proposed %s threshold %.2f", self._method, value)
        return value

    def to_mask(self, image: np.ndarray, threshold: float) -> np.ndarray:
        """Binary mask of ``image`` at ``threshold`` (no splitting)."""
        return apply_threshold(image, threshold, dark_background=self._dark_background)

    def split(self, mask: np.ndarray) -> np.ndarray:
        return watershed_split(mask, tolerance=self._tolerance)

    def segment(self, image: np.ndarray, threshold: float | None = None) -> tuple[np.ndarray, float]:
        """Threshold and split ``image``.

        Args:
            image: 8-bit raster.
            threshold: Final threshold; proposed automatically if None.

        Returns:
            (mask, threshold) — uint8 mask with values 0 and 255.
        """
        if threshold is None:
            threshold = self.propose_threshold(image)
        mask = self.split(self.to_mask(image, threshold))
        stats = threshold_stats(mask, threshold)
        logger.debug(
            "Threshold %.2f: %d of %d pixels foreground after split",
            stats.threshold_value, stats.positive_pixels, stats.total_pixels,
        )
        return mask, stats.threshold_value
