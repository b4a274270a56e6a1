"""ParticleAnalyzer — connected component analysis within the well ROI."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from fluotitre.core.exceptions import SegmentationError
from fluotitre.core.models import RoiGeometry
from fluotitre.measure.roi import roi_mask
from fluotitre.measure.thresholding import FOREGROUND

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticleResult:
    """Result of particle analysis for one image.

    Attributes:
        count: Number of particles kept.
        total_area: Summed area of kept particles, in pixels.
        roi_area: Number of image pixels inside the ROI.
        percent_coverage: ``total_area / roi_area * 100``.
        particle_areas: Area of each kept particle, in label order.
        mask: uint8 mask (0 / 255) holding only the kept particles.
    """

    count: int
    total_area: int
    roi_area: int
    percent_coverage: float
    particle_areas: list[int] = field(default_factory=list)
    mask: np.ndarray = field(default=None, repr=False, compare=False)


class ParticleAnalyzer:
    """Count particles of a binary mask inside an elliptical ROI.

    Pixels outside the ROI are ignored before labeling, so a blob crossing
    the ROI edge only contributes its inside part.

    Args:
        min_area: Minimum area in pixels to keep a particle (inclusive).
        connectivity: 1 for 4-connected, 2 for 8-connected particles.
    """

    def __init__(self, min_area: int = 100, connectivity: int = 2) -> None:
        if min_area < 0:
            raise ValueError(f"min_area must be >= 0, got {min_area}")
        if connectivity not in (1, 2):
            raise ValueError(f"connectivity must be 1 or 2, got {connectivity}")
        self._min_area = min_area
        self._connectivity = connectivity

    @property
    def min_area(self) -> int:
        return self._min_area

    def analyze(self, mask: np.ndarray, roi: RoiGeometry) -> ParticleResult:
        """Label particles inside ``roi`` and measure coverage.

        Raises:
            SegmentationError: If the ROI does not overlap the image.
        """
        from scipy.ndimage import generate_binary_structure, label

        inside = roi_mask(mask.shape, roi)
        roi_area = int(np.count_nonzero(inside))
        if roi_area == 0:
            raise SegmentationError(
                f"ROI {roi.to_dict()} does not overlap the {mask.shape[1]}x{mask.shape[0]} image"
            )

        particle_mask = (mask > 0) & inside
        structure = generate_binary_structure(2, self._connectivity)
        labels, n = label(particle_mask, structure=structure)

        if n == 0:
            return ParticleResult(
                count=0, total_area=0, roi_area=roi_area, percent_coverage=0.0,
                particle_areas=[], mask=np.zeros(mask.shape, dtype=np.uint8),
            )

        areas = np.bincount(labels.ravel(), minlength=n + 1)[1:]
        keep = areas >= self._min_area
        kept_ids = np.flatnonzero(keep) + 1
        kept_mask = np.isin(labels, kept_ids)

        kept_areas = [int(a) for a in areas[keep]]
        total_area = int(sum(kept_areas))
        coverage = min(max(total_area / roi_area * 100.0, 0.0), 100.0)

        logger.debug(
            "%d component(s), %d kept (>= %d px), %.3f%% coverage",
            n, len(kept_areas), self._min_area, coverage,
        )

        return ParticleResult(
            count=len(kept_areas),
            total_area=total_area,
            roi_area=roi_area,
            percent_coverage=coverage,
            particle_areas=kept_areas,
            mask=np.where(kept_mask, FOREGROUND, 0).astype(np.uint8),
        )
