"""FluoTitre Measure — intensity, background, thresholds, particles, titre."""

from fluotitre.measure.background import rescale_to_8bit, subtract_background
from fluotitre.measure.intensity import classify, mean_intensity, select_channel
from fluotitre.measure.particle_analyzer import ParticleAnalyzer, ParticleResult
from fluotitre.measure.roi import clear_outside, roi_mask
from fluotitre.measure.thresholding import (
    SUPPORTED_METHODS,
    ThresholdResult,
    apply_threshold,
    compute_threshold,
    triangle_threshold,
)
from fluotitre.measure.titre import TitreEstimator, calibration_from_summary

__all__ = [
    "ParticleAnalyzer",
    "ParticleResult",
    "SUPPORTED_METHODS",
    "ThresholdResult",
    "TitreEstimator",
    "apply_threshold",
    "calibration_from_summary",
    "classify",
    "clear_outside",
    "compute_threshold",
    "mean_intensity",
    "rescale_to_8bit",
    "roi_mask",
    "select_channel",
    "subtract_background",
    "triangle_threshold",
]
