"""Automatic threshold selection and binary mask conversion."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from fluotitre.core.exceptions import SegmentationError

SUPPORTED_METHODS = frozenset({"triangle", "otsu", "li", "manual"})

FOREGROUND = 255


@dataclass(frozen=True)
class ThresholdResult:
    """Result of a thresholding operation.

    Attributes:
        threshold_value: The computed (or confirmed) threshold value.
        positive_pixels: Number of foreground pixels.
        total_pixels: Total number of pixels in the image.
        positive_fraction: Fraction of foreground pixels.
    """

    threshold_value: float
    positive_pixels: int
    total_pixels: int
    positive_fraction: float


def _check_raster(image: np.ndarray) -> None:
    if image.size == 0:
        raise SegmentationError("Cannot threshold an empty raster")
    if not np.all(np.isfinite(image)):
        raise SegmentationError("Raster contains non-finite values")


def triangle_threshold(image: np.ndarray, nbins: int = 256) -> float:
    """Triangle threshold of an image.

    A line is drawn from the histogram peak to the far end of its longer
    tail; the threshold is the bin farthest from that line. For sparse
    signal on a dark background the tail lies above the peak.

    A constant image returns its own value, so nothing lies above it.

    Raises:
        SegmentationError: If the image is empty or has non-finite values.
    """
    from skimage.filters import threshold_triangle

    _check_raster(image)
    if image.min() == image.max():
        return float(image.flat[0])
    return float(threshold_triangle(image, nbins=nbins))


def compute_threshold(
    image: np.ndarray,
    method: str = "triangle",
    manual_value: float | None = None,
) -> float:
    """Compute a global threshold value using the specified method.

    Raises:
        ValueError: If method is unknown or manual_value is missing.
        SegmentationError: If the image cannot be thresholded.
    """
    if method not in SUPPORTED_METHODS:
        raise ValueError(
            f"Unknown threshold method {method!r}. "
            f"Supported: {sorted(SUPPORTED_METHODS)}"
        )
    if method == "manual":
        if manual_value is None:
            raise ValueError("manual_value is required when method='manual'")
        return float(manual_value)
    if method == "triangle":
        return triangle_threshold(image)

    from skimage.filters import threshold_li, threshold_otsu

    _check_raster(image)
    if image.min() == image.max():
        return float(image.flat[0])
    if method == "otsu":
        return float(threshold_otsu(image))
    return float(threshold_li(image))


def apply_threshold(
    image: np.ndarray,
    threshold: float,
    dark_background: bool = True,
) -> np.ndarray:
    """Convert an image to a uint8 mask with values 0 and 255.

    With a dark background, foreground is ``image > threshold``; otherwise
    ``image <= threshold``.
    """
    if dark_background:
        fg = image > threshold
    else:
        fg = image <= threshold
    return np.where(fg, FOREGROUND, 0).astype(np.uint8)


def threshold_stats(mask: np.ndarray, threshold: float) -> ThresholdResult:
    positive_pixels = int(np.count_nonzero(mask))
    total_pixels = int(mask.size)
    positive_fraction = positive_pixels / total_pixels if total_pixels > 0 else 0.0
    return ThresholdResult(
        threshold_value=float(threshold),
        positive_pixels=positive_pixels,
        total_pixels=total_pixels,
        positive_fraction=positive_fraction,
    )
