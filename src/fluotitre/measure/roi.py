"""Elliptical ROI rasterization and clearing."""

from __future__ import annotations

import numpy as np

from fluotitre.core.models import RoiGeometry


def roi_mask(shape: tuple[int, ...], roi: RoiGeometry) -> np.ndarray:
    """Boolean mask of pixels whose centre lies inside the ellipse.

    The ellipse is clipped to ``shape``; parts outside the image are dropped.
    """
    from skimage.draw import ellipse

    mask = np.zeros(shape[:2], dtype=bool)
    rr, cc = ellipse(
        roi.center_y, roi.center_x,
        roi.height / 2.0, roi.width / 2.0,
        shape=mask.shape,
    )
    mask[rr, cc] = True
    return mask


def clear_outside(raster: np.ndarray, roi: RoiGeometry, background: float = 0) -> np.ndarray:
    """Return a copy of ``raster`` with pixels outside the ROI set to ``background``."""
    inside = roi_mask(raster.shape, roi)
    return np.where(inside, raster, np.asarray(background, dtype=raster.dtype))
