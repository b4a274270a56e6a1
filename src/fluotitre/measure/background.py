"""Rolling-ball background subtraction and 8-bit rescaling."""

from __future__ import annotations

import logging

import numpy as np

logger = logging.getLogger(__name__)


def shrink_factor(radius: float) -> int:
    """Downsampling factor used to roll large balls on a reduced image."""
    if radius <= 10:
        return 1
    if radius <= 30:
        return 2
    if radius <= 100:
        return 4
    return 8


def estimate_background(image: np.ndarray, radius: float) -> np.ndarray:
    """Rolling-ball background of a float image.

    For radii above 10 the ball is rolled over a block-minimum reduced image
    and the result is interpolated back to full size. The background never
    exceeds the image.
    """
    from skimage.measure import block_reduce
    from skimage.restoration import rolling_ball
    from skimage.transform import resize

    shrink = shrink_factor(radius)
    if shrink == 1 or min(image.shape) < 2 * shrink:
        return rolling_ball(image, radius=radius)

    small = block_reduce(image, (shrink, shrink), func=np.min, cval=float(image.max()))
    small_bg = rolling_ball(small, radius=radius / shrink)
    full = resize(
        small_bg,
        (small.shape[0] * shrink, small.shape[1] * shrink),
        order=1,
        mode="edge",
        anti_aliasing=False,
        preserve_range=True,
    )
    full = full[: image.shape[0], : image.shape[1]]
    return np.minimum(full, image)


def subtract_background(
    raster: np.ndarray,
    radius: float = 50.0,
    light_background: bool = False,
) -> np.ndarray:
    """Subtract a rolling-ball background.

    Args:
        raster: 2D intensity image. Not modified.
        radius: Ball radius in pixels.
        light_background: Objects are darker than the background.

    Returns:
        New float64 image with the background removed (non-negative for a
        dark background; re-inverted for a light one).
    """
    if radius <= 0:
        raise ValueError(f"radius must be > 0, got {radius}")

    image = raster.astype(np.float64)
    if image.size == 0:
        return image

    if light_background:
        top = float(image.max())
        inverted = top - image
        result = inverted - estimate_background(inverted, radius)
        return top - result

    result = image - estimate_background(image, radius)
    return np.clip(result, 0.0, None)


def rescale_to_8bit(raster: np.ndarray) -> np.ndarray:
    """Linearly map the raster's min..max onto 0..255 as uint8.

    A constant raster maps to all zeros.
    """
    image = raster.astype(np.float64)
    if image.size == 0:
        return image.astype(np.uint8)

    lo = float(image.min())
    hi = float(image.max())
    if hi <= lo:
        return np.zeros(image.shape, dtype=np.uint8)

    from skimage.exposure import rescale_intensity

    scaled = rescale_intensity(image, in_range=(lo, hi), out_range=(0.0, 255.0))
    return np.round(scaled).astype(np.uint8)
