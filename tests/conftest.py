"""Shared test fixtures for FluoTitre.

Synthetic wells are small (200x200 or 400x400) uint16 rasters. Bright blobs
are narrower than the rolling ball so they survive background subtraction.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import tifffile

from fluotitre.core import PipelineConfig, RoiGeometry


def _write_channels(path: Path, *channels: np.ndarray) -> Path:
    """Write one or more 2D rasters as a TIFF, one plane per channel."""
    if len(channels) == 1:
        tifffile.imwrite(str(path), channels[0])
    else:
        tifffile.imwrite(str(path), np.stack(channels), metadata={"axes": "CYX"})
    return path


def _square_well(
    shape: tuple[int, int] = (200, 200),
    background: int = 100,
    value: int = 2600,
    squares: tuple[tuple[int, int, int], ...] = ((80, 80, 40),),
) -> np.ndarray:
    """Flat background with bright squares given as (row, col, side)."""
    image = np.full(shape, background, dtype=np.uint16)
    for r, c, side in squares:
        image[r:r + side, c:c + side] = value
    return image


# Five disjoint 50x50 blobs, all inside a centred ROI of diameter 360.
_FIVE_BLOBS = (
    (100, 100, 50),
    (100, 250, 50),
    (250, 100, 50),
    (250, 250, 50),
    (175, 175, 50),
)


def _ring_well(
    size: int = 200,
    inner: float = 64.0,
    outer: float = 68.0,
    ring_value: int = 36000,
    blob_value: int = 40,
) -> np.ndarray:
    """Four faint 20x20 blobs near the centre and a thin bright ring.

    The ring covers ``inner <= distance < outer`` from the centre, so it lies
    outside a centred ROI of diameter 120 and lifts the MFI to about 1500.
    """
    image = _square_well(
        shape=(size, size), background=0, value=blob_value,
        squares=((70, 70, 20), (70, 110, 20), (110, 70, 20), (110, 110, 20)),
    )
    yy, xx = np.mgrid[:size, :size]
    dist = np.hypot(yy - size / 2.0, xx - size / 2.0)
    image[(dist >= inner) & (dist < outer)] = ring_value
    return image


@pytest.fixture
def small_roi() -> RoiGeometry:
    """ROI centred in a 200x200 well, 160 pixels across."""
    return RoiGeometry(center_x=100, center_y=100, width=160, height=160)


@pytest.fixture
def config(small_roi: RoiGeometry) -> PipelineConfig:
    """Default pipeline parameters with an ROI that fits the synthetic wells."""
    return PipelineConfig(default_roi=small_roi)


@pytest.fixture
def well_dir(tmp_path: Path) -> Path:
    """Directory with three normal 200x200 two-channel wells.

    a.tif and c.tif have one 40x40 square; b.tif has two.
    """
    d = tmp_path / "plate"
    d.mkdir()
    ch0 = np.full((200, 200), 50, dtype=np.uint16)
    _write_channels(d / "a.tif", ch0, _square_well())
    _write_channels(
        d / "b.tif", ch0,
        _square_well(squares=((50, 50, 40), (110, 110, 40))),
    )
    _write_channels(d / "c.tif", ch0, _square_well())
    return d


@pytest.fixture
def write_tiff():
    """Factory: write_tiff(path, *channels) -> path."""
    return _write_channels


@pytest.fixture
def square_well():
    """Factory for flat wells with bright squares."""
    return _square_well


@pytest.fixture
def ring_well():
    """Factory for faint-blob wells with a bright ring outside the ROI."""
    return _ring_well


@pytest.fixture
def five_blobs() -> tuple[tuple[int, int, int], ...]:
    """(row, col, side) of five disjoint 50x50 squares in a 400x400 well."""
    return _FIVE_BLOBS
