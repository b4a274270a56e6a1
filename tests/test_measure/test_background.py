"""Tests for rolling-ball subtraction and 8-bit rescaling."""

import numpy as np
import pytest

from fluotitre.measure.background import (
    rescale_to_8bit,
    shrink_factor,
    subtract_background,
)


class TestShrinkFactor:
    @pytest.mark.parametrize(
        "radius,expected", [(5, 1), (10, 1), (11, 2), (30, 2), (50, 4), (100, 4), (150, 8)],
    )
    def test_factor(self, radius, expected):
        assert shrink_factor(radius) == expected


class TestSubtractBackground:
    def test_flat_image_becomes_zero(self):
        raster = np.full((64, 64), 300, dtype=np.uint16)
        result = subtract_background(raster, radius=10)
        assert result.dtype == np.float64
        np.testing.assert_allclose(result, 0.0, atol=1e-6)

    def test_small_blob_survives(self):
        raster = np.full((120, 120), 100, dtype=np.uint16)
        raster[50:60, 50:60] = 1100
        result = subtract_background(raster, radius=50)
        assert result[55, 55] > 900
        assert result[5, 5] == pytest.approx(0.0, abs=1e-6)

    def test_removes_gradient(self):
        ramp = np.tile(np.linspace(100, 400, 128), (128, 1))
        raster = ramp.copy()
        raster[60:66, 60:66] += 500
        result = subtract_background(raster, radius=10)
        assert result[63, 63] > 400
        assert result[10, 10] < 20

    def test_non_negative(self):
        rng = np.random.default_rng(0)
        raster = rng.integers(0, 1000, size=(80, 80)).astype(np.uint16)
        assert subtract_background(raster, radius=20).min() >= 0

    def test_input_unchanged(self):
        raster = np.full((40, 40), 50, dtype=np.uint16)
        raster[10:15, 10:15] = 500
        before = raster.copy()
        subtract_background(raster, radius=10)
        np.testing.assert_array_equal(raster, before)

    def test_light_background(self):
        raster = np.full((64, 64), 1000.0)
        raster[30:36, 30:36] = 200.0
        result = subtract_background(raster, radius=10, light_background=True)
        assert result[33, 33] < result[5, 5]

    def test_invalid_radius(self):
        with pytest.raises(ValueError):
            subtract_background(np.zeros((8, 8)), radius=0)


class TestRescaleTo8Bit:
    def test_range(self):
        raster = np.array([[10.0, 35.0], [60.0, 110.0]])
        out = rescale_to_8bit(raster)
        assert out.dtype == np.uint8
        assert out.min() == 0
        assert out.max() == 255
        assert out[0, 1] == 64

    def test_constant_is_zero(self):
        out = rescale_to_8bit(np.full((5, 5), 42.0))
        assert out.dtype == np.uint8
        assert not out.any()

    def test_all_zero(self):
        assert not rescale_to_8bit(np.zeros((5, 5))).any()
