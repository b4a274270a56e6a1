"""Tests for fluotitre.core.exceptions."""

import pytest

from fluotitre.core.exceptions import (
    AbortedByUser,
    ChannelNotFoundError,
    ConfigError,
    DivisionByZeroError,
    ImageIOError,
    PipelineError,
    SegmentationError,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_cls",
        [ChannelNotFoundError, SegmentationError, AbortedByUser, ImageIOError,
         DivisionByZeroError, ConfigError],
    )
    def test_all_are_pipeline_errors(self, exc_cls):
        assert issubclass(exc_cls, PipelineError)

    def test_io_error_is_oserror(self):
        assert issubclass(ImageIOError, OSError)

    def test_division_error_is_zero_division(self):
        with pytest.raises(ZeroDivisionError):
            raise DivisionByZeroError("control is empty")

    def test_config_error_is_value_error(self):
        assert issubclass(ConfigError, ValueError)


class TestMessages:
    def test_message_without_file(self):
        e = SegmentationError("empty raster")
        assert str(e) == "empty raster"
        assert e.file_name is None

    def test_message_with_file(self):
        e = SegmentationError("empty raster", file_name="w1.tif")
        assert str(e) == "w1.tif: empty raster"
        assert e.message == "empty raster"

    def test_with_file_tags_later(self):
        e = SegmentationError("boom")
        assert e.with_file("w2.tif") is e
        assert e.file_name == "w2.tif"
        assert str(e) == "w2.tif: boom"

    def test_channel_not_found_lists_channels(self):
        e = ChannelNotFoundError(indices=(1, 0), available=(2, 3), file_name="x.tif")
        assert "wanted one of [1, 0]" in str(e)
        assert "available [2, 3]" in str(e)
        assert e.indices == (1, 0)
        assert e.available == (2, 3)

    def test_channel_not_found_no_channels(self):
        e = ChannelNotFoundError(indices=(1, 0))
        assert "available [none]" in str(e)


class TestAbortedByUser:
    def test_defaults_skip_image(self):
        e = AbortedByUser()
        assert e.stop_batch is False
        assert e.message == "Aborted by user"

    def test_stop_batch(self):
        e = AbortedByUser("stop", file_name="a.tif", stop_batch=True)
        assert e.stop_batch is True
        assert e.file_name == "a.tif"
