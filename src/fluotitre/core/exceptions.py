"""Exception classes for the FluoTitre pipeline."""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all pipeline errors.

    Attributes:
        file_name: Name of the input file being processed when the error
            occurred, or None if the error is not tied to one image.
    """

    def __init__(self, message: str = "", file_name: str | None = None) -> None:
        self.message = message
        self.file_name = file_name
        super().__init__(self._format())

    def _format(self) -> str:
        if self.file_name:
            return f"{self.file_name}: {self.message}" if self.message else self.file_name
        return self.message

    def with_file(self, file_name: str) -> PipelineError:
        """Tag this error with the offending file name and return it."""
        self.file_name = file_name
        self.args = (self._format(),)
        return self


class ChannelNotFoundError(PipelineError):
    """Raised when neither the reporter nor the fallback channel is present."""

    def __init__(
        self,
        indices: tuple[int, ...] = (),
        available: tuple[int, ...] = (),
        file_name: str | None = None,
    ) -> None:
        self.indices = indices
        self.available = available
        wanted = ", ".join(str(i) for i in indices) or "?"
        have = ", ".join(str(i) for i in available) or "none"
        super().__init__(
            f"Channel not found: wanted one of [{wanted}], available [{have}]",
            file_name=file_name,
        )


class SegmentationError(PipelineError):
    """Raised when a raster cannot be thresholded or analyzed."""


class AbortedByUser(PipelineError):
    """Raised by a decision provider when the operator cancels.

    Attributes:
        stop_batch: True if the operator asked to stop the whole batch,
            not only the current image.
    """

    def __init__(
        self,
        message: str = "Aborted by user",
        file_name: str | None = None,
        stop_batch: bool = False,
    ) -> None:
        self.stop_batch = stop_batch
        super().__init__(message, file_name=file_name)


class ImageIOError(PipelineError, OSError):
    """Raised when an image or output file cannot be read or written."""


class DivisionByZeroError(PipelineError, ZeroDivisionError):
    """Raised when a titre is requested against a control with 0% coverage."""


class ConfigError(PipelineError, ValueError):
    """Raised for invalid pipeline configuration values."""
