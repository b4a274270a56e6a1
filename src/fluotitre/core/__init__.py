"""FluoTitre Core — models, configuration, exceptions."""

from fluotitre.core.config import DEFAULT_ROI, PipelineConfig
from fluotitre.core.exceptions import (
    AbortedByUser,
    ChannelNotFoundError,
    ConfigError,
    DivisionByZeroError,
    ImageIOError,
    PipelineError,
    SegmentationError,
)
from fluotitre.core.models import (
    BatchSummary,
    CalibrationWell,
    Classification,
    ImageFailure,
    ImageRecord,
    ImageState,
    RoiGeometry,
    SummaryRow,
    TitreEstimate,
)

__all__ = [
    "AbortedByUser",
    "BatchSummary",
    "CalibrationWell",
    "ChannelNotFoundError",
    "Classification",
    "ConfigError",
    "DEFAULT_ROI",
    "DivisionByZeroError",
    "ImageFailure",
    "ImageIOError",
    "ImageRecord",
    "ImageState",
    "PipelineConfig",
    "PipelineError",
    "RoiGeometry",
    "SegmentationError",
    "SummaryRow",
    "TitreEstimate",
]
