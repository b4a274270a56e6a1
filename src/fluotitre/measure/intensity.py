"""Channel selection, mean fluorescence intensity and mode classification."""

from __future__ import annotations

import logging

import numpy as np

from fluotitre.core.exceptions import ChannelNotFoundError, SegmentationError
from fluotitre.core.models import Classification
from fluotitre.io.loader import Channel, ChannelSet

logger = logging.getLogger(__name__)


def select_channel(
    channels: ChannelSet,
    preferred: int = 1,
    fallback: int = 0,
) -> Channel:
    """Pick the reporter channel, falling back to a second index.

    Args:
        channels: Channels of one input file.
        preferred: Reporter channel index.
        fallback: Index used when ``preferred`` is absent.

    Returns:
        The selected Channel. The ChannelSet is not modified.

    Raises:
        ChannelNotFoundError: If neither index is present.
    """
    channel = channels.get(preferred)
    if channel is not None:
        return channel

    channel = channels.get(fallback)
    if channel is not None:
        logger.info(
            "%s: channel %d not present, using channel %d",
            channels.source, preferred, fallback,
        )
        return channel

    raise ChannelNotFoundError(
        indices=(preferred, fallback),
        available=channels.indices,
        file_name=channels.source,
    )


def mean_intensity(raster: np.ndarray) -> float:
    """Arithmetic mean of all samples (MFI).

    Raises:
        SegmentationError: If the raster is empty.
    """
    if raster.size == 0:
        raise SegmentationError("Cannot measure intensity of an empty raster")
    return float(np.mean(raster, dtype=np.float64))


def classify(mfi: float, threshold: float = 1000.0) -> Classification:
    """Map an MFI to its processing mode. Strictly above ``threshold`` is high."""
    if mfi > threshold:
        return Classification.HIGH_AUTOFLUORESCENCE
    return Classification.NORMAL
