"""Image loading — split an input file into per-channel rasters."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import numpy as np
import tifffile

from fluotitre.core.exceptions import ImageIOError

logger = logging.getLogger(__name__)

_CHANNEL_SUFFIX = re.compile(r"C=?(\d+)\s*$")


def channel_index_from_name(name: str) -> int | None:
    """Parse the channel index from a name ending in ``C=<n>`` or ``C<n>``."""
    m = _CHANNEL_SUFFIX.search(name)
    return int(m.group(1)) if m else None


def channel_name(stem: str, index: int) -> str:
    return f"{stem} - C={index}"


@dataclass(frozen=True)
class Channel:
    """One channel raster of an input file."""

    index: int
    name: str
    data: np.ndarray = field(repr=False, compare=False)


class ChannelSet:
    """Ordered channels produced by a loader for one input file."""

    def __init__(self, source: str, channels: list[Channel]) -> None:
        seen: set[int] = set()
        for ch in channels:
            if ch.index in seen:
                raise ValueError(f"Duplicate channel index {ch.index} in {source}")
            seen.add(ch.index)
        self.source = source
        self._channels = list(channels)

    @classmethod
    def from_named(cls, source: str, rasters: dict[str, np.ndarray]) -> ChannelSet:
        """Build a ChannelSet from ``{name: raster}``, reading indices from names.

        Raises:
            ValueError: If a name has no channel index suffix.
        """
        channels = []
        for name, data in rasters.items():
            index = channel_index_from_name(name)
            if index is None:
                raise ValueError(f"Channel name has no index suffix: {name!r}")
            channels.append(Channel(index=index, name=name, data=data))
        return cls(source, channels)

    @property
    def indices(self) -> tuple[int, ...]:
        return tuple(ch.index for ch in self._channels)

    def get(self, index: int) -> Channel | None:
        for ch in self._channels:
            if ch.index == index:
                return ch
        return None

    def __len__(self) -> int:
        return len(self._channels)

    def __iter__(self) -> Iterator[Channel]:
        return iter(self._channels)


class ImageLoader(ABC):
    """Abstract interface for image loaders.

    Concrete loaders must implement ``load()`` and return one raster per
    channel, each named with its channel index.
    """

    @abstractmethod
    def load(self, path: Path) -> ChannelSet:
        """Read ``path`` and split it into channels.

        Raises:
            ImageIOError: If the file cannot be read.
        """


class TiffChannelLoader(ImageLoader):
    """Load TIFF files via tifffile.

    A plain 2D page becomes channel 0. A series with a ``C`` axis, or with a
    small leading axis, is split into one channel per plane. Z and T axes
    are max-projected.

    Args:
        max_channels: Largest leading axis still treated as channels when
            the file carries no axes metadata.
    """

    def __init__(self, max_channels: int = 8) -> None:
        self._max_channels = max_channels

    def load(self, path: Path) -> ChannelSet:
        path = Path(path)
        try:
            with tifffile.TiffFile(str(path)) as tif:
                series = tif.series[0]
                data = series.asarray()
                axes = series.axes
        except (OSError, ValueError, tifffile.TiffFileError) as e:
            raise ImageIOError(f"Could not read image: {e}", file_name=path.name) from e

        planes = self._split(np.asarray(data), axes)
        channels = [
            Channel(index=i, name=channel_name(path.stem, i), data=plane)
            for i, plane in enumerate(planes)
        ]
        logger.debug("Loaded %s: %d channel(s), axes=%s", path.name, len(channels), axes)
        return ChannelSet(path.name, channels)

    def _split(self, data: np.ndarray, axes: str) -> list[np.ndarray]:
        """Return one 2D plane per channel."""
        # RGB samples are channels
        if "C" not in axes:
            axes = axes.replace("S", "C")

        for ax in reversed([i for i, a in enumerate(axes) if a in "ZT"]):
            data = data.max(axis=ax)
            axes = axes[:ax] + axes[ax + 1:]

        if data.ndim == 2:
            return [data]

        if "C" in axes:
            c_axis = axes.index("C")
        elif data.ndim == 3 and data.shape[0] <= self._max_channels:
            c_axis = 0
        elif data.ndim == 3 and data.shape[-1] <= self._max_channels:
            c_axis = data.ndim - 1
        else:
            raise ImageIOError(f"Cannot identify channel axis in shape {data.shape}")

        planes = np.moveaxis(data, c_axis, 0)
        if planes.ndim != 3:
            raise ImageIOError(f"Unsupported image shape {data.shape} (axes {axes})")
        return [planes[i] for i in range(planes.shape[0])]
