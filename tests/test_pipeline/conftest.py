"""Shared fixtures for pipeline tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from fluotitre.core.exceptions import ImageIOError
from fluotitre.io.loader import Channel, ChannelSet, ImageLoader


class MemoryLoader(ImageLoader):
    """Serves in-memory channel rasters keyed by file name."""

    def __init__(self, images: dict[str, list[np.ndarray]], fail: dict[str, Exception] | None = None):
        self.images = images
        self.fail = fail or {}
        self.loaded: list[str] = []

    def load(self, path: Path) -> ChannelSet:
        name = Path(path).name
        self.loaded.append(name)
        if name in self.fail:
            raise self.fail[name]
        if name not in self.images:
            raise ImageIOError("no such image", file_name=name)
        return ChannelSet(name, [
            Channel(i, f"{Path(name).stem} - C={i}", data)
            for i, data in enumerate(self.images[name])
        ])


@pytest.fixture
def memory_loader():
    """Factory: memory_loader(images, fail=None) -> MemoryLoader."""
    return MemoryLoader
