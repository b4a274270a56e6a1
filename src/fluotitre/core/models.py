"""Data models for the FluoTitre core module."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import TYPE_CHECKING, Iterator

import numpy as np

if TYPE_CHECKING:
    import pandas as pd


class Classification(Enum):
    """Processing mode selected from the mean fluorescence intensity."""

    NORMAL = "normal"
    HIGH_AUTOFLUORESCENCE = "high_autofluorescence"


class ImageState(Enum):
    """Per-image pipeline state."""

    LOADED = "loaded"
    CHANNEL_SELECTED = "channel_selected"
    CLASSIFIED = "classified"
    SEGMENTED = "segmented"
    ROI_RESTRICTED = "roi_restricted"
    ANALYZED = "analyzed"
    SAVED = "saved"
    FAILED = "failed"


@dataclass(frozen=True)
class RoiGeometry:
    """Elliptical region of interest in image pixel coordinates.

    Attributes:
        center_x: Ellipse centre column.
        center_y: Ellipse centre row.
        width: Full extent along x.
        height: Full extent along y.
    """

    center_x: float
    center_y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        """Validate extents."""
        if not (self.width > 0 and self.height > 0):
            raise ValueError(
                f"ROI width and height must be > 0, got {self.width}x{self.height}"
            )

    @property
    def nominal_area(self) -> float:
        """Analytic ellipse area (unclipped)."""
        return math.pi * (self.width / 2.0) * (self.height / 2.0)

    def moved_to(self, center_x: float, center_y: float) -> RoiGeometry:
        """Return a copy of this ROI centred on a new position."""
        return replace(self, center_x=float(center_x), center_y=float(center_y))

    def to_dict(self) -> dict[str, float]:
        return {
            "center_x": self.center_x,
            "center_y": self.center_y,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def parse(cls, text: str) -> RoiGeometry:
        """Parse ``"cx,cy,w,h"`` into a RoiGeometry."""
        parts = [p.strip() for p in text.split(",")]
        if len(parts) != 4:
            raise ValueError(f"ROI must be 'cx,cy,width,height', got {text!r}")
        cx, cy, w, h = (float(p) for p in parts)
        return cls(cx, cy, w, h)


@dataclass(frozen=True)
class ImageRecord:
    """Result of processing one input image.

    Attributes:
        file_name: Source file name.
        channel_index: Index of the channel that was analyzed.
        mfi: Mean intensity of the raw selected channel.
        classification: Processing mode chosen from ``mfi``.
        mask: uint8 mask of kept particles (0 / 255).
        particle_count: Number of particles kept.
        total_area: Summed particle area in pixels.
        percent_coverage: ``total_area`` relative to the ROI area, in percent.
        roi: ROI used for the analysis.
        threshold: Final threshold applied to the 8-bit raster.
    """

    file_name: str
    channel_index: int
    mfi: float
    classification: Classification
    mask: np.ndarray = field(repr=False, compare=False)
    particle_count: int
    total_area: int
    percent_coverage: float
    roi: RoiGeometry
    threshold: float

    @property
    def label(self) -> str:
        return self.file_name


@dataclass(frozen=True)
class SummaryRow:
    """One line of the batch summary table."""

    label: str
    count: int
    total_area: float
    percent_coverage: float
    mfi: float | None = None
    classification: Classification | None = None

    @classmethod
    def from_record(cls, record: ImageRecord) -> SummaryRow:
        return cls(
            label=record.label,
            count=record.particle_count,
            total_area=float(record.total_area),
            percent_coverage=record.percent_coverage,
            mfi=record.mfi,
            classification=record.classification,
        )


class BatchSummary:
    """Append-only, ordered collection of summary rows."""

    def __init__(self, rows: list[SummaryRow] | None = None) -> None:
        self._rows: list[SummaryRow] = []
        for row in rows or []:
            self.append(row)

    def append(self, row: SummaryRow | ImageRecord) -> SummaryRow:
        """Append a row (or the summary of an ImageRecord).

        Raises:
            ValueError: If a row with the same label already exists.
        """
        if isinstance(row, ImageRecord):
            row = SummaryRow.from_record(row)
        if self.find(row.label) is not None:
            raise ValueError(f"Duplicate summary label: {row.label}")
        self._rows.append(row)
        return row

    @property
    def rows(self) -> tuple[SummaryRow, ...]:
        return tuple(self._rows)

    def find(self, label: str) -> SummaryRow | None:
        for row in self._rows:
            if row.label == label:
                return row
        return None

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[SummaryRow]:
        return iter(self._rows)

    def to_dataframe(self) -> pd.DataFrame:
        """Tabular view with the summary file's column names."""
        import pandas as pd

        return pd.DataFrame(
            {
                "Slice": [r.label for r in self._rows],
                "Count": [r.count for r in self._rows],
                "Total Area": [r.total_area for r in self._rows],
                "%Area": [r.percent_coverage for r in self._rows],
                "MFI": [r.mfi for r in self._rows],
                "Mode": [
                    r.classification.value if r.classification else None
                    for r in self._rows
                ],
            },
            columns=["Slice", "Count", "Total Area", "%Area", "MFI", "Mode"],
        )


@dataclass(frozen=True)
class CalibrationWell:
    """A well with an independently known titre."""

    known_titre: float
    percent_coverage: float
    label: str | None = None

    def __post_init__(self) -> None:
        """Validate ranges."""
        if self.known_titre < 0:
            raise ValueError(f"known_titre must be >= 0, got {self.known_titre}")
        if not (0.0 <= self.percent_coverage <= 100.0):
            raise ValueError(
                f"percent_coverage must be between 0 and 100, got {self.percent_coverage}"
            )


@dataclass(frozen=True)
class TitreEstimate:
    """Estimated titre for one experimental well."""

    label: str
    percent_coverage: float
    titre: float
    baseline_ok: bool = True


@dataclass(frozen=True)
class ImageFailure:
    """An input that did not reach the SAVED state."""

    file_name: str
    state: ImageState
    error: Exception = field(compare=False)

    @property
    def kind(self) -> str:
        return type(self.error).__name__
