"""Output writers — mask TIFFs and the batch summary table."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
import tifffile

from fluotitre.core.exceptions import ImageIOError
from fluotitre.core.models import BatchSummary, Classification, SummaryRow

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["Slice", "Count", "Total Area", "%Area", "MFI", "Mode"]
_TIFF_SUFFIXES = (".tif", ".tiff")


def output_dir_for(input_dir: Path, prefix: str) -> Path:
    """Default output folder: ``<input_dir>/<prefix><input_dir name>``."""
    input_dir = Path(input_dir)
    return input_dir / f"{prefix}{input_dir.resolve().name}"


def mask_path_for(output_dir: Path, source_name: str, prefix: str) -> Path:
    """Mask path: the prefix plus the full source name, as a TIFF.

    ``a.tif`` and ``a.tiff`` map to ``Mask_a.tif`` and ``Mask_a.tiff``; other
    names gain a ``.tif`` suffix (``a.png`` -> ``Mask_a.png.tif``).
    """
    name = Path(source_name).name
    if Path(name).suffix.lower() not in _TIFF_SUFFIXES:
        name = f"{name}.tif"
    return Path(output_dir) / f"{prefix}{name}"


class ResultWriter:
    """Writes per-image masks and the final summary into one folder.

    Args:
        output_dir: Target folder, created on first use.
        mask_prefix: Prefix prepended to the source file stem.
        summary_name: File name of the summary table.
    """

    def __init__(
        self,
        output_dir: Path,
        mask_prefix: str = "Mask_",
        summary_name: str = "summary.xls",
    ) -> None:
        self.output_dir = Path(output_dir)
        self._mask_prefix = mask_prefix
        self._summary_name = summary_name

    @property
    def summary_path(self) -> Path:
        return self.output_dir / self._summary_name

    def prepare(self) -> Path:
        """Create the output folder if needed."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ImageIOError(f"Could not create output folder {self.output_dir}: {e}") from e
        return self.output_dir

    def write_mask(self, source_name: str, mask: np.ndarray) -> Path:
        """Save a binary mask losslessly next to the other results."""
        path = mask_path_for(self.output_dir, source_name, self._mask_prefix)
        try:
            tifffile.imwrite(str(path), mask.astype(np.uint8), compression="zlib")
        except OSError as e:
            raise ImageIOError(f"Could not write mask {path.name}: {e}", file_name=source_name) from e
        logger.debug("Wrote mask %s", path)
        return path

    def write_summary(self, summary: BatchSummary) -> Path:
        """Write the summary table once, as tab-separated text."""
        path = self.summary_path
        try:
            summary.to_dataframe().to_csv(path, sep="\t", index=False)
        except OSError as e:
            raise ImageIOError(f"Could not write summary {path.name}: {e}") from e
        logger.info("Wrote summary with %d row(s) to %s", len(summary), path)
        return path


def read_summary(path: Path) -> BatchSummary:
    """Read a summary table written by ``ResultWriter.write_summary``.

    Raises:
        ImageIOError: If the file cannot be read.
        ValueError: If required columns are missing.
    """
    import pandas as pd

    path = Path(path)
    try:
        df = pd.read_csv(path, sep="\t")
    except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
        raise ImageIOError(f"Could not read summary: {e}", file_name=path.name) from e

    missing = [c for c in ("Slice", "Count", "Total Area", "%Area") if c not in df.columns]
    if missing:
        raise ValueError(f"Summary {path.name} is missing columns: {', '.join(missing)}")

    rows = []
    for rec in df.to_dict("records"):
        mfi = rec.get("MFI")
        mode = rec.get("Mode")
        rows.append(
            SummaryRow(
                label=str(rec["Slice"]),
                count=int(rec["Count"]),
                total_area=float(rec["Total Area"]),
                percent_coverage=float(rec["%Area"]),
                mfi=None if mfi is None or pd.isna(mfi) else float(mfi),
                classification=None if mode is None or pd.isna(mode) else Classification(mode),
            )
        )
    return BatchSummary(rows)
