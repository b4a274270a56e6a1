"""InputScanner — list the input files of a batch directory."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class InputScanner:
    """Lists candidate input files in a directory.

    Entries are skipped when they are sub-directories, hidden, start with the
    output-folder prefix, start with the mask prefix, or end with the summary
    file extension. Everything else is treated as an input image.

    Args:
        output_prefix: Name prefix of output folders (and anything they hold).
        summary_suffix: Extension of summary tables, e.g. ".xls".
        mask_prefix: Name prefix of saved masks.
    """

    def __init__(
        self,
        output_prefix: str = "Intensity_",
        summary_suffix: str = ".xls",
        mask_prefix: str | None = "Mask_",
    ) -> None:
        self._output_prefix = output_prefix
        self._summary_suffix = summary_suffix.lower()
        self._mask_prefix = mask_prefix

    def is_input(self, path: Path) -> bool:
        """Whether a directory entry counts as an input image."""
        name = path.name
        if path.is_dir():
            return False
        if name.startswith("."):
            return False
        if name.startswith(self._output_prefix):
            return False
        if self._mask_prefix and name.startswith(self._mask_prefix):
            return False
        if name.lower().endswith(self._summary_suffix):
            return False
        return True

    def scan(self, path: Path) -> list[Path]:
        """List input files directly inside ``path``, sorted by name.

        Raises:
            FileNotFoundError: If path does not exist.
            NotADirectoryError: If path is not a directory.
            ValueError: If no input files are found.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Input path does not exist: {path}")
        if not path.is_dir():
            raise NotADirectoryError(f"Input path is not a directory: {path}")

        entries = sorted(path.iterdir(), key=lambda p: p.name)
        inputs = [p for p in entries if self.is_input(p)]
        skipped = len(entries) - len(inputs)
        if skipped:
            logger.debug("Skipped %d non-input entries in %s", skipped, path)

        if not inputs:
            raise ValueError(f"No input files found in: {path}")
        return inputs
