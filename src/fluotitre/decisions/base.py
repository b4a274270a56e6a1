"""Abstract decision-provider interface for ROI placement and threshold review."""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np

from fluotitre.core.models import RoiGeometry


class DecisionProvider(ABC):
    """Supplies the operator decisions the pipeline blocks on.

    Implementations may raise ``AbortedByUser`` from either method to cancel
    the current image (``stop_batch=True`` to cancel the whole batch).
    """

    @abstractmethod
    def position_roi(
        self,
        default: RoiGeometry,
        image: np.ndarray,
        file_name: str,
    ) -> RoiGeometry:
        """Return the ROI to use for ``file_name``.

        Args:
            default: ROI proposed by the configuration.
            image: Raster the ROI will be placed on (for display only).
            file_name: Source file being processed.
        """

    @abstractmethod
    def confirm_threshold(
        self,
        proposed: float,
        image: np.ndarray,
        file_name: str,
    ) -> float:
        """Confirm or override an automatic threshold.

        Only called on the high-autofluorescence path.

        Args:
            proposed: Automatically computed threshold.
            image: 8-bit raster the threshold applies to.
            file_name: Source file being processed.
        """
