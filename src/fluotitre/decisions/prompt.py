"""Terminal decision provider using rich prompts."""

from __future__ import annotations

import numpy as np
from rich.console import Console
from rich.prompt import FloatPrompt, Prompt

from fluotitre.core.exceptions import AbortedByUser
from fluotitre.core.models import RoiGeometry
from fluotitre.decisions.base import DecisionProvider
from fluotitre.measure.roi import roi_mask

_HELP = "[dim]y = accept, e = edit, a = skip this image, s = stop the batch[/dim]"


class PromptDecisionProvider(DecisionProvider):
    """Blocks on terminal input for every decision.

    Args:
        console: Rich console used for output and prompts.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def _ask(self, question: str, file_name: str) -> str:
        try:
            choice = Prompt.ask(
                question, choices=["y", "e", "a", "s"], default="y",
                console=self._console,
            )
        except (EOFError, KeyboardInterrupt):
            raise AbortedByUser("Input closed", file_name=file_name, stop_batch=True) from None
        if choice == "a":
            raise AbortedByUser(file_name=file_name)
        if choice == "s":
            raise AbortedByUser("Batch stopped by user", file_name=file_name, stop_batch=True)
        return choice

    def position_roi(
        self,
        default: RoiGeometry,
        image: np.ndarray,
        file_name: str,
    ) -> RoiGeometry:
        roi = default
        while True:
            inside = int(np.count_nonzero(roi_mask(image.shape, roi)))
            self._console.print(
                f"\n[bold]{file_name}[/bold] ({image.shape[1]}x{image.shape[0]})\n"
                f"  ROI centre ({roi.center_x:g}, {roi.center_y:g}), "
                f"size {roi.width:g}x{roi.height:g}, {inside} px inside the image"
            )
            self._console.print(_HELP)
            if self._ask("Use this ROI?", file_name) == "y":
                return roi
            cx = FloatPrompt.ask("  Centre x", default=roi.center_x, console=self._console)
            cy = FloatPrompt.ask("  Centre y", default=roi.center_y, console=self._console)
            roi = roi.moved_to(cx, cy)

    def confirm_threshold(
        self,
        proposed: float,
        image: np.ndarray,
        file_name: str,
    ) -> float:
        value = proposed
        while True:
            fraction = float(np.mean(image > value)) if image.size else 0.0
            self._console.print(
                f"\n[bold]{file_name}[/bold]: threshold {value:.1f} "
                f"({fraction:.2%} of pixels above)"
            )
            self._console.print(_HELP)
            if self._ask("Accept threshold?", file_name) == "y":
                return float(value)
            value = FloatPrompt.ask("  New threshold (0-255)", default=value, console=self._console)
