"""ImageRun — per-image state machine."""

from __future__ import annotations

import logging

from fluotitre.core.models import ImageState

logger = logging.getLogger(__name__)

_TRANSITIONS: dict[ImageState, frozenset[ImageState]] = {
    ImageState.LOADED: frozenset({ImageState.CHANNEL_SELECTED}),
    ImageState.CHANNEL_SELECTED: frozenset({ImageState.CLASSIFIED}),
    ImageState.CLASSIFIED: frozenset({ImageState.SEGMENTED}),
    ImageState.SEGMENTED: frozenset({ImageState.ROI_RESTRICTED}),
    ImageState.ROI_RESTRICTED: frozenset({ImageState.ANALYZED}),
    ImageState.ANALYZED: frozenset({ImageState.SAVED}),
    ImageState.SAVED: frozenset(),
    ImageState.FAILED: frozenset(),
}

TERMINAL_STATES = frozenset({ImageState.SAVED, ImageState.FAILED})


class ImageRun:
    """Tracks one image from LOADED to SAVED or FAILED.

    FAILED is reachable from every non-terminal state. ``failed_in`` keeps
    the state the image was in when it failed.
    """

    def __init__(self, file_name: str) -> None:
        self.file_name = file_name
        self.state = ImageState.LOADED
        self.history: list[ImageState] = [ImageState.LOADED]
        self.failed_in: ImageState | None = None

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def advance(self, new_state: ImageState) -> None:
        """Move to ``new_state``.

        Raises:
            RuntimeError: If the transition is not allowed.
        """
        if new_state is ImageState.FAILED:
            self.fail()
            return
        if new_state not in _TRANSITIONS[self.state]:
            raise RuntimeError(
                f"{self.file_name}: illegal transition "
                f"{self.state.value} -> {new_state.value}"
            )
        logger.debug("%s: %s -> %s", self.file_name, self.state.value, new_state.value)
        self.state = new_state
        self.history.append(new_state)

    def fail(self) -> None:
        """Mark the image FAILED. A no-op if it already failed.

        Raises:
            RuntimeError: If the image was already saved.
        """
        if self.state is ImageState.FAILED:
            return
        if self.state is ImageState.SAVED:
            raise RuntimeError(f"{self.file_name}: cannot fail a saved image")
        logger.debug("%s: %s -> failed", self.file_name, self.state.value)
        self.failed_in = self.state
        self.state = ImageState.FAILED
        self.history.append(ImageState.FAILED)
