"""Napari decision viewer — editable ROI ellipse and live threshold preview."""

from __future__ import annotations

import logging
import os
import sys

import numpy as np

from fluotitre.core.exceptions import AbortedByUser
from fluotitre.core.models import RoiGeometry
from fluotitre.decisions.base import DecisionProvider

logger = logging.getLogger(__name__)


def roi_to_shape(roi: RoiGeometry) -> np.ndarray:
    """Napari ellipse data (bounding-box corners as (row, col)) for a ROI."""
    top = roi.center_y - roi.height / 2.0
    bottom = roi.center_y + roi.height / 2.0
    left = roi.center_x - roi.width / 2.0
    right = roi.center_x + roi.width / 2.0
    return np.array(
        [[top, left], [top, right], [bottom, right], [bottom, left]],
        dtype=float,
    )


def shape_to_roi(coords: np.ndarray) -> RoiGeometry:
    """ROI from napari ellipse data (any array of (row, col) corner points)."""
    coords = np.asarray(coords, dtype=float)
    y_min, x_min = coords[:, 0].min(), coords[:, 1].min()
    y_max, x_max = coords[:, 0].max(), coords[:, 1].max()
    return RoiGeometry(
        center_x=float((x_min + x_max) / 2.0),
        center_y=float((y_min + y_max) / 2.0),
        width=float(x_max - x_min),
        height=float(y_max - y_min),
    )


def _check_display() -> None:
    if sys.platform not in ("darwin", "win32") and not (
        os.environ.get("DISPLAY") or os.environ.get("WAYLAND_DISPLAY")
    ):
        raise RuntimeError(
            "napari requires a display server. "
            "Set DISPLAY or WAYLAND_DISPLAY."
        )


class NapariDecisionProvider(DecisionProvider):
    """Opens a napari window for every decision and blocks until it closes.

    Closing the window without pressing a button skips the image.
    """

    def position_roi(
        self,
        default: RoiGeometry,
        image: np.ndarray,
        file_name: str,
    ) -> RoiGeometry:
        decision = self._run_viewer(image, file_name, roi=default)
        return decision["roi"]

    def confirm_threshold(
        self,
        proposed: float,
        image: np.ndarray,
        file_name: str,
    ) -> float:
        decision = self._run_viewer(image, file_name, threshold=proposed)
        return float(decision["threshold"])

    def _run_viewer(
        self,
        image: np.ndarray,
        file_name: str,
        roi: RoiGeometry | None = None,
        threshold: float | None = None,
    ) -> dict:
        import napari
        from qtpy.QtWidgets import (
            QDoubleSpinBox,
            QLabel,
            QPushButton,
            QVBoxLayout,
            QWidget,
        )

        _check_display()

        state: dict = {"action": None, "roi": roi, "threshold": threshold}
        task = "Position ROI" if roi is not None else "Confirm threshold"
        viewer = napari.Viewer(title=f"{task} — {file_name}")
        viewer.add_image(image, name="image", colormap="gray")

        widget = QWidget()
        layout = QVBoxLayout()
        info_label = QLabel(f"File: {file_name}")
        layout.addWidget(info_label)

        shapes_layer = None
        if roi is not None:
            shapes_layer = viewer.add_shapes(
                [roi_to_shape(roi)],
                shape_type="ellipse",
                name="ROI",
                edge_color="yellow",
                edge_width=4,
                face_color=[1, 1, 0, 0.05],
            )
            shapes_layer.mode = "select"

        preview_layer = None
        spin = None
        if threshold is not None:
            preview_layer = viewer.add_labels(
                (image > threshold).astype(np.int32), name="threshold_preview", opacity=0.4,
            )
            spin = QDoubleSpinBox()
            spin.setRange(0.0, float(max(255, image.max())))
            spin.setDecimals(1)
            spin.setValue(float(threshold))
            layout.addWidget(QLabel("Threshold"))
            layout.addWidget(spin)

            def _on_threshold(value: float) -> None:
                state["threshold"] = float(value)
                preview_layer.data = (image > value).astype(np.int32)
                frac = float(np.mean(image > value)) if image.size else 0.0
                info_label.setText(f"File: {file_name}\nAbove threshold: {frac:.1%}")

            spin.valueChanged.connect(_on_threshold)

        def _current_roi() -> RoiGeometry | None:
            if shapes_layer is None or len(shapes_layer.data) == 0:
                return state["roi"]
            return shape_to_roi(shapes_layer.data[-1])

        def _finish(action: str) -> None:
            state["action"] = action
            if shapes_layer is not None:
                state["roi"] = _current_roi()
            viewer.close()

        accept_btn = QPushButton("Accept")
        skip_btn = QPushButton("Skip image")
        abort_btn = QPushButton("Abort batch")
        accept_btn.clicked.connect(lambda: _finish("accept"))
        skip_btn.clicked.connect(lambda: _finish("skip"))
        abort_btn.clicked.connect(lambda: _finish("abort"))
        layout.addWidget(accept_btn)
        layout.addWidget(skip_btn)
        layout.addWidget(abort_btn)
        widget.setLayout(layout)

        viewer.window.add_dock_widget(widget, name=task, area="right")

        # Block until viewer closes
        napari.run()

        action = state["action"]
        if action == "accept":
            logger.debug("%s: %s accepted", file_name, task.lower())
            return state
        if action == "abort":
            raise AbortedByUser("Batch aborted in viewer", file_name=file_name, stop_batch=True)
        raise AbortedByUser("Image skipped in viewer", file_name=file_name)
