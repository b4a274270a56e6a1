"""PipelineEngine — per-image processing and the sequential batch loop."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

import numpy as np

from fluotitre.core.config import PipelineConfig
from fluotitre.core.exceptions import (
    AbortedByUser,
    ImageIOError,
    PipelineError,
)
from fluotitre.core.models import (
    BatchSummary,
    Classification,
    ImageFailure,
    ImageRecord,
    ImageState,
    RoiGeometry,
)
from fluotitre.decisions.base import DecisionProvider
from fluotitre.decisions.scripted import ScriptedDecisionProvider
from fluotitre.io.loader import ImageLoader, TiffChannelLoader
from fluotitre.io.scanner import InputScanner
from fluotitre.io.writer import ResultWriter, output_dir_for
from fluotitre.measure.background import rescale_to_8bit, subtract_background
from fluotitre.measure.intensity import classify, mean_intensity, select_channel
from fluotitre.measure.particle_analyzer import ParticleAnalyzer
from fluotitre.measure.roi import clear_outside
from fluotitre.pipeline.state import ImageRun
from fluotitre.segment.segmenter import Segmenter

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """Result of a batch run.

    Attributes:
        summary: Rows of every image that reached SAVED, in input order.
        failures: Images that ended in FAILED.
        output_dir: Folder holding masks and the summary.
        summary_path: Path of the written summary table.
        elapsed_seconds: Wall-clock time in seconds.
        aborted: True if the batch stopped before the last input.
        warnings: Human-readable messages for the caller.
    """

    summary: BatchSummary
    failures: list[ImageFailure] = field(default_factory=list)
    output_dir: Path | None = None
    summary_path: Path | None = None
    elapsed_seconds: float = 0.0
    aborted: bool = False
    warnings: list[str] = field(default_factory=list)

    @property
    def images_processed(self) -> int:
        return len(self.summary)


class PipelineEngine:
    """Runs input images one at a time through the quantification pipeline.

    Normal images are background-subtracted, rescaled and segmented first;
    the ROI is placed afterwards and only restricts particle counting.
    High-autofluorescence images get the ROI first: everything outside it is
    cleared before background subtraction, and the automatic threshold must
    be confirmed by the decision provider.

    The ROI returned by the decision provider becomes the default offered
    for the next image.

    Args:
        config: Pipeline parameters. Defaults if None.
        loader: Image loader. A ``TiffChannelLoader`` if None.
        decisions: Decision provider. Accepts every default if None.
    """

    def __init__(
        self,
        config: PipelineConfig | None = None,
        loader: ImageLoader | None = None,
        decisions: DecisionProvider | None = None,
    ) -> None:
        self.config = config or PipelineConfig()
        self._loader = loader or TiffChannelLoader()
        self._decisions = decisions or ScriptedDecisionProvider()
        self._segmenter = Segmenter(
            method=self.config.threshold_method,
            dark_background=not self.config.light_background,
            watershed_tolerance=self.config.watershed_tolerance,
        )
        self._analyzer = ParticleAnalyzer(min_area=self.config.min_particle_area)
        self._scanner = InputScanner(
            output_prefix=self.config.output_prefix,
            summary_suffix=self.config.summary_suffix,
            mask_prefix=self.config.mask_prefix,
        )
        self._roi = self.config.default_roi

    @property
    def current_roi(self) -> RoiGeometry:
        return self._roi

    # ------------------------------------------------------------------
    # Single image
    # ------------------------------------------------------------------

    def process_image(
        self,
        path: Path,
        run: ImageRun | None = None,
        force_classification: Classification | None = None,
    ) -> ImageRecord:
        """Process one file up to the ANALYZED state. Nothing is written.

        Args:
            path: Input file.
            run: State tracker; a new one if None.
            force_classification: Run this path regardless of the MFI
                (the MFI is still measured and recorded).

        Returns:
            ImageRecord for the file.

        Raises:
            PipelineError: Any pipeline error, tagged with the file name.
        """
        path = Path(path)
        name = path.name
        run = run or ImageRun(name)

        try:
            return self._process(path, run, force_classification)
        except PipelineError as e:
            run.fail()
            if e.file_name is None:
                e.with_file(name)
            raise
        except OSError as e:
            run.fail()
            raise ImageIOError(str(e), file_name=name) from e
        except Exception:
            run.fail()
            raise

    def _process(
        self,
        path: Path,
        run: ImageRun,
        force_classification: Classification | None,
    ) -> ImageRecord:
        cfg = self.config
        name = path.name

        channels = self._loader.load(path)
        channel = select_channel(
            channels, preferred=cfg.reporter_channel, fallback=cfg.fallback_channel,
        )
        del channels
        run.advance(ImageState.CHANNEL_SELECTED)

        raw = channel.data
        mfi = mean_intensity(raw)
        classification = force_classification or classify(mfi, cfg.autofluorescence_threshold)
        run.advance(ImageState.CLASSIFIED)
        logger.debug("%s: channel %d, MFI %.2f -> %s", name, channel.index, mfi, classification.value)

        if classification is Classification.HIGH_AUTOFLUORESCENCE:
            mask, threshold, roi = self._segment_high(raw, name)
            run.advance(ImageState.SEGMENTED)
        else:
            image8, mask, threshold = self._segment_normal(raw)
            run.advance(ImageState.SEGMENTED)
            roi = self._place_roi(image8, name)
        run.advance(ImageState.ROI_RESTRICTED)

        result = self._analyzer.analyze(mask, roi)
        run.advance(ImageState.ANALYZED)

        return ImageRecord(
            file_name=name,
            channel_index=channel.index,
            mfi=mfi,
            classification=classification,
            mask=result.mask,
            particle_count=result.count,
            total_area=result.total_area,
            percent_coverage=result.percent_coverage,
            roi=roi,
            threshold=threshold,
        )

    def _normalize(self, raster: np.ndarray) -> np.ndarray:
        background_free = subtract_background(
            raster,
            radius=self.config.rolling_radius,
            light_background=self.config.light_background,
        )
        return rescale_to_8bit(background_free)

    def _segment_normal(self, raw: np.ndarray) -> tuple[np.ndarray, np.ndarray, float]:
        image8 = self._normalize(raw)
        mask, threshold = self._segmenter.segment(image8)
        return image8, mask, threshold

    def _segment_high(
        self, raw: np.ndarray, name: str,
    ) -> tuple[np.ndarray, float, RoiGeometry]:
        roi = self._place_roi(raw, name)
        image8 = self._normalize(clear_outside(raw, roi))
        proposed = self._segmenter.propose_threshold(image8)
        threshold = self._decisions.confirm_threshold(proposed, image8, name)
        mask, threshold = self._segmenter.segment(image8, threshold)
        return mask, threshold, roi

    def _place_roi(self, image: np.ndarray, name: str) -> RoiGeometry:
        roi = self._decisions.position_roi(self._roi, image, name)
        self._roi = roi
        return roi

    # ------------------------------------------------------------------
    # Batch
    # ------------------------------------------------------------------

    def scan(self, input_dir: Path) -> list[Path]:
        """List the input files of ``input_dir``."""
        return self._scanner.scan(input_dir)

    def run(
        self,
        input_dir: Path | None = None,
        files: Sequence[Path] | None = None,
        output_dir: Path | None = None,
        progress_callback: Callable[[int, int, str], None] | None = None,
    ) -> BatchResult:
        """Process a batch sequentially and write masks plus one summary.

        Args:
            input_dir: Directory to scan for inputs.
            files: Explicit input files (skips scanning).
            output_dir: Output folder. Defaults to
                ``<input_dir>/<output_prefix><input_dir name>``.
            progress_callback: Optional callback(current, total, file_name).

        Returns:
            BatchResult with the summary and failures.

        Raises:
            ValueError: If neither input_dir nor files is given.
            ImageIOError: On read/write failures when ``on_io_error`` is "stop".
        """
        start = time.monotonic()
        cfg = self.config

        if files is None:
            if input_dir is None:
                raise ValueError("Either input_dir or files is required")
            inputs = self.scan(Path(input_dir))
        else:
            inputs = [Path(f) for f in files]
            if not inputs:
                raise ValueError("No input files given")

        if output_dir is None:
            base = Path(input_dir) if input_dir is not None else inputs[0].parent
            output_dir = output_dir_for(base, cfg.output_prefix)

        writer = ResultWriter(
            output_dir, mask_prefix=cfg.mask_prefix, summary_name=cfg.summary_name,
        )
        writer.prepare()

        result = BatchResult(summary=BatchSummary(), output_dir=writer.output_dir)
        total = len(inputs)

        for i, path in enumerate(inputs):
            run = ImageRun(path.name)
            try:
                self._run_one(path, run, writer, result)
            except AbortedByUser as e:
                self._record_failure(result, run, e)
                if e.stop_batch or cfg.on_abort == "stop":
                    result.aborted = i + 1 < total
                    logger.warning("Batch stopped at %s", path.name)
                    break
            except ImageIOError as e:
                self._record_failure(result, run, e)
                if cfg.on_io_error == "stop":
                    result.aborted = True
                    self._finish(result, writer, start)
                    raise
            except PipelineError as e:
                self._record_failure(result, run, e)
            except MemoryError:
                raise
            except Exception as exc:
                logger.warning(
                    "Processing failed for %s: %s", path.name, exc, exc_info=True,
                )
                self._record_failure(result, run, exc)
            finally:
                if progress_callback:
                    progress_callback(i + 1, total, path.name)

        self._finish(result, writer, start)
        return result

    def _run_one(
        self,
        path: Path,
        run: ImageRun,
        writer: ResultWriter,
        result: BatchResult,
    ) -> None:
        record = self.process_image(path, run=run)
        if result.summary.find(record.label) is not None:
            raise PipelineError(
                "Another input with this file name was already processed",
                file_name=record.file_name,
            )
        try:
            writer.write_mask(record.file_name, record.mask)
        except PipelineError:
            run.fail()
            raise
        run.advance(ImageState.SAVED)
        result.summary.append(record)
        logger.info(
            "%s: %s, %d particle(s), %.3f%% coverage",
            record.file_name, record.classification.value,
            record.particle_count, record.percent_coverage,
        )

    def _record_failure(self, result: BatchResult, run: ImageRun, error: Exception) -> None:
        if not run.done:
            run.fail()
        state = run.failed_in or run.state
        result.failures.append(ImageFailure(file_name=run.file_name, state=state, error=error))
        message = error.message if isinstance(error, PipelineError) else str(error)
        result.warnings.append(f"{run.file_name}: {type(error).__name__}: {message}")
        if not isinstance(error, AbortedByUser):
            logger.warning("%s failed in state %s: %s", run.file_name, state.value, message)

    def _finish(self, result: BatchResult, writer: ResultWriter, start: float) -> None:
        result.summary_path = writer.write_summary(result.summary)
        result.elapsed_seconds = round(time.monotonic() - start, 3)
