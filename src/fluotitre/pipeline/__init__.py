"""FluoTitre Pipeline — per-image state machine and batch orchestration."""

from fluotitre.pipeline.engine import BatchResult, PipelineEngine
from fluotitre.pipeline.state import TERMINAL_STATES, ImageRun

__all__ = ["BatchResult", "ImageRun", "PipelineEngine", "TERMINAL_STATES"]
