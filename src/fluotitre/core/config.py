"""PipelineConfig — algorithm parameters and batch policies.

YAML serialization requires pyyaml. Raises ImportError with clear install
instructions if pyyaml is not available.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from fluotitre.core.exceptions import ConfigError
from fluotitre.core.models import RoiGeometry

DEFAULT_ROI = RoiGeometry(center_x=700.0, center_y=1000.0, width=3850.0, height=3850.0)

_POLICIES = frozenset({"skip", "stop"})
_AUTO_METHODS = frozenset({"triangle", "otsu", "li"})


def _require_yaml() -> Any:
    """Import and return the yaml module, or raise a helpful error."""
    try:
        import yaml

        return yaml
    except ImportError:
        raise ImportError(
            "pyyaml is required for configuration files. "
            "Install it with: pip install pyyaml"
        ) from None


@dataclass(frozen=True)
class PipelineConfig:
    """Parameters for a batch run.

    Attributes:
        rolling_radius: Rolling-ball radius for background subtraction.
        min_particle_area: Smallest particle (pixels) kept by the analyzer.
        autofluorescence_threshold: MFI above which an image takes the
            high-autofluorescence path.
        default_roi: ROI offered to the decision provider.
        reporter_channel: Channel index analyzed when present.
        fallback_channel: Channel index used when the reporter is absent.
        threshold_method: Automatic threshold method for the 8-bit raster.
        watershed_tolerance: Height of distance-map maxima used as
            watershed seeds.
        light_background: Foreground is darker than background.
        output_prefix: Prefix of the output folder name.
        mask_prefix: Prefix of saved mask file names.
        summary_name: File name of the summary table.
        on_abort: "skip" or "stop" the batch when the operator aborts an image.
        on_io_error: "skip" or "stop" the batch on read/write failures.
    """

    rolling_radius: float = 50.0
    min_particle_area: int = 100
    autofluorescence_threshold: float = 1000.0
    default_roi: RoiGeometry = field(default=DEFAULT_ROI)
    reporter_channel: int = 1
    fallback_channel: int = 0
    threshold_method: str = "triangle"
    watershed_tolerance: float = 0.5
    light_background: bool = False
    output_prefix: str = "Intensity_"
    mask_prefix: str = "Mask_"
    summary_name: str = "summary.xls"
    on_abort: str = "skip"
    on_io_error: str = "stop"

    def __post_init__(self) -> None:
        """Validate parameters."""
        if self.rolling_radius <= 0:
            raise ConfigError(f"rolling_radius must be > 0, got {self.rolling_radius}")
        if self.min_particle_area < 0:
            raise ConfigError(
                f"min_particle_area must be >= 0, got {self.min_particle_area}"
            )
        if self.watershed_tolerance < 0:
            raise ConfigError(
                f"watershed_tolerance must be >= 0, got {self.watershed_tolerance}"
            )
        if self.threshold_method not in _AUTO_METHODS:
            raise ConfigError(
                f"threshold_method must be one of {sorted(_AUTO_METHODS)}, "
                f"got {self.threshold_method!r}"
            )
        if self.reporter_channel < 0 or self.fallback_channel < 0:
            raise ConfigError("channel indices must be >= 0")
        if not self.output_prefix:
            raise ConfigError("output_prefix must not be empty")
        if "." not in self.summary_name:
            raise ConfigError(
                f"summary_name needs a file extension, got {self.summary_name!r}"
            )
        for name in ("on_abort", "on_io_error"):
            value = getattr(self, name)
            if value not in _POLICIES:
                raise ConfigError(
                    f"{name} must be one of {sorted(_POLICIES)}, got {value!r}"
                )

    @property
    def summary_suffix(self) -> str:
        return Path(self.summary_name).suffix.lower()

    def replace(self, **overrides: Any) -> PipelineConfig:
        """Return a copy with the given fields replaced. None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        data = dataclasses.asdict(self)
        data["default_roi"] = self.default_roi.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PipelineConfig:
        """Build a config from a plain mapping, rejecting unknown keys."""
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values = dict(data)
        roi = values.get("default_roi")
        if isinstance(roi, dict):
            try:
                values["default_roi"] = RoiGeometry(
                    center_x=float(roi["center_x"]),
                    center_y=float(roi["center_y"]),
                    width=float(roi["width"]),
                    height=float(roi["height"]),
                )
            except (KeyError, TypeError, ValueError) as e:
                raise ConfigError(f"Invalid default_roi: {e}") from e
        return cls(**values)

    def to_yaml(self, path: Path) -> None:
        """Serialize this config to a YAML file."""
        yaml = _require_yaml()
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, path: Path) -> PipelineConfig:
        """Load a config from a YAML file. Missing keys keep their defaults."""
        yaml = _require_yaml()
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration file must contain a mapping: {path}")
        return cls.from_dict(data)
