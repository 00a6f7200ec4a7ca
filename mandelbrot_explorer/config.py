"""
Configuration for the Mandelbrot explorer.

ExplorerConfig bundles every tunable of the explorer: grid size, worker
count, the initial view and the navigation step sizes. Values are checked
once when the config is built so the frame loop never has to deal with a
degenerate grid or a non-positive extent.

Settings can also be loaded from a JSON file:

    {
        "grid_width": 800,
        "grid_height": 800,
        "initial_iteration_limit": 500
    }

Complex values (initial_origin) are written as a [real, imag] pair.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Optional

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when configuration values cannot produce a valid view."""


DEFAULT_EXTENT = 2.5
MAX_EXTENT_MULTIPLIER = 4  # Zoom-out stops at 4x the initial framing
AUTO_MAX_EXTENT = "auto"


def default_worker_count():
    """Number of hardware execution units, at least 1."""
    return max(1, os.cpu_count() or 1)


@dataclass(frozen=True)
class ExplorerConfig:
    """
    All recognized options of the explorer.

    Attributes:
        grid_width, grid_height: Pixel grid dimensions
        worker_count: Threads used per recompute pass
        initial_origin: Plane coordinates of the image center at startup/reset
        initial_extent: Plane width spanned by the image at startup/reset
        initial_iteration_limit: Escape-time iteration cap at startup/reset
        max_extent: Upper clamp on zoom-out, None for no clamp.
            "auto" (the default) resolves to
            MAX_EXTENT_MULTIPLIER * initial_extent.
        saturation: HSV saturation of the color mapping
        iteration_step: Amount added/removed per iteration-limit command
        min_iteration_limit: Floor for iteration-limit decrements
        pan_divisor: A pan step moves the origin by extent / pan_divisor
        zoom_factor: Coarse zoom multiplier (keyboard)
        fine_zoom_factor: Fine zoom multiplier (mouse wheel)
        fps: Frame rate cap of the display loop
    """

    grid_width: int = 600
    grid_height: int = 600
    worker_count: int = field(default_factory=default_worker_count)
    initial_origin: complex = complex(-0.5, 0.0)
    initial_extent: float = DEFAULT_EXTENT
    initial_iteration_limit: int = 250
    max_extent: Optional[float] = AUTO_MAX_EXTENT
    saturation: float = 0.8
    iteration_step: int = 25
    min_iteration_limit: int = 25
    pan_divisor: float = 25.0
    zoom_factor: float = 1.5
    fine_zoom_factor: float = 1.2
    fps: int = 60
    # True while max_extent follows initial_extent
    max_extent_auto: bool = field(init=False, repr=False, compare=False, default=False)

    def __post_init__(self):
        for name in ("grid_width", "grid_height", "worker_count",
                     "initial_iteration_limit", "iteration_step",
                     "min_iteration_limit", "fps"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got {value!r}")

        if self.grid_width != self.grid_height:
            logger.warning("Grid is %dx%d; the imaginary span is scaled to keep pixels square",
                           self.grid_width, self.grid_height)

        if not self.initial_extent > 0:
            raise ConfigError(f"initial_extent must be positive, got {self.initial_extent!r}")
        object.__setattr__(self, "initial_extent", float(self.initial_extent))

        if self.max_extent == AUTO_MAX_EXTENT:
            object.__setattr__(self, "max_extent", MAX_EXTENT_MULTIPLIER * self.initial_extent)
            object.__setattr__(self, "max_extent_auto", True)
        elif self.max_extent is not None:
            if isinstance(self.max_extent, (bool, str)) \
                    or not isinstance(self.max_extent, (int, float)):
                raise ConfigError(f"max_extent must be a number, \"auto\" or null, "
                                  f"got {self.max_extent!r}")
            object.__setattr__(self, "max_extent", float(self.max_extent))

        if self.max_extent is not None and self.max_extent < self.initial_extent:
            raise ConfigError(
                f"max_extent ({self.max_extent!r}) is smaller than "
                f"initial_extent ({self.initial_extent!r})"
            )
        if not 0.0 <= self.saturation <= 1.0:
            raise ConfigError(f"saturation must be within [0, 1], got {self.saturation!r}")
        if not self.pan_divisor > 0:
            raise ConfigError(f"pan_divisor must be positive, got {self.pan_divisor!r}")
        for name in ("zoom_factor", "fine_zoom_factor"):
            if not getattr(self, name) > 1.0:
                raise ConfigError(f"{name} must be greater than 1, got {getattr(self, name)!r}")

        # Coerce here so the compute kernels always see plain Python numbers
        object.__setattr__(self, "initial_origin", complex(self.initial_origin))

    def with_overrides(self, **overrides):
        """
        Return a copy with the given fields replaced.

        None values are ignored so argparse results can be passed straight
        through. A max_extent that was never set explicitly keeps following
        initial_extent; an explicit one is preserved.
        """
        overrides = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(overrides) - {f.name for f in fields(self) if f.init}
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
        if self.max_extent_auto and "max_extent" not in overrides:
            overrides["max_extent"] = AUTO_MAX_EXTENT
        return replace(self, **overrides)

    def without_max_extent(self):
        """Return a copy whose zoom-out is unclamped."""
        return replace(self, max_extent=None)


def load_settings(path, base=None):
    """
    Load configuration overrides from a JSON file.

    Args:
        path: Path to the JSON settings file
        base: Config to apply the overrides to (default: ExplorerConfig())

    Returns:
        A new ExplorerConfig

    Raises:
        ConfigError if the file is missing, unreadable, or has bad values
    """
    base = base if base is not None else ExplorerConfig()
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Could not load settings from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file {path} must contain a JSON object")

    if "initial_origin" in data:
        origin = data["initial_origin"]
        if isinstance(origin, (list, tuple)) and len(origin) == 2:
            data["initial_origin"] = complex(origin[0], origin[1])
        elif isinstance(origin, (int, float)):
            data["initial_origin"] = complex(origin, 0.0)
        else:
            raise ConfigError(f"initial_origin must be [real, imag], got {origin!r}")

    # An explicit null disables the zoom-out clamp
    if "max_extent" in data and data["max_extent"] is None:
        del data["max_extent"]
        return base.with_overrides(**data).without_max_extent()

    return base.with_overrides(**data)
