"""
Mandelbrot Set Explorer Package

A real-time, keyboard- and mouse-driven Mandelbrot explorer using
Pygame for display and Numba for JIT-compiled computation. Every
change of view recomputes the whole grid, split by rows across a
pool of worker threads.

Quick Start:
    from mandelbrot_explorer import run
    run()

Or from command line:
    python -m mandelbrot_explorer

Package Structure:
    - compute.py: JIT-compiled escape-time and row fill kernels
    - colormaps.py: Hue-cycling color mapping
    - viewport.py: View state, pixel/plane transform and navigation
    - scheduler.py: Row partitioning and the parallel tile scheduler
    - controller.py: Navigation commands and the interaction controller
    - loop.py: Frame loop tying input, recompute and display together
    - app.py: Pygame input source, display sink and application
    - config.py: Configuration and settings file loading
"""

from .app import run, MandelbrotApp
from .config import ConfigError, ExplorerConfig, load_settings
from .controller import Command, Recenter, InteractionController, apply_command
from .loop import FrameLoop
from .scheduler import RowRange, TileScheduler, partition_rows
from .viewport import Viewport, pixel_to_complex

__version__ = "1.0.0"
__all__ = [
    "run",
    "MandelbrotApp",
    "ConfigError",
    "ExplorerConfig",
    "load_settings",
    "Command",
    "Recenter",
    "InteractionController",
    "apply_command",
    "FrameLoop",
    "RowRange",
    "TileScheduler",
    "partition_rows",
    "Viewport",
    "pixel_to_complex",
]
