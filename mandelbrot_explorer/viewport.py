"""
View state of the explorer and the pixel <-> complex plane mapping.

A Viewport is an immutable value. Navigation functions return a new
Viewport instead of mutating the current one, so a recompute pass can
hold on to its snapshot while input for the next frame is applied.
"""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Viewport:
    """
    Current view of the complex plane.

    Attributes:
        origin: Plane coordinates of the image center
        extent: Plane width spanned by the image (always > 0)
        iteration_limit: Escape-time iteration cap (always >= 1)
    """

    origin: complex
    extent: float
    iteration_limit: int

    def __post_init__(self):
        if not self.extent > 0:
            raise ValueError(f"extent must be positive, got {self.extent!r}")
        if self.iteration_limit < 1:
            raise ValueError(f"iteration_limit must be >= 1, got {self.iteration_limit!r}")

    @classmethod
    def from_config(cls, config):
        """Initial view described by an ExplorerConfig."""
        return cls(
            origin=config.initial_origin,
            extent=config.initial_extent,
            iteration_limit=config.initial_iteration_limit,
        )


def pixel_to_complex(viewport, col, row, width, height):
    """
    Map a pixel coordinate to its complex sample.

    The image center lands on viewport.origin, the image width spans
    viewport.extent, and rows grow downward while the imaginary axis
    grows upward. The imaginary span is extent * height / width so
    pixels stay square on non-square grids.
    """
    origin = viewport.origin
    extent_im = viewport.extent * (height / width)
    return complex(
        origin.real + viewport.extent * (col / width - 0.5),
        origin.imag + extent_im * (0.5 - row / height),
    )


def pan(viewport, dx, dy, step_divisor=25.0):
    """
    Move the view by whole pan steps.

    Args:
        viewport: Current view
        dx: Steps to the right (negative for left)
        dy: Steps up (negative for down)
        step_divisor: One step is extent / step_divisor

    Returns:
        New Viewport
    """
    step = viewport.extent / step_divisor
    return replace(viewport, origin=viewport.origin + complex(dx * step, dy * step))


def zoom_in(viewport, factor):
    """Divide the extent by factor (> 1)."""
    return replace(viewport, extent=viewport.extent / factor)


def zoom_out(viewport, factor, max_extent=None, clamp=True):
    """
    Multiply the extent by factor (> 1), limited by max_extent.

    With clamp=True an overshooting step is clamped to max_extent; with
    clamp=False it is skipped and the view is returned unchanged.
    """
    new_extent = viewport.extent * factor
    if max_extent is not None and new_extent > max_extent:
        if not clamp:
            return viewport
        new_extent = max(viewport.extent, max_extent)
    return replace(viewport, extent=new_extent)


def recenter(viewport, col, row, width, height):
    """Center the view on a pixel of the current image."""
    return replace(viewport, origin=pixel_to_complex(viewport, col, row, width, height))


def adjust_iterations(viewport, delta, minimum=25):
    """Change the iteration limit by delta, never going below minimum."""
    new_limit = max(viewport.iteration_limit + delta, minimum, 1)
    return replace(viewport, iteration_limit=new_limit)


def reset(config):
    """Initial view."""
    return Viewport.from_config(config)


def magnification(viewport, initial_extent):
    """How far the view is zoomed relative to the initial framing."""
    return initial_extent / viewport.extent
