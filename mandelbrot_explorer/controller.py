"""
Navigation commands and the interaction controller.

Input sources produce Command values (or Recenter for a clicked pixel).
The InteractionController queues them and applies them to its Viewport
at the frame boundary, flipping the view to dirty so the next frame is
recomputed.
"""

import enum
import logging
import queue
from dataclasses import dataclass

from . import viewport as vp

logger = logging.getLogger(__name__)


class Command(enum.Enum):
    """Discrete navigation commands."""

    PAN_UP = "pan_up"
    PAN_DOWN = "pan_down"
    PAN_LEFT = "pan_left"
    PAN_RIGHT = "pan_right"
    ZOOM_IN = "zoom_in"
    ZOOM_OUT = "zoom_out"
    ZOOM_IN_FINE = "zoom_in_fine"
    ZOOM_OUT_FINE = "zoom_out_fine"
    RESET = "reset"
    MORE_ITERATIONS = "more_iterations"
    FEWER_ITERATIONS = "fewer_iterations"
    QUIT = "quit"


@dataclass(frozen=True)
class Recenter:
    """Center the view on pixel (col, row) of the current grid."""

    col: int
    row: int


_PAN_STEPS = {
    Command.PAN_UP: (0, 1),
    Command.PAN_DOWN: (0, -1),
    Command.PAN_LEFT: (-1, 0),
    Command.PAN_RIGHT: (1, 0),
}


def apply_command(viewport, command, config):
    """
    Apply one navigation command to a viewport.

    Args:
        viewport: Current Viewport
        command: Command member or Recenter
        config: ExplorerConfig supplying step sizes and limits

    Returns:
        The new Viewport (QUIT leaves it unchanged)
    """
    if isinstance(command, Recenter):
        return vp.recenter(viewport, command.col, command.row,
                           config.grid_width, config.grid_height)

    if command in _PAN_STEPS:
        dx, dy = _PAN_STEPS[command]
        return vp.pan(viewport, dx, dy, config.pan_divisor)

    # Keyboard zoom-out skips a step past the clamp, wheel zoom-out clamps
    if command is Command.ZOOM_IN:
        return vp.zoom_in(viewport, config.zoom_factor)
    elif command is Command.ZOOM_OUT:
        return vp.zoom_out(viewport, config.zoom_factor, config.max_extent, clamp=False)
    elif command is Command.ZOOM_IN_FINE:
        return vp.zoom_in(viewport, config.fine_zoom_factor)
    elif command is Command.ZOOM_OUT_FINE:
        return vp.zoom_out(viewport, config.fine_zoom_factor, config.max_extent, clamp=True)
    elif command is Command.RESET:
        return vp.reset(config)
    elif command is Command.MORE_ITERATIONS:
        return vp.adjust_iterations(viewport, config.iteration_step, config.min_iteration_limit)
    elif command is Command.FEWER_ITERATIONS:
        return vp.adjust_iterations(viewport, -config.iteration_step, config.min_iteration_limit)
    elif command is Command.QUIT:
        return viewport

    raise ValueError(f"Unknown command: {command!r}")


class InteractionController:
    """
    Owns the current Viewport and its Clean/Dirty state.

    submit() can be called from any thread; commands only touch the
    viewport when the frame loop calls drain(), so a recompute pass
    never sees the view change under it.
    """

    def __init__(self, config):
        self.config = config
        self.viewport = vp.Viewport.from_config(config)
        self.dirty = True  # Nothing rendered yet
        self.quit_requested = False
        self._pending = queue.Queue()

    def submit(self, command):
        """Queue a command for the next frame boundary."""
        self._pending.put(command)

    def drain(self):
        """
        Apply every queued command.

        Returns:
            False once QUIT has been received, True otherwise
        """
        while True:
            try:
                command = self._pending.get_nowait()
            except queue.Empty:
                break

            if command is Command.QUIT:
                self.quit_requested = True
                continue

            self.viewport = apply_command(self.viewport, command, self.config)
            self.dirty = True
            logger.debug("%s -> origin=%s extent=%.3e limit=%d", command,
                         self.viewport.origin, self.viewport.extent,
                         self.viewport.iteration_limit)

        return not self.quit_requested

    def mark_clean(self):
        self.dirty = False
