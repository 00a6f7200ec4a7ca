"""
Frame loop: input -> viewport -> (recompute) -> display.

Each frame drains the pending commands, recomputes the grid if the view
changed, and hands the finished grid to the display sink exactly once.
The loop itself knows nothing about windows or events; see app.py for
the pygame input source and display sink.
"""

import logging
from typing import Iterable, Protocol

from .controller import InteractionController
from .scheduler import TileScheduler, new_grid

logger = logging.getLogger(__name__)


class InputSource(Protocol):
    def poll(self) -> Iterable:
        """Return the commands received since the last call."""
        ...


class DisplaySink(Protocol):
    def present(self, grid, viewport) -> None:
        """Show a fully populated grid."""
        ...

    def tick(self) -> None:
        """Wait for the next frame slot."""
        ...


class FrameLoop:
    """
    Drives the explorer one frame at a time.

    Usage:
        loop = FrameLoop(config, source, sink)
        loop.run()  # until a QUIT command arrives

    Attributes:
        controller: InteractionController owning the viewport
        scheduler: TileScheduler used for recompute passes
        grid: The (height, width, 3) pixel grid shown each frame
    """

    def __init__(self, config, source, sink, scheduler=None):
        self.config = config
        self.source = source
        self.sink = sink
        self.controller = InteractionController(config)
        self.scheduler = scheduler or TileScheduler(config.worker_count, config.saturation)
        self.grid = new_grid(config.grid_width, config.grid_height)
        self.frames = 0

    def step(self):
        """
        Run a single frame.

        Returns:
            False once the input source asked to quit, True otherwise
        """
        for command in self.source.poll():
            self.controller.submit(command)

        if not self.controller.drain():
            return False

        if self.controller.dirty:
            self.scheduler.render(self.controller.viewport, self.grid)
            self.controller.mark_clean()

        self.sink.present(self.grid, self.controller.viewport)
        self.frames += 1
        return True

    def run(self):
        """Run frames until the input source asks to quit."""
        logger.info("Frame loop started: %dx%d grid, %d workers",
                    self.config.grid_width, self.config.grid_height,
                    self.scheduler.worker_count)
        while self.step():
            self.sink.tick()
        logger.info("Frame loop stopped after %d frames, %d recomputes",
                    self.frames, self.scheduler.passes)
