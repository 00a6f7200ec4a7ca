"""
Main application module for the Mandelbrot explorer.

Contains the pygame side of the program:
- PygameInput: turns pygame events into navigation commands
- PygameDisplay: shows finished grids and a status line in the caption
- MandelbrotApp: window setup, JIT warmup and the main loop

Controls:
    - Arrow keys: Pan
    - W / S: Zoom in / out
    - Scroll: Fine zoom in / out
    - Left click: Center on the clicked point
    - ] / [: More / fewer iterations
    - R: Reset to default view
    - ESC: Quit
"""

import logging

import pygame

from .compute import warmup_jit
from .config import ExplorerConfig
from .controller import Command, Recenter
from .loop import FrameLoop
from .viewport import magnification

logger = logging.getLogger(__name__)


KEY_COMMANDS = {
    pygame.K_UP: Command.PAN_UP,
    pygame.K_DOWN: Command.PAN_DOWN,
    pygame.K_LEFT: Command.PAN_LEFT,
    pygame.K_RIGHT: Command.PAN_RIGHT,
    pygame.K_w: Command.ZOOM_IN,
    pygame.K_s: Command.ZOOM_OUT,
    pygame.K_r: Command.RESET,
    pygame.K_RIGHTBRACKET: Command.MORE_ITERATIONS,
    pygame.K_LEFTBRACKET: Command.FEWER_ITERATIONS,
    pygame.K_ESCAPE: Command.QUIT,
}


def translate_event(event):
    """
    Map a pygame event to a navigation command.

    Args:
        event: pygame.event.Event

    Returns:
        A Command, a Recenter, or None if the event means nothing to us
    """
    if event.type == pygame.QUIT:
        return Command.QUIT
    elif event.type == pygame.KEYDOWN:
        return KEY_COMMANDS.get(event.key)
    elif event.type == pygame.MOUSEBUTTONDOWN:
        if event.button == 1:  # Left click
            col, row = event.pos
            return Recenter(col, row)
    elif event.type == pygame.MOUSEWHEEL:
        # Scroll up = zoom in
        if event.y > 0:
            return Command.ZOOM_IN_FINE
        elif event.y < 0:
            return Command.ZOOM_OUT_FINE
    return None


class PygameInput:
    """Input source reading the pygame event queue."""

    def poll(self):
        commands = []
        for event in pygame.event.get():
            command = translate_event(event)
            if command is not None:
                commands.append(command)
        return commands


def format_status(fps, viewport, initial_extent):
    """Status line: frame rate, iteration limit and magnification."""
    return (f"Mandelbrot - {int(fps):2d} fps | {viewport.iteration_limit} iters | "
            f"{magnification(viewport, initial_extent):.1e}x")


class PygameDisplay:
    """
    Display sink blitting grids onto the pygame window.

    The grid is (height, width, 3) while pygame surfaces are indexed
    (x, y), hence the swapaxes.
    """

    def __init__(self, screen, clock, fps, initial_extent):
        self.screen = screen
        self.clock = clock
        self.fps = fps
        self.initial_extent = initial_extent

    def present(self, grid, viewport):
        surface = pygame.surfarray.make_surface(grid.swapaxes(0, 1))
        self.screen.blit(surface, (0, 0))
        pygame.display.flip()
        pygame.display.set_caption(
            format_status(self.clock.get_fps(), viewport, self.initial_extent)
        )

    def tick(self):
        self.clock.tick(self.fps)


class MandelbrotApp:
    """
    Main application class for the Mandelbrot explorer.

    Handles the pygame window and wires the pygame input source and
    display sink into a FrameLoop.
    """

    def __init__(self, config=None):
        """
        Initialize the application.

        Args:
            config: ExplorerConfig (default: ExplorerConfig())
        """
        self.config = config or ExplorerConfig()
        self.screen = None
        self.clock = None
        self.loop = None

    def run(self):
        """Run the application main loop."""
        self._init_pygame()
        try:
            self._warmup()
            self.loop = FrameLoop(
                self.config,
                PygameInput(),
                PygameDisplay(self.screen, self.clock, self.config.fps,
                              self.config.initial_extent),
            )
            self.loop.run()
        finally:
            pygame.quit()

    def _init_pygame(self):
        """Initialize pygame and create a fixed-size window."""
        pygame.init()
        self.screen = pygame.display.set_mode(
            (self.config.grid_width, self.config.grid_height),
            pygame.DOUBLEBUF
        )
        pygame.display.set_caption("Mandelbrot")
        self.clock = pygame.time.Clock()

    def _warmup(self):
        """Warm up JIT before the first frame."""
        pygame.display.set_caption("Compiling (first run only)...")
        logger.info("Compiling kernels...")
        warmup_jit()


def run(config=None):
    """
    Run the Mandelbrot explorer.

    Args:
        config: ExplorerConfig (default: ExplorerConfig())
    """
    app = MandelbrotApp(config)
    try:
        app.run()
    except KeyboardInterrupt:
        logger.info("Interrupted")
