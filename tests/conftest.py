import os

# Keep pygame quiet and windowless during tests
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import pytest

from mandelbrot_explorer.config import ExplorerConfig


@pytest.fixture
def config():
    return ExplorerConfig()


@pytest.fixture
def small_config():
    return ExplorerConfig(grid_width=48, grid_height=40, worker_count=4,
                          initial_iteration_limit=50)


class ScriptedInput:
    """Input source replaying one batch of commands per frame."""

    def __init__(self, *frames):
        self.frames = list(frames)

    def poll(self):
        return self.frames.pop(0) if self.frames else []


class RecordingDisplay:
    """Display sink keeping a copy of every presented grid."""

    def __init__(self):
        self.frames = []
        self.ticks = 0

    def present(self, grid, viewport):
        self.frames.append((grid.copy(), viewport))

    def tick(self):
        self.ticks += 1


@pytest.fixture
def display():
    return RecordingDisplay()


@pytest.fixture
def scripted_input():
    return ScriptedInput
