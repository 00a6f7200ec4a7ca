"""
Escape-time computation using Numba JIT compilation.

This module contains the performance-critical functions of the explorer.
They are compiled with nogil=True so the tile scheduler's worker threads
can run them truly in parallel:
- escape_time: iteration count of z -> z² + c for a single sample
- render_rows: fills a range of rows of the pixel grid with colors
- warmup_jit: pre-compiles everything at startup

All arithmetic is float64.
"""

import numpy as np
from numba import jit

from .colormaps import hue_color


ESCAPE_RADIUS_SQ = 4.0  # |z|² > 4  <=>  |z| > 2


@jit(nopython=True, nogil=True, cache=True)
def escape_time(cr, ci, iteration_limit):
    """
    Count iterations of z -> z² + c (from z = 0) before |z|² > 4.

    Args:
        cr, ci: Real and imaginary parts of the sample c
        iteration_limit: Iteration cap

    Returns:
        Number of iterations performed. Equals iteration_limit exactly
        when the orbit did not escape (interior point).
    """
    zr = 0.0
    zi = 0.0
    iterations = 0
    while zr * zr + zi * zi <= ESCAPE_RADIUS_SQ and iterations < iteration_limit:
        zr, zi = zr * zr - zi * zi + cr, 2.0 * zr * zi + ci
        iterations += 1
    return iterations


def evaluate(c, iteration_limit):
    """Escape time of a Python complex sample."""
    c = complex(c)
    return int(escape_time(c.real, c.imag, iteration_limit))


@jit(nopython=True, nogil=True, cache=True)
def render_rows(pixels, start, end, origin_re, origin_im, extent,
                iteration_limit, saturation):
    """
    Fill rows [start, end) of an RGB grid.

    The sample for pixel (col, row) is
        origin + extent * ((col/width - 0.5) + i·(height/width)·(0.5 - row/height))
    matching viewport.pixel_to_complex.

    Args:
        pixels: (height, width, 3) uint8 array, modified in place
        start, end: Half-open row interval owned by the caller
        origin_re, origin_im: Image center in the complex plane
        extent: Plane width spanned by the image
        iteration_limit: Iteration cap
        saturation: HSV saturation for the color mapping
    """
    height = pixels.shape[0]
    width = pixels.shape[1]
    extent_im = extent * (height / width)
    for row in range(start, end):
        ci = origin_im + extent_im * (0.5 - row / height)
        for col in range(width):
            cr = origin_re + extent * (col / width - 0.5)
            n = escape_time(cr, ci, iteration_limit)
            r, g, b = hue_color(n, iteration_limit, saturation)
            pixels[row, col, 0] = r
            pixels[row, col, 1] = g
            pixels[row, col, 2] = b


def warmup_jit():
    """
    Warm up JIT compilation with a tiny grid.

    Call this once at startup so the first real frame doesn't pay
    for Numba compilation.
    """
    dummy = np.zeros((4, 4, 3), dtype=np.uint8)
    render_rows(dummy, 0, 4, -0.5, 0.0, 2.5, 10, 0.8)
