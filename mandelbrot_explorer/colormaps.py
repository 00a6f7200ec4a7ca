"""
Hue-cycling color mapping for escape-time counts.

The iteration count picks a hue (iterations mod 360 degrees), so colors
cycle every 360 iterations. Points that never escaped are drawn black.
"""

from numba import jit


DEFAULT_SATURATION = 0.8


@jit(nopython=True, nogil=True, cache=True)
def _channel(component):
    # round half up; components are never negative
    return int(component * 255.0 + 0.5)


@jit(nopython=True, nogil=True, cache=True)
def hue_color(iterations, iteration_limit, saturation):
    """
    Map an iteration count to an RGB color.

    Args:
        iterations: Escape-time count, 0 <= iterations <= iteration_limit
        iteration_limit: Iteration cap (iterations == limit means interior)
        saturation: HSV saturation in [0, 1]

    Returns:
        (r, g, b) tuple of ints in 0..255
    """
    hue = iterations % 360
    value = 0.0 if iterations == iteration_limit else 1.0

    h = hue // 60
    f = hue / 60.0 - h
    p = value * (1.0 - saturation)
    q = value * (1.0 - saturation * f)
    t = value * (1.0 - saturation * (1.0 - f))

    if h == 0:
        r, g, b = value, t, p
    elif h == 1:
        r, g, b = q, value, p
    elif h == 2:
        r, g, b = p, value, t
    elif h == 3:
        r, g, b = p, q, value
    elif h == 4:
        r, g, b = t, p, value
    else:
        r, g, b = value, p, q

    return _channel(r), _channel(g), _channel(b)


def color_map(iterations, iteration_limit, saturation=DEFAULT_SATURATION):
    """Color for an iteration count, as a tuple of Python ints."""
    r, g, b = hue_color(iterations, iteration_limit, saturation)
    return int(r), int(g), int(b)
