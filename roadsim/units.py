#!/usr/bin/env python3
"""
roadsim/units.py
================
Unit-conversion helpers shared by the core and by display collaborators.

Keeping these in a separate module avoids circular imports and makes unit
testing straightforward.
"""

from __future__ import annotations

import math

from roadsim.errors import InvalidParameter


def mps_to_kph(speed_mps: float) -> float:
    """Convert m/s to km/h."""
    return speed_mps * 3.6


def kph_to_mps(speed_kph: float) -> float:
    """Convert km/h to m/s."""
    return speed_kph / 3.6


def _check_scale(scale: float) -> None:
    if not scale > 0 or math.isinf(scale):
        raise InvalidParameter(f"scale must be a positive finite px/m ratio, got {scale!r}")


def meters_to_pixels(scale: float, m: float) -> int:
    """Convert metres to pixels.

    Parameters
    ----------
    scale : float
        Ratio px/m.
    m : float
        Distance in metres.

    Returns
    -------
    int
        ``m * scale`` rounded to the nearest pixel, ties toward +inf.
    """
    _check_scale(scale)
    return int(math.floor(m * scale + 0.5))


def pixels_to_meters(scale: float, px: float) -> float:
    """Convert pixels to metres (``px / scale``)."""
    _check_scale(scale)
    return px / scale
