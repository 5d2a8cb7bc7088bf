from __future__ import annotations

from math import pi


def deg2rad(degrees: float) -> float:
    return degrees * pi / 180


def rad2deg(radians: float) -> float:
    return radians * 180 / pi


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    return max(lower, min(upper, value))


def grid_to_iso(row: float, col: float, grid_size: float) -> tuple[float, float]:
    """
    Convert a (row, col) grid cell to ground-plane coordinates.

    Rows run down-right and columns down-left on screen, so both grid
    directions mix the x and y axes.
    """
    return (row - col) * grid_size, (row + col) * grid_size
