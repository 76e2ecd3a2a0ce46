# src/hdfraster/processing/drawing.py

"""
This module rasterises simple shapes directly into a raster.

Every primitive works on the smallest enclosing slice: it reads the slice,
paints the covered samples and writes the slice back (or uses Raster.set for
solid rectangles).
"""

import logging

import numpy as np

from hdfraster.exceptions import BadSliceError, InvalidParameterError
from hdfraster.raster.layer import Raster
from hdfraster.raster.slicing import Slice, SliceLike

log = logging.getLogger(__name__)

__all__ = [
    "draw_filled_circle",
    "draw_line",
    "draw_rectangle",
    "draw_filled_rectangle"
]

def _check_radius(radius: float):
    if radius < 0:
        raise InvalidParameterError(f"Radius must be >= 0, got {radius}")

def draw_filled_circle(raster: Raster, x0: int, y0: int, radius: float, color: float) -> None:
    """
    Paint a filled disc centred on (x0, y0).

    Raises:
        InvalidParameterError: If radius is negative.
        BadSliceError: If the disc extends beyond the raster.
    """
    _check_radius(radius)
    nx, ny = raster.dimensions()
    if x0 - radius < 0 or x0 + radius > nx or y0 - radius < 0 or y0 + radius > ny:
        raise BadSliceError(f"Circle at ({x0}, {y0}) r={radius} extends beyond {nx}x{ny}")

    r = int(radius)
    if r == 0:
        return

    region = Slice(int(x0) - r, int(y0) - r, 2 * r, 2 * r)
    data = raster.read(region).reshape(region.shape)

    yy, xx = np.ogrid[:region.dy, :region.dx]
    inside = (xx - radius) ** 2 + (yy - radius) ** 2 <= radius * radius
    data[inside] = color

    raster.write(region, data)

def draw_line(raster: Raster, segment: SliceLike, radius: float, color: float) -> None:
    """
    Paint a thick segment from (x0, y0) to (x0 + dx, y0 + dy) with round caps.

    Samples of the enclosing slice within radius of the line are painted,
    then a disc of the same radius is drawn on each end point.

    Raises:
        InvalidParameterError: If radius is negative.
        BadSliceError: If the segment or its caps extend beyond the raster.
    """
    _check_radius(radius)
    segment = Slice.coerce(segment)
    nx, ny = raster.dimensions()

    x1, y1 = segment.x0 + segment.dx, segment.y0 + segment.dy
    for x, y in ((segment.x0, segment.y0), (x1, y1)):
        if x - radius < 0 or x + radius > nx or y - radius < 0 or y + radius > ny:
            raise BadSliceError(f"Line end ({x}, {y}) r={radius} extends beyond {nx}x{ny}")

    if segment.dx < 0 or segment.dy < 0:
        raise BadSliceError(f"Line extents must be >= 0, got {segment}")

    # Axis-aligned segments still cover one sample across
    region = Slice(segment.x0, segment.y0, max(segment.dx, 1), max(segment.dy, 1)).validate(nx, ny)
    data = raster.read(region).reshape(region.shape)

    length = np.hypot(segment.dx, segment.dy)
    if length > 0:
        # Distance from (col, row) to the line through (0, 0) and (dx, dy)
        rows, cols = np.ogrid[:region.dy, :region.dx]
        distance = np.abs(segment.dx * rows - segment.dy * cols) / length
        data[distance <= max(radius, 0.5)] = color
        raster.write(region, data)

    draw_filled_circle(raster, segment.x0, segment.y0, radius, color)
    draw_filled_circle(raster, x1, y1, radius, color)

def _edges(region: Slice, width: int):
    """Left, top, bottom and right bands of a rectangle outline."""
    return [
        Slice(region.x0, region.y0, width, region.dy),
        Slice(region.x0, region.y0, region.dx, width),
        Slice(region.x0, region.y0 + region.dy - width, region.dx, width),
        Slice(region.x0 + region.dx - width, region.y0, width, region.dy)
    ]

def draw_rectangle(raster: Raster, region: SliceLike, radius: int, color: float) -> None:
    """
    Paint the outline of a rectangle with lines radius samples wide.

    Raises:
        InvalidParameterError: If radius is negative or wider than the rectangle.
        BadSliceError: If the rectangle does not fit the raster.
    """
    _check_radius(radius)
    region = Slice.coerce(region).validate(*raster.dimensions())
    if radius > min(region.dx, region.dy):
        raise InvalidParameterError(f"Line width {radius} exceeds rectangle {region}")
    if radius == 0:
        return

    for edge in _edges(region, int(radius)):
        raster.set(edge, color)

def draw_filled_rectangle(raster: Raster, region: SliceLike, radius: int, line_color: float, fill_color: float) -> None:
    """
    Paint a rectangle filled with fill_color and outlined with line_color.

    Raises:
        InvalidParameterError: If radius is negative or wider than the rectangle.
        BadSliceError: If the rectangle does not fit the raster.
    """
    _check_radius(radius)
    region = Slice.coerce(region).validate(*raster.dimensions())
    raster.set(region, fill_color)
    draw_rectangle(raster, region, radius, line_color)
