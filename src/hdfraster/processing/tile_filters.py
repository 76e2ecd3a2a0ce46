# src/hdfraster/processing/tile_filters.py

"""
This module implements tile-wise order-statistic filters.

The raster is cut into non-overlapping n x n tiles. Each tile is reduced to
one scalar which then overwrites every sample of that tile in the output.
Strips along the right and bottom edges narrower than n are not processed.
"""

import logging
from typing import Callable

import numpy as np

from hdfraster.exceptions import InvalidWindowSizeError
from hdfraster.raster.layer import Raster, require_same_shape
from hdfraster.raster.partition import iter_tiles
from hdfraster.raster.slicing import Slice

log = logging.getLogger(__name__)

__all__ = [
    "MIN_WINDOW",
    "MAX_WINDOW",
    "MAX_PARTITIONS",
    "harmonic_mean",
    "midpoint_filter",
    "range_filter",
    "auto_local_threshold"
]

MIN_WINDOW = 3
MAX_WINDOW = 11
MAX_PARTITIONS = 150

def _validate_window(n: int):
    if n < MIN_WINDOW or n > MAX_WINDOW or n % 2 == 0:
        raise InvalidWindowSizeError(
            f"Window size must be odd and in [{MIN_WINDOW}, {MAX_WINDOW}], got {n}"
        )

def _harmonic(tile: np.ndarray) -> float:
    # A zero sample gives an infinite reciprocal sum, so the mean is 0
    with np.errstate(divide="ignore"):
        return tile.size / np.sum(1.0 / tile)

def _midpoint(tile: np.ndarray) -> float:
    return (tile.min() + tile.max()) / 2.0

def _range(tile: np.ndarray) -> float:
    return tile.max() - tile.min()

def _reduce_tiles(src: Raster, out: Raster, n: int, reducer: Callable[[np.ndarray], float], label: str) -> Raster:
    _validate_window(n)
    require_same_shape(src, out)

    log.info(f"Applying {label} ({n}x{n}) to '{src.name}' -> '{out.name}'")

    count = 0
    for tile in iter_tiles(src, n):
        value = reducer(src.read(tile))
        out.write(tile, np.full(tile.size, value))
        count += 1

    log.debug(f"{label}: {count} tiles processed")
    return out

def harmonic_mean(src: Raster, out: Raster, n: int) -> Raster:
    """
    Replace each n x n tile by its harmonic mean n^2 / sum(1 / v).

    Args:
        src: Input raster.
        out: Output raster with the same (nx, ny); may be src.
        n: Odd window size in [3, 11].

    Raises:
        InvalidWindowSizeError: If n is even or out of range.
        ShapeMismatchError: If out's shape differs from src's.
    """
    return _reduce_tiles(src, out, n, _harmonic, "harmonic mean")

def midpoint_filter(src: Raster, out: Raster, n: int) -> Raster:
    """Replace each n x n tile by (min + max) / 2 over the tile."""
    return _reduce_tiles(src, out, n, _midpoint, "midpoint filter")

def range_filter(src: Raster, out: Raster, n: int) -> Raster:
    """Replace each n x n tile by max - min over the tile."""
    return _reduce_tiles(src, out, n, _range, "range filter")

def auto_local_threshold(src: Raster, out: Raster, partitions: int) -> Raster:
    """
    Threshold each block of a partitions x partitions grid against its own range.

    Within each block the threshold is (min + max) / 3; samples below it are
    set to 0, the others are kept. Each processed block is written to out.
    Remainder strips are not written.

    Args:
        src: Input raster.
        out: Output raster with the same (nx, ny).
        partitions: Blocks per axis, in [1, 150].

    Raises:
        InvalidWindowSizeError: If partitions is out of range (checked before any
                                storage access) or leaves blocks of zero size.
        ShapeMismatchError: If out's shape differs from src's.
    """
    if partitions <= 0 or partitions > MAX_PARTITIONS:
        raise InvalidWindowSizeError(
            f"Partitions must be in [1, {MAX_PARTITIONS}], got {partitions}"
        )
    require_same_shape(src, out)

    nx, ny = src.dimensions()
    block_w, block_h = nx // partitions, ny // partitions
    if block_w == 0 or block_h == 0:
        raise InvalidWindowSizeError(
            f"{partitions} partitions per axis is too many for '{src.name}' {nx}x{ny}"
        )

    log.info(f"Local thresholding '{src.name}' in {partitions}x{partitions} blocks of {block_w}x{block_h}")

    for by in range(partitions):
        for bx in range(partitions):
            block = Slice(bx * block_w, by * block_h, block_w, block_h)
            _threshold_block(src, out, block)

    return out

def _threshold_block(src: Raster, out: Raster, block: Slice):
    data = src.read(block)
    threshold = (data.min() + data.max()) / 3.0
    data[data < threshold] = 0
    out.write(block, data)
