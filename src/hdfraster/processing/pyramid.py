# src/hdfraster/processing/pyramid.py

"""
This module implements out-of-core decimation and interpolation with a fixed
5x5 binomial kernel, and the pyramid builders composed from them.

Convolution model:
    The kernel is applied to each sample on its own, with that sample
    broadcast across the whole 5x5 window, rather than to the true
    neighbourhood. Every blurred value is therefore the sample times the
    kernel sum (256/400). This matches the historic behaviour of the
    algorithm and is kept as is.
"""

import logging
from typing import List, Optional

import numpy as np

from hdfraster.exceptions import AlreadyExistsError, InvalidLevelCountError, ShapeMismatchError
from hdfraster.raster.kinds import RasterKind
from hdfraster.raster.layer import Raster
from hdfraster.raster.partition import iter_rows
from hdfraster.raster.slicing import Slice
from hdfraster.raster.store import RasterGroup

log = logging.getLogger(__name__)

__all__ = [
    "GAUSSIAN_KERNEL",
    "downsample",
    "upsample",
    "gaussian_pyramid",
    "laplacian_pyramid"
]

_BINOMIAL = np.array([1.0, 4.0, 6.0, 4.0, 1.0])
GAUSSIAN_KERNEL = np.outer(_BINOMIAL, _BINOMIAL) / 400.0

def convolve_broadcast(values: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """
    Convolve each sample with a kernel, the sample standing in for its whole window.

    Multiply-and-accumulate over the flipped kernel collapses to a product
    with the kernel sum.
    """
    return values * kernel[::-1, ::-1].sum()

def downsample(src: Raster, out: Raster) -> Raster:
    """
    Blur and halve a raster, keeping odd-indexed rows and columns.

    Only the odd rows of src are read; src itself is not modified.

    Args:
        src: Input raster (nx, ny).
        out: Output raster, must be (nx // 2, ny // 2).

    Returns:
        Raster: out.

    Raises:
        ShapeMismatchError: If out is not exactly half of src.
    """
    nx, ny = src.dimensions()
    expected = (nx // 2, ny // 2)
    if out.dimensions() != expected:
        raise ShapeMismatchError(
            f"Downsample of '{src.name}' {nx}x{ny} needs output {expected}, "
            f"got {out.dimensions()}"
        )

    log.debug(f"Downsampling '{src.name}' {nx}x{ny} -> '{out.name}' {expected}")

    for row in iter_rows(src, step=2, start=1):
        blurred = convolve_broadcast(src.read(row), GAUSSIAN_KERNEL)
        out_row = Slice.row((row.y0 - 1) // 2, expected[0])
        out.write(out_row, blurred[1::2])

    return out

def upsample(src: Raster, out: Raster) -> Raster:
    """
    Double a raster: scatter samples to odd coordinates, then fill the gaps.

    Pass 1 writes each source sample at output (2x+1, 2y+1), every even
    coordinate staying zero. Pass 2 walks the odd output rows, blurs the odd
    samples and copies each blurred value to its right-hand neighbour (and
    to column 0 for the first one). The finished row is written to itself,
    to the next even row, and also to row 0 for the first odd row, so every
    blurred value covers its neighbourhood.

    Args:
        src: Input raster (nx, ny).
        out: Output raster, must be (2 * nx, 2 * ny).

    Returns:
        Raster: out.

    Raises:
        ShapeMismatchError: If out is not exactly double src.
    """
    nx, ny = src.dimensions()
    nx_out, ny_out = 2 * nx, 2 * ny
    if out.dimensions() != (nx_out, ny_out):
        raise ShapeMismatchError(
            f"Upsample of '{src.name}' {nx}x{ny} needs output {(nx_out, ny_out)}, "
            f"got {out.dimensions()}"
        )

    log.debug(f"Upsampling '{src.name}' {nx}x{ny} -> '{out.name}' {nx_out}x{ny_out}")

    # Pass 1: scatter
    scattered = np.zeros(nx_out, dtype=np.float64)
    for row in iter_rows(src):
        scattered[1::2] = src.read(row)
        out.write(Slice.row(2 * row.y0 + 1, nx_out), scattered)

    # Pass 2: convolve and splat
    for row in iter_rows(out, step=2, start=1):
        data = out.read(row)
        blurred = convolve_broadcast(data[1::2], GAUSSIAN_KERNEL)

        data[1::2] = blurred
        data[0] = blurred[0]
        data[2::2] = blurred[:nx_out // 2 - 1]

        out.write(row, data)
        if row.y0 == 1:
            out.write(Slice.row(0, nx_out), data)
        if row.y0 + 1 < ny_out:
            out.write(Slice.row(row.y0 + 1, nx_out), data)

    return out

def _check_level_names(collection: RasterGroup, names: List[str]):
    taken = [name for name in names if collection.array_exists(name)]
    if taken:
        raise AlreadyExistsError(
            f"Pyramid level names already exist in '{collection.name}': {taken}"
        )

def _build_pyramid(
    base: Raster,
    n: int,
    prefix: str,
    factor: float,
    step,
    collection: Optional[RasterGroup]
) -> List[Raster]:
    if n < 1:
        raise InvalidLevelCountError(f"A pyramid needs at least 1 level, got {n}")

    collection = collection or base.collection
    nx, ny = base.dimensions()

    shapes = [(int(nx * factor ** i), int(ny * factor ** i)) for i in range(1, n + 1)]
    if min(min(shape) for shape in shapes) < 1:
        raise InvalidLevelCountError(
            f"'{base.name}' {nx}x{ny} cannot be reduced {n} times: level {n} would be {shapes[-1]}"
        )

    names = [f"{prefix}{i}" for i in range(1, n + 1)]
    _check_level_names(collection, names)

    log.info(f"Building {n}-level {prefix} pyramid from '{base.name}' {nx}x{ny}")

    levels = [base]
    try:
        for name, (lx, ly) in zip(names, shapes):
            level = Raster.create(collection, name, RasterKind.FLOAT32, lx, ly)
            levels.append(level)
            step(levels[-2], level)
            log.debug(f"Level {len(levels) - 1}: '{name}' {lx}x{ly}")
    except Exception:
        log.error(f"Pyramid build from '{base.name}' failed, removing {len(levels) - 1} partial level(s)")
        for level in levels[1:]:
            level.delete()
        raise

    return levels

def gaussian_pyramid(base: Raster, n: int, collection: Optional[RasterGroup] = None) -> List[Raster]:
    """
    Build a reducing pyramid by repeated downsampling.

    Args:
        base: Level 0. Returned as-is, not copied.
        n: Number of levels to add (>= 1).
        collection: Where to create levels (defaults to base's collection).

    Returns:
        List[Raster]: n + 1 rasters; level i is named 'GPyramid{i}' and is
        Float32 of shape (nx // 2**i, ny // 2**i). The caller owns them.

    Raises:
        InvalidLevelCountError: If n < 1 or a level would have a zero dimension.
        AlreadyExistsError: If a level name is taken (checked before creating anything).
    """
    return _build_pyramid(base, n, "GPyramid", 0.5, downsample, collection)

def laplacian_pyramid(base: Raster, n: int, collection: Optional[RasterGroup] = None) -> List[Raster]:
    """
    Build an expanding pyramid by repeated upsampling.

    Args:
        base: Level 0. Returned as-is, not copied.
        n: Number of levels to add (>= 1).
        collection: Where to create levels (defaults to base's collection).

    Returns:
        List[Raster]: n + 1 rasters; level i is named 'LPyramid{i}' and is
        Float32 of shape (nx * 2**i, ny * 2**i). The caller owns them.

    Raises:
        InvalidLevelCountError: If n < 1.
        AlreadyExistsError: If a level name is taken.
    """
    return _build_pyramid(base, n, "LPyramid", 2.0, upsample, collection)
