# src/hdfraster/raster/partition.py

"""
This module generates the slice sequences algorithms stream through.

Rows and columns drive the separable passes (algebra, pyramids, transforms),
tiles drive the window filters. Generators yield Slice objects only; the
caller decides what to read or write for each one.
"""

import logging
from typing import Iterator, Tuple

from hdfraster.exceptions import InvalidWindowSizeError
from .layer import Raster
from .slicing import Slice

log = logging.getLogger(__name__)

__all__ = [
    "iter_rows",
    "iter_columns",
    "iter_tiles",
    "tile_grid"
]

def iter_rows(raster: Raster, step: int = 1, start: int = 0) -> Iterator[Slice]:
    """
    Yield full-width row slices.

    Args:
        raster: Raster whose rows are walked.
        step: Row stride (2 with start=1 walks the odd rows).
        start: First row.
    """
    nx, ny = raster.dimensions()
    for y in range(start, ny, step):
        yield Slice.row(y, nx)

def iter_columns(raster: Raster, step: int = 1, start: int = 0) -> Iterator[Slice]:
    """Yield full-height column slices."""
    nx, ny = raster.dimensions()
    for x in range(start, nx, step):
        yield Slice.column(x, ny)

def tile_grid(nx: int, ny: int, tile_width: int, tile_height: int) -> Tuple[int, int]:
    """
    Number of complete tiles along each axis.

    Returns:
        Tuple[int, int]: (tiles_x, tiles_y). Remainder strips are not counted.
    """
    if tile_width <= 0 or tile_height <= 0:
        raise InvalidWindowSizeError(f"Tile size must be positive, got {tile_width}x{tile_height}")
    return nx // tile_width, ny // tile_height

def iter_tiles(raster: Raster, tile_width: int, tile_height: int = None) -> Iterator[Slice]:
    """
    Yield non-overlapping tiles in row-major order.

    Only complete tiles are produced. Any strip along the right or bottom edge
    narrower than the tile is skipped and left for the caller to ignore.

    Args:
        raster: Raster being partitioned.
        tile_width: Tile width in columns.
        tile_height: Tile height in rows (defaults to tile_width).
    """
    tile_height = tile_width if tile_height is None else tile_height
    nx, ny = raster.dimensions()
    tiles_x, tiles_y = tile_grid(nx, ny, tile_width, tile_height)

    if tiles_x * tile_width < nx or tiles_y * tile_height < ny:
        log.debug(
            f"Tiling '{raster.name}' {nx}x{ny} by {tile_width}x{tile_height}: "
            f"remainder strips are left unprocessed"
        )

    for ty in range(tiles_y):
        for tx in range(tiles_x):
            yield Slice(tx * tile_width, ty * tile_height, tile_width, tile_height)
