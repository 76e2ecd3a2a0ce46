# src/hdfraster/raster/utils.py

"""
This module provides shared helpers for moving rasters between hdfraster and
GDAL-readable files.
"""

import logging
from pathlib import Path
from typing import Iterator, Tuple, Union

import numpy as np
from rasterio.windows import Window

from hdfraster.exceptions import InvalidParameterError
from .kinds import RasterKind

log = logging.getLogger(__name__)

__all__ = [
    "resolve_envi_path",
    "kind_for_dtype",
    "iter_row_windows"
]

def resolve_envi_path(path: Union[str, Path]) -> Path:
    """
    Resolve ENVI header/binary file confusion.
    If 'image.hdr' is passed, redirects to 'image' (binary).
    """
    path = Path(path)
    if path.suffix.lower() == '.hdr':
        binary_path = path.with_suffix('')
        if binary_path.exists():
            return binary_path
    return path

def kind_for_dtype(dtype) -> RasterKind:
    """Closest storable kind: uint8 and uint16 map to themselves, anything else to Float32."""
    dtype = np.dtype(dtype)
    if dtype == np.uint8:
        return RasterKind.UINT8
    if dtype == np.uint16:
        return RasterKind.UINT16
    return RasterKind.FLOAT32

def iter_row_windows(width: int, height: int, rows_per_chunk: int) -> Iterator[Tuple[int, Window]]:
    """
    Yields (first_row, Window) pairs covering the full image in horizontal strips.
    """
    if rows_per_chunk <= 0:
        raise InvalidParameterError(f"rows_per_chunk must be positive, got {rows_per_chunk}")

    for row_off in range(0, height, rows_per_chunk):
        rows = min(rows_per_chunk, height - row_off)
        yield row_off, Window(0, row_off, width, rows)
