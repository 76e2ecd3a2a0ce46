# src/hdfraster/raster/io.py

"""
This module handles moving raster data between GDAL-readable files on disk
and rasters persisted in an HDF5 collection.

Both directions stream horizontal strips, so neither side is ever held in
memory in full.
"""

import logging
from pathlib import Path
from typing import Union, Optional, Dict, Any

import numpy as np
import rasterio

from hdfraster.exceptions import RasterIOError
from .kinds import RasterKind, resolve_kind
from .layer import Raster
from .slicing import Slice
from .store import RasterGroup
from .utils import resolve_envi_path, kind_for_dtype, iter_row_windows

log = logging.getLogger(__name__)

__all__ = [
    "import_band",
    "export_raster",
    "read_info"
]

def import_band(
    collection: RasterGroup,
    name: str,
    path: Union[str, Path],
    band: int = 1,
    kind: Optional[Union[RasterKind, str]] = None,
    rows_per_chunk: int = 256
) -> Raster:
    """
    Stream one band of a raster file into a new Raster.

    Args:
        collection: Collection receiving the new raster.
        name: Name of the new raster.
        path: Any GDAL-readable file (ENVI .hdr paths resolve to the binary).
        band: 1-based band index.
        kind: Storage kind. Inferred from the band dtype when omitted.
        rows_per_chunk: Number of rows read per window.

    Returns:
        Raster: The new raster. If reading fails midway it is deleted again.

    Raises:
        FileNotFoundError: If the file does not exist.
        RasterIOError: If rasterio cannot read the file or band.
        AlreadyExistsError: If the name is taken.
    """
    path = resolve_envi_path(path)
    if not path.exists():
        raise FileNotFoundError(f"Raster file not found: {path}")

    try:
        src = rasterio.open(path)
    except rasterio.RasterioIOError as e:
        raise RasterIOError(f"Failed to open {path}: {e}") from e

    with src:
        if band < 1 or band > src.count:
            raise RasterIOError(f"{path.name} has {src.count} band(s), band {band} requested")

        kind = resolve_kind(kind) if kind is not None else kind_for_dtype(src.dtypes[band - 1])
        log.info(f"Importing {path.name} band {band} ({src.width}x{src.height}) as '{name}' ({kind.value})")

        raster = Raster.create(collection, name, kind, src.width, src.height)
        try:
            for row_off, window in iter_row_windows(src.width, src.height, rows_per_chunk):
                block = src.read(band, window=window)
                raster.write(Slice(0, row_off, src.width, block.shape[0]), block)
        except rasterio.RasterioIOError as e:
            raster.delete()
            raise RasterIOError(f"Failed to read {path} band {band}: {e}") from e

    return raster

def export_raster(
    raster: Raster,
    path: Union[str, Path],
    driver: str = "GTiff",
    rows_per_chunk: int = 256
) -> Path:
    """
    Write a Raster to a single-band file.

    Args:
        raster: Source raster.
        path: Output file path. Parent directories are created.
        driver: GDAL driver name.
        rows_per_chunk: Number of rows written per window.

    Returns:
        Path: The written file.

    Raises:
        RasterIOError: If rasterio cannot create or write the file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    nx, ny = raster.dimensions()
    profile = {
        "driver": driver,
        "width": nx,
        "height": ny,
        "count": 1,
        "dtype": raster.kind.value
    }

    log.info(f"Exporting '{raster.name}' ({nx}x{ny}) → {path}")

    try:
        with rasterio.open(path, 'w', **profile) as dst:
            for row_off, window in iter_row_windows(nx, ny, rows_per_chunk):
                region = Slice(0, row_off, nx, int(window.height))
                data = raster.read(region, dtype=raster.kind.dtype)
                dst.write(data.reshape(region.shape), 1, window=window)
            dst.set_band_description(1, raster.name)
    except rasterio.RasterioIOError as e:
        raise RasterIOError(f"Failed to write {path}: {e}") from e

    return path

def read_info(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Inspect a raster file without reading its pixels.

    Returns:
        Dict[str, Any]: width, height, count, driver, dtypes and the kind
        each band would be imported as.
    """
    path = resolve_envi_path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        with rasterio.open(path) as src:
            return {
                'width': src.width,
                'height': src.height,
                'count': src.count,
                'driver': src.driver,
                'dtypes': list(src.dtypes),
                'kinds': [kind_for_dtype(np.dtype(d)) for d in src.dtypes]
            }
    except rasterio.RasterioIOError as e:
        raise RasterIOError(f"Failed to read metadata from {path}: {e}") from e
