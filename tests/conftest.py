# tests/conftest.py

import pytest
import numpy as np
import rasterio
from rasterio.transform import Affine
from rasterio.crs import CRS

from hdfraster.raster import RasterFile, Raster, RasterKind

@pytest.fixture
def h5_file(tmp_path):
    """
    Fixture: A fresh HDF5 raster file in a temp dir, closed on teardown.
    """
    f = RasterFile(tmp_path / "scene.h5", "new")
    yield f
    f.close()

@pytest.fixture
def group(h5_file):
    """An empty array collection inside the temp file."""
    return h5_file.create_group("scene")

@pytest.fixture
def raster_factory(group):
    """
    Factory fixture: creates a raster in the temp group and fills it.

    `values` may be a scalar (requires nx/ny) or a 2D (ny, nx) array.
    """
    def _create(name, values, kind=RasterKind.FLOAT32, nx=None, ny=None):
        if np.isscalar(values):
            raster = Raster.create(group, name, kind, nx, ny)
            raster.fill(values)
            return raster

        values = np.asarray(values)
        height, width = values.shape
        raster = Raster.create(group, name, kind, width, height)
        raster.write((0, 0, width, height), values)
        return raster

    return _create

@pytest.fixture
def ramp_geotiff(tmp_path):
    """
    Fixture: A single-band 16x12 uint16 GeoTIFF whose pixel (row, col) holds row * 100 + col.
    """
    path = tmp_path / "ramp.tif"
    height, width = 12, 16
    rows, cols = np.mgrid[:height, :width]
    data = (rows * 100 + cols).astype("uint16")

    profile = {
        'driver': 'GTiff',
        'height': height,
        'width': width,
        'count': 1,
        'dtype': 'uint16',
        'crs': CRS.from_epsg(32619),
        'transform': Affine.translation(0, 12) * Affine.scale(1, -1)
    }

    with rasterio.open(path, 'w', **profile) as dst:
        dst.write(data, 1)

    return path

@pytest.fixture
def source_envi_path(tmp_path):
    """
    Fixture: Creates a synthetic 2-band float32 ENVI file (.hdr + binary) in a temp dir.
    Returns the header path to exercise the header-to-binary resolution.
    """
    p = tmp_path / "synthetic_raw"

    width, height = 10, 8
    data = np.zeros((2, height, width), dtype='float32')
    data[0] = np.linspace(0, 1, width * height).reshape(height, width)
    data[1].fill(0.5)

    profile = {
        'driver': 'ENVI',
        'height': height,
        'width': width,
        'count': 2,
        'dtype': 'float32',
        'crs': CRS.from_epsg(4326),
        'transform': Affine.translation(0, 1) * Affine.scale(0.01, -0.01)
    }

    with rasterio.open(p, 'w', **profile) as dst:
        dst.write(data)

    return p.with_suffix(".hdr")
