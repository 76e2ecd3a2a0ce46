# tests/helpers.py

import numpy as np
from hdfraster.raster.layer import Raster

def as_array(raster: Raster) -> np.ndarray:
    """Read a whole raster as a (ny, nx) float64 array."""
    nx, ny = raster.dimensions()
    return raster.read((0, 0, nx, ny)).reshape(ny, nx)

def assert_raster_values(raster: Raster, expected, atol: float = 1e-6):
    """Compare every sample of a raster against an expected (ny, nx) array."""
    expected = np.asarray(expected, dtype=np.float64)
    actual = as_array(raster)
    assert actual.shape == expected.shape, \
        f"Shape mismatch: {actual.shape} != {expected.shape}"
    assert np.allclose(actual, expected, atol=atol), \
        f"Max deviation {np.max(np.abs(actual - expected)):.6g} exceeds {atol}"

def assert_grid_match(r1: Raster, r2: Raster):
    """Strictly verify two rasters share the same kind and dimensions."""
    assert r1.kind == r2.kind, \
        f"Kind mismatch: {r1.kind} != {r2.kind}"

    assert r1.dimensions() == r2.dimensions(), \
        f"Shape mismatch: {r1.dimensions()} != {r2.dimensions()}"
