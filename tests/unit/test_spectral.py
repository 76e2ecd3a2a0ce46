# tests/unit/test_spectral.py

import pytest
import numpy as np
from hdfraster.exceptions import AlreadyExistsError, InvalidParameterError, RasterError, ShapeMismatchError
from hdfraster.raster import Raster, RasterKind
from hdfraster.processing.spectral import (
    TransformParams,
    FilterStage,
    LowPassFilter,
    scratch_rasters,
    mask_region,
    forward_2d,
    inverse_2d,
    low_pass_filter
)
from hdfraster.raster.slicing import Slice
from helpers import as_array, assert_raster_values

@pytest.fixture
def random_image():
    rng = np.random.default_rng(42)
    return rng.random((6, 8)).astype(np.float32).astype(np.float64)

def _spectrum_pair(raster_factory, nx, ny, prefix="fft"):
    real = raster_factory(f"{prefix}_re", 0.0, nx=nx, ny=ny)
    imag = raster_factory(f"{prefix}_im", 0.0, nx=nx, ny=ny)
    return real, imag

def test_forward_matches_numpy(raster_factory, random_image):
    src = raster_factory("src", random_image)
    real, imag = _spectrum_pair(raster_factory, 8, 6)

    forward_2d(src, real, imag)

    expected = np.fft.fft2(random_image)
    assert_raster_values(real, expected.real, atol=1e-4)
    assert_raster_values(imag, expected.imag, atol=1e-4)

def test_round_trip_restores_input(raster_factory, random_image):
    src = raster_factory("src", random_image)
    real, imag = _spectrum_pair(raster_factory, 8, 6)
    out = raster_factory("out", 0.0, nx=8, ny=6)

    forward_2d(src, real, imag)
    inverse_2d(real, out, imag)

    assert_raster_values(out, random_image, atol=1e-4)

def test_explicit_normalization(raster_factory, random_image):
    src = raster_factory("src", random_image)
    real, imag = _spectrum_pair(raster_factory, 8, 6)
    out = raster_factory("out", 0.0, nx=8, ny=6)

    forward_2d(src, real, imag)
    inverse_2d(real, out, imag, params=TransformParams(normalization=1.0))

    assert_raster_values(out, random_image * 48, atol=1e-3)

def test_zero_image_is_a_fixed_point(raster_factory):
    src = raster_factory("src", 0.0, nx=5, ny=4)
    real, imag = _spectrum_pair(raster_factory, 5, 4)
    out = raster_factory("out", 1.0, nx=5, ny=4)

    forward_2d(src, real, imag)
    inverse_2d(real, out, imag)

    for raster in (real, imag, out):
        assert_raster_values(raster, np.zeros((4, 5)))

def test_scratch_rasters_are_removed(raster_factory, group):
    src = raster_factory("src", 1.0, nx=4, ny=4)
    real, imag = _spectrum_pair(raster_factory, 4, 4)
    out = raster_factory("out", 0.0, nx=4, ny=4)

    forward_2d(src, real, imag)
    inverse_2d(real, out, imag)

    assert sorted(group.list_arrays()) == ["fft_im", "fft_re", "out", "src"]

def test_scratch_rasters_removed_when_body_fails(group):
    with pytest.raises(RuntimeError):
        with scratch_rasters(group, ["tmp_a", "tmp_b"], 3, 3) as (a, b):
            assert a.kind is RasterKind.FLOAT32
            raise RuntimeError("boom")

    assert group.list_arrays() == []

def test_scratch_name_clash_cleans_up_partial(raster_factory, group):
    src = raster_factory("src", 1.0, nx=4, ny=4)
    real, imag = _spectrum_pair(raster_factory, 4, 4)
    raster_factory("BufferImg", 0.0, nx=1, ny=1)

    with pytest.raises(AlreadyExistsError):
        forward_2d(src, real, imag)

    assert "BufferReal" not in group

def test_custom_scratch_names(raster_factory, group):
    src = raster_factory("src", 1.0, nx=4, ny=4)
    real, imag = _spectrum_pair(raster_factory, 4, 4)
    raster_factory("BufferImg", 0.0, nx=1, ny=1)

    params = TransformParams(buffer_real="fwd_re", buffer_imag="fwd_im")
    forward_2d(src, real, imag, params=params)

    assert "fwd_re" not in group
    assert as_array(real)[0, 0] == pytest.approx(16.0)

def test_forward_shape_mismatch(raster_factory):
    src = raster_factory("src", 1.0, nx=4, ny=4)
    real, _ = _spectrum_pair(raster_factory, 4, 4)
    imag = raster_factory("narrow", 0.0, nx=3, ny=4)

    with pytest.raises(ShapeMismatchError):
        forward_2d(src, real, imag)

def test_mask_region():
    assert mask_region(10, 10, 5) == Slice(4, 4, 2, 2)
    assert mask_region(20, 3, 5) == Slice(8, 0, 3, 3)
    assert mask_region(4, 4, 5) is None

def test_low_pass_removes_highest_frequency(raster_factory):
    rows, cols = np.mgrid[:10, :10]
    checker = np.where((rows + cols) % 2 == 0, 1.0, -1.0)
    src = raster_factory("src", 2.0 + checker)
    real, imag = _spectrum_pair(raster_factory, 10, 10)
    out = raster_factory("out", 0.0, nx=10, ny=10)

    lpf = LowPassFilter()
    lpf.run(src, real, imag, out)

    assert lpf.stage is FilterStage.INVERTED
    assert_raster_values(out, np.full((10, 10), 2.0), atol=1e-4)

def test_low_pass_keeps_constant_image(raster_factory):
    src = raster_factory("src", 3.0, nx=10, ny=10)
    real, imag = _spectrum_pair(raster_factory, 10, 10)
    out = raster_factory("out", 0.0, nx=10, ny=10)

    result = low_pass_filter(src, real, imag, out)

    assert result is out
    assert_raster_values(out, np.full((10, 10), 3.0), atol=1e-4)

def test_low_pass_small_image_is_unmasked(raster_factory, random_image):
    src = raster_factory("src", random_image[:4, :4])
    real, imag = _spectrum_pair(raster_factory, 4, 4)
    out = raster_factory("out", 0.0, nx=4, ny=4)

    low_pass_filter(src, real, imag, out)
    assert_raster_values(out, random_image[:4, :4], atol=1e-4)

def test_low_pass_checks_shapes_before_running(raster_factory):
    src = raster_factory("src", 1.0, nx=10, ny=10)
    real, imag = _spectrum_pair(raster_factory, 10, 10)
    out = raster_factory("out", 5.0, nx=10, ny=8)

    lpf = LowPassFilter()
    with pytest.raises(ShapeMismatchError):
        lpf.run(src, real, imag, out)

    assert lpf.stage is FilterStage.IDLE
    assert_raster_values(real, np.zeros((10, 10)))
    assert_raster_values(out, np.full((8, 10), 5.0))

@pytest.mark.parametrize("kwargs", [
    {"mask_fraction": 0},
    {"mask_fraction": -2},
    {"normalization": 0.0},
    {"normalization": float("inf")},
])
def test_transform_params_validation(kwargs):
    with pytest.raises(InvalidParameterError):
        TransformParams(**kwargs)

def test_low_pass_rejects_bad_params_before_any_io(raster_factory):
    src = raster_factory("src", 100.0, nx=4, ny=4)
    real = raster_factory("real", 0.0, nx=4, ny=4)
    imag = raster_factory("imag", 0.0, nx=4, ny=4)
    out = raster_factory("out", 5.0, nx=4, ny=4)

    params = TransformParams()
    params.mask_fraction = 0
    lpf = LowPassFilter(params)

    with pytest.raises(InvalidParameterError):
        lpf.run(src, real, imag, out)

    assert lpf.stage is FilterStage.IDLE
    assert_raster_values(real, np.zeros((4, 4)))
    assert_raster_values(out, np.full((4, 4), 5.0))

def test_inverse_rejects_zero_normalization(raster_factory):
    real, imag = _spectrum_pair(raster_factory, 4, 4)
    out = raster_factory("out", 5.0, nx=4, ny=4)

    params = TransformParams()
    params.normalization = 0.0
    with pytest.raises(InvalidParameterError):
        inverse_2d(real, out, imag, params=params)

    assert_raster_values(out, np.full((4, 4), 5.0))

def test_scratch_cleanup_continues_after_failed_delete(group, monkeypatch):
    original_delete = Raster.delete

    def failing_delete(raster):
        if raster.name == "tmp_a":
            raise RasterError("locked")
        original_delete(raster)

    monkeypatch.setattr(Raster, "delete", failing_delete)

    with pytest.raises(RasterError, match="locked"):
        with scratch_rasters(group, ["tmp_a", "tmp_b", "tmp_c"], 2, 2):
            pass

    assert "tmp_b" not in group
    assert "tmp_c" not in group
