# tests/integration/test_workflow.py

import pytest
import numpy as np
import rasterio
from hdfraster import cli
from hdfraster.raster import RasterFile, RasterKind, import_band, export_raster
from hdfraster.processing import (
    combine_scalar_new,
    gaussian_pyramid,
    low_pass_filter,
    harmonic_mean,
    draw_filled_circle
)
from helpers import as_array, assert_grid_match

def test_full_processing_pipeline(tmp_path, ramp_geotiff):
    """
    Simulates a standard user workflow:
    1. Import a GeoTIFF band into a new HDF5 file.
    2. Build a reducing pyramid and low-pass the base.
    3. Export the filtered image and reopen everything from disk.
    """
    h5_path = tmp_path / "work.h5"

    with RasterFile(h5_path, "new") as f:
        group = f.create_group("landsat")
        base = import_band(group, "B07", ramp_geotiff)
        nx, ny = base.dimensions()

        levels = gaussian_pyramid(base, 2)
        assert [lvl.dimensions() for lvl in levels] == [(16, 12), (8, 6), (4, 3)]

        real = group.create_raster("B07_re", RasterKind.FLOAT32, nx, ny)
        imag = group.create_raster("B07_im", RasterKind.FLOAT32, nx, ny)
        smooth = group.create_raster("B07_lp", RasterKind.FLOAT32, nx, ny)
        low_pass_filter(base, real, imag, smooth)

        # Low-pass keeps the mean
        assert np.mean(as_array(smooth)) == pytest.approx(np.mean(as_array(base)), rel=1e-4)

        scaled = combine_scalar_new(base, 2, "div")
        assert_grid_match(scaled, base)

        export_raster(smooth, tmp_path / "B07_lp.tif")

    with RasterFile(h5_path, "readonly") as f:
        group = f.open_group("landsat")
        assert set(group.list_arrays()) == {
            "B07", "GPyramid1", "GPyramid2", "B07_re", "B07_im", "B07_lp", "B07_DIVIDEDBY_val"
        }
        smooth = group.open_raster("B07_lp")
        expected = as_array(smooth)

    with rasterio.open(tmp_path / "B07_lp.tif") as src:
        assert np.allclose(src.read(1), expected)

def test_filters_and_drawing_compose(raster_factory):
    canvas = raster_factory("canvas", 1, kind=RasterKind.UINT8, nx=9, ny=9)
    draw_filled_circle(canvas, 4, 4, 2, 0)

    harmonic_mean(canvas, canvas, 3)
    img = as_array(canvas)

    # The centre tile contains painted zeros, the corner tiles do not
    assert img[4, 4] == 0
    assert np.all(img[:3, :3] == 1)

def test_cli_import_info_export(tmp_path, ramp_geotiff, capsys):
    h5_path = str(tmp_path / "cli.h5")

    assert cli.main(["import", h5_path, "scene", "B01", str(ramp_geotiff)]) == 0
    assert cli.main(["pyramid", h5_path, "scene", "B01", "--levels", "2"]) == 0
    assert cli.main(["lowpass", h5_path, "scene", "B01", "B01_lp"]) == 0

    capsys.readouterr()
    assert cli.main(["info", h5_path]) == 0
    listing = capsys.readouterr().out
    assert "scene/" in listing
    assert "B01: uint16 16x12" in listing
    assert "GPyramid2: float32 4x3" in listing
    assert "B01_lp: float32 16x12" in listing

    target = tmp_path / "b01.tif"
    assert cli.main(["export", h5_path, "scene", "B01", str(target)]) == 0
    with rasterio.open(target) as src:
        assert src.dtypes[0] == "uint16"

def test_cli_errors_exit_with_status_one(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["info", str(tmp_path / "missing.h5")])
    assert excinfo.value.code == 1

    h5_path = str(tmp_path / "empty.h5")
    RasterFile(h5_path, "new").close()
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["export", h5_path, "scene", "B01", str(tmp_path / "x.tif")])
    assert excinfo.value.code == 1

def test_cli_lowpass_rejects_zero_mask_fraction(tmp_path, ramp_geotiff):
    h5_path = str(tmp_path / "scene.h5")
    assert cli.main(["import", h5_path, "scene", "B01", str(ramp_geotiff)]) == 0

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["lowpass", h5_path, "scene", "B01", "B01_lp", "--mask-fraction", "0"])
    assert excinfo.value.code == 1

    with RasterFile(h5_path, "readonly") as f:
        assert f.open_group("scene").list_arrays() == ["B01"]
