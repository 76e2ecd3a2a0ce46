# tests/unit/test_drawing.py

import pytest
import numpy as np
from hdfraster.exceptions import BadSliceError, InvalidParameterError
from hdfraster.raster import RasterKind
from hdfraster.processing.drawing import (
    draw_filled_circle,
    draw_line,
    draw_rectangle,
    draw_filled_rectangle
)
from helpers import as_array

@pytest.fixture
def canvas(raster_factory):
    return raster_factory("canvas", 0, kind=RasterKind.UINT8, nx=20, ny=20)

def test_filled_circle(canvas):
    draw_filled_circle(canvas, 10, 10, 3, 200)
    img = as_array(canvas)

    assert img[10, 10] == 200
    assert img[10, 7] == 200
    assert img[7, 10] == 200
    assert img[7, 7] == 0
    assert img[10, 14] == 0
    assert img[2, 2] == 0

def test_zero_radius_circle_draws_nothing(canvas):
    draw_filled_circle(canvas, 5, 5, 0, 200)
    assert np.all(as_array(canvas) == 0)

def test_circle_errors(canvas):
    with pytest.raises(InvalidParameterError):
        draw_filled_circle(canvas, 10, 10, -1, 200)
    with pytest.raises(BadSliceError):
        draw_filled_circle(canvas, 1, 10, 3, 200)
    with pytest.raises(BadSliceError):
        draw_filled_circle(canvas, 10, 18, 3, 200)

def test_diagonal_line(canvas):
    draw_line(canvas, (2, 2, 10, 10), 1, 9)
    img = as_array(canvas)

    assert img[2, 2] == 9
    assert img[5, 5] == 9
    assert img[11, 11] == 9
    assert img[12, 12] == 9
    assert img[12, 2] == 0
    assert img[2, 12] == 0

def test_horizontal_line(canvas):
    draw_line(canvas, (3, 10, 10, 0), 1, 7)
    img = as_array(canvas)

    assert np.all(img[10, 3:13] == 7)
    assert img[15, 8] == 0

def test_line_errors(canvas):
    with pytest.raises(InvalidParameterError):
        draw_line(canvas, (2, 2, 5, 5), -2, 1)
    with pytest.raises(BadSliceError):
        draw_line(canvas, (2, 2, 17, 5), 2, 1)
    with pytest.raises(BadSliceError):
        draw_line(canvas, (2, 2, 5), 1, 1)

def test_rectangle_outline(raster_factory):
    ras = raster_factory("r", 0, kind=RasterKind.UINT8, nx=10, ny=10)
    draw_rectangle(ras, (2, 2, 6, 5), 1, 5)
    img = as_array(ras)

    assert np.all(img[2, 2:8] == 5)
    assert np.all(img[6, 2:8] == 5)
    assert np.all(img[2:7, 2] == 5)
    assert np.all(img[2:7, 7] == 5)
    assert np.all(img[3:6, 3:7] == 0)
    assert img[0, 0] == 0
    assert np.count_nonzero(img) == 18

def test_filled_rectangle(raster_factory):
    ras = raster_factory("r", 0, kind=RasterKind.UINT8, nx=10, ny=10)
    draw_filled_rectangle(ras, (1, 1, 8, 8), 2, 255, 3)
    img = as_array(ras)

    assert np.all(img[1:3, 1:9] == 255)
    assert np.all(img[1:9, 7:9] == 255)
    assert np.all(img[3:7, 3:7] == 3)
    assert np.all(img[0, :] == 0)
    assert np.all(img[:, 9] == 0)

def test_rectangle_errors(raster_factory):
    ras = raster_factory("r", 0, kind=RasterKind.UINT8, nx=10, ny=10)
    with pytest.raises(BadSliceError):
        draw_rectangle(ras, (8, 8, 5, 5), 1, 5)
    with pytest.raises(InvalidParameterError):
        draw_rectangle(ras, (0, 0, 4, 2), 3, 5)
    with pytest.raises(InvalidParameterError):
        draw_filled_rectangle(ras, (0, 0, 4, 4), -1, 5, 1)
