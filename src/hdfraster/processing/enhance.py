# src/hdfraster/processing/enhance.py

"""
This module implements per-sample enhancement operations streamed row by row:
thresholding, linear rescaling, bit shifting, salt & pepper noise and the
gradient mask.
"""

import logging
from typing import Optional

import numpy as np

from hdfraster.exceptions import InvalidParameterError
from hdfraster.raster.layer import Raster, require_same_shape
from hdfraster.raster.partition import iter_rows

log = logging.getLogger(__name__)

__all__ = [
    "GRADIENT_KERNELS",
    "BLUR_KERNEL",
    "threshold",
    "scale",
    "bit_shift",
    "add_salt_pepper",
    "gradient_mask"
]

# Directional 3x3 masks, indexed 1..8
GRADIENT_KERNELS = {
    1: np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]]),
    2: np.array([[1, 0, -1], [2, 0, -2], [1, 0, -1]]),
    3: np.array([[1, 2, 1], [0, 0, 0], [-1, -2, -1]]),
    4: np.array([[-1, 0, 1], [-2, 0, 2], [-1, 2, 1]]),
    5: np.array([[0, -1, -2], [1, 0, -1], [2, 1, 0]]),
    6: np.array([[-2, -1, 0], [-1, 0, 1], [0, 1, 2]]),
    7: np.array([[2, 1, 0], [1, 0, -1], [0, -1, -2]]),
    8: np.array([[0, 1, 2], [-1, 0, 1], [-2, -1, 0]])
}

BLUR_KERNEL = np.array([[1.0, 2.0, 1.0], [2.0, 8.0, 2.0], [1.0, 2.0, 1.0]]) / 16.0

def threshold(raster: Raster, value: float) -> Raster:
    """In place: samples below value become 0."""
    log.debug(f"Thresholding '{raster.name}' at {value}")
    for row in iter_rows(raster):
        data = raster.read(row)
        data[data < value] = 0
        raster.write(row, data)
    return raster

def scale(src: Raster, out: Raster, offset: float, mult: float) -> Raster:
    """
    Linear rescale: out = int(mult * (src - offset)), negatives clamped to 0.

    Raises:
        ShapeMismatchError: If out's shape differs from src's.
    """
    require_same_shape(src, out)
    log.debug(f"Scaling '{src.name}' by ({mult}) * (v - {offset}) -> '{out.name}'")

    for row in iter_rows(src):
        data = np.trunc(mult * (src.read(row) - offset))
        out.write(row, np.maximum(data, 0))
    return out

def bit_shift(src: Raster, out: Raster, bits: int, right: bool = True) -> Raster:
    """
    Multiply every sample by 2**-bits (right) or 2**bits (left).

    Raises:
        InvalidParameterError: If bits is negative.
        ShapeMismatchError: If out's shape differs from src's.
    """
    if bits < 0:
        raise InvalidParameterError(f"Bit count must be >= 0, got {bits}")
    require_same_shape(src, out)

    factor = 2.0 ** (-bits if right else bits)
    for row in iter_rows(src):
        out.write(row, src.read(row) * factor)
    return out

def add_salt_pepper(
    src: Raster,
    out: Raster,
    low: float,
    rng: Optional[np.random.Generator] = None,
    salt_value: Optional[float] = None
) -> Raster:
    """
    Inject salt & pepper noise.

    For each sample a uniform draw u in [0, 1) is taken from rng:
    u <= low sets the sample to 0, u >= 1 - low sets it to salt_value.

    Args:
        src: Input raster.
        out: Output raster with the same shape.
        low: Probability of each of pepper and salt, in [0, 0.5].
        rng: Seeded generator supplied by the caller for reproducible noise.
             A fresh unseeded generator is used when omitted.
        salt_value: Value of salt samples (defaults to out's kind maximum).

    Raises:
        InvalidParameterError: If low is outside [0, 0.5].
        ShapeMismatchError: If out's shape differs from src's.
    """
    if low < 0 or low > 0.5:
        raise InvalidParameterError(f"Noise probability must be in [0, 0.5], got {low}")
    require_same_shape(src, out)

    rng = rng if rng is not None else np.random.default_rng()
    salt = out.kind.max_value if salt_value is None else salt_value
    high = 1.0 - low

    for row in iter_rows(src):
        data = src.read(row)
        draws = rng.random(data.size)
        data[draws <= low] = 0
        data[draws >= high] = salt
        out.write(row, data)
    return out

def gradient_mask(src: Raster, out: Raster, mask: int) -> Raster:
    """
    Apply the 3x3 blur in place of a directional gradient mask.

    The mask index selects one of GRADIENT_KERNELS, but signed gradients
    cannot be stored in the unsigned kinds, so the blur kernel is always the
    one applied (each sample broadcast across the window, as in the pyramid).

    Args:
        src: Input raster.
        out: Output raster with the same shape.
        mask: Direction index in [1, 8].

    Raises:
        InvalidParameterError: If mask is outside [1, 8].
        ShapeMismatchError: If out's shape differs from src's.
    """
    if mask not in GRADIENT_KERNELS:
        raise InvalidParameterError(f"Gradient mask must be in [1, 8], got {mask}")
    require_same_shape(src, out)

    log.debug(f"Gradient mask {mask} on '{src.name}' falls back to the blur kernel")

    weight = BLUR_KERNEL[::-1, ::-1].sum()
    for row in iter_rows(src):
        out.write(row, src.read(row) * weight)
    return out
