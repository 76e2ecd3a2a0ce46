# src/hdfraster/processing/spectral.py

"""
This module implements an out-of-core 2D discrete Fourier transform.

The 2D transform is separable, so it is computed as two passes of a 1D
complex transform (scipy.fft): one over every row, one over every column.
Intermediate results live in scratch Float32 rasters created inside the
same collection and always deleted before the call returns.

Normalisation:
    Both 1D passes are unnormalised (forward and backward alike). The
    inverse divides its final real output by TransformParams.normalization,
    which defaults to nx * ny so that a forward/inverse round trip restores
    the input.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence

import numpy as np
from scipy import fft

from hdfraster.exceptions import InvalidParameterError
from hdfraster.raster.kinds import RasterKind
from hdfraster.raster.layer import Raster, require_same_shape
from hdfraster.raster.partition import iter_columns, iter_rows
from hdfraster.raster.slicing import Slice
from hdfraster.raster.store import RasterGroup

log = logging.getLogger(__name__)

__all__ = [
    "TransformParams",
    "FilterStage",
    "LowPassFilter",
    "scratch_rasters",
    "forward_2d",
    "inverse_2d",
    "low_pass_filter"
]

@dataclass
class TransformParams:
    """
    Parameters for the 2D transform and the low-pass filter.

    Args:
        buffer_real: Name of the forward pass scratch raster (real part).
        buffer_imag: Name of the forward pass scratch raster (imaginary part).
        inverse_buffer_real: Name of the inverse pass scratch raster (real part).
        inverse_buffer_imag: Name of the inverse pass scratch raster (imaginary part).
        normalization: Divisor applied to the inverse output. None means nx * ny.
        mask_fraction: The low-pass mask is a centred square of side nx // mask_fraction.
    """
    buffer_real: str = "BufferReal"
    buffer_imag: str = "BufferImg"
    inverse_buffer_real: str = "BufferRealInv"
    inverse_buffer_imag: str = "BufferImgInv"
    normalization: Optional[float] = None
    mask_fraction: int = 5

    def __post_init__(self):
        self.validate()

    def validate(self):
        """
        Raises:
            InvalidParameterError: If mask_fraction < 1 or normalization is zero or not finite.
        """
        if self.mask_fraction < 1:
            raise InvalidParameterError(f"mask_fraction must be >= 1, got {self.mask_fraction}")
        if self.normalization is not None and (self.normalization == 0 or not np.isfinite(self.normalization)):
            raise InvalidParameterError(
                f"normalization must be a finite non-zero number, got {self.normalization}"
            )

@contextmanager
def scratch_rasters(collection: RasterGroup, names: Sequence[str], nx: int, ny: int) -> Iterator[List[Raster]]:
    """
    Create Float32 scratch rasters and delete them on exit, on success or failure.

    Every raster is deleted even if an earlier delete fails; the first delete
    error is re-raised once all of them have been attempted.

    Raises:
        AlreadyExistsError: If a scratch name is already taken. Rasters created
                            before the clash are still removed.
    """
    created = []
    try:
        for name in names:
            created.append(Raster.create(collection, name, RasterKind.FLOAT32, nx, ny))
        log.debug(f"Scratch rasters {list(names)} ({nx}x{ny}) created in '{collection.name}'")
        yield created
    finally:
        first_error = None
        for raster in created:
            try:
                raster.delete()
            except Exception as e:
                log.error(f"Failed to delete scratch raster '{raster.name}' from '{collection.name}': {e}")
                if first_error is None:
                    first_error = e
        if first_error is not None:
            raise first_error

def forward_2d(
    src: Raster,
    out_real: Raster,
    out_imag: Raster,
    collection: Optional[RasterGroup] = None,
    params: Optional[TransformParams] = None
) -> None:
    """
    Forward 2D DFT of src into separate real and imaginary rasters.

    Pass 1 transforms every row (length nx, imaginary input 0) into the
    scratch rasters; pass 2 transforms every column (length ny) of the
    scratch rasters into out_real / out_imag.

    Args:
        src: Input raster.
        out_real: Receives the real part; same shape as src.
        out_imag: Receives the imaginary part; same shape as src.
        collection: Where scratch rasters are created (defaults to src's collection).
        params: Scratch names (defaults to TransformParams()).

    Raises:
        ShapeMismatchError: If an output's shape differs from src's.
        AlreadyExistsError: If a scratch name is already taken.
    """
    params = params or TransformParams()
    require_same_shape(src, out_real, out_imag)

    collection = collection or src.collection
    nx, ny = src.dimensions()
    log.info(f"Forward 2D transform of '{src.name}' ({nx}x{ny})")

    with scratch_rasters(collection, [params.buffer_real, params.buffer_imag], nx, ny) as (buf_real, buf_imag):
        for row in iter_rows(src):
            spectrum = fft.fft(src.read(row))
            buf_real.write(row, spectrum.real)
            buf_imag.write(row, spectrum.imag)

        log.debug(f"Row pass done on '{src.name}'")

        for column in iter_columns(src):
            samples = buf_real.read(column) + 1j * buf_imag.read(column)
            spectrum = fft.fft(samples)
            out_real.write(column, spectrum.real)
            out_imag.write(column, spectrum.imag)

def inverse_2d(
    src_real: Raster,
    out: Raster,
    src_imag: Raster,
    collection: Optional[RasterGroup] = None,
    params: Optional[TransformParams] = None
) -> None:
    """
    Inverse 2D DFT of a (real, imaginary) raster pair into a real raster.

    Runs columns first then rows, mirroring forward_2d. The final row pass
    divides the real part by the normalisation constant and discards the
    imaginary part.

    Args:
        src_real: Real part of the spectrum.
        out: Receives the spatial-domain result; same shape as src_real.
        src_imag: Imaginary part of the spectrum; same shape as src_real.
        collection: Where scratch rasters are created (defaults to src_real's collection).
        params: Scratch names and normalisation (defaults to TransformParams()).

    Raises:
        ShapeMismatchError: If out or src_imag differs in shape from src_real.
        InvalidParameterError: If params.normalization is zero or not finite.
        AlreadyExistsError: If a scratch name is already taken.
    """
    params = params or TransformParams()
    params.validate()
    require_same_shape(src_real, out, src_imag)

    collection = collection or src_real.collection
    nx, ny = src_real.dimensions()
    normalization = params.normalization if params.normalization is not None else float(nx * ny)
    log.info(f"Inverse 2D transform of '{src_real.name}' ({nx}x{ny}) normalised by {normalization}")

    names = [params.inverse_buffer_real, params.inverse_buffer_imag]
    with scratch_rasters(collection, names, nx, ny) as (buf_real, buf_imag):
        for column in iter_columns(src_real):
            spectrum = src_real.read(column) + 1j * src_imag.read(column)
            samples = fft.ifft(spectrum, norm="forward")
            buf_real.write(column, samples.real)
            buf_imag.write(column, samples.imag)

        log.debug(f"Column pass done on '{src_real.name}'")

        for row in iter_rows(src_real):
            spectrum = buf_real.read(row) + 1j * buf_imag.read(row)
            samples = fft.ifft(spectrum, norm="forward")
            out.write(row, samples.real / normalization)

class FilterStage(Enum):
    """Progress of a LowPassFilter run."""
    IDLE = "idle"
    FORWARDED = "forwarded"
    MASKED = "masked"
    INVERTED = "inverted"

def mask_region(nx: int, ny: int, fraction: int) -> Optional[Slice]:
    """
    Centred square of side nx // fraction (clamped to ny), or None if it is empty.

    In an unshifted spectrum the centre holds the highest frequencies, so
    zeroing it keeps the low ones.
    """
    side = min(nx // fraction, ny)
    if side <= 0:
        return None
    return Slice((nx - side) // 2, (ny - side) // 2, side, side)

class LowPassFilter:
    """
    Forward transform, zero the high-frequency square, inverse transform.

    The stage attribute follows IDLE -> FORWARDED -> MASKED -> INVERTED.
    Every shape is checked before the first stage, so a mismatch leaves all
    rasters untouched.

    Args:
        params: TransformParams shared by both transforms and the mask.
    """

    def __init__(self, params: Optional[TransformParams] = None):
        self.params = params or TransformParams()
        self.stage = FilterStage.IDLE

    def run(
        self,
        src: Raster,
        real: Raster,
        imag: Raster,
        out: Raster,
        collection: Optional[RasterGroup] = None
    ) -> Raster:
        """
        Args:
            src: Input raster.
            real: Holds the real spectrum (overwritten).
            imag: Holds the imaginary spectrum (overwritten).
            out: Receives the filtered image.
            collection: Where scratch rasters are created (defaults to src's collection).

        Returns:
            Raster: out.
        """
        self.stage = FilterStage.IDLE
        self.params.validate()
        require_same_shape(src, real, imag, out)

        forward_2d(src, real, imag, collection, self.params)
        self.stage = FilterStage.FORWARDED

        nx, ny = src.dimensions()
        region = mask_region(nx, ny, self.params.mask_fraction)
        if region is None:
            log.debug(f"'{src.name}' {nx}x{ny} is too small for a low-pass mask; spectrum kept")
        else:
            zeros = np.zeros(region.size)
            real.write(region, zeros)
            imag.write(region, zeros)
            log.debug(f"Zeroed spectrum region {region}")
        self.stage = FilterStage.MASKED

        inverse_2d(real, out, imag, collection, self.params)
        self.stage = FilterStage.INVERTED
        return out

def low_pass_filter(
    src: Raster,
    real: Raster,
    imag: Raster,
    out: Raster,
    collection: Optional[RasterGroup] = None,
    params: Optional[TransformParams] = None
) -> Raster:
    """Functional shortcut for LowPassFilter(params).run(...)."""
    return LowPassFilter(params).run(src, real, imag, out, collection)
