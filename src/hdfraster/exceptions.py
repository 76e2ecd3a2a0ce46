# src/hdfraster/exceptions.py

"""
This module defines the exception hierarchy shared by every hdfraster module.

All errors derive from RasterError so callers can catch the whole family.
Validation failures additionally derive from ValueError, and scalar division
by zero from ZeroDivisionError, so generic handlers keep working.
"""

__all__ = [
    "RasterError",
    "RasterValidationError",
    "RasterIOError",
    "ShapeMismatchError",
    "BadSliceError",
    "BufferTooSmallError",
    "InvalidWindowSizeError",
    "InvalidLevelCountError",
    "InvalidParameterError",
    "UnsupportedKindError",
    "AlreadyExistsError",
    "NotFoundError",
    "NotARasterError",
    "DivideByZeroError"
]

class RasterError(Exception):
    """Base class for all hdfraster errors."""

class RasterValidationError(RasterError, ValueError):
    """An argument failed validation before any storage was touched."""

class RasterIOError(RasterError, IOError):
    """The storage backend (h5py or rasterio) failed to read or write."""

class ShapeMismatchError(RasterValidationError):
    """Rasters involved in one operation do not have the required (nx, ny)."""

class BadSliceError(RasterValidationError):
    """A slice is malformed (fewer than 4 components, non-positive size) or out of bounds."""

class BufferTooSmallError(RasterValidationError):
    """A write buffer holds fewer than dx*dy samples."""

class InvalidWindowSizeError(RasterValidationError):
    """A tile window or partition count is outside its accepted range."""

class InvalidLevelCountError(RasterValidationError):
    """A pyramid was requested with too few (or too many) levels."""

class InvalidParameterError(RasterValidationError):
    """A scalar parameter (radius, probability, bit count, mask index) is out of range."""

class UnsupportedKindError(RasterValidationError):
    """The element kind is not one of UInt8, UInt16 or Float32."""

class AlreadyExistsError(RasterError):
    """The requested name is already taken in the array collection."""

class NotFoundError(RasterError, KeyError):
    """No object with the requested name exists in the array collection."""

    def __str__(self) -> str:
        # KeyError quotes its argument, keep the plain message instead
        return str(self.args[0]) if self.args else ""

class NotARasterError(RasterError):
    """The named object exists but was not created as an hdfraster raster."""

class DivideByZeroError(RasterError, ZeroDivisionError):
    """A raster was divided by the scalar zero."""
