# src/hdfraster/raster/layer.py

"""
This module defines the Raster handle, the fundamental unit of hdfraster.

A Raster never holds its pixels in memory. It is a light handle on a
persisted 2D array plus a cached element kind, and every read or write is a
direct, synchronous pass-through to the storage collaborator (no caching).
"""

import logging
from typing import Optional, Tuple, Union

import numpy as np

from hdfraster.exceptions import (
    BadSliceError,
    BufferTooSmallError,
    NotARasterError,
    RasterError,
    ShapeMismatchError
)
from .kinds import RasterKind, resolve_kind
from .slicing import Slice, SliceLike
from .store import RasterGroup

log = logging.getLogger(__name__)

__all__ = [
    "OBJECT_TYPE",
    "Raster",
    "require_same_shape"
]

OBJECT_TYPE = "hdfraster::raster"

class Raster:
    """
    Handle on a named, persisted 2D array of UInt8, UInt16 or Float32 samples.

    Use Raster.create() or Raster.open() rather than the constructor.
    Dimensions are fixed at creation: nx columns by ny rows.

    Known limitation:
        write() is not transactional. If the backend fails in the middle of a
        write, the slice may be left partially written. No rollback is attempted.
    """

    def __init__(self, collection: RasterGroup, name: str, dataset, kind: RasterKind):
        self._collection = collection
        self._name = name
        self._dataset = dataset
        self._kind = kind

    # Lifecycle

    @classmethod
    def create(
        cls,
        collection: RasterGroup,
        name: str,
        kind: Union[RasterKind, str],
        nx: int,
        ny: int
    ) -> "Raster":
        """
        Create a new zero-filled raster in a collection.

        Args:
            collection: The owning array collection.
            name: Name of the raster inside the collection.
            kind: Element kind (RasterKind or 'uint8' / 'uint16' / 'float32').
            nx: Number of columns.
            ny: Number of rows.

        Returns:
            Raster: Handle on the new raster.

        Raises:
            AlreadyExistsError: If the name is taken.
            UnsupportedKindError: If kind is not one of the three accepted kinds.
            ShapeMismatchError: If nx or ny is not positive.
        """
        kind = resolve_kind(kind)
        if int(nx) <= 0 or int(ny) <= 0:
            raise ShapeMismatchError(f"Raster dimensions must be positive, got {nx}x{ny}")

        dataset = collection.create_array(name, kind, int(nx), int(ny))
        collection.set_object_type(dataset, OBJECT_TYPE)

        log.debug(f"Created raster '{name}' ({kind.value}, {nx}x{ny})")
        return cls(collection, name, dataset, kind)

    @classmethod
    def open(cls, collection: RasterGroup, name: str) -> "Raster":
        """
        Attach to an existing raster, inferring kind and dimensions from storage.

        Raises:
            NotFoundError: If the name is absent.
            NotARasterError: If the object lacks the hdfraster raster marker.
            UnsupportedKindError: If the stored dtype is not an accepted kind.
        """
        dataset = collection.open_array(name)

        object_type = collection.get_object_type(dataset)
        if object_type != OBJECT_TYPE:
            raise NotARasterError(
                f"'{name}' has object type {object_type!r}, expected '{OBJECT_TYPE}'"
            )

        kind = RasterKind.from_dtype(dataset.dtype)
        return cls(collection, name, dataset, kind)

    def close(self):
        """Release the handle. Persisted data is kept."""
        self._dataset = None

    def delete(self):
        """Remove the raster from its collection and release the handle."""
        self._require_open()
        self._dataset = None
        self._collection.delete_array(self._name)
        log.debug(f"Deleted raster '{self._name}'")

    @property
    def is_open(self) -> bool:
        return self._dataset is not None

    def _require_open(self):
        if self._dataset is None:
            raise RasterError(f"Raster '{self._name}' has been released")

    def __enter__(self) -> "Raster":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    # Metadata

    @property
    def name(self) -> str:
        return self._name

    @property
    def kind(self) -> RasterKind:
        return self._kind

    @property
    def collection(self) -> RasterGroup:
        return self._collection

    @property
    def nx(self) -> int:
        self._require_open()
        return int(self._dataset.shape[1])

    @property
    def ny(self) -> int:
        self._require_open()
        return int(self._dataset.shape[0])

    def dimensions(self) -> Tuple[int, int]:
        """Returns (nx, ny)."""
        return (self.nx, self.ny)

    def read_object_type(self) -> Optional[str]:
        self._require_open()
        return self._collection.get_object_type(self._dataset)

    # Slice I/O

    def _checked_slice(self, region: SliceLike) -> Slice:
        return Slice.coerce(region).validate(self.nx, self.ny)

    def write(self, region: SliceLike, buffer) -> None:
        """
        Write a flat, row-major buffer into a slice.

        Samples are converted to the raster's kind (integer kinds truncate and
        saturate). Only the first dx*dy samples of the buffer are used.

        Args:
            region: Slice or sequence (x0, y0, dx, dy).
            buffer: Array-like holding at least dx*dy samples.

        Raises:
            BadSliceError: If the slice is malformed or out of bounds.
            BufferTooSmallError: If the buffer holds fewer than dx*dy samples.
        """
        self._require_open()
        region = self._checked_slice(region)

        flat = np.ravel(np.asarray(buffer))
        if flat.size < region.size:
            raise BufferTooSmallError(
                f"Buffer holds {flat.size} samples, slice {region} needs {region.size}"
            )

        block = self._kind.convert(flat[:region.size]).reshape(region.shape)
        offset, count = region.to_hyperslab()
        self._collection.write_hyperslab(self._dataset, offset, count, block)

    def read(
        self,
        region: SliceLike,
        buffer: Optional[np.ndarray] = None,
        dtype=np.float64
    ) -> np.ndarray:
        """
        Read a slice into a flat, row-major buffer.

        Args:
            region: Slice or sequence (x0, y0, dx, dy).
            buffer: Optional destination. If it holds at least dx*dy elements
                    it is filled in place and returned. If it is smaller, a new
                    array of the buffer's dtype and length dx*dy is returned.
            dtype: Element type of the returned array when no buffer is given.

        Returns:
            np.ndarray: 1D array whose first dx*dy entries hold the slice.

        Raises:
            BadSliceError: If the slice is malformed or out of bounds.
        """
        self._require_open()
        region = self._checked_slice(region)

        offset, count = region.to_hyperslab()
        block = self._collection.read_hyperslab(self._dataset, offset, count)

        if buffer is None:
            return block.astype(dtype).ravel()

        if buffer.ndim != 1:
            raise BadSliceError(f"Read buffer must be 1D, got shape {buffer.shape}")

        if buffer.size < region.size:
            return block.astype(buffer.dtype).ravel()

        buffer[:region.size] = block.ravel()
        return buffer

    # Region helpers

    def set(self, region: SliceLike, value: float) -> None:
        """Fill a slice with a constant value."""
        region = self._checked_slice(region)
        self.write(region, np.full(region.size, value, dtype=np.float64))

    def fill(self, value: float) -> None:
        """Fill the whole raster with a constant, one row at a time."""
        nx, ny = self.dimensions()
        row = np.full(nx, value, dtype=np.float64)
        for y in range(ny):
            self.write(Slice.row(y, nx), row)

    def copy(self, region: SliceLike, out: "Raster") -> None:
        """
        Copy a slice of this raster to the top-left corner of another raster.

        Streams one row of the slice at a time.

        Raises:
            BadSliceError: If the slice does not fit this raster or the
                           region does not fit the output raster.
        """
        region = self._checked_slice(region)
        target = Slice(0, 0, region.dx, region.dy)
        target.validate(out.nx, out.ny)

        for line in range(region.dy):
            data = self.read(Slice(region.x0, region.y0 + line, region.dx, 1))
            out.write(Slice(0, line, region.dx, 1), data)

    def __repr__(self) -> str:
        if not self.is_open:
            return f"<Raster '{self._name}' released>"
        return f"<Raster '{self._name}' {self._kind.value} nx={self.nx} ny={self.ny}>"

def require_same_shape(reference: Raster, *others: Raster):
    """
    Raise ShapeMismatchError unless every raster shares reference's (nx, ny).
    """
    dims = reference.dimensions()
    for other in others:
        if other.dimensions() != dims:
            raise ShapeMismatchError(
                f"Raster '{other.name}' is {other.dimensions()}, "
                f"expected {dims} to match '{reference.name}'"
            )
