# src/hdfraster/raster/store.py

"""
This module provides the storage collaborator that rasters are persisted in.

It wraps h5py so that the rest of the package only ever talks to a narrow
interface: create/open/check/delete a named 2D array inside a group, read or
write a hyperslab of it, and get/set the single "object type" string
attribute that marks objects created by hdfraster.

Hierarchy:
    RasterFile  -> one HDF5 file on disk
    RasterGroup -> one array collection (HDF5 group) holding rasters
"""

import logging
from pathlib import Path
from typing import Union, Optional, Tuple, List

import h5py
import numpy as np

from hdfraster.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    NotARasterError,
    RasterIOError,
    RasterValidationError
)
from .kinds import RasterKind, resolve_kind

log = logging.getLogger(__name__)

__all__ = [
    "OBJECT_TYPE_ATTR",
    "FILE_OBJECT_TYPE",
    "GROUP_OBJECT_TYPE",
    "RasterFile",
    "RasterGroup"
]

OBJECT_TYPE_ATTR = "objtype"
FILE_OBJECT_TYPE = "hdfraster::file"
GROUP_OBJECT_TYPE = "hdfraster::group"

# Square chunks keep row and column streaming equally cheap
DEFAULT_CHUNK = 256

_FILE_MODES = {
    "new": "w-",
    "overwrite": "w",
    "existing": "r+",
    "readonly": "r"
}

def _decode(value) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)

class RasterFile:
    """
    An HDF5 file holding raster groups.

    Args:
        path: Location of the .h5 file.
        mode: 'new' (fail if present), 'overwrite', 'existing' (read/write) or 'readonly'.

    Usage:
        with RasterFile("scene.h5", "new") as f:
            group = f.create_group("landsat")
            ras = group.create_raster("B07", "float32", 200, 200)
    """

    def __init__(self, path: Union[str, Path], mode: str = "existing"):
        if mode not in _FILE_MODES:
            raise RasterValidationError(
                f"Invalid file mode '{mode}'. Must be one of: {list(_FILE_MODES)}"
            )

        self.path = Path(path)
        self.mode = mode

        if mode in ("existing", "readonly") and not self.path.exists():
            raise FileNotFoundError(f"HDF5 file not found: {self.path}")
        if mode == "new" and self.path.exists():
            raise AlreadyExistsError(f"HDF5 file already exists: {self.path}")

        try:
            self._h5 = h5py.File(self.path.as_posix(), _FILE_MODES[mode])
        except OSError as e:
            raise RasterIOError(f"Failed to open {self.path} in '{mode}' mode: {e}") from e

        if mode in ("new", "overwrite"):
            self._h5.attrs[OBJECT_TYPE_ATTR] = FILE_OBJECT_TYPE

        log.debug(f"Opened {self.path.name} ({mode})")

    @property
    def is_open(self) -> bool:
        return bool(self._h5)

    def create_group(self, name: str) -> "RasterGroup":
        """
        Create a new array collection.

        Raises:
            AlreadyExistsError: If the name is taken.
        """
        if name in self._h5:
            raise AlreadyExistsError(f"Group '{name}' already exists in {self.path.name}")
        group = self._h5.create_group(name)
        group.attrs[OBJECT_TYPE_ATTR] = GROUP_OBJECT_TYPE
        log.debug(f"Created group '{name}' in {self.path.name}")
        return RasterGroup(group)

    def open_group(self, name: str) -> "RasterGroup":
        """
        Open an existing array collection.

        Raises:
            NotFoundError: If there is no group with this name.
        """
        node = self._h5.get(name)
        if node is None or not isinstance(node, h5py.Group):
            raise NotFoundError(f"Group '{name}' not found in {self.path.name}")
        return RasterGroup(node)

    def require_group(self, name: str) -> "RasterGroup":
        """Open the group if present, create it otherwise."""
        if self.group_exists(name):
            return self.open_group(name)
        return self.create_group(name)

    def group_exists(self, name: str) -> bool:
        return isinstance(self._h5.get(name), h5py.Group)

    def list_groups(self) -> List[str]:
        return [k for k, v in self._h5.items() if isinstance(v, h5py.Group)]

    def flush(self):
        self._h5.flush()

    def close(self):
        if self.is_open:
            self._h5.close()
            log.debug(f"Closed {self.path.name}")

    def __enter__(self) -> "RasterFile":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"<RasterFile {self.path.name} mode={self.mode} {state}>"

class RasterGroup:
    """
    An array collection: the HDF5 group that owns a set of named rasters.

    This is the only place h5py datasets are created, opened, sliced or deleted.

    Args:
        group: The underlying h5py.Group.
    """

    def __init__(self, group: h5py.Group):
        self._group = group

    @property
    def name(self) -> str:
        return self._group.name.rsplit("/", 1)[-1]

    @property
    def h5(self) -> h5py.Group:
        return self._group

    # Array lifecycle

    def array_exists(self, name: str) -> bool:
        return name in self._group

    def list_arrays(self) -> List[str]:
        return [k for k, v in self._group.items() if isinstance(v, h5py.Dataset)]

    def create_array(
        self,
        name: str,
        kind: Union[RasterKind, str],
        nx: int,
        ny: int,
        chunk: int = DEFAULT_CHUNK
    ) -> h5py.Dataset:
        """
        Create a zero-filled 2D dataset of shape (ny, nx).

        Args:
            name: Dataset name inside this group.
            kind: Element kind (validated against the closed set).
            nx: Number of columns.
            ny: Number of rows.
            chunk: Edge length of the square storage chunks.

        Returns:
            h5py.Dataset: The new dataset.

        Raises:
            AlreadyExistsError: If the name is taken.
            UnsupportedKindError: If the kind is not UInt8/UInt16/Float32.
        """
        kind = resolve_kind(kind)

        if self.array_exists(name):
            raise AlreadyExistsError(f"'{name}' already exists in group '{self.name}'")

        chunks = (min(ny, chunk), min(nx, chunk))

        try:
            dataset = self._group.create_dataset(
                name,
                shape=(ny, nx),
                dtype=kind.dtype,
                chunks=chunks,
                fillvalue=0
            )
        except (OSError, ValueError) as e:
            raise RasterIOError(f"Failed to create '{name}' ({kind.value}, {nx}x{ny}): {e}") from e

        log.debug(f"Created array '{name}' {kind.value} {nx}x{ny} chunks={chunks}")
        return dataset

    def open_array(self, name: str) -> h5py.Dataset:
        """
        Raises:
            NotFoundError: If nothing is stored under this name.
            NotARasterError: If the object is not a 2D dataset.
        """
        node = self._group.get(name)
        if node is None:
            raise NotFoundError(f"'{name}' not found in group '{self.name}'")
        if not isinstance(node, h5py.Dataset) or node.ndim != 2:
            raise NotARasterError(f"'{name}' in group '{self.name}' is not a 2D array")
        return node

    def delete_array(self, name: str):
        if not self.array_exists(name):
            raise NotFoundError(f"'{name}' not found in group '{self.name}'")
        del self._group[name]
        log.debug(f"Deleted array '{name}' from group '{self.name}'")

    # Hyperslab I/O

    def read_hyperslab(
        self,
        array: h5py.Dataset,
        offset: Tuple[int, int],
        count: Tuple[int, int]
    ) -> np.ndarray:
        """
        Read a (row, col) hyperslab in the dataset's own dtype.

        Returns:
            np.ndarray: Array of shape count.
        """
        (r0, c0), (nr, nc) = offset, count
        try:
            return array[r0:r0 + nr, c0:c0 + nc]
        except OSError as e:
            raise RasterIOError(f"Failed to read {count} at {offset} from {array.name}: {e}") from e

    def write_hyperslab(
        self,
        array: h5py.Dataset,
        offset: Tuple[int, int],
        count: Tuple[int, int],
        block: np.ndarray
    ):
        """Write a (row, col) hyperslab. The block must already be shaped as count."""
        (r0, c0), (nr, nc) = offset, count
        try:
            array[r0:r0 + nr, c0:c0 + nc] = block
        except (OSError, TypeError) as e:
            raise RasterIOError(f"Failed to write {count} at {offset} to {array.name}: {e}") from e

    # Object type attribute

    @staticmethod
    def get_object_type(obj: Union[h5py.Dataset, h5py.Group]) -> Optional[str]:
        return _decode(obj.attrs.get(OBJECT_TYPE_ATTR))

    @staticmethod
    def set_object_type(obj: Union[h5py.Dataset, h5py.Group], value: str):
        obj.attrs[OBJECT_TYPE_ATTR] = value

    # Raster conveniences

    def create_raster(self, name: str, kind: Union[RasterKind, str], nx: int, ny: int):
        """Shortcut for Raster.create(self, ...)."""
        from .layer import Raster
        return Raster.create(self, name, kind, nx, ny)

    def open_raster(self, name: str):
        """Shortcut for Raster.open(self, ...)."""
        from .layer import Raster
        return Raster.open(self, name)

    def __contains__(self, name: str) -> bool:
        return self.array_exists(name)

    def __repr__(self) -> str:
        return f"<RasterGroup '{self._group.name}' arrays={len(self.list_arrays())}>"
