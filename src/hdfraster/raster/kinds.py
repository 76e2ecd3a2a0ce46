# src/hdfraster/raster/kinds.py

"""
This module defines the closed set of element kinds a raster can persist.

Each kind owns its numpy dtype and the numeric conversion applied when a
buffer of any dtype is committed to storage. Integer kinds truncate toward
zero and saturate to their range, which is what HDF5's own float-to-integer
conversion does. Float32 narrows with a plain cast.
"""

import logging
from enum import Enum
from typing import Union

import numpy as np

from hdfraster.exceptions import UnsupportedKindError

log = logging.getLogger(__name__)

__all__ = [
    "RasterKind",
    "resolve_kind"
]

class RasterKind(Enum):
    """
    Element kinds accepted by the raster store.

    Options:
        UINT8: Unsigned 8-bit integers (0..255).
        UINT16: Unsigned 16-bit integers (0..65535).
        FLOAT32: IEEE single precision floats.
    """
    UINT8 = "uint8"
    UINT16 = "uint16"
    FLOAT32 = "float32"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @property
    def is_integer(self) -> bool:
        return np.issubdtype(self.dtype, np.integer)

    @property
    def max_value(self) -> float:
        """Largest representable value, used as the divide-by-zero saturation value."""
        if self.is_integer:
            return float(np.iinfo(self.dtype).max)
        return float(np.finfo(self.dtype).max)

    @property
    def min_value(self) -> float:
        if self.is_integer:
            return float(np.iinfo(self.dtype).min)
        return float(np.finfo(self.dtype).min)

    def convert(self, values: np.ndarray) -> np.ndarray:
        """
        Convert samples of any numeric dtype to this kind.

        Args:
            values: Array of samples.

        Returns:
            np.ndarray: Array of self.dtype with the same shape.
        """
        values = np.asarray(values)
        if values.dtype == self.dtype:
            return values

        if not self.is_integer:
            return values.astype(self.dtype)

        if np.issubdtype(values.dtype, np.integer) or values.dtype == np.bool_:
            return np.clip(values, self.min_value, self.max_value).astype(self.dtype)

        as_float = np.nan_to_num(values.astype(np.float64), nan=0.0,
                                 posinf=self.max_value, neginf=self.min_value)
        return np.clip(np.trunc(as_float), self.min_value, self.max_value).astype(self.dtype)

    @classmethod
    def from_dtype(cls, dtype: Union[str, np.dtype]) -> "RasterKind":
        """Map a numpy dtype to its kind, raising UnsupportedKindError for anything else."""
        name = np.dtype(dtype).name
        for kind in cls:
            if kind.value == name:
                return kind
        raise UnsupportedKindError(
            f"Unsupported element kind '{name}'. Must be one of: {[k.value for k in cls]}"
        )

def resolve_kind(kind: Union["RasterKind", str, np.dtype, type]) -> RasterKind:
    """
    Normalize user input ('uint8', np.uint16, RasterKind.FLOAT32...) to a RasterKind.

    Raises:
        UnsupportedKindError: If the kind is not one of the three accepted kinds.
    """
    if isinstance(kind, RasterKind):
        return kind

    if isinstance(kind, str):
        key = kind.strip().lower()
        for member in RasterKind:
            if key in (member.value, member.name.lower()):
                return member
        raise UnsupportedKindError(
            f"Unsupported element kind '{kind}'. Must be one of: {[k.value for k in RasterKind]}"
        )

    try:
        return RasterKind.from_dtype(kind)
    except TypeError as e:
        raise UnsupportedKindError(f"Cannot interpret {kind!r} as an element kind") from e
