# src/hdfraster/raster/slicing.py

"""
This module implements slice addressing for rasters.

A slice is the rectangle (x0, y0, dx, dy) measured from the raster's top-left
corner, x along columns and y along rows. Storage is addressed (row, col),
so the conversion to a hyperslab offset/count swaps the axes.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

from hdfraster.exceptions import BadSliceError

log = logging.getLogger(__name__)

__all__ = [
    "Slice",
    "SliceLike"
]

@dataclass(frozen=True)
class Slice:
    """
    Rectangular region of a raster.

    Args:
        x0: Column offset of the top-left corner.
        y0: Row offset of the top-left corner.
        dx: Width in columns.
        dy: Height in rows.
    """
    x0: int
    y0: int
    dx: int
    dy: int

    @classmethod
    def coerce(cls, value: "SliceLike") -> "Slice":
        """
        Build a Slice from a Slice or any sequence of at least four integers.

        Extra components beyond the fourth are ignored.

        Raises:
            BadSliceError: If fewer than four components are given or they are not whole numbers.
        """
        if isinstance(value, Slice):
            return value

        try:
            components = list(value)
        except TypeError as e:
            raise BadSliceError(f"Slice must be a sequence (x0, y0, dx, dy), got {value!r}") from e

        if len(components) < 4:
            raise BadSliceError(
                f"Slice needs 4 components (x0, y0, dx, dy), got {len(components)}"
            )

        try:
            x0, y0, dx, dy = (int(c) for c in components[:4])
        except (TypeError, ValueError) as e:
            raise BadSliceError(f"Slice components must be integers, got {components[:4]}") from e

        if [x0, y0, dx, dy] != components[:4]:
            raise BadSliceError(f"Slice components must be whole numbers, got {components[:4]}")

        return cls(x0, y0, dx, dy)

    @classmethod
    def row(cls, y: int, nx: int) -> "Slice":
        """A full-width slice covering row y."""
        return cls(0, y, nx, 1)

    @classmethod
    def column(cls, x: int, ny: int) -> "Slice":
        """A full-height slice covering column x."""
        return cls(x, 0, 1, ny)

    @property
    def size(self) -> int:
        """Number of samples covered (dx * dy)."""
        return self.dx * self.dy

    @property
    def shape(self) -> Tuple[int, int]:
        """Returns (dy, dx), the numpy shape of the covered block."""
        return (self.dy, self.dx)

    def fits(self, nx: int, ny: int) -> bool:
        return (
            self.x0 >= 0 and self.y0 >= 0 and
            self.dx > 0 and self.dy > 0 and
            self.x0 + self.dx <= nx and
            self.y0 + self.dy <= ny
        )

    def validate(self, nx: int, ny: int) -> "Slice":
        """
        Check this slice against raster bounds.

        Returns:
            Slice: self, for chaining.

        Raises:
            BadSliceError: On negative offsets, non-positive sizes or overflow past (nx, ny).
        """
        if self.x0 < 0 or self.y0 < 0:
            raise BadSliceError(f"Slice offsets must be >= 0, got {self}")
        if self.dx <= 0 or self.dy <= 0:
            raise BadSliceError(f"Slice sizes must be > 0, got {self}")
        if self.x0 + self.dx > nx or self.y0 + self.dy > ny:
            raise BadSliceError(f"{self} exceeds raster bounds nx={nx}, ny={ny}")
        return self

    def to_hyperslab(self) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """Returns (offset, count) in storage (row, col) order."""
        return (self.y0, self.x0), (self.dy, self.dx)

    def __iter__(self):
        return iter((self.x0, self.y0, self.dx, self.dy))

SliceLike = Union[Slice, Sequence[int]]
