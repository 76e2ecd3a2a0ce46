# src/hdfraster/processing/algebra.py

"""
This module implements per-pixel raster algebra.

Binary operations combine two equally-shaped rasters into a third, scalar
operations combine a raster with a constant. Both stream one full row at a
time: read a row from each input, apply the operator, write the row out.
"""

import logging
from enum import Enum
from typing import Optional, Union

import numpy as np

from hdfraster.exceptions import DivideByZeroError, InvalidParameterError
from hdfraster.raster.layer import Raster, require_same_shape
from hdfraster.raster.partition import iter_rows

log = logging.getLogger(__name__)

__all__ = [
    "ArithmeticOp",
    "combine",
    "combine_scalar",
    "combine_new",
    "combine_scalar_new",
    "add",
    "subtract",
    "multiply",
    "divide",
    "add_scalar",
    "subtract_scalar",
    "multiply_scalar",
    "divide_scalar"
]

class ArithmeticOp(Enum):
    """
    Element-wise operators.

    The value doubles as the infix used to name rasters created by
    combine_new() (e.g. 'A_PLUS_B').
    """
    ADD = "PLUS"
    SUB = "MINUS"
    MUL = "TIMES"
    DIV = "DIVIDEDBY"

def _resolve_op(op: Union[ArithmeticOp, str]) -> ArithmeticOp:
    if isinstance(op, ArithmeticOp):
        return op
    try:
        return ArithmeticOp[op.upper()]
    except KeyError:
        valid = [o.name.lower() for o in ArithmeticOp]
        raise InvalidParameterError(f"Invalid operator '{op}'. Must be one of: {valid}") from None

def _apply(a: np.ndarray, b: np.ndarray, op: ArithmeticOp, zero_fill: float) -> np.ndarray:
    if op is ArithmeticOp.ADD:
        return a + b
    if op is ArithmeticOp.SUB:
        return a - b
    if op is ArithmeticOp.MUL:
        return a * b

    # Divide by zero saturates: the persisted kinds cannot hold inf or nan
    out = np.full_like(a, zero_fill)
    np.divide(a, b, out=out, where=(b != 0))
    return out

def combine(a: Raster, b: Raster, out: Raster, op: Union[ArithmeticOp, str]) -> Raster:
    """
    Element-wise a (op) b written to out.

    For division, samples whose divisor is zero are set to the maximum value
    representable by out's kind (e.g. 255 for UInt8).

    Args:
        a: Left operand.
        b: Right operand.
        out: Destination raster (may be a or b for in-place work).
        op: ArithmeticOp or its name ('add', 'sub', 'mul', 'div').

    Returns:
        Raster: out.

    Raises:
        ShapeMismatchError: Unless a, b and out share (nx, ny).
    """
    op = _resolve_op(op)
    require_same_shape(a, b, out)

    zero_fill = out.kind.max_value
    log.debug(f"Combining '{a.name}' {op.name} '{b.name}' -> '{out.name}'")

    for row in iter_rows(a):
        result = _apply(a.read(row), b.read(row), op, zero_fill)
        out.write(row, result)

    return out

def combine_scalar(a: Raster, value: float, out: Raster, op: Union[ArithmeticOp, str]) -> Raster:
    """
    Element-wise a (op) value written to out.

    Raises:
        DivideByZeroError: If op is division and value is zero (checked before any I/O).
        ShapeMismatchError: Unless a and out share (nx, ny).
    """
    op = _resolve_op(op)
    if op is ArithmeticOp.DIV and value == 0:
        raise DivideByZeroError(f"Cannot divide raster '{a.name}' by zero")
    require_same_shape(a, out)

    log.debug(f"Combining '{a.name}' {op.name} {value} -> '{out.name}'")

    for row in iter_rows(a):
        data = a.read(row)
        out.write(row, _apply(data, np.full_like(data, value), op, out.kind.max_value))

    return out

def combine_new(a: Raster, b: Raster, op: Union[ArithmeticOp, str], name: Optional[str] = None) -> Raster:
    """
    Create a raster in a's collection (same kind and shape) holding a (op) b.

    The default name is '<a>_<OP>_<b>', e.g. 'red_PLUS_nir'.
    """
    op = _resolve_op(op)
    require_same_shape(a, b)
    name = name or f"{a.name}_{op.value}_{b.name}"

    out = Raster.create(a.collection, name, a.kind, a.nx, a.ny)
    return combine(a, b, out, op)

def combine_scalar_new(a: Raster, value: float, op: Union[ArithmeticOp, str], name: Optional[str] = None) -> Raster:
    """
    Create a raster in a's collection holding a (op) value, named '<a>_<OP>_val' by default.

    The divide-by-zero check runs before the output raster is created.
    """
    op = _resolve_op(op)
    if op is ArithmeticOp.DIV and value == 0:
        raise DivideByZeroError(f"Cannot divide raster '{a.name}' by zero")
    name = name or f"{a.name}_{op.value}_val"

    out = Raster.create(a.collection, name, a.kind, a.nx, a.ny)
    return combine_scalar(a, value, out, op)

def add(a: Raster, b: Raster, out: Raster) -> Raster:
    return combine(a, b, out, ArithmeticOp.ADD)

def subtract(a: Raster, b: Raster, out: Raster) -> Raster:
    return combine(a, b, out, ArithmeticOp.SUB)

def multiply(a: Raster, b: Raster, out: Raster) -> Raster:
    return combine(a, b, out, ArithmeticOp.MUL)

def divide(a: Raster, b: Raster, out: Raster) -> Raster:
    return combine(a, b, out, ArithmeticOp.DIV)

def add_scalar(a: Raster, value: float, out: Raster) -> Raster:
    return combine_scalar(a, value, out, ArithmeticOp.ADD)

def subtract_scalar(a: Raster, value: float, out: Raster) -> Raster:
    return combine_scalar(a, value, out, ArithmeticOp.SUB)

def multiply_scalar(a: Raster, value: float, out: Raster) -> Raster:
    return combine_scalar(a, value, out, ArithmeticOp.MUL)

def divide_scalar(a: Raster, value: float, out: Raster) -> Raster:
    return combine_scalar(a, value, out, ArithmeticOp.DIV)
