# src/hdfraster/processing/__init__.py
#
# Copyright (c) The hdfraster project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
The processing subpackage provides the out-of-core raster algorithms:
per-pixel algebra, Gaussian and Laplacian pyramids, tile statistics filters,
the 2D Fourier transform with its low-pass filter, enhancement operations
and drawing primitives.
"""

# Raster algebra
from .algebra import (
    ArithmeticOp,
    combine,
    combine_scalar,
    combine_new,
    combine_scalar_new,
    add,
    subtract,
    multiply,
    divide,
    add_scalar,
    subtract_scalar,
    multiply_scalar,
    divide_scalar
)

# Pyramids
from .pyramid import (
    GAUSSIAN_KERNEL,
    downsample,
    upsample,
    gaussian_pyramid,
    laplacian_pyramid
)

# Tile filters
from .tile_filters import (
    harmonic_mean,
    midpoint_filter,
    range_filter,
    auto_local_threshold
)

# Fourier transform
from .spectral import (
    TransformParams,
    FilterStage,
    LowPassFilter,
    forward_2d,
    inverse_2d,
    low_pass_filter
)

# Enhancement
from .enhance import (
    threshold,
    scale,
    bit_shift,
    add_salt_pepper,
    gradient_mask
)

# Drawing
from .drawing import (
    draw_filled_circle,
    draw_line,
    draw_rectangle,
    draw_filled_rectangle
)

__all__ = [
    # Algebra
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
    "divide_scalar",

    # Pyramids
    "GAUSSIAN_KERNEL",
    "downsample",
    "upsample",
    "gaussian_pyramid",
    "laplacian_pyramid",

    # Tile filters
    "harmonic_mean",
    "midpoint_filter",
    "range_filter",
    "auto_local_threshold",

    # Fourier transform
    "TransformParams",
    "FilterStage",
    "LowPassFilter",
    "forward_2d",
    "inverse_2d",
    "low_pass_filter",

    # Enhancement
    "threshold",
    "scale",
    "bit_shift",
    "add_salt_pepper",
    "gradient_mask",

    # Drawing
    "draw_filled_circle",
    "draw_line",
    "draw_rectangle",
    "draw_filled_rectangle"
]
