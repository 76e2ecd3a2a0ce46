# src/hdfraster/raster/__init__.py
#
# Copyright (c) The hdfraster project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
The raster subpackage provides the storage side of hdfraster: element kinds,
slice addressing, the HDF5 collection wrapper, the Raster handle, streaming
partitions and file import/export.
"""
# Element kinds and addressing
from .kinds import (
    RasterKind,
    resolve_kind
)
from .slicing import (
    Slice,
    SliceLike
)

# Storage
from .store import (
    RasterFile,
    RasterGroup
)

# Core data structure
from .layer import (
    Raster,
    require_same_shape
)

# Partition operations
from .partition import (
    iter_rows,
    iter_columns,
    iter_tiles,
    tile_grid
)

# I/O operations
from .io import (
    import_band,
    export_raster,
    read_info
)

# Shared utilities
from .utils import (
    resolve_envi_path,
    kind_for_dtype
)

__all__ = [
    # Kinds and slices
    "RasterKind",
    "resolve_kind",
    "Slice",
    "SliceLike",

    # Storage
    "RasterFile",
    "RasterGroup",

    # Layer
    "Raster",
    "require_same_shape",

    # Partition
    "iter_rows",
    "iter_columns",
    "iter_tiles",
    "tile_grid",

    # I/O
    "import_band",
    "export_raster",
    "read_info",

    # Utils
    "resolve_envi_path",
    "kind_for_dtype"
]
