"""
hdfraster: out-of-core raster processing on HDF5.

Rasters live as named 2D arrays inside HDF5 groups and are streamed through
memory one slice at a time. See hdfraster.raster for storage and I/O and
hdfraster.processing for the algorithms.
"""

__version__ = "0.1.0"
