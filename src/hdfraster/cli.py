import argparse
import sys
import logging
from pathlib import Path
from typing import List, Optional

from hdfraster.exceptions import RasterError
from hdfraster.raster import RasterFile, RasterKind, import_band, export_raster
from hdfraster.processing import gaussian_pyramid, laplacian_pyramid, low_pass_filter, TransformParams

def setup_logging(level: int = logging.INFO) -> None:
    """
    Configures the standard logging format and level for the command-line interface.

    Args:
        level (int): The logging threshold level.
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

def show_info(h5_path: str, group: Optional[str] = None) -> None:
    """
    Prints every group of a file, or every raster of one group, with its kind and dimensions.
    """
    with RasterFile(h5_path, "readonly") as f:
        groups = [group] if group else f.list_groups()
        for name in groups:
            collection = f.open_group(name)
            print(f"{name}/")
            for array in collection.list_arrays():
                raster = collection.open_raster(array)
                nx, ny = raster.dimensions()
                print(f"    {array}: {raster.kind.value} {nx}x{ny}")

def run_import(h5_path: str, group: str, name: str, source: str, band: int, kind: Optional[str]) -> None:
    """
    Streams one band of a GDAL-readable file into a raster, creating the HDF5 file and group if needed.
    """
    mode = "existing" if Path(h5_path).exists() else "new"
    with RasterFile(h5_path, mode) as f:
        collection = f.require_group(group)
        raster = import_band(collection, name, source, band=band, kind=kind)
        logging.info(f"Imported {source} into {group}/{raster.name}")

def run_export(h5_path: str, group: str, name: str, target: str, driver: str) -> None:
    """
    Writes one raster out to a GDAL file.
    """
    with RasterFile(h5_path, "readonly") as f:
        raster = f.open_group(group).open_raster(name)
        path = export_raster(raster, target, driver=driver)
        logging.info(f"Exported {group}/{name} to {path}")

def run_pyramid(h5_path: str, group: str, name: str, levels: int, expand: bool) -> None:
    """
    Builds a Gaussian (reducing) or Laplacian (expanding) pyramid next to the base raster.
    """
    with RasterFile(h5_path, "existing") as f:
        base = f.open_group(group).open_raster(name)
        build = laplacian_pyramid if expand else gaussian_pyramid
        pyramid = build(base, levels)
        logging.info(f"Pyramid levels: {[level.name for level in pyramid]}")

def run_lowpass(h5_path: str, group: str, name: str, output: str, mask_fraction: int) -> None:
    """
    Runs the Fourier low-pass filter on a raster, writing a new Float32 raster.

    The real and imaginary spectra are kept as '<output>_real' and '<output>_imag'.
    """
    params = TransformParams(mask_fraction=mask_fraction)

    with RasterFile(h5_path, "existing") as f:
        collection = f.open_group(group)
        src = collection.open_raster(name)
        nx, ny = src.dimensions()

        real = collection.create_raster(f"{output}_real", RasterKind.FLOAT32, nx, ny)
        imag = collection.create_raster(f"{output}_imag", RasterKind.FLOAT32, nx, ny)
        out = collection.create_raster(output, RasterKind.FLOAT32, nx, ny)

        low_pass_filter(src, real, imag, out, params=params)
        logging.info(f"Low-pass result written to {group}/{output}")

def build_parser() -> argparse.ArgumentParser:
    """
    Declares the sub-commands and their arguments.
    """
    parser = argparse.ArgumentParser(
        prog="hdfraster",
        description="Out-of-core raster processing on HDF5 files"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser("info", help="List groups and rasters of an HDF5 file.")
    info_parser.add_argument("h5", help="HDF5 file.")
    info_parser.add_argument("--group", default=None, help="Only list this group.")

    import_parser = subparsers.add_parser("import", help="Import one band of a raster file.")
    import_parser.add_argument("h5", help="HDF5 file (created if missing).")
    import_parser.add_argument("group", help="Target group (created if missing).")
    import_parser.add_argument("name", help="Name of the new raster.")
    import_parser.add_argument("source", help="Any GDAL-readable raster file.")
    import_parser.add_argument("--band", type=int, default=1, help="1-based band index. Defaults to 1.")
    import_parser.add_argument(
        "--kind",
        choices=[k.value for k in RasterKind],
        default=None,
        help="Storage kind. Inferred from the band when omitted."
    )

    export_parser = subparsers.add_parser("export", help="Export a raster to a GDAL file.")
    export_parser.add_argument("h5", help="HDF5 file.")
    export_parser.add_argument("group", help="Source group.")
    export_parser.add_argument("name", help="Source raster.")
    export_parser.add_argument("target", help="Output file path.")
    export_parser.add_argument("--driver", default="GTiff", help="GDAL driver. Defaults to GTiff.")

    pyramid_parser = subparsers.add_parser("pyramid", help="Build a raster pyramid.")
    pyramid_parser.add_argument("h5", help="HDF5 file.")
    pyramid_parser.add_argument("group", help="Group holding the base raster.")
    pyramid_parser.add_argument("name", help="Base raster.")
    pyramid_parser.add_argument("--levels", type=int, default=1, help="Number of levels to add.")
    pyramid_parser.add_argument(
        "--expand",
        action="store_true",
        help="Build an expanding (Laplacian) pyramid instead of a reducing one."
    )

    lowpass_parser = subparsers.add_parser("lowpass", help="Fourier low-pass filter a raster.")
    lowpass_parser.add_argument("h5", help="HDF5 file.")
    lowpass_parser.add_argument("group", help="Group holding the raster.")
    lowpass_parser.add_argument("name", help="Source raster.")
    lowpass_parser.add_argument("output", help="Name of the filtered raster.")
    lowpass_parser.add_argument(
        "--mask-fraction",
        type=int,
        default=5,
        help="The zeroed square has side nx // mask-fraction. Defaults to 5."
    )

    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """
    Parses command-line arguments and routes execution to the matching sub-command.

    Returns:
        int: 0 on success. Library and file errors are logged and exit with status 1.
    """
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.command == "info":
            show_info(args.h5, args.group)
        elif args.command == "import":
            run_import(args.h5, args.group, args.name, args.source, args.band, args.kind)
        elif args.command == "export":
            run_export(args.h5, args.group, args.name, args.target, args.driver)
        elif args.command == "pyramid":
            run_pyramid(args.h5, args.group, args.name, args.levels, args.expand)
        elif args.command == "lowpass":
            run_lowpass(args.h5, args.group, args.name, args.output, args.mask_fraction)
    except (RasterError, FileNotFoundError) as e:
        logging.error(f"{args.command} failed: {e}")
        sys.exit(1)

    return 0

if __name__ == "__main__":
    main()
