"""
Entry point: tolerance clustering tools for geometry files.

Usage:
    python main.py <command> <input> [--output OUTPUT] [--config CONFIG] [options]

Examples:
    python main.py points survey.json --tolerance 0.5
    python main.py modules facade.json --decimal-places 3 --reference 0 0 0
    python main.py modules panel.stl --output panel_modules.json
    python main.py sort parts.json --method grid
    python main.py directions mullions.json --tolerance 0.05
    python main.py length edges.json --threshold 250
    python main.py batch ./panels modules --parallel
    python main.py init-config
"""

import argparse
import logging
import sys
from typing import List, Optional

from geomcluster.batch import batch_process
from geomcluster.errors import GeometryLoadError
from geomcluster.logging_config import setup_logging
from geomcluster.operations.sorting import SORT_METHODS
from geomcluster.pipeline import OPERATIONS, run_pipeline
from geomcluster.project_config import (
    CONFIG_FILENAME,
    ProjectConfig,
    create_sample_config,
    load_config,
)

logger = logging.getLogger("geomcluster.cli")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "input",
        help="Input geometry file (.json geometry document or .stl).",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Result JSON path (default: <input stem>.<command>.json).",
    )
    parser.add_argument(
        "--format", "-f",
        choices=["json", "stl"],
        default=None,
        dest="fmt",
        help="Input format (default: detected from the file suffix).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Tolerance-based clustering of points, curves and panel modules.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help=f"Path to a {CONFIG_FILENAME} configuration file.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging.",
    )
    parser.add_argument(
        "--log-json",
        default=None,
        dest="log_json",
        help="Also write JSON log records to this file.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("points", help="Remove duplicate points.")
    _add_common(p)
    p.add_argument("--tolerance", "-t", type=float, default=None,
                   help="Distance tolerance (<= 0 uses the default tolerance).")
    p.add_argument("--no-kdtree", action="store_false", dest="use_kdtree", default=None,
                   help="Use the pairwise scan instead of the KD-tree.")

    p = sub.add_parser("curves", help="Remove duplicate curves (either direction).")
    _add_common(p)
    p.add_argument("--tolerance", "-t", type=float, default=None,
                   help="Comparison tolerance (<= 0 uses the default tolerance).")
    p.add_argument("--samples", type=int, default=None, dest="sample_count",
                   help="Sampling intervals for non-linear curves.")

    p = sub.add_parser("modules", help="Find unique modules by plane and area.")
    _add_common(p)
    p.add_argument("--tolerance", "-t", type=float, default=None,
                   help="Coplanarity tolerance.")
    p.add_argument("--decimal-places", "-d", type=int, default=None, dest="decimal_places",
                   help="Rounding of scaled areas.")
    p.add_argument("--area-scale", type=float, default=None, dest="area_scale",
                   help="Factor applied to areas before rounding (default 1e-6).")
    p.add_argument("--reference", type=float, nargs=3, default=None,
                   metavar=("X", "Y", "Z"), dest="reference_point",
                   help="Reference point for numbering modules.")
    p.add_argument("--prefix", default=None, dest="label_prefix",
                   help="Plane group label prefix (default 'Plane_').")

    p = sub.add_parser("sort", help="Sort objects spatially.")
    _add_common(p)
    p.add_argument("--method", "-m", default=None,
                   help=f"Sort method: {', '.join(SORT_METHODS)}.")
    p.add_argument("--reference", type=float, nargs=3, default=None,
                   metavar=("X", "Y", "Z"), dest="reference_point",
                   help="Reference point for 'distance' and 'angle'.")

    p = sub.add_parser("directions", help="Split curve segments by direction.")
    _add_common(p)
    p.add_argument("--tolerance", "-t", type=float, default=None,
                   help="Direction ratio tolerance (default 0.1).")

    p = sub.add_parser("length", help="Split curves at a length threshold.")
    _add_common(p)
    p.add_argument("--threshold", type=float, default=None,
                   help="Curves at least this long are 'long' (default 10).")

    p = sub.add_parser("batch", help="Run one command on every file in a directory.")
    p.add_argument("input_dir", help="Directory containing geometry files.")
    p.add_argument("operation", choices=list(OPERATIONS), help="Command to run.")
    p.add_argument("--output", "-o", default=None, dest="output_dir",
                   help="Output directory (default: config, else input directory).")
    p.add_argument("--recursive", "-r", action="store_true", help="Search subdirectories.")
    p.add_argument("--parallel", action="store_true", help="Use parallel processing.")
    p.add_argument("--jobs", "-j", type=int, default=None, dest="max_workers",
                   help="Maximum parallel jobs.")

    p = sub.add_parser("init-config", help=f"Write a sample {CONFIG_FILENAME}.")
    p.add_argument("path", nargs="?", default=CONFIG_FILENAME, help="Output path.")

    return parser


def apply_cli_overrides(config: ProjectConfig, args: argparse.Namespace) -> ProjectConfig:
    """Copy explicitly given CLI options into the configuration."""
    def _set(section, attr: str, arg_name: Optional[str] = None) -> None:
        value = getattr(args, arg_name or attr, None)
        if value is not None:
            setattr(section, attr, list(value) if isinstance(value, list) else value)

    command = args.command
    if command in ("points", "curves"):
        _set(config.clustering, "tolerance")
        _set(config.clustering, "sample_count")
        _set(config.clustering, "use_kdtree")
    elif command == "modules":
        _set(config.modules, "tolerance")
        _set(config.modules, "decimal_places")
        _set(config.modules, "area_scale")
        _set(config.modules, "reference_point")
        _set(config.modules, "label_prefix")
    elif command == "sort":
        _set(config.sorting, "method")
        _set(config.sorting, "reference_point")
    elif command == "directions":
        _set(config.directions, "tolerance")
    elif command == "length":
        _set(config.length_filter, "threshold")
    return config


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)

    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO,
                  json_file=args.log_json)

    if args.command == "init-config":
        path = create_sample_config(args.path)
        print(f"Sample configuration written to {path}")
        return 0

    if args.command == "batch":
        config = load_config(input_path=f"{args.input_dir}/batch", explicit_config=args.config)
        try:
            result = batch_process(
                input_dir=args.input_dir,
                operation=args.operation,
                output_dir=args.output_dir,
                recursive=args.recursive,
                config=config,
                parallel=args.parallel,
                max_workers=args.max_workers,
            )
        except (FileNotFoundError, NotADirectoryError) as exc:
            logger.critical("Batch failed: %s", exc)
            return 1
        print("\n" + result.summary())
        return 0 if result.failed == 0 else 1

    config = apply_cli_overrides(
        load_config(input_path=args.input, explicit_config=args.config), args)

    try:
        output = run_pipeline(args.input, args.command, output_path=args.output,
                              config=config, fmt=args.fmt)
    except GeometryLoadError as exc:
        logger.critical("Geometry load error: %s", exc)
        return 1
    except ValueError as exc:
        logger.critical("Configuration error: %s", exc)
        return 1
    except Exception as exc:
        logger.critical("Unexpected error: %s", exc, exc_info=True)
        return 2

    print(f"Result written to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
