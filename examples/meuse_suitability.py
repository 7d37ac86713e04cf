#!/usr/bin/env python3
"""
Floodplain Suitability Analysis Example.

This example builds a multi-criteria suitability surface from soil samples
taken on a river floodplain.

Pipeline:
1. Load sample points and the reference floodplain raster
2. Rescale/recode flood frequency, land use, lead, cadmium and elevation
3. Combine factors into one score per sample
4. Interpolate scores onto the reference grid (inverse-distance weighting)
5. Mask the surface to the floodplain and save outputs

Usage:
    # Run with mock data (fast, for testing)
    python examples/meuse_suitability.py --mock-data

    # Run with real data
    python examples/meuse_suitability.py --samples data/samples/meuse.csv \\
        --reference data/reference/meuse_grid.tif --output outputs/suitability.tif

    # Emphasise contamination and use more neighbours
    python examples/meuse_suitability.py --mock-data --weight lead=2 --weight cadmium=2 --k 12
"""

import sys
import argparse
import json
import logging
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.config import DEFAULT_IDW_NEIGHBOURS, DEFAULT_IDW_POWER, DEFAULT_LOG_LEVEL, OUTPUT_DIR
from src.pipeline import PipelineConfig, SuitabilityPipeline
from src.raster import (
    create_mock_meuse_data,
    load_sample_points,
    read_raster,
    write_raster,
)
from src.scoring.combiner import SuitabilityCombiner
from src.scoring.configs import DEFAULT_MEUSE_SCORER

logger = logging.getLogger(__name__)


def configure_logging(level: str, log_file: Path = None) -> None:
    """Console output plus an optional debug log file."""
    logger.setLevel(logging.DEBUG)
    logger.handlers = []
    logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger.addHandler(console_handler)

    handlers = [console_handler]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s: %(message)s"))
        logger.addHandler(file_handler)
        handlers = [file_handler]

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s: %(message)s",
        handlers=handlers,
    )


def parse_weight(text: str) -> tuple[str, float]:
    """Parse a NAME=VALUE weight override."""
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"Weight must look like NAME=VALUE, got '{text}'")
    try:
        weight = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Weight for '{name}' is not a number: '{value}'")
    if weight <= 0:
        raise argparse.ArgumentTypeError(f"Weight for '{name}' must be positive, got {weight}")
    return name, weight


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Floodplain Suitability Analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Factors: {', '.join(DEFAULT_MEUSE_SCORER.factor_names)}

Examples:
  # Run with mock data (fast)
  python examples/meuse_suitability.py --mock-data

  # Run with real data
  python examples/meuse_suitability.py --samples meuse.csv --reference meuse_grid.tif
        """,
    )

    parser.add_argument("--samples", type=Path, help="Sample points (CSV with x/y columns or point vector file)")
    parser.add_argument("--reference", type=Path, help="Reference raster defining grid and valid footprint")
    parser.add_argument("--mock-data", action="store_true", help="Use synthetic floodplain data")
    parser.add_argument("--x-column", default="x", help="X column in CSV samples (default: x)")
    parser.add_argument("--y-column", default="y", help="Y column in CSV samples (default: y)")
    parser.add_argument(
        "--weight",
        type=parse_weight,
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Per-factor weight override (repeatable)",
    )
    parser.add_argument(
        "--method",
        choices=["product", "weighted_sum"],
        help="Factor combination method (default: product)",
    )
    parser.add_argument(
        "--k",
        type=int,
        default=DEFAULT_IDW_NEIGHBOURS,
        help=f"Nearest samples per cell (default: {DEFAULT_IDW_NEIGHBOURS})",
    )
    parser.add_argument(
        "--power",
        type=float,
        default=DEFAULT_IDW_POWER,
        help=f"Inverse-distance power (default: {DEFAULT_IDW_POWER})",
    )
    parser.add_argument("--max-distance", type=float, help="Search radius for IDW (default: none)")
    parser.add_argument(
        "--scorer-config",
        type=Path,
        help="JSON scorer definition (factors, lookup tables, weights); default: built-in floodplain scorer",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=OUTPUT_DIR / "suitability.tif",
        help="Output GeoTIFF (default: data/outputs/suitability.tif)",
    )
    parser.add_argument("--plot", type=Path, help="Also save a PNG figure here")
    parser.add_argument("--log-level", default=DEFAULT_LOG_LEVEL, help="Console log level")
    parser.add_argument("--log-file", type=Path, help="Write a debug log here")
    return parser


def load_inputs(args):
    """Return (samples, reference) from files or mock data."""
    if args.mock_data:
        logger.info("Generating mock floodplain data...")
        return create_mock_meuse_data(seed=0)

    if args.samples is None or args.reference is None:
        raise ValueError("--samples and --reference are required unless --mock-data is given")

    samples = load_sample_points(args.samples, x_column=args.x_column, y_column=args.y_column)
    reference = read_raster(args.reference)
    return samples, reference


def load_scorer(path: Path = None) -> SuitabilityCombiner:
    """Scorer from a JSON definition, or the built-in floodplain scorer."""
    if path is None:
        return DEFAULT_MEUSE_SCORER
    with open(path) as f:
        scorer = SuitabilityCombiner.from_dict(json.load(f))
    logger.info(f"Loaded scorer '{scorer.name}' from {path}: {scorer.factor_names}")
    return scorer


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level.upper(), args.log_file)

    logger.info("\n" + "=" * 70)
    logger.info("Floodplain Suitability Analysis")
    logger.info("=" * 70)

    config = PipelineConfig(
        k=args.k,
        power=args.power,
        max_distance=args.max_distance,
        weights=dict(args.weight),
        method=args.method,
    )
    logger.info(f"Pipeline config: {json.dumps(config.to_dict())}")

    samples, reference = load_inputs(args)
    pipeline = SuitabilityPipeline(scorer=load_scorer(args.scorer_config), config=config)
    logger.debug(f"Scorer: {json.dumps(pipeline.scorer.to_dict())}")
    result = pipeline.run(samples, reference)

    write_raster(result.suitability, args.output)
    logger.info(f"✓ Suitability raster: {args.output}")

    if args.plot is not None:
        from src.raster.plotting import save_suitability_figure

        save_suitability_figure(result.suitability, samples, result.scores, args.plot)

    summary = result.suitability.describe()
    logger.info("\n" + "=" * 70)
    logger.info("✓ Analysis complete!")
    logger.info(f"  Valid cells: {summary['valid_cells']}")
    if summary["valid_cells"]:
        logger.info(f"  Suitability range: {summary['min']:.3f} to {summary['max']:.3f}")
    logger.info("=" * 70 + "\n")

    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logger.info("\n[✗] Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"\n[✗] Error: {e}")
        sys.exit(1)
