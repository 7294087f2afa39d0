"""
Script for the complete registration workflow

Loads a scanner report, merges every scan into the frame of the first one and
reports the beacon count and the largest distance between two scanners.

Exit status: 0 when every scan was aligned, 2 when registration stalled (and
registration.fail_on_stall is set), 1 on invalid input.
"""

import sys
import argparse
import logging
from pathlib import Path

# Add the src to the path to import modules
sys.path.append(str(Path(__file__).parent.parent / "src"))

from lattice_registration.preprocessing.loader import ScanReportLoader
from lattice_registration.alignment import ExactAligner, RegistrationController
from lattice_registration.acceleration import AlignmentParallelExecutor
from lattice_registration.reporting import summarize
from lattice_registration.utils.config import load_config, AppConfig
from lattice_registration.utils.export import export_registration
from lattice_registration.utils.logging import setup_logger, set_package_level


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Lattice Point Cloud Registration")
    parser.add_argument(
        "input",
        nargs="?",
        default=None,
        help="Scan report file (overrides paths.input_file from the config)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to YAML configuration file (defaults to config/default.yaml)",
    )
    parser.add_argument(
        "--min-overlap",
        type=int,
        default=None,
        help="Override alignment.min_overlap (coincident points needed per alignment)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Run alignment attempts in this many worker processes (enables parallel mode)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Export beacons, scanner positions and poses to this directory",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override logging.level",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """
    Main function to run the registration workflow.
    """
    args = parse_args(argv)

    try:
        cfg: AppConfig = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.input:
        cfg.paths.input_file = args.input
    if args.min_overlap is not None:
        cfg.alignment.min_overlap = args.min_overlap
    if args.workers is not None:
        cfg.parallel.enabled = True
        cfg.parallel.n_workers = args.workers
    if args.output_dir:
        cfg.export.enabled = True
        cfg.export.output_dir = args.output_dir
    if args.log_level:
        cfg.logging.level = args.log_level

    # Setup logging from config
    log_level = getattr(logging, cfg.logging.level.upper(), logging.INFO)
    logger = setup_logger(__name__, level=log_level, log_file=cfg.logging.file)
    set_package_level(log_level, cfg.logging.file)

    logger.info("Lattice Point Cloud Registration")
    logger.info("================================")

    if not cfg.paths.input_file:
        logger.error("No input file given (pass it as an argument or set paths.input_file)")
        return 1

    try:
        scans = ScanReportLoader().load(cfg.paths.input_file)
        aligner = ExactAligner(min_overlap=cfg.alignment.min_overlap)
    except (OSError, ValueError) as e:
        logger.error(f"Invalid input: {e}")
        return 1

    executor = None
    if cfg.parallel.enabled:
        executor = AlignmentParallelExecutor(n_workers=cfg.parallel.n_workers)

    result = RegistrationController(scans, aligner=aligner, executor=executor).run()
    summary = summarize(result)

    logger.info(f"Beacon count: {summary.beacon_count}")
    logger.info(f"Max scanner distance: {summary.max_scanner_distance}")
    logger.info(f"Scans aligned: {summary.resolved}/{summary.total} in {summary.passes} passes")

    if cfg.export.enabled:
        export_registration(result, cfg.export.output_dir)

    if result.stalled:
        unaligned = ", ".join(scans[i].label or str(i) for i in result.unresolved)
        logger.warning(f"Registration incomplete; unaligned scans: {unaligned}")
        if cfg.registration.fail_on_stall:
            return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
