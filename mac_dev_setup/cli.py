"""
Command-line entry point.

With no arguments the full provisioning pipeline runs top to bottom.
"""

from __future__ import annotations

import argparse
import dataclasses
import os
import sys
from typing import Sequence

from . import __version__
from .config import load_config, validate_config
from .environment import detect_host
from .logging_config import setup_logging
from .pipeline import run_setup
from .runner import CommandRunner


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mac-dev-setup",
        description="Install or upgrade the macOS developer toolchain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print changing commands instead of running them",
    )
    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first failed step",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Configuration file (YAML or JSON)",
    )
    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Also write a full debug log to PATH",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    verbose = args.verbose or os.environ.get("MAC_DEV_SETUP_DEBUG", "0") == "1"

    logger = setup_logging(verbose=verbose, log_file=args.log_file)

    try:
        config = load_config(custom_path=args.config, verbose=verbose)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return 2

    if args.fail_fast:
        config = dataclasses.replace(config, fail_fast=True)
    if config.log_file and not args.log_file:
        logger = setup_logging(verbose=verbose, log_file=config.log_file)

    for warning in validate_config(config):
        logger.warning(f"Config: {warning}")

    host = detect_host(verbose=verbose)
    if not host.is_macos and not args.dry_run:
        logger.error(f"This setup targets macOS; detected {host}. Use --dry-run to preview.")
        return 2
    logger.info(f"Host: {host}")

    runner = CommandRunner(dry_run=args.dry_run, verbose=verbose)
    report = run_setup(config, runner)
    return 0 if report.success else 1


def run() -> None:
    """Console-script wrapper around main()."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(130)
