from __future__ import annotations

import argparse
import json
import logging
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Sequence

from connchk.config import settings
from connchk.errors import ConfigurationError
from connchk.formatting import build_report, render_lines, summarize_results
from connchk.registry import load_targets
from connchk.runner import run_checks

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _package_version() -> str:
    try:
        return version("connchk")
    except PackageNotFoundError:
        return "unknown"


def _positive_seconds(value: str) -> float:
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="connchk",
        description="Check reachability of the TCP and HTTP(S) targets declared in a TOML or YAML file.",
    )
    parser.add_argument("config", type=Path, help="Path to the configuration file to use")
    parser.add_argument("--json", action="store_true", help="Print a JSON report instead of text lines")
    parser.add_argument("--tcp-timeout", type=_positive_seconds, default=None, help="TCP connect timeout in seconds")
    parser.add_argument("--http-timeout", type=_positive_seconds, default=None, help="HTTP timeout in seconds")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=settings.LOG_LEVEL.upper(),
        help="Logging level (default: %(default)s)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        targets = load_targets(args.config)
        logger.debug("Loaded %d targets from %s", len(targets), args.config)
        results = run_checks(
            targets,
            tcp_timeout_s=args.tcp_timeout,
            http_timeout_s=args.http_timeout,
        )
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    if args.json:
        print(json.dumps(build_report(results), indent=2))
    else:
        for line in render_lines(results):
            print(line)

    _, _, failed = summarize_results(results)
    return EXIT_FAILED if failed else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
