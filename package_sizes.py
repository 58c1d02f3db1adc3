#!/usr/bin/env python3
"""
npm Organization Package Sizes
Reports the unpacked size of every package in an npm organization,
largest first, as a CSV file and a console table.

Usage:
  ./package_sizes.py my-org
  ./package_sizes.py my-org -o sizes.csv --workers 8 --timeout 10
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from console_table import print_table
from errors import PackageSizeError
from generate_csv import write_csv
from npm_token import DEFAULT_REGISTRY, get_npm_token
from package_info import PackageInfo
from registry_client import DEFAULT_TIMEOUT, RegistryClient
from size_aggregator import DEFAULT_WORKERS, collect_package_sizes

DEFAULT_OUTPUT = Path('.') / 'package-sizes.csv'


def configure_logging(verbose: bool = False) -> None:
    """Send diagnostics to stderr, keeping stdout for the report itself."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "INFO",
               format="<level>{level: <8}</level> | {message}")


class PackageSizeReport:
    def __init__(self, org, output=DEFAULT_OUTPUT, registry_url=DEFAULT_REGISTRY,
                 npmrc=None, max_workers=DEFAULT_WORKERS, timeout=DEFAULT_TIMEOUT,
                 show_table=True):
        self.org = org
        self.output = Path(output)
        self.registry_url = registry_url
        self.npmrc = npmrc
        self.max_workers = max_workers
        self.timeout = timeout
        self.show_table = show_table

    def create_client(self, token: str) -> RegistryClient:
        return RegistryClient(token, registry_url=self.registry_url,
                              timeout=self.timeout, pool_size=self.max_workers)

    def collect(self) -> List[PackageInfo]:
        """Resolve credentials, list the org and fetch every package size"""
        # Fails before any request is made
        token = get_npm_token(self.npmrc, registry_url=self.registry_url)

        with self.create_client(token) as client:
            names = client.fetch_org_packages(self.org)
            return collect_package_sizes(client, names, max_workers=self.max_workers)

    def run(self) -> List[PackageInfo]:
        """
        Main method to build the report.

        Raises:
            PackageSizeError: on any terminal failure
        """
        logger.info("Collecting package sizes for org {}", self.org)
        infos = self.collect()

        path = write_csv(self.output, infos)
        print(f"CSV file created: {path}")

        if self.show_table:
            print_table(infos)
        return infos


def env_default(name, default, cast):
    value = os.environ.get(name)
    if not value:
        return default
    try:
        return cast(value)
    except (ValueError, argparse.ArgumentTypeError):
        logger.warning("Invalid {} value: {!r}. Using default: {}", name, value, default)
        return default


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="npm-org-sizes",
        description="List the packages of an npm organization sorted by unpacked size."
    )
    parser.add_argument("org", help="Organization name.")
    parser.add_argument(
        "-o", "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help="CSV file to write (defaults to ./package-sizes.csv).",
    )
    parser.add_argument(
        "-w", "--workers",
        type=positive_int,
        default=env_default("NPM_ORG_SIZES_WORKERS", DEFAULT_WORKERS, positive_int),
        help=f"Concurrent registry requests (defaults to {DEFAULT_WORKERS}).",
    )
    parser.add_argument(
        "-t", "--timeout",
        type=positive_float,
        default=env_default("NPM_ORG_SIZES_TIMEOUT", DEFAULT_TIMEOUT, positive_float),
        help=f"Per-request timeout in seconds (defaults to {DEFAULT_TIMEOUT:g}).",
    )
    parser.add_argument(
        "--registry",
        default=os.environ.get("NPM_REGISTRY_URL") or DEFAULT_REGISTRY,
        help=f"Registry base URL (defaults to {DEFAULT_REGISTRY}).",
    )
    parser.add_argument(
        "--npmrc",
        type=Path,
        default=None,
        help="npmrc file holding the auth token (defaults to $HOME/.npmrc).",
    )
    parser.add_argument(
        "--no-table",
        action="store_true",
        help="Only write the CSV file, skip the console table.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every request.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    report = PackageSizeReport(
        args.org,
        output=args.output,
        registry_url=args.registry,
        npmrc=args.npmrc,
        max_workers=args.workers,
        timeout=args.timeout,
        show_table=not args.no_table,
    )
    try:
        report.run()
    except PackageSizeError as e:
        logger.error("{}", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
