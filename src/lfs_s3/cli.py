from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .agent import serve
from .config import StorageConfig
from .constants import DEFAULT_OBJECTS_DIR


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lfs-s3",
        description="Git LFS custom transfer agent for S3-compatible storage.",
    )
    p.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    p.add_argument(
        "--objects-dir",
        default=DEFAULT_OBJECTS_DIR,
        help="local LFS object cache (default: %(default)s)",
    )
    p.add_argument(
        "--report-errors",
        action="store_true",
        help="answer failed transfers with an error-bearing complete event",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    # stdout belongs to the protocol; diagnostics go to stderr only
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )
    return serve(
        sys.stdin.buffer,
        sys.stdout.buffer,
        StorageConfig.from_env(),
        objects_dir=args.objects_dir,
        report_errors=args.report_errors,
    )


if __name__ == "__main__":
    raise SystemExit(main())
