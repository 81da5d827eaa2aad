"""Command line entrypoint for the local-ancestry overlap query."""

from __future__ import annotations

import argparse
import os
from typing import Sequence

from . import run
from .track import TrackFileError

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Report each individual's local ancestry at the midpoint of a query interval "
            "and the ancestry segments overlapping it."
        ),
    )
    parser.add_argument("track", help="Local-ancestry BED track, optionally gzip-compressed.")
    parser.add_argument("query_start", help="Query start as chr:pos, e.g. chr1:12345")
    parser.add_argument("query_end", help="Query end as chr:pos, e.g. chr1:23456")
    parser.add_argument(
        "--out",
        type=str,
        help="Write the report to this path instead of standard output.",
    )
    parser.add_argument(
        "--legacy-containment",
        action="store_true",
        default=None,
        help=(
            "Use the legacy overlap arithmetic for segments lying wholly inside the "
            "query, which drops them from the overlap columns."
        ),
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=_LOG_LEVELS,
        help="Logging verbosity on standard error.",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def apply_cli_configuration(args: argparse.Namespace) -> None:
    if getattr(args, "legacy_containment", None):
        run.LEGACY_CONTAINMENT = True
        os.environ["LANC_LEGACY_CONTAINMENT"] = "1"
    else:
        run.LEGACY_CONTAINMENT = run.DEFAULT_LEGACY_CONTAINMENT
        if run.LEGACY_CONTAINMENT:
            os.environ["LANC_LEGACY_CONTAINMENT"] = "1"
        else:
            os.environ.pop("LANC_LEGACY_CONTAINMENT", None)

    level = getattr(args, "log_level", None)
    run.LOG_LEVEL = level if level is not None else run.DEFAULT_LOG_LEVEL


def main(argv: Sequence[str] | None = None) -> None:
    args = parse_args(argv)
    apply_cli_configuration(args)
    run.configure_logging()
    try:
        run.run_query(args.track, args.query_start, args.query_end, out_path=args.out)
    except TrackFileError as e:
        raise SystemExit(f"[ERROR] {e}")


if __name__ == "__main__":  # pragma: no cover - CLI execution
    main()
