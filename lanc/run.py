import os
import sys
import logging
from typing import List, Optional

from . import iox as io
from .aggregate import AggregatedRecord, aggregate_track
from .query import MALFORMED_COORDINATE, CHROMOSOME_MISMATCH, parse_query
from .track import TrackFileError, open_track

logger = logging.getLogger(__name__)

# --- Configuration ---
_TRUE_VALUES = ("1", "true", "yes", "on")


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE_VALUES


DEFAULT_LEGACY_CONTAINMENT = env_flag("LANC_LEGACY_CONTAINMENT")
LEGACY_CONTAINMENT = DEFAULT_LEGACY_CONTAINMENT

DEFAULT_LOG_LEVEL = os.environ.get("LANC_LOG_LEVEL", "WARNING").upper()
LOG_LEVEL = DEFAULT_LOG_LEVEL

# Issues reported as ERROR; anything else is a WARNING.
_ERROR_KINDS = (MALFORMED_COORDINATE, CHROMOSOME_MISMATCH)


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.WARNING),
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )


def run_query(track_path: str, start_text: str, end_text: str,
              out_path: Optional[str] = None) -> List[AggregatedRecord]:
    """Parse the query, scan the track and write the report.

    Problems with the query coordinates are logged and the scan proceeds on
    the best-effort interval. An unreadable track raises ``TrackFileError``.
    """
    parsed = parse_query(start_text, end_text)
    for issue in parsed.issues:
        if issue.kind in _ERROR_KINDS:
            logger.error(f"{issue.kind}: {issue.message}")
        else:
            logger.warning(f"{issue.kind}: {issue.message}")

    interval = parsed.interval
    print(f"{interval.chromosome}:{interval.midpoint}", file=sys.stderr, flush=True)

    with open_track(track_path) as handle:
        try:
            result = aggregate_track(handle, interval, legacy_containment=LEGACY_CONTAINMENT)
        except (OSError, EOFError, UnicodeDecodeError) as e:
            # gzip and text decoding fail on first read, not on open.
            raise TrackFileError(f"Could not read ancestry track '{track_path}': {e}") from e

    io.write_report(result.records, out_path)
    if out_path is not None:
        logger.info(f"Wrote {len(result.records)} rows to '{out_path}'.")
    return result.records
