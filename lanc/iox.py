import os
import sys
import tempfile
from typing import Iterable, List, Optional

import pandas as pd

from .aggregate import AggregatedRecord

NA = "NA"

REPORT_COLUMNS = [
    "pop",
    "chr",
    "queryAnc",
    "queryEurAlleles",
    "queryAfrAlleles",
    "queryNamAlleles",
    "start",
    "end",
    "ancOverlap",
    "ancTypes",
]

OVERLAP_COLUMNS = ["individual", "pop", "segment_order", "overlap_bp", "ancestry"]


def _best_effort_fsync(fobj):
    try:
        fobj.flush()
    except Exception:
        pass
    try:
        os.fsync(fobj.fileno())
    except Exception:
        pass


def _na(value) -> str:
    return NA if value is None else str(value)


def _joined(values) -> str:
    return ",".join(str(v) for v in values) if values else NA


def records_to_frame(records: Iterable[AggregatedRecord]) -> pd.DataFrame:
    """One row per individual, every cell already in its serialized form."""
    records = list(records)
    rows = [
        {
            "pop": rec.population,
            "chr": _na(rec.chromosome),
            "queryAnc": _na(rec.ancestry_code),
            "queryEurAlleles": _na(rec.eur_alleles),
            "queryAfrAlleles": _na(rec.afr_alleles),
            "queryNamAlleles": _na(rec.nam_alleles),
            "start": _na(rec.query_start),
            "end": _na(rec.query_end),
            "ancOverlap": _joined(rec.overlap_lengths),
            "ancTypes": _joined(rec.overlap_ancestry_codes),
        }
        for rec in records
    ]
    index = pd.Index([rec.individual_id for rec in records], dtype=object)
    return pd.DataFrame(rows, index=index, columns=REPORT_COLUMNS, dtype=object)


def format_report(records: Iterable[AggregatedRecord]) -> str:
    """
    Tab-separated report. The header names the ten value columns only and each
    body row starts with the individual id, so R's read.table picks the ids up
    as row names.
    """
    return records_to_frame(records).to_csv(sep="\t", index_label=False)


def atomic_write_text(path, text: str):
    """Write text to a temp file next to ``path`` and move it into place."""
    tmpdir = os.path.dirname(path) or "."
    os.makedirs(tmpdir, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=tmpdir, prefix=os.path.basename(path) + '.tmp.')
    os.close(fd)
    try:
        with open(tmp_path, 'w') as f:
            f.write(text)
            _best_effort_fsync(f)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def write_report(records: List[AggregatedRecord], path: Optional[str] = None) -> str:
    text = format_report(records)
    if path is None:
        sys.stdout.write(text)
        sys.stdout.flush()
    else:
        atomic_write_text(path, text)
    return text


def read_report(path) -> pd.DataFrame:
    """Load a report back with individual ids as the index and cells as strings."""
    frame = pd.read_csv(path, sep="\t", dtype=str, keep_default_na=False)
    frame.index = frame.index.astype(str)
    frame.index.name = "individual"
    return frame


def explode_overlaps(frame: pd.DataFrame) -> pd.DataFrame:
    """Long table with one row per individual and overlapping segment.

    This is the shape the ancestry track plots consume: ``overlap_bp`` and
    ``ancestry`` per segment, numbered left to right within each individual.
    """
    hits = frame.loc[frame["ancOverlap"] != NA, ["pop", "ancOverlap", "ancTypes"]].copy()
    if hits.empty:
        return pd.DataFrame(columns=OVERLAP_COLUMNS)

    hits["ancOverlap"] = hits["ancOverlap"].str.split(",")
    hits["ancTypes"] = hits["ancTypes"].str.split(",")
    long = hits.explode(["ancOverlap", "ancTypes"])
    long = long.rename_axis("individual").reset_index()
    long = long.rename(columns={"ancOverlap": "overlap_bp", "ancTypes": "ancestry"})
    long["overlap_bp"] = long["overlap_bp"].astype(int)
    long["segment_order"] = long.groupby("individual", sort=False).cumcount()
    return long[OVERLAP_COLUMNS]
