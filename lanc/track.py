"""Reading and line classification of local-ancestry BED tracks.

A track file holds one block per individual::

    track name="NA19700" description="Ind: NA19700 Pop:ASW Admixture" visibility=2
    chr1    752566  2180472 12  1427906 .
    chr1    2180472 3094516 22  914044  .

Every line is classified exactly once into a :class:`HeaderLine`, a
:class:`Segment` or an :class:`Unrecognized` value.
"""
from __future__ import annotations

import gzip
import logging
import os
import re
from dataclasses import dataclass
from typing import IO, Union

from .ancestry import translate_code

logger = logging.getLogger(__name__)

HEADER_RE = re.compile(r"^track .+Ind: (.+) Pop:(.+) Admixture.+")
MIN_SEGMENT_FIELDS = 4


class TrackFileError(RuntimeError):
    """Raised when the ancestry track cannot be opened."""


@dataclass(frozen=True)
class HeaderLine:
    individual_id: str
    population: str


@dataclass(frozen=True)
class Segment:
    chromosome: str
    start: int
    end: int
    ancestry_code: str
    raw_code: str
    size: str = ""


@dataclass(frozen=True)
class Unrecognized:
    text: str
    reason: str


TrackLine = Union[HeaderLine, Segment, Unrecognized]


def classify_line(line: str) -> TrackLine:
    text = line.rstrip("\r\n")
    match = HEADER_RE.match(text)
    if match:
        return HeaderLine(match.group(1).strip(), match.group(2).strip())

    # chrom, start, end, code, size, trailing columns
    fields = text.split(None, 5)
    if not fields:
        return Unrecognized(text, "blank line")
    if len(fields) < MIN_SEGMENT_FIELDS:
        return Unrecognized(text, f"expected at least {MIN_SEGMENT_FIELDS} fields, got {len(fields)}")
    try:
        start = int(fields[1])
        end = int(fields[2])
    except ValueError:
        return Unrecognized(text, "non-integer segment coordinates")

    raw_code = fields[3]
    size = fields[4] if len(fields) > 4 else ""
    return Segment(
        chromosome=fields[0],
        start=start,
        end=end,
        ancestry_code=translate_code(raw_code),
        raw_code=raw_code,
        size=size,
    )


def open_track(path: str) -> IO[str]:
    """Open a plain or gzip-compressed track for text reading."""
    if not os.path.isfile(path):
        raise TrackFileError(f"Ancestry track not found: '{path}'")
    try:
        if path.endswith(".gz"):
            return gzip.open(path, "rt", encoding="utf-8")
        return open(path, "r", encoding="utf-8")
    except OSError as e:
        raise TrackFileError(f"Could not open ancestry track '{path}': {e}") from e
