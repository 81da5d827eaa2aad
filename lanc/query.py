"""Parsing of ``chr:pos`` query coordinates into a single-chromosome interval.

Parsing never raises. Problems with the user input are collected as
:class:`QueryIssue` entries next to a best-effort interval so the caller can
report them and decide whether to carry on; the command line tool reports
and carries on.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

MALFORMED_COORDINATE = "MalformedQueryCoordinate"
CHROMOSOME_MISMATCH = "ChromosomeMismatch"
REVERSED_INTERVAL = "ReversedQueryInterval"

# Unanchored: "region=chr2:1500" still yields chr2:1500.
_COORD_RE = re.compile(r"((chr)?\d+):(\d+)")


@dataclass(frozen=True)
class GenomicInterval:
    chromosome: str
    start: int
    end: int

    @property
    def midpoint(self) -> int:
        return query_midpoint(self.start, self.end)

    def __str__(self) -> str:
        return f"{self.chromosome}:{self.start}-{self.end}"


@dataclass(frozen=True)
class QueryIssue:
    kind: str
    message: str


@dataclass
class QueryParseResult:
    interval: GenomicInterval
    issues: List[QueryIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def has(self, kind: str) -> bool:
        return any(issue.kind == kind for issue in self.issues)


def query_midpoint(start: int, end: int) -> int:
    """Midpoint of the query, rounding half-widths of .5 upward.

    Equal to ``floor((end - start) / 2 + 0.5) + start`` for every integer pair.
    """
    return (end - start + 1) // 2 + start


def parse_coordinate(text: str) -> Optional[Tuple[str, int]]:
    """Return ``(chromosome, position)`` for ``[chr]N:POS`` or None."""
    match = _COORD_RE.search(text or "")
    if match is None:
        return None
    chrom = match.group(1)
    if match.group(2) is None:
        chrom = "chr" + chrom
    return chrom, int(match.group(3))


def parse_query(start_text: str, end_text: str) -> QueryParseResult:
    issues: List[QueryIssue] = []
    parsed = []
    for label, text in (("start", start_text), ("end", end_text)):
        coord = parse_coordinate(text)
        if coord is None:
            issues.append(QueryIssue(
                MALFORMED_COORDINATE,
                f"Did not recognize query {label} '{text}'. Please provide a genomic "
                f"location formatted chr:pos, e.g. chr1:12345",
            ))
            coord = ("", 0)
        parsed.append(coord)

    (chrom_start, pos_start), (chrom_end, pos_end) = parsed
    if chrom_start != chrom_end:
        issues.append(QueryIssue(
            CHROMOSOME_MISMATCH,
            f"Must choose an interval on a single chromosome (got '{chrom_start}' and "
            f"'{chrom_end}'); using '{chrom_start}'.",
        ))
    if pos_start > pos_end:
        issues.append(QueryIssue(
            REVERSED_INTERVAL,
            f"Query start {pos_start} lies after query end {pos_end}; positions are "
            f"used in the order given.",
        ))

    interval = GenomicInterval(chrom_start, pos_start, pos_end)
    return QueryParseResult(interval=interval, issues=issues)
