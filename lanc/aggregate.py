"""Per-individual aggregation over a block-structured ancestry track.

The scan is a two-state machine. Until the first header line nothing is
open; afterwards a :class:`BlockAccumulator` owns the state of the current
individual and is flushed into the ordered record map whenever the next
header arrives and once more at end of stream.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .ancestry import AlleleCounts, allele_counts
from .overlap import contains, overlap_length
from .query import GenomicInterval
from .track import HeaderLine, Segment, Unrecognized, classify_line

logger = logging.getLogger(__name__)


@dataclass
class QueryCall:
    """Ancestry of one individual at the query midpoint."""

    chromosome: str
    ancestry_code: str
    alleles: AlleleCounts
    query_start: int
    query_end: int


@dataclass
class AggregatedRecord:
    individual_id: str
    population: str
    call: Optional[QueryCall] = None
    overlap_lengths: List[int] = field(default_factory=list)
    overlap_ancestry_codes: List[str] = field(default_factory=list)

    @property
    def chromosome(self) -> Optional[str]:
        return self.call.chromosome if self.call else None

    @property
    def ancestry_code(self) -> Optional[str]:
        return self.call.ancestry_code if self.call else None

    @property
    def eur_alleles(self) -> Optional[int]:
        return self.call.alleles.eur if self.call else None

    @property
    def afr_alleles(self) -> Optional[int]:
        return self.call.alleles.afr if self.call else None

    @property
    def nam_alleles(self) -> Optional[int]:
        return self.call.alleles.nam if self.call else None

    @property
    def query_start(self) -> Optional[int]:
        return self.call.query_start if self.call else None

    @property
    def query_end(self) -> Optional[int]:
        return self.call.query_end if self.call else None


@dataclass
class BlockAccumulator:
    individual_id: str
    population: str
    call: Optional[QueryCall] = None
    midpoint_hits: int = 0
    overlap_lengths: List[int] = field(default_factory=list)
    overlap_ancestry_codes: List[str] = field(default_factory=list)

    def add_segment(self, segment: Segment, interval: GenomicInterval, midpoint: int,
                    legacy_containment: bool = False) -> None:
        if contains(segment.start, segment.end, midpoint):
            # Last segment containing the midpoint wins.
            self.call = QueryCall(
                chromosome=interval.chromosome,
                ancestry_code=segment.ancestry_code,
                alleles=allele_counts(segment.ancestry_code),
                query_start=interval.start,
                query_end=interval.end,
            )
            self.midpoint_hits += 1

        length = overlap_length(segment.start, segment.end, interval.start, interval.end,
                                legacy_containment=legacy_containment)
        if length > 0:
            self.overlap_lengths.append(length)
            self.overlap_ancestry_codes.append(segment.ancestry_code)

    def finalize(self) -> AggregatedRecord:
        if self.midpoint_hits > 1:
            logger.debug(
                f"{self.midpoint_hits} segments of {self.individual_id} contain the query "
                f"midpoint; keeping the last one ({self.call.ancestry_code})."
            )
        return AggregatedRecord(
            individual_id=self.individual_id,
            population=self.population,
            call=self.call,
            overlap_lengths=list(self.overlap_lengths),
            overlap_ancestry_codes=list(self.overlap_ancestry_codes),
        )


@dataclass
class AggregationResult:
    records: List[AggregatedRecord]
    blocks: int = 0
    segments: int = 0
    skipped_segments: int = 0
    orphan_segments: int = 0
    unrecognized_lines: int = 0


def _flush(block: BlockAccumulator, records: Dict[str, AggregatedRecord]) -> None:
    finished = block.finalize()
    existing = records.get(finished.individual_id)
    if existing is None:
        records[finished.individual_id] = finished
        return

    warnings.warn(
        f"Individual '{finished.individual_id}' appears in more than one track block; "
        f"merging blocks into a single record.",
        UserWarning,
    )
    existing.population = finished.population
    if finished.call is not None:
        existing.call = finished.call
    existing.overlap_lengths.extend(finished.overlap_lengths)
    existing.overlap_ancestry_codes.extend(finished.overlap_ancestry_codes)


def aggregate_track(lines: Iterable[str], interval: GenomicInterval, *,
                    legacy_containment: bool = False) -> AggregationResult:
    """Scan the track once and build one record per individual.

    Records keep the order in which individuals' header lines first appear.
    Segments on chromosomes other than ``interval.chromosome`` are ignored.
    """
    midpoint = interval.midpoint
    records: Dict[str, AggregatedRecord] = {}
    result = AggregationResult(records=[])
    block: Optional[BlockAccumulator] = None

    for line_number, line in enumerate(lines, 1):
        item = classify_line(line)

        if isinstance(item, HeaderLine):
            if block is not None:
                _flush(block, records)
            block = BlockAccumulator(item.individual_id, item.population)
            result.blocks += 1
            continue

        if isinstance(item, Unrecognized):
            result.unrecognized_lines += 1
            logger.debug(f"Line {line_number}: skipped ({item.reason}).")
            continue

        result.segments += 1
        if item.chromosome != interval.chromosome:
            result.skipped_segments += 1
            continue
        if block is None:
            result.orphan_segments += 1
            logger.warning(f"Line {line_number}: segment before any track header; ignored.")
            continue
        block.add_segment(item, interval, midpoint, legacy_containment)

    if block is not None:
        _flush(block, records)

    result.records = list(records.values())
    logger.info(
        f"Scanned {result.blocks} track blocks and {result.segments} segments "
        f"({result.skipped_segments} on other chromosomes, "
        f"{result.unrecognized_lines} unrecognized lines); {len(result.records)} individuals."
    )
    return result
