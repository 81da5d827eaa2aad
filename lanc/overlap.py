"""Overlap length between an ancestry segment and the query interval.

Both intervals are 1-based and closed. The branches are tried in order and
the first one that applies decides the result.
"""
from __future__ import annotations


def overlap_length(
    seg_start: int,
    seg_end: int,
    query_start: int,
    query_end: int,
    *,
    legacy_containment: bool = False,
) -> int:
    """Number of positions shared by ``[seg_start, seg_end]`` and the query.

    With ``legacy_containment`` a segment lying wholly inside the query gets
    ``seg_start - seg_end + 1``, the inverted arithmetic of earlier releases.
    That value is never positive, so such segments drop out of the report.
    """
    if seg_start <= query_start <= seg_end:
        return min(seg_end, query_end) - query_start + 1
    if seg_start <= query_end <= seg_end:
        return query_end - seg_start + 1
    if query_start <= seg_start and query_end >= seg_end:
        if legacy_containment:
            return seg_start - seg_end + 1
        return seg_end - seg_start + 1
    return 0


def contains(seg_start: int, seg_end: int, position: int) -> bool:
    return seg_start <= position <= seg_end
