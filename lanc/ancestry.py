from __future__ import annotations

from typing import Dict, NamedTuple

# RFMix population indices as written in the track files.
_DIGIT_TO_LETTER = str.maketrans("123", "EAN")


class AlleleCounts(NamedTuple):
    eur: int
    afr: int
    nam: int


NO_MATCH = AlleleCounts(0, 0, 0)

_CODE_TO_COUNTS: Dict[str, AlleleCounts] = {
    "EE": AlleleCounts(2, 0, 0),
    "AA": AlleleCounts(0, 2, 0),
    "NN": AlleleCounts(0, 0, 2),
    "EN": AlleleCounts(1, 0, 1),
    "EA": AlleleCounts(1, 1, 0),
    "AN": AlleleCounts(0, 1, 1),
}


def translate_code(raw: str) -> str:
    """Replace ancestry digits with letters, e.g. ``"12" -> "EA"``."""
    return raw.translate(_DIGIT_TO_LETTER)


def allele_counts(code: str) -> AlleleCounts:
    """Per-population allele counts of a two-letter diploid call.

    Only the six canonical orderings are recognised. Anything else, including
    ``"AE"`` or ``"NE"``, counts as no population match.
    """
    return _CODE_TO_COUNTS.get(code, NO_MATCH)
