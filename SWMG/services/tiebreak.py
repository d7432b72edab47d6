# tiebreak.py
"""
Hole-segment tiebreak cascade: back 9, then last 6, then last 3, then the
18th alone. Lower segment sum wins; the first non-zero difference decides.

A hole with no recorded score contributes 0 to its segment, so partial
rounds still compare (an approximation, not a verdict on unfinished cards).
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from .handicap import net_hole_score, stroke_index_map, validate_course_holes

BACK9 = tuple(range(10, 19))
LAST6 = tuple(range(13, 19))
LAST3 = tuple(range(16, 19))
HOLE18 = (18,)

SEGMENTS = (
    ("back9", BACK9),
    ("last6", LAST6),
    ("last3", LAST3),
    ("hole18", HOLE18),
)


def gross_segments(hole_scores: Mapping[int, int]) -> Dict[str, int]:
    return {
        name: sum(hole_scores.get(h) or 0 for h in holes)
        for name, holes in SEGMENTS
    }


def net_segments(hole_scores: Mapping[int, int], playing_ch: int, course_holes) -> Dict[str, int]:
    """
    Segment totals where each recorded hole counts its net score. A hole
    missing from the stroke-index table contributes 0, same as an unscored hole.
    """
    si_by_hole = stroke_index_map(course_holes)

    def _segment_net(holes) -> int:
        total = 0
        for h in holes:
            gross = hole_scores.get(h) or 0
            if gross == 0:
                continue
            si = si_by_hole.get(h)
            if si is None:
                continue
            total += net_hole_score(gross, playing_ch, si)
        return total

    return {name: _segment_net(holes) for name, holes in SEGMENTS}


def _cascade(a: Dict[str, int], b: Dict[str, int]) -> int:
    for name, _ in SEGMENTS:
        diff = a[name] - b[name]
        if diff != 0:
            return diff
    return 0


def compare_gross_segments(a_scores: Mapping[int, int], b_scores: Mapping[int, int]) -> int:
    """Negative when a wins, positive when b wins, 0 when still tied."""
    return _cascade(gross_segments(a_scores), gross_segments(b_scores))


def compare_net_tiebreaker(a: Mapping, b: Mapping, course_holes, is_valid: Optional[bool] = None) -> int:
    """
    `a` / `b` carry "hole_scores" and "playing_ch". An invalid course table
    falls back to gross segments instead of failing.
    """
    if is_valid is None:
        is_valid, _ = validate_course_holes(course_holes)
    if not is_valid:
        return compare_gross_segments(a["hole_scores"], b["hole_scores"])

    a_seg = net_segments(a["hole_scores"], a.get("playing_ch") or 0, course_holes)
    b_seg = net_segments(b["hole_scores"], b.get("playing_ch") or 0, course_holes)
    return _cascade(a_seg, b_seg)
