# handicap.py
"""
Handicap utilities.

Course handicap, playing handicap and the simplified per-hole stroke
allocation used for net scores. Everything here is pure; callers pass in
plain numbers / hole records and get plain numbers back.

Rounding
--------
All handicap rounding is half-up: floor(x + 0.5). 12.5 -> 13, -1.5 -> -1.
Arithmetic is done in Decimal so 0.5 boundaries are not lost to float error.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Iterable

MAX_COURSE_HANDICAP = 18
HOLE_COUNT = 18
DEFAULT_PAR = 4
DEFAULT_STROKE_INDEX = 1
MIN_HOLE_PAR = 3
MAX_HOLE_PAR = 6

COURSE_HOLES_INCOMPLETE = "course_holes_incomplete"


def _dec(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal(0)
    return Decimal(str(value))


def round_half_up(value) -> int:
    return math.floor(_dec(value) + Decimal("0.5"))


def course_handicap(index, slope, rating, par) -> int:
    """
    CH = round(HI * slope/113 + (rating - par)), capped at 18.
    No floor: plus players keep a negative course handicap.
    """
    raw = _dec(index) * _dec(slope) / Decimal(113) + (_dec(rating) - _dec(par))
    return min(round_half_up(raw), MAX_COURSE_HANDICAP)


def playing_handicap(course_ch, net_allowance=100) -> int:
    # Never negative, plus players play off 0 in net games
    raw = _dec(course_ch) * _dec(net_allowance) / Decimal(100)
    return max(0, round_half_up(raw))


def calculate_handicaps(index, slope, rating, par, net_allowance=100) -> tuple[int, int]:
    """Return (course_handicap, playing_ch) for one player on one course."""
    ch = course_handicap(index, slope, rating, par)
    return ch, playing_handicap(ch, net_allowance)


# Same math, named for the call sites that recompute after a course/allowance edit
recompute_entry_handicaps = calculate_handicaps


def strokes_received_per_hole(playing_ch: int, stroke_index: int) -> int:
    if playing_ch is None or playing_ch <= 0:
        return 0
    base = playing_ch // HOLE_COUNT
    extra = 1 if stroke_index <= playing_ch % HOLE_COUNT else 0
    return base + extra


def net_hole_score(gross: int, playing_ch: int, stroke_index: int) -> int:
    return max(1, gross - strokes_received_per_hole(playing_ch, stroke_index))


# ------------------------------------------------------------------ #
# Course hole table helpers                                          #
# ------------------------------------------------------------------ #

def _field(hole, name):
    # hole records may be dicts or CourseHoles rows
    if isinstance(hole, dict):
        return hole.get(name)
    return getattr(hole, {"hole": "HoleNumber", "par": "Par", "stroke_index": "StrokeIndex"}[name])


def is_valid_si_permutation(stroke_indexes: Iterable[int]) -> bool:
    values = list(stroke_indexes)
    if len(values) != HOLE_COUNT:
        return False
    return sorted(values) == list(range(1, HOLE_COUNT + 1))


def validate_course_holes(course_holes) -> tuple[bool, list[str]]:
    """
    A course is usable for net math only when it has exactly 18 holes
    numbered 1..18, stroke indexes forming a 1..18 permutation and every
    par within 3..6. Returns (is_valid, warnings).
    """
    holes = list(course_holes or [])
    if len(holes) != HOLE_COUNT:
        return False, [COURSE_HOLES_INCOMPLETE]

    numbers = [_field(h, "hole") for h in holes]
    if sorted(numbers) != list(range(1, HOLE_COUNT + 1)):
        return False, [COURSE_HOLES_INCOMPLETE]

    if not is_valid_si_permutation(_field(h, "stroke_index") for h in holes):
        return False, [COURSE_HOLES_INCOMPLETE]

    if any(not (MIN_HOLE_PAR <= _field(h, "par") <= MAX_HOLE_PAR) for h in holes):
        return False, [COURSE_HOLES_INCOMPLETE]

    return True, []


def format_par_row(course_holes) -> list[int]:
    row = [DEFAULT_PAR] * HOLE_COUNT
    for h in course_holes or []:
        number = _field(h, "hole")
        if 1 <= number <= HOLE_COUNT:
            row[number - 1] = _field(h, "par")
    return row


def format_si_row(course_holes) -> list[int]:
    row = [DEFAULT_STROKE_INDEX] * HOLE_COUNT
    for h in course_holes or []:
        number = _field(h, "hole")
        if 1 <= number <= HOLE_COUNT:
            row[number - 1] = _field(h, "stroke_index")
    return row


def stroke_index_map(course_holes) -> dict[int, int]:
    return {_field(h, "hole"): _field(h, "stroke_index") for h in course_holes or []}
