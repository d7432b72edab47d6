from decimal import Decimal

import pytest

from SWMG.services.handicap import (
    COURSE_HOLES_INCOMPLETE,
    calculate_handicaps,
    course_handicap,
    format_par_row,
    format_si_row,
    is_valid_si_permutation,
    net_hole_score,
    playing_handicap,
    round_half_up,
    strokes_received_per_hole,
    validate_course_holes,
)


def full_course():
    return [{"hole": h, "par": 4, "stroke_index": 19 - h} for h in range(1, 19)]


@pytest.mark.parametrize("value, expected", [
    (Decimal("12.5"), 13),
    (Decimal("12.49"), 12),
    (Decimal("-1.5"), -1),
    (Decimal("-1.6"), -2),
    (0, 0),
    ("7.5", 8),
])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_course_handicap_formula():
    # 10.4 * 125 / 113 = 11.504..., rating - par = -0.8
    assert course_handicap(Decimal("10.4"), 125, Decimal("71.2"), 72) == 11


def test_course_handicap_capped_at_18():
    assert course_handicap(Decimal("36.0"), 155, Decimal("76.0"), 72) == 18


def test_course_handicap_plus_player_goes_negative():
    assert course_handicap(Decimal("-2.0"), 113, Decimal("70.0"), 72) == -4


def test_playing_handicap_applies_allowance_half_up():
    assert playing_handicap(11, 90) == 10     # 9.9
    assert playing_handicap(5, 90) == 5       # 4.5
    assert playing_handicap(15, 85) == 13     # 12.75
    assert playing_handicap(12) == 12


def test_playing_handicap_never_negative():
    assert playing_handicap(-4, 100) == 0


def test_calculate_handicaps_returns_both():
    assert calculate_handicaps(Decimal("10.4"), 125, Decimal("71.2"), 72, 90) == (11, 10)


def test_strokes_received_zero_for_scratch_or_plus():
    assert strokes_received_per_hole(0, 1) == 0
    assert strokes_received_per_hole(-3, 1) == 0


def test_strokes_received_extra_on_hardest_holes():
    assert strokes_received_per_hole(20, 1) == 2
    assert strokes_received_per_hole(20, 2) == 2
    assert strokes_received_per_hole(20, 3) == 1
    assert strokes_received_per_hole(5, 5) == 1
    assert strokes_received_per_hole(5, 6) == 0


def test_strokes_received_sums_to_playing_handicap():
    for ch in range(0, 37):
        assert sum(strokes_received_per_hole(ch, si) for si in range(1, 19)) == ch


def test_strokes_received_monotonic_in_handicap():
    for si in range(1, 19):
        values = [strokes_received_per_hole(ch, si) for ch in range(0, 37)]
        assert values == sorted(values)


def test_net_hole_score_never_below_one():
    for gross in range(1, 16):
        for ch in range(0, 37):
            for si in range(1, 19):
                assert net_hole_score(gross, ch, si) >= 1
    assert net_hole_score(1, 36, 1) == 1
    assert net_hole_score(5, 10, 3) == 4


class TestStrokeIndexPermutation:
    def test_full_permutation(self):
        assert is_valid_si_permutation(range(1, 19))
        assert is_valid_si_permutation(reversed(range(1, 19)))

    def test_wrong_length(self):
        assert not is_valid_si_permutation(range(1, 18))
        assert not is_valid_si_permutation(range(1, 20))

    def test_duplicate(self):
        values = list(range(1, 19))
        values[17] = 1
        assert not is_valid_si_permutation(values)

    def test_out_of_range(self):
        values = list(range(1, 19))
        values[0] = 0
        assert not is_valid_si_permutation(values)


class TestCourseHoles:
    def test_valid_course(self):
        assert validate_course_holes(full_course()) == (True, [])

    def test_missing_hole(self):
        assert validate_course_holes(full_course()[:17]) == (False, [COURSE_HOLES_INCOMPLETE])

    def test_no_holes(self):
        assert validate_course_holes(None) == (False, [COURSE_HOLES_INCOMPLETE])

    def test_par_out_of_range(self):
        holes = full_course()
        holes[3]["par"] = 7
        assert validate_course_holes(holes)[0] is False

    def test_duplicate_stroke_index(self):
        holes = full_course()
        holes[0]["stroke_index"] = holes[1]["stroke_index"]
        assert validate_course_holes(holes)[0] is False

    def test_par_row_defaults_missing_holes_to_four(self):
        holes = [{"hole": 1, "par": 5, "stroke_index": 3}, {"hole": 3, "par": 3, "stroke_index": 9}]
        row = format_par_row(holes)
        assert len(row) == 18
        assert row[:4] == [5, 4, 3, 4]

    def test_si_row_defaults_missing_holes_to_one(self):
        holes = [{"hole": 2, "par": 4, "stroke_index": 11}]
        row = format_si_row(holes)
        assert row[:3] == [1, 11, 1]
