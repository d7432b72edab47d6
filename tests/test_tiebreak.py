from SWMG.services.tiebreak import compare_gross_segments, compare_net_tiebreaker, gross_segments, net_segments

# hole 18 is stroke index 1, hole 17 is 2, ... hole 1 is 18
COURSE = [{"hole": h, "par": 4, "stroke_index": 19 - h} for h in range(1, 19)]


def card(*overrides, default=4):
    scores = {h: default for h in range(1, 19)}
    for hole, strokes in overrides:
        scores[hole] = strokes
    return scores


def test_segment_sums():
    seg = gross_segments(card((18, 6)))
    assert seg == {"back9": 38, "last6": 26, "last3": 14, "hole18": 6}


def test_back_nine_decides_first():
    a = card((1, 5), (10, 3))   # front 37, back 35
    b = card()
    assert compare_gross_segments(a, b) < 0
    assert compare_gross_segments(b, a) > 0


def test_last_six_when_back_nine_equal():
    a = card((10, 3), (13, 5))
    b = card()
    # both back nines are 36; a's last six is 25
    assert compare_gross_segments(a, b) > 0


def test_eighteenth_is_last_resort():
    a = card((16, 3), (18, 5))
    b = card()
    assert compare_gross_segments(a, b) > 0


def test_identical_cards_stay_tied():
    assert compare_gross_segments(card(), card()) == 0


def test_unscored_holes_count_as_zero():
    partial = {10: 5}
    assert gross_segments(partial)["back9"] == 5
    assert compare_gross_segments(partial, card()) < 0


def test_net_segments_apply_strokes_by_stroke_index():
    # one stroke on hole 18 (SI 1) only
    seg = net_segments(card(), 1, COURSE)
    assert seg["hole18"] == 3
    assert seg["back9"] == 35


def test_net_tiebreak_uses_net_strokes():
    a = {"hole_scores": card((18, 5)), "playing_ch": 1}
    b = {"hole_scores": card(), "playing_ch": 0}
    assert compare_gross_segments(a["hole_scores"], b["hole_scores"]) > 0
    assert compare_net_tiebreaker(a, b, COURSE) == 0


def test_net_tiebreak_falls_back_to_gross_on_invalid_course():
    a = {"hole_scores": card((18, 5)), "playing_ch": 1}
    b = {"hole_scores": card(), "playing_ch": 0}
    broken = COURSE[:17]
    assert compare_net_tiebreaker(a, b, broken) > 0
    assert compare_net_tiebreaker(a, b, COURSE, is_valid=False) > 0
