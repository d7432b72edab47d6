import pytest

from SWMG.services.handicap import COURSE_HOLES_INCOMPLETE
from SWMG.services.leaderboard import calculate_leaderboards, rank_with_ties

COURSE = [{"hole": h, "par": 4, "stroke_index": 19 - h} for h in range(1, 19)]


def card(*overrides):
    scores = {h: 4 for h in range(1, 19)}
    for hole, strokes in overrides:
        scores[hole] = strokes
    return scores


@pytest.fixture
def entries():
    return [
        {"entry_id": 1, "player_name": "Ann", "course_handicap": 2, "playing_ch": 2,
         "hole_scores": card((9, 5), (16, 3))},                       # 72, back nine 35
        {"entry_id": 2, "player_name": "Bob", "course_handicap": 0, "playing_ch": 0,
         "hole_scores": card()},                                       # 72, back nine 36
        {"entry_id": 3, "player_name": "Cal", "course_handicap": 2, "playing_ch": 2,
         "hole_scores": card((1, 6))},                                 # 74
        {"entry_id": 4, "player_name": "Dee", "course_handicap": 9, "playing_ch": 9,
         "hole_scores": {}},
    ]


def test_entries_without_scores_are_left_off(entries):
    boards = calculate_leaderboards(entries, 72, COURSE)
    assert [r["entry_id"] for r in boards["gross"]] == [1, 2, 3]
    assert 4 not in [r["entry_id"] for r in boards["net"]]


def test_gross_board_ties_share_position(entries):
    gross = calculate_leaderboards(entries, 72, COURSE)["gross"]
    ann, bob, cal = gross
    # the back nine puts Ann first but both stay tied
    assert (ann["entry_id"], ann["position"], ann["position_label"], ann["tied"]) == (1, 1, "T-1", True)
    assert (bob["entry_id"], bob["position"], bob["position_label"], bob["tied"]) == (2, 1, "T-1", True)
    assert (cal["position"], cal["position_label"], cal["tied"]) == (3, "3", False)
    assert ann["to_par"] == 0 and cal["to_par"] == 2


def test_net_board_uses_playing_handicap(entries):
    net = calculate_leaderboards(entries, 72, COURSE)["net"]
    assert [(r["entry_id"], r["net_total"], r["position_label"]) for r in net] == [
        (1, 70, "1"),
        (3, 72, "T-2"),
        (2, 72, "T-2"),
    ]
    assert net[0]["net_to_par"] == -2


def test_net_ties_fall_back_to_gross_segments_on_bad_course(entries):
    boards = calculate_leaderboards(entries, 72, course_holes=None)
    assert boards["net_tiebreak_fallback"] is True
    assert boards["warnings"] == [COURSE_HOLES_INCOMPLETE]
    # Bob and Cal have identical gross back nines, so input order is kept
    assert [r["entry_id"] for r in boards["net"]] == [1, 2, 3]


def test_valid_course_has_no_warnings(entries):
    boards = calculate_leaderboards(entries, 72, COURSE)
    assert boards["net_tiebreak_fallback"] is False
    assert boards["warnings"] == []


def test_rank_with_ties_returns_fresh_rows():
    rows = [{"score": 3, "id": "a"}, {"score": 1, "id": "b"}, {"score": 3, "id": "c"}, {"score": 5, "id": "d"}]
    ranked = rank_with_ties(rows, "score", lambda a, b: 0)
    assert [(r["id"], r["position_label"]) for r in ranked] == [("b", "1"), ("a", "T-2"), ("c", "T-2"), ("d", "4")]
    assert "position" not in rows[0]
