from decimal import Decimal

from SWMG.services.skins import calculate_gross_skins, calculate_skins_payouts, format_currency, skins_leaderboard

ENTRIES = [
    {"entry_id": 1, "player_name": "Ann", "hole_scores": {1: 3, 2: 4, 3: 5}},
    {"entry_id": 2, "player_name": "Bob", "hole_scores": {1: 4, 2: 4, 3: 6}},
    {"entry_id": 3, "player_name": "Cal", "hole_scores": {1: 5, 2: 5, 4: 2}},
]


def test_outright_low_score_wins_the_skin():
    skins = calculate_gross_skins(ENTRIES)
    hole1 = skins["results"][0]
    assert hole1["winner"] == "Ann"
    assert hole1["winner_entry_id"] == 1
    assert hole1["winner_score"] == 3
    assert hole1["is_push"] is False
    assert hole1["par"] == 4


def test_push_does_not_carry():
    skins = calculate_gross_skins(ENTRIES)
    hole2, hole3 = skins["results"][1], skins["results"][2]
    assert hole2["is_push"] is True
    assert hole2["push_count"] == 2
    assert hole2["push_score"] == 4
    assert hole2["winner"] is None
    # hole 3 is worth a single skin
    assert hole3["winner_entry_id"] == 1
    assert skins["counts"] == {1: 2, 2: 0, 3: 1}
    assert skins["holes_won"][1] == [1, 3]
    assert skins["total_skins"] == 3


def test_hole_without_scores_is_no_result():
    hole5 = calculate_gross_skins(ENTRIES)["results"][4]
    assert hole5["no_result"] is True
    assert hole5["is_push"] is False
    assert hole5["push_count"] == 0


def test_par_comes_from_course_holes():
    holes = [{"hole": 1, "par": 3, "stroke_index": 9}]
    results = calculate_gross_skins(ENTRIES, holes)["results"]
    assert results[0]["par"] == 3
    assert results[1]["par"] == 4


def test_payout_divides_evenly():
    payouts = calculate_skins_payouts(18000, 9, {"A": 2, "B": 3, "C": 4})
    assert payouts["payout_per_skin"] == Decimal("20.00")
    assert payouts["per_player_payouts"] == {"A": Decimal("40.00"), "B": Decimal("60.00"), "C": Decimal("80.00")}


def test_payout_rounding_drift_is_not_corrected():
    payouts = calculate_skins_payouts(10000, 6, {"A": 3, "B": 2, "C": 1})
    assert payouts["payout_per_skin"] == Decimal("16.67")
    per_player = payouts["per_player_payouts"]
    assert per_player == {"A": Decimal("50.01"), "B": Decimal("33.34"), "C": Decimal("16.67")}
    assert sum(per_player.values()) == Decimal("100.02")


def test_zero_skins_pays_nothing():
    payouts = calculate_skins_payouts(18000, 0, {"A": 0, "B": 0})
    assert payouts["payout_per_skin"] == Decimal("0")
    assert payouts["per_player_payouts"] == {"A": Decimal("0"), "B": Decimal("0")}


def test_no_pot_pays_nothing():
    payouts = calculate_skins_payouts(None, 4, {"A": 4})
    assert payouts["payout_per_skin"] == Decimal("0")


def test_skins_leaderboard_only_lists_winners():
    skins = calculate_gross_skins(ENTRIES)
    payouts = calculate_skins_payouts(9000, skins["total_skins"], skins["counts"])
    board = skins_leaderboard(ENTRIES, skins, payouts)
    assert [(r["entry_id"], r["skins"], r["holes"]) for r in board] == [(1, 2, [1, 3]), (3, 1, [4])]
    assert board[0]["payout"] == Decimal("60.00")
    assert board[1]["payout"] == Decimal("30.00")


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(Decimal("0")) == "$0.00"
    assert format_currency(-5) == "-$5.00"
