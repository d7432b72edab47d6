# skins.py
"""
Gross skins, no carry.

Each hole is its own contest: the single lowest gross score wins one skin.
A shared low score is a push and that skin is gone for good, it does not
roll to the next hole.

Payouts
-------
The pot arrives in integer cents. payout_per_skin = round2(pot$ / total_skins)
and each player gets round2(skins * payout_per_skin). Rounding is half-up to
the cent; per-player amounts are NOT re-normalised to the pot, so a few
cents of drift (e.g. $100 / 6 skins -> 100.02 paid) is expected.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Mapping, Optional

from .handicap import HOLE_COUNT, format_par_row

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def round_to_cents(amount) -> Decimal:
    if not isinstance(amount, Decimal):
        amount = Decimal(str(amount))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount) -> str:
    amount = round_to_cents(amount)
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def calculate_gross_skins(entries: List[Dict], course_holes=None, hole_count: int = HOLE_COUNT) -> Dict:
    """
    entries: [{"entry_id", "player_name", "hole_scores": {hole: strokes}}, ...]

    Returns {
        "results":     one dict per hole (hole, par, winner, winner_entry_id,
                       winner_score, is_push, push_count, push_score, no_result),
        "counts":      {entry_id: skins won},
        "holes_won":   {entry_id: [hole, ...]},
        "total_skins": int,
    }
    """
    pars = format_par_row(course_holes)
    counts: Dict = {e["entry_id"]: 0 for e in entries}
    holes_won: Dict = {e["entry_id"]: [] for e in entries}
    results = []

    for hole in range(1, hole_count + 1):
        par = pars[hole - 1] if hole <= len(pars) else None
        on_hole = []
        for e in entries:
            strokes = (e.get("hole_scores") or {}).get(hole)
            if strokes:
                on_hole.append((e, strokes))

        if not on_hole:
            results.append({
                "hole": hole, "par": par,
                "winner": None, "winner_entry_id": None, "winner_score": None,
                "is_push": False, "push_count": 0, "push_score": None,
                "no_result": True,
            })
            continue

        low = min(strokes for _, strokes in on_hole)
        low_scorers = [e for e, strokes in on_hole if strokes == low]

        if len(low_scorers) == 1:
            winner = low_scorers[0]
            counts[winner["entry_id"]] += 1
            holes_won[winner["entry_id"]].append(hole)
            results.append({
                "hole": hole, "par": par,
                "winner": winner.get("player_name"), "winner_entry_id": winner["entry_id"],
                "winner_score": low,
                "is_push": False, "push_count": 0, "push_score": None,
                "no_result": False,
            })
        else:
            results.append({
                "hole": hole, "par": par,
                "winner": None, "winner_entry_id": None, "winner_score": None,
                "is_push": True, "push_count": len(low_scorers), "push_score": low,
                "no_result": False,
            })

    return {
        "results": results,
        "counts": counts,
        "holes_won": holes_won,
        "total_skins": sum(counts.values()),
    }


def calculate_skins_payouts(pot_amount: Optional[int], total_skins: int, player_skin_counts: Mapping) -> Dict:
    """
    pot_amount is integer cents. Returns {"payout_per_skin": Decimal dollars,
    "per_player_payouts": {entry_id: Decimal dollars}}.
    """
    if total_skins == 0 or not pot_amount:
        return {
            "payout_per_skin": ZERO,
            "per_player_payouts": {entry_id: ZERO for entry_id in player_skin_counts},
        }

    pot_dollars = Decimal(int(pot_amount)) / Decimal(100)
    payout_per_skin = round_to_cents(pot_dollars / Decimal(total_skins))

    per_player = {
        entry_id: round_to_cents(Decimal(count) * payout_per_skin)
        for entry_id, count in player_skin_counts.items()
    }
    return {"payout_per_skin": payout_per_skin, "per_player_payouts": per_player}


def skins_leaderboard(entries: List[Dict], skins: Dict, payouts: Dict) -> List[Dict]:
    """Players with at least one skin, most skins first."""
    rows = []
    for e in entries:
        count = skins["counts"].get(e["entry_id"], 0)
        if count <= 0:
            continue
        rows.append({
            "entry_id": e["entry_id"],
            "player_name": e.get("player_name"),
            "skins": count,
            "holes": list(skins["holes_won"].get(e["entry_id"], [])),
            "payout": payouts["per_player_payouts"].get(e["entry_id"], ZERO),
        })
    rows.sort(key=lambda r: -r["skins"])
    return rows
