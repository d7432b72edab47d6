# leaderboard.py
"""
Gross and net leaderboards.

Entry records in:
    {"entry_id", "player_name", "course_handicap", "playing_ch",
     "hole_scores": {hole_number: strokes}}

Rows out (one dict per ranked entry, fresh on every call):
    entry_id, player_name, course_handicap, playing_ch, gross_total,
    net_total, to_par, net_to_par, position, position_label, tied, hole_scores

Entries with no recorded strokes are left off both boards.
"""

from __future__ import annotations

from functools import cmp_to_key
from typing import Callable, Dict, List

from .handicap import validate_course_holes
from .tiebreak import compare_gross_segments, compare_net_tiebreaker


def _leaderboard_row(entry: Dict, course_par: int) -> Dict:
    hole_scores = {int(h): int(s) for h, s in (entry.get("hole_scores") or {}).items()}
    playing_ch = entry.get("playing_ch") or 0
    gross = sum(hole_scores.values())
    net = gross - playing_ch
    return {
        "entry_id": entry["entry_id"],
        "player_name": entry.get("player_name") or "Unknown",
        "course_handicap": entry.get("course_handicap") or 0,
        "playing_ch": playing_ch,
        "gross_total": gross,
        "net_total": net,
        "to_par": gross - course_par if course_par else None,
        "net_to_par": net - course_par if course_par else None,
        "position": 0,
        "position_label": "",
        "tied": False,
        "hole_scores": hole_scores,
    }


def rank_with_ties(rows: List[Dict], score_key: str, tiebreaker: Callable[[Dict, Dict], int]) -> List[Dict]:
    """
    Sort ascending on `score_key`, break equal scores with `tiebreaker`, then
    assign positions. A run of equal scores shares the position of its first
    row and every row in that run is tied ("T-4"); the tiebreaker only decides
    the order inside the run.
    """
    def _cmp(a, b):
        diff = a[score_key] - b[score_key]
        if diff != 0:
            return diff
        return tiebreaker(a, b)

    ranked = [dict(r) for r in sorted(rows, key=cmp_to_key(_cmp))]

    run_start = 0
    for i, row in enumerate(ranked):
        if i == 0 or row[score_key] != ranked[i - 1][score_key]:
            run_start = i
        row["position"] = run_start + 1

    # a run is tied when it has more than one member
    counts: Dict[int, int] = {}
    for row in ranked:
        counts[row["position"]] = counts.get(row["position"], 0) + 1
    for row in ranked:
        row["tied"] = counts[row["position"]] > 1
        row["position_label"] = f"T-{row['position']}" if row["tied"] else str(row["position"])

    return ranked


def calculate_leaderboards(entries: List[Dict], course_par: int, course_holes=None) -> Dict:
    """
    Return {"gross": [...], "net": [...], "net_tiebreak_fallback": bool,
    "warnings": [...]}. Net ties use per-hole net segments when the course
    hole table is valid, gross segments otherwise.
    """
    rows = [_leaderboard_row(e, course_par) for e in entries]
    rows = [r for r in rows if r["gross_total"] > 0]

    is_valid, warnings = validate_course_holes(course_holes)

    gross = rank_with_ties(
        rows,
        "gross_total",
        lambda a, b: compare_gross_segments(a["hole_scores"], b["hole_scores"]),
    )
    net = rank_with_ties(
        rows,
        "net_total",
        lambda a, b: compare_net_tiebreaker(a, b, course_holes, is_valid=is_valid),
    )

    return {
        "gross": gross,
        "net": net,
        "net_tiebreak_fallback": not is_valid,
        "warnings": warnings,
    }
