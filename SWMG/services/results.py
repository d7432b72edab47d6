# results.py
"""
Tournament results: loads plain records from the ORM, runs the pure
leaderboard / skins engine over them and shapes the API payloads.

Payloads are cached per tournament for SWMG_RESULTS_CACHE_SECONDS. Every
HoleScore write calls `invalidate()` (see signals.py) so a fresh edit is
never hidden behind the cache.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Tuple

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from SWMG.models import CourseHoles, Entries, HoleScore, Tournaments
from SWMG.services.leaderboard import calculate_leaderboards
from SWMG.services.skins import calculate_gross_skins, calculate_skins_payouts, format_currency, skins_leaderboard

logger = logging.getLogger(__name__)


def _cache_key(kind: str, tournament_id) -> str:
    return f"swmg:{kind}:{tournament_id}"


def invalidate(tournament_id) -> None:
    cache.delete_many([_cache_key("leaderboards", tournament_id), _cache_key("skins", tournament_id)])


def load_tournament_records(tournament_id) -> Tuple[Tournaments, List[Dict], List[Dict]]:
    """
    Return (tournament, entry_records, course_hole_records). Raises
    Tournaments.DoesNotExist for an unknown id.
    """
    tournament = Tournaments.objects.select_related("Course").get(pk=tournament_id)

    entries = (
        Entries.objects
        .filter(Tournament=tournament)
        .select_related("Player")
        .order_by("id")
    )
    by_entry: Dict = {}
    for e in entries:
        by_entry[e.id] = {
            "entry_id": e.id,
            "player_name": e.Player.Name if e.Player_id else "Unknown",
            "course_handicap": e.CourseHandicap or 0,
            "playing_ch": e.PlayingCH or 0,
            "hole_scores": {},
        }

    rows = (
        HoleScore.objects
        .filter(Entry__Tournament=tournament)
        .values_list("Entry_id", "HoleNumber", "Strokes")
    )
    for entry_id, hole, strokes in rows:
        if entry_id in by_entry:
            by_entry[entry_id]["hole_scores"][hole] = strokes

    course_holes = [
        {"hole": h.HoleNumber, "par": h.Par, "stroke_index": h.StrokeIndex}
        for h in CourseHoles.objects.filter(Course_id=tournament.Course_id).order_by("HoleNumber")
    ]
    return tournament, list(by_entry.values()), course_holes


def _leaderboard_json(row: Dict) -> Dict:
    return {
        "entryId": row["entry_id"],
        "playerName": row["player_name"],
        "courseHandicap": row["course_handicap"],
        "playingCH": row["playing_ch"],
        "grossTotal": row["gross_total"],
        "netTotal": row["net_total"],
        "toPar": row["to_par"],
        "netToPar": row["net_to_par"],
        "position": row["position_label"],
        "tied": row["tied"],
        "holeScores": {str(h): s for h, s in sorted(row["hole_scores"].items())},
    }


def leaderboards_payload(tournament_id) -> Dict:
    key = _cache_key("leaderboards", tournament_id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    tournament, entries, course_holes = load_tournament_records(tournament_id)
    course_par = tournament.Course.Par
    boards = calculate_leaderboards(entries, course_par, course_holes)
    if boards["net_tiebreak_fallback"]:
        logger.info("Tournament %s: course holes invalid, net ties fall back to gross segments", tournament_id)

    payload = {
        "gross": [_leaderboard_json(r) for r in boards["gross"]],
        "net": [_leaderboard_json(r) for r in boards["net"]],
        "coursePar": course_par,
        "updatedAt": timezone.now().isoformat(),
        "netTiebreakFallback": boards["net_tiebreak_fallback"],
        "warnings": boards["warnings"],
    }
    cache.set(key, payload, settings.SWMG_RESULTS_CACHE_SECONDS)
    return payload


def _cents(amount) -> int:
    # engine works in Decimal dollars, the API speaks integer cents
    return int((amount * 100).to_integral_value())


def skins_payload(tournament_id) -> Dict:
    key = _cache_key("skins", tournament_id)
    cached = cache.get(key)
    if cached is not None:
        return cached

    tournament, entries, course_holes = load_tournament_records(tournament_id)
    skins = calculate_gross_skins(entries, course_holes, hole_count=tournament.Holes or 18)
    payouts = calculate_skins_payouts(tournament.PotAmount, skins["total_skins"], skins["counts"])
    board = skins_leaderboard(entries, skins, payouts)

    payload = {
        "results": [
            {
                "hole": r["hole"],
                "par": r["par"],
                "winner": r["winner"],
                "winnerEntryId": r["winner_entry_id"],
                "winnerScore": r["winner_score"],
                "isPush": r["is_push"],
                "pushCount": r["push_count"],
                "pushScore": r["push_score"],
                "noResult": r["no_result"],
            }
            for r in skins["results"]
        ],
        "leaderboard": [
            {
                "entryId": r["entry_id"],
                "playerName": r["player_name"],
                "skins": r["skins"],
                "holes": r["holes"],
                "payout": _cents(r["payout"]),
                "payoutDisplay": format_currency(r["payout"]),
            }
            for r in board
        ],
        "totalSkins": skins["total_skins"],
        "potAmount": tournament.PotAmount or 0,
        "participantsForSkins": tournament.ParticipantsForSkins,
        "payoutPerSkin": _cents(payouts["payout_per_skin"]),
    }
    cache.set(key, payload, settings.SWMG_RESULTS_CACHE_SECONDS)
    return payload
