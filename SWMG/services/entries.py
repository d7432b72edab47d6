# entries.py
"""
Entry handicap bookkeeping: fills CourseHandicap / PlayingCH from the
player's index, the course's slope/rating/par and the tournament's net
allowance, and recomputes them when any of those inputs change.
"""

from __future__ import annotations

import logging

from SWMG.models import Entries
from SWMG.services.handicap import calculate_handicaps, recompute_entry_handicaps

logger = logging.getLogger(__name__)


def assign_handicaps(entry: Entries) -> None:
    """Set (not save) the entry's handicaps. A player without an index plays off 0."""
    tournament = entry.Tournament
    course = tournament.Course
    entry.CourseHandicap, entry.PlayingCH = calculate_handicaps(
        entry.Player.Index or 0,
        course.SlopeRating,
        course.CourseRating,
        course.Par,
        tournament.NetAllowance,
    )


def recompute_for_tournaments(tournaments) -> int:
    """Recompute every entry in the given tournaments, return how many rows changed."""
    changed = 0
    entries = (
        Entries.objects
        .filter(Tournament__in=tournaments)
        .select_related("Player", "Tournament__Course")
    )
    for entry in entries:
        course = entry.Tournament.Course
        ch, playing = recompute_entry_handicaps(
            entry.Player.Index or 0,
            course.SlopeRating,
            course.CourseRating,
            course.Par,
            entry.Tournament.NetAllowance,
        )
        if (ch, playing) != (entry.CourseHandicap, entry.PlayingCH):
            Entries.objects.filter(pk=entry.pk).update(CourseHandicap=ch, PlayingCH=playing)
            changed += 1
    if changed:
        logger.info("Recomputed handicaps for %s entries", changed)
    return changed
