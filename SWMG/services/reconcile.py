# reconcile.py
"""
Server side of the hole-score sync protocol.

Contract
--------
Every (entry, hole) key is its own conflict domain and moves absent -> stored.

* No stored row: the edit is accepted and a row is created with
  UpdatedAt = server now, ClientUpdatedAt = the edit's device time.
* Stored row: the incoming ClientUpdatedAt is compared with the stored
  row's **UpdatedAt** (server time of the last accepted write), never with
  the stored ClientUpdatedAt. Strictly greater overwrites; anything else is
  stale: the row is untouched and a ScoreConflict is written.

A stale edit is an expected outcome, not an error. Callers get
{"status": "ignored", "reason": "stale"} and the operator gets a review row.

The read-compare-write for a key runs inside one transaction with the row
locked (select_for_update), so two edits to the same key cannot interleave.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from SWMG.models import Entries, HoleScore, ScoreConflict

logger = logging.getLogger(__name__)

APPLY_SERVER = "apply-server"
FORCE_LOCAL = "force-local"
CLEARED = "cleared"
RESOLVE_ACTIONS = (APPLY_SERVER, FORCE_LOCAL)

MIN_STROKES = 1
MAX_STROKES = 15


class TournamentFinalError(Exception):
    """Raised when an edit targets a finalized tournament."""


def score_record(score: HoleScore) -> Dict:
    return {
        "entryId": score.Entry_id,
        "hole": score.HoleNumber,
        "strokes": score.Strokes,
        "clientUpdatedAt": score.ClientUpdatedAt.isoformat() if score.ClientUpdatedAt else None,
        "updatedAt": score.UpdatedAt.isoformat(),
    }


def conflict_record(conflict: ScoreConflict) -> Dict:
    entry = conflict.Entry
    group = entry.Group
    return {
        "id": conflict.id,
        "tournamentId": conflict.Tournament_id,
        "tournamentName": conflict.Tournament.Name,
        "groupId": group.id if group else None,
        "groupName": group.GroupName if group else None,
        "entryId": conflict.Entry_id,
        "playerName": entry.Player.Name,
        "hole": conflict.HoleNumber,
        "incomingStrokes": conflict.IncomingStrokes,
        "incomingAt": conflict.IncomingAt.isoformat(),
        "storedStrokes": conflict.StoredStrokes,
        "storedAt": conflict.StoredAt.isoformat(),
        "resolved": conflict.Resolved,
        "resolution": conflict.Resolution,
        "resolvedAt": conflict.ResolvedAt.isoformat() if conflict.ResolvedAt else None,
    }


def _locked_score(entry: Entries, hole: int) -> Optional[HoleScore]:
    return (
        HoleScore.objects
        .select_for_update()
        .filter(Entry=entry, HoleNumber=hole)
        .first()
    )


def submit_edit(entry_id, hole: int, strokes: int, client_updated_at, server_now=None) -> Dict:
    """
    Apply one device edit under last-write-wins. Input is assumed validated
    (hole 1..18, strokes 1..15, aware datetime).

    Returns {"status": "accepted", "score": {...}} or
            {"status": "ignored", "reason": "stale", "conflictId": ..., "storedScore": {...}}.
    Raises Entries.DoesNotExist / TournamentFinalError.
    """
    with transaction.atomic():
        entry = Entries.objects.select_related("Tournament").get(pk=entry_id)
        if entry.Tournament.IsFinal:
            raise TournamentFinalError(f"Tournament {entry.Tournament_id} is final")

        now = server_now or timezone.now()
        stored = _locked_score(entry, hole)

        if stored is None:
            try:
                with transaction.atomic():
                    created = HoleScore.objects.create(
                        Entry=entry,
                        HoleNumber=hole,
                        Strokes=strokes,
                        ClientUpdatedAt=client_updated_at,
                        UpdatedAt=now,
                    )
            except IntegrityError:
                # another writer created the key first, fall through to the LWW compare
                stored = _locked_score(entry, hole)
            else:
                logger.info("Score accepted (new): entry %s hole %s strokes %s", entry.id, hole, strokes)
                return {"status": "accepted", "score": score_record(created)}

        if client_updated_at <= stored.UpdatedAt:
            conflict = ScoreConflict.objects.create(
                Tournament_id=entry.Tournament_id,
                Entry=entry,
                HoleNumber=hole,
                IncomingStrokes=strokes,
                IncomingAt=client_updated_at,
                StoredStrokes=stored.Strokes,
                StoredAt=stored.UpdatedAt,
            )
            logger.warning(
                "Score ignored (stale): entry %s hole %s incoming %s@%s stored %s@%s",
                entry.id, hole, strokes, client_updated_at.isoformat(),
                stored.Strokes, stored.UpdatedAt.isoformat(),
            )
            return {
                "status": "ignored",
                "reason": "stale",
                "conflictId": conflict.id,
                "storedScore": score_record(stored),
            }

        stored.Strokes = strokes
        stored.ClientUpdatedAt = client_updated_at
        stored.UpdatedAt = now
        stored.save(update_fields=["Strokes", "ClientUpdatedAt", "UpdatedAt"])
        logger.info("Score accepted: entry %s hole %s strokes %s", entry.id, hole, strokes)
        return {"status": "accepted", "score": score_record(stored)}


# ------------------------------------------------------------------ #
# Refetch helpers (client resync after a stale rejection)            #
# ------------------------------------------------------------------ #

def scores_for_entries(entry_ids: Iterable) -> Dict:
    """{entry_id: {hole: strokes}} for every requested entry, empty dict when unscored."""
    entry_ids = list(entry_ids)
    out: Dict = {eid: {} for eid in entry_ids}
    rows = (
        HoleScore.objects
        .filter(Entry_id__in=entry_ids)
        .values_list("Entry_id", "HoleNumber", "Strokes")
    )
    for eid, hole, strokes in rows:
        out.setdefault(eid, {})[hole] = strokes
    return out


def scores_for_group(group_id) -> Dict:
    entry_ids = Entries.objects.filter(Group_id=group_id).values_list("id", flat=True)
    return scores_for_entries(entry_ids)


# ------------------------------------------------------------------ #
# Operator review queue                                              #
# ------------------------------------------------------------------ #

def pending_conflicts(tournament_id, limit: Optional[int] = None) -> List[Dict]:
    qs = (
        ScoreConflict.objects
        .filter(Tournament_id=tournament_id, Resolved=False)
        .select_related("Tournament", "Entry__Player", "Entry__Group")
        .order_by("-CreateDate", "-id")
    )
    if limit:
        qs = qs[:limit]
    return [conflict_record(c) for c in qs]


def validate_force_value(value) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Force value must be a whole number of strokes.")
    if not (MIN_STROKES <= value <= MAX_STROKES):
        raise ValidationError(f"Force value must be between {MIN_STROKES} and {MAX_STROKES}.")
    return value


def resolve_conflict(conflict_id, action: str, force_value=None) -> Dict:
    """
    apply-server: dismiss, the stored score stays.
    force-local:  overwrite the stored score with `force_value` (defaults to
                  the rejected incoming strokes), skipping the timestamp check.

    Bad input raises ValidationError before anything is written.
    """
    if action not in RESOLVE_ACTIONS:
        raise ValidationError(f"Unknown action {action!r}.")

    with transaction.atomic():
        conflict = (
            ScoreConflict.objects
            .select_for_update()
            .select_related("Tournament", "Entry__Player", "Entry__Group")
            .get(pk=conflict_id)
        )
        if conflict.Resolved:
            raise ValidationError("Conflict is already resolved.")

        now = timezone.now()
        score = None

        if action == FORCE_LOCAL:
            value = validate_force_value(conflict.IncomingStrokes if force_value is None else force_value)
            if conflict.Tournament.IsFinal:
                raise ValidationError("Tournament is final; unlock it before forcing a score.")

            score = _locked_score(conflict.Entry, conflict.HoleNumber)
            if score is None:
                score = HoleScore(Entry=conflict.Entry, HoleNumber=conflict.HoleNumber)
            score.Strokes = value
            score.ClientUpdatedAt = now
            score.UpdatedAt = now
            score.save()
            conflict.FinalStrokes = value
        else:
            current = _locked_score(conflict.Entry, conflict.HoleNumber)
            conflict.FinalStrokes = current.Strokes if current else conflict.StoredStrokes

        conflict.Resolved = True
        conflict.Resolution = action
        conflict.ResolvedAt = now
        conflict.save(update_fields=["Resolved", "Resolution", "FinalStrokes", "ResolvedAt"])

    logger.info(
        "Conflict %s resolved with %s: entry %s hole %s -> %s",
        conflict.id, action, conflict.Entry_id, conflict.HoleNumber, conflict.FinalStrokes,
    )
    out = {"conflict": conflict_record(conflict)}
    if score is not None:
        out["score"] = score_record(score)
    return out


def clear_conflicts(tournament_id) -> int:
    """Drop every pending conflict for the tournament from review. Scores are not touched."""
    cleared = (
        ScoreConflict.objects
        .filter(Tournament_id=tournament_id, Resolved=False)
        .update(Resolved=True, Resolution=CLEARED, ResolvedAt=timezone.now())
    )
    logger.info("Cleared %s pending conflicts for tournament %s", cleared, tournament_id)
    return cleared
