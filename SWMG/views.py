import json
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt  # devices post JSON, no session/CSRF cookie
from django.views.decorators.http import require_http_methods

from SWMG.forms import ConflictResolveForm, ScoreEditForm
from SWMG.models import Entries, Groups, ScoreConflict, Tournaments
from SWMG.services import reconcile, results

logger = logging.getLogger(__name__)


def _json_body(request):
    """Parsed JSON object from the request body, or None if it is not one."""
    try:
        data = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        return None
    return data if isinstance(data, dict) else None


def _field_errors(form):
    return {'error': 'validation_failed', 'fields': {k: [str(e) for e in v] for k, v in form.errors.items()}}


def _form_error(form):
    return JsonResponse(_field_errors(form), status=400)


def _submit_one(data):
    """
    Validate and apply a single edit. Returns (payload, http_status).
    Validation failures never reach the engine.
    """
    form = ScoreEditForm(data)
    if not form.is_valid():
        return _field_errors(form), 400

    cd = form.cleaned_data
    try:
        outcome = reconcile.submit_edit(cd['entryId'], cd['hole'], cd['strokes'], cd['clientUpdatedAt'])
    except Entries.DoesNotExist:
        return {'error': 'Tournament entry not found'}, 404
    except reconcile.TournamentFinalError:
        return {'error': 'tournament_final'}, 409
    return outcome, 200


#### Score submission ####

@csrf_exempt
@require_http_methods(["POST"])
def submit_score_view(request):
    data = _json_body(request)
    if data is None:
        return JsonResponse({'error': 'Request body must be a JSON object'}, status=400)
    payload, status = _submit_one(data)
    return JsonResponse(payload, status=status)


@csrf_exempt
@require_http_methods(["POST"])
def submit_score_batch_view(request):
    data = _json_body(request)
    edits = data.get('edits') if data else None
    if not isinstance(edits, list):
        return JsonResponse({'error': 'edits must be a list'}, status=400)
    if len(edits) > settings.SWMG_BATCH_MAX_EDITS:
        return JsonResponse({'error': f'At most {settings.SWMG_BATCH_MAX_EDITS} edits per batch'}, status=400)

    # each edit is its own key/transaction, applied in queue order
    out = []
    for edit in edits:
        if not isinstance(edit, dict):
            out.append({'error': 'edit must be a JSON object'})
            continue
        payload, _ = _submit_one(edit)
        out.append(payload)
    return JsonResponse({'results': out})


#### Refetch for client resync ####

@require_http_methods(["GET"])
def entry_scores_view(request, entry_id):
    entry = get_object_or_404(Entries, pk=entry_id)
    scores = reconcile.scores_for_entries([entry.id])
    return JsonResponse({'scores': {str(k): v for k, v in scores.items()}})


@require_http_methods(["GET"])
def group_scores_view(request, group_id):
    group = get_object_or_404(Groups, pk=group_id)
    scores = reconcile.scores_for_group(group.id)
    return JsonResponse({'scores': {str(k): v for k, v in scores.items()}})


#### Results ####

@require_http_methods(["GET"])
def leaderboards_view(request, tournament_id):
    try:
        payload = results.leaderboards_payload(tournament_id)
    except Tournaments.DoesNotExist:
        return JsonResponse({'error': 'Tournament not found'}, status=404)
    return JsonResponse(payload)


@require_http_methods(["GET"])
def skins_view(request, tournament_id):
    try:
        payload = results.skins_payload(tournament_id)
    except Tournaments.DoesNotExist:
        return JsonResponse({'error': 'Tournament not found'}, status=404)
    return JsonResponse(payload)


#### Conflict review ####

@csrf_exempt
@require_http_methods(["GET", "DELETE"])
def conflicts_view(request, tournament_id):
    tournament = get_object_or_404(Tournaments, pk=tournament_id)

    if request.method == "DELETE":
        cleared = reconcile.clear_conflicts(tournament.id)
        return JsonResponse({'cleared': cleared})

    conflicts = reconcile.pending_conflicts(tournament.id, limit=settings.SWMG_CONFLICT_LIST_LIMIT)
    return JsonResponse({'conflicts': conflicts})


@csrf_exempt
@require_http_methods(["POST"])
def conflict_resolve_view(request, conflict_id):
    get_object_or_404(ScoreConflict, pk=conflict_id)

    data = _json_body(request)
    if data is None:
        return JsonResponse({'error': 'Request body must be a JSON object'}, status=400)
    form = ConflictResolveForm(data)
    if not form.is_valid():
        return _form_error(form)

    try:
        outcome = reconcile.resolve_conflict(
            conflict_id,
            form.cleaned_data['action'],
            form.cleaned_data.get('forceValue'),
        )
    except ValidationError as e:
        return JsonResponse({'error': ' '.join(e.messages)}, status=400)
    return JsonResponse(outcome)
