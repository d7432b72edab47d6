# SWMG/signals.py
from django.db import transaction
from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from .models import Courses, Entries, HoleScore, Tournaments     # local imports
from .services import entries as entry_service
from .services import results


@receiver(pre_save, sender=Entries)
def fill_entry_handicaps(sender, instance, **kwargs):
    # computed once when the player joins; later changes go through recompute
    if instance.CourseHandicap is None or instance.PlayingCH is None:
        entry_service.assign_handicaps(instance)


@receiver(pre_save, sender=Tournaments)
def note_tournament_handicap_inputs(sender, instance, **kwargs):
    instance._handicap_inputs_changed = False
    if instance.pk is None:
        return
    old = Tournaments.objects.filter(pk=instance.pk).values("Course_id", "NetAllowance").first()
    if old and (old["Course_id"], old["NetAllowance"]) != (instance.Course_id, instance.NetAllowance):
        instance._handicap_inputs_changed = True


@receiver(post_save, sender=Tournaments)
def recompute_tournament_entries(sender, instance, created, **kwargs):
    if not created and getattr(instance, "_handicap_inputs_changed", False):
        entry_service.recompute_for_tournaments([instance])
        results.invalidate(instance.pk)


@receiver(pre_save, sender=Courses)
def note_course_handicap_inputs(sender, instance, **kwargs):
    instance._handicap_inputs_changed = False
    if instance.pk is None:
        return
    old = Courses.objects.filter(pk=instance.pk).values("SlopeRating", "CourseRating", "Par").first()
    if old and (old["SlopeRating"], old["CourseRating"], old["Par"]) != (
        instance.SlopeRating, instance.CourseRating, instance.Par
    ):
        instance._handicap_inputs_changed = True


@receiver(post_save, sender=Courses)
def recompute_course_entries(sender, instance, created, **kwargs):
    if not created and getattr(instance, "_handicap_inputs_changed", False):
        tournaments = list(Tournaments.objects.filter(Course=instance))
        entry_service.recompute_for_tournaments(tournaments)
        for t in tournaments:
            results.invalidate(t.pk)


@receiver(post_save, sender=HoleScore)
def invalidate_results_for_score(sender, instance, **kwargs):
    tournament_id = Entries.objects.filter(pk=instance.Entry_id).values_list("Tournament_id", flat=True).first()
    if tournament_id:
        # other connections only see the new score once the transaction commits
        transaction.on_commit(lambda: results.invalidate(tournament_id))
