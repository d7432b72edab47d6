from django.contrib import admin
from django.utils import timezone
from .models import Players, Courses, CourseHoles, Tournaments, Groups, Entries, HoleScore, ScoreConflict
from .services import reconcile

admin.site.register(Players)
admin.site.register(Groups)


class CourseHolesInline(admin.TabularInline):
    model = CourseHoles
    extra = 0


@admin.register(Courses)
class CoursesAdmin(admin.ModelAdmin):
    list_display = ("id", "CourseName", "Par", "CourseRating", "SlopeRating")
    inlines = [CourseHolesInline]


@admin.action(description="Finalize selected tournaments")
def finalize_tournaments(modeladmin, request, queryset):
    queryset.update(IsFinal=True, FinalizedAt=timezone.now())

@admin.action(description="Unlock selected tournaments")
def unlock_tournaments(modeladmin, request, queryset):
    queryset.update(IsFinal=False, FinalizedAt=None)

@admin.register(Tournaments)
class TournamentsAdmin(admin.ModelAdmin):
    list_display = ("id", "Name", "PlayDate", "NetAllowance", "PotAmount", "IsFinal")
    actions = [finalize_tournaments, unlock_tournaments]


@admin.register(Entries)
class EntriesAdmin(admin.ModelAdmin):
    list_display = ("id", "Tournament", "Player", "Group", "CourseHandicap", "PlayingCH", "HasPaid")


@admin.register(HoleScore)
class HoleScoreAdmin(admin.ModelAdmin):
    list_display = ("id", "Entry", "HoleNumber", "Strokes", "ClientUpdatedAt", "UpdatedAt")
    readonly_fields = ("ClientUpdatedAt", "UpdatedAt")


@admin.action(description="Apply server value (dismiss)")
def apply_server_value(modeladmin, request, queryset):
    for conflict in queryset.filter(Resolved=False):
        reconcile.resolve_conflict(conflict.id, reconcile.APPLY_SERVER)

@admin.action(description="Clear from review")
def clear_from_review(modeladmin, request, queryset):
    queryset.filter(Resolved=False).update(Resolved=True, Resolution=reconcile.CLEARED, ResolvedAt=timezone.now())

@admin.register(ScoreConflict)
class ScoreConflictAdmin(admin.ModelAdmin):
    list_display = ("id", "Tournament", "Entry", "HoleNumber", "IncomingStrokes", "IncomingAt",
                    "StoredStrokes", "StoredAt", "Resolved", "Resolution")
    list_filter = ("Resolved", "Tournament")
    actions = [apply_server_value, clear_from_review]
