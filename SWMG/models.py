from django.db import models
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db.models import UniqueConstraint


# Create your models here.
class Players(models.Model):
    Name = models.CharField(max_length=128)
    Email = models.CharField(max_length=256, null=True, blank=True)
    Index = models.DecimalField(max_digits=3, decimal_places=1, null=True, blank=True)  # handicap index, negative for plus players
    CreateDate = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "Players"

    def __str__(self):
        return self.Name


class Courses(models.Model):
    CourseName = models.CharField(max_length=128)
    Par = models.IntegerField()
    CourseRating = models.DecimalField(max_digits=4, decimal_places=1)
    SlopeRating = models.IntegerField()
    CreateDate = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "Courses"

    def __str__(self):
        return self.CourseName


class CourseHoles(models.Model):
    Course = models.ForeignKey('Courses', on_delete=models.CASCADE, related_name='holes')
    HoleNumber = models.IntegerField(validators=[MinValueValidator(1), MaxValueValidator(18)])
    Par = models.IntegerField(validators=[MinValueValidator(3), MaxValueValidator(6)])
    StrokeIndex = models.IntegerField(validators=[MinValueValidator(1), MaxValueValidator(18)])  # 1 = hardest hole

    class Meta:
        db_table = "CourseHoles"
        constraints = [
            UniqueConstraint(fields=["Course", "HoleNumber"], name="course_hole_unique"),
            UniqueConstraint(fields=["Course", "StrokeIndex"], name="course_stroke_index_unique"),
        ]


### Tournament Tables

class Tournaments(models.Model):
    Name = models.CharField(max_length=128)
    PlayDate = models.DateField()
    Course = models.ForeignKey('Courses', on_delete=models.PROTECT)
    Holes = models.IntegerField(default=18)
    NetAllowance = models.IntegerField(default=100, validators=[MinValueValidator(0), MaxValueValidator(100)])  # percent
    PotAmount = models.IntegerField(null=True, blank=True)  # skins pot, integer cents
    ParticipantsForSkins = models.IntegerField(null=True, blank=True)
    IsFinal = models.BooleanField(default=False)
    FinalizedAt = models.DateTimeField(null=True, blank=True)
    CreateDate = models.DateTimeField(auto_now_add=True)
    AlterDate = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "Tournaments"

    def __str__(self):
        return f"{self.Name} ({self.PlayDate})"


class Groups(models.Model):
    Tournament = models.ForeignKey('Tournaments', on_delete=models.CASCADE, related_name='groups')
    GroupName = models.CharField(max_length=64)
    TeeTime = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "Groups"


class Entries(models.Model):
    Tournament = models.ForeignKey('Tournaments', on_delete=models.CASCADE, related_name='entries')
    Player = models.ForeignKey('Players', on_delete=models.CASCADE)
    Group = models.ForeignKey('Groups', on_delete=models.SET_NULL, null=True, blank=True, related_name='entries')
    CourseHandicap = models.IntegerField(null=True, blank=True)  # filled from the player's index on insert
    PlayingCH = models.IntegerField(null=True, blank=True)
    HasPaid = models.BooleanField(default=False)
    CreateDate = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "Entries"
        constraints = [
            UniqueConstraint(fields=["Tournament", "Player"], name="entry_player_unique"),
        ]

    def __str__(self):
        return f"{self.Tournament_id}: {self.Player_id}"


### Scoring Tables

class HoleScore(models.Model):
    """
    One row per (entry, hole). Only written through services.reconcile.
    UpdatedAt is server time of the last accepted write and is the LWW basis.
    """
    Entry = models.ForeignKey('Entries', on_delete=models.CASCADE, related_name='scores')
    HoleNumber = models.IntegerField(validators=[MinValueValidator(1), MaxValueValidator(18)])
    Strokes = models.IntegerField(validators=[MinValueValidator(1), MaxValueValidator(15)])
    ClientUpdatedAt = models.DateTimeField(null=True, blank=True)  # when the edit was made on the device
    UpdatedAt = models.DateTimeField()
    CreateDate = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "HoleScore"
        constraints = [
            UniqueConstraint(fields=["Entry", "HoleNumber"], name="entry_hole_unique"),
        ]

    def __str__(self):
        return f"{self.Entry_id} H{self.HoleNumber}: {self.Strokes}"


class ScoreConflict(models.Model):
    """
    A stale edit that lost the LWW comparison. Kept for audit after it is
    resolved; Resolved=False rows make up the operator review queue.
    """
    RESOLUTION_CHOICES = [("apply-server", "Apply server value"), ("force-local", "Force local value"), ("cleared", "Cleared")]

    Tournament = models.ForeignKey('Tournaments', on_delete=models.CASCADE, related_name='conflicts')
    Entry = models.ForeignKey('Entries', on_delete=models.CASCADE)
    HoleNumber = models.IntegerField()
    IncomingStrokes = models.IntegerField()
    IncomingAt = models.DateTimeField()
    StoredStrokes = models.IntegerField()
    StoredAt = models.DateTimeField()
    CreateDate = models.DateTimeField(auto_now_add=True)
    Resolved = models.BooleanField(default=False)
    Resolution = models.CharField(max_length=16, choices=RESOLUTION_CHOICES, null=True, blank=True)
    FinalStrokes = models.IntegerField(null=True, blank=True)
    ResolvedAt = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "ScoreConflict"
        indexes = [
            models.Index(fields=["Tournament", "Resolved"], name="conflict_pending_idx"),
        ]

    def __str__(self):
        return f"{self.Entry_id} H{self.HoleNumber}: {self.IncomingStrokes} vs {self.StoredStrokes}"
