# Seeds a course, a tournament with two groups and eight entries, and a few
# hole scores so the leaderboard, skins and conflict endpoints have data.
# Run from the repo root: python demo_Tournament_insert_data.py

import os
from datetime import date, timedelta
from decimal import Decimal

import django

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clubhouse.settings')
django.setup()

from django.utils import timezone

from SWMG.models import CourseHoles, Courses, Entries, Groups, HoleScore, Players, Tournaments

# (hole, par, stroke index)
holes_data = [
    (1, 4, 7), (2, 5, 13), (3, 3, 17), (4, 4, 1), (5, 4, 11), (6, 3, 15),
    (7, 5, 5), (8, 4, 9), (9, 4, 3), (10, 4, 8), (11, 3, 16), (12, 5, 12),
    (13, 4, 2), (14, 4, 10), (15, 3, 18), (16, 5, 6), (17, 4, 14), (18, 4, 4),
]

players_data = [
    ("Chris Prouty", Decimal("8.4")),
    ("Dave Haney", Decimal("14.2")),
    ("Mike Kolb", Decimal("3.1")),
    ("Tom Reilly", Decimal("21.7")),
    ("Sam Ortiz", Decimal("11.0")),
    ("Pete Walsh", Decimal("-1.2")),
    ("Joe Lindqvist", None),
    ("Rick Baines", Decimal("17.5")),
]

course = Courses.objects.create(CourseName="The Preserve", Par=72, CourseRating=Decimal("71.8"), SlopeRating=131)
for hole_number, par, si in holes_data:
    CourseHoles.objects.create(Course=course, HoleNumber=hole_number, Par=par, StrokeIndex=si)
print(f"Course {course.CourseName} added with {len(holes_data)} holes")

tournament = Tournaments.objects.create(
    Name="Member-Guest Day 1",
    PlayDate=date.today(),
    Course=course,
    NetAllowance=90,
    PotAmount=16000,
    ParticipantsForSkins=len(players_data),
)

tee_time = timezone.now().replace(hour=8, minute=0, second=0, microsecond=0)
groups = [
    Groups.objects.create(Tournament=tournament, GroupName="Group A", TeeTime=tee_time),
    Groups.objects.create(Tournament=tournament, GroupName="Group B", TeeTime=tee_time + timedelta(minutes=10)),
]

entries = []
for n, (name, index) in enumerate(players_data):
    player = Players.objects.create(Name=name, Index=index)
    entry = Entries.objects.create(Tournament=tournament, Player=player, Group=groups[n // 4], HasPaid=True)
    entries.append(entry)
    print(f"{name}: CH {entry.CourseHandicap}, playing {entry.PlayingCH}")

# front nine for every entry, par plus a little noise
now = timezone.now()
for n, entry in enumerate(entries):
    for hole_number, par, si in holes_data[:9]:
        HoleScore.objects.create(
            Entry=entry,
            HoleNumber=hole_number,
            Strokes=par + (n + hole_number) % 3 - 1 + (1 if n > 5 else 0),
            ClientUpdatedAt=now,
            UpdatedAt=now,
        )

print(f"Tournament {tournament.Name} (id {tournament.id}) seeded with {len(entries)} entries")
