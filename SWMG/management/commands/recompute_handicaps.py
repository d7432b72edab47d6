from django.core.management.base import BaseCommand, CommandError

from SWMG.models import Tournaments
from SWMG.services import results
from SWMG.services.entries import recompute_for_tournaments


class Command(BaseCommand):
    help = 'Recompute course and playing handicaps for tournament entries'

    def add_arguments(self, parser):
        parser.add_argument('--tournament', type=int, help='Only recompute this tournament ID')

    def handle(self, *args, **options):
        tournaments = Tournaments.objects.all()
        if options['tournament']:
            tournaments = tournaments.filter(pk=options['tournament'])
            if not tournaments.exists():
                raise CommandError(f"Tournament {options['tournament']} does not exist")

        changed = recompute_for_tournaments(tournaments)
        for tournament_id in tournaments.values_list('id', flat=True):
            results.invalidate(tournament_id)

        self.stdout.write(self.style.SUCCESS(f'Recomputed handicaps, {changed} entries changed'))
