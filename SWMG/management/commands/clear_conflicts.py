from django.core.management.base import BaseCommand, CommandError

from SWMG.models import Tournaments
from SWMG.services.reconcile import clear_conflicts


class Command(BaseCommand):
    help = 'Mark every pending score conflict of a tournament as cleared'

    def add_arguments(self, parser):
        parser.add_argument('tournament', type=int, help='Tournament ID')

    def handle(self, *args, **options):
        if not Tournaments.objects.filter(pk=options['tournament']).exists():
            raise CommandError(f"Tournament {options['tournament']} does not exist")
        cleared = clear_conflicts(options['tournament'])
        self.stdout.write(self.style.SUCCESS(f'Cleared {cleared} pending conflicts'))
