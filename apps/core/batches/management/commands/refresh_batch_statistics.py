from django.core.management.base import BaseCommand, CommandError

from apps.core.batches.models import Batch
from apps.core.batches.services import refresh_all_statistics
from apps.core.departments.services import resolve_department


class Command(BaseCommand):
    help = 'Recomputes cached student and placement counts for active batches.'

    def add_arguments(self, parser):
        parser.add_argument('--department', help='Only refresh batches of this department code.')

    def handle(self, *args, **options):
        batches = Batch.objects.active().select_related('department')
        if options['department']:
            department = resolve_department(options['department'])
            if department is None:
                raise CommandError(f"Unknown or inactive department: {options['department']}")
            batches = batches.for_department(department)

        refreshed = refresh_all_statistics(batches)
        self.stdout.write(self.style.SUCCESS(f'Statistics refreshed for {refreshed} batch(es).'))
