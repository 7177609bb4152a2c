from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.core.batches.services import auto_graduate_completed_batches


class Command(BaseCommand):
    help = 'Moves batches whose final academic year has ended to alumni.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--date',
            dest='as_of',
            help='Evaluate graduation as of this date (YYYY-MM-DD). Defaults to today.',
        )

    def handle(self, *args, **options):
        as_of = None
        if options['as_of']:
            try:
                as_of = date.fromisoformat(options['as_of'])
            except ValueError as exc:
                raise CommandError(f"Invalid --date value: {options['as_of']}") from exc

        graduated = auto_graduate_completed_batches(today=as_of)
        if not graduated:
            self.stdout.write('No batches due for graduation.')
            return

        for batch in graduated:
            self.stdout.write(self.style.SUCCESS(f'Graduated {batch}'))
        self.stdout.write(self.style.SUCCESS(f'{len(graduated)} batch(es) moved to alumni.'))
