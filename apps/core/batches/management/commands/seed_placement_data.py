import random

from django.core.management.base import BaseCommand
from django.db import transaction
from faker import Faker

from apps.core.batches.rules import COURSE_TYPES
from apps.core.batches.services import create_intake_batch, refresh_all_statistics
from apps.core.departments.models import Department
from apps.core.students.models import Student

DEPARTMENTS = (
    ('CSE', 'Computer Science and Engineering'),
    ('ECE', 'Electronics and Communication Engineering'),
    ('MECH', 'Mechanical Engineering'),
)


class Command(BaseCommand):
    help = 'Seeds the database with departments, batches and students.'

    def add_arguments(self, parser):
        parser.add_argument('--students', type=int, default=20, help='Students per batch.')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding database...')

        fake = Faker('en_IN')
        per_batch = options['students']

        for code, name in DEPARTMENTS:
            department, created = Department.objects.get_or_create(
                code=code,
                defaults={'name': name, 'description': fake.sentence()},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Successfully created department: {department.display_name}'))

            for joining_year in (2021, 2022, 2023, 2024):
                course_type = random.choice(COURSE_TYPES)
                batch = create_intake_batch(
                    department=department,
                    joining_year=joining_year,
                    course_type=course_type,
                )
                self.stdout.write(self.style.SUCCESS(f'  - Batch ready: {batch.display_name}'))

                for _ in range(per_batch):
                    Student.objects.get_or_create(
                        student_id=f'{code}{joining_year}{fake.unique.random_number(digits=5, fix_len=True)}',
                        defaults={
                            'full_name': fake.name(),
                            'email': fake.email(),
                            'department': department,
                            'batch': batch,
                            'placement_status': random.choice(
                                [choice[0] for choice in Student.PLACEMENT_STATUS_CHOICES]
                            ),
                        },
                    )

        refreshed = refresh_all_statistics()
        self.stdout.write(self.style.SUCCESS(f'Statistics refreshed for {refreshed} batch(es).'))
        self.stdout.write(self.style.SUCCESS('Database seeding complete!'))
