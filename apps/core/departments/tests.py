from django.db import IntegrityError
from django.db.models import ProtectedError
from django.test import TestCase

from apps.core.batches.services import create_batch

from .models import Department
from .services import resolve_department


class DepartmentModelTests(TestCase):
    def test_code_is_normalized_on_save(self):
        department = Department.objects.create(name='  Computer Science ', code=' cse ')
        department.refresh_from_db()

        self.assertEqual(department.code, 'CSE')
        self.assertEqual(department.name, 'Computer Science')
        self.assertEqual(department.display_name, 'Computer Science (CSE)')

    def test_code_unique_regardless_of_case(self):
        Department.objects.create(name='Computer Science', code='CSE')
        with self.assertRaises(IntegrityError):
            Department.objects.create(name='Computing', code='cse')

    def test_department_with_batches_cannot_be_deleted(self):
        department = Department.objects.create(name='Computer Science', code='CSE')
        create_batch(
            department=department,
            batch_code='2024-2026',
            start_year=2024,
            end_year=2026,
            course_type='PG',
            course_duration=2,
        )
        with self.assertRaises(ProtectedError):
            department.delete()


class ResolveDepartmentTests(TestCase):
    def setUp(self):
        self.department = Department.objects.create(name='Electronics', code='ECE')

    def test_resolves_active_department_case_insensitively(self):
        self.assertEqual(resolve_department(' ece '), self.department)

    def test_ignores_inactive_and_unknown_codes(self):
        self.department.is_active = False
        self.department.save(update_fields=['is_active'])

        self.assertIsNone(resolve_department('ECE'))
        self.assertIsNone(resolve_department('MECH'))
        self.assertIsNone(resolve_department(''))
