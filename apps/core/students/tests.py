from datetime import date

from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.core.batches.services import create_batch
from apps.core.departments.models import Department

from .models import PlacementOffer, Student
from .services import update_placement_status


class StudentPlacementTests(TestCase):
    def setUp(self):
        self.department = Department.objects.create(name='Computer Science', code='CSE')
        self.batch = create_batch(
            department=self.department,
            batch_code='2024-2028',
            start_year=2024,
            end_year=2028,
            course_type='UG',
            course_duration=4,
        )
        self.student = Student.objects.create(
            student_id='CSE2024001',
            full_name='Ananya Rao',
            department=self.department,
            batch=self.batch,
        )

    def test_new_student_is_unplaced(self):
        self.assertEqual(self.student.placement_status, Student.PLACEMENT_UNPLACED)
        self.assertFalse(self.student.is_placed)

    def test_update_placement_status_records_offer(self):
        update_placement_status(self.student, Student.PLACEMENT_PLACED, offer={
            'company_name': 'Acme Systems',
            'job_role': 'Graduate Engineer',
            'ctc': '8 LPA',
            'joining_date': date(2028, 7, 1),
        })
        self.student.refresh_from_db()

        self.assertTrue(self.student.is_placed)
        offer = PlacementOffer.objects.get(student=self.student)
        self.assertEqual(offer.company_name, 'Acme Systems')
        self.assertEqual(offer.joining_date, date(2028, 7, 1))

    def test_update_placement_status_rejects_unknown_status(self):
        with self.assertRaises(ValidationError):
            update_placement_status(self.student, 'Hired')
        self.student.refresh_from_db()
        self.assertEqual(self.student.placement_status, Student.PLACEMENT_UNPLACED)

    def test_offer_without_company_changes_nothing(self):
        with self.assertRaises(ValidationError):
            update_placement_status(self.student, Student.PLACEMENT_PLACED, offer={'ctc': '5 LPA'})

        self.student.refresh_from_db()
        self.assertEqual(self.student.placement_status, Student.PLACEMENT_UNPLACED)
        self.assertFalse(PlacementOffer.objects.exists())

    def test_deleting_batch_keeps_students(self):
        self.batch.delete()
        self.student.refresh_from_db()
        self.assertIsNone(self.student.batch)
