from datetime import date
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.core.management import call_command
from django.db import IntegrityError, transaction
from django.test import SimpleTestCase, TestCase
from django.urls import reverse

from apps.core.audit.models import AuditLog
from apps.core.departments.models import Department
from apps.core.students.models import Student

from . import rules
from .models import Batch
from .services import (
    auto_graduate_completed_batches,
    create_batch,
    create_intake_batch,
    department_batch_overview,
    find_or_create_batch,
    generate_batch_code,
    graduate_batch,
    list_active_batches,
    list_alumni_batches,
    placement_summary,
    recompute_statistics,
    refresh_all_statistics,
    update_batch,
    validate_and_derive,
)


UG_2024 = {
    'batch_code': '2024-2028',
    'start_year': 2024,
    'end_year': 2028,
    'course_type': 'UG',
    'course_duration': 4,
}


class BatchRuleTests(SimpleTestCase):
    def test_generate_batch_code_uses_default_course_durations(self):
        self.assertEqual(generate_batch_code(2024, 'UG'), '2024-2028')
        self.assertEqual(generate_batch_code(2024, 'PG'), '2024-2026')
        self.assertEqual(generate_batch_code(2024, 'Diploma'), '2024-2027')
        self.assertEqual(generate_batch_code(2024, 'Certificate'), '2024-2025')

    def test_generate_batch_code_falls_back_to_four_years(self):
        self.assertEqual(generate_batch_code(2024, 'PhD'), '2024-2028')

    def test_placement_rate_is_zero_without_students(self):
        self.assertEqual(rules.placement_rate(0, 0), 0)

    def test_placement_rate_rounds_to_whole_percent(self):
        self.assertEqual(rules.placement_rate(40, 50), 80)
        self.assertEqual(rules.placement_rate(1, 3), 33)
        self.assertEqual(rules.placement_rate(1, 8), 13)

    def test_should_graduate_after_march_of_end_year(self):
        self.assertTrue(rules.should_graduate(2028, date(2029, 1, 15)))
        self.assertFalse(rules.should_graduate(2028, date(2028, 2, 15)))
        self.assertFalse(rules.should_graduate(2028, date(2028, 3, 31)))
        self.assertTrue(rules.should_graduate(2028, date(2028, 4, 1)))

    def test_current_academic_year_switches_on_april_first(self):
        self.assertEqual(rules.current_academic_year(2024, 4, date(2025, 3, 31)), 1)
        self.assertEqual(rules.current_academic_year(2024, 4, date(2025, 4, 1)), 2)

    def test_current_academic_year_is_clamped_to_course_duration(self):
        self.assertEqual(rules.current_academic_year(2024, 4, date(2023, 6, 1)), 1)
        self.assertEqual(rules.current_academic_year(2024, 4, date(2035, 6, 1)), 4)

    def test_year_label_beyond_table_uses_generic_suffix(self):
        self.assertEqual(rules.year_label(3), '3rd Year')
        self.assertEqual(rules.year_label(7), '7th Year')

    def test_check_batch_fields_reports_first_failing_field(self):
        with self.assertRaises(ValidationError) as ctx:
            rules.check_batch_fields(
                batch_code='2024-28',
                start_year=1999,
                end_year=2028,
                course_type='UG',
                course_duration=4,
            )
        self.assertEqual(list(ctx.exception.message_dict), ['batch_code'])

    def test_check_batch_fields_rejects_out_of_range_values(self):
        cases = (
            ({'start_year': 2019, 'end_year': 2023, 'batch_code': '2019-2023'}, 'start_year'),
            ({'end_year': 2056, 'batch_code': '2024-2056'}, 'end_year'),
            ({'course_type': 'PhD'}, 'course_type'),
            ({'course_duration': 7}, 'course_duration'),
        )
        for overrides, field in cases:
            values = {**UG_2024, **overrides}
            with self.subTest(field=field):
                with self.assertRaises(ValidationError) as ctx:
                    rules.check_batch_fields(**values)
                self.assertIn(field, ctx.exception.message_dict)

    def test_end_year_must_follow_start_year(self):
        with self.assertRaises(ValidationError) as ctx:
            rules.check_batch_fields(
                batch_code='2030-2030',
                start_year=2030,
                end_year=2030,
                course_type='UG',
                course_duration=1,
            )
        self.assertIn('end_year', ctx.exception.message_dict)

    def test_duration_mismatch_is_not_auto_corrected(self):
        with self.assertRaises(ValidationError) as ctx:
            rules.check_batch_fields(**{**UG_2024, 'course_duration': 3})
        self.assertEqual(
            ctx.exception.message_dict['course_duration'],
            ['Course duration (3) must match year difference (4).'],
        )


class BatchLifecycleTests(TestCase):
    def setUp(self):
        self.department = Department.objects.create(name='Computer Science', code='cse')

    def test_create_batch_derives_academic_calendar(self):
        batch = create_batch(department=self.department, **UG_2024)
        batch.refresh_from_db()

        self.assertEqual(batch.academic_year_start, date(2024, 4, 1))
        self.assertEqual(batch.academic_year_end, date(2028, 3, 31))
        self.assertEqual(batch.display_name, '2024-2028 UG')
        self.assertTrue(batch.is_active)
        self.assertFalse(batch.is_graduated)
        self.assertEqual(batch.placement_rate, 0)

    def test_valid_year_spans_always_derive_april_to_march(self):
        for start_year, duration in ((2020, 2), (2030, 6), (2050, 5)):
            end_year = start_year + duration
            batch = Batch(
                department=self.department,
                batch_code=f'{start_year}-{end_year}',
                start_year=start_year,
                end_year=end_year,
                course_type='UG',
                course_duration=duration,
            )
            with self.subTest(start_year=start_year):
                validate_and_derive(batch)
                self.assertEqual(batch.academic_year_start, date(start_year, 4, 1))
                self.assertEqual(batch.academic_year_end, date(end_year, 3, 31))

    def test_duration_mismatch_persists_nothing(self):
        with self.assertRaises(ValidationError):
            create_batch(department=self.department, **{**UG_2024, 'course_duration': 3})
        self.assertFalse(Batch.objects.exists())

    def test_failed_validation_leaves_candidate_unmodified(self):
        batch = Batch(department=self.department, **{**UG_2024, 'end_year': 2027})
        with self.assertRaises(ValidationError):
            validate_and_derive(batch)
        self.assertIsNone(batch.academic_year_start)
        self.assertIsNone(batch.academic_year_end)

    def test_academic_status_and_full_display_name(self):
        batch = create_batch(department=self.department, **UG_2024)

        self.assertEqual(batch.current_academic_year(date(2025, 1, 10)), 1)
        self.assertEqual(batch.academic_status(date(2026, 5, 1)), '3rd Year')
        self.assertEqual(batch.full_display_name(date(2026, 5, 1)), '2024-2028 UG (3rd Year)')

    def test_graduated_batch_is_alumni_regardless_of_calendar(self):
        batch = create_batch(department=self.department, **UG_2024)
        batch.is_graduated = True

        self.assertEqual(batch.academic_status(date(2024, 6, 1)), 'Alumni')
        self.assertEqual(batch.full_display_name(date(2024, 6, 1)), '2024-2028 UG (Alumni)')

    def test_update_batch_rederives_calendar_when_years_change(self):
        batch = create_batch(department=self.department, **UG_2024)
        update_batch(batch, batch_code='2025-2029', start_year=2025, end_year=2029)
        batch.refresh_from_db()

        self.assertEqual(batch.academic_year_start, date(2025, 4, 1))
        self.assertEqual(batch.academic_year_end, date(2029, 3, 31))

    def test_update_batch_with_mismatched_duration_changes_nothing(self):
        batch = create_batch(department=self.department, **UG_2024)
        with self.assertRaises(ValidationError):
            update_batch(batch, end_year=2027)

        self.assertEqual(batch.end_year, 2028)
        batch.refresh_from_db()
        self.assertEqual(batch.end_year, 2028)
        self.assertEqual(batch.academic_year_end, date(2028, 3, 31))

    def test_update_batch_conflicting_code_keeps_stored_values(self):
        create_batch(department=self.department, **UG_2024)
        batch = create_batch(department=self.department, **{
            **UG_2024, 'batch_code': '2025-2029', 'start_year': 2025, 'end_year': 2029,
        })
        with self.assertRaises(IntegrityError):
            update_batch(batch, batch_code='2024-2028', start_year=2024, end_year=2028)

        self.assertEqual(batch.batch_code, '2025-2029')
        self.assertEqual(batch.start_year, 2025)
        self.assertEqual(batch.academic_year_start, date(2025, 4, 1))
        self.assertEqual(Batch.objects.filter(batch_code='2025-2029').count(), 1)

    def test_update_batch_rejects_derived_fields(self):
        batch = create_batch(department=self.department, **UG_2024)
        with self.assertRaises(ValidationError):
            update_batch(batch, academic_year_start=date(2024, 1, 1))

    def test_direct_create_surfaces_uniqueness_conflict(self):
        create_batch(department=self.department, **UG_2024)
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                create_batch(department=self.department, **UG_2024)

    def test_batch_code_can_repeat_across_departments(self):
        other = Department.objects.create(name='Electronics', code='ECE')
        create_batch(department=self.department, **UG_2024)
        create_batch(department=other, **UG_2024)

        self.assertEqual(Batch.objects.filter(batch_code='2024-2028').count(), 2)

    def test_create_batch_writes_audit_event(self):
        batch = create_batch(department=self.department, **UG_2024)
        log = AuditLog.objects.get(action='batch.created')

        self.assertEqual(log.target_model, 'Batch')
        self.assertEqual(log.target_id, str(batch.pk))
        self.assertEqual(log.department, self.department)


class BatchFactoryAndQueryTests(TestCase):
    def setUp(self):
        self.department = Department.objects.create(name='Computer Science', code='CSE')

    def test_find_or_create_returns_same_record(self):
        first = find_or_create_batch(department=self.department, **UG_2024)
        second = find_or_create_batch(department=self.department, **UG_2024)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(Batch.objects.count(), 1)
        self.assertEqual(list(list_active_batches(self.department)), [first])

        graduate_batch(first)
        self.assertEqual(list(list_alumni_batches(self.department)), [first])
        self.assertFalse(list_active_batches(self.department).exists())

    def test_find_or_create_does_not_update_existing_record(self):
        original = find_or_create_batch(department=self.department, **UG_2024)
        found = find_or_create_batch(
            department=self.department,
            batch_code='2024-2028',
            start_year=2024,
            end_year=2026,
            course_type='PG',
            course_duration=2,
        )
        found.refresh_from_db()

        self.assertEqual(found.pk, original.pk)
        self.assertEqual(found.course_type, 'UG')
        self.assertEqual(found.end_year, 2028)

    def test_find_or_create_validates_new_records(self):
        with self.assertRaises(ValidationError):
            find_or_create_batch(department=self.department, **{**UG_2024, 'batch_code': '24-28'})
        self.assertFalse(Batch.objects.exists())

    def test_create_intake_batch_derives_code_and_years(self):
        batch = create_intake_batch(department=self.department, joining_year=2024, course_type='Diploma')

        self.assertEqual(batch.batch_code, '2024-2027')
        self.assertEqual(batch.end_year, 2027)
        self.assertEqual(batch.course_duration, 3)
        self.assertEqual(
            create_intake_batch(department=self.department, joining_year=2024, course_type='Diploma').pk,
            batch.pk,
        )

    def test_active_batches_newest_first_and_scoped_to_department(self):
        other = Department.objects.create(name='Mechanical', code='MECH')
        older = create_batch(department=self.department, **{
            **UG_2024, 'batch_code': '2022-2026', 'start_year': 2022, 'end_year': 2026,
        })
        newer = create_batch(department=self.department, **UG_2024)
        create_batch(department=other, **UG_2024)
        inactive = create_batch(department=self.department, **{
            **UG_2024, 'batch_code': '2023-2027', 'start_year': 2023, 'end_year': 2027,
        })
        update_batch(inactive, is_active=False)

        self.assertEqual(list(list_active_batches(self.department)), [newer, older])

    def test_alumni_batches_ordered_by_end_year_descending(self):
        first = create_batch(department=self.department, **{
            **UG_2024, 'batch_code': '2020-2024', 'start_year': 2020, 'end_year': 2024,
        })
        second = create_batch(department=self.department, **{
            **UG_2024, 'batch_code': '2021-2025', 'start_year': 2021, 'end_year': 2025,
        })
        graduate_batch(first)
        graduate_batch(second)

        self.assertEqual(list(list_alumni_batches(self.department)), [second, first])


class BatchGraduationTests(TestCase):
    def setUp(self):
        self.department = Department.objects.create(name='Computer Science', code='CSE')
        self.completed = create_batch(department=self.department, **{
            **UG_2024, 'batch_code': '2021-2025', 'start_year': 2021, 'end_year': 2025,
        })
        self.running = create_batch(department=self.department, **UG_2024)

    def test_sweep_graduates_only_completed_batches(self):
        graduated = auto_graduate_completed_batches(today=date(2025, 4, 2))
        self.completed.refresh_from_db()
        self.running.refresh_from_db()

        self.assertEqual(graduated, [self.completed])
        self.assertTrue(self.completed.is_graduated)
        self.assertFalse(self.completed.is_active)
        self.assertTrue(self.running.is_active)
        self.assertFalse(self.running.is_graduated)

    def test_sweep_keeps_batch_active_until_march_ends(self):
        self.assertEqual(auto_graduate_completed_batches(today=date(2025, 3, 31)), [])

    def test_sweep_is_idempotent(self):
        first_run = auto_graduate_completed_batches(today=date(2026, 1, 1))
        second_run = auto_graduate_completed_batches(today=date(2026, 1, 1))

        self.assertEqual(len(first_run), 1)
        self.assertEqual(second_run, [])
        self.assertEqual(AuditLog.objects.filter(action='batch.graduated').count(), 1)

    def test_sweep_keeps_last_editor(self):
        editor = get_user_model().objects.create_user(username='coordinator', password='pass12345')
        update_batch(self.completed, updated_by=editor, course_type='Diploma')

        auto_graduate_completed_batches(today=date(2026, 1, 1))
        self.completed.refresh_from_db()

        self.assertTrue(self.completed.is_graduated)
        self.assertEqual(self.completed.updated_by, editor)

    def test_sweep_skips_inactive_batches(self):
        update_batch(self.completed, is_active=False)
        self.assertEqual(auto_graduate_completed_batches(today=date(2026, 1, 1)), [])

    def test_graduate_batch_is_noop_when_already_graduated(self):
        graduate_batch(self.running)
        graduate_batch(self.running)

        self.running.refresh_from_db()
        self.assertTrue(self.running.is_graduated)
        self.assertFalse(self.running.is_active)
        self.assertEqual(AuditLog.objects.filter(action='batch.graduated').count(), 1)

    def test_graduate_batches_command(self):
        out = StringIO()
        call_command('graduate_batches', '--date', '2025-06-01', stdout=out)
        self.completed.refresh_from_db()

        self.assertTrue(self.completed.is_graduated)
        self.assertIn('1 batch(es) moved to alumni.', out.getvalue())

        out = StringIO()
        call_command('graduate_batches', '--date', '2025-06-01', stdout=out)
        self.assertIn('No batches due for graduation.', out.getvalue())


class BatchStatisticsTests(TestCase):
    def setUp(self):
        self.department = Department.objects.create(name='Computer Science', code='CSE')
        self.batch = create_batch(department=self.department, **UG_2024)
        self.other_batch = create_batch(department=self.department, **{
            **UG_2024, 'batch_code': '2023-2027', 'start_year': 2023, 'end_year': 2027,
        })

    def _add_students(self, batch, status, count, prefix):
        for index in range(count):
            Student.objects.create(
                student_id=f'{prefix}{index:03d}',
                full_name=f'Student {prefix}{index}',
                department=self.department,
                batch=batch,
                placement_status=status,
            )

    def test_recompute_statistics_counts_placed_and_multiple_offers(self):
        self._add_students(self.batch, Student.PLACEMENT_PLACED, 30, 'P')
        self._add_students(self.batch, Student.PLACEMENT_MULTIPLE_OFFERS, 10, 'M')
        self._add_students(self.batch, Student.PLACEMENT_UNPLACED, 10, 'U')
        self._add_students(self.other_batch, Student.PLACEMENT_PLACED, 5, 'X')

        result = recompute_statistics(self.batch)
        self.batch.refresh_from_db()

        self.assertEqual(result, {'total_students': 50, 'placed_students': 40, 'placement_rate': 80})
        self.assertEqual(self.batch.total_students, 50)
        self.assertEqual(self.batch.placed_students, 40)
        self.assertEqual(self.batch.placement_rate, 80)

    def test_recompute_statistics_for_empty_batch(self):
        result = recompute_statistics(self.batch)
        self.assertEqual(result, {'total_students': 0, 'placed_students': 0, 'placement_rate': 0})

    def test_cached_counts_stay_stale_until_recompute(self):
        recompute_statistics(self.batch)
        self._add_students(self.batch, Student.PLACEMENT_PLACED, 2, 'P')
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.total_students, 0)

        recompute_statistics(self.batch)
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.total_students, 2)
        self.assertEqual(self.batch.placed_students, 2)

    def test_placement_summary_breaks_down_statuses(self):
        self._add_students(self.batch, Student.PLACEMENT_PLACED, 3, 'P')
        self._add_students(self.batch, Student.PLACEMENT_MULTIPLE_OFFERS, 1, 'M')
        self._add_students(self.batch, Student.PLACEMENT_UNPLACED, 4, 'U')

        self.assertEqual(placement_summary(self.batch), {
            'total_students': 8,
            'unplaced': 4,
            'placed': 3,
            'multiple_offers': 1,
            'placement_rate': 50,
        })
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.total_students, 0)

    def test_department_batch_overview_lists_active_batches_with_stats(self):
        self._add_students(self.batch, Student.PLACEMENT_PLACED, 1, 'P')
        graduate_batch(self.other_batch)

        overview = department_batch_overview(self.department, today=date(2025, 8, 1))

        self.assertEqual(len(overview), 1)
        self.assertEqual(overview[0]['batch_code'], '2024-2028')
        self.assertEqual(overview[0]['academic_status'], '2nd Year')
        self.assertEqual(overview[0]['full_display_name'], '2024-2028 UG (2nd Year)')
        self.assertEqual(overview[0]['stats']['placement_rate'], 100)

    def test_refresh_all_statistics_covers_active_batches(self):
        self._add_students(self.batch, Student.PLACEMENT_PLACED, 2, 'P')
        self._add_students(self.other_batch, Student.PLACEMENT_UNPLACED, 3, 'U')

        self.assertEqual(refresh_all_statistics(), 2)
        self.other_batch.refresh_from_db()
        self.assertEqual(self.other_batch.total_students, 3)

    def test_refresh_batch_statistics_command_filters_by_department(self):
        other_department = Department.objects.create(name='Electronics', code='ECE')
        create_batch(department=other_department, **UG_2024)
        self._add_students(self.batch, Student.PLACEMENT_PLACED, 2, 'P')

        out = StringIO()
        call_command('refresh_batch_statistics', '--department', 'cse', stdout=out)
        self.batch.refresh_from_db()

        self.assertEqual(self.batch.total_students, 2)
        self.assertIn('Statistics refreshed for 2 batch(es).', out.getvalue())


class BatchAdminTests(TestCase):
    def setUp(self):
        self.admin_user = get_user_model().objects.create_superuser(
            username='placement_admin',
            email='admin@example.com',
            password='pass12345',
        )
        self.department = Department.objects.create(name='Computer Science', code='CSE')
        self.batch = create_batch(department=self.department, **UG_2024)

    def test_mark_graduated_action(self):
        self.client.force_login(self.admin_user)
        response = self.client.post(reverse('admin:batches_batch_changelist'), {
            'action': 'mark_graduated',
            '_selected_action': [self.batch.pk],
        })
        self.assertEqual(response.status_code, 302)

        self.batch.refresh_from_db()
        self.assertTrue(self.batch.is_graduated)
        self.assertFalse(self.batch.is_active)
        self.assertEqual(self.batch.updated_by, self.admin_user)

    def test_mark_graduated_action_repairs_graduated_but_active_batch(self):
        Batch.objects.filter(pk=self.batch.pk).update(is_graduated=True, is_active=True)

        self.client.force_login(self.admin_user)
        response = self.client.post(reverse('admin:batches_batch_changelist'), {
            'action': 'mark_graduated',
            '_selected_action': [self.batch.pk],
        })
        self.assertEqual(response.status_code, 302)

        self.batch.refresh_from_db()
        self.assertTrue(self.batch.is_graduated)
        self.assertFalse(self.batch.is_active)
