from unittest import mock

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.db import IntegrityError, transaction
from django.test import TestCase

from apps.core.departments.models import Department

from .models import AuditLog
from .services import log_audit_event


class AuditLogTests(TestCase):
    def setUp(self):
        self.department = Department.objects.create(name='Computer Science', code='CSE')
        self.user = get_user_model().objects.create_user(username='staff', password='pass12345')

    def test_records_actor_and_target(self):
        log = log_audit_event('department.reviewed', actor=self.user, target=self.department, details='ok')

        self.assertEqual(log.user, self.user)
        self.assertEqual(log.target_model, 'Department')
        self.assertEqual(log.target_id, str(self.department.pk))
        self.assertEqual(log.details, 'ok')

    def test_anonymous_actor_is_recorded_as_system(self):
        log = log_audit_event('batch.graduated', actor=AnonymousUser(), department=self.department)

        self.assertIsNone(log.user)
        self.assertEqual(log.department, self.department)
        self.assertEqual(str(log), 'batch.graduated by system')

    def test_audit_failure_does_not_raise(self):
        self.assertIsNone(log_audit_event('x' * 10, department=object()))
        self.assertFalse(AuditLog.objects.exists())

    def test_failed_write_does_not_break_surrounding_transaction(self):
        def failing_create(**kwargs):
            with transaction.atomic(savepoint=False):
                raise IntegrityError('audit insert failed')

        with transaction.atomic():
            with mock.patch.object(AuditLog.objects, 'create', side_effect=failing_create):
                self.assertIsNone(log_audit_event('batch.created', department=self.department))
            self.assertEqual(Department.objects.count(), 1)
