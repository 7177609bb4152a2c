from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from apps.core.audit.services import log_audit_event
from apps.core.students.models import Student

from . import rules
from .models import Batch


EDITABLE_FIELDS = (
    'batch_code',
    'start_year',
    'end_year',
    'course_type',
    'course_duration',
    'is_active',
    'is_graduated',
)
RULE_FIELDS = ('batch_code', 'start_year', 'end_year', 'course_type', 'course_duration')

generate_batch_code = rules.generate_batch_code


def validate_and_derive(batch: Batch) -> Batch:
    """Check the batch rules and set the academic calendar dates. Raises ValidationError."""
    batch.clean()
    return batch


def _new_batch(*, department, batch_code, start_year, end_year, course_type, course_duration, created_by=None):
    batch = Batch(
        department=department,
        batch_code=batch_code,
        start_year=start_year,
        end_year=end_year,
        course_type=course_type,
        course_duration=course_duration,
        created_by=created_by,
    )
    return validate_and_derive(batch)


def create_batch(*, department, created_by=None, **fields) -> Batch:
    batch = _new_batch(department=department, created_by=created_by, **fields)
    batch.save()
    log_audit_event(
        'batch.created',
        actor=created_by,
        department=department,
        target=batch,
        details=f"Created batch {batch.display_name}",
    )
    return batch


def find_or_create_batch(*, department, batch_code, created_by=None, **fields) -> Batch:
    existing = Batch.objects.filter(department=department, batch_code=batch_code).first()
    if existing:
        return existing

    batch = _new_batch(department=department, batch_code=batch_code, created_by=created_by, **fields)
    try:
        with transaction.atomic():
            batch.save()
    except IntegrityError:
        existing = Batch.objects.filter(department=department, batch_code=batch_code).first()
        if existing is None:
            raise
        return existing

    log_audit_event(
        'batch.created',
        actor=created_by,
        department=department,
        target=batch,
        details=f"Created batch {batch.display_name}",
    )
    return batch


def create_intake_batch(*, department, joining_year: int, course_type: str, created_by=None) -> Batch:
    """Find or create the batch a newly admitted cohort belongs to."""
    course_duration = rules.default_course_duration(course_type)
    return find_or_create_batch(
        department=department,
        batch_code=rules.generate_batch_code(joining_year, course_type),
        start_year=joining_year,
        end_year=joining_year + course_duration,
        course_type=course_type,
        course_duration=course_duration,
        created_by=created_by,
    )


def update_batch(batch: Batch, *, updated_by=None, **changes) -> Batch:
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}.")

    candidate = {field: getattr(batch, field) for field in RULE_FIELDS}
    candidate.update({field: value for field, value in changes.items() if field in RULE_FIELDS})
    rules.check_batch_fields(**candidate)

    for field, value in changes.items():
        setattr(batch, field, value)
    if batch.is_graduated:
        batch.is_active = False
    if updated_by is not None:
        batch.updated_by = updated_by
    validate_and_derive(batch)
    try:
        with transaction.atomic():
            batch.save()
    except IntegrityError:
        batch.refresh_from_db()
        raise
    return batch


def list_active_batches(department):
    return Batch.objects.active().for_department(department).order_by('-start_year', 'batch_code')


def list_alumni_batches(department):
    return Batch.objects.alumni().for_department(department).order_by('-end_year', 'batch_code')


def placement_counts(batch: Batch) -> dict:
    counts = Student.objects.filter(batch=batch).aggregate(
        total=Count('id'),
        placed=Count('id', filter=Q(placement_status=Student.PLACEMENT_PLACED)),
        multiple_offers=Count('id', filter=Q(placement_status=Student.PLACEMENT_MULTIPLE_OFFERS)),
    )
    return {key: value or 0 for key, value in counts.items()}


def recompute_statistics(batch: Batch) -> dict:
    counts = placement_counts(batch)
    batch.total_students = counts['total']
    batch.placed_students = counts['placed'] + counts['multiple_offers']
    batch.save(update_fields=['total_students', 'placed_students', 'updated_at'])

    log_audit_event(
        'batch.statistics_refreshed',
        target=batch,
        details=f"total={batch.total_students} placed={batch.placed_students}",
    )
    return {
        'total_students': batch.total_students,
        'placed_students': batch.placed_students,
        'placement_rate': batch.placement_rate,
    }


def refresh_all_statistics(batches=None) -> int:
    if batches is None:
        batches = Batch.objects.active()

    refreshed = 0
    for batch in batches:
        recompute_statistics(batch)
        refreshed += 1
    return refreshed


def placement_summary(batch: Batch) -> dict:
    """Live placement breakdown for a batch; does not touch the cached counters."""
    counts = placement_counts(batch)
    placed = counts['placed'] + counts['multiple_offers']
    return {
        'total_students': counts['total'],
        'unplaced': counts['total'] - placed,
        'placed': counts['placed'],
        'multiple_offers': counts['multiple_offers'],
        'placement_rate': rules.placement_rate(placed, counts['total']),
    }


def department_batch_overview(department, today=None) -> list[dict]:
    today = today or timezone.localdate()
    overview = []
    for batch in list_active_batches(department):
        overview.append({
            'id': batch.pk,
            'batch_code': batch.batch_code,
            'start_year': batch.start_year,
            'end_year': batch.end_year,
            'course_type': batch.course_type,
            'course_duration': batch.course_duration,
            'academic_status': batch.academic_status(today),
            'display_name': batch.display_name,
            'full_display_name': batch.full_display_name(today),
            'is_active': batch.is_active,
            'is_graduated': batch.is_graduated,
            'stats': placement_summary(batch),
        })
    return overview


def graduate_batch(batch: Batch, *, updated_by=None) -> Batch:
    if batch.is_graduated and not batch.is_active:
        return batch

    batch.is_graduated = True
    batch.is_active = False
    update_fields = ['is_graduated', 'is_active', 'updated_at']
    if updated_by is not None:
        batch.updated_by = updated_by
        update_fields.append('updated_by')
    batch.save(update_fields=update_fields)

    log_audit_event(
        'batch.graduated',
        actor=updated_by,
        target=batch,
        details=f"Graduated batch {batch.display_name}",
    )
    return batch


def auto_graduate_completed_batches(today=None) -> list[Batch]:
    """Graduate every active batch whose final academic year has closed."""
    today = today or timezone.localdate()
    graduated = []
    for batch in Batch.objects.active().select_related('department').order_by('end_year', 'id'):
        if batch.should_graduate(today):
            graduate_batch(batch)
            graduated.append(batch)
    return graduated
