from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import transaction

from .models import PlacementOffer, Student


@transaction.atomic
def update_placement_status(student: Student, status: str, offer: dict | None = None):
    """Set the student's placement status, recording the offer that caused it if given."""
    allowed_statuses = {choice[0] for choice in Student.PLACEMENT_STATUS_CHOICES}
    if status not in allowed_statuses:
        raise ValidationError({'placement_status': 'Invalid placement status.'})

    company_name = ''
    if offer:
        company_name = (offer.get('company_name') or '').strip()
        if not company_name:
            raise ValidationError({'company_name': 'Company name is required for an offer.'})

    if student.placement_status != status:
        student.placement_status = status
        student.save(update_fields=['placement_status', 'updated_at'])

    if offer:
        PlacementOffer.objects.create(
            student=student,
            company_name=company_name,
            job_role=offer.get('job_role', ''),
            ctc=offer.get('ctc', ''),
            joining_date=offer.get('joining_date'),
        )

    return student
