from django.db import transaction

from .models import AuditLog


def log_audit_event(action, *, actor=None, department=None, target=None, details=''):
    try:
        target_model = ''
        target_id = ''

        if target is not None:
            target_model = target.__class__.__name__
            target_id = str(getattr(target, 'pk', ''))

        if department is None and target is not None:
            department = getattr(target, 'department', None)

        user = actor if actor is not None and getattr(actor, 'is_authenticated', False) else None

        with transaction.atomic():
            return AuditLog.objects.create(
                department=department,
                user=user,
                action=action,
                target_model=target_model,
                target_id=target_id,
                details=details,
            )
    except Exception:
        # Audit writes must never break lifecycle actions.
        return None
