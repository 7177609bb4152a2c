from .models import Department


def normalize_department_code(code):
    if not code:
        return ''
    return code.strip().upper()


def resolve_department(code):
    normalized = normalize_department_code(code)
    if not normalized:
        return None

    return Department.objects.filter(
        code=normalized,
        is_active=True,
    ).first()
