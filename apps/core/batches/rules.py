"""
Batch lifecycle rules.

Pure functions over plain values so the academic calendar can be evaluated
for any date. The academic year runs April 1 to March 31.
"""
from __future__ import annotations

import re
from datetime import date

from django.core.exceptions import ValidationError


COURSE_UG = 'UG'
COURSE_PG = 'PG'
COURSE_DIPLOMA = 'Diploma'
COURSE_CERTIFICATE = 'Certificate'
COURSE_TYPE_CHOICES = (
    (COURSE_UG, 'UG'),
    (COURSE_PG, 'PG'),
    (COURSE_DIPLOMA, 'Diploma'),
    (COURSE_CERTIFICATE, 'Certificate'),
)
COURSE_TYPES = tuple(choice[0] for choice in COURSE_TYPE_CHOICES)

DEFAULT_COURSE_DURATIONS = {
    COURSE_UG: 4,
    COURSE_PG: 2,
    COURSE_DIPLOMA: 3,
    COURSE_CERTIFICATE: 1,
}
FALLBACK_COURSE_DURATION = 4

BATCH_CODE_PATTERN = r'^\d{4}-\d{4}$'
START_YEAR_RANGE = (2020, 2050)
END_YEAR_RANGE = (2022, 2055)
COURSE_DURATION_RANGE = (1, 6)

ACADEMIC_YEAR_START_MONTH = 4
ALUMNI_STATUS = 'Alumni'
YEAR_LABELS = ('', '1st Year', '2nd Year', '3rd Year', '4th Year', '5th Year', '6th Year')

_batch_code_re = re.compile(BATCH_CODE_PATTERN)


def _in_range(value, bounds):
    low, high = bounds
    return isinstance(value, int) and not isinstance(value, bool) and low <= value <= high


def check_batch_fields(*, batch_code, start_year, end_year, course_type, course_duration):
    """Raise ValidationError for the first field that breaks a batch rule."""
    if not isinstance(batch_code, str) or not _batch_code_re.match(batch_code):
        raise ValidationError({'batch_code': 'Batch code must be in format YYYY-YYYY.'})

    if not _in_range(start_year, START_YEAR_RANGE):
        raise ValidationError({
            'start_year': 'Start year must be between %d and %d.' % START_YEAR_RANGE,
        })

    if not _in_range(end_year, END_YEAR_RANGE):
        raise ValidationError({
            'end_year': 'End year must be between %d and %d.' % END_YEAR_RANGE,
        })

    if course_type not in COURSE_TYPES:
        raise ValidationError({
            'course_type': 'Course type must be UG, PG, Diploma, or Certificate.',
        })

    if not _in_range(course_duration, COURSE_DURATION_RANGE):
        raise ValidationError({
            'course_duration': 'Course duration must be between %d and %d years.' % COURSE_DURATION_RANGE,
        })

    if end_year <= start_year:
        raise ValidationError({'end_year': 'End year must be greater than start year.'})

    expected_duration = end_year - start_year
    if course_duration != expected_duration:
        raise ValidationError({
            'course_duration': (
                f'Course duration ({course_duration}) must match year difference ({expected_duration}).'
            ),
        })


def academic_year_bounds(start_year: int, end_year: int) -> tuple[date, date]:
    return date(start_year, ACADEMIC_YEAR_START_MONTH, 1), date(end_year, 3, 31)


def academic_start_year(today: date) -> int:
    if today.month >= ACADEMIC_YEAR_START_MONTH:
        return today.year
    return today.year - 1


def current_academic_year(start_year: int, course_duration: int, today: date) -> int:
    year_in_course = academic_start_year(today) - start_year + 1
    return min(max(year_in_course, 1), course_duration)


def year_label(year_in_course: int) -> str:
    if 0 < year_in_course < len(YEAR_LABELS):
        return YEAR_LABELS[year_in_course]
    return f'{year_in_course}th Year'


def academic_status_label(*, is_graduated: bool, year_in_course: int, course_duration: int) -> str:
    if is_graduated or year_in_course > course_duration:
        return ALUMNI_STATUS
    return year_label(year_in_course)


def should_graduate(end_year: int, today: date) -> bool:
    """True once the March 31 close of the final academic year has passed."""
    if today.year > end_year:
        return True
    return today.year == end_year and today.month > 3


def placement_rate(placed_students: int, total_students: int) -> int:
    if not total_students:
        return 0
    # Integer half-up rounding of placed / total * 100.
    return (placed_students * 200 + total_students) // (total_students * 2)


def default_course_duration(course_type: str) -> int:
    return DEFAULT_COURSE_DURATIONS.get(course_type, FALLBACK_COURSE_DURATION)


def generate_batch_code(start_year: int, course_type: str) -> str:
    end_year = start_year + default_course_duration(course_type)
    return f'{start_year}-{end_year}'
