from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator, RegexValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from apps.core.departments.models import Department
from apps.core.utils.managers import DepartmentManager, DepartmentQuerySet

from . import rules


class BatchQuerySet(DepartmentQuerySet):
    def active(self):
        return self.filter(is_active=True, is_graduated=False)

    def alumni(self):
        return self.filter(is_graduated=True)


class BatchManager(DepartmentManager):
    queryset_class = BatchQuerySet

    def active(self):
        return self.get_queryset().active()

    def alumni(self):
        return self.get_queryset().alumni()


class Batch(models.Model):
    COURSE_UG = rules.COURSE_UG
    COURSE_PG = rules.COURSE_PG
    COURSE_DIPLOMA = rules.COURSE_DIPLOMA
    COURSE_CERTIFICATE = rules.COURSE_CERTIFICATE
    COURSE_TYPE_CHOICES = rules.COURSE_TYPE_CHOICES

    batch_code = models.CharField(
        max_length=9,
        validators=[RegexValidator(rules.BATCH_CODE_PATTERN, 'Batch code must be in format YYYY-YYYY.')],
    )  # e.g. 2024-2028
    start_year = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(rules.START_YEAR_RANGE[0]), MaxValueValidator(rules.START_YEAR_RANGE[1])],
    )
    end_year = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(rules.END_YEAR_RANGE[0]), MaxValueValidator(rules.END_YEAR_RANGE[1])],
    )
    course_type = models.CharField(max_length=20, choices=COURSE_TYPE_CHOICES)
    course_duration = models.PositiveSmallIntegerField(
        validators=[
            MinValueValidator(rules.COURSE_DURATION_RANGE[0]),
            MaxValueValidator(rules.COURSE_DURATION_RANGE[1]),
        ],
    )

    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name='batches',
    )
    objects = BatchManager()

    is_active = models.BooleanField(default=True)
    is_graduated = models.BooleanField(default=False)

    # April 1 of start_year to March 31 of end_year; set by clean().
    academic_year_start = models.DateField(editable=False)
    academic_year_end = models.DateField(editable=False)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_batches',
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='updated_batches',
    )

    total_students = models.PositiveIntegerField(default=0, editable=False)
    placed_students = models.PositiveIntegerField(default=0, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-start_year', 'batch_code', 'id']
        verbose_name_plural = 'batches'
        constraints = [
            models.UniqueConstraint(
                fields=['department', 'batch_code'],
                name='unique_batch_code_per_department',
            ),
            models.CheckConstraint(
                condition=Q(end_year__gt=F('start_year')),
                name='batch_end_year_after_start_year',
            ),
            models.CheckConstraint(
                condition=Q(course_duration=F('end_year') - F('start_year')),
                name='batch_duration_matches_year_span',
            ),
        ]
        indexes = [
            models.Index(fields=['batch_code'], name='batch_code_idx'),
            models.Index(fields=['department'], name='batch_department_idx'),
            models.Index(fields=['start_year', 'end_year'], name='batch_year_span_idx'),
            models.Index(fields=['course_type'], name='batch_course_type_idx'),
            models.Index(fields=['is_active'], name='batch_is_active_idx'),
            models.Index(fields=['is_graduated'], name='batch_is_graduated_idx'),
        ]

    def clean(self):
        super().clean()
        rules.check_batch_fields(
            batch_code=self.batch_code,
            start_year=self.start_year,
            end_year=self.end_year,
            course_type=self.course_type,
            course_duration=self.course_duration,
        )
        self.academic_year_start, self.academic_year_end = rules.academic_year_bounds(
            self.start_year,
            self.end_year,
        )

    @property
    def display_name(self):
        return f"{self.batch_code} {self.course_type}"

    @property
    def placement_rate(self):
        return rules.placement_rate(self.placed_students, self.total_students)

    def current_academic_year(self, today=None):
        today = today or timezone.localdate()
        return rules.current_academic_year(self.start_year, self.course_duration, today)

    def academic_status(self, today=None):
        return rules.academic_status_label(
            is_graduated=self.is_graduated,
            year_in_course=self.current_academic_year(today),
            course_duration=self.course_duration,
        )

    def full_display_name(self, today=None):
        return f"{self.display_name} ({self.academic_status(today)})"

    def should_graduate(self, today=None):
        return rules.should_graduate(self.end_year, today or timezone.localdate())

    def __str__(self):
        return f"{self.display_name} - {self.department.code}"
