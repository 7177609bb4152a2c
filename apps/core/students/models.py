from django.db import models

from apps.core.batches.models import Batch
from apps.core.departments.models import Department
from apps.core.utils.managers import DepartmentManager


class Student(models.Model):
    PLACEMENT_UNPLACED = 'Unplaced'
    PLACEMENT_PLACED = 'Placed'
    PLACEMENT_MULTIPLE_OFFERS = 'Multiple Offers'
    PLACEMENT_STATUS_CHOICES = (
        (PLACEMENT_UNPLACED, 'Unplaced'),
        (PLACEMENT_PLACED, 'Placed'),
        (PLACEMENT_MULTIPLE_OFFERS, 'Multiple Offers'),
    )
    PLACED_STATUSES = (PLACEMENT_PLACED, PLACEMENT_MULTIPLE_OFFERS)

    department = models.ForeignKey(Department, on_delete=models.PROTECT, related_name='students')
    batch = models.ForeignKey(
        Batch,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='students',
    )
    objects = DepartmentManager()

    student_id = models.CharField(max_length=50, unique=True)  # university register number
    full_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    placement_status = models.CharField(
        max_length=20,
        choices=PLACEMENT_STATUS_CHOICES,
        default=PLACEMENT_UNPLACED,
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['student_id', 'id']
        indexes = [
            models.Index(fields=['batch', 'placement_status'], name='student_batch_status_idx'),
            models.Index(fields=['department'], name='student_department_idx'),
        ]

    @property
    def is_placed(self):
        return self.placement_status in self.PLACED_STATUSES

    def __str__(self):
        return f"{self.student_id} - {self.full_name}"


class PlacementOffer(models.Model):
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='offers')
    company_name = models.CharField(max_length=200)
    job_role = models.CharField(max_length=200, blank=True)
    ctc = models.CharField(max_length=50, blank=True)  # free text, e.g. "12 LPA"
    joining_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.company_name} offer for {self.student.student_id}"
