import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('departments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('batch_code', models.CharField(max_length=9, validators=[django.core.validators.RegexValidator('^\\d{4}-\\d{4}$', 'Batch code must be in format YYYY-YYYY.')])),
                ('start_year', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(2020), django.core.validators.MaxValueValidator(2050)])),
                ('end_year', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(2022), django.core.validators.MaxValueValidator(2055)])),
                ('course_type', models.CharField(choices=[('UG', 'UG'), ('PG', 'PG'), ('Diploma', 'Diploma'), ('Certificate', 'Certificate')], max_length=20)),
                ('course_duration', models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(6)])),
                ('is_active', models.BooleanField(default=True)),
                ('is_graduated', models.BooleanField(default=False)),
                ('academic_year_start', models.DateField(editable=False)),
                ('academic_year_end', models.DateField(editable=False)),
                ('total_students', models.PositiveIntegerField(default=0, editable=False)),
                ('placed_students', models.PositiveIntegerField(default=0, editable=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_batches', to=settings.AUTH_USER_MODEL)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='batches', to='departments.department')),
                ('updated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='updated_batches', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'batches',
                'ordering': ['-start_year', 'batch_code', 'id'],
                'indexes': [
                    models.Index(fields=['batch_code'], name='batch_code_idx'),
                    models.Index(fields=['department'], name='batch_department_idx'),
                    models.Index(fields=['start_year', 'end_year'], name='batch_year_span_idx'),
                    models.Index(fields=['course_type'], name='batch_course_type_idx'),
                    models.Index(fields=['is_active'], name='batch_is_active_idx'),
                    models.Index(fields=['is_graduated'], name='batch_is_graduated_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('department', 'batch_code'), name='unique_batch_code_per_department'),
                    models.CheckConstraint(condition=models.Q(('end_year__gt', models.F('start_year'))), name='batch_end_year_after_start_year'),
                    models.CheckConstraint(condition=models.Q(('course_duration', models.F('end_year') - models.F('start_year'))), name='batch_duration_matches_year_span'),
                ],
            },
        ),
    ]
