from django.contrib import admin, messages

from .models import Batch
from .services import graduate_batch, recompute_statistics


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = (
        'batch_code',
        'course_type',
        'department',
        'academic_status',
        'is_active',
        'is_graduated',
        'total_students',
        'placed_students',
        'placement_rate',
    )
    list_filter = ('department', 'course_type', 'is_active', 'is_graduated')
    search_fields = ('batch_code', 'department__code', 'department__name')
    readonly_fields = (
        'academic_year_start',
        'academic_year_end',
        'total_students',
        'placed_students',
        'created_by',
        'updated_by',
        'created_at',
        'updated_at',
    )
    actions = ('mark_graduated', 'refresh_statistics')

    def save_model(self, request, obj, form, change):
        if change:
            obj.updated_by = request.user
        else:
            obj.created_by = request.user
        if obj.is_graduated:
            obj.is_active = False
        super().save_model(request, obj, form, change)

    @admin.action(description='Mark selected batches as graduated')
    def mark_graduated(self, request, queryset):
        count = 0
        for batch in queryset:
            if batch.is_graduated and not batch.is_active:
                continue
            graduate_batch(batch, updated_by=request.user)
            count += 1
        self.message_user(request, f'{count} batch(es) marked as graduated.', messages.SUCCESS)

    @admin.action(description='Recompute placement statistics')
    def refresh_statistics(self, request, queryset):
        for batch in queryset:
            recompute_statistics(batch)
        self.message_user(request, f'Statistics refreshed for {queryset.count()} batch(es).', messages.SUCCESS)
