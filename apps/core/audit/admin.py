from django.contrib import admin

from .models import AuditLog


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ('action', 'target_model', 'target_id', 'department', 'user', 'created_at')
    list_filter = ('action', 'department')
    search_fields = ('action', 'target_id', 'details')
    readonly_fields = (
        'department',
        'user',
        'action',
        'target_model',
        'target_id',
        'details',
        'created_at',
    )
