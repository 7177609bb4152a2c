from django.contrib import admin

from .models import PlacementOffer, Student


class PlacementOfferInline(admin.TabularInline):
    model = PlacementOffer
    extra = 0


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('student_id', 'full_name', 'department', 'batch', 'placement_status')
    list_filter = ('department', 'batch', 'placement_status')
    search_fields = ('student_id', 'full_name', 'email')
    inlines = [PlacementOfferInline]


@admin.register(PlacementOffer)
class PlacementOfferAdmin(admin.ModelAdmin):
    list_display = ('student', 'company_name', 'job_role', 'ctc', 'joining_date')
    search_fields = ('student__student_id', 'company_name', 'job_role')
