"""
Admin configuration for the scheduling app.
"""

from django.contrib import admin
from .models import ScheduledClass


@admin.register(ScheduledClass)
class ScheduledClassAdmin(admin.ModelAdmin):
    """Admin interface for ScheduledClass model."""

    list_display = ['name', 'club_id', 'court_number', 'trainer_name', 'start_time',
                    'recurrence_type', 'start_date', 'end_date', 'is_active']
    list_filter = ['is_active', 'recurrence_type', 'club_id', 'court_number']
    search_fields = ['name', 'trainer_name', 'club_id']
    date_hierarchy = 'start_date'

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'club_id', 'is_active')
        }),
        ('Resources', {
            'fields': ('court_number', 'trainer_id', 'trainer_name')
        }),
        ('Schedule', {
            'fields': ('recurrence_type', 'days_of_week', 'start_time', 'duration_minutes')
        }),
        ('Boundaries', {
            'fields': ('start_date', 'end_date')
        }),
        ('Enrollment', {
            'fields': ('level_from', 'level_to', 'monthly_price', 'max_participants', 'participant_ids')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    readonly_fields = ['created_at', 'updated_at']
