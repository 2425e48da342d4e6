"""
Django Admin configuration for NOTIFICATIONS app.
"""

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('created_at', 'recipient', 'title', 'type', 'order_number', 'is_read')
    list_filter = ('type', 'is_read', 'created_at')
    search_fields = ('title', 'message', 'order_number', 'recipient__email', 'recipient__name')
    ordering = ('-created_at',)
    readonly_fields = ('recipient', 'title', 'message', 'type', 'order_id', 'order_number', 'created_at')
    actions = ['mark_read']

    @admin.action(description="Mark selected as read")
    def mark_read(self, request, queryset):
        updated = queryset.update(is_read=True)
        self.message_user(request, f"{updated} notification(s) marked as read.")
