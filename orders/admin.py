"""
Django Admin configuration for ORDERS app.
"""

from django.contrib import admin
from .models import Order, Message, OrderSequence


class MessageInline(admin.TabularInline):
    model = Message
    extra = 0
    fields = ('sender', 'content', 'is_system_message', 'created_at')
    readonly_fields = ('sender', 'content', 'is_system_message', 'created_at')
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """
    Read-mostly view of orders. Status changes go through the API so that
    messages and notifications follow them.
    """

    list_display = (
        'order_number', 'customer', 'product_type', 'metal_type',
        'quantity', 'status', 'expected_delivery_date', 'created_at'
    )
    list_filter = ('status', 'metal_type', 'created_at')
    search_fields = ('order_number', 'customer__name', 'customer__email', 'customer__company_name')
    raw_id_fields = ('customer',)
    readonly_fields = (
        'order_number', 'status', 'cancelled_at', 'cancellation_reason',
        'created_at', 'updated_at'
    )
    date_hierarchy = 'created_at'
    inlines = [MessageInline]

    fieldsets = (
        ('Order', {
            'fields': ('order_number', 'customer', 'status', 'expected_delivery_date')
        }),
        ('Specification', {
            'fields': (
                'product_type', 'metal_type', 'thickness', 'width', 'height',
                'quantity', 'color', 'additional_requirements'
            )
        }),
        ('Documents', {
            'fields': ('design_file', 'test_report', 'invoice')
        }),
        ('Cancellation', {
            'fields': ('cancelled_at', 'cancellation_reason'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(OrderSequence)
class OrderSequenceAdmin(admin.ModelAdmin):
    list_display = ('year', 'last_value')
    ordering = ('-year',)
