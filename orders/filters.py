"""
Orders App Filters - Admin order list
"""

import django_filters
from django.db.models import Q

from .models import Order, OrderStatus


class AdminOrderFilter(django_filters.FilterSet):
    """status, customer name/company pattern and a created-at date range."""

    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    customer = django_filters.CharFilter(method='filter_customer')
    start_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    end_date = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = Order
        fields = ['status', 'customer', 'start_date', 'end_date']

    def filter_customer(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(customer__name__icontains=value) | Q(customer__company_name__icontains=value)
        )
