"""
Core App Serializers - User Management
"""

from rest_framework import serializers
from django.contrib.auth import get_user_model

User = get_user_model()


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model (read operations)."""

    class Meta:
        model = User
        fields = [
            'id', 'email', 'name', 'company_name', 'phone',
            'role', 'is_active', 'date_joined'
        ]
        read_only_fields = fields


class CustomerSummarySerializer(serializers.ModelSerializer):
    """Customer row for the admin roster, annotated with order_count."""

    order_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'name', 'email', 'company_name', 'phone', 'date_joined', 'order_count']
        read_only_fields = fields
