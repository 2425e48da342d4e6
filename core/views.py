"""
Core App Views - User Management API
"""

from rest_framework import viewsets, permissions
from rest_framework.decorators import action
from rest_framework.response import Response
from django.contrib.auth import get_user_model
from django.db.models import Count

from .serializers import UserSerializer, CustomerSummarySerializer
from .models import UserRole

User = get_user_model()


class IsAdminUser(permissions.BasePermission):
    """Permission for admin users only."""

    message = 'Access denied. Admin only.'

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role == UserRole.ADMIN


class IsCustomer(permissions.BasePermission):
    """Permission for customer users only."""

    message = 'Access denied. Customers only.'

    def has_permission(self, request, view):
        return request.user.is_authenticated and request.user.role == UserRole.CUSTOMER


class UserViewSet(viewsets.GenericViewSet):
    """
    ViewSet for account lookups.

    - me: any authenticated user
    - customers: Admin only
    """

    queryset = User.objects.all()
    serializer_class = UserSerializer

    @action(detail=False, methods=['get'])
    def me(self, request):
        """Get current user profile."""
        serializer = self.get_serializer(request.user)
        return Response({'success': True, 'user': serializer.data})

    @action(detail=False, methods=['get'], permission_classes=[IsAdminUser])
    def customers(self, request):
        """List all customers with their order counts (Admin only)."""
        customers = (
            User.objects.filter(role=UserRole.CUSTOMER)
            .annotate(order_count=Count('orders'))
            .order_by('-date_joined')
        )
        serializer = CustomerSummarySerializer(customers, many=True)
        return Response({'success': True, 'customers': serializer.data})
