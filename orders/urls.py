"""
Orders App URLs
"""

from django.urls import path, include
from rest_framework.routers import SimpleRouter

from .views import CustomerOrderViewSet, AdminOrderViewSet

router = SimpleRouter()
router.register(r'orders', CustomerOrderViewSet, basename='order')
router.register(r'admin/orders', AdminOrderViewSet, basename='admin-order')

urlpatterns = [
    path('', include(router.urls)),
]
