"""
Shared fixtures for order tests.
"""

from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile

from core.models import User, UserRole
from orders.models import Order, OrderStatus


def make_customer(email='customer@example.com', **extra):
    extra.setdefault('name', 'Ravi Kumar')
    extra.setdefault('company_name', 'Kumar Steel Works')
    extra.setdefault('phone', '9876543210')
    return User.objects.create_user(email=email, password='testpass123', role=UserRole.CUSTOMER, **extra)


def make_admin(email='admin@vee4group.com', **extra):
    extra.setdefault('name', 'Admin One')
    extra.setdefault('phone', '+919811111111')
    return User.objects.create_user(email=email, password='testpass123', role=UserRole.ADMIN, **extra)


SPECIFICATION = {
    'product_type': 'Control Panel Enclosure',
    'metal_type': 'Mild Steel',
    'thickness': '2.5',
    'width': '600',
    'height': '800',
    'quantity': '4',
    'color': 'RAL 7035',
    'additional_requirements': 'Powder coat inside and out',
}


def design_upload(name='panel.dxf'):
    return SimpleUploadedFile(name, b'0\nSECTION\n2\nENTITIES\n0\nENDSEC\n0\nEOF\n')


def make_order(customer, status=OrderStatus.PENDING, number='ORD-2025-01', **extra):
    """Insert an order row directly, bypassing placement side effects."""
    fields = {
        'product_type': 'Cable Tray',
        'metal_type': 'Stainless Steel 304',
        'thickness': Decimal('1.5'),
        'width': Decimal('300'),
        'height': Decimal('50'),
        'quantity': 10,
        'color': 'Natural',
        'design_file': 'designs/tray.dxf',
    }
    fields.update(extra)
    return Order.objects.create(order_number=number, customer=customer, status=status, **fields)
