"""
ORDERS App - Order lookup with ownership checks
"""

from django.core.exceptions import ValidationError as DjangoValidationError

from orders.exceptions import NotFoundError, AuthorizationError
from orders.models import Order


def get_order(order_id, for_update: bool = False) -> Order:
    queryset = Order.objects.select_related('customer')
    if for_update:
        queryset = queryset.select_for_update(of=('self',))
    try:
        return queryset.get(pk=order_id)
    except (Order.DoesNotExist, DjangoValidationError, ValueError):
        raise NotFoundError('Order not found.')


def ensure_can_access(order: Order, user):
    """Admins see every order; customers only their own."""
    if user.is_admin:
        return
    if order.customer_id != user.pk:
        raise AuthorizationError('Not authorized to access this order.')


def ensure_admin(user):
    if not user.is_admin:
        raise AuthorizationError('Access denied. Admin only.')


def get_order_for_user(order_id, user, for_update: bool = False) -> Order:
    order = get_order(order_id, for_update=for_update)
    ensure_can_access(order, user)
    return order
