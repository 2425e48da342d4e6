"""
Order numbering & production progress tests
"""

from datetime import datetime, timezone as dt_timezone

from django.db import transaction
from django.test import TestCase
from django.utils import timezone

from orders.models import OrderSequence, OrderStatus
from orders.services.numbering import format_order_number, next_order_number
from orders.services.progress import production_progress, current_step
from .helpers import make_customer, make_order

MID_2025 = datetime(2025, 7, 1, 12, 0, tzinfo=dt_timezone.utc)


class OrderNumberTest(TestCase):

    def test_format(self):
        self.assertEqual(format_order_number(2025, 1), 'ORD-2025-01')
        self.assertEqual(format_order_number(2025, 123), 'ORD-2025-123')

    def test_sequential_within_year(self):
        with transaction.atomic():
            first = next_order_number(MID_2025)
            second = next_order_number(MID_2025)

        self.assertEqual(first, 'ORD-2025-01')
        self.assertEqual(second, 'ORD-2025-02')
        self.assertEqual(OrderSequence.objects.get(year=2025).last_value, 2)

    def test_seeded_from_existing_orders(self):
        """A year's sequence starts after the orders already on record."""
        customer = make_customer()
        make_order(customer, number='ORD-LEGACY-1')
        make_order(customer, number='ORD-LEGACY-2')
        year = timezone.localtime().year

        with transaction.atomic():
            number = next_order_number()

        self.assertEqual(number, format_order_number(year, 3))

    def test_years_are_independent(self):
        with transaction.atomic():
            next_order_number(MID_2025)
            number = next_order_number(datetime(2026, 2, 1, tzinfo=dt_timezone.utc))

        self.assertEqual(number, 'ORD-2026-01')

    def test_numbers_not_reused_after_delete(self):
        customer = make_customer()
        with transaction.atomic():
            order = make_order(customer, number=next_order_number(MID_2025))
        order.delete()

        with transaction.atomic():
            self.assertEqual(next_order_number(MID_2025), 'ORD-2025-02')


class ProductionProgressTest(TestCase):

    def completed_steps(self, status):
        return [step['step'] for step in production_progress(status)['steps'] if step['completed']]

    def test_eleven_steps(self):
        progress = production_progress(OrderStatus.PENDING)
        self.assertEqual(progress['total_steps'], 11)
        self.assertEqual(progress['steps'][0]['title'], 'Order Received')
        self.assertEqual(progress['steps'][-1]['title'], 'Dispatch')

    def test_pending(self):
        self.assertEqual(current_step(OrderStatus.PENDING), 1)
        self.assertEqual(self.completed_steps(OrderStatus.PENDING), [1])

    def test_mid_production(self):
        self.assertEqual(current_step(OrderStatus.FABRICATION_WELDING), 6)
        self.assertEqual(self.completed_steps(OrderStatus.FABRICATION_WELDING), [1, 2, 3, 4, 5, 6])

    def test_completed_marks_everything(self):
        self.assertEqual(current_step(OrderStatus.COMPLETED), 11)
        self.assertEqual(self.completed_steps(OrderStatus.COMPLETED), list(range(1, 12)))

    def test_rejected_and_cancelled_stay_on_first_step(self):
        for status in (OrderStatus.REJECTED, OrderStatus.CANCELLED):
            with self.subTest(status=status):
                self.assertEqual(current_step(status), 1)
                self.assertEqual(self.completed_steps(status), [1])
