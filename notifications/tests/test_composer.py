"""
Message composer tests
"""

from datetime import datetime, timezone as dt_timezone

from django.test import SimpleTestCase

from notifications.composer import compose, format_delivery_date, days_remaining, humanize_status
from notifications.events import NotificationEvent, EventKind, OrderSnapshot, ActorSnapshot
from notifications.recipients import RecipientCategory

NOW = datetime(2025, 1, 1, 6, 30, tzinfo=dt_timezone.utc)


def snapshot(**overrides):
    fields = dict(
        id='5f0c3c1e-2b8e-4a43-9a57-7f3d3b1b2c11',
        order_number='ORD-2025-07',
        status='approved',
        product_type='Switchboard Panel',
        metal_type='CRCA',
        thickness='1.60',
        width='800.00',
        height='2000.00',
        quantity=2,
        color='RAL 7032',
        expected_delivery_date='2025-01-15T06:30:00+00:00',
        customer_id='c1',
        customer_name='Meera Iyer',
        customer_email='meera@example.com',
        customer_phone='9812345678',
        customer_company='Iyer Electricals',
    )
    fields.update(overrides)
    return OrderSnapshot(**fields)


ADMIN_ACTOR = ActorSnapshot(id='a1', name='Admin One', email='admin@vee4group.com', is_admin=True)
CUSTOMER_ACTOR = ActorSnapshot(id='c1', name='Meera Iyer', email='meera@example.com', company='Iyer Electricals')


class FormattingTest(SimpleTestCase):

    def test_delivery_date_format(self):
        self.assertEqual(
            format_delivery_date(datetime(2025, 1, 15, 6, 30, tzinfo=dt_timezone.utc)),
            'Wednesday, January 15, 2025'
        )

    def test_days_remaining_rounds_up(self):
        self.assertEqual(days_remaining(datetime(2025, 1, 15, 6, 30, tzinfo=dt_timezone.utc), NOW), 14)
        self.assertEqual(days_remaining(datetime(2025, 1, 2, 7, 0, tzinfo=dt_timezone.utc), NOW), 2)

    def test_days_remaining_past_date(self):
        self.assertIsNone(days_remaining(datetime(2024, 12, 31, tzinfo=dt_timezone.utc), NOW))

    def test_humanize(self):
        self.assertEqual(humanize_status('quality_check'), 'Quality Check')


class StatusUpdateCompositionTest(SimpleTestCase):

    def test_customer_subject_and_delivery_section(self):
        event = NotificationEvent(EventKind.STATUS_UPDATE, snapshot(), ADMIN_ACTOR, text='Production slot booked.')
        message = compose(event, RecipientCategory.CUSTOMER, NOW)

        self.assertEqual(message.subject, 'Order Status Update - ORD-2025-07')
        self.assertIn('id="expected-delivery"', message.html)
        self.assertIn('Wednesday, January 15, 2025', message.html)
        self.assertIn('14 days remaining', message.html)
        self.assertIn('Production slot booked.', message.html)
        self.assertIn('*ORDER APPROVED!*', message.whatsapp)
        self.assertIn('14 days remaining', message.whatsapp)

    def test_admin_subjects(self):
        cases = [
            ('approved', 'Order Approved - ORD-2025-07'),
            ('rejected', 'Order Rejected - ORD-2025-07'),
            ('powder_coating', 'Order Status Updated by Admin - ORD-2025-07'),
        ]
        for status, subject in cases:
            with self.subTest(status=status):
                event = NotificationEvent(EventKind.STATUS_UPDATE, snapshot(status=status), ADMIN_ACTOR)
                self.assertEqual(compose(event, RecipientCategory.ADMIN, NOW).subject, subject)

    def test_rejected_has_no_delivery_section(self):
        event = NotificationEvent(EventKind.STATUS_UPDATE, snapshot(status='rejected'), ADMIN_ACTOR)
        message = compose(event, RecipientCategory.CUSTOMER, NOW)

        self.assertNotIn('expected-delivery', message.html)
        self.assertNotIn('January 15', message.html)
        self.assertNotIn('Expected Delivery', message.whatsapp)
        self.assertIn('has been rejected', message.whatsapp)

    def test_generic_status_whatsapp(self):
        event = NotificationEvent(
            EventKind.STATUS_UPDATE, snapshot(status='laser_cutting', expected_delivery_date=None), ADMIN_ACTOR
        )
        message = compose(event, RecipientCategory.CUSTOMER, NOW)

        self.assertIn('*LASER CUTTING*', message.whatsapp)
        self.assertNotIn('id="expected-delivery"', message.html)


class OtherEventCompositionTest(SimpleTestCase):

    def test_new_order(self):
        event = NotificationEvent(EventKind.NEW_ORDER, snapshot(status='pending'), CUSTOMER_ACTOR)

        admin = compose(event, RecipientCategory.ADMIN, NOW)
        customer = compose(event, RecipientCategory.CUSTOMER, NOW)

        self.assertEqual(admin.subject, 'New Order Received - ORD-2025-07')
        self.assertEqual(customer.subject, 'Order Confirmation - ORD-2025-07')
        self.assertIn('NEW ORDER RECEIVED', admin.whatsapp)
        self.assertIn('ORDER CONFIRMATION', customer.whatsapp)
        self.assertIn('Switchboard Panel', admin.html)

    def test_customer_message_shows_sender_details(self):
        event = NotificationEvent(EventKind.NEW_MESSAGE, snapshot(), CUSTOMER_ACTOR, text='Need it by Friday')
        message = compose(event, RecipientCategory.ADMIN, NOW)

        self.assertEqual(message.subject, 'New Message - Order ORD-2025-07')
        self.assertIn('Need it by Friday', message.whatsapp)
        self.assertIn('Sender Details', message.whatsapp)

    def test_admin_message_signed_by_team(self):
        event = NotificationEvent(EventKind.NEW_MESSAGE, snapshot(), ADMIN_ACTOR, text='Ready Monday')
        message = compose(event, RecipientCategory.CUSTOMER, NOW)

        self.assertIn('From: Vee4 Group Team', message.whatsapp)
        self.assertNotIn('Sender Details', message.whatsapp)

    def test_document_subjects(self):
        event = NotificationEvent(EventKind.DOCUMENT_UPLOADED, snapshot(), ADMIN_ACTOR, document_kind='test-report')

        self.assertEqual(
            compose(event, RecipientCategory.ADMIN, NOW).subject,
            'Document Uploaded - Test Report for Order ORD-2025-07'
        )
        self.assertEqual(
            compose(event, RecipientCategory.CUSTOMER, NOW).subject,
            'New Document Available - Order ORD-2025-07'
        )

    def test_cancellation_reason(self):
        event = NotificationEvent(
            EventKind.CANCELLATION,
            snapshot(status='cancelled', cancellation_reason='Project on hold'),
            CUSTOMER_ACTOR,
        )
        admin = compose(event, RecipientCategory.ADMIN, NOW)

        self.assertEqual(admin.subject, 'Order Cancelled by Customer - ORD-2025-07')
        self.assertIn('Project on hold', admin.html)
        self.assertIn('Project on hold', admin.whatsapp)

    def test_unknown_kind_rejected(self):
        with self.assertRaises(ValueError):
            NotificationEvent('shipped', snapshot())

    def test_payload_round_trip_keeps_actor(self):
        event = NotificationEvent(EventKind.NEW_MESSAGE, snapshot(), ADMIN_ACTOR, text='hi')
        restored = NotificationEvent.from_payload(event.to_payload())

        self.assertEqual(restored, event)
        self.assertTrue(restored.admin_authored)


class AdminFacingCompositionTest(SimpleTestCase):
    """Admins get their own summary, never the customer's letter."""

    def test_approved(self):
        event = NotificationEvent(EventKind.STATUS_UPDATE, snapshot(), ADMIN_ACTOR, text='Slot booked.')
        message = compose(event, RecipientCategory.ADMIN, NOW)

        self.assertEqual(
            message.whatsapp.splitlines(),
            [
                '✅ *ORDER APPROVED*',
                '',
                'Order ORD-2025-07 has been approved.',
                '',
                'Customer: Meera Iyer (Iyer Electricals)',
                'Expected delivery: Wednesday, January 15, 2025',
                'Message sent: "Slot booked."',
            ]
        )
        self.assertNotIn('Dear Meera Iyer', message.html)
        self.assertIn('Message sent to customer:', message.html)

    def test_rejected_shows_reason(self):
        event = NotificationEvent(
            EventKind.STATUS_UPDATE, snapshot(status='rejected'), ADMIN_ACTOR, text='Drawing incomplete'
        )
        text = compose(event, RecipientCategory.ADMIN, NOW).whatsapp

        self.assertTrue(text.startswith('❌ *ORDER REJECTED*'))
        self.assertIn('Reason: "Drawing incomplete"', text)
        self.assertNotIn('Expected delivery', text)
        self.assertNotIn('Hi Meera Iyer', text)

    def test_free_form_update(self):
        event = NotificationEvent(
            EventKind.STATUS_UPDATE, snapshot(status='powder_coating', customer_company=''), ADMIN_ACTOR
        )
        message = compose(event, RecipientCategory.ADMIN, NOW)

        self.assertIn('status updated by admin to: POWDER COATING', message.whatsapp)
        self.assertIn('Customer: Meera Iyer\n', message.whatsapp)
        self.assertNotIn('Your order', message.whatsapp)
        self.assertNotIn('Your order', message.html)

    def test_document_uploaded(self):
        event = NotificationEvent(EventKind.DOCUMENT_UPLOADED, snapshot(), ADMIN_ACTOR, document_kind='invoice')
        message = compose(event, RecipientCategory.ADMIN, NOW)

        self.assertEqual(
            message.whatsapp,
            '📄 *DOCUMENT UPLOADED*\n\n'
            'Invoice uploaded for order ORD-2025-07\n\n'
            'Customer: Meera Iyer (Iyer Electricals)\n'
            'The customer has been notified.'
        )
        self.assertNotIn('Dear Meera Iyer', message.html)

    def test_cancellation(self):
        event = NotificationEvent(
            EventKind.CANCELLATION,
            snapshot(status='cancelled', cancellation_reason='Project on hold'),
            CUSTOMER_ACTOR,
        )
        message = compose(event, RecipientCategory.ADMIN, NOW)

        self.assertTrue(message.whatsapp.startswith('🔄 *ORDER CANCELLED*'))
        self.assertIn('has been cancelled by customer.', message.whatsapp)
        self.assertIn('Reason: "Project on hold"', message.whatsapp)
        self.assertNotIn('Refund Information', message.whatsapp)
        self.assertNotIn('Refund Information', message.html)

    def test_cancellation_without_reason(self):
        event = NotificationEvent(EventKind.CANCELLATION, snapshot(status='cancelled'), CUSTOMER_ACTOR)
        text = compose(event, RecipientCategory.ADMIN, NOW).whatsapp

        self.assertTrue(text.endswith('No reason provided'))

    def test_customer_still_gets_the_letter(self):
        event = NotificationEvent(EventKind.CANCELLATION, snapshot(status='cancelled'), CUSTOMER_ACTOR)
        message = compose(event, RecipientCategory.CUSTOMER, NOW)

        self.assertIn('Hi Meera Iyer,', message.whatsapp)
        self.assertIn('Refund Information', message.html)
