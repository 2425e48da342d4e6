"""
Order state machine tests

Covers:
1. Placement (validation, numbering, welcome message, admin alerts)
2. Strict transitions: approve / reject / cancel
3. Free-form admin status update
4. Document attachment
"""

from datetime import datetime, timedelta, timezone as dt_timezone
from unittest.mock import patch

from django.core.files.storage import default_storage
from django.test import TestCase

from notifications.models import Notification, NotificationType
from orders.exceptions import ValidationError, PreconditionError, AuthorizationError, NotFoundError
from orders.models import Order, Message, OrderStatus
from orders.services import lifecycle
from orders.services.conversation import post_message
from .helpers import make_customer, make_admin, make_order, SPECIFICATION, design_upload

FIXED_NOW = datetime(2025, 3, 10, 6, 30, tzinfo=dt_timezone.utc)


class PlaceOrderTest(TestCase):

    def setUp(self):
        self.customer = make_customer()
        self.admin = make_admin()
        self.second_admin = make_admin(email='ops@vee4group.com', name='Ops Desk', phone='')

    def test_order_is_pending_and_numbered(self):
        order = lifecycle.place_order(self.customer, dict(SPECIFICATION), design_upload())

        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertRegex(order.order_number, r'^ORD-\d{4}-01$')
        self.assertEqual(order.quantity, 4)
        self.assertEqual(str(order.thickness), '2.5')

    def test_design_file_stored(self):
        order = lifecycle.place_order(self.customer, dict(SPECIFICATION), design_upload('box.dxf'))

        self.assertTrue(order.design_file.startswith(f"designs/{order.order_number}/"))
        self.assertTrue(default_storage.exists(order.design_file))

    def test_existing_locator_kept(self):
        order = lifecycle.place_order(self.customer, dict(SPECIFICATION), 's3://bucket/design.dxf')
        self.assertEqual(order.design_file, 's3://bucket/design.dxf')

    def test_welcome_message_from_first_admin(self):
        order = lifecycle.place_order(self.customer, dict(SPECIFICATION), design_upload())

        messages = list(order.messages.all())
        self.assertEqual(len(messages), 1)
        self.assertTrue(messages[0].is_system_message)
        self.assertEqual(messages[0].sender, self.admin)
        self.assertIn('Thank you for your order', messages[0].content)

    def test_every_admin_notified(self):
        order = lifecycle.place_order(self.customer, dict(SPECIFICATION), design_upload())

        notes = Notification.objects.filter(order_id=order.id)
        self.assertEqual(notes.count(), 2)
        self.assertEqual(
            set(notes.values_list('recipient_id', flat=True)),
            {self.admin.id, self.second_admin.id}
        )
        note = notes.first()
        self.assertEqual(note.title, 'New Order Received')
        self.assertIn('Ravi Kumar from Kumar Steel Works', note.message)
        self.assertFalse(Notification.objects.filter(recipient=self.customer).exists())

    def test_missing_fields_listed(self):
        data = dict(SPECIFICATION, color='', quantity=None)
        with self.assertRaises(ValidationError) as ctx:
            lifecycle.place_order(self.customer, data, design_upload())

        self.assertEqual(ctx.exception.fields, ['quantity', 'color'])
        self.assertIn('quantity, color', str(ctx.exception))
        self.assertEqual(Order.objects.count(), 0)

    def test_non_positive_dimensions_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            lifecycle.place_order(self.customer, dict(SPECIFICATION, width='-5', quantity='0'), design_upload())
        self.assertEqual(ctx.exception.fields, ['width', 'quantity'])

    def test_design_file_required(self):
        with self.assertRaises(ValidationError):
            lifecycle.place_order(self.customer, dict(SPECIFICATION), None)

    def test_admin_cannot_place(self):
        with self.assertRaises(AuthorizationError):
            lifecycle.place_order(self.admin, dict(SPECIFICATION), design_upload())

    def test_welcome_message_without_admins(self):
        self.admin.delete()
        self.second_admin.delete()

        order = lifecycle.place_order(self.customer, dict(SPECIFICATION), design_upload())
        message = order.messages.get()
        self.assertIsNone(message.sender)
        self.assertEqual(message.sender_display_name, 'Vee4 Group')

    def test_fanout_queued_after_commit(self):
        with patch('notifications.tasks.dispatch_event.delay') as mock_delay:
            with self.captureOnCommitCallbacks(execute=False) as callbacks:
                lifecycle.place_order(self.customer, dict(SPECIFICATION), design_upload())
            mock_delay.assert_not_called()

            for callback in callbacks:
                callback()

        mock_delay.assert_called_once()
        payload = mock_delay.call_args[0][0]
        self.assertEqual(payload['kind'], 'new_order')
        self.assertEqual(payload['actor']['email'], self.customer.email)


class ApproveOrderTest(TestCase):

    def setUp(self):
        self.customer = make_customer()
        self.admin = make_admin()
        self.order = make_order(self.customer)

    def test_default_delivery_is_fourteen_days(self):
        with patch('django.utils.timezone.now', return_value=FIXED_NOW):
            order = lifecycle.approve_order(self.order.id, self.admin)

        self.assertEqual(order.status, OrderStatus.APPROVED)
        self.assertEqual(order.expected_delivery_date, FIXED_NOW + timedelta(days=14))

    def test_supplied_delivery_date_preserved(self):
        promised = datetime(2025, 6, 1, 12, 0, tzinfo=dt_timezone.utc)
        order = lifecycle.approve_order(self.order.id, self.admin, expected_delivery_date=promised)

        order.refresh_from_db()
        self.assertEqual(order.expected_delivery_date, promised)

    def test_side_effects(self):
        lifecycle.approve_order(self.order.id, self.admin)

        message = Message.objects.get(order=self.order)
        self.assertEqual(message.sender, self.admin)
        self.assertFalse(message.is_system_message)
        self.assertIn('Expected delivery date:', message.content)

        note = Notification.objects.get(recipient=self.customer)
        self.assertEqual(note.title, 'Order Approved')
        self.assertIn('has been approved with expected delivery on', note.message)

    def test_custom_message_used(self):
        lifecycle.approve_order(self.order.id, self.admin, message='Cutting starts Monday.')
        self.assertEqual(Message.objects.get(order=self.order).content, 'Cutting starts Monday.')

    def test_silent_approval(self):
        order = lifecycle.approve_order(self.order.id, self.admin, notify=False)

        self.assertEqual(order.status, OrderStatus.APPROVED)
        self.assertFalse(Message.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_only_pending_can_be_approved(self):
        self.order.status = OrderStatus.DESIGNING
        self.order.save()

        with self.assertRaises(PreconditionError) as ctx:
            lifecycle.approve_order(self.order.id, self.admin)

        self.assertEqual(ctx.exception.current, OrderStatus.DESIGNING)
        self.assertEqual(ctx.exception.requested, OrderStatus.APPROVED)
        self.assertIn('designing', str(ctx.exception))
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.DESIGNING)
        self.assertIsNone(self.order.expected_delivery_date)

    def test_customer_cannot_approve(self):
        with self.assertRaises(AuthorizationError):
            lifecycle.approve_order(self.order.id, self.customer)

    def test_unknown_order(self):
        with self.assertRaises(NotFoundError):
            lifecycle.approve_order('not-a-uuid', self.admin)

    def test_updated_at_refreshed(self):
        before = Order.objects.get(pk=self.order.pk).updated_at
        later = datetime.now(dt_timezone.utc) + timedelta(minutes=5)
        with patch('django.utils.timezone.now', return_value=later):
            lifecycle.approve_order(self.order.id, self.admin)

        self.order.refresh_from_db()
        self.assertGreater(self.order.updated_at, before)


class RejectOrderTest(TestCase):

    def setUp(self):
        self.customer = make_customer()
        self.admin = make_admin()
        self.order = make_order(self.customer)

    def test_pending_to_rejected(self):
        order = lifecycle.reject_order(self.order.id, self.admin)

        self.assertEqual(order.status, OrderStatus.REJECTED)
        self.assertEqual(Message.objects.get(order=order).content, lifecycle.REJECTION_MESSAGE)
        note = Notification.objects.get(recipient=self.customer)
        self.assertEqual(note.title, 'Order Rejected')
        self.assertEqual(note.message, f"Your order #{order.order_number} has been rejected")

    def test_approved_cannot_be_rejected(self):
        lifecycle.approve_order(self.order.id, self.admin, notify=False)

        with self.assertRaises(PreconditionError):
            lifecycle.reject_order(self.order.id, self.admin)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.APPROVED)


class CancelOrderTest(TestCase):

    def setUp(self):
        self.customer = make_customer()
        self.admin = make_admin()

    def test_cancellable_statuses(self):
        for index, status in enumerate([OrderStatus.PENDING, OrderStatus.APPROVED, OrderStatus.DESIGNING]):
            with self.subTest(status=status):
                order = make_order(self.customer, status=status, number=f"ORD-2025-1{index}")
                cancelled = lifecycle.cancel_order(order.id, self.customer, 'Budget cut')

                self.assertEqual(cancelled.status, OrderStatus.CANCELLED)
                self.assertIsNotNone(cancelled.cancelled_at)
                self.assertEqual(cancelled.cancellation_reason, 'Budget cut')
                self.assertTrue(cancelled.is_terminal)

    def test_default_reason_and_side_effects(self):
        order = make_order(self.customer)
        lifecycle.cancel_order(order.id, self.customer, '   ')

        order.refresh_from_db()
        self.assertEqual(order.cancellation_reason, 'Cancelled by customer')

        message = Message.objects.get(order=order)
        self.assertTrue(message.is_system_message)
        self.assertEqual(message.sender, self.customer)
        self.assertEqual(message.content, 'Order has been cancelled. Reason: Cancelled by customer')

        note = Notification.objects.get(recipient=self.admin)
        self.assertEqual(note.title, 'Order Cancelled')
        self.assertEqual(note.message, f"Order {order.order_number} has been cancelled by Ravi Kumar")

    def test_production_stage_blocks_cancellation(self):
        order = make_order(self.customer, status=OrderStatus.FABRICATION_WELDING)

        with self.assertRaises(PreconditionError) as ctx:
            lifecycle.cancel_order(order.id, self.customer, 'Too late?')

        self.assertIn('Fabrication Welding', str(ctx.exception))
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.FABRICATION_WELDING)
        self.assertIsNone(order.cancelled_at)
        self.assertFalse(Message.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_other_customer_cannot_cancel(self):
        order = make_order(self.customer)
        stranger = make_customer(email='stranger@example.com')

        with self.assertRaises(AuthorizationError):
            lifecycle.cancel_order(order.id, stranger)

    def test_admin_cannot_use_customer_cancel(self):
        order = make_order(self.customer)
        with self.assertRaises(AuthorizationError):
            lifecycle.cancel_order(order.id, self.admin)

    def test_cancellation_always_fans_out(self):
        order = make_order(self.customer)
        with patch('notifications.tasks.dispatch_event.delay') as mock_delay:
            with self.captureOnCommitCallbacks(execute=True):
                lifecycle.cancel_order(order.id, self.customer, 'Duplicate order')

        payload = mock_delay.call_args[0][0]
        self.assertEqual(payload['kind'], 'cancellation')
        self.assertEqual(payload['text'], 'Duplicate order')


class UpdateStatusTest(TestCase):

    def setUp(self):
        self.customer = make_customer()
        self.admin = make_admin()
        self.order = make_order(self.customer)

    def test_any_known_status_accepted(self):
        order = lifecycle.update_status(self.order.id, self.admin, OrderStatus.COMPLETED)
        self.assertEqual(order.status, OrderStatus.COMPLETED)

        # Backwards moves are allowed too
        order = lifecycle.update_status(self.order.id, self.admin, OrderStatus.LASER_CUTTING)
        self.assertEqual(order.status, OrderStatus.LASER_CUTTING)

    def test_unknown_status_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            lifecycle.update_status(self.order.id, self.admin, 'shipped')

        self.assertIn('shipped', str(ctx.exception))
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, OrderStatus.PENDING)

    def test_default_message_and_notification(self):
        promised = datetime(2025, 4, 14, 9, 0, tzinfo=dt_timezone.utc)
        lifecycle.update_status(
            self.order.id, self.admin, OrderStatus.POWDER_COATING, expected_delivery_date=promised
        )

        message = Message.objects.get(order=self.order)
        self.assertEqual(message.content, 'Your order status has been updated to Powder Coating.')

        note = Notification.objects.get(recipient=self.customer)
        self.assertEqual(note.title, 'Order Status Updated')
        self.assertIn("updated to 'Powder Coating'", note.message)
        self.assertIn('with expected delivery on Monday, April 14, 2025', note.message)

    def test_delivery_date_kept_when_not_supplied(self):
        promised = datetime(2025, 4, 14, 9, 0, tzinfo=dt_timezone.utc)
        self.order.expected_delivery_date = promised
        self.order.save()

        order = lifecycle.update_status(self.order.id, self.admin, OrderStatus.DESIGNING, notify=False)
        self.assertEqual(order.expected_delivery_date, promised)

    def test_entering_cancelled_fills_cancellation_fields(self):
        order = lifecycle.update_status(self.order.id, self.admin, OrderStatus.CANCELLED, notify=False)

        self.assertEqual(order.status, OrderStatus.CANCELLED)
        self.assertIsNotNone(order.cancelled_at)
        self.assertEqual(order.cancellation_reason, 'Cancelled by administrator')

    def test_leaving_cancelled_clears_cancellation_fields(self):
        lifecycle.cancel_order(self.order.id, self.customer, 'Changed my mind')

        order = lifecycle.update_status(self.order.id, self.admin, OrderStatus.APPROVED, notify=False)
        order.refresh_from_db()
        self.assertEqual(order.status, OrderStatus.APPROVED)
        self.assertIsNone(order.cancelled_at)
        self.assertEqual(order.cancellation_reason, '')

    def test_customer_cannot_update(self):
        with self.assertRaises(AuthorizationError):
            lifecycle.update_status(self.order.id, self.customer, OrderStatus.COMPLETED)


class AttachDocumentTest(TestCase):

    def setUp(self):
        self.customer = make_customer()
        self.admin = make_admin()
        self.order = make_order(self.customer, status=OrderStatus.QUALITY_CHECK)

    def test_test_report_attached(self):
        order = lifecycle.attach_document(self.order.id, self.admin, 'test-report', design_upload('report.pdf'))

        self.assertTrue(order.test_report.startswith(f"test-reports/{order.order_number}/"))
        self.assertEqual(
            Message.objects.get(order=order).content,
            'A new test report has been uploaded for your order.'
        )
        note = Notification.objects.get(recipient=self.customer)
        self.assertEqual(note.title, 'New Test Report Available')

    def test_invoice_without_notification(self):
        order = lifecycle.attach_document(
            self.order.id, self.admin, 'invoice', 'invoices/INV-7.pdf', notify=False
        )

        self.assertEqual(order.invoice, 'invoices/INV-7.pdf')
        self.assertFalse(Message.objects.exists())
        self.assertFalse(Notification.objects.exists())

    def test_design_is_not_uploadable(self):
        with self.assertRaises(ValidationError):
            lifecycle.attach_document(self.order.id, self.admin, 'design', design_upload())

    def test_document_locator(self):
        self.assertEqual(
            lifecycle.document_locator(self.order.id, self.customer, 'design'),
            'designs/tray.dxf'
        )
        self.assertIsNone(lifecycle.document_locator(self.order.id, self.customer, 'invoice'))

        stranger = make_customer(email='stranger@example.com')
        with self.assertRaises(AuthorizationError):
            lifecycle.document_locator(self.order.id, stranger, 'design')


class ConversationTest(TestCase):

    def setUp(self):
        self.customer = make_customer()
        self.admin = make_admin()
        self.other_admin = make_admin(email='ops@vee4group.com', name='Ops Desk')
        self.order = make_order(self.customer)

    def test_customer_message_notifies_admins(self):
        post_message(self.order.id, self.customer, 'Can you use 3mm instead?')

        notes = Notification.objects.filter(type=NotificationType.MESSAGE)
        self.assertEqual(notes.count(), 2)
        self.assertEqual(set(notes.values_list('title', flat=True)), {'New Customer Message'})
        self.assertFalse(notes.filter(recipient=self.customer).exists())

    def test_admin_message_notifies_customer_and_other_admins(self):
        post_message(self.order.id, self.admin, 'Yes, 3mm is fine.')

        self.assertEqual(
            Notification.objects.get(recipient=self.customer).title, 'New Message from Admin'
        )
        self.assertEqual(
            Notification.objects.get(recipient=self.other_admin).title, 'Admin Message Sent'
        )
        self.assertFalse(Notification.objects.filter(recipient=self.admin).exists())

    def test_repeated_content_not_deduplicated(self):
        post_message(self.order.id, self.customer, 'Any update?')
        post_message(self.order.id, self.customer, 'Any update?')

        self.assertEqual(Message.objects.filter(order=self.order, content='Any update?').count(), 2)

    def test_blank_message_rejected(self):
        with self.assertRaises(ValidationError):
            post_message(self.order.id, self.customer, '   ')
