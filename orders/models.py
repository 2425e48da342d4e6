"""
ORDERS App - Custom fabrication orders for Vee4

Handles: Orders, yearly order numbering, order conversation
"""

import uuid
from django.db import models
from django.conf import settings
from django.core.validators import MinValueValidator


class OrderStatus(models.TextChoices):
    """Order status enumeration."""
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'
    CANCELLED = 'cancelled', 'Cancelled'
    DESIGNING = 'designing', 'Designing'
    LASER_CUTTING = 'laser_cutting', 'Laser Cutting'
    METAL_BENDING = 'metal_bending', 'Metal Bending'
    FABRICATION_WELDING = 'fabrication_welding', 'Fabrication (Welding)'
    FINISHING = 'finishing', 'Finishing'
    POWDER_COATING = 'powder_coating', 'Powder Coating'
    ASSEMBLING = 'assembling', 'Assembling'
    QUALITY_CHECK = 'quality_check', 'Quality Check'
    DISPATCH = 'dispatch', 'Dispatch'
    COMPLETED = 'completed', 'Completed'


TERMINAL_STATUSES = frozenset({
    OrderStatus.REJECTED,
    OrderStatus.CANCELLED,
    OrderStatus.COMPLETED,
})

# Customers may pull out until production starts
CANCELLABLE_STATUSES = frozenset({
    OrderStatus.PENDING,
    OrderStatus.APPROVED,
    OrderStatus.DESIGNING,
})


class DocumentKind(models.TextChoices):
    DESIGN = 'design', 'Design File'
    TEST_REPORT = 'test-report', 'Test Report'
    INVOICE = 'invoice', 'Invoice'


# Documents an admin attaches after placement
UPLOADABLE_DOCUMENTS = (DocumentKind.TEST_REPORT, DocumentKind.INVOICE)

DOCUMENT_FIELDS = {
    DocumentKind.DESIGN: 'design_file',
    DocumentKind.TEST_REPORT: 'test_report',
    DocumentKind.INVOICE: 'invoice',
}


class OrderSequence(models.Model):
    """
    Last order number issued per calendar year.
    Locked with select_for_update while a new order is numbered.
    """

    year = models.PositiveIntegerField(unique=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        verbose_name = "Order sequence"
        verbose_name_plural = "Order sequences"

    def __str__(self):
        return f"{self.year}: {self.last_value}"


class Order(models.Model):
    """
    A custom fabrication order.

    Specification fields are frozen once the order is placed. Cancellation
    metadata is present exactly when status is cancelled.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(
        max_length=32,
        unique=True,
        editable=False,
        verbose_name="Order number"
    )
    customer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name='orders',
        verbose_name="Customer"
    )

    # Specification
    product_type = models.CharField(max_length=100, verbose_name="Product type")
    metal_type = models.CharField(max_length=100, verbose_name="Metal type")
    thickness = models.DecimalField(
        max_digits=8,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        verbose_name="Thickness (mm)"
    )
    width = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        verbose_name="Width (mm)"
    )
    height = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(0)],
        verbose_name="Height (mm)"
    )
    quantity = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        verbose_name="Quantity"
    )
    color = models.CharField(max_length=50, verbose_name="Color")
    additional_requirements = models.TextField(blank=True, verbose_name="Additional requirements")

    # Status
    status = models.CharField(
        max_length=30,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        verbose_name="Status"
    )
    expected_delivery_date = models.DateTimeField(null=True, blank=True, verbose_name="Expected delivery")

    # Cancellation
    cancelled_at = models.DateTimeField(null=True, blank=True)
    cancellation_reason = models.TextField(blank=True, verbose_name="Cancellation reason")

    # Documents (storage locators)
    design_file = models.CharField(max_length=255, blank=True, verbose_name="Design file")
    test_report = models.CharField(max_length=255, blank=True, verbose_name="Test report")
    invoice = models.CharField(max_length=255, blank=True, verbose_name="Invoice")

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Order"
        verbose_name_plural = "Orders"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='order_status_created_idx'),
            models.Index(fields=['customer', 'created_at'], name='order_customer_created_idx'),
        ]

    def __str__(self):
        return f"{self.order_number} - {self.status}"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def document(self, kind: str) -> str:
        return getattr(self, DOCUMENT_FIELDS[kind])


class Message(models.Model):
    """
    One entry in an order's conversation. Append-only.
    sender is null for system messages when no admin account exists.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name='messages',
        verbose_name="Order"
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='order_messages',
        verbose_name="Sender"
    )
    content = models.TextField(verbose_name="Content")
    is_system_message = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Message"
        verbose_name_plural = "Messages"
        ordering = ['created_at']

    def __str__(self):
        return f"{self.order_id} @ {self.created_at:%Y-%m-%d %H:%M}"

    @property
    def sender_display_name(self) -> str:
        if self.sender is None:
            return settings.ORGANIZATION_NAME
        return self.sender.display_name
