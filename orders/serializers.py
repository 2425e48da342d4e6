"""
Orders App Serializers - Orders, conversation & transitions
"""

from rest_framework import serializers

from .models import Order, Message
from .services.conversation import conversation
from .services.progress import production_progress


class MessageSerializer(serializers.ModelSerializer):
    """Conversation entry with the sender shown the way the customer sees it."""

    sender_name = serializers.CharField(source='sender_display_name', read_only=True)
    sender_is_admin = serializers.SerializerMethodField()

    class Meta:
        model = Message
        fields = ['id', 'sender', 'sender_name', 'sender_is_admin', 'content', 'is_system_message', 'created_at']
        read_only_fields = fields

    def get_sender_is_admin(self, obj):
        # No sender means the organization itself
        return obj.sender is None or obj.sender.is_admin


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order listings."""

    customer_name = serializers.CharField(source='customer.name', read_only=True)
    company_name = serializers.CharField(source='customer.company_name', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer', 'customer_name', 'company_name',
            'product_type', 'metal_type', 'quantity', 'color',
            'status', 'status_display', 'expected_delivery_date',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class OrderDetailSerializer(serializers.ModelSerializer):
    """Full order with its conversation and production progress."""

    customer_name = serializers.CharField(source='customer.name', read_only=True)
    customer_email = serializers.EmailField(source='customer.email', read_only=True)
    company_name = serializers.CharField(source='customer.company_name', read_only=True)
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    can_be_cancelled = serializers.BooleanField(read_only=True)
    messages = serializers.SerializerMethodField()
    progress = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer', 'customer_name', 'customer_email', 'company_name',
            'product_type', 'metal_type', 'thickness', 'width', 'height', 'quantity', 'color',
            'additional_requirements', 'status', 'status_display', 'expected_delivery_date',
            'cancelled_at', 'cancellation_reason', 'can_be_cancelled',
            'design_file', 'test_report', 'invoice',
            'created_at', 'updated_at', 'messages', 'progress',
        ]
        read_only_fields = fields

    def get_messages(self, obj):
        return MessageSerializer(conversation(obj), many=True).data

    def get_progress(self, obj):
        return production_progress(obj.status)


class PlaceOrderSerializer(serializers.Serializer):
    """
    Multipart order form. Field names follow the storefront (camelCase);
    range and presence checks are left to the lifecycle service so API and
    service callers get the same messages.
    """

    productType = serializers.CharField(required=False, allow_blank=True)
    metalType = serializers.CharField(required=False, allow_blank=True)
    thickness = serializers.CharField(required=False, allow_blank=True)
    width = serializers.CharField(required=False, allow_blank=True)
    height = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.CharField(required=False, allow_blank=True)
    color = serializers.CharField(required=False, allow_blank=True)
    additionalRequirements = serializers.CharField(required=False, allow_blank=True, default='')
    designFile = serializers.FileField(required=False, allow_null=True)

    def to_specification(self) -> dict:
        data = self.validated_data
        return {
            'product_type': data.get('productType'),
            'metal_type': data.get('metalType'),
            'thickness': data.get('thickness'),
            'width': data.get('width'),
            'height': data.get('height'),
            'quantity': data.get('quantity'),
            'color': data.get('color'),
            'additional_requirements': data.get('additionalRequirements', ''),
        }


class MessageCreateSerializer(serializers.Serializer):
    content = serializers.CharField(allow_blank=True, trim_whitespace=True)


class CancelOrderSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class ApproveOrderSerializer(serializers.Serializer):
    expectedDeliveryDate = serializers.DateTimeField(required=False, allow_null=True)
    message = serializers.CharField(required=False, allow_blank=True, default='')
    notifyCustomer = serializers.BooleanField(required=False, default=True)


class RejectOrderSerializer(serializers.Serializer):
    message = serializers.CharField(required=False, allow_blank=True, default='')
    notifyCustomer = serializers.BooleanField(required=False, default=True)


class StatusUpdateSerializer(serializers.Serializer):
    """Status is kept as free text; membership is checked by the service."""

    status = serializers.CharField()
    expectedDeliveryDate = serializers.DateTimeField(required=False, allow_null=True)
    message = serializers.CharField(required=False, allow_blank=True, default='')
    notifyCustomer = serializers.BooleanField(required=False, default=True)


class DocumentUploadSerializer(serializers.Serializer):
    file = serializers.FileField(required=False, allow_null=True)
    notifyCustomer = serializers.BooleanField(required=False, default=True)

