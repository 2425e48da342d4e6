"""
Orders App Views - Customer & admin order API

Thin adapters over orders.services: parse the request, call the service,
shape the {success: ...} envelope. Workflow errors are rendered by
core.exceptions.api_exception_handler.
"""

from rest_framework import viewsets, status, permissions
from rest_framework.decorators import action
from rest_framework.parsers import JSONParser, FormParser, MultiPartParser
from rest_framework.response import Response
from django_filters.rest_framework import DjangoFilterBackend

from core.views import IsAdminUser
from .filters import AdminOrderFilter
from .models import Order
from .serializers import (
    OrderListSerializer, OrderDetailSerializer, MessageSerializer,
    PlaceOrderSerializer, MessageCreateSerializer, CancelOrderSerializer,
    ApproveOrderSerializer, RejectOrderSerializer, StatusUpdateSerializer,
    DocumentUploadSerializer,
)
from .services import lifecycle
from .services.conversation import post_message
from .services.lookup import get_order_for_user, get_order

DOCUMENT_KIND_PATH = r'documents/(?P<kind>[a-z-]+)'


def _validated(serializer_class, request):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer


class CustomerOrderViewSet(viewsets.GenericViewSet):
    """
    Orders as seen by their owner.

    - list / create: own orders, place a new one
    - retrieve: detail with conversation and progress
    - messages / cancel / documents
    """

    serializer_class = OrderDetailSerializer
    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [JSONParser, FormParser, MultiPartParser]

    def get_queryset(self):
        return Order.objects.filter(customer=self.request.user).select_related('customer')

    def list(self, request):
        orders = self.get_queryset().order_by('-created_at')
        return Response({
            'success': True,
            'orders': OrderListSerializer(orders, many=True).data,
        })

    def create(self, request):
        serializer = _validated(PlaceOrderSerializer, request)
        order = lifecycle.place_order(
            request.user,
            serializer.to_specification(),
            serializer.validated_data.get('designFile'),
        )
        return Response({
            'success': True,
            'message': 'Order placed successfully',
            'order': OrderDetailSerializer(order).data,
        }, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        order = get_order_for_user(pk, request.user)
        return Response({'success': True, 'order': OrderDetailSerializer(order).data})

    @action(detail=True, methods=['post'])
    def messages(self, request, pk=None):
        serializer = _validated(MessageCreateSerializer, request)
        message = post_message(pk, request.user, serializer.validated_data['content'])
        return Response({
            'success': True,
            'message': MessageSerializer(message).data,
        }, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['put'])
    def cancel(self, request, pk=None):
        serializer = _validated(CancelOrderSerializer, request)
        order = lifecycle.cancel_order(pk, request.user, serializer.validated_data['reason'])
        return Response({
            'success': True,
            'message': 'Order cancelled successfully',
            'order': OrderDetailSerializer(order).data,
        })

    @action(detail=True, methods=['get'], url_path=DOCUMENT_KIND_PATH)
    def documents(self, request, pk=None, kind=None):
        locator = lifecycle.document_locator(pk, request.user, kind)
        if not locator:
            return Response(
                {'success': False, 'message': 'Document not found.'},
                status=status.HTTP_404_NOT_FOUND
            )
        return Response({'success': True, 'document_type': kind, 'file': locator})


class AdminOrderViewSet(viewsets.GenericViewSet):
    """
    Order management for administrators.

    Strict transitions (approve, reject) and the free-form status update
    are separate actions.
    """

    serializer_class = OrderDetailSerializer
    permission_classes = [IsAdminUser]
    parser_classes = [JSONParser, FormParser, MultiPartParser]
    filter_backends = [DjangoFilterBackend]
    filterset_class = AdminOrderFilter
    queryset = Order.objects.select_related('customer').order_by('-created_at')

    def list(self, request):
        orders = self.filter_queryset(self.get_queryset())
        return Response({
            'success': True,
            'count': orders.count(),
            'orders': OrderListSerializer(orders, many=True).data,
        })

    def retrieve(self, request, pk=None):
        order = get_order(pk)
        return Response({'success': True, 'order': OrderDetailSerializer(order).data})

    def _transition_response(self, order, message):
        return Response({
            'success': True,
            'message': message,
            'order': OrderDetailSerializer(order).data,
        })

    @action(detail=True, methods=['put'], url_path='status')
    def update_status(self, request, pk=None):
        data = _validated(StatusUpdateSerializer, request).validated_data
        order = lifecycle.update_status(
            pk, request.user, data['status'],
            expected_delivery_date=data.get('expectedDeliveryDate'),
            message=data['message'],
            notify=data['notifyCustomer'],
        )
        return self._transition_response(order, 'Order status updated successfully')

    @action(detail=True, methods=['put'])
    def approve(self, request, pk=None):
        data = _validated(ApproveOrderSerializer, request).validated_data
        order = lifecycle.approve_order(
            pk, request.user,
            expected_delivery_date=data.get('expectedDeliveryDate'),
            message=data['message'],
            notify=data['notifyCustomer'],
        )
        return self._transition_response(order, 'Order approved successfully')

    @action(detail=True, methods=['put'])
    def reject(self, request, pk=None):
        data = _validated(RejectOrderSerializer, request).validated_data
        order = lifecycle.reject_order(
            pk, request.user,
            message=data['message'],
            notify=data['notifyCustomer'],
        )
        return self._transition_response(order, 'Order rejected successfully')

    @action(detail=True, methods=['post'])
    def messages(self, request, pk=None):
        serializer = _validated(MessageCreateSerializer, request)
        message = post_message(pk, request.user, serializer.validated_data['content'])
        return Response({
            'success': True,
            'message': MessageSerializer(message).data,
        }, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path=DOCUMENT_KIND_PATH)
    def documents(self, request, pk=None, kind=None):
        data = _validated(DocumentUploadSerializer, request).validated_data
        order = lifecycle.attach_document(
            pk, request.user, kind, data.get('file'),
            notify=data['notifyCustomer'],
        )
        return self._transition_response(order, 'Document uploaded successfully')
