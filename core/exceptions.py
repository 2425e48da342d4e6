"""
CORE App - API error rendering

Every error leaving the API is shaped as {success: false, message}.
"""

import logging

from django.db import DatabaseError
from rest_framework import status
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from orders.exceptions import OrderWorkflowError

logger = logging.getLogger(__name__)


def _flatten_detail(detail):
    """Collapse a DRF error detail (dict/list/str) into one readable line."""
    if isinstance(detail, dict):
        parts = []
        for field, value in detail.items():
            text = _flatten_detail(value)
            if field in ('non_field_errors', 'detail'):
                parts.append(text)
            else:
                parts.append(f"{field}: {text}")
        return '; '.join(parts)
    if isinstance(detail, (list, tuple)):
        return ' '.join(_flatten_detail(item) for item in detail)
    return str(detail)


def api_exception_handler(exc, context):
    """DRF exception handler for the Vee4 API."""
    view = context.get('view')
    view_name = view.__class__.__name__ if view else 'unknown'

    if isinstance(exc, OrderWorkflowError):
        logger.info(f"[API] {view_name} rejected request ({exc.status_code}): {exc}")
        return Response(
            {'success': False, 'message': str(exc)},
            status=exc.status_code
        )

    if isinstance(exc, DatabaseError):
        logger.exception(f"[API] Database failure in {view_name}: {exc}")
        return Response(
            {'success': False, 'message': 'Server error. Please try again later.'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    data = {'success': False, 'message': _flatten_detail(response.data)}
    if isinstance(exc, DRFValidationError):
        data['errors'] = response.data
    response.data = data
    return response
