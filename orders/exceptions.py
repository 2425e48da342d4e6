"""
ORDERS App - Workflow errors

Each error carries the HTTP status the API answers with.
"""


class OrderWorkflowError(Exception):
    status_code = 400
    default_message = 'Order request could not be processed.'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self):
        return self.message


class ValidationError(OrderWorkflowError):
    """Bad input: unknown status, missing specification field, bad document kind."""
    status_code = 400
    default_message = 'Invalid request.'

    def __init__(self, message=None, fields=None):
        self.fields = list(fields or [])
        super().__init__(message)


class PreconditionError(OrderWorkflowError):
    """The order is not in a state that allows the requested transition."""
    status_code = 400

    def __init__(self, current, requested, message=None):
        self.current = current
        self.requested = requested
        super().__init__(
            message or f"Cannot move order from '{current}' to '{requested}'."
        )


class AuthorizationError(OrderWorkflowError):
    status_code = 403
    default_message = 'Access denied.'


class NotFoundError(OrderWorkflowError):
    status_code = 404
    default_message = 'Order not found.'


class DeliveryError(OrderWorkflowError):
    """
    A channel failed to hand a message to its provider.
    Raised inside channel adapters only; fanout turns it into a failed result.
    """
    status_code = 502
    default_message = 'Notification delivery failed.'
