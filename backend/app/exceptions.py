"""
Domain exceptions raised by the service layer.

Services raise these instead of HTTPException; error_handlers maps each one
to its status code so services stay usable outside a request.
"""


class DomainError(Exception):
    """A business rule rejected the operation."""

    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(DomainError):
    status_code = 404


class PermissionDeniedError(DomainError):
    status_code = 403


class OperationFailedError(DomainError):
    """
    Failure of a ledger operation.

    Rendered as ``{"success": false, "message": ...}`` so clients can read
    loyalty and coupon outcomes from one response shape.
    """


class PaymentPayloadError(DomainError):
    """Webhook payload is missing the metadata needed to build the order."""


class PaymentProviderError(DomainError):
    status_code = 502

    def __init__(self, message: str = "Payment provider error."):
        super().__init__(message)
