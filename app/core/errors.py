# app/core/errors.py
"""
Checkout exceptions.

Rendered as `{"error": message}` by the handler registered in
app.main, which is the body shape the storefront reads.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse


class CheckoutError(Exception):
    """
    Base class for checkout failures.

    Attributes:
        message: Human-readable error message shown to the customer
        status_code: HTTP status used when the error reaches a client
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Checkout failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class CheckoutConfigurationError(CheckoutError):
    """Raised when the Stripe credentials needed for a call are absent."""

    default_message = "Stripe is not configured on the server."


class CheckoutValidationError(CheckoutError):
    """Raised when a checkout payload is unusable."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "No items provided for checkout."


class CheckoutSessionError(CheckoutError):
    """Raised when Stripe did not give us a usable session."""

    default_message = "Failed to create checkout session."


class PaymentProviderError(Exception):
    """Wraps any error raised by the Stripe library."""


async def checkout_error_handler(request: Request, exc: CheckoutError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})
