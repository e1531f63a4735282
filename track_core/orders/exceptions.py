# track_core/orders/exceptions.py
from __future__ import annotations

from rest_framework import status
from rest_framework.exceptions import APIException, NotFound

from track_core.common.api.exceptions import ConflictError


class OrderNotFound(NotFound):
    # also raised for orders of another company, so existence never leaks
    default_detail = "Order not found."
    default_code = "order_not_found"


class InsufficientRemainingBalance(ConflictError):
    default_detail = "Payment exceeds the remaining balance of the order."
    default_code = "insufficient_remaining_balance"


class NotAQuote(ConflictError):
    default_detail = "Only quotes can be converted into orders."
    default_code = "not_a_quote"


class QuoteStatusLocked(ConflictError):
    default_detail = "Convert the quote into an order before changing its status."
    default_code = "quote_status_locked"


class PaymentIndexOutOfBounds(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "No payment exists at this position."
    default_code = "payment_index_out_of_bounds"
