from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    INVALID_LINE_ITEM = "invalid_line_item"
    INVALID_INPUT = "invalid_input"
    INVALID_FEE_CONFIG = "invalid_fee_config"
    VALIDATION_FAILED = "validation_failed"
    EMPTY_CART = "empty_cart"
    NETWORK_ERROR = "network_error"
    SERVER_UNAVAILABLE = "server_unavailable"
    SERVER_REJECTED = "server_rejected"
    MALFORMED_RESPONSE = "malformed_response"
    REQUEST_CANCELLED = "request_cancelled"
    INVALID_TRANSITION = "invalid_transition"


class StorefrontError(Exception):
    """
    Base class for every failure the storefront reports.

    Callers tell retryable and terminal failures apart through ``kind`` and
    ``retryable`` rather than by inspecting messages.
    """

    kind: ErrorKind = ErrorKind.INVALID_INPUT
    retryable: bool = False
    status_code: int = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "kind": self.kind.value,
            "retryable": self.retryable,
            "details": self.details,
        }


# Local computation / validation

class InvalidLineItem(StorefrontError):
    kind = ErrorKind.INVALID_LINE_ITEM
    status_code = 422


class InvalidInput(StorefrontError):
    kind = ErrorKind.INVALID_INPUT
    status_code = 422


class InvalidFeeConfig(StorefrontError):
    kind = ErrorKind.INVALID_FEE_CONFIG
    status_code = 500


class ValidationFailed(StorefrontError):
    kind = ErrorKind.VALIDATION_FAILED
    status_code = 422

    def __init__(self, message: str, errors: Dict[str, str]):
        super().__init__(message, details={"fields": errors})
        self.errors = errors


class EmptyCart(StorefrontError):
    kind = ErrorKind.EMPTY_CART
    status_code = 400


class InvalidTransition(StorefrontError):
    kind = ErrorKind.INVALID_TRANSITION
    status_code = 409


# Remote services

class NetworkError(StorefrontError):
    """Timeout or connection failure."""

    kind = ErrorKind.NETWORK_ERROR
    retryable = True
    status_code = 504


class ServerUnavailable(StorefrontError):
    """Transient unavailability (503 / 429), e.g. a backend cold start."""

    kind = ErrorKind.SERVER_UNAVAILABLE
    retryable = True
    status_code = 503

    def __init__(self, message: str, upstream_status: int):
        super().__init__(message, details={"upstream_status": upstream_status})
        self.upstream_status = upstream_status


class ServerRejected(StorefrontError):
    kind = ErrorKind.SERVER_REJECTED

    def __init__(self, message: str, upstream_status: int):
        super().__init__(message, details={"upstream_status": upstream_status})
        self.upstream_status = upstream_status
        # 4xx are the shopper's to fix, anything else is a bad gateway
        self.status_code = upstream_status if 400 <= upstream_status < 500 else 502


class MalformedResponse(StorefrontError):
    kind = ErrorKind.MALFORMED_RESPONSE
    status_code = 502


class RequestCancelled(StorefrontError):
    kind = ErrorKind.REQUEST_CANCELLED
    status_code = 409
