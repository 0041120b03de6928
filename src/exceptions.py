"""Custom exceptions for the viewer proxy service."""

from typing import Optional


class ViewerProxyException(Exception):
    """Base exception for viewer proxy errors."""

    status_code = 500


class ClientInputError(ViewerProxyException):
    """Raised when the caller sent something we cannot act on."""

    status_code = 400


class MissingFileError(ClientInputError):
    """Raised when an upload arrives without its file field."""

    def __init__(self, field: str = "model-file"):
        self.field = field
        super().__init__(f'The required field ("{field}") is missing.')


class InvalidReferenceError(ClientInputError):
    """Raised when a model reference (URN) cannot be decoded."""

    def __init__(self, reference: str, reason: str = "malformed"):
        self.reference = reference
        self.reason = reason
        super().__init__(f"Invalid model reference {reference!r}: {reason}")


class PayloadTooLargeError(ClientInputError):
    """Raised when an upload exceeds the configured size limit."""

    status_code = 413

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(f"Upload of {size} bytes exceeds the limit of {limit} bytes")


class UpstreamError(ViewerProxyException):
    """Raised when a call to the APS platform fails.

    ``upstream_status`` is the HTTP status APS answered with, or None when
    the call never completed (connection failure, missing credentials).
    """

    def __init__(self, operation: str, message: str, upstream_status: Optional[int] = None):
        self.operation = operation
        self.upstream_status = upstream_status
        self.status_code = 502 if upstream_status is not None else 500
        super().__init__(f"{operation} failed: {message}")


class ObjectNotFoundError(UpstreamError):
    """Raised when APS reports that the addressed object does not exist."""

    def __init__(self, operation: str, key: str):
        self.key = key
        super().__init__(operation, f"{key} not found", upstream_status=404)
        self.status_code = 404


class UpstreamTimeoutError(UpstreamError):
    """Raised when APS did not answer within the configured timeout."""

    def __init__(self, operation: str, timeout_sec: float):
        self.timeout_sec = timeout_sec
        super().__init__(operation, f"no response within {timeout_sec:g}s")
        self.status_code = 504
