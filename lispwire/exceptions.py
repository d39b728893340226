"""
lispwire library exceptions.

This module defines all custom exceptions used throughout the library.
Each exception carries the context that was known when it was raised
(offset into the receive buffer, peer address, offending type).
"""

from typing import Optional


class WireError(Exception):
    """Base exception for wire protocol errors"""
    pass


class WireConnectionError(WireError):
    """Raised when the initial connection to the peer fails"""

    def __init__(self, host: str, port: int, reason: Optional[BaseException] = None):
        self.host = host
        self.port = port
        self.reason = reason
        super().__init__(f"Could not connect to {host}:{port}: {reason}")


class WireCommunicationError(WireError):
    """Raised when a previously working transport stops yielding bytes"""

    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class WireProtocolError(WireError):
    """Raised when a decoded length or structure is invalid"""

    def __init__(self, message: str, offset: Optional[int] = None, length: Optional[int] = None):
        self.offset = offset
        self.length = length
        if offset is not None:
            message = f"{message} (at offset {offset})"
        super().__init__(message)


class WireUnsupportedTypeError(WireError, TypeError):
    """Raised when encoding a value outside Integer, String, Symbol and Cons"""

    def __init__(self, value: object):
        self.value_type = type(value)
        super().__init__(f"Cannot encode value of type {self.value_type.__name__}: {value!r}")


class WireTimeoutError(WireError):
    """Raised when an optional read timeout expires"""

    def __init__(self, timeout: float, offset: Optional[int] = None):
        self.timeout = timeout
        self.offset = offset
        super().__init__(f"No input after {timeout}s (waiting for offset {offset})")


class WireConfigurationError(WireError):
    """Raised when configuration is invalid"""
    pass


class LispEvaluationError(WireError):
    """Raised when the peer reports a non-zero evaluation status"""

    def __init__(self, status: int, condition: str, expression: str):
        self.status = status
        self.condition = condition
        self.expression = expression
        super().__init__(f"Evaluation of {expression!r} failed with status {status}: {condition}")
