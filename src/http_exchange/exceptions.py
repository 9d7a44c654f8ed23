"""
Custom exceptions for http_exchange.

This module defines the exception hierarchy used throughout
the library. Usage errors (bad format tags, bad data, missing
status information) are raised directly; transport failures are
wrapped into TransportError subclasses carrying the original cause.
"""

from typing import Optional


class HTTPClientError(Exception):
    """Base exception for all http_exchange errors."""

    name = "HTTP Client Exception"

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class UnrecognizedFormatError(HTTPClientError, ValueError):
    """Raised when no formatter or parser is registered for a format tag."""

    def __init__(self, format: str) -> None:
        super().__init__(f"Unrecognized format '{format}'")
        self.format = format


class DataMergeError(HTTPClientError, TypeError):
    """Raised when new data cannot be merged into existing message data."""

    def __init__(self) -> None:
        super().__init__(
            "Unable to merge existing data with new data. "
            "Existing data is not a mapping."
        )


class MissingStatusCodeError(HTTPClientError):
    """Raised when a response carries no status line information."""

    def __init__(self) -> None:
        super().__init__(
            "Unable to get status code: referred header information is missing."
        )


class NoResponseAvailableError(HTTPClientError):
    """Raised by MockTransport when no response has been queued."""

    def __init__(self) -> None:
        super().__init__("No Response available")


class TransportError(HTTPClientError):
    """Raised when a transport cannot complete an exchange."""


class ConnectionError(TransportError):
    """Raised when there's an error with network connections."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Connection error: {message}", cause)


class ProtocolError(TransportError):
    """Raised when there's an error with HTTP protocol handling."""

    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class TimeoutError(TransportError):
    """Raised when an exchange times out."""

    def __init__(
        self,
        message: str,
        timeout: Optional[float] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        if timeout is not None:
            message = f"{message} (timeout: {timeout}s)"
        super().__init__(f"Timeout error: {message}", cause)
        self.timeout = timeout
