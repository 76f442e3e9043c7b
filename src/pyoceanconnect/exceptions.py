"""Custom exceptions for pyoceanconnect library."""

from __future__ import annotations


class OceanConnectError(Exception):
    """Base exception for all OceanConnect errors."""


class ConfigurationError(OceanConnectError):
    """Exception raised for unusable client configuration or credential material."""


class AuthenticationError(OceanConnectError):
    """Exception raised when obtaining an access token fails.

    Attributes:
        status: HTTP status returned by the login endpoint, if one was received.
    """

    def __init__(self, message: str = "", status: int | None = None) -> None:
        """Initialize AuthenticationError.

        Args:
            message: Error message.
            status: Optional HTTP status of the failed login response.
        """
        super().__init__(message)
        self.status = status


class TransportError(OceanConnectError):
    """Exception raised for network-level failures of a request."""


class TransportTimeoutError(TransportError):
    """Exception raised when a request times out."""


class ProtocolError(OceanConnectError):
    """Exception raised when the API answers with an unexpected status or body.

    Attributes:
        status: HTTP status code of the response.
        body: Raw response body, kept for diagnostics.
    """

    def __init__(self, message: str = "", status: int | None = None, body: bytes = b"") -> None:
        """Initialize ProtocolError.

        Args:
            message: Error message.
            status: HTTP status code of the response.
            body: Raw response body.
        """
        super().__init__(message)
        self.status = status
        self.body = body
