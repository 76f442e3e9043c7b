"""Tests for pyoceanconnect exceptions."""

from __future__ import annotations

from pyoceanconnect.exceptions import (
    AuthenticationError,
    ConfigurationError,
    OceanConnectError,
    ProtocolError,
    TransportError,
    TransportTimeoutError,
)


class TestOceanConnectError:
    """Test OceanConnectError base exception."""

    def test_base_exception_inherits_from_exception(self) -> None:
        """Test that OceanConnectError inherits from Exception."""
        assert issubclass(OceanConnectError, Exception)

    def test_subclasses(self) -> None:
        """Test that every library error derives from the base error."""
        for error in (ConfigurationError, AuthenticationError, TransportError, ProtocolError):
            assert issubclass(error, OceanConnectError)

    def test_base_exception_empty_message(self) -> None:
        """Test that OceanConnectError can be created without a message."""
        error = OceanConnectError()
        assert isinstance(error, OceanConnectError)


class TestAuthenticationError:
    """Test AuthenticationError exception."""

    def test_error_message(self) -> None:
        """Test AuthenticationError with a message."""
        error = AuthenticationError("Invalid credentials")
        assert str(error) == "Invalid credentials"
        assert error.status is None

    def test_with_status(self) -> None:
        """Test AuthenticationError carrying the login status."""
        error = AuthenticationError("Rejected", status=401)
        assert error.status == 401


class TestTransportErrors:
    """Test transport exceptions."""

    def test_timeout_is_transport_error(self) -> None:
        """Test that timeouts can be caught as transport errors."""
        assert issubclass(TransportTimeoutError, TransportError)


class TestProtocolError:
    """Test ProtocolError exception."""

    def test_defaults(self) -> None:
        """Test ProtocolError with a message only."""
        error = ProtocolError("Unexpected")
        assert error.status is None
        assert error.body == b""

    def test_with_status_and_body(self) -> None:
        """Test ProtocolError carrying diagnostics."""
        error = ProtocolError("Unexpected", status=500, body=b'{"error_code": "1"}')
        assert str(error) == "Unexpected"
        assert error.status == 500
        assert error.body == b'{"error_code": "1"}'
