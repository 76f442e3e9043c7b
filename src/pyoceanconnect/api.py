"""Low-level API client for OceanConnect endpoints.

This module provides the authenticated request dispatcher and thin wrappers
for each endpoint. All methods return (status_code, body) tuples; status
interpretation and JSON decoding are left to the callers.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from aiohttp import ClientError, ClientSession, ClientTimeout, TCPConnector

from pyoceanconnect.const import (
    COMMANDS_PATH,
    CONTENT_TYPE_JSON,
    DEVICE_INFO_PATH,
    DEVICES_PATH,
    HEADER_APP_KEY,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
    REGISTRATION_PATH,
    SUBSCRIBE_PATH,
)
from pyoceanconnect.exceptions import TransportError, TransportTimeoutError
from pyoceanconnect.query import with_query


if TYPE_CHECKING:
    import ssl
    from collections.abc import Mapping
    from types import TracebackType

    from pyoceanconnect.auth import SessionManager
    from pyoceanconnect.config import ClientConfig

_LOGGER = logging.getLogger(__name__)


class OceanConnectAPI:
    """Low-level API client for the OceanConnect platform.

    This class owns the HTTP transport and issues every request through
    ``dispatch()``, which serializes requests on the session manager's lock,
    renews the access token when needed and attaches the authentication
    headers.

    Example:
        ```python
        api = OceanConnectAPI(config=config, session_manager=manager, ssl_context=context)

        async with api:
            status, body = await api.get_device("device-id")
            if status == 200:
                device = json.loads(body)
        ```
    """

    def __init__(
        self,
        *,
        config: ClientConfig,
        session_manager: SessionManager,
        session: ClientSession | None = None,
        ssl_context: ssl.SSLContext | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            config: Client configuration.
            session_manager: SessionManager owning the token and the request lock.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            ssl_context: TLS context with the client certificate, used when this
                client creates its own session.
        """
        self._config = config
        self._session_manager = session_manager
        self._session = session
        self._owns_session = session is None
        self._ssl_context = ssl_context
        self._base_url = config.base_url

        if session is not None:
            session_manager.set_session(session)

    @property
    def config(self) -> ClientConfig:
        """Read-only connection parameters."""
        return self._config

    async def __aenter__(self) -> OceanConnectAPI:
        """Enter the context manager.

        Creates a session bound to the client certificate if none was provided.

        Returns:
            Self for use in async with statements.
        """
        if self._session is None:
            connector = TCPConnector(ssl=self._ssl_context) if self._ssl_context is not None else None
            self._session = ClientSession(connector=connector)
            self._owns_session = True

        self._session_manager.set_session(self._session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager.

        Closes session if it was created by this client.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    async def dispatch(
        self,
        method: str,
        path: str,
        body: bytes | None = None,
        *,
        params: Mapping[str, object | None] | None = None,
    ) -> tuple[int, bytes]:
        """Issue an authenticated request.

        The whole sequence of checking the token, logging in if needed,
        attaching headers, sending the request and reading the response runs
        under the session manager's lock, so requests from one client never
        overlap and never race a token rotation.

        Args:
            method: HTTP method (GET, PUT, POST, DELETE).
            path: API path (e.g., "/iocm/app/dm/v1.1.0/devices").
            body: Optional raw request body.
            params: Optional query parameters; None values are omitted.

        Returns:
            Tuple of (status_code, response_body). The status is not interpreted.

        Raises:
            RuntimeError: If session is not initialized or is closed.
            AuthenticationError: If a required login fails; no request is sent.
            TransportTimeoutError: If the request times out.
            TransportError: If the request fails at the network level.
        """
        if self._session is None:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        if self._session.closed:
            msg = "Session is closed. Cannot make request."
            raise RuntimeError(msg)

        url = f"{self._base_url}{with_query(path, params)}"
        timeout = ClientTimeout(total=self._config.request_timeout)

        async with self._session_manager.lock:
            auth_session = await self._session_manager.ensure_valid_session()
            headers = {
                HEADER_APP_KEY: self._config.app_id,
                HEADER_AUTHORIZATION: auth_session.token,
                HEADER_CONTENT_TYPE: CONTENT_TYPE_JSON,
            }

            _LOGGER.debug("%s %s", method, path)

            try:
                async with self._session.request(
                    method,
                    url,
                    data=body,
                    headers=headers,
                    timeout=timeout,
                ) as response:
                    return response.status, await response.read()
            except TimeoutError as exc:
                msg = f"Request to {path} timed out"
                raise TransportTimeoutError(msg) from exc
            except ClientError as exc:
                msg = f"Connection error for {path}: {exc}"
                raise TransportError(msg) from exc

    async def dispatch_json(
        self,
        method: str,
        path: str,
        payload: Any = None,
        *,
        params: Mapping[str, object | None] | None = None,
    ) -> tuple[int, bytes]:
        """Serialize ``payload`` as JSON and dispatch it."""
        body = json.dumps(payload).encode() if payload is not None else None
        return await self.dispatch(method, path, body, params=params)

    # -------------------------------------------------------------------------
    # Device Management Endpoints
    # -------------------------------------------------------------------------

    async def get_device(self, device_id: str) -> tuple[int, bytes]:
        """Get a single device.

        Args:
            device_id: Platform-assigned device identifier.

        Returns:
            Tuple of (status_code, body) where body is a device object.
        """
        return await self.dispatch("GET", f"{DEVICES_PATH}/{device_id}")

    async def get_devices(self, params: Mapping[str, object | None]) -> tuple[int, bytes]:
        """Query devices.

        Args:
            params: Query filters (gatewayId, nodeType, pageNo, ...).

        Returns:
            Tuple of (status_code, body) where body has format:
            {"totalCount": int, "pageNo": int, "pageSize": int, "devices": [...]}
        """
        return await self.dispatch("GET", DEVICES_PATH, params=params)

    async def update_device_info(self, device_id: str, info: dict[str, Any]) -> tuple[int, bytes]:
        """Modify device metadata (name, manufacturer, location, ...)."""
        return await self.dispatch_json(
            "PUT",
            f"{DEVICE_INFO_PATH}/{device_id}",
            info,
            params={"appId": self._config.app_id},
        )

    async def delete_device(self, device_id: str) -> tuple[int, bytes]:
        """Delete a device."""
        return await self.dispatch("DELETE", f"{DEVICES_PATH}/{device_id}")

    # -------------------------------------------------------------------------
    # Registration, Command and Subscription Endpoints
    # -------------------------------------------------------------------------

    async def register_device(self, registration: dict[str, Any]) -> tuple[int, bytes]:
        """Register a new device.

        Returns:
            Tuple of (status_code, body) where body has format:
            {"verifyCode": str, "deviceId": str, "timeout": int, "psk": str}
        """
        return await self.dispatch_json(
            "POST",
            REGISTRATION_PATH,
            registration,
            params={"appId": self._config.app_id},
        )

    async def create_device_command(self, command: dict[str, Any]) -> tuple[int, bytes]:
        """Create a command for delivery to a device."""
        return await self.dispatch_json("POST", COMMANDS_PATH, command)

    async def subscribe(self, subscription: dict[str, Any]) -> tuple[int, bytes]:
        """Subscribe to platform notifications."""
        return await self.dispatch_json("POST", SUBSCRIBE_PATH, subscription)
