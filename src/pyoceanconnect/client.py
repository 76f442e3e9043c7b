"""High-level client for the OceanConnect device-management API.

This module provides the operation handlers: each one builds a request,
sends it through the authenticated dispatcher, checks the status code and
decodes the response into a data model.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from aiohttp import ClientSession  # noqa: TC002 - Used at runtime by OceanConnectAPI

from pyoceanconnect.api import OceanConnectAPI
from pyoceanconnect.auth import SessionManager
from pyoceanconnect.config import ClientConfig, build_ssl_context
from pyoceanconnect.const import DEFAULT_MUTE, DEFAULT_PROTOCOL_TYPE, NOTIFY_DEVICE_DATA_CHANGED
from pyoceanconnect.exceptions import ProtocolError
from pyoceanconnect.models import (
    Device,
    DeviceCommand,
    DeviceList,
    DeviceQuery,
    RegistrationReply,
    Subscription,
)
from pyoceanconnect.parsers import (
    decode_json_object,
    parse_device,
    parse_device_command,
    parse_device_list,
    parse_registration_reply,
)


if TYPE_CHECKING:
    from collections.abc import Callable
    from datetime import datetime
    from types import TracebackType

_LOGGER = logging.getLogger(__name__)


def _check_status(operation: str, status: int, body: bytes, *expected: HTTPStatus) -> None:
    if status not in expected:
        msg = f"{operation} failed: unexpected HTTP status {status}"
        raise ProtocolError(msg, status=status, body=body)


class OceanConnectClient:
    """Client for managing devices on the OceanConnect platform.

    The client authenticates with the application identifier and secret over a
    TLS connection carrying the configured client certificate. Tokens are
    obtained on first use and renewed automatically before they expire. Calls
    from concurrent tasks are serialized on one lock per client.

    Example:
        Basic usage:

        ```python
        from pyoceanconnect import DeviceQuery, OceanConnectClient, load_config

        config = load_config("oceanconnect.yaml")

        async with OceanConnectClient(config) as client:
            reply = await client.register_device("867726030000000", timeout=300)
            await client.set_device_info(reply.device_id, "Water meter 12")

            page = await client.get_devices(DeviceQuery(page_size=50))
            for device in page.devices:
                print(device.device_id, device.info.status)

            await client.send_command(reply.device_id, "Valve", "SET_STATE", {"open": False})
        ```

    Attributes:
        api: Low-level OceanConnectAPI instance for HTTP communication.
        session_manager: SessionManager owning the access token.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: ClientSession | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the OceanConnect client.

        Args:
            config: Connection parameters and account defaults.
            session: Optional aiohttp ClientSession. When injected, the caller
                owns the transport (including its TLS setup) and the client
                certificate is not loaded by this client.
            clock: Optional callable returning the current UTC time, used for
                token expiry decisions.

        Raises:
            ConfigurationError: If no session is injected and the client
                certificate cannot be loaded.
        """
        self._config = config
        ssl_context = build_ssl_context(config) if session is None else None

        self._session_manager = SessionManager(config, session=session, clock=clock)
        self._api = OceanConnectAPI(
            config=config,
            session_manager=self._session_manager,
            session=session,
            ssl_context=ssl_context,
        )

    @property
    def api(self) -> OceanConnectAPI:
        """Get the underlying API client.

        This provides direct access to low-level API methods for advanced use cases.
        """
        return self._api

    @property
    def session_manager(self) -> SessionManager:
        """Get the session manager owning the access token."""
        return self._session_manager

    @property
    def config(self) -> ClientConfig:
        """Read-only connection parameters and account defaults."""
        return self._config

    async def __aenter__(self) -> OceanConnectClient:
        """Enter the context manager.

        Creates the HTTP session if needed. No login happens until the first request.

        Returns:
            Self for use in async with statements.
        """
        await self._api.__aenter__()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager and close the HTTP session if this client created it."""
        await self._api.__aexit__(exc_type, exc_val, exc_tb)

    # -------------------------------------------------------------------------
    # Device Management
    # -------------------------------------------------------------------------

    async def get_device(self, device_id: str) -> Device:
        """Get a device by its identifier.

        Args:
            device_id: Platform-assigned device identifier.

        Returns:
            Device instance.

        Raises:
            ProtocolError: If the API answers with a status other than 200 or
                an undecodable body.
            AuthenticationError: If authentication fails.
            TransportError: If the request fails at the network level.
        """
        status, body = await self._api.get_device(device_id)
        _check_status("Get device", status, body, HTTPStatus.OK)

        try:
            return parse_device(decode_json_object(body))
        except ValueError as exc:
            msg = f"Get device failed: {exc}"
            raise ProtocolError(msg, status=status, body=body) from exc

    async def get_devices(self, query: DeviceQuery | None = None) -> DeviceList:
        """Query one page of devices.

        Args:
            query: Optional filters and paging. Defaults to the first page with
                the server's default page size.

        Returns:
            DeviceList with the devices on the requested page.

        Raises:
            ProtocolError: If the API answers with a status other than 200 or
                an undecodable body.
            AuthenticationError: If authentication fails.
            TransportError: If the request fails at the network level.
        """
        query = query or DeviceQuery()
        status, body = await self._api.get_devices(query.to_params())
        _check_status("Get devices", status, body, HTTPStatus.OK)

        try:
            devices = parse_device_list(decode_json_object(body))
        except ValueError as exc:
            msg = f"Get devices failed: {exc}"
            raise ProtocolError(msg, status=status, body=body) from exc

        _LOGGER.debug("Found %d device(s) on page %d", len(devices.devices), devices.page_no)
        return devices

    async def register_device(self, imei: str, *, timeout: int = 0) -> RegistrationReply:
        """Register a device identified by its IMEI.

        Args:
            imei: IMEI of the device, used as both node id and verify code.
            timeout: Seconds the device has to come online and bind. 0 lets the
                platform apply its default.

        Returns:
            RegistrationReply with the new device id and verify code.

        Raises:
            ProtocolError: If the API answers with a status other than 200 or
                an undecodable body.
            AuthenticationError: If authentication fails.
            TransportError: If the request fails at the network level.
        """
        registration = {
            "verifyCode": imei,
            "nodeId": imei,
            "timeout": timeout,
            "endUserId": self._config.end_user_id,
        }
        status, body = await self._api.register_device(registration)
        _check_status("Register device", status, body, HTTPStatus.OK)

        try:
            reply = parse_registration_reply(decode_json_object(body))
        except ValueError as exc:
            msg = f"Register device failed: {exc}"
            raise ProtocolError(msg, status=status, body=body) from exc

        _LOGGER.info("Registered device %s as %s", imei, reply.device_id)
        return reply

    async def set_device_info(self, device_id: str, name: str) -> None:
        """Set the name of a device and stamp it with the account defaults.

        Manufacturer, location, device type and model are taken from the client
        configuration.

        Args:
            device_id: Platform-assigned device identifier.
            name: New device name.

        Raises:
            ProtocolError: If the API answers with a status other than 204.
            AuthenticationError: If authentication fails.
            TransportError: If the request fails at the network level.
        """
        info = {
            "name": name,
            "mute": DEFAULT_MUTE,
            "manufacturerId": self._config.manufacturer_id,
            "manufacturerName": self._config.manufacturer_name,
            "location": self._config.location,
            "deviceType": self._config.device_type,
            "protocolType": DEFAULT_PROTOCOL_TYPE,
            "model": self._config.model,
        }
        status, body = await self._api.update_device_info(device_id, info)
        _check_status("Set device info", status, body, HTTPStatus.NO_CONTENT)

    async def delete_device(self, device_id: str) -> None:
        """Delete a device.

        Raises:
            ProtocolError: If the API answers with a status other than 204.
            AuthenticationError: If authentication fails.
            TransportError: If the request fails at the network level.
        """
        status, body = await self._api.delete_device(device_id)
        _check_status("Delete device", status, body, HTTPStatus.NO_CONTENT)
        _LOGGER.info("Deleted device %s", device_id)

    # -------------------------------------------------------------------------
    # Commands and Subscriptions
    # -------------------------------------------------------------------------

    async def send_command(
        self,
        device_id: str,
        service_id: str,
        method: str,
        params: Any,
        *,
        expire_time: int = 0,
        callback_url: str | None = None,
    ) -> DeviceCommand | None:
        """Send a command to a device.

        Args:
            device_id: Target device.
            service_id: Service of the device profile the command belongs to.
            method: Command name defined in the device profile.
            params: Command parameters, serialized as JSON.
            expire_time: Seconds the platform keeps the command pending for an
                offline device. 0 delivers immediately or not at all.
            callback_url: Optional URL the platform notifies on command status changes.

        Returns:
            DeviceCommand describing the accepted command, or None if the API
            returned no body.

        Raises:
            ProtocolError: If the API answers with a status other than 200/201
                or an undecodable body.
            AuthenticationError: If authentication fails.
            TransportError: If the request fails at the network level.
        """
        command: dict[str, Any] = {
            "deviceId": device_id,
            "command": {
                "serviceId": service_id,
                "method": method,
                "paras": params,
            },
            "expireTime": expire_time,
        }
        if callback_url:
            command["callbackUrl"] = callback_url

        status, body = await self._api.create_device_command(command)
        _check_status("Send command", status, body, HTTPStatus.OK, HTTPStatus.CREATED)

        if not body.strip():
            return None

        try:
            return parse_device_command(decode_json_object(body))
        except ValueError as exc:
            msg = f"Send command failed: {exc}"
            raise ProtocolError(msg, status=status, body=body) from exc

    async def subscribe(
        self,
        callback_url: str,
        *,
        notify_type: str = NOTIFY_DEVICE_DATA_CHANGED,
    ) -> Subscription:
        """Subscribe to notifications pushed to ``callback_url``.

        Args:
            callback_url: Public URL the platform POSTs notifications to.
            notify_type: Notification type to subscribe to.

        Returns:
            Subscription describing the registered callback.

        Raises:
            ProtocolError: If the API answers with a status other than 201.
            AuthenticationError: If authentication fails.
            TransportError: If the request fails at the network level.
        """
        status, body = await self._api.subscribe({"notifyType": notify_type, "callbackurl": callback_url})
        _check_status("Subscribe", status, body, HTTPStatus.CREATED)

        _LOGGER.info("Subscribed to %s notifications at %s", notify_type, callback_url)
        return Subscription(notify_type=notify_type, callback_url=callback_url)
