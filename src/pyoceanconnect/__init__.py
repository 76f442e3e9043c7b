"""Python client library for the OceanConnect IoT device-management platform.

This package provides an async client for registering devices, querying and
updating device metadata, sending commands and subscribing to notifications.

The library is organized into three layers:
1. **Session Layer** (pyoceanconnect.auth): Access token lifecycle and request serialization
2. **API Layer** (pyoceanconnect.api): Authenticated HTTP dispatch to OceanConnect endpoints
3. **Client Layer** (pyoceanconnect.client): Typed operations on devices, commands and subscriptions

Example:
    Basic usage:

    ```python
    from pyoceanconnect import OceanConnectClient, load_config

    config = load_config("oceanconnect.yaml")

    async with OceanConnectClient(config) as client:
        device = await client.get_device("a1b2c3d4-0000-0000-0000-000000000000")
        print(f"{device.info.name}: {device.info.status}")
    ```

    Advanced usage with direct API access:

    ```python
    async with OceanConnectClient(config) as client:
        status, body = await client.api.dispatch("GET", "/iocm/app/dm/v1.1.0/devices", params={"pageNo": 0})
    ```
"""

from __future__ import annotations

from pyoceanconnect.api import OceanConnectAPI
from pyoceanconnect.auth import SessionManager
from pyoceanconnect.client import OceanConnectClient
from pyoceanconnect.config import ClientConfig, build_ssl_context, load_config
from pyoceanconnect.exceptions import (
    AuthenticationError,
    ConfigurationError,
    OceanConnectError,
    ProtocolError,
    TransportError,
    TransportTimeoutError,
)
from pyoceanconnect.models import (
    Device,
    DeviceCommand,
    DeviceDataChanged,
    DeviceInfo,
    DeviceList,
    DeviceQuery,
    DeviceService,
    LoginResponse,
    RegistrationReply,
    Session,
    Subscription,
)
from pyoceanconnect.notifications import create_notification_app
from pyoceanconnect.query import build_query, with_query


__version__ = "0.1.0"

__all__ = [
    "AuthenticationError",
    "ClientConfig",
    "ConfigurationError",
    "Device",
    "DeviceCommand",
    "DeviceDataChanged",
    "DeviceInfo",
    "DeviceList",
    "DeviceQuery",
    "DeviceService",
    "LoginResponse",
    "OceanConnectAPI",
    "OceanConnectClient",
    "OceanConnectError",
    "ProtocolError",
    "RegistrationReply",
    "Session",
    "SessionManager",
    "Subscription",
    "TransportError",
    "TransportTimeoutError",
    "__version__",
    "build_query",
    "build_ssl_context",
    "create_notification_app",
    "load_config",
    "with_query",
]
