"""Parsing utilities for OceanConnect API responses.

This module provides shared parsing functions that convert decoded JSON
responses into data models. Parsers raise ValueError when a response does
not have the expected shape; callers turn that into a ProtocolError.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import UTC, datetime
from typing import Any

from pyoceanconnect.const import NOTIFY_DEVICE_DATA_CHANGED, TIMESTAMP_FORMAT
from pyoceanconnect.models import (
    Device,
    DeviceCommand,
    DeviceDataChanged,
    DeviceInfo,
    DeviceList,
    DeviceService,
    LoginResponse,
    RegistrationReply,
)


__all__ = [
    "decode_json_object",
    "parse_device",
    "parse_device_command",
    "parse_device_data_changed",
    "parse_device_info",
    "parse_device_list",
    "parse_device_service",
    "parse_login_response",
    "parse_registration_reply",
    "parse_timestamp",
]

_LOGGER = logging.getLogger(__name__)


def decode_json_object(body: bytes) -> dict[str, Any]:
    """Decode a response body that must be a JSON object.

    Raises:
        ValueError: If the body is not valid JSON or not an object.
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        msg = f"Invalid JSON response: {exc}"
        raise ValueError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Expected a JSON object, got {type(data).__name__}"
        raise ValueError(msg)  # noqa: TRY004
    return data


def _require_str(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        msg = f"Missing or invalid '{key}' in response"
        raise ValueError(msg)
    return value


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a compact platform timestamp such as ``20170101T120000Z``.

    Returns:
        Timezone-aware UTC datetime, or None if the value is missing or malformed.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT).replace(tzinfo=UTC)
    except ValueError:
        _LOGGER.debug("Ignoring unparsable timestamp %r", value)
        return None


def parse_login_response(data: dict[str, Any]) -> LoginResponse:
    """Parse the body of a successful login.

    Args:
        data: Decoded login response in format:
              {"accessToken": str, "expiresIn": int, "tokenType": str, ...}

    Returns:
        LoginResponse instance.

    Raises:
        ValueError: If the token or its lifetime is missing or invalid.
    """
    access_token = _require_str(data, "accessToken")

    expires_in = data.get("expiresIn")
    # bool is an int subclass and never a valid lifetime
    if (
        isinstance(expires_in, bool)
        or not isinstance(expires_in, int | float)
        or not math.isfinite(expires_in)
        or expires_in <= 0
    ):
        msg = f"Missing or invalid 'expiresIn' in login response: {expires_in!r}"
        raise ValueError(msg)

    return LoginResponse(
        access_token=access_token,
        expires_in=expires_in,
        token_type=data.get("tokenType"),
        refresh_token=data.get("refreshToken"),
        scope=data.get("scope"),
    )


def parse_device_info(data: dict[str, Any]) -> DeviceInfo:
    """Parse the ``deviceInfo`` block of a device."""
    if not isinstance(data, dict):
        msg = "'deviceInfo' must be an object"
        raise ValueError(msg)  # noqa: TRY004

    return DeviceInfo(
        node_id=data.get("nodeId"),
        name=data.get("name"),
        description=data.get("description"),
        manufacturer_id=data.get("manufacturerId"),
        manufacturer_name=data.get("manufacturerName"),
        mac=data.get("mac"),
        location=data.get("location"),
        device_type=data.get("deviceType"),
        model=data.get("model"),
        sw_version=data.get("swVersion"),
        fw_version=data.get("fwVersion"),
        hw_version=data.get("hwVersion"),
        protocol_type=data.get("protocolType"),
        status=data.get("status"),
        status_detail=data.get("statusDetail"),
        mute=data.get("mute"),
        serial_number=data.get("serialNumber"),
        signal_strength=data.get("signalStrength"),
        battery_level=data.get("batteryLevel"),
    )


def parse_device_service(data: dict[str, Any]) -> DeviceService:
    """Parse one entry of a device's ``services`` list.

    Raises:
        ValueError: If the service has no identifier or its data is not an object.
    """
    if not isinstance(data, dict):
        msg = "Service entry must be an object"
        raise ValueError(msg)  # noqa: TRY004

    service_data = data.get("data") or {}
    if not isinstance(service_data, dict):
        msg = "Service 'data' must be an object"
        raise ValueError(msg)  # noqa: TRY004

    return DeviceService(
        service_id=_require_str(data, "serviceId"),
        service_type=data.get("serviceType"),
        data=service_data,
        event_time=parse_timestamp(data.get("eventTime")),
    )


def parse_device(data: dict[str, Any]) -> Device:
    """Parse a device object.

    Args:
        data: Raw device data in format:
              {"deviceId": str, "gatewayId": str, "nodeType": str,
               "deviceInfo": {...}, "services": [{...}], ...}

    Returns:
        Device instance.

    Raises:
        ValueError: If the device has no identifier or malformed services.
    """
    if not isinstance(data, dict):
        msg = "Device entry must be an object"
        raise ValueError(msg)  # noqa: TRY004

    services = data.get("services") or []
    if not isinstance(services, list):
        msg = "'services' must be a list"
        raise ValueError(msg)  # noqa: TRY004

    return Device(
        device_id=_require_str(data, "deviceId"),
        gateway_id=data.get("gatewayId"),
        node_type=data.get("nodeType"),
        create_time=parse_timestamp(data.get("createTime")),
        last_modified_time=parse_timestamp(data.get("lastModifiedTime")),
        info=parse_device_info(data.get("deviceInfo") or {}),
        services=[parse_device_service(service) for service in services],
        raw_data=data,
    )


def parse_device_list(data: dict[str, Any]) -> DeviceList:
    """Parse one page of the device list query."""
    devices = data.get("devices") or []
    if not isinstance(devices, list):
        msg = "'devices' must be a list"
        raise ValueError(msg)  # noqa: TRY004

    return DeviceList(
        total_count=data.get("totalCount", len(devices)),
        page_no=data.get("pageNo", 0),
        page_size=data.get("pageSize", len(devices)),
        devices=[parse_device(device) for device in devices],
    )


def parse_registration_reply(data: dict[str, Any]) -> RegistrationReply:
    """Parse the response of a device registration."""
    return RegistrationReply(
        verify_code=_require_str(data, "verifyCode"),
        device_id=_require_str(data, "deviceId"),
        timeout=data.get("timeout", 0),
        psk=data.get("psk"),
    )


def parse_device_command(data: dict[str, Any]) -> DeviceCommand:
    """Parse the response of a command creation."""
    return DeviceCommand(
        command_id=_require_str(data, "commandId"),
        device_id=data.get("deviceId"),
        app_id=data.get("appId"),
        status=data.get("status"),
        creation_time=parse_timestamp(data.get("creationTime")),
        expire_time=data.get("expireTime"),
        raw_data=data,
    )


def parse_device_data_changed(data: dict[str, Any]) -> DeviceDataChanged:
    """Parse a ``deviceDataChanged`` notification pushed to a subscription callback.

    Args:
        data: Notification body in format:
              {"notifyType": "deviceDataChanged", "deviceId": str,
               "gatewayId": str, "requestId": str, "service": {...}}

    Raises:
        ValueError: If the notification is of another type or lacks required fields.
    """
    notify_type = _require_str(data, "notifyType")
    if notify_type != NOTIFY_DEVICE_DATA_CHANGED:
        msg = f"Unsupported notification type: {notify_type}"
        raise ValueError(msg)

    return DeviceDataChanged(
        notify_type=notify_type,
        device_id=_require_str(data, "deviceId"),
        service=parse_device_service(data.get("service")),
        gateway_id=data.get("gatewayId"),
        request_id=data.get("requestId"),
    )
