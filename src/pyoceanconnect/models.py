"""Data models for OceanConnect API requests and responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any


__all__ = [
    "Device",
    "DeviceCommand",
    "DeviceDataChanged",
    "DeviceInfo",
    "DeviceList",
    "DeviceQuery",
    "DeviceService",
    "LoginResponse",
    "RegistrationReply",
    "Session",
    "Subscription",
]


@dataclass(frozen=True)
class Session:
    """An access token together with the moment it stops being valid.

    Sessions are immutable: a new login produces a new Session object which
    replaces the previous one as a whole.

    Attributes:
        token: Opaque access token sent in the Authorization header.
        expires_at: Absolute (UTC) expiry of the token as granted by the server.
    """

    token: str
    expires_at: datetime

    def is_fresh(self, now: datetime, margin: timedelta) -> bool:
        """Check whether the token stays valid for at least ``margin`` after ``now``."""
        return self.expires_at > now + margin


@dataclass
class LoginResponse:
    """Response from authentication endpoint.

    Attributes:
        access_token: Token for API requests.
        expires_in: Seconds until the token expires.
        token_type: Token type reported by the server (usually "bearer").
        refresh_token: Refresh token, if issued.
        scope: Granted scope, if reported.
    """

    access_token: str
    expires_in: float
    token_type: str | None = None
    refresh_token: str | None = None
    scope: str | None = None


@dataclass
class DeviceQuery:
    """Filters for the device list query.

    Only ``page_no`` is always sent; every other filter is omitted when None.
    """

    gateway_id: str | None = None
    node_type: str | None = None
    page_no: int = 0
    page_size: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    status: str | None = None
    sort: str | None = None

    def to_params(self) -> dict[str, str | int | None]:
        """Return query parameters in the order the API documents them."""
        return {
            "gatewayId": self.gateway_id,
            "nodeType": self.node_type,
            "pageNo": self.page_no,
            "pageSize": self.page_size,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "status": self.status,
            "sort": self.sort,
        }


@dataclass
class DeviceInfo:
    """Device metadata as stored on the platform.

    Attributes:
        node_id: Hardware identifier of the device (usually the IMEI).
        name: Human-readable device name.
        status: Connectivity status (e.g. "ONLINE", "OFFLINE").
    """

    node_id: str | None = None
    name: str | None = None
    description: str | None = None
    manufacturer_id: str | None = None
    manufacturer_name: str | None = None
    mac: str | None = None
    location: str | None = None
    device_type: str | None = None
    model: str | None = None
    sw_version: str | None = None
    fw_version: str | None = None
    hw_version: str | None = None
    protocol_type: str | None = None
    status: str | None = None
    status_detail: str | None = None
    mute: str | None = None
    serial_number: str | None = None
    signal_strength: int | None = None
    battery_level: int | None = None


@dataclass
class DeviceService:
    """Latest data reported by one service of a device.

    Attributes:
        service_id: Service identifier from the device profile.
        service_type: Service type from the device profile.
        data: Reported property values.
        event_time: When the data was reported.
    """

    service_id: str
    service_type: str | None = None
    data: dict[str, Any] = field(default_factory=dict)
    event_time: datetime | None = None


@dataclass
class Device:
    """A device registered with the platform.

    Attributes:
        device_id: Platform-assigned device identifier.
        gateway_id: Identifier of the gateway the device is attached to.
        node_type: "GATEWAY" or "ENDPOINT".
        info: Device metadata.
        services: Latest service data reported by the device.
        raw_data: Original API response data for debugging.
    """

    device_id: str
    gateway_id: str | None = None
    node_type: str | None = None
    create_time: datetime | None = None
    last_modified_time: datetime | None = None
    info: DeviceInfo = field(default_factory=DeviceInfo)
    services: list[DeviceService] = field(default_factory=list)
    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def is_online(self) -> bool:
        """Check if device is online."""
        return self.info.status == "ONLINE"

    def get_service(self, service_id: str) -> DeviceService | None:
        """Return the service with the given identifier, if the device reports it."""
        for service in self.services:
            if service.service_id == service_id:
                return service
        return None


@dataclass
class DeviceList:
    """One page of the device list query.

    Attributes:
        total_count: Number of devices matching the query across all pages.
        page_no: Page returned.
        page_size: Page size used by the server.
        devices: Devices on this page.
    """

    total_count: int
    page_no: int
    page_size: int
    devices: list[Device]


@dataclass
class RegistrationReply:
    """Response from device registration.

    Attributes:
        verify_code: Code the device uses to bind itself.
        device_id: Platform-assigned device identifier.
        timeout: Seconds the device has to bind before registration lapses.
        psk: Pre-shared key for the device, if issued.
    """

    verify_code: str
    device_id: str
    timeout: int = 0
    psk: str | None = None


@dataclass
class DeviceCommand:
    """A command accepted by the platform for delivery to a device."""

    command_id: str
    device_id: str | None = None
    app_id: str | None = None
    status: str | None = None
    creation_time: datetime | None = None
    expire_time: int | None = None
    raw_data: dict[str, Any] = field(default_factory=dict)


@dataclass
class Subscription:
    """An active notification subscription."""

    notify_type: str
    callback_url: str


@dataclass
class DeviceDataChanged:
    """Notification pushed to a subscription callback when device data changes.

    Attributes:
        notify_type: Always "deviceDataChanged".
        device_id: Device that reported the data.
        service: The service whose data changed.
    """

    notify_type: str
    device_id: str
    service: DeviceService
    gateway_id: str | None = None
    request_id: str | None = None
