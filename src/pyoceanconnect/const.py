"""Constants for pyoceanconnect library."""

from __future__ import annotations


# API Configuration
DEFAULT_TIMEOUT = 30  # seconds
DEFAULT_TOKEN_SAFETY_MARGIN = 300  # refresh tokens 5 minutes before they expire

# Request headers
HEADER_APP_KEY = "app_key"
HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"
CONTENT_TYPE_JSON = "application/json"

# Endpoints
LOGIN_PATH = "/iocm/app/sec/v1.1.0/login"
DEVICES_PATH = "/iocm/app/dm/v1.1.0/devices"
DEVICE_INFO_PATH = "/iocm/app/dm/v1.2.0/devices"
REGISTRATION_PATH = "/iocm/app/reg/v1.2.0/devices"
COMMANDS_PATH = "/iocm/app/cmd/v1.4.0/deviceCommands"
SUBSCRIBE_PATH = "/iocm/app/sub/v1.2.0/subscribe"

# Notification types
NOTIFY_DEVICE_DATA_CHANGED = "deviceDataChanged"

# Device defaults applied on metadata updates
DEFAULT_PROTOCOL_TYPE = "CoAP"
DEFAULT_MUTE = "FALSE"

# Compact timestamp format used throughout the platform, e.g. 20170101T120000Z
TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"
