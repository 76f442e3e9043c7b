"""Client configuration and credential loading."""

from __future__ import annotations

import logging
import math
import ssl
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from pyoceanconnect.const import DEFAULT_TIMEOUT, DEFAULT_TOKEN_SAFETY_MARGIN
from pyoceanconnect.exceptions import ConfigurationError


if TYPE_CHECKING:
    from collections.abc import Mapping

_LOGGER = logging.getLogger(__name__)

_REQUIRED_KEYS = ("url", "app_id")
_BOOL_KEYS = frozenset({"insecure_skip_verify"})
_POSITIVE_KEYS = frozenset({"request_timeout"})
_NON_NEGATIVE_KEYS = frozenset({"token_safety_margin"})


@dataclass(frozen=True)
class ClientConfig:
    """Connection parameters shared by every request of a client.

    The account defaults (manufacturer, location, device type and model) are
    not used for authentication; they are copied verbatim into device
    metadata updates.

    Attributes:
        url: Base URL of the OceanConnect API (trailing slash is ignored).
        app_id: Application identifier, sent as ``app_key`` on every request.
        secret: Application secret used to log in.
        cert_file: Path to the PEM client certificate.
        key_file: Path to the PEM private key of the client certificate.
        insecure_skip_verify: Skip verification of the server certificate.
        request_timeout: Total timeout for a single HTTP call, in seconds.
        token_safety_margin: Seconds before token expiry at which the token is
            renewed ahead of time.
    """

    url: str
    app_id: str
    secret: str = field(default="", repr=False)
    cert_file: str = ""
    key_file: str = ""

    manufacturer_name: str = ""
    manufacturer_id: str = ""
    end_user_id: str = ""
    location: str = ""
    device_type: str = ""
    model: str = ""

    insecure_skip_verify: bool = False
    request_timeout: float = DEFAULT_TIMEOUT
    token_safety_margin: float = DEFAULT_TOKEN_SAFETY_MARGIN

    @property
    def base_url(self) -> str:
        """Base URL without a trailing slash."""
        return self.url.rstrip("/")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ClientConfig:
        """Build a config from a mapping using the YAML key names.

        Args:
            data: Configuration values, e.g. the result of parsing a YAML file.

        Returns:
            ClientConfig instance.

        Raises:
            ConfigurationError: If keys are unknown, required keys are missing
                or a value has the wrong type.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(str(key) for key in data if key not in known)
        if unknown:
            msg = f"Unknown configuration keys: {', '.join(unknown)}"
            raise ConfigurationError(msg)

        missing = [key for key in _REQUIRED_KEYS if not data.get(key)]
        if missing:
            msg = f"Missing required configuration keys: {', '.join(missing)}"
            raise ConfigurationError(msg)

        values: dict[str, Any] = {}
        for key, value in data.items():
            if key in _BOOL_KEYS:
                values[key] = _as_bool(key, value)
            elif key in _POSITIVE_KEYS:
                values[key] = _as_seconds(key, value, allow_zero=False)
            elif key in _NON_NEGATIVE_KEYS:
                values[key] = _as_seconds(key, value, allow_zero=True)
            else:
                values[key] = _as_str(key, value)
        return cls(**values)


def _as_str(key: str, value: Any) -> str:
    # YAML reads bare numbers such as a manufacturer id as int
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, str | int | float):
        msg = f"Configuration key {key} must be a string, got {type(value).__name__}"
        raise ConfigurationError(msg)
    return str(value)


def _as_bool(key: str, value: Any) -> bool:
    if not isinstance(value, bool):
        msg = f"Configuration key {key} must be true or false, got {value!r}"
        raise ConfigurationError(msg)
    return value


def _as_seconds(key: str, value: Any, *, allow_zero: bool) -> float:
    if isinstance(value, bool):
        msg = f"Configuration key {key} must be a number of seconds, got {value!r}"
        raise ConfigurationError(msg)
    try:
        seconds = float(value)
    except (TypeError, ValueError) as exc:
        msg = f"Configuration key {key} must be a number of seconds, got {value!r}"
        raise ConfigurationError(msg) from exc

    if not math.isfinite(seconds) or seconds < 0 or (seconds == 0 and not allow_zero):
        msg = f"Configuration key {key} is out of range: {value!r}"
        raise ConfigurationError(msg)
    return seconds


def load_config(path: str | Path) -> ClientConfig:
    """Load client configuration from a YAML file.

    Args:
        path: Path to the YAML file.

    Returns:
        ClientConfig instance.

    Raises:
        ConfigurationError: If the file cannot be read or does not hold a valid config.
    """
    try:
        with Path(path).open(encoding="utf-8") as config_file:
            data = yaml.safe_load(config_file)
    except OSError as exc:
        msg = f"Cannot read configuration file {path}: {exc}"
        raise ConfigurationError(msg) from exc
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in configuration file {path}: {exc}"
        raise ConfigurationError(msg) from exc

    if not isinstance(data, dict):
        msg = f"Configuration file {path} must contain a mapping"
        raise ConfigurationError(msg)

    _LOGGER.debug("Loaded configuration from %s", path)
    return ClientConfig.from_mapping(data)


def build_ssl_context(config: ClientConfig) -> ssl.SSLContext:
    """Create the TLS context carrying the client certificate.

    Args:
        config: Client configuration with certificate and key paths.

    Returns:
        SSL context to use for every connection of the client.

    Raises:
        ConfigurationError: If the certificate or key is missing, unreadable or malformed.
    """
    if not config.cert_file or not config.key_file:
        msg = "Client certificate and key files must be configured"
        raise ConfigurationError(msg)

    context = ssl.create_default_context()
    if config.insecure_skip_verify:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE

    try:
        context.load_cert_chain(certfile=config.cert_file, keyfile=config.key_file)
    except OSError as exc:
        # ssl.SSLError is an OSError subclass, so this covers bad PEM data too
        msg = f"Cannot load client certificate {config.cert_file}: {exc}"
        raise ConfigurationError(msg) from exc

    return context
