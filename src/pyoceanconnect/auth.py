"""Session management for the OceanConnect API."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from http import HTTPStatus
from typing import TYPE_CHECKING

from aiohttp import ClientError, ClientSession, ClientTimeout

from pyoceanconnect.const import LOGIN_PATH
from pyoceanconnect.exceptions import AuthenticationError
from pyoceanconnect.models import Session
from pyoceanconnect.parsers import decode_json_object, parse_login_response


if TYPE_CHECKING:
    from collections.abc import Callable

    from pyoceanconnect.config import ClientConfig

_LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionManager:
    """Own the access token of a client and keep it fresh.

    The manager holds the current Session (token plus absolute expiry) and the
    single lock that serializes every authenticated exchange of a client.
    Callers hold ``lock`` around ``ensure_valid_session()`` and the request
    that uses the returned token, so at most one login is ever in flight and
    no request goes out while the token is being rotated.

    Example:
        async with manager.lock:
            session = await manager.ensure_valid_session()
            headers = {"Authorization": session.token}
            ...

    Attributes:
        lock: Serialization lock shared with the request dispatcher.
        safety_margin: How long before expiry a token is renewed ahead of time.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        session: ClientSession | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the session manager.

        Args:
            config: Client configuration providing URL, app id, secret and timeouts.
            session: Optional aiohttp ClientSession used for the login exchange.
                May also be provided later with set_session().
            clock: Optional callable returning the current UTC time. Defaults
                to the system clock.
        """
        self._config = config
        self._http_session = session
        self._clock = clock or _utcnow
        self._session: Session | None = None

        self.lock = asyncio.Lock()
        self.safety_margin = timedelta(seconds=config.token_safety_margin)

    def set_session(self, session: ClientSession) -> None:
        """Set the aiohttp session used for login requests.

        Args:
            session: The aiohttp ClientSession to use for requests.
        """
        self._http_session = session

    def now(self) -> datetime:
        """Return the current time according to the manager's clock."""
        return self._clock()

    async def ensure_valid_session(self) -> Session:
        """Return a session that stays valid for at least the safety margin.

        The caller must hold ``lock``. Only ``lock.locked()`` is checked, so a
        call made while another task holds the lock is not detected.

        Logs in when no session exists or when the current token expires within
        the safety margin. If the login fails, the previous session is kept
        unchanged and the error is raised; no retry is attempted.

        Returns:
            The current, fresh Session.

        Raises:
            RuntimeError: If the lock is not held by any task.
            AuthenticationError: If a required login fails.
        """
        if not self.lock.locked():
            msg = "ensure_valid_session() must be called while holding the session lock"
            raise RuntimeError(msg)

        current = self._session
        if current is not None and current.is_fresh(self.now(), self.safety_margin):
            return current

        if current is None:
            _LOGGER.debug("No session yet, logging in")
        else:
            _LOGGER.debug("Token expires at %s, within safety margin; logging in", current.expires_at)

        self._session = await self._login()
        return self._session

    async def authenticate(self, *, force: bool = False) -> Session:
        """Acquire the lock and make sure a fresh session exists.

        Args:
            force: If True, log in even if the current token is still fresh.

        Returns:
            The current, fresh Session.

        Raises:
            AuthenticationError: If the login fails.
        """
        async with self.lock:
            if force:
                _LOGGER.info("Forcing reauthentication")
                self._session = await self._login()
                return self._session
            return await self.ensure_valid_session()

    async def snapshot(self) -> Session | None:
        """Return the current session, read under the lock."""
        async with self.lock:
            return self._session

    async def clear(self) -> None:
        """Drop the current session so the next request logs in again."""
        async with self.lock:
            self._session = None
        _LOGGER.debug("Session cleared")

    async def _login(self) -> Session:
        """Perform a single login exchange and build the resulting session.

        Nothing is stored here; callers replace the current session with the
        returned value only when this method succeeds.

        Raises:
            AuthenticationError: If the endpoint is unreachable, answers with a
                non-200 status, returns an undecodable body, or grants a token
                that would expire within the safety margin.
        """
        if self._http_session is None:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        url = f"{self._config.base_url}{LOGIN_PATH}"
        data = {"appId": self._config.app_id, "secret": self._config.secret}
        timeout = ClientTimeout(total=self._config.request_timeout)

        _LOGGER.debug("Authenticating with %s", url)

        try:
            async with self._http_session.post(url, data=data, timeout=timeout) as response:
                status = response.status
                body = await response.read()
        except TimeoutError as exc:
            msg = "Authentication request timed out"
            raise AuthenticationError(msg) from exc
        except ClientError as exc:
            msg = f"Failed to connect to login endpoint: {exc}"
            raise AuthenticationError(msg) from exc

        if status == HTTPStatus.UNAUTHORIZED:
            msg = "Authentication failed: invalid application credentials"
            raise AuthenticationError(msg, status=status)

        if status != HTTPStatus.OK:
            msg = f"Authentication failed with status {status}"
            raise AuthenticationError(msg, status=status)

        try:
            login = parse_login_response(decode_json_object(body))
        except ValueError as exc:
            msg = f"Invalid login response: {exc}"
            raise AuthenticationError(msg, status=status) from exc

        now = self.now()
        try:
            expires_at = now + timedelta(seconds=login.expires_in)
        except (OverflowError, ValueError) as exc:
            msg = f"Invalid login response: token lifetime {login.expires_in!r} is out of range"
            raise AuthenticationError(msg, status=status) from exc

        session = Session(token=login.access_token, expires_at=expires_at)
        if not session.is_fresh(now, self.safety_margin):
            msg = (
                f"Granted token lifetime of {login.expires_in}s does not exceed "
                f"the safety margin of {self.safety_margin.total_seconds():.0f}s"
            )
            raise AuthenticationError(msg, status=status)

        _LOGGER.info("Authentication successful, token valid until %s", session.expires_at)
        return session
