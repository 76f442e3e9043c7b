"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from http import HTTPStatus
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientSession, web

from pyoceanconnect.client import OceanConnectClient
from pyoceanconnect.config import ClientConfig
from pyoceanconnect.const import LOGIN_PATH


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    from aiohttp.test_utils import TestClient


APP_ID = "app-123"
SECRET = "s3cret"

SAMPLE_DEVICE = {
    "deviceId": "dev-1",
    "gatewayId": "dev-1",
    "nodeType": "GATEWAY",
    "createTime": "20240101T080000Z",
    "lastModifiedTime": "20240102T093000Z",
    "deviceInfo": {
        "nodeId": "867726030000001",
        "name": "Water meter 1",
        "manufacturerId": "acme",
        "manufacturerName": "ACME",
        "location": "Basement",
        "deviceType": "WaterMeter",
        "model": "WM-100",
        "protocolType": "CoAP",
        "status": "ONLINE",
        "mute": "FALSE",
        "signalStrength": -87,
        "batteryLevel": 93,
    },
    "services": [
        {
            "serviceId": "Meter",
            "serviceType": "Meter",
            "data": {"volume": 1234.5},
            "eventTime": "20240102T093000Z",
        }
    ],
}

SAMPLE_DEVICE_LIST = {
    "totalCount": 2,
    "pageNo": 0,
    "pageSize": 50,
    "devices": [
        SAMPLE_DEVICE,
        {**SAMPLE_DEVICE, "deviceId": "dev-2", "deviceInfo": {"status": "OFFLINE"}, "services": None},
    ],
}


class FakeClock:
    """Controllable replacement for the system clock."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass
class RecordedRequest:
    """A non-login request as seen by the fake server."""

    method: str
    path_qs: str
    headers: dict[str, str]
    body: bytes
    received_at: datetime | None


@dataclass
class FakeOceanConnect:
    """In-process stand-in for the OceanConnect API.

    Issues tokens T1, T2, ... on each successful login and records every other
    request together with how many requests were in flight at once.
    """

    clock: FakeClock | None = None
    login_status: int = HTTPStatus.OK
    login_body: bytes | None = None
    expires_in: Any = 3600
    login_delay: float = 0
    request_delay: float = 0

    login_calls: int = 0
    login_forms: list[dict[str, str]] = field(default_factory=list)
    token_expiry: dict[str, datetime] = field(default_factory=dict)
    requests: list[RecordedRequest] = field(default_factory=list)
    in_flight: int = 0
    max_in_flight: int = 0

    def make_app(self) -> web.Application:
        @web.middleware
        async def track(request: web.Request, handler: Any) -> web.StreamResponse:
            if request.path == LOGIN_PATH:
                return await handler(request)

            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                self.requests.append(
                    RecordedRequest(
                        method=request.method,
                        path_qs=request.path_qs,
                        headers=dict(request.headers),
                        body=await request.read(),
                        received_at=self.clock() if self.clock else None,
                    )
                )
                await asyncio.sleep(self.request_delay)
                return await handler(request)
            finally:
                self.in_flight -= 1

        async def login(request: web.Request) -> web.Response:
            self.login_calls += 1
            self.login_forms.append(dict(await request.post()))
            await asyncio.sleep(self.login_delay)

            if self.login_status != HTTPStatus.OK:
                return web.Response(status=self.login_status)
            if self.login_body is not None:
                return web.Response(body=self.login_body, content_type="application/json")

            token = f"T{self.login_calls}"
            if self.clock is not None and isinstance(self.expires_in, int | float):
                self.token_expiry[token] = self.clock() + timedelta(seconds=self.expires_in)
            return web.json_response(
                {
                    "accessToken": token,
                    "tokenType": "bearer",
                    "refreshToken": f"R{self.login_calls}",
                    "expiresIn": self.expires_in,
                    "scope": "default",
                }
            )

        async def get_device(request: web.Request) -> web.Response:
            device_id = request.match_info["device_id"]
            if device_id == "missing":
                return web.Response(status=HTTPStatus.NOT_FOUND)
            if device_id == "garbage":
                return web.Response(text="<html>oops</html>")
            if device_id == "malformed":
                return web.json_response({"deviceId": device_id, "deviceInfo": ["x"]})
            return web.json_response({**SAMPLE_DEVICE, "deviceId": device_id})

        async def get_devices(request: web.Request) -> web.Response:
            return web.json_response(SAMPLE_DEVICE_LIST)

        async def update_device(request: web.Request) -> web.Response:
            if request.match_info["device_id"] == "missing":
                return web.Response(status=HTTPStatus.NOT_FOUND)
            return web.Response(status=HTTPStatus.NO_CONTENT)

        async def delete_device(request: web.Request) -> web.Response:
            if request.match_info["device_id"] == "missing":
                return web.Response(status=HTTPStatus.NOT_FOUND)
            return web.Response(status=HTTPStatus.NO_CONTENT)

        async def register_device(request: web.Request) -> web.Response:
            data = await request.json()
            return web.json_response(
                {
                    "verifyCode": data["verifyCode"],
                    "deviceId": "dev-new",
                    "timeout": data["timeout"] or 180,
                    "psk": "0123456789abcdef",
                }
            )

        async def create_command(request: web.Request) -> web.Response:
            data = await request.json()
            if data["deviceId"] == "silent":
                return web.Response(status=HTTPStatus.CREATED)
            return web.json_response(
                {
                    "commandId": "cmd-1",
                    "appId": APP_ID,
                    "deviceId": data["deviceId"],
                    "status": "PENDING",
                    "creationTime": "20240101T080000Z",
                    "expireTime": data["expireTime"],
                },
                status=HTTPStatus.CREATED,
            )

        async def subscribe(request: web.Request) -> web.Response:
            data = await request.json()
            if not data.get("callbackurl", "").startswith("https://"):
                return web.json_response({"error_code": "100222"}, status=HTTPStatus.BAD_REQUEST)
            return web.Response(status=HTTPStatus.CREATED)

        app = web.Application(middlewares=[track])
        app.router.add_post(LOGIN_PATH, login)
        app.router.add_get("/iocm/app/dm/v1.1.0/devices", get_devices)
        app.router.add_get("/iocm/app/dm/v1.1.0/devices/{device_id}", get_device)
        app.router.add_delete("/iocm/app/dm/v1.1.0/devices/{device_id}", delete_device)
        app.router.add_put("/iocm/app/dm/v1.2.0/devices/{device_id}", update_device)
        app.router.add_post("/iocm/app/reg/v1.2.0/devices", register_device)
        app.router.add_post("/iocm/app/cmd/v1.4.0/deviceCommands", create_command)
        app.router.add_post("/iocm/app/sub/v1.2.0/subscribe", subscribe)
        return app


@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed instant."""
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def fake_api(clock: FakeClock) -> FakeOceanConnect:
    """Create the fake OceanConnect API sharing the test clock."""
    return FakeOceanConnect(clock=clock)


@pytest.fixture
async def server_client(aiohttp_client: Any, fake_api: FakeOceanConnect) -> TestClient:
    """Serve the fake OceanConnect API and return a test client bound to it."""
    return await aiohttp_client(fake_api.make_app())


@pytest.fixture
def config(server_client: TestClient) -> ClientConfig:
    """Create a client configuration pointing at the fake API."""
    return ClientConfig(
        url=str(server_client.make_url("")),
        app_id=APP_ID,
        secret=SECRET,
        manufacturer_name="ACME",
        manufacturer_id="acme",
        end_user_id="user-42",
        location="Basement",
        device_type="WaterMeter",
        model="WM-100",
    )


@pytest.fixture
async def oc_client(
    config: ClientConfig,
    server_client: TestClient,
    clock: FakeClock,
) -> AsyncGenerator[OceanConnectClient]:
    """Create an OceanConnectClient talking to the fake API."""
    client = OceanConnectClient(config, session=server_client.session, clock=clock)
    async with client:
        yield client


@pytest.fixture
async def mock_session() -> AsyncGenerator[ClientSession]:
    """Create a mock aiohttp ClientSession.

    Yields:
        Mock ClientSession for testing.
    """
    session = AsyncMock(spec=ClientSession)
    session.closed = False

    async def mock_close() -> None:
        session.closed = True

    session.close = mock_close

    yield session

    if not session.closed:
        await session.close()


@pytest.fixture
def make_response() -> Callable[..., MagicMock]:
    """Return a factory for mock aiohttp ClientResponses usable as async context managers."""

    def factory(status: int = HTTPStatus.OK, body: bytes = b"") -> MagicMock:
        response = MagicMock()
        response.status = status
        response.headers = {}
        response.read = AsyncMock(return_value=body)
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=None)
        return response

    return factory
