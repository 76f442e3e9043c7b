"""Receiver for notifications pushed to a subscription callback URL.

The platform POSTs a JSON body to the URL given to
``OceanConnectClient.subscribe()`` whenever subscribed device data changes.
This module builds an aiohttp web application that decodes those bodies and
hands them to an application callback.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import TYPE_CHECKING

from aiohttp import web

from pyoceanconnect.parsers import decode_json_object, parse_device_data_changed


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pyoceanconnect.models import DeviceDataChanged

_LOGGER = logging.getLogger(__name__)


def create_notification_app(
    handler: Callable[[DeviceDataChanged], Awaitable[None]],
    path: str = "/",
) -> web.Application:
    """Create a web application receiving ``deviceDataChanged`` notifications.

    Args:
        handler: Coroutine function awaited with each decoded notification.
        path: Path the callback URL points at.

    Returns:
        aiohttp Application to run with ``web.run_app()`` or an AppRunner.

    Example:
        ```python
        async def on_change(notification: DeviceDataChanged) -> None:
            print(notification.device_id, notification.service.data)

        app = create_notification_app(on_change, path="/oceanconnect")
        web.run_app(app, port=8443)
        ```
    """

    async def receive(request: web.Request) -> web.Response:
        body = await request.read()
        try:
            notification = parse_device_data_changed(decode_json_object(body))
        except ValueError as exc:
            _LOGGER.warning("Rejected notification: %s", exc)
            return web.Response(status=HTTPStatus.BAD_REQUEST, text=str(exc))

        _LOGGER.debug(
            "Notification for device %s, service %s",
            notification.device_id,
            notification.service.service_id,
        )
        await handler(notification)
        return web.Response(status=HTTPStatus.OK)

    app = web.Application()
    app.router.add_post(path, receive)
    return app
