"""Example subscribing to device data changes and receiving the notifications."""

import asyncio
import logging

from aiohttp import web

from pyoceanconnect import DeviceDataChanged, OceanConnectClient, create_notification_app, load_config


CALLBACK_URL = "https://callback.example.com:8443/oceanconnect"


async def on_change(notification: DeviceDataChanged) -> None:
    """Print each reported service value."""
    service = notification.service
    print(f"{notification.device_id} {service.service_id} at {service.event_time}: {service.data}")


async def main() -> None:
    """Subscribe, then serve the callback until interrupted."""
    logging.basicConfig(level=logging.INFO)
    config = load_config("oceanconnect.yaml")

    async with OceanConnectClient(config) as client:
        await client.subscribe(CALLBACK_URL)

    runner = web.AppRunner(create_notification_app(on_change, path="/oceanconnect"))
    await runner.setup()
    site = web.TCPSite(runner, port=8443)
    await site.start()
    print("Waiting for notifications...")

    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


if __name__ == "__main__":
    asyncio.run(main())
