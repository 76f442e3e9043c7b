"""Basic usage example for pyoceanconnect library."""

import asyncio

from pyoceanconnect import DeviceQuery, OceanConnectClient, load_config


async def main() -> None:
    """Demonstrate basic usage of pyoceanconnect."""
    # Credentials, certificate paths and device metadata come from YAML
    config = load_config("oceanconnect.yaml")

    async with OceanConnectClient(config) as client:
        print("Connected to OceanConnect")

        # Register a new device by its IMEI
        reply = await client.register_device("860000000000001", timeout=0)
        print(f"Registered device {reply.device_id} (verify code {reply.verify_code})")

        # Fill in name and profile fields from the configuration
        await client.set_device_info(reply.device_id, "Meter 1")

        # List online devices
        page = await client.get_devices(DeviceQuery(status="ONLINE", page_size=25))
        print(f"Found {page.total_count} online device(s)")

        for device in page.devices:
            print(f"\nDevice: {device.info.name}")
            print(f"  Device ID: {device.device_id}")
            print(f"  Model: {device.info.model}")
            print(f"  Firmware: {device.info.fw_version}")
            for service in device.services:
                print(f"  {service.service_id}: {service.data}")

        # Send a command to the new device
        command = await client.send_command(
            reply.device_id,
            "Meter",
            "SET_INTERVAL",
            {"interval": 3600},
            expire_time=86400,
        )
        if command is not None:
            print(f"\nCommand {command.command_id} is {command.status}")


if __name__ == "__main__":
    asyncio.run(main())
