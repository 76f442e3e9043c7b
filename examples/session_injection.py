"""Example showing session injection for applications that own the HTTP session."""

import asyncio

from aiohttp import ClientSession, TCPConnector

from pyoceanconnect import OceanConnectClient, build_ssl_context, load_config


async def main() -> None:
    """Demonstrate sharing an application-managed aiohttp session."""
    config = load_config("oceanconnect.yaml")

    # The injected session must present the client certificate itself
    connector = TCPConnector(ssl=build_ssl_context(config))

    async with ClientSession(connector=connector) as session:
        print("Using application-managed aiohttp session")

        async with OceanConnectClient(config, session=session) as client:
            page = await client.get_devices()
            print(f"Found {page.total_count} device(s) using injected session")

        # Session remains open after client exits
        print("\nClient closed, but session still available for other requests")


if __name__ == "__main__":
    asyncio.run(main())
