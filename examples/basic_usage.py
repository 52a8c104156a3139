"""Example usage of the land-registry portal client."""
import asyncio
from cf_scraper import CadastralClient, PortalConfig


async def units_example():
    """List the administrative units of a county."""
    async with CadastralClient() as client:
        result = await client.list_units("ALBA")

    if result.success:
        print(f"Found {len(result.cities)} units")
        for city in result.cities[:10]:
            print(f"  {city.value}: {city.name}")
    else:
        print(f"Error: {result.error}")


async def search_example():
    """Query a record when the city id is already known."""
    config = PortalConfig(timeout=20, requests_per_second=1.0)

    async with CadastralClient(config) as client:
        result = await client.query_record(
            county="ALBA",
            city_name="Alba Iulia",
            city_id="1017",
            record_number="100002"
        )

    print(result.model_dump_json(indent=2))


async def lookup_example():
    """Resolve the city by name first, then query the record."""
    async with CadastralClient() as client:
        result = await client.lookup_record("ALBA", "Alba Iulia", "100002")
        print(f"Success: {result.success}")

        # The session was dropped after the search; this starts a fresh one
        again = await client.list_units("CJ")
        print(f"Units in CJ: {len(again.cities) if again.success else again.error}")


if __name__ == "__main__":
    # Run the units example
    asyncio.run(units_example())

    # Run the search example
    # asyncio.run(search_example())

    # Run the lookup example
    # asyncio.run(lookup_example())
