"""Fixtures wiring a client to a router in-process."""

from collections.abc import AsyncGenerator

import httpx
import pytest

from schema_api.client.client import ApiClient, client
from schema_api.resources.models import ServerConfig
from schema_api.server.router import ApiRouter
from tests.fixtures.pokedex import SERVER_URL, Pokedex
from tests.fixtures.pokemon import pokemon_resources


@pytest.fixture
def pokedex() -> Pokedex:
    return Pokedex()


@pytest.fixture
def router(pokedex: Pokedex) -> ApiRouter:
    return ApiRouter(
        ServerConfig(resources=pokemon_resources()),
        {
            "pokemon": {"get": pokedex.get, "put": pokedex.put},
            "pokemon_list": {"get": pokedex.list, "post": pokedex.create},
        },
    )


@pytest.fixture
async def api(router: ApiRouter) -> AsyncGenerator[ApiClient]:
    """Client sending its requests straight into the router."""
    fetcher = httpx.AsyncClient(transport=httpx.ASGITransport(app=router))
    async with client(
        base_url=SERVER_URL,
        resources=pokemon_resources(),
        fetcher=fetcher,
        retry_delays_ms=[],
    ) as api_client:
        yield api_client
    await fetcher.aclose()
