import pytest
from fakeredis.aioredis import FakeRedis

from pokedex.clients.pokeapi_client import PokeAPIClient

BASE_URL = "https://pokeapi.co/api/v2"


def make_detail(pokemon_id: int, name: str, types=("normal",), artwork=True) -> dict:
    """Minimal /pokemon/{id} payload."""
    return {
        "id": pokemon_id,
        "name": name,
        "sprites": {
            "other": {
                "official-artwork": {
                    "front_default": f"https://img.pokemondb.example/{pokemon_id}.png" if artwork else None
                }
            }
        },
        "types": [{"slot": slot, "type": {"name": t}} for slot, t in enumerate(types, start=1)],
        "species": {"url": f"{BASE_URL}/pokemon-species/{pokemon_id}/"},
    }


def make_species(pokemon_id: int, name: str, description: str | None = None) -> dict:
    entries = [{"flavor_text": "Texto em português.", "language": {"name": "pt"}}]
    if description is not None:
        entries.append({"flavor_text": description, "language": {"name": "en"}})
    return {"id": pokemon_id, "name": name, "flavor_text_entries": entries}


@pytest.fixture
def redis_client():
    """Provides a fake Redis client for testing."""
    return FakeRedis(decode_responses=True)


@pytest.fixture
def poke_client(redis_client):
    """Provides a PokeAPIClient with fake Redis."""
    client = PokeAPIClient()
    client.redis = redis_client  # Inject fake Redis
    return client


@pytest.fixture
def mock_pokemon(httpx_mock):
    """
    Registers the detail and species responses of one Pokemon. The detail is
    served at /pokemon/{name} when `by_name` is set, else at the /pokemon/{id}/
    URL that list and type payloads link to.
    """
    def add(pokemon_id, name, types=("normal",), description="A Pokemon.", artwork=True, by_name=False, optional=False):
        detail_url = f"{BASE_URL}/pokemon/{name}" if by_name else f"{BASE_URL}/pokemon/{pokemon_id}/"
        httpx_mock.add_response(url=detail_url, json=make_detail(pokemon_id, name, types, artwork), is_optional=optional)
        httpx_mock.add_response(
            url=f"{BASE_URL}/pokemon-species/{pokemon_id}/",
            json=make_species(pokemon_id, name, description),
            is_optional=optional,
        )
    return add


@pytest.fixture
def mock_listing(httpx_mock, mock_pokemon):
    """Registers a listing page of `count` Pokemon named poke-<id>, starting at id offset+1."""
    def add(offset, count, limit=30):
        results = []
        for pokemon_id in range(offset + 1, offset + count + 1):
            mock_pokemon(pokemon_id, f"poke-{pokemon_id}", description=f"Entry\nnumber {pokemon_id}.")
            results.append({"name": f"poke-{pokemon_id}", "url": f"{BASE_URL}/pokemon/{pokemon_id}/"})
        httpx_mock.add_response(
            url=f"{BASE_URL}/pokemon?limit={limit}&offset={offset}",
            json={"count": 1302, "results": results},
        )
    return add


@pytest.fixture
def mock_type(httpx_mock, mock_pokemon):
    """Registers a /type/{name} response and every member Pokemon."""
    def add(type_name, members):
        for pokemon_id, name in members:
            mock_pokemon(pokemon_id, name, types=(type_name,), description=f"A {type_name} Pokemon.")
        httpx_mock.add_response(
            url=f"{BASE_URL}/type/{type_name}",
            json={
                "name": type_name,
                "pokemon": [
                    {"slot": 1, "pokemon": {"name": name, "url": f"{BASE_URL}/pokemon/{pokemon_id}/"}}
                    for pokemon_id, name in members
                ],
            },
        )
    return add
