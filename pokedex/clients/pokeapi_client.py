import asyncio
import json
import logging
from typing import Optional
from urllib.parse import quote

import httpx
import redis.asyncio as aioredis
from fastapi import HTTPException

from pokedex import config
from pokedex.models import PokemonRecord

logger = logging.getLogger(__name__)

# Define a custom exception for transient upstream failures (5xx, network, bad payloads)
class APIClientError(HTTPException):
    def __init__(self, status_code: int, detail: str):
        super().__init__(status_code=status_code, detail=f"External API Error: {detail}")

# Upstream 404 for a Pokemon, species or type
class PokemonNotFoundError(HTTPException):
    def __init__(self, resource: str):
        super().__init__(status_code=404, detail=f"'{resource}' not found.")

class PokeAPIClient:
    BASE_URL = config.POKEAPI_BASE_URL
    CACHE_TTL = config.CACHE_TTL
    CACHE_PREFIX = "pokeapi:"

    def __init__(self, redis_url: str = None):
        self.client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            timeout=config.POKEAPI_TIMEOUT,
            limits=httpx.Limits(max_connections=config.POKEAPI_CONCURRENCY * 2),
        )
        self._fetch_slots = asyncio.Semaphore(config.POKEAPI_CONCURRENCY)
        if redis_url is None:
            redis_url = config.REDIS_URL
        self.redis = aioredis.from_url(redis_url, decode_responses=True)

    def _cache_key(self, url: str) -> str:
        # Absolute URLs from list/type payloads and relative paths share one key space
        path = url.removeprefix(self.BASE_URL).rstrip("/")
        return f"{self.CACHE_PREFIX}{path.lower()}"

    async def _get_json(self, url: str) -> dict:
        """Internal method to GET a PokeAPI resource with caching and error handling."""
        cache_key = self._cache_key(url)
        cached_data = await self.redis.get(cache_key)
        if cached_data:
            logger.info(f"Cache hit for {cache_key}")
            return json.loads(cached_data)

        logger.info(f"Cache miss for {cache_key}")
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise PokemonNotFoundError(url.rstrip("/").rsplit("/", 1)[-1])
            logger.error(f"PokeAPI returned {e.response.status_code} for {url}")
            raise APIClientError(status_code=503, detail=f"PokeAPI failed with status {e.response.status_code}")
        except httpx.RequestError as e:
            logger.error(f"PokeAPI network error for {url}: {str(e)}")
            raise APIClientError(status_code=503, detail=f"PokeAPI network error: {str(e)}")
        except ValueError:
            logger.error(f"PokeAPI returned a non-JSON body for {url}")
            raise APIClientError(status_code=503, detail="PokeAPI returned an unexpected response format.")

        # Only successful results get cached
        await self.redis.setex(cache_key, self.CACHE_TTL, json.dumps(data))
        return data

    async def _build_record(self, detail: dict) -> PokemonRecord:
        """Fetches the species of an already-fetched Pokemon and assembles the record."""
        try:
            species = await self._get_json(detail["species"]["url"])
            english_description = next(
                (
                    entry["flavor_text"].replace("\n", " ").replace("\f", " ")
                    for entry in species.get("flavor_text_entries", [])
                    if entry["language"]["name"] == "en"
                ),
                config.DESCRIPTION_PLACEHOLDER,
            )
            artwork = ((detail.get("sprites") or {}).get("other") or {}).get("official-artwork") or {}
            return PokemonRecord(
                id=detail["id"],
                name=detail["name"],
                image=artwork.get("front_default"),
                types=tuple(
                    t["type"]["name"] for t in sorted(detail.get("types", []), key=lambda t: t.get("slot", 0))
                ),
                description=english_description,
            )
        except (KeyError, TypeError) as e:
            logger.error(f"Malformed PokeAPI payload for {detail.get('name', '?')}: missing {e}")
            raise APIClientError(status_code=503, detail="PokeAPI returned an unexpected response format.")

    async def _fetch_record(self, url: str) -> PokemonRecord:
        async with self._fetch_slots:
            detail = await self._get_json(url)
            return await self._build_record(detail)

    async def _fetch_all(self, data: dict, extract_urls) -> list[PokemonRecord]:
        try:
            urls = extract_urls(data)
        except (KeyError, TypeError) as e:
            logger.error(f"Malformed PokeAPI listing: missing {e}")
            raise APIClientError(status_code=503, detail="PokeAPI returned an unexpected response format.")
        return list(await asyncio.gather(*(self._fetch_record(url) for url in urls)))

    async def fetch_by_offset(self, limit: int, offset: int) -> list[PokemonRecord]:
        """
        Fetches one page of the default listing. A failure of any record fails the
        whole page.
        """
        data = await self._get_json(f"/pokemon?limit={limit}&offset={offset}")
        return await self._fetch_all(data, lambda payload: [entry["url"] for entry in payload["results"]])

    async def fetch_by_name(self, name: str) -> Optional[PokemonRecord]:
        """Fetches a single Pokemon by name. Returns None if PokeAPI does not know it."""
        normalized_name = name.strip().lower()
        # "." and ".." would be resolved as path segments
        if not normalized_name.strip("."):
            return None
        try:
            detail = await self._get_json(f"/pokemon/{quote(normalized_name, safe='')}")
        except PokemonNotFoundError:
            logger.info(f"No Pokemon named '{normalized_name}'")
            return None
        return await self._build_record(detail)

    async def fetch_by_type(self, type_name: str) -> list[PokemonRecord]:
        """Fetches every Pokemon of a PokeAPI type identifier (e.g. 'fire')."""
        data = await self._get_json(f"/type/{quote(type_name.lower(), safe='')}")
        return await self._fetch_all(data, lambda payload: [entry["pokemon"]["url"] for entry in payload["pokemon"]])

    async def clear_cache(self):
        """Clear the PokeAPI response cache. Useful for testing."""
        keys = await self.redis.keys(f"{self.CACHE_PREFIX}*")
        if keys:
            await self.redis.delete(*keys)

    async def close(self):
        """Close the HTTP client and Redis connection (call on app shutdown)."""
        await self.client.aclose()
        await self.redis.aclose()
