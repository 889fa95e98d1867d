import os

# PokeAPI access
POKEAPI_BASE_URL = os.getenv("POKEAPI_BASE_URL", "https://pokeapi.co/api/v2")
POKEAPI_TIMEOUT = float(os.getenv("POKEAPI_TIMEOUT", "5.0"))
# Records assembled concurrently for one page or type; stays below the connection pool size
POKEAPI_CONCURRENCY = int(os.getenv("POKEAPI_CONCURRENCY", "20"))

# Redis response cache
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379")
CACHE_TTL = int(os.getenv("POKEAPI_CACHE_TTL", "3600"))  # 1 hour

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Listing and search behaviour
PAGE_SIZE = 30
SEARCH_ANIMATION_MS = 400
DESCRIPTION_PLACEHOLDER = "No description available."
