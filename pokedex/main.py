import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException, Query, Response, status

from pokedex import config
from pokedex.clients import PokeAPIClient
from pokedex.config import PAGE_SIZE
from pokedex.dependencies import close_clients, get_poke_client, get_pokedex_service, get_session_registry
from pokedex.models import (
    FetchStatus,
    PokedexState,
    PokemonPage,
    PokemonRecord,
    SearchOutcome,
    SearchTextUpdate,
    SessionResponse,
)
from pokedex.services import PokedexService, SessionRegistry
from pokedex.type_names import resolve_type_name

logging.basicConfig(level=config.LOG_LEVEL)

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_clients()

app = FastAPI(
    title="Pokedex Search API",
    description="Pokemon listing, name/type search and paginated pokedex sessions backed by PokeAPI.",
    lifespan=lifespan,
)

# --- Stateless lookups ---

@app.get("/pokemon", response_model=PokemonPage, summary="Returns one page of the default listing")
async def list_pokemon(
    limit: int = Query(PAGE_SIZE, ge=1, le=100),
    offset: int = Query(0, ge=0),
    poke_client: PokeAPIClient = Depends(get_poke_client),
):
    # APIClientError (503) propagates as an HTTPException
    records = await poke_client.fetch_by_offset(limit, offset)
    return PokemonPage(
        records=records,
        offset=offset,
        next_offset=offset + limit,
        has_more=len(records) == limit,
    )


@app.get("/pokemon/{name}", response_model=PokemonRecord, summary="Returns a single Pokemon by name")
async def get_pokemon(name: str, poke_client: PokeAPIClient = Depends(get_poke_client)):
    record = await poke_client.fetch_by_name(name)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Pokemon '{name}' not found.")
    return record


@app.get("/types/{type_name}", response_model=list[PokemonRecord], summary="Returns every Pokemon of a type")
async def get_pokemon_by_type(type_name: str, poke_client: PokeAPIClient = Depends(get_poke_client)):
    """Accepts PokeAPI identifiers ('fire') and Portuguese names ('fogo')."""
    resolved = resolve_type_name(type_name)
    if resolved is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Type '{type_name}' not found.")
    return await poke_client.fetch_by_type(resolved)


@app.get("/search", response_model=SearchOutcome, summary="Resolves a free-text search as a type or a name")
async def search(q: str = "", service: PokedexService = Depends(get_pokedex_service)):
    outcome = await service.resolve(q)
    if outcome.status is FetchStatus.UNAVAILABLE:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=outcome.detail)
    # NOT_FOUND is a regular outcome with an empty collection
    return outcome

# --- Pokedex sessions ---

@app.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Opens a pokedex session and loads the first page",
)
async def create_session(
    service: PokedexService = Depends(get_pokedex_service),
    registry: SessionRegistry = Depends(get_session_registry),
):
    session_id, session = registry.create(service)
    state = await session.start()
    return SessionResponse(session_id=session_id, state=state)


@app.get("/sessions/{session_id}", response_model=PokedexState)
async def get_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    return registry.get(session_id).state


@app.put("/sessions/{session_id}/search-text", response_model=PokedexState)
async def set_search_text(
    session_id: str,
    update: SearchTextUpdate,
    registry: SessionRegistry = Depends(get_session_registry),
):
    return registry.get(session_id).set_search_text(update.text)


@app.post("/sessions/{session_id}/toggle", response_model=PokedexState, summary="Opens/closes the search field")
async def toggle_search(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    return await registry.get(session_id).toggle_search()


@app.post("/sessions/{session_id}/submit", response_model=PokedexState, summary="Submits the current search text")
async def submit_search(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    return await registry.get(session_id).submit()


@app.post(
    "/sessions/{session_id}/load-more",
    response_model=PokedexState,
    summary="Appends the next listing page (scroll reached the end)",
)
async def load_more(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    session = registry.get(session_id)
    await session.load_more()
    return session.state


@app.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)):
    registry.discard(session_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
