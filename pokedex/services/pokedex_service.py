import logging

from fastapi import HTTPException

from pokedex.clients.pokeapi_client import APIClientError, PokeAPIClient, PokemonNotFoundError
from pokedex.config import PAGE_SIZE
from pokedex.models import FetchStatus, SearchMode, SearchOutcome
from pokedex.type_names import resolve_type_name

logger = logging.getLogger(__name__)

class PokedexService:
    """
    Turns free-text searches and listing requests into SearchOutcome values.
    Client exceptions are converted into an explicit status so callers decide
    how to present not-found and transient failures.
    """

    def __init__(self, poke_client: PokeAPIClient, page_size: int = PAGE_SIZE):
        self._poke_client = poke_client
        self.page_size = page_size

    async def load_page(self, offset: int = 0) -> SearchOutcome:
        """Fetches one page of the default listing starting at `offset`."""
        try:
            records = await self._poke_client.fetch_by_offset(self.page_size, offset)
        except (APIClientError, PokemonNotFoundError) as e:
            # A listed Pokemon whose detail or species is missing fails the whole page
            return self._unavailable(SearchMode.LISTING, "", e)
        return SearchOutcome(status=FetchStatus.OK, mode=SearchMode.LISTING, records=tuple(records))

    async def resolve(self, term: str) -> SearchOutcome:
        """
        Resolves a search term:
        - empty -> default listing from offset zero
        - known type (Portuguese or English) -> every Pokemon of that type
        - anything else -> a single Pokemon by name, or NOT_FOUND
        """
        normalized = term.strip().lower()
        if not normalized:
            return await self.load_page(0)

        type_name = resolve_type_name(normalized)
        if type_name is not None:
            return await self._search_type(normalized, type_name)
        return await self._search_name(normalized)

    async def _search_type(self, term: str, type_name: str) -> SearchOutcome:
        logger.info(f"Searching by type '{type_name}' (term '{term}')")
        try:
            records = await self._poke_client.fetch_by_type(type_name)
        except PokemonNotFoundError:
            return SearchOutcome(status=FetchStatus.NOT_FOUND, mode=SearchMode.TYPE, term=term, type_name=type_name)
        except APIClientError as e:
            return self._unavailable(SearchMode.TYPE, term, e, type_name=type_name)
        return SearchOutcome(
            status=FetchStatus.OK,
            mode=SearchMode.TYPE,
            term=term,
            type_name=type_name,
            records=tuple(records),
        )

    async def _search_name(self, term: str) -> SearchOutcome:
        logger.info(f"Searching by name '{term}'")
        try:
            record = await self._poke_client.fetch_by_name(term)
        except PokemonNotFoundError as e:
            # Pokemon exists but its species does not
            return SearchOutcome(status=FetchStatus.NOT_FOUND, mode=SearchMode.NAME, term=term, detail=e.detail)
        except APIClientError as e:
            return self._unavailable(SearchMode.NAME, term, e)
        if record is None:
            return SearchOutcome(
                status=FetchStatus.NOT_FOUND,
                mode=SearchMode.NAME,
                term=term,
                detail=f"No Pokemon or type matches '{term}'.",
            )
        return SearchOutcome(status=FetchStatus.OK, mode=SearchMode.NAME, term=term, records=(record,))

    @staticmethod
    def _unavailable(mode: SearchMode, term: str, error: HTTPException, type_name: str | None = None) -> SearchOutcome:
        logger.error(f"{mode.value} fetch failed: {error.detail}")
        return SearchOutcome(
            status=FetchStatus.UNAVAILABLE,
            mode=mode,
            term=term,
            type_name=type_name,
            detail=error.detail,
        )
