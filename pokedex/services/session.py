import logging
import uuid

from fastapi import HTTPException

from pokedex.models import FetchStatus, PokedexState, SearchAnimation, SearchMode, SearchOutcome
from pokedex.services.pokedex_service import PokedexService

logger = logging.getLogger(__name__)

class PokedexSession:
    """
    State machine behind one pokedex screen: search field open/closed, the
    displayed collection and the pagination cursor.

    State is an immutable PokedexState replaced on every change. Searches and
    resets bump `generation`; a completion carrying an older generation is
    dropped, so a slow response never overwrites a newer one.
    """

    def __init__(self, service: PokedexService, state: PokedexState | None = None):
        self._service = service
        self.state = state or PokedexState()

    def _update(self, **changes) -> PokedexState:
        self.state = self.state.model_copy(update=changes)
        return self.state

    def _begin(self, **changes) -> int:
        """Starts a fetch that supersedes anything in flight. Returns its generation."""
        generation = self.state.generation + 1
        self._update(generation=generation, loading=True, **changes)
        return generation

    def _commit(self, generation: int, **changes) -> bool:
        if generation != self.state.generation:
            logger.info(f"Discarding stale response (generation {generation}, current {self.state.generation})")
            return False
        self._update(loading=False, **changes)
        return True

    def _release(self, generation: int) -> None:
        """Clears the loading guard if this generation still owns it (e.g. after an unexpected error)."""
        if generation == self.state.generation and self.state.loading:
            self._update(loading=False)

    async def start(self) -> PokedexState:
        """Initial load of the default listing."""
        return await self.reset()

    def set_search_text(self, text: str) -> PokedexState:
        return self._update(search_text=text)

    async def toggle_search(self) -> PokedexState:
        text = self.state.search_text.strip()
        if self.state.search_open and text:
            return await self.submit()

        closing = self.state.search_open
        self._update(
            search_open=not closing,
            animation=SearchAnimation(to_value=0 if closing else 1),
        )
        if closing:
            # text is empty here
            return await self.reset()
        return self.state

    async def submit(self) -> PokedexState:
        text = self.state.search_text.strip()
        if not text:
            return await self.reset()
        return await self.search(text)

    async def search(self, term: str) -> PokedexState:
        generation = self._begin()
        try:
            outcome = await self._service.resolve(term)
            if outcome.status is FetchStatus.UNAVAILABLE:
                self._commit_failure(generation, outcome)
            else:
                # NOT_FOUND carries no records and empties the collection
                self._commit(
                    generation,
                    records=outcome.records,
                    has_more=False,
                    mode=outcome.mode,
                    status=outcome.status,
                    detail=outcome.detail,
                )
        finally:
            self._release(generation)
        return self.state

    async def reset(self) -> PokedexState:
        """Replaces the collection with the first page of the default listing."""
        generation = self._begin()
        try:
            outcome = await self._service.load_page(0)
            if outcome.ok:
                self._commit(
                    generation,
                    records=outcome.records,
                    offset=self._service.page_size,
                    has_more=len(outcome.records) == self._service.page_size,
                    mode=SearchMode.LISTING,
                    status=FetchStatus.OK,
                    detail=None,
                )
            else:
                self._commit_failure(generation, outcome)
        finally:
            self._release(generation)
        return self.state

    async def load_more(self) -> bool:
        """
        Appends the next listing page. Returns False without issuing a request
        while another fetch is in flight or the listing is exhausted.
        """
        # No await before `loading` is set, so concurrent calls cannot both pass.
        if self.state.loading or not self.state.has_more:
            logger.debug(f"load_more ignored (loading={self.state.loading}, has_more={self.state.has_more})")
            return False
        generation = self.state.generation
        self._update(loading=True)

        try:
            outcome = await self._service.load_page(self.state.offset)
            if outcome.ok:
                self._commit(
                    generation,
                    records=self.state.records + outcome.records,
                    offset=self.state.offset + self._service.page_size,
                    has_more=len(outcome.records) == self._service.page_size,
                    status=FetchStatus.OK,
                    detail=None,
                )
            else:
                self._commit_failure(generation, outcome)
        finally:
            self._release(generation)
        return True

    def _commit_failure(self, generation: int, outcome: SearchOutcome) -> None:
        # Transient failures keep whatever is on screen
        self._commit(generation, status=outcome.status, detail=outcome.detail)


class SessionRegistry:
    """In-memory registry of pokedex sessions keyed by an opaque id."""

    def __init__(self):
        self._sessions: dict[str, PokedexSession] = {}

    def create(self, service: PokedexService) -> tuple[str, PokedexSession]:
        session_id = uuid.uuid4().hex
        session = PokedexSession(service)
        self._sessions[session_id] = session
        logger.info(f"Created pokedex session {session_id} ({len(self)} active)")
        return session_id, session

    def get(self, session_id: str) -> PokedexSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise HTTPException(status_code=404, detail=f"Session '{session_id}' not found.")

    def discard(self, session_id: str) -> None:
        self.get(session_id)
        del self._sessions[session_id]
        logger.info(f"Discarded pokedex session {session_id} ({len(self)} active)")

    def __len__(self) -> int:
        return len(self._sessions)
