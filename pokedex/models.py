from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from pokedex.config import SEARCH_ANIMATION_MS
from pokedex.type_names import type_color

# Normalized Pokemon assembled from the detail and species responses (Internal + Public Contract)
class PokemonRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    image: str | None  # official artwork; None when PokeAPI has no artwork
    types: tuple[str, ...]
    description: str

    @computed_field
    @property
    def color(self) -> str:
        """Card colour of the primary type."""
        return type_color(self.types[0]) if self.types else type_color("")


# Outcome of a fetch, surfaced to callers instead of swallowing failures
class FetchStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


class SearchMode(str, Enum):
    LISTING = "listing"
    TYPE = "type"
    NAME = "name"


class SearchOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: FetchStatus
    mode: SearchMode
    term: str = ""
    type_name: str | None = None
    records: tuple[PokemonRecord, ...] = ()
    detail: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is FetchStatus.OK


# Target of the search field's slide/fade transition
class SearchAnimation(BaseModel):
    model_config = ConfigDict(frozen=True)

    to_value: int
    duration_ms: int = SEARCH_ANIMATION_MS


# Snapshot of a pokedex screen. Sessions replace it wholesale on every change.
class PokedexState(BaseModel):
    model_config = ConfigDict(frozen=True)

    search_open: bool = False
    search_text: str = ""
    records: tuple[PokemonRecord, ...] = ()
    offset: int = 0
    has_more: bool = True
    loading: bool = False
    mode: SearchMode = SearchMode.LISTING
    status: FetchStatus = FetchStatus.OK
    detail: str | None = None
    generation: int = 0
    animation: SearchAnimation | None = None


# Public response models
class PokemonPage(BaseModel):
    records: list[PokemonRecord]
    offset: int
    next_offset: int
    has_more: bool


class SessionResponse(BaseModel):
    session_id: str
    state: PokedexState


class SearchTextUpdate(BaseModel):
    text: str = Field(default="", max_length=100)

