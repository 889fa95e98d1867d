"""Search resolution and pokedex session state."""
from .pokedex_service import PokedexService
from .session import PokedexSession, SessionRegistry

__all__ = [
    'PokedexService',
    'PokedexSession',
    'SessionRegistry',
]
