"""Fixed lookup tables for Pokemon types: Portuguese names and card colours."""
import unicodedata

# Portuguese type name -> PokeAPI type identifier
TYPE_TRANSLATIONS = {
    "fogo": "fire",
    "água": "water",
    "grama": "grass",
    "elétrico": "electric",
    "lutador": "fighting",
    "venenoso": "poison",
    "terra": "ground",
    "voador": "flying",
    "psíquico": "psychic",
    "inseto": "bug",
    "pedra": "rock",
    "fantasma": "ghost",
    "dragão": "dragon",
    "sombrio": "dark",
    "aço": "steel",
    "fada": "fairy",
    "gelo": "ice",
    "normal": "normal",
}

TYPE_COLORS = {
    "normal": "#A8A77A",
    "fire": "#EE8130",
    "water": "#6390F0",
    "electric": "#F7D02C",
    "grass": "#7AC74C",
    "ice": "#96D9D6",
    "fighting": "#C22E28",
    "poison": "#A33EA1",
    "ground": "#E2BF65",
    "flying": "#A98FF3",
    "psychic": "#F95587",
    "bug": "#A6B91A",
    "rock": "#B6A136",
    "ghost": "#735797",
    "dragon": "#6F35FC",
    "dark": "#705746",
    "steel": "#B7B7CE",
    "fairy": "#D685AD",
}

DEFAULT_TYPE_COLOR = "#ccc"


def _strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


# Unaccented spellings ("agua", "eletrico") are what most keyboards produce.
_UNACCENTED = {_strip_accents(pt): en for pt, en in TYPE_TRANSLATIONS.items()}
_CANONICAL = frozenset(TYPE_TRANSLATIONS.values())


def resolve_type_name(term: str) -> str | None:
    """
    Returns the PokeAPI type identifier for a search term, or None if the
    term is not a known type. Accepts Portuguese (with or without accents)
    and the canonical English identifiers.
    """
    normalized = unicodedata.normalize("NFC", term.strip().lower())
    if normalized in TYPE_TRANSLATIONS:
        return TYPE_TRANSLATIONS[normalized]
    if normalized in _CANONICAL:
        return normalized
    return _UNACCENTED.get(_strip_accents(normalized))


def type_color(type_name: str) -> str:
    return TYPE_COLORS.get(type_name, DEFAULT_TYPE_COLOR)
