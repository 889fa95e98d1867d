"""Pokedex search service backed by PokeAPI."""
