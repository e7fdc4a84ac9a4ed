from .sql_models import Base, User, Box, Species, Move, BoxPokemon, PokemonMove, UserSession

__all__ = ['Base', 'User', 'Box', 'Species', 'Move', 'BoxPokemon', 'PokemonMove', 'UserSession']
