"""PokePC backend package.

Import `pokepc.app.create_app` to build the Flask application.
"""

__all__ = ["app"]
