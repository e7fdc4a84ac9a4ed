"""
Dependency container / composition root for the PokePC backend.
Provides a single place to instantiate Config, repository, services and the
session manager, so tests can build containers with their own database or
session store.
"""
from typing import Optional

from .config import Config, get_config
from .factory import get_repository, get_session_store
from .reference import load_reference_file, seed_reference_data
from .services import MoveService, PokemonService, UserService
from .sessions import SessionManager, SessionStore


class Container:
    def __init__(self, cfg: Config, session_store: Optional[SessionStore] = None, seed: bool = True):
        self.cfg = cfg
        self.repo = get_repository(cfg)
        if seed:
            seed_reference_data(self.repo, load_reference_file(cfg.REFERENCE_DATA_PATH))
        self.users = UserService(self.repo)
        self.moves = MoveService(self.repo)
        self.pokemon = PokemonService(self.repo)
        self.session_store = session_store or get_session_store(cfg, self.repo)
        self.sessions = SessionManager(self.session_store, self.users, cfg.SECRET_KEY, ttl=cfg.SESSION_TTL)


def build_container(cfg: Optional[Config] = None, session_store: Optional[SessionStore] = None,
                    seed: bool = True) -> Container:
    """Create and return a Container wired for the given (or environment) config."""
    return Container(cfg or get_config(), session_store=session_store, seed=seed)
