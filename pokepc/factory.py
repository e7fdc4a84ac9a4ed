from typing import Any

from .config import Config
from .sessions import InMemorySessionStore, SessionStore, SQLAlchemySessionStore


def get_repository(cfg: Config) -> Any:
    # Lazy import to avoid importing SQLAlchemy engines at module import time
    from .repositories.sqlalchemy_repo import SQLAlchemyRepository
    # Read/write split: reads go to the read DB and writes to the write DB when both are set.
    return SQLAlchemyRepository(write_db_url=cfg.WRITE_DATABASE_URL, read_db_url=cfg.READ_DATABASE_URL)


def get_session_store(cfg: Config, repo: Any) -> SessionStore:
    impl = (cfg.SESSION_BACKEND or '').lower()
    if impl in ('memory', 'inmemory', 'in-memory'):
        return InMemorySessionStore()
    if impl in ('sql', 'sqlalchemy', 'db'):
        return SQLAlchemySessionStore(repo)
    raise NotImplementedError(f"Unknown SESSION_BACKEND '{cfg.SESSION_BACKEND}'. Use 'memory' or 'sqlalchemy'.")
