from contextlib import contextmanager
from typing import Iterator, Optional
import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from ..models.sql_models import Base

logger = logging.getLogger(__name__)


def _make_engine(url: str) -> Engine:
    # SQLite connections are shared across Flask worker threads
    if url.startswith('sqlite:'):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url)


class SQLAlchemyRepository:
    """Persistence adapter over SQLAlchemy.

    Supports optional read/write splitting by providing separate `write_db_url`
    (primary) and `read_db_url` (replica). If no split is configured the
    repository uses a single engine for both reads and writes. It owns no
    business logic: services open sessions through it and query the models
    directly.
    """

    def __init__(self, write_db_url: Optional[str] = None, read_db_url: Optional[str] = None):
        if not write_db_url and not read_db_url:
            db_path = os.path.join(os.path.dirname(__file__), '..', 'data', 'pokepc.db')
            single = f'sqlite:///{os.path.abspath(db_path)}'
            write_db_url = single
            read_db_url = single

        # If only one url provided, use it for both roles
        write_db_url = write_db_url or read_db_url
        read_db_url = read_db_url or write_db_url

        self.write_engine = _make_engine(write_db_url)
        if read_db_url == write_db_url:
            self.read_engine = self.write_engine
        else:
            self.read_engine = _make_engine(read_db_url)
            logger.info('Using read replica %s', self.read_engine.url.render_as_string(hide_password=True))

        # Ensure schema exists on the write engine (primary)
        Base.metadata.create_all(self.write_engine)

        self.WriteSession = sessionmaker(bind=self.write_engine, expire_on_commit=False)
        self.ReadSession = sessionmaker(bind=self.read_engine, expire_on_commit=False)

    def read_session(self) -> Session:
        """Return a session for queries; use it as a context manager."""
        return self.ReadSession()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Yield a write session; everything inside commits or rolls back together."""
        with self.WriteSession() as s:
            with s.begin():
                yield s

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.write_engine)

    def dispose(self) -> None:
        self.write_engine.dispose()
        if self.read_engine is not self.write_engine:
            self.read_engine.dispose()
