"""Session storage and session-token handling.

A session is a random id bound to a user id in a `SessionStore`. Clients get
a JWT carrying that id (`sid`) and the user id (`sub`); the signature stops
tampering, the store lookup makes logout take effect immediately.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
import datetime
import logging
import threading
import uuid

import jwt

from .errors import Unauthorized
from .models.sql_models import UserSession

logger = logging.getLogger(__name__)

ALGORITHM = 'HS256'


class SessionStore(ABC):
    @abstractmethod
    def get(self, session_id: str) -> Optional[int]:
        """Return the user id bound to `session_id`, or None."""

    @abstractmethod
    def set(self, session_id: str, user_id: int) -> None:
        ...

    @abstractmethod
    def delete(self, session_id: str) -> bool:
        """Remove a session. Returns True if it existed."""


class InMemorySessionStore(SessionStore):
    def __init__(self):
        self._sessions: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[int]:
        with self._lock:
            return self._sessions.get(session_id)

    def set(self, session_id: str, user_id: int) -> None:
        with self._lock:
            self._sessions[session_id] = user_id

    def delete(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self):
        with self._lock:
            return len(self._sessions)


class SQLAlchemySessionStore(SessionStore):
    """Sessions kept in the `sessions` table, shared by every app process."""

    def __init__(self, repo: Any):
        self.repo = repo

    def get(self, session_id: str) -> Optional[int]:
        with self.repo.read_session() as s:
            row = s.get(UserSession, session_id)
            return row.user_id if row is not None else None

    def set(self, session_id: str, user_id: int) -> None:
        with self.repo.transaction() as s:
            s.add(UserSession(id=session_id, user_id=user_id))

    def delete(self, session_id: str) -> bool:
        with self.repo.transaction() as s:
            row = s.get(UserSession, session_id)
            if row is None:
                return False
            s.delete(row)
            return True


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, handed explicitly to protected handlers."""
    user_id: int
    session_id: str


class SessionManager:
    def __init__(self, store: SessionStore, users: Any, secret: str, ttl: int = 86400):
        self.store = store
        self.users = users
        self.secret = secret
        self.ttl = ttl

    def _encode(self, user_id: int, session_id: str) -> str:
        now = datetime.datetime.now(datetime.timezone.utc)
        exp = now + datetime.timedelta(seconds=self.ttl)
        payload = {'sub': str(user_id), 'sid': session_id, 'iat': int(now.timestamp()), 'exp': int(exp.timestamp())}
        token = jwt.encode(payload, self.secret, algorithm=ALGORITHM)
        if isinstance(token, bytes):
            token = token.decode('utf-8')
        return token

    def _decode(self, token: str) -> Dict[str, Any]:
        return jwt.decode(token, self.secret, algorithms=[ALGORITHM])

    def login(self, email: str, password: str):
        """Check credentials and open a session. Returns (user, token); raises AuthError."""
        user = self.users.find_by_credentials(email, password)
        session_id = uuid.uuid4().hex
        self.store.set(session_id, user.id)
        logger.info('User %s logged in', user.id)
        return user, self._encode(user.id, session_id)

    def logout(self, token: Optional[str]) -> bool:
        if not token:
            return False
        try:
            # an expired token still names a session worth removing
            claims = jwt.decode(token, self.secret, algorithms=[ALGORITHM], options={'verify_exp': False})
        except jwt.InvalidTokenError:
            return False
        removed = self.store.delete(str(claims.get('sid', '')))
        if removed:
            logger.info('User %s logged out', claims.get('sub'))
        return removed

    def require_session(self, token: Optional[str]) -> Identity:
        if not token:
            raise Unauthorized('missing session cookie')
        try:
            claims = self._decode(token)
        except jwt.ExpiredSignatureError:
            raise Unauthorized('session expired')
        except jwt.InvalidTokenError:
            raise Unauthorized('invalid session token')
        session_id = claims.get('sid')
        try:
            user_id = int(claims.get('sub'))
        except (TypeError, ValueError):
            raise Unauthorized('invalid session subject')
        if not session_id or self.store.get(session_id) != user_id:
            raise Unauthorized('unknown or revoked session')
        return Identity(user_id=user_id, session_id=session_id)

    def current(self, token: Optional[str]) -> Optional[Identity]:
        """Like require_session but returns None instead of raising."""
        try:
            return self.require_session(token)
        except Unauthorized:
            return None
