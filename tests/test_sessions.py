import threading

import pytest

from pokepc.config import get_config
from pokepc.di import build_container
from pokepc.errors import AuthError, Unauthorized
from pokepc.sessions import InMemorySessionStore, SessionManager, SQLAlchemySessionStore


def test_in_memory_store_concurrent_writes():
    store = InMemorySessionStore()

    def worker(n):
        for i in range(200):
            sid = f'{n}-{i}'
            store.set(sid, n)
            assert store.get(sid) == n

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(store) == 1600
    assert store.delete('3-7') is True
    assert store.delete('3-7') is False
    assert store.get('3-7') is None


def test_sqlalchemy_store(container, user):
    store = SQLAlchemySessionStore(container.repo)
    store.set('abc', user.id)
    assert store.get('abc') == user.id
    assert store.delete('abc') is True
    assert store.get('abc') is None
    assert store.delete('abc') is False


def test_login_logout_cycle(container, user):
    manager = SessionManager(InMemorySessionStore(), container.users, 'secret')
    logged_in, token = manager.login('user@email.com', 'password')
    assert logged_in == user
    identity = manager.require_session(token)
    assert identity.user_id == user.id
    assert manager.logout(token) is True
    with pytest.raises(Unauthorized):
        manager.require_session(token)
    assert manager.logout(token) is False


def test_bad_credentials_open_no_session(container, user):
    store = InMemorySessionStore()
    manager = SessionManager(store, container.users, 'secret')
    with pytest.raises(AuthError):
        manager.login('user@email.com', 'wrong')
    assert len(store) == 0


@pytest.mark.parametrize('token', [None, '', 'garbage', 'a.b.c'])
def test_malformed_tokens_rejected(container, token):
    manager = SessionManager(InMemorySessionStore(), container.users, 'secret')
    with pytest.raises(Unauthorized) as exc:
        manager.require_session(token)
    assert exc.value.message == 'Unauthorized'
    assert manager.current(token) is None


def test_expired_token_rejected(container, user):
    manager = SessionManager(InMemorySessionStore(), container.users, 'secret', ttl=-60)
    _, token = manager.login('user@email.com', 'password')
    with pytest.raises(Unauthorized):
        manager.require_session(token)
    # logout still cleans up the stored session
    assert manager.logout(token) is True


def test_token_from_other_secret_rejected(container, user):
    store = InMemorySessionStore()
    issuer = SessionManager(store, container.users, 'secret-a')
    verifier = SessionManager(store, container.users, 'secret-b')
    _, token = issuer.login('user@email.com', 'password')
    with pytest.raises(Unauthorized):
        verifier.require_session(token)


def test_session_backend_from_config(tmp_path):
    cfg = get_config(DATABASE_URL=f"sqlite:///{tmp_path / 'mem.db'}", SESSION_BACKEND='memory')
    c = build_container(cfg, seed=False)
    try:
        assert isinstance(c.session_store, InMemorySessionStore)
    finally:
        c.repo.dispose()
