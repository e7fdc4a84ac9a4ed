import logging

import pytest
from sqlalchemy.exc import SQLAlchemyError

from pokepc.app import create_app
from pokepc.config import get_config
from pokepc.di import build_container

logger = logging.getLogger(__name__)

EMAIL = 'user@email.com'
PASSWORD = 'password'


@pytest.fixture
def cfg(tmp_path):
    return get_config(DATABASE_URL=f"sqlite:///{tmp_path / 'pokepc.db'}",
                      SECRET_KEY='test-secret', LOG_LEVEL='WARNING')


@pytest.fixture
def container(cfg):
    c = build_container(cfg)
    yield c
    # cleanup is best-effort; a failure here must not fail the test run
    try:
        c.repo.drop_all()
        c.repo.dispose()
    except SQLAlchemyError:
        logger.exception('database cleanup failed')


@pytest.fixture
def user(container):
    return container.users.create(EMAIL, PASSWORD)


@pytest.fixture
def client(container, user):
    app = create_app(container=container)
    return app.test_client()


def login(client, email=EMAIL, password=PASSWORD):
    return client.post('/login', json={'email': email, 'password': password})


@pytest.fixture
def auth_client(client):
    resp = login(client)
    assert resp.status_code == 200
    return client
