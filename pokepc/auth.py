"""Request-level session checks for Flask views."""
from functools import wraps
import logging

from flask import current_app, request

from .errors import Unauthorized

logger = logging.getLogger(__name__)

# every path below these prefixes needs a session, matched or not
PROTECTED_PREFIXES = ('/box',)


def _container():
    return current_app.extensions['pokepc']


def session_token():
    return request.cookies.get(_container().cfg.SESSION_COOKIE_NAME)


def authenticate():
    """Return the caller's Identity or raise Unauthorized."""
    try:
        return _container().sessions.require_session(session_token())
    except Unauthorized as e:
        logger.info('Rejected %s %s: %s', request.method, request.path, e.reason)
        raise


def login_required(view):
    """Pass the authenticated Identity to `view` as the `identity` keyword."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        kwargs['identity'] = authenticate()
        return view(*args, **kwargs)
    return wrapper


def guard_protected_paths():
    """before_request hook: anonymous requests under a protected prefix get 401, even on unknown paths."""
    path = request.path
    if request.method == 'OPTIONS':
        return None
    if any(path == p or path.startswith(p + '/') for p in PROTECTED_PREFIXES):
        authenticate()
    return None
