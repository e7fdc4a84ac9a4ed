import logging
from typing import Optional

from flask import Flask, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

from .auth import guard_protected_paths
from .config import Config, get_config
from .di import Container, build_container
from .errors import PokePCError
from .logging_config import configure_logging
from .responses import StatusCode, json_response
from .routes import bp

logger = logging.getLogger(__name__)


def _invalid_route(e):
    return json_response(StatusCode.NotFound, f'Invalid route: {request.method} {request.path}')


def _domain_error(e: PokePCError):
    if e.status_code >= 500:
        logger.error('%s on %s %s: %s', type(e).__name__, request.method, request.path, e.message)
    return json_response(e.status_code, e.message)


def _unexpected_error(e: Exception):
    if isinstance(e, HTTPException):
        return json_response(e.code or StatusCode.InternalServerError, e.description or e.name)
    # never leak internals (stack traces, raw database errors) to clients
    logger.exception('Unhandled error on %s %s', request.method, request.path)
    return json_response(StatusCode.InternalServerError, 'Internal server error.')


def create_app(config: Optional[Config] = None, container: Optional[Container] = None) -> Flask:
    """Build the Flask app. Tests pass their own config or a prebuilt container."""
    cfg = config or (container.cfg if container is not None else get_config())
    configure_logging(cfg.LOG_LEVEL)

    app = Flask(__name__)
    CORS(app, origins=cfg.CORS_ORIGINS, supports_credentials=True)
    app.extensions['pokepc'] = container or build_container(cfg)

    app.before_request(guard_protected_paths)
    app.register_blueprint(bp)

    app.register_error_handler(NotFound, _invalid_route)
    app.register_error_handler(MethodNotAllowed, _invalid_route)
    app.register_error_handler(PokePCError, _domain_error)
    app.register_error_handler(Exception, _unexpected_error)
    logger.info('PokePC app created (sessions: %s)', type(app.extensions['pokepc'].session_store).__name__)
    return app


def main():
    create_app().run(debug=False)


if __name__ == '__main__':
    main()
