"""Simple DB management helpers: create the schema, seed reference data, add users.

Usage:
  python -m pokepc.manage_db create                       # creates tables
  python -m pokepc.manage_db seed [path/to/reference.json]
  python -m pokepc.manage_db create_user <email> <password>
"""
import logging
import sys

from .config import get_config
from .errors import PokePCError
from .factory import get_repository
from .logging_config import configure_logging
from .reference import load_reference_file, seed_reference_data
from .services import UserService

logger = logging.getLogger(__name__)


def create_db(cfg=None):
    cfg = cfg or get_config()
    repo = get_repository(cfg)
    # engine and metadata already created in repo init
    repo.dispose()
    logger.info('Database initialized.')


def seed(path=None, cfg=None) -> int:
    cfg = cfg or get_config()
    repo = get_repository(cfg)
    try:
        return seed_reference_data(repo, load_reference_file(path or cfg.REFERENCE_DATA_PATH))
    finally:
        repo.dispose()


def create_user(email, password, cfg=None):
    cfg = cfg or get_config()
    repo = get_repository(cfg)
    try:
        return UserService(repo).create(email, password)
    finally:
        repo.dispose()


def main(argv=None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    configure_logging(get_config().LOG_LEVEL)
    if not argv:
        print(__doc__)
        return 1
    cmd = argv[0]
    try:
        if cmd == 'create':
            create_db()
        elif cmd == 'seed':
            added = seed(argv[1] if len(argv) > 1 else None)
            logger.info('Seed complete (%d new rows)', added)
        elif cmd == 'create_user' and len(argv) >= 3:
            user = create_user(argv[1], argv[2])
            logger.info('Created user %s with id %s', user.email, user.id)
        else:
            print(__doc__)
            return 1
    except PokePCError as e:
        logger.error('%s', e.message)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
