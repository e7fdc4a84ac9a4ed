import os


class Config:
    # Database URLs. If READ/WRITE separation is desired, set both:
    # - WRITE_DATABASE_URL: used for writes (primary)
    # - READ_DATABASE_URL: used for reads (replica)
    # If only DATABASE_URL is provided the repository uses a single engine.
    DATABASE_URL = os.getenv('DATABASE_URL')
    WRITE_DATABASE_URL = os.getenv('WRITE_DATABASE_URL') or os.getenv('DATABASE_URL')
    READ_DATABASE_URL = os.getenv('READ_DATABASE_URL') or os.getenv('DATABASE_URL')
    # Session storage: 'memory' or 'sqlalchemy'
    SESSION_BACKEND = os.getenv('SESSION_BACKEND', 'sqlalchemy')
    SESSION_COOKIE_NAME = os.getenv('SESSION_COOKIE_NAME', 'session_id')
    SESSION_TTL = int(os.getenv('SESSION_TTL', '86400'))
    SECRET_KEY = os.getenv('SECRET_KEY', 'pokepc-dev-secret-change-me')
    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    REFERENCE_DATA_PATH = os.getenv('REFERENCE_DATA_PATH') or os.path.join(BASE_DIR, 'data', 'reference.json')
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    # comma-separated origins allowed to make credentialed (cookie) requests
    CORS_ORIGINS = [o.strip() for o in os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',') if o.strip()]


def get_config(**overrides) -> Config:
    """Return a Config, optionally with attributes replaced (used by tests)."""
    cfg = Config()
    for key, value in overrides.items():
        if not hasattr(Config, key):
            raise AttributeError(f'Unknown config option: {key}')
        setattr(cfg, key, value)
    # a plain DATABASE_URL override applies to both roles
    if 'DATABASE_URL' in overrides:
        if 'WRITE_DATABASE_URL' not in overrides:
            cfg.WRITE_DATABASE_URL = overrides['DATABASE_URL']
        if 'READ_DATABASE_URL' not in overrides:
            cfg.READ_DATABASE_URL = overrides['DATABASE_URL']
    return cfg
