from .sqlalchemy_repo import SQLAlchemyRepository

__all__ = ['SQLAlchemyRepository']
