from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class User(Base):
    __tablename__ = 'users'
    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    # werkzeug password hash, never the plain password
    password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class Box(Base):
    __tablename__ = 'box'
    # box numbers are per user: user 1's box 1 and user 2's box 1 are different rows
    __table_args__ = (UniqueConstraint('user_id', 'number'),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id'), index=True, nullable=False)
    number = Column(Integer, nullable=False)
    name = Column(String(100), nullable=False)

    user = relationship('User', backref='boxes')


class Species(Base):
    __tablename__ = 'species'
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(100), nullable=False)
    # comma-separated type names, e.g. "GRASS,POISON"
    types = Column(String(100), nullable=True)


class Move(Base):
    __tablename__ = 'moves'
    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(100), nullable=False)
    type = Column(String(40), nullable=True)
    power = Column(Integer, nullable=True)


class BoxPokemon(Base):
    """An owned Pokémon sitting in one of its owner's boxes."""
    __tablename__ = 'box_species'
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey('users.id'), index=True, nullable=False)
    box_id = Column(Integer, ForeignKey('box.id'), index=True, nullable=False)
    species_id = Column(Integer, ForeignKey('species.id'), nullable=False)
    level = Column(Integer, nullable=False)
    nature = Column(String(40), nullable=False)
    ability = Column(String(100), nullable=False)

    box = relationship('Box')
    moves = relationship('PokemonMove', order_by='PokemonMove.position',
                         cascade='all, delete-orphan', backref='pokemon')


class PokemonMove(Base):
    __tablename__ = 'pokemon_moves'
    __table_args__ = (UniqueConstraint('pokemon_id', 'position'),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    pokemon_id = Column(Integer, ForeignKey('box_species.id'), index=True, nullable=False)
    move_id = Column(Integer, ForeignKey('moves.id'), nullable=False)
    # slot 0..3
    position = Column(Integer, nullable=False)

    move = relationship('Move')


class UserSession(Base):
    __tablename__ = 'sessions'
    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey('users.id'), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
