import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash

from .dto import MAX_MOVES, MoveRecord, PokemonRecord, SpeciesRecord, UserRecord
from .errors import AuthError, ConflictError, NotFoundError, ValidationError
from .models.sql_models import Box, BoxPokemon, Move, PokemonMove, Species, User

logger = logging.getLogger(__name__)


def _move_record(m: Move) -> MoveRecord:
    return MoveRecord(id=m.id, name=m.name, type=m.type, power=m.power)


def _pokemon_record(p: BoxPokemon) -> PokemonRecord:
    return PokemonRecord(
        id=p.id,
        userId=p.user_id,
        boxId=p.box.number,
        pokemonId=p.species_id,
        level=p.level,
        nature=p.nature,
        ability=p.ability,
        moves=[_move_record(pm.move) for pm in p.moves],
    )


class UserService:
    """Registration and credential checks. Passwords are stored as werkzeug hashes."""

    def __init__(self, repo: Any):
        self.repo = repo

    def create(self, email: str, password: str) -> UserRecord:
        email = (email or '').strip().lower()
        if not email or not password:
            raise ValidationError('email and password are required.')
        try:
            with self.repo.transaction() as s:
                if s.query(User).filter(User.email == email).first() is not None:
                    raise ConflictError('A user with this email already exists.')
                user = User(email=email, password=generate_password_hash(password))
                s.add(user)
                s.flush()
                record = UserRecord(id=user.id, email=user.email)
        except IntegrityError:
            # lost a race against a concurrent registration
            raise ConflictError('A user with this email already exists.')
        logger.info('Created user %s (id=%s)', record.email, record.id)
        return record

    def find_by_credentials(self, email: str, password: str) -> UserRecord:
        email = (email or '').strip().lower()
        with self.repo.read_session() as s:
            user = s.query(User).filter(User.email == email).first()
            if user is None or not check_password_hash(user.password, password or ''):
                raise AuthError('Invalid credentials.')
            return UserRecord(id=user.id, email=user.email)

    def get(self, user_id: int) -> Optional[UserRecord]:
        with self.repo.read_session() as s:
            user = s.get(User, user_id)
            if user is None:
                return None
            return UserRecord(id=user.id, email=user.email)


class MoveService:
    """Read-only access to the shared move and species tables."""

    def __init__(self, repo: Any):
        self.repo = repo

    def read_all(self) -> List[MoveRecord]:
        with self.repo.read_session() as s:
            return [_move_record(m) for m in s.query(Move).order_by(Move.id).all()]

    def read_all_species(self) -> List[SpeciesRecord]:
        with self.repo.read_session() as s:
            return [SpeciesRecord(id=sp.id, name=sp.name, types=[t for t in (sp.types or '').split(',') if t])
                    for sp in s.query(Species).order_by(Species.id).all()]


class PokemonService:
    """CRUD for owned Pokémon.

    Every operation is scoped to `owner_id`, and box numbers are resolved
    within the owner's own boxes. A Pokémon that belongs to someone else, or
    that is not in the named box, is reported as NotFoundError; another
    user's boxes are never consulted at all.
    """

    def __init__(self, repo: Any):
        self.repo = repo

    # --- helpers -------------------------------------------------------------

    @staticmethod
    def _check_level(level: int) -> None:
        if isinstance(level, bool) or not isinstance(level, int) or level < 1:
            raise ValidationError('level must be an integer of at least 1.')

    @staticmethod
    def _check_moves(s, move_ids: Sequence[int]) -> List[int]:
        move_ids = list(move_ids or [])
        if len(move_ids) > MAX_MOVES:
            raise ValidationError(f'A Pokemon can know at most {MAX_MOVES} moves.')
        if len(set(move_ids)) != len(move_ids):
            raise ValidationError('A Pokemon cannot know the same move twice.')
        if move_ids:
            known = {mid for (mid,) in s.query(Move.id).filter(Move.id.in_(move_ids))}
            missing = [m for m in move_ids if m not in known]
            if missing:
                raise ValidationError('Unknown move id(s): {}.'.format(', '.join(str(m) for m in missing)))
        return move_ids

    @staticmethod
    def _find_box(s, owner_id: int, box_number: int) -> Optional[Box]:
        return s.query(Box).filter(Box.user_id == owner_id, Box.number == box_number).first()

    @classmethod
    def _ensure_box(cls, s, owner_id: int, box_number: int) -> Box:
        """Return the owner's box with this number, creating it on first use."""
        box = cls._find_box(s, owner_id, box_number)
        if box is None:
            box = Box(user_id=owner_id, number=box_number, name=f'Box {box_number}')
            s.add(box)
            s.flush()
            logger.info('Created box %s for user %s', box_number, owner_id)
        return box

    @staticmethod
    def _owned(s, owner_id: int, box_number: int, pokemon_id: int) -> BoxPokemon:
        p = s.get(BoxPokemon, pokemon_id)
        if p is None or p.user_id != owner_id or p.box.number != box_number:
            raise NotFoundError('Pokemon not found.')
        return p

    @staticmethod
    def _set_moves(s, p: BoxPokemon, move_ids: Sequence[int]) -> None:
        if p.moves:
            p.moves.clear()
            # old slots must be gone before the new ones reuse their positions
            s.flush()
        for position, move_id in enumerate(move_ids):
            p.moves.append(PokemonMove(move_id=move_id, position=position))

    def _write(self, work: Callable[[Any], PokemonRecord]) -> PokemonRecord:
        """Run `work(session)` in one transaction.

        Two requests of the same owner may create the same box at once; the
        loser hits the (user_id, number) constraint and is run again, finding
        the box the winner committed.
        """
        try:
            with self.repo.transaction() as s:
                return work(s)
        except IntegrityError:
            logger.info('Box created concurrently, retrying once')
        with self.repo.transaction() as s:
            return work(s)

    # --- operations ----------------------------------------------------------

    def create(self, owner_id: int, box_id: int, species_id: int, level: int,
               nature: str, ability: str, move_ids: Optional[Sequence[int]] = None) -> PokemonRecord:
        self._check_level(level)
        if not nature or not ability:
            raise ValidationError('nature and ability are required.')

        def work(s):
            if s.get(Species, species_id) is None:
                raise ValidationError(f'Unknown species id: {species_id}.')
            checked_moves = self._check_moves(s, move_ids)
            box = self._ensure_box(s, owner_id, box_id)
            p = BoxPokemon(user_id=owner_id, box=box, species_id=species_id,
                           level=level, nature=nature, ability=ability)
            s.add(p)
            self._set_moves(s, p, checked_moves)
            s.flush()
            return _pokemon_record(p)

        record = self._write(work)
        logger.info('User %s created pokemon %s in box %s', owner_id, record.id, box_id)
        return record

    def read(self, owner_id: int, box_id: int, pokemon_id: int) -> PokemonRecord:
        with self.repo.read_session() as s:
            return _pokemon_record(self._owned(s, owner_id, box_id, pokemon_id))

    def list_box(self, owner_id: int, box_id: int) -> List[PokemonRecord]:
        """Pokémon in the owner's box, oldest first; an unused box number is simply empty."""
        with self.repo.read_session() as s:
            rows = (s.query(BoxPokemon).join(Box, BoxPokemon.box_id == Box.id)
                    .filter(Box.user_id == owner_id, Box.number == box_id)
                    .order_by(BoxPokemon.id).all())
            return [_pokemon_record(p) for p in rows]

    def update(self, owner_id: int, box_id: int, pokemon_id: int, changes: Dict[str, Any]) -> PokemonRecord:
        """Apply `changes` (level, nature, ability, boxId, moveIds); other fields keep their values."""
        if 'level' in changes:
            self._check_level(changes['level'])

        def work(s):
            p = self._owned(s, owner_id, box_id, pokemon_id)
            if 'level' in changes:
                p.level = changes['level']
            if 'nature' in changes:
                p.nature = changes['nature']
            if 'ability' in changes:
                p.ability = changes['ability']
            if 'boxId' in changes and changes['boxId'] != p.box.number:
                p.box = self._ensure_box(s, owner_id, changes['boxId'])
            if 'moveIds' in changes:
                self._set_moves(s, p, self._check_moves(s, changes['moveIds']))
            s.flush()
            return _pokemon_record(p)

        record = self._write(work)
        logger.info('User %s updated pokemon %s (%s)', owner_id, pokemon_id, ', '.join(sorted(changes)))
        return record

    def delete(self, owner_id: int, box_id: int, pokemon_id: int) -> None:
        with self.repo.transaction() as s:
            s.delete(self._owned(s, owner_id, box_id, pokemon_id))
        logger.info('User %s deleted pokemon %s from box %s', owner_id, pokemon_id, box_id)
