from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from .errors import ValidationError

MAX_MOVES = 4


@dataclass
class UserRecord:
    id: int
    email: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "email": self.email}


@dataclass
class MoveRecord:
    id: int
    name: str
    type: Optional[str] = None
    power: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "type": self.type, "power": self.power}


@dataclass
class SpeciesRecord:
    id: int
    name: str
    types: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "types": self.types}


@dataclass
class PokemonRecord:
    id: int
    userId: int
    boxId: int
    pokemonId: int
    level: int
    nature: str
    ability: str
    moves: List[MoveRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.userId,
            "boxId": self.boxId,
            "pokemonId": self.pokemonId,
            "level": self.level,
            "nature": self.nature,
            "ability": self.ability,
            "moveIds": [m.id for m in self.moves],
            "moves": [m.to_dict() for m in self.moves],
        }


# --- request bodies ---------------------------------------------------------

def _require_body(d: Any) -> Dict[str, Any]:
    if not isinstance(d, dict):
        raise ValidationError('Request body must be a JSON object.')
    return d


def _reject_unknown(d: Dict[str, Any], allowed) -> None:
    unknown = sorted(k for k in d if k not in allowed)
    if unknown:
        raise ValidationError('Unknown field(s): {}.'.format(', '.join(unknown)))


def _int_field(d: Dict[str, Any], name: str, required: bool = True, minimum: Optional[int] = None) -> Optional[int]:
    value = d.get(name)
    if value is None:
        if required:
            raise ValidationError(f'{name} is required.')
        return None
    # bool is an int subclass; true/false are not ids
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f'{name} must be an integer.')
    if minimum is not None and value < minimum:
        raise ValidationError(f'{name} must be at least {minimum}.')
    return value


def _str_field(d: Dict[str, Any], name: str, required: bool = True) -> Optional[str]:
    value = d.get(name)
    if value is None:
        if required:
            raise ValidationError(f'{name} is required.')
        return None
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f'{name} must be a non-empty string.')
    return value.strip()


def _move_ids_field(d: Dict[str, Any], name: str = 'moveIds') -> Optional[List[int]]:
    value = d.get(name)
    if value is None:
        return None
    if not isinstance(value, list):
        raise ValidationError(f'{name} must be a list of integers.')
    if len(value) > MAX_MOVES:
        raise ValidationError(f'A Pokemon can know at most {MAX_MOVES} moves.')
    ids = []
    for v in value:
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValidationError(f'{name} must be a list of integers.')
        ids.append(v)
    if len(set(ids)) != len(ids):
        raise ValidationError('A Pokemon cannot know the same move twice.')
    return ids


@dataclass
class CredentialsRequest:
    email: str
    password: str

    @classmethod
    def from_dict(cls, d: Any) -> 'CredentialsRequest':
        d = _require_body(d)
        email = _str_field(d, 'email')
        password = d.get('password')
        if not isinstance(password, str) or not password:
            raise ValidationError('password is required.')
        return cls(email=email.lower(), password=password)


class LoginRequest(CredentialsRequest):
    pass


class RegisterRequest(CredentialsRequest):
    @classmethod
    def from_dict(cls, d: Any) -> 'RegisterRequest':
        req = super().from_dict(d)
        if '@' not in req.email:
            raise ValidationError('email must be a valid email address.')
        return req


@dataclass
class CreatePokemonRequest:
    pokemonId: int
    level: int
    nature: str
    ability: str
    boxId: Optional[int] = None
    userId: Optional[int] = None
    moveIds: List[int] = field(default_factory=list)

    FIELDS = ('pokemonId', 'userId', 'boxId', 'level', 'nature', 'ability', 'moveIds')

    @classmethod
    def from_dict(cls, d: Any) -> 'CreatePokemonRequest':
        d = _require_body(d)
        _reject_unknown(d, cls.FIELDS)
        return cls(
            pokemonId=_int_field(d, 'pokemonId', minimum=1),
            level=_int_field(d, 'level', minimum=1),
            nature=_str_field(d, 'nature'),
            ability=_str_field(d, 'ability'),
            boxId=_int_field(d, 'boxId', required=False, minimum=1),
            userId=_int_field(d, 'userId', required=False, minimum=1),
            moveIds=_move_ids_field(d) or [],
        )


@dataclass
class UpdatePokemonRequest:
    """Partial update: only the attributes present in the body are changed."""
    level: Optional[int] = None
    nature: Optional[str] = None
    ability: Optional[str] = None
    boxId: Optional[int] = None
    moveIds: Optional[List[int]] = None

    FIELDS = ('level', 'nature', 'ability', 'boxId', 'moveIds')
    # identity fields a client may echo back unchanged
    IGNORED = ('id', 'userId', 'pokemonId')

    @classmethod
    def from_dict(cls, d: Any) -> 'UpdatePokemonRequest':
        d = _require_body(d)
        _reject_unknown(d, cls.FIELDS + cls.IGNORED)
        req = cls(
            level=_int_field(d, 'level', required=False, minimum=1),
            nature=_str_field(d, 'nature', required=False),
            ability=_str_field(d, 'ability', required=False),
            boxId=_int_field(d, 'boxId', required=False, minimum=1),
            moveIds=_move_ids_field(d),
        )
        if not req.changes():
            raise ValidationError('Nothing to update.')
        return req

    def changes(self) -> Dict[str, Any]:
        return {k: getattr(self, k) for k in self.FIELDS if getattr(self, k) is not None}
