"""Reference data: the shared, read-only species and move tables.

Rows are loaded from a JSON file shaped like::

    {"species": [{"id": 1, "name": "Bulbasaur", "types": ["GRASS", "POISON"]}],
     "moves":   [{"id": 1, "name": "Tackle", "type": "NORMAL", "power": 40}]}

and inserted into the database once; later seeds only add missing ids.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import json
import logging
import re

from .dto import MoveRecord, SpeciesRecord
from .models.sql_models import Move, Species

logger = logging.getLogger(__name__)


@dataclass
class ReferenceData:
    species: List[SpeciesRecord] = field(default_factory=list)
    moves: List[MoveRecord] = field(default_factory=list)


def _entry_id(entry: Dict[str, Any]) -> Optional[int]:
    raw = entry.get('id')
    if raw is None:
        raw = entry.get('dexNr')
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def _normalize_type_token(t: Any) -> Optional[str]:
    """'POKEMON_TYPE_FIRE' -> 'FIRE', 'fire' -> 'FIRE', None -> None."""
    if not t:
        return None
    s = re.sub(r'^POKEMON_TYPE_', '', str(t).upper()).strip()
    return s or None


def parse_reference(data: Any) -> ReferenceData:
    ref = ReferenceData()
    if not isinstance(data, dict):
        return ref
    for entry in data.get('species') or []:
        sid = _entry_id(entry)
        if sid is None or not entry.get('name'):
            logger.warning('Skipping species entry without id/name: %r', entry)
            continue
        types = [t for t in (_normalize_type_token(x) for x in entry.get('types') or []) if t]
        ref.species.append(SpeciesRecord(id=sid, name=str(entry['name']), types=types))
    for entry in data.get('moves') or []:
        mid = _entry_id(entry)
        if mid is None or not entry.get('name'):
            logger.warning('Skipping move entry without id/name: %r', entry)
            continue
        power = entry.get('power')
        ref.moves.append(MoveRecord(id=mid, name=str(entry['name']),
                                    type=_normalize_type_token(entry.get('type')),
                                    power=int(power) if power is not None else None))
    return ref


def load_reference_file(path: str) -> ReferenceData:
    """Parse a reference JSON file. A missing file yields empty data."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning('Reference data file not found: %s', path)
        return ReferenceData()
    return parse_reference(data)


def seed_reference_data(repo, ref: ReferenceData) -> int:
    """Insert species and moves not yet stored. Returns the number of rows added."""
    added = 0
    with repo.transaction() as s:
        known_species = {sid for (sid,) in s.query(Species.id)}
        known_moves = {mid for (mid,) in s.query(Move.id)}
        for sp in ref.species:
            if sp.id not in known_species:
                s.add(Species(id=sp.id, name=sp.name, types=','.join(sp.types)))
                known_species.add(sp.id)
                added += 1
        for mv in ref.moves:
            if mv.id not in known_moves:
                s.add(Move(id=mv.id, name=mv.name, type=mv.type, power=mv.power))
                known_moves.add(mv.id)
                added += 1
    if added:
        logger.info('Seeded %d reference rows', added)
    return added
