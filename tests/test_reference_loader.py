import json
import tempfile

from pokepc.config import get_config
from pokepc.manage_db import create_user, seed
from pokepc.reference import load_reference_file, seed_reference_data


def test_reference_from_file_tempfile():
    sample = {
        "species": [
            {"id": 4, "name": "Charmander", "types": ["POKEMON_TYPE_FIRE"]},
            {"name": "Missingno"},
        ],
        "moves": [{"id": 4, "name": "Ember", "type": "fire", "power": 40}],
    }
    with tempfile.NamedTemporaryFile('w+', delete=False, suffix='.json') as f:
        json.dump(sample, f)
        f.flush()
        ref = load_reference_file(f.name)
    assert [s.name for s in ref.species] == ['Charmander']
    assert ref.species[0].types == ['FIRE']
    assert ref.moves[0].type == 'FIRE'


def test_missing_file_is_empty(tmp_path):
    ref = load_reference_file(str(tmp_path / 'nope.json'))
    assert ref.species == [] and ref.moves == []


def test_seed_is_idempotent(container):
    ref = load_reference_file(container.cfg.REFERENCE_DATA_PATH)
    assert seed_reference_data(container.repo, ref) == 0
    assert len(container.moves.read_all()) == len(ref.moves)


def test_manage_db_seed_and_create_user(tmp_path):
    cfg = get_config(DATABASE_URL=f"sqlite:///{tmp_path / 'cli.db'}")
    assert seed(cfg=cfg) == 28
    assert seed(cfg=cfg) == 0
    user = create_user('cli@email.com', 'pw', cfg=cfg)
    assert user.email == 'cli@email.com'
