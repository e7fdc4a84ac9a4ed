import pytest

from pokepc.errors import NotFoundError, ValidationError
from pokepc.models.sql_models import Box, BoxPokemon, PokemonMove
from pokepc.services import PokemonService


def test_create_and_read_round_trip(container, user):
    created = container.pokemon.create(user.id, 1, 25, 12, 'Timid', 'Static', [6, 7])
    got = container.pokemon.read(user.id, 1, created.id)
    assert got == created
    assert got.pokemonId == 25
    assert [m.name for m in got.moves] == ['Thunder Shock', 'Quick Attack']


def test_update_only_changes_given_fields(container, user):
    p = container.pokemon.create(user.id, 1, 1, 5, 'Bold', 'Overgrow', [1, 2])
    updated = container.pokemon.update(user.id, 1, p.id, {'level': 6})
    assert updated.level == 6
    assert (updated.nature, updated.ability) == ('Bold', 'Overgrow')
    assert [m.id for m in updated.moves] == [1, 2]


def test_update_can_clear_moves(container, user):
    p = container.pokemon.create(user.id, 1, 1, 5, 'Bold', 'Overgrow', [1, 2])
    updated = container.pokemon.update(user.id, 1, p.id, {'moveIds': []})
    assert updated.moves == []
    with container.repo.read_session() as s:
        assert s.query(PokemonMove).count() == 0


def test_delete_removes_pokemon_and_moves(container, user):
    p = container.pokemon.create(user.id, 1, 1, 5, 'Bold', 'Overgrow', [1, 2, 3])
    container.pokemon.delete(user.id, 1, p.id)
    with pytest.raises(NotFoundError):
        container.pokemon.read(user.id, 1, p.id)
    with pytest.raises(NotFoundError):
        container.pokemon.delete(user.id, 1, p.id)
    with container.repo.read_session() as s:
        assert s.query(PokemonMove).count() == 0


def test_wrong_box_is_not_found(container, user):
    p = container.pokemon.create(user.id, 1, 1, 5, 'Bold', 'Overgrow')
    with pytest.raises(NotFoundError):
        container.pokemon.read(user.id, 2, p.id)


def test_other_owner_cannot_touch(container, user):
    other = container.users.create('other@email.com', 'pw')
    p = container.pokemon.create(user.id, 1, 1, 5, 'Bold', 'Overgrow')
    with pytest.raises(NotFoundError):
        container.pokemon.read(other.id, 1, p.id)
    with pytest.raises(NotFoundError):
        container.pokemon.update(other.id, 1, p.id, {'level': 9})
    with pytest.raises(NotFoundError):
        container.pokemon.delete(other.id, 1, p.id)
    assert container.pokemon.list_box(other.id, 1) == []


def test_box_numbers_are_per_owner(container, user):
    other = container.users.create('other@email.com', 'pw')
    mine = container.pokemon.create(user.id, 1, 1, 5, 'Bold', 'Overgrow')
    theirs = container.pokemon.create(other.id, 1, 4, 7, 'Brave', 'Blaze')
    assert mine.boxId == theirs.boxId == 1
    assert [p.id for p in container.pokemon.list_box(user.id, 1)] == [mine.id]
    assert [p.id for p in container.pokemon.list_box(other.id, 1)] == [theirs.id]
    with container.repo.read_session() as s:
        assert sorted((b.user_id, b.number) for b in s.query(Box)) == [(user.id, 1), (other.id, 1)]


def test_concurrent_box_creation_is_retried(container, user, monkeypatch):
    container.pokemon.create(user.id, 3, 1, 5, 'Bold', 'Overgrow')
    real_find = PokemonService._find_box
    calls = []

    def stale_find(s, owner_id, box_number):
        calls.append(box_number)
        # first lookup misses the box, as if another request committed it meanwhile
        if len(calls) == 1:
            return None
        return real_find(s, owner_id, box_number)

    monkeypatch.setattr(PokemonService, '_find_box', staticmethod(stale_find))
    second = container.pokemon.create(user.id, 3, 1, 6, 'Calm', 'Overgrow')
    assert second.boxId == 3
    assert len(calls) == 2
    with container.repo.read_session() as s:
        assert s.query(Box).count() == 1
    assert len(container.pokemon.list_box(user.id, 3)) == 2


def test_list_unknown_box_is_empty(container, user):
    assert container.pokemon.list_box(user.id, 42) == []


@pytest.mark.parametrize('kwargs', [
    {'level': 0},
    {'species_id': 9999},
    {'move_ids': [1, 2, 3, 4, 5]},
    {'move_ids': [2, 2]},
    {'move_ids': [404]},
    {'nature': ''},
])
def test_create_rejects_invalid_input(container, user, kwargs):
    args = dict(box_id=1, species_id=1, level=5, nature='Bold', ability='Overgrow', move_ids=[1])
    args.update(kwargs)
    with pytest.raises(ValidationError):
        container.pokemon.create(user.id, **args)


def test_failed_create_leaves_no_rows(container, user, monkeypatch):
    def boom(s, p, move_ids):
        raise RuntimeError('insert failed')
    monkeypatch.setattr(PokemonService, '_set_moves', staticmethod(boom))
    with pytest.raises(RuntimeError):
        container.pokemon.create(user.id, 3, 1, 5, 'Bold', 'Overgrow', [1])
    with container.repo.read_session() as s:
        assert s.query(Box).count() == 0
        assert s.query(BoxPokemon).count() == 0
