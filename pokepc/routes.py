from flask import Blueprint, current_app, request

from .auth import login_required, session_token
from .dto import CreatePokemonRequest, LoginRequest, RegisterRequest, UpdatePokemonRequest
from .errors import ValidationError
from .responses import StatusCode, json_response


bp = Blueprint('pokepc', __name__)


def _container():
    return current_app.extensions['pokepc']


def _body():
    # silent: a missing or malformed body is reported by the request types
    return request.get_json(force=True, silent=True)


@bp.route('/', methods=['GET'])
def homepage():
    c = _container()
    identity = c.sessions.current(session_token())
    user = c.users.get(identity.user_id) if identity else None
    return json_response(StatusCode.OK, 'Homepage!', {
        'isLoggedIn': user is not None,
        'user': user.to_dict() if user else None,
    })


@bp.route('/users', methods=['POST'], strict_slashes=False)
def register():
    req = RegisterRequest.from_dict(_body())
    user = _container().users.create(req.email, req.password)
    return json_response(StatusCode.Created, 'User created!', {'user': user.to_dict()})


@bp.route('/login', methods=['POST'], strict_slashes=False)
def login():
    c = _container()
    req = LoginRequest.from_dict(_body())
    user, token = c.sessions.login(req.email, req.password)
    response, status = json_response(StatusCode.OK, f'Logged in as {user.email}!', {'user': user.to_dict()})
    response.set_cookie(c.cfg.SESSION_COOKIE_NAME, token, max_age=c.cfg.SESSION_TTL,
                        httponly=True, samesite='Lax')
    return response, status


@bp.route('/logout', methods=['GET', 'POST'], strict_slashes=False)
def logout():
    c = _container()
    c.sessions.logout(session_token())
    response, status = json_response(StatusCode.OK, 'Logged out!')
    response.delete_cookie(c.cfg.SESSION_COOKIE_NAME, httponly=True, samesite='Lax')
    return response, status


@bp.route('/moves', methods=['GET'], strict_slashes=False)
def list_moves():
    moves = _container().moves.read_all()
    return json_response(StatusCode.OK, 'Moves retrieved!', {'moves': [m.to_dict() for m in moves]})


@bp.route('/species', methods=['GET'], strict_slashes=False)
def list_species():
    species = _container().moves.read_all_species()
    return json_response(StatusCode.OK, 'Species retrieved!', {'species': [s.to_dict() for s in species]})


# --- box / pokemon ---------------------------------------------------------

@bp.route('/box/<box_id>/pokemon/', methods=['POST'], strict_slashes=False)
@bp.route('/box/<box_id>/pokemon/<pokemon_id>/', methods=['POST'], strict_slashes=False)
@login_required
def create_pokemon(box_id, identity, pokemon_id=None):
    req = CreatePokemonRequest.from_dict(_body())
    path_box = int(box_id) if box_id.isdigit() else None
    if req.boxId is not None and path_box is not None and req.boxId != path_box:
        raise ValidationError('boxId in the body does not match the path.')
    target_box = req.boxId if req.boxId is not None else path_box
    if target_box is None:
        raise ValidationError('boxId is required.')
    if req.userId is not None and req.userId != identity.user_id:
        raise ValidationError('userId does not match the logged in user.')
    pokemon = _container().pokemon.create(identity.user_id, target_box, req.pokemonId, req.level,
                                          req.nature, req.ability, req.moveIds)
    return json_response(StatusCode.Created, 'Pokemon Created!', {'pokemon': pokemon.to_dict()})


@bp.route('/box/<int:box_id>/pokemon', methods=['GET'], strict_slashes=False)
@login_required
def list_box(box_id, identity):
    pokemon = _container().pokemon.list_box(identity.user_id, box_id)
    return json_response(StatusCode.OK, f'Retrieved Pokémon in box {box_id}',
                         {'pokemon': [p.to_dict() for p in pokemon]})


@bp.route('/box/<int:box_id>/pokemon/<int:pokemon_id>/', methods=['GET'], strict_slashes=False)
@login_required
def read_pokemon(box_id, pokemon_id, identity):
    pokemon = _container().pokemon.read(identity.user_id, box_id, pokemon_id)
    return json_response(StatusCode.OK, f'Retrieved Pokémon details for box {box_id}, Pokémon {pokemon.pokemonId}',
                         {'pokemon': pokemon.to_dict()})


@bp.route('/box/<int:box_id>/pokemon/<int:pokemon_id>/', methods=['PUT'], strict_slashes=False)
@login_required
def update_pokemon(box_id, pokemon_id, identity):
    req = UpdatePokemonRequest.from_dict(_body())
    pokemon = _container().pokemon.update(identity.user_id, box_id, pokemon_id, req.changes())
    return json_response(StatusCode.OK, 'Pokemon Updated!', {'pokemon': pokemon.to_dict()})


@bp.route('/box/<int:box_id>/pokemon/<int:pokemon_id>/', methods=['DELETE'], strict_slashes=False)
@login_required
def delete_pokemon(box_id, pokemon_id, identity):
    _container().pokemon.delete(identity.user_id, box_id, pokemon_id)
    return json_response(StatusCode.OK, 'Pokemon Deleted!')
