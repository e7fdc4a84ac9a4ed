from enum import IntEnum
from typing import Any, Dict, Optional

from flask import jsonify


class StatusCode(IntEnum):
    OK = 200
    Created = 201
    BadRequest = 400
    Unauthorized = 401
    NotFound = 404
    Conflict = 409
    InternalServerError = 500


def json_response(status: StatusCode, message: str, payload: Optional[Dict[str, Any]] = None):
    """Build the `{message, payload}` body. `payload` is omitted when None."""
    body: Dict[str, Any] = {'message': message}
    if payload is not None:
        body['payload'] = payload
    return jsonify(body), int(status)
