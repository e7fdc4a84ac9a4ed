"""Error taxonomy shared by services, session handling and the HTTP layer.

Each error carries the status code the app answers with; the message is
safe to show to clients.
"""
from .responses import StatusCode


class PokePCError(Exception):
    status_code = StatusCode.InternalServerError
    default_message = 'Internal server error.'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PokePCError):
    status_code = StatusCode.BadRequest
    default_message = 'Invalid request body.'


class AuthError(PokePCError):
    status_code = StatusCode.Unauthorized
    default_message = 'Invalid credentials.'


class Unauthorized(PokePCError):
    status_code = StatusCode.Unauthorized
    default_message = 'Unauthorized'

    def __init__(self, message: str = None):
        # clients always see the same text; the reason is only logged
        self.reason = message
        super().__init__(self.default_message)


class NotFoundError(PokePCError):
    status_code = StatusCode.NotFound
    default_message = 'Not found.'


class ConflictError(PokePCError):
    status_code = StatusCode.Conflict
    default_message = 'Conflict.'
