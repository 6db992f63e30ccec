"""
Session and request errors surfaced to the HTTP layer.
api/errors.py renders each as the uniform error envelope using ``status`` and ``error``.
"""


class SessionError(Exception):
    status = 400
    error = "BAD_REQUEST"
    default_message = "Bad request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class MissingCredential(SessionError):
    """Request lacks required field(s); raised before any store access."""
    status = 400
    error = "MISSING_ARGUMENTS"
    default_message = "Missing Arguments"


class Unauthorized(SessionError):
    """No token presented."""
    status = 401
    error = "UNAUTHORIZED"
    default_message = "Missing Token"


class Forbidden(SessionError):
    """Token present but fails signature, expiry or type check."""
    status = 403
    error = "FORBIDDEN"
    default_message = "Invalid Token"


class InvalidToken(SessionError):
    """Refresh token cannot be rotated: bad signature, unknown user or not live."""
    status = 403
    error = "INVALID_TOKEN"
    default_message = "Invalid Request"


class Conflict(SessionError):
    status = 409
    error = "CONFLICT"
    default_message = "Conflict"
