"""Application specific HTTP errors."""

from werkzeug.exceptions import BadRequest


class InvalidCredentials(BadRequest):
    """Login failure; identical for an unknown email and a wrong password."""

    description = "Invalid credentials"
