"""Failures a handler can report to the client.

Every error carries the HTTP status and the short message that ends up in the
``{"success": false, "error": ...}`` envelope.
"""


class DomainError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainError):
    status_code = 400
    default_message = "Invalid request"


class NotFound(DomainError):
    status_code = 404
    default_message = "Not found"


class Forbidden(DomainError):
    status_code = 403
    default_message = "Access denied"


class InvalidCredentials(DomainError):
    status_code = 401
    default_message = "Invalid credentials"


class InvalidToken(InvalidCredentials):
    default_message = "Invalid token"


class DuplicateKey(DomainError):
    status_code = 400
    default_message = "Already exists"


class InternalError(DomainError):
    pass
