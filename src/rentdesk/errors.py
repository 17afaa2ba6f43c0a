"""Domain errors shared by services, the auth gate and the API layer.

Learn: Services raise these instead of HTTPException so they stay
usable outside FastAPI (the CLI uses the same services). Each error
carries the HTTP status it maps to; rentdesk.api.errors turns them
into the {code, message, result} envelope at the handler boundary.
"""


class AppError(Exception):
    """Base class for errors that are safe to show to the client."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(AppError):
    """Malformed input or a business rule violation."""

    status_code = 400


class DuplicateIdentity(AppError):
    """A unique field (handle, phone, product code) is already taken."""

    status_code = 400

    def __init__(self, field: str, message: str | None = None):
        super().__init__(message or f"{field} already exists")
        self.field = field


class NotFound(AppError):
    status_code = 404


class Unauthenticated(AppError):
    """Missing, malformed, invalid or expired credentials."""

    status_code = 401


class Forbidden(AppError):
    status_code = 403
