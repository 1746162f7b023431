"""Domain errors and their HTTP status codes.

Learn: Services raise these instead of HTTPException so that the
business logic stays transport-agnostic. main.create_app() registers
one exception handler that turns any TodoAppError into a JSON response
with the status code declared on the class.

Only NotFound maps to 404. Ownership mismatches raise NotFound on
purpose so callers can't discover other users' todos.
"""


class TodoAppError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = 400
    default_detail: str = "Bad request"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(TodoAppError):
    """Malformed email or unacceptable password."""

    status_code = 400
    default_detail = "Invalid input"


class DuplicateEmail(TodoAppError):
    status_code = 400
    default_detail = "Email already registered"


class InvalidCredentials(TodoAppError):
    """Unknown email or wrong password. Callers can't tell which."""

    status_code = 400
    default_detail = "Invalid credentials"


class InvalidToken(TodoAppError):
    """Token signature or payload could not be verified."""

    status_code = 401
    default_detail = "Invalid token"


class Unauthorized(TodoAppError):
    status_code = 401
    default_detail = "Authentication required"


class NotFound(TodoAppError):
    status_code = 404
    default_detail = "Not found"
