# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain error taxonomy.

Every failure a service can raise derives from ``ChamaError`` and carries the
HTTP status it maps to; the application exception handler turns it into an
``{"error": "<message>"}`` body.
"""


class ChamaError(Exception):
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ChamaError):
    status_code = 400
    default_message = "Invalid input"


class InvalidOption(InvalidInput):
    default_message = "Invalid poll option"


class InvalidRole(InvalidInput):
    default_message = "Invalid role"


class InvalidCredentials(ChamaError):
    status_code = 401
    default_message = "Invalid email or PIN"


class MissingToken(ChamaError):
    status_code = 401
    default_message = "No token"


class InvalidToken(ChamaError):
    status_code = 401
    default_message = "Invalid token"


class InsufficientRole(ChamaError):
    status_code = 403
    default_message = "Insufficient role"


class NotFound(ChamaError):
    status_code = 404
    default_message = "Not found"


class DuplicateIdentity(ChamaError):
    status_code = 409
    default_message = "Member already exists"


class AlreadyVoted(ChamaError):
    status_code = 409
    default_message = "Already voted"


class PollInactive(ChamaError):
    status_code = 409
    default_message = "Poll is closed"


class InvalidTransition(ChamaError):
    status_code = 409
    default_message = "Invalid status transition"


class StaleWrite(ChamaError):
    """The collection changed between read and write; the caller should retry."""

    status_code = 409
    default_message = "Collection was modified concurrently, retry the request"


class StoreUnavailable(ChamaError):
    status_code = 503
    default_message = "Storage backend unavailable"


class CorruptCollection(ChamaError):
    status_code = 500
    default_message = "Stored collection is malformed"
