"""Domain-specific exceptions

Every exception carries the HTTP status and client-facing message it maps to,
so the API layer can render them without inspecting the type.
"""


class DomainException(Exception):
    """Base exception for domain layer"""

    status_code = 500
    default_message = "Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(DomainException):
    """Input is malformed or out of range"""

    status_code = 400
    default_message = "Invalid input"


class Unauthenticated(DomainException):
    """Missing, invalid or expired credential"""

    status_code = 401
    default_message = "Not authorized. Please log in."


class Forbidden(DomainException):
    """Authenticated but not the owner of the resource"""

    status_code = 403
    default_message = "You do not have permission to perform this action"


class NotFound(DomainException):
    """Resource absent or not owned by the caller"""

    status_code = 404
    default_message = "Record not found"


class UserNotFound(NotFound):
    """Token subject no longer resolves to a user"""

    default_message = "User not found"


class AlreadyExists(DomainException):
    """Uniqueness conflict"""

    status_code = 400
    default_message = "A record with this data already exists"


class InvalidPayment(DomainException):
    """Transaction would drive the card balance below zero"""

    status_code = 400
    default_message = "Payment amount cannot exceed current balance"


class InvalidState(DomainException):
    """Reversing a transaction would drive the card balance below zero"""

    status_code = 400
    default_message = "Cannot delete transaction: would result in negative balance"


class TokenError(DomainException):
    """Session token could not be verified"""

    status_code = 401


class InvalidToken(TokenError):
    default_message = "Invalid token. Please log in again."


class ExpiredToken(TokenError):
    default_message = "Token expired. Please log in again."


class RateLimitExceeded(DomainException):
    status_code = 429
    default_message = "Too many requests from this IP, please try again later"
