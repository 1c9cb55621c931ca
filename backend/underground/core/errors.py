"""Domain errors surfaced to API callers.

Every error carries a ``code`` (the failure kind reported as ``error`` in the
JSON body) and the HTTP status it maps to.
"""


class UndergroundError(Exception):
    """Base exception for all application failures reported to a caller."""

    code = "Error"
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_response(self) -> dict:
        return {"error": self.code, "message": self.message}


class InvalidInput(UndergroundError):
    code = "InvalidInput"
    default_message = "Invalid request data"


# --- Invite ledger ---

class TokenNotFound(UndergroundError):
    code = "TokenNotFound"
    default_message = "Invite token not found"


class TokenAlreadyUsed(UndergroundError):
    code = "TokenAlreadyUsed"
    default_message = "Invite token already used"


class TokenRevoked(UndergroundError):
    code = "TokenRevoked"
    default_message = "Invite token has been revoked"


class TokenNoLongerAvailable(UndergroundError):
    """Raised when a token was redeemed or revoked while the caller was hashing."""

    code = "TokenNoLongerAvailable"
    default_message = "Invite token is no longer available"


class CannotRevokeUsedToken(UndergroundError):
    code = "CannotRevokeUsedToken"
    default_message = "Cannot revoke an invite token that has been used"


# --- Credentials ---

class UsernameTaken(UndergroundError):
    code = "UsernameTaken"
    default_message = "Username already exists"


class InvalidCredentials(UndergroundError):
    # Same message for unknown user and wrong password.
    code = "InvalidCredentials"
    status_code = 401
    default_message = "Invalid username or password"


class IncorrectPassword(UndergroundError):
    code = "IncorrectPassword"
    default_message = "Current password is incorrect"


class NotAuthenticated(UndergroundError):
    code = "NotAuthenticated"
    status_code = 401
    default_message = "Could not validate credentials"


class Forbidden(UndergroundError):
    code = "Forbidden"
    status_code = 403
    default_message = "Not authorized"


# --- Lookups ---

class UserNotFound(UndergroundError):
    code = "UserNotFound"
    status_code = 404
    default_message = "User not found"


class EventNotFound(UndergroundError):
    code = "EventNotFound"
    status_code = 404
    default_message = "Event not found"
