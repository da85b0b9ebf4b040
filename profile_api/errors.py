"""Domain errors raised by the services and mapped to HTTP codes by the routes."""


class ProfileApiError(Exception):
    """Base class for every failure this service reports to a caller."""

    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCredential(ProfileApiError):
    """Identity assertion is malformed, forged, expired or for another audience."""

    default_message = "Invalid Google token"


class UnverifiedEmail(ProfileApiError):
    default_message = "Email not verified"


class SchemaError(ProfileApiError):
    """The users relation cannot satisfy the request with its current columns."""

    default_message = "Users table schema is not usable"


class InvalidSession(ProfileApiError):
    default_message = "Not logged in"


class PersistenceFailure(ProfileApiError):
    """A database statement failed; the transaction has been rolled back."""

    default_message = "Database operation failed"
