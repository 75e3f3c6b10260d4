# ABOUTME: Exception hierarchy for the publishing pipeline.
# ABOUTME: Each error carries the HTTP status the web layer should answer with.


class PublicationError(Exception):
    """Base class for errors that abort a request before any write."""

    status_code = 500

    def __init__(self, message: str, **details: object) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(PublicationError):
    """Submission rejected by input validation."""

    status_code = 400


class AuthenticationError(PublicationError):
    """No authenticated principal."""

    status_code = 401


class AuthorizationError(PublicationError):
    """Principal may not perform the requested action."""

    status_code = 403


class NotFoundError(PublicationError):
    """Requested article does not exist."""

    status_code = 404
