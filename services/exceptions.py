"""Typed exception hierarchy for CV Tailor services.

Services raise these exceptions instead of printing to console.
Callers (CLI) catch and present them inline. HTTP failures from the
backend surface as api_client.RequestError and are not wrapped here.
"""


class CvTailorError(Exception):
    """Base exception for all CV Tailor service errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ValidationError(CvTailorError):
    """Raised when client-side input validation fails.

    Never sent to the backend.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, {"field": field})
        self.field = field


class NotAuthenticatedError(CvTailorError):
    """Raised when a call needs a session and none is active."""

    def __init__(self, reason: str | None = None):
        msg = "Not signed in. Run 'cvtailor signin' first."
        if reason:
            msg = f"{reason}. Run 'cvtailor signin' first."
        super().__init__(msg, {"reason": reason})


class AuthenticationFailedError(CvTailorError):
    """Raised when the backend rejects a sign-in or registration."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)
