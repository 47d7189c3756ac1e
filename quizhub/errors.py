"""
Application error taxonomy.

Services raise these; the handlers registered in ``create_app`` turn them
into JSON responses of the form ``{"success": false, "error": "..."}``.
"""


class QuizHubError(Exception):
    """Base class for errors reported to API clients."""

    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {'success': False, 'error': self.message}


class ValidationError(QuizHubError):
    """A required field is missing or a value is out of range."""

    status_code = 400


class NotFoundError(QuizHubError):
    """A quiz, question or user reference does not resolve."""

    status_code = 404


class PersistenceError(QuizHubError):
    """The store failed to read or write; the transaction was rolled back."""

    status_code = 500
