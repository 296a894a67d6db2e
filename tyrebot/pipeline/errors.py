"""
Error taxonomy of the dialogue pipeline.

- ``InputError``: caused by the client (empty message, malformed history,
  malformed upload). Reported with 4xx semantics; no side effects happen.
- ``ServiceError``: a downstream fault (generation or persistence). Reported
  with 5xx semantics and a user-safe apology.

Knowledge-matching faults are soft failures and have no class here: the
matcher recovers from them locally and the turn continues without grounding.
"""


class TyrebotError(Exception):
    """Base class of every error the application reports to callers."""

    user_message = "Sorry, I encountered an error. Please try again."

    def __init__(self, detail: str = ""):
        super().__init__(detail)
        self.detail = detail


class InputError(TyrebotError):
    user_message = "Invalid request."

    def __init__(self, detail: str):
        super().__init__(detail)
        self.user_message = detail


class ServiceError(TyrebotError):
    pass


class GenerationTimeout(ServiceError):
    pass


class QuotaExceeded(ServiceError):
    pass


class MalformedRequest(ServiceError):
    pass


class PersistenceError(ServiceError):
    pass
