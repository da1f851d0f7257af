"""
Exception taxonomy for the quiz core.

- Load errors are fatal for the load call that raised them.
- Reference, formula and template errors are raised while generating or
  evaluating and are converted into safe results at the call boundary.
- State errors signal misuse of a challenge session by the caller.
"""


class ResidentError(Exception):
    """Base class for all quiz core errors."""
    pass


class ContentLoadError(ResidentError):
    """Raised when a collection or bank document is malformed."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to load {key}: {reason}")


class ContentNotFoundError(ContentLoadError):
    """Raised when a content document does not exist in the store."""

    def __init__(self, key: str):
        super().__init__(key, "document not found")


class BankReferenceError(ResidentError):
    """Raised when a question names a bank, item, match or step that does not exist."""
    pass


class FormulaError(ResidentError):
    """Raised when a calculation formula cannot be parsed or evaluated."""
    pass


class TemplateError(ResidentError):
    """Raised for unknown placeholders when strict templates are enabled."""
    pass


class UnknownMentorError(ResidentError):
    """Raised when no voice profile exists for a mentor id."""
    pass


class ChallengeStateError(ResidentError):
    """Raised when answering a challenge that is no longer active."""
    pass
