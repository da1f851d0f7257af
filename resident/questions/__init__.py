"""
Question variant handlers.

Each variant (multiple choice, matching, procedural, calculation, boast) has
its own module with:
- instantiate(): Resolve the concrete payload for a generated question
- check(): Decide whether an answer is correct
- present(): Display the generated question
"""

from typing import TYPE_CHECKING

from resident.content.models import QuestionType

if TYPE_CHECKING:
    from .base import QuestionHandler


# Handler registry - populated by @register decorator
HANDLERS: dict[QuestionType, "QuestionHandler"] = {}


def register(question_type: QuestionType):
    """Decorator to register a question handler."""
    def decorator(cls):
        HANDLERS[question_type] = cls()
        return cls
    return decorator


def get_handler(question_type: str | QuestionType) -> "QuestionHandler | None":
    """Get the handler for a question type."""
    if isinstance(question_type, str) and not isinstance(question_type, QuestionType):
        try:
            question_type = QuestionType(question_type)
        except ValueError:
            return None
    return HANDLERS.get(question_type)


# Import handlers to trigger registration
from . import multiple_choice
from . import matching
from . import procedural
from . import calculation
from . import boast

__all__ = [
    "HANDLERS",
    "QuestionType",
    "get_handler",
    "register",
]
