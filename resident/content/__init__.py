"""
Question content: models, stores and the caching repository.
"""

from .models import (
    AnyQuestion,
    BankSet,
    BoastQuestion,
    CalculationQuestion,
    DifficultyTier,
    KnowledgeDomain,
    MatchingBank,
    MatchingQuestion,
    MentorId,
    MultipleChoiceQuestion,
    ProceduralBank,
    ProceduralQuestion,
    Question,
    QuestionCollection,
    QuestionType,
    underlying,
)
from .repository import ContentRepository
from .store import ContentStore, FileContentStore, InMemoryContentStore

__all__ = [
    "AnyQuestion",
    "BankSet",
    "BoastQuestion",
    "CalculationQuestion",
    "ContentRepository",
    "ContentStore",
    "DifficultyTier",
    "FileContentStore",
    "InMemoryContentStore",
    "KnowledgeDomain",
    "MatchingBank",
    "MatchingQuestion",
    "MentorId",
    "MultipleChoiceQuestion",
    "ProceduralBank",
    "ProceduralQuestion",
    "Question",
    "QuestionCollection",
    "QuestionType",
    "underlying",
]
