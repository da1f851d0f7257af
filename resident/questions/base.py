"""
Base protocol and types for question handlers.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, Union

from rich.console import Console

from resident.content.models import (
    AnyQuestion,
    BoastQuestion,
    DifficultyTier,
    FollowUp,
    MatchingItem,
    MatchingOption,
    MentorId,
    MultipleChoiceOption,
    ProceduralStep,
    QuestionType,
    underlying,
)

if TYPE_CHECKING:
    from .generator import QuestionGenerator


# Base mastery gain (percentage points) for a correct answer, per variant
MASTERY_GAIN_RANGES: dict[QuestionType, tuple[float, float]] = {
    QuestionType.MULTIPLE_CHOICE: (1.0, 4.0),
    QuestionType.MATCHING: (2.0, 5.0),
    QuestionType.PROCEDURAL: (3.0, 6.0),
    QuestionType.CALCULATION: (5.0, 8.0),
    QuestionType.BOAST: (8.0, 12.0),
}

TIER_MULTIPLIERS: dict[DifficultyTier, float] = {
    DifficultyTier.BEGINNER: 0.8,
    DifficultyTier.INTERMEDIATE: 1.0,
    DifficultyTier.ADVANCED: 1.5,
}

GENERIC_FAILURE_FEEDBACK = "Something went wrong while checking that answer. It has been marked incorrect."


def mastery_gain_range(question_type: QuestionType | str, tier: DifficultyTier | int) -> tuple[float, float]:
    """Bounds of the correct-answer gain after the tier multiplier."""
    low, high = MASTERY_GAIN_RANGES[QuestionType(question_type)]
    multiplier = TIER_MULTIPLIERS[DifficultyTier(tier)]
    return low * multiplier, high * multiplier


def compute_mastery_gain(
    question_type: QuestionType | str,
    tier: DifficultyTier | int,
    correct: bool,
    rng: random.Random | None = None,
) -> float:
    """
    Mastery gain for one answer.

    Correct answers draw uniformly from the variant range scaled by the tier
    multiplier, rounded to one decimal. Incorrect answers gain nothing.
    """
    if not correct:
        return 0.0
    low, high = mastery_gain_range(question_type, tier)
    return round((rng or random).uniform(low, high), 1)


# ========================================
# Generated instances
# ========================================


@dataclass(frozen=True)
class ChoicePayload:
    options: tuple[MultipleChoiceOption, ...]
    follow_up: FollowUp | None = None


@dataclass(frozen=True)
class MatchingPayload:
    bank_id: str
    items: tuple[MatchingItem, ...]
    matches_by_item: dict[str, tuple[MatchingOption, ...]]
    options: tuple[MatchingOption, ...]


@dataclass(frozen=True)
class ProceduralPayload:
    bank_id: str
    title: str
    steps: tuple[ProceduralStep, ...]
    description: str = ""


@dataclass(frozen=True)
class CalculationPayload:
    values: dict[str, float]
    solution: tuple[str, ...]
    answer: float
    precision: int
    accepted_ranges: tuple[tuple[float, float], ...] = ()


Payload = Union[ChoicePayload, MatchingPayload, ProceduralPayload, CalculationPayload]


@dataclass(frozen=True)
class Instantiation:
    """What a handler contributes to a generated question."""
    payload: Payload
    prompt: str
    # Extra template tokens (drawn variables) available to the voice pass
    values: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GeneratedQuestion:
    """A concrete, voiced question ready to be delivered and scored."""
    source: AnyQuestion
    mentor: MentorId
    prompt: str
    correct_feedback: str
    incorrect_feedback: str
    payload: Payload

    @property
    def id(self) -> str:
        return self.source.id

    @property
    def type(self) -> QuestionType:
        return QuestionType(self.source.type)

    @property
    def scored(self) -> AnyQuestion:
        """The question whose payload is scored (the wrapped one for boasts)."""
        return underlying(self.source)

    @property
    def is_boast(self) -> bool:
        return isinstance(self.source, BoastQuestion)

    @property
    def tier(self) -> DifficultyTier:
        return self.source.tags.difficulty

    @property
    def knowledge_node(self) -> str:
        return self.source.tags.knowledge_node


@dataclass
class CheckOutcome:
    """Raw correctness of an answer before gain and feedback are attached."""
    correct: bool
    correct_matches: int | None = None
    total_matches: int | None = None


@dataclass
class EvaluationResult:
    """Result of evaluating an answer."""
    correct: bool
    mastery_gain: float
    feedback: str
    correct_matches: int | None = None
    total_matches: int | None = None
    error: str | None = None  # set when evaluation failed internally


class QuestionHandler(Protocol):
    """Protocol for question variant handlers."""

    async def instantiate(
        self,
        question: AnyQuestion,
        generator: "QuestionGenerator",
        values: dict[str, float] | None = None,
    ) -> Instantiation:
        """Resolve the variant payload (draw values, resolve banks)."""
        ...

    def check(self, instance: GeneratedQuestion, answer: Any) -> CheckOutcome:
        """Decide whether the answer is correct."""
        ...

    def present(self, instance: GeneratedQuestion, console: Console) -> None:
        """Display the generated question."""
        ...


def format_number(value: float) -> str:
    """Render numbers without a trailing ``.0`` for whole values."""
    return str(int(value)) if float(value).is_integer() else str(value)
