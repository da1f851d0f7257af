"""
Challenge session data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from resident.content.models import KnowledgeDomain, MentorId, QuestionType
from resident.core.mastery import MasteryUpdate
from resident.questions.base import EvaluationResult, GeneratedQuestion


class ChallengeType(str, Enum):
    STANDARD = "standard"      # Normal run of questions
    BOSS = "boss"              # Longer, mixed-variant encounter
    BOAST = "boast"            # Risk/reward challenge
    DISCOVERY = "discovery"    # Can lead to discovering new topic nodes


class ChallengeDifficulty(str, Enum):
    EASY = "easy"              # Easier than the learner's level
    BALANCED = "balanced"      # Matched to the learner's level
    HARD = "hard"              # Harder than the learner's level


class ChallengeStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"          # Only reached through an external abort


DEFAULT_QUESTION_COUNTS: dict[ChallengeType, int] = {
    ChallengeType.STANDARD: 5,
    ChallengeType.BOSS: 8,
    ChallengeType.BOAST: 3,
    ChallengeType.DISCOVERY: 4,
}

# Cumulative mastery (fraction) needed to pass
DEFAULT_MASTERY_THRESHOLDS: dict[ChallengeDifficulty, float] = {
    ChallengeDifficulty.EASY: 0.1,
    ChallengeDifficulty.BALANCED: 0.2,
    ChallengeDifficulty.HARD: 0.3,
}


@dataclass
class ChallengeConfig:
    """How a challenge should be built."""
    domain: KnowledgeDomain
    type: ChallengeType = ChallengeType.STANDARD
    difficulty: ChallengeDifficulty = ChallengeDifficulty.BALANCED
    mentor: MentorId | None = None
    subtopic: str | None = None
    topic_node: str | None = None
    allowed_types: tuple[QuestionType, ...] | None = None
    question_count: int | None = None
    mastery_threshold: float | None = None
    title: str | None = None

    def __post_init__(self):
        self.domain = KnowledgeDomain(self.domain)
        self.type = ChallengeType(self.type)
        self.difficulty = ChallengeDifficulty(self.difficulty)
        if self.mentor is not None:
            self.mentor = MentorId(self.mentor)
        if self.allowed_types is not None:
            self.allowed_types = tuple(QuestionType(t) for t in self.allowed_types)

    @property
    def resolved_question_count(self) -> int:
        if self.question_count is not None:
            return self.question_count
        return DEFAULT_QUESTION_COUNTS[self.type]

    @property
    def resolved_mastery_threshold(self) -> float:
        if self.mastery_threshold is not None:
            return self.mastery_threshold
        return DEFAULT_MASTERY_THRESHOLDS[self.difficulty]


@dataclass(frozen=True)
class AnswerRecord:
    """One entry of the append-only answer log."""
    question_id: str
    answer: Any
    correct: bool
    mastery_delta: float
    feedback: str
    timestamp: datetime


@dataclass
class ChallengeSession:
    """A multi-question challenge; mutated only by the ChallengeManager."""
    id: str
    config: ChallengeConfig
    title: str
    questions: tuple[GeneratedQuestion, ...]
    mastery_threshold: float
    started_at: datetime
    current_index: int = 0
    answers: list[AnswerRecord] = field(default_factory=list)
    mastery_gained: float = 0.0
    status: ChallengeStatus = ChallengeStatus.ACTIVE

    @property
    def question_count(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> GeneratedQuestion | None:
        if self.status != ChallengeStatus.ACTIVE or self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    @property
    def is_complete(self) -> bool:
        return self.status == ChallengeStatus.COMPLETED


@dataclass
class AnswerOutcome:
    """Result of answering the current challenge question."""
    session: ChallengeSession
    correct: bool
    mastery_gain: float          # signed delta added to the session total
    complete: bool
    evaluation: EvaluationResult
    mastery_update: MasteryUpdate


@dataclass(frozen=True)
class ChallengeSummary:
    total_questions: int
    correct_answers: int
    mastery_gained: float
    elapsed_seconds: float
    passed: bool
    status: ChallengeStatus
