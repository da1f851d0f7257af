"""
Challenge orchestration.

Builds sessions from the selector and generator, advances them one answer at
a time through the evaluator, and feeds every answer to the mastery
integrator as it happens. A session never aborts because of missing content
or an isolated evaluation failure; it degrades to what it can produce.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Callable
from uuid import uuid4

from loguru import logger

from resident.adaptive.selector import QuestionSelector
from resident.config import get_settings
from resident.content.models import AnyQuestion, KnowledgeDomain, MentorId
from resident.core.errors import ChallengeStateError, ResidentError
from resident.core.mastery import MasteryIntegrator
from resident.questions.base import GeneratedQuestion
from resident.questions.evaluator import AnswerEvaluator
from resident.questions.generator import QuestionGenerator

from .models import (
    AnswerOutcome,
    AnswerRecord,
    ChallengeConfig,
    ChallengeDifficulty,
    ChallengeSession,
    ChallengeStatus,
    ChallengeSummary,
    ChallengeType,
)

# Shift applied to the learner's mastery before selection and step trimming.
# Easy plays as a weaker learner (easier tiers, fewer steps), hard as a stronger one.
DIFFICULTY_MASTERY_SHIFT: dict[ChallengeDifficulty, float] = {
    ChallengeDifficulty.EASY: -20,
    ChallengeDifficulty.BALANCED: 0,
    ChallengeDifficulty.HARD: 20,
}

BOSS_MIN_TYPES = 3

# Title phrases per challenge type and mentor; None is the unvoiced fallback
CHALLENGE_TITLES: dict[ChallengeType, dict[MentorId | None, tuple[str, ...]]] = {
    ChallengeType.STANDARD: {
        MentorId.KAPOOR: ("Dr. Kapoor's Calibration Check", "Precision Rounds: {domain}"),
        MentorId.GARCIA: ("Clinical Rounds with Dr. Garcia", "Patient Case Review: {domain}"),
        MentorId.JESSE: ("Machine Room Drill", "Hands-On {domain} with Dr. Jesse"),
        MentorId.QUINN: ("Dr. Quinn's Thought Experiment", "First Principles: {domain}"),
        None: ("{domain} Review", "{domain} Practice Round"),
    },
    ChallengeType.BOSS: {
        MentorId.KAPOOR: ("The Kapoor Audit", "Absolute Dosimetry Gauntlet"),
        MentorId.GARCIA: ("Tumor Board with Dr. Garcia", "The Difficult Case"),
        MentorId.JESSE: ("Interlock Meltdown", "Linac Down: Emergency Repair"),
        MentorId.QUINN: ("The Quinn Paradox", "Model Boundary Showdown"),
        None: ("{domain} Qualifying Exam",),
    },
    ChallengeType.BOAST: {
        MentorId.KAPOOR: ("Prove Your Precision",),
        MentorId.GARCIA: ("Back It Up at the Bedside",),
        MentorId.JESSE: ("Put Your Hands Where Your Mouth Is",),
        MentorId.QUINN: ("Defend Your Theory",),
        None: ("{domain} Boast",),
    },
    ChallengeType.DISCOVERY: {
        MentorId.KAPOOR: ("Measuring the Unknown",),
        MentorId.GARCIA: ("Something New in Clinic",),
        MentorId.JESSE: ("What's Behind This Panel?",),
        MentorId.QUINN: ("An Elegant Connection",),
        None: ("{domain} Discovery",),
    },
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def domain_display_name(domain: KnowledgeDomain) -> str:
    return domain.name.replace("_", " ").title()


class ChallengeManager:
    """Creates, advances and summarizes challenge sessions."""

    def __init__(
        self,
        selector: QuestionSelector,
        generator: QuestionGenerator,
        evaluator: AnswerEvaluator,
        integrator: MasteryIntegrator,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
        default_mastery_percentage: float | None = None,
    ):
        self.selector = selector
        self.generator = generator
        self.evaluator = evaluator
        self.integrator = integrator
        self.rng = rng or random.Random()
        self.clock = clock
        if default_mastery_percentage is None:
            default_mastery_percentage = get_settings().default_mastery_percentage
        self.default_mastery_percentage = default_mastery_percentage

    def learner_mastery_percentage(self, topic_node: str | None) -> float:
        """Stored mastery of the topic node as a percentage, or the default."""
        if topic_node:
            value = self.integrator.store.get_mastery(topic_node)
            if value is not None:
                return value * 100
        return self.default_mastery_percentage

    def build_title(self, config: ChallengeConfig) -> str:
        by_mentor = CHALLENGE_TITLES[config.type]
        phrases = by_mentor.get(config.mentor) or by_mentor[None]
        return self.rng.choice(phrases).format(domain=domain_display_name(config.domain))

    async def _select(self, config: ChallengeConfig, mastery_percentage: float, count: int) -> list[AnyQuestion]:
        selected = await self.selector.select_questions(
            config.domain,
            topic_node=config.topic_node,
            mastery_percentage=mastery_percentage,
            count=count,
            allowed_types=config.allowed_types,
            mentor=config.mentor,
            subtopic=config.subtopic,
        )
        if len(selected) < count and config.topic_node:
            # Topic node ran dry; top up from the whole domain
            logger.warning(
                f"Topic node {config.topic_node} supplied {len(selected)} of {count} questions; "
                f"widening to {config.domain.value}"
            )
            extra = await self.selector.select_questions(
                config.domain,
                mastery_percentage=mastery_percentage,
                count=count,
                allowed_types=config.allowed_types,
                mentor=config.mentor,
            )
            chosen = {q.id for q in selected}
            selected.extend(q for q in extra if q.id not in chosen)
            selected = selected[:count]

        if config.type == ChallengeType.BOSS:
            selected = await self.selector.ensure_type_mix(selected, config.domain, BOSS_MIN_TYPES)
        return selected

    async def create_challenge(self, config: ChallengeConfig) -> ChallengeSession:
        """
        Build a new challenge session.

        The difficulty shifts the learner's mastery (easy -20, hard +20,
        clamped to 0-100) and the shifted value drives both tier selection
        and procedural step trimming.

        Args:
            config: Challenge configuration

        Returns:
            Active session at question 0, or a completed empty session when
            no question could be produced
        """
        count = config.resolved_question_count
        learner_mastery = self.learner_mastery_percentage(config.topic_node)
        mastery = max(0.0, min(100.0, learner_mastery + DIFFICULTY_MASTERY_SHIFT[config.difficulty]))

        selected = await self._select(config, mastery, count)

        questions: list[GeneratedQuestion] = []
        for question in selected:
            adjusted = self.generator.adjust_for_mastery(question, mastery)
            try:
                questions.append(await self.generator.generate(adjusted, mentor=config.mentor))
            except ResidentError as e:
                logger.warning(f"Skipping question {question.id}: {e}")

        session = ChallengeSession(
            id=f"challenge-{uuid4().hex[:12]}",
            config=config,
            title=config.title or self.build_title(config),
            questions=tuple(questions),
            mastery_threshold=config.resolved_mastery_threshold,
            started_at=self.clock(),
        )
        if not questions:
            logger.warning(f"Challenge {session.id} has no questions; marking it completed")
            session.status = ChallengeStatus.COMPLETED
        else:
            logger.debug(f"Created {config.type.value} challenge {session.id} with {len(questions)} questions")
        return session

    def answer_challenge_question(
        self,
        session: ChallengeSession,
        answer: Any,
        risk_factor: float = 1.0,
    ) -> AnswerOutcome:
        """
        Evaluate the current question and advance the session.

        The signed mastery delta (scaled by ``risk_factor``) is applied to the
        learner's store immediately and added to the session total.

        Raises:
            ChallengeStateError: If the session is not active
        """
        if session.status != ChallengeStatus.ACTIVE:
            raise ChallengeStateError(f"Challenge {session.id} is {session.status.value}")
        instance = session.questions[session.current_index]

        evaluation = self.evaluator.evaluate_question(instance, answer)
        update = self.integrator.record_answer(instance.source, evaluation.correct, risk_factor)

        session.answers.append(AnswerRecord(
            question_id=instance.id,
            answer=answer,
            correct=evaluation.correct,
            mastery_delta=update.delta,
            feedback=evaluation.feedback,
            timestamp=self.clock(),
        ))
        session.mastery_gained += update.delta
        session.current_index += 1

        complete = session.current_index >= len(session.questions)
        if complete:
            session.status = ChallengeStatus.COMPLETED
            logger.info(
                f"Challenge {session.id} completed: "
                f"{sum(a.correct for a in session.answers)}/{len(session.answers)} correct, "
                f"mastery {session.mastery_gained:+.2f}"
            )

        return AnswerOutcome(
            session=session,
            correct=evaluation.correct,
            mastery_gain=update.delta,
            complete=complete,
            evaluation=evaluation,
            mastery_update=update,
        )

    def get_challenge_summary(self, session: ChallengeSession) -> ChallengeSummary:
        """Totals, elapsed time between first and last answer, and the pass flag."""
        elapsed = 0.0
        if session.answers:
            elapsed = (session.answers[-1].timestamp - session.answers[0].timestamp).total_seconds()
        return ChallengeSummary(
            total_questions=len(session.questions),
            correct_answers=sum(1 for a in session.answers if a.correct),
            mastery_gained=session.mastery_gained,
            elapsed_seconds=elapsed,
            passed=session.mastery_gained >= session.mastery_threshold,
            status=session.status,
        )

    def abort_challenge(self, session: ChallengeSession) -> ChallengeSession:
        """Mark an active session failed; finished sessions are left alone."""
        if session.status == ChallengeStatus.ACTIVE:
            session.status = ChallengeStatus.FAILED
            logger.info(f"Challenge {session.id} aborted at question {session.current_index}")
        return session
