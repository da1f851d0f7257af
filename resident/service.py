"""
Quiz service facade.

Wires one repository, selector, generator, voice service, evaluator,
integrator and challenge manager per process. Hosts (the game, the CLI)
talk to this object instead of assembling the pipeline themselves.
"""

from __future__ import annotations

import random
from typing import Any, Iterable, Mapping

from resident.adaptive.selector import ActivityDifficulty, QuestionSelector, RecentQuestionCache
from resident.challenge.manager import ChallengeManager
from resident.challenge.models import AnswerOutcome, ChallengeConfig, ChallengeSession, ChallengeSummary
from resident.config import Settings, get_settings
from resident.content.models import AnyQuestion, DifficultyTier, KnowledgeDomain, MentorId, QuestionType
from resident.content.repository import ContentRepository
from resident.content.store import ContentStore, FileContentStore
from resident.core.mastery import InMemoryMasteryStore, MasteryIntegrator, MasteryStore
from resident.mentors.voice import MentorVoiceService, VoiceContext
from resident.questions.base import EvaluationResult, GeneratedQuestion
from resident.questions.evaluator import AnswerEvaluator
from resident.questions.generator import QuestionGenerator


class QuizService:
    """
    Process-wide entry point to the quiz pipeline.

    Example:
        service = QuizService()
        session = await service.create_challenge(ChallengeConfig(domain="dosimetry"))
        outcome = service.answer_challenge_question(session, 0)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: ContentStore | None = None,
        mastery_store: MasteryStore | None = None,
        rng: random.Random | None = None,
    ):
        self.settings = settings or get_settings()
        self.rng = rng or random.Random()

        self.repository = ContentRepository(store or FileContentStore(self.settings.content_dir))
        self.voice = MentorVoiceService(rng=self.rng, strict=self.settings.strict_templates)
        self.selector = QuestionSelector(
            self.repository,
            recent=RecentQuestionCache(self.settings.recent_question_cap),
            rng=self.rng,
        )
        self.generator = QuestionGenerator(self.repository, self.voice, rng=self.rng)
        self.evaluator = AnswerEvaluator(rng=self.rng)
        self.integrator = MasteryIntegrator(
            mastery_store if mastery_store is not None else InMemoryMasteryStore(),
            connection_threshold=self.settings.connection_threshold,
            recent_window=self.settings.recent_node_window,
        )
        self.challenges = ChallengeManager(
            self.selector,
            self.generator,
            self.evaluator,
            self.integrator,
            rng=self.rng,
            default_mastery_percentage=self.settings.default_mastery_percentage,
        )

    # ========================================
    # Selection and generation
    # ========================================

    async def select_questions(
        self,
        domain: KnowledgeDomain | str,
        topic_node: str | None = None,
        mastery_percentage: float = 0,
        count: int = 5,
        allowed_types: Iterable[QuestionType | str] | None = None,
        mentor: MentorId | str | None = None,
        subtopic: str | None = None,
    ) -> list[AnyQuestion]:
        return await self.selector.select_questions(
            domain,
            topic_node=topic_node,
            mastery_percentage=mastery_percentage,
            count=count,
            allowed_types=allowed_types,
            mentor=mentor,
            subtopic=subtopic,
        )

    async def select_activity_questions(
        self,
        domain: KnowledgeDomain | str,
        activity_difficulty: ActivityDifficulty | str,
        count: int = 3,
        allowed_types: Iterable[QuestionType | str] | None = None,
        mentor: MentorId | str | None = None,
    ) -> list[AnyQuestion]:
        return await self.selector.select_activity_questions(
            domain, activity_difficulty, count=count, allowed_types=allowed_types, mentor=mentor
        )

    async def generate_question(
        self,
        question: AnyQuestion,
        mentor: MentorId | str | None = None,
        values: Mapping[str, float] | None = None,
    ) -> GeneratedQuestion:
        return await self.generator.generate(question, mentor=mentor, values=values)

    def evaluate_question(self, instance: GeneratedQuestion, answer: Any) -> EvaluationResult:
        return self.evaluator.evaluate_question(instance, answer)

    # ========================================
    # Challenges
    # ========================================

    async def create_challenge(self, config: ChallengeConfig) -> ChallengeSession:
        return await self.challenges.create_challenge(config)

    def answer_challenge_question(
        self,
        session: ChallengeSession,
        answer: Any,
        risk_factor: float = 1.0,
    ) -> AnswerOutcome:
        return self.challenges.answer_challenge_question(session, answer, risk_factor)

    def get_challenge_summary(self, session: ChallengeSession) -> ChallengeSummary:
        return self.challenges.get_challenge_summary(session)

    def abort_challenge(self, session: ChallengeSession) -> ChallengeSession:
        return self.challenges.abort_challenge(session)

    # ========================================
    # Mentor voice
    # ========================================

    def get_mentor_intro(self, mentor: MentorId | str, context: VoiceContext | None = None) -> str:
        return self.voice.get_intro(mentor, context)

    def get_mentor_inquiry(self, mentor: MentorId | str, context: VoiceContext | None = None) -> str:
        return self.voice.get_inquiry(mentor, context)

    def get_mentor_feedback(self, mentor: MentorId | str, correct: bool) -> str:
        if correct:
            return self.voice.get_correct_feedback(mentor)
        return self.voice.get_incorrect_feedback(mentor)

    def get_mentor_encouragement(self, mentor: MentorId | str) -> str:
        return self.voice.get_encouragement(mentor)

    def get_mentor_transition(self, mentor: MentorId | str) -> str:
        return self.voice.get_transition(mentor)

    def get_mentor_conclusion(self, mentor: MentorId | str) -> str:
        return self.voice.get_conclusion(mentor)

    def find_best_mentor(self, domain: KnowledgeDomain | str, tier: DifficultyTier | int) -> MentorId:
        return self.voice.find_best_mentor(domain, tier)
