"""
Question generator: turns a stored question into a concrete, voiced instance.

The variant handler resolves the payload (banks, drawn variables), then the
mentor voice fills the template texts. Questions without a template keep
their fixed text and feedback.
"""

from __future__ import annotations

import math
import random
from typing import Mapping

from loguru import logger

from resident.content.models import AnyQuestion, BoastQuestion, MentorId, ProceduralQuestion
from resident.content.repository import ContentRepository
from resident.core.errors import ResidentError
from resident.mentors.voice import MentorVoiceService, VoiceContext

from . import get_handler
from .base import GeneratedQuestion

# Mastery thresholds (percent) for trimming procedural steps
BEGINNER_MASTERY_CEILING = 30
INTERMEDIATE_MASTERY_CEILING = 70


class QuestionGenerator:
    """Instantiates questions using the shared repository and voice service."""

    def __init__(
        self,
        repository: ContentRepository,
        voice: MentorVoiceService,
        rng: random.Random | None = None,
    ):
        self.repository = repository
        self.voice = voice
        self.rng = rng or random.Random()

    def resolve_mentor(self, question: AnyQuestion, mentor: MentorId | str | None = None) -> MentorId:
        """Explicit mentor, then the question's mentor, then the best fit for domain and tier."""
        if mentor is not None:
            return self.voice.get_profile(mentor).id
        if question.tags.mentor is not None:
            return question.tags.mentor
        return self.voice.find_best_mentor(question.tags.domain, question.tags.difficulty)

    async def generate(
        self,
        question: AnyQuestion,
        mentor: MentorId | str | None = None,
        values: Mapping[str, float] | None = None,
    ) -> GeneratedQuestion:
        """
        Build a concrete instance of a question.

        Args:
            question: Stored question record
            mentor: Mentor voicing the question (resolved when omitted)
            values: Fixed calculation variable values

        Returns:
            GeneratedQuestion with prompt, feedback and payload

        Raises:
            BankReferenceError: If a bank, item, match or step is missing
            FormulaError: If a calculation formula cannot be evaluated
            TemplateError: Unknown placeholder with strict templates enabled
        """
        handler = get_handler(question.type)
        if handler is None:
            raise ResidentError(f"No handler registered for question type {question.type!r}")

        mentor_id = self.resolve_mentor(question, mentor)
        instantiation = await handler.instantiate(question, self, values)
        context = VoiceContext.for_question(question)

        template = question.template
        if template is not None:
            prompt = self.voice.apply_voice(template.prompt, mentor_id, context, values=instantiation.values)
            correct_feedback = self.voice.apply_feedback(template.correct_feedback, mentor_id, True, context)
            incorrect_feedback = self.voice.apply_feedback(template.incorrect_feedback, mentor_id, False, context)
        else:
            prompt = instantiation.prompt
            correct_feedback = question.feedback.correct
            incorrect_feedback = question.feedback.incorrect

        logger.debug(f"Generated {question.type} question {question.id} voiced by {mentor_id.value}")
        return GeneratedQuestion(
            source=question,
            mentor=mentor_id,
            prompt=prompt,
            correct_feedback=correct_feedback,
            incorrect_feedback=incorrect_feedback,
            payload=instantiation.payload,
        )

    def adjust_for_mastery(self, question: AnyQuestion, mastery_percentage: float) -> AnyQuestion:
        """
        Scale a question to the learner's mastery.

        Procedural questions keep a random subset of their steps, in their
        original order: below 30% mastery 60-80% of the steps (at least 2),
        below 70% 80-90% (at least 3), otherwise all. Other variants are
        returned unchanged.
        """
        if isinstance(question, BoastQuestion) and isinstance(question.wrapped, ProceduralQuestion):
            wrapped = self._trim_steps(question.wrapped, mastery_percentage)
            return question.model_copy(update={"wrapped": wrapped})
        if isinstance(question, ProceduralQuestion):
            return self._trim_steps(question, mastery_percentage)
        return question

    def _trim_steps(self, question: ProceduralQuestion, mastery_percentage: float) -> ProceduralQuestion:
        steps = question.include_steps
        total = len(steps)
        if mastery_percentage < BEGINNER_MASTERY_CEILING:
            keep = max(2, math.floor(total * (0.6 + self.rng.random() * 0.2)))
        elif mastery_percentage < INTERMEDIATE_MASTERY_CEILING:
            keep = max(3, math.floor(total * (0.8 + self.rng.random() * 0.1)))
        else:
            keep = total

        if keep >= total:
            return question
        kept = sorted(self.rng.sample(range(total), keep))
        logger.debug(f"Trimmed {question.id} from {total} to {keep} steps for {mastery_percentage:.0f}% mastery")
        return question.model_copy(update={"include_steps": tuple(steps[i] for i in kept)})
