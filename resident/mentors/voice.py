"""
Mentor voice templating service.

Question and feedback templates carry ``{placeholder}`` tokens from a fixed
set. Rendering is a single token pass: each referenced placeholder is resolved
once (phrases are only drawn for placeholders the template uses), known
placeholders without a phrase stay visible, and unknown tokens are either left
visible with a warning or rejected when strict templates are enabled.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping

from loguru import logger

from resident.config import get_settings
from resident.content.models import AnyQuestion, BoastQuestion, DifficultyTier, KnowledgeDomain, MentorId, QuestionType
from resident.core.errors import TemplateError, UnknownMentorError
from resident.mentors.profiles import MENTOR_PROFILES, MentorVoiceProfile

_TOKEN_RE = re.compile(r"\{\s*([A-Za-z_][A-Za-z0-9_]*)\s*\}")


class Placeholder(str, Enum):
    """Tokens the voice service knows how to fill."""
    MENTOR_NAME = "mentorName"
    MENTOR_INTRO = "mentorIntro"
    MENTOR_INQUIRY = "mentorInquiry"
    MENTOR_TRANSITION = "mentorTransition"
    MENTOR_EMPHASIS = "mentorEmphasis"
    MENTOR_CONCLUSION = "mentorConclusion"
    MENTOR_FEEDBACK = "mentorFeedback"
    DOMAIN_PHRASE = "domainPhrase"
    DIFFICULTY_PHRASE = "difficultyPhrase"


PLACEHOLDER_NAMES = frozenset(p.value for p in Placeholder)


@dataclass(frozen=True)
class VoiceContext:
    """What the mentor is talking about."""
    domain: KnowledgeDomain
    tier: DifficultyTier
    keywords: tuple[str, ...] = ()
    is_boast: bool = False
    question_type: QuestionType | None = None

    @classmethod
    def for_question(cls, question: AnyQuestion) -> "VoiceContext":
        is_boast = isinstance(question, BoastQuestion)
        scored = question.wrapped if is_boast else question
        return cls(
            domain=question.tags.domain,
            tier=question.tags.difficulty,
            keywords=question.tags.keywords,
            is_boast=is_boast,
            question_type=QuestionType(scored.type),
        )


def template_tokens(template: str) -> list[str]:
    """Names of all ``{token}`` occurrences in a template, in order."""
    return [match.group(1) for match in _TOKEN_RE.finditer(template)]


class MentorVoiceService:
    """
    Picks mentor phrases and fills template placeholders.

    Every phrase lookup draws uniformly from the mentor's candidates for
    that slot using the injected random generator.
    """

    def __init__(
        self,
        profiles: Mapping[MentorId, MentorVoiceProfile] = MENTOR_PROFILES,
        rng: random.Random | None = None,
        strict: bool | None = None,
    ):
        self.profiles = profiles
        self.rng = rng or random.Random()
        self.strict = get_settings().strict_templates if strict is None else strict

    def _pick(self, phrases: tuple[str, ...]) -> str:
        return self.rng.choice(phrases)

    def get_profile(self, mentor: MentorId | str) -> MentorVoiceProfile:
        """
        Look up a mentor profile.

        Raises:
            UnknownMentorError: If no profile exists for the id
        """
        try:
            mentor_id = MentorId(mentor)
        except ValueError:
            raise UnknownMentorError(f"Mentor profile not found for ID: {mentor}") from None
        profile = self.profiles.get(mentor_id)
        if profile is None:
            raise UnknownMentorError(f"Mentor profile not found for ID: {mentor}")
        return profile

    def get_intro(self, mentor: MentorId | str, context: VoiceContext | None = None) -> str:
        """Opening phrase; boasts get a boast response instead."""
        patterns = self.get_profile(mentor).patterns
        if context is not None and context.is_boast:
            return self._pick(patterns.boast_responses)
        return self._pick(patterns.intros)

    def get_inquiry(self, mentor: MentorId | str, context: VoiceContext | None = None) -> str:
        """How the mentor asks; boasts get a challenge phrase instead."""
        patterns = self.get_profile(mentor).patterns
        if context is not None and context.is_boast:
            return self._pick(patterns.challenges)
        return self._pick(patterns.inquiries)

    def get_domain_phrase(self, mentor: MentorId | str, domain: KnowledgeDomain | str) -> str | None:
        phrases = self.get_profile(mentor).patterns.domain_phrases.get(KnowledgeDomain(domain))
        return self._pick(phrases) if phrases else None

    def get_difficulty_phrase(self, mentor: MentorId | str, tier: DifficultyTier | int) -> str | None:
        phrases = self.get_profile(mentor).patterns.difficulty_phrases.get(DifficultyTier(tier))
        return self._pick(phrases) if phrases else None

    def get_correct_feedback(self, mentor: MentorId | str) -> str:
        return self._pick(self.get_profile(mentor).patterns.correct_feedback)

    def get_incorrect_feedback(self, mentor: MentorId | str) -> str:
        return self._pick(self.get_profile(mentor).patterns.incorrect_feedback)

    def get_encouragement(self, mentor: MentorId | str) -> str:
        return self._pick(self.get_profile(mentor).patterns.encouragement)

    def get_transition(self, mentor: MentorId | str) -> str:
        return self._pick(self.get_profile(mentor).patterns.transitions)

    def get_emphasis(self, mentor: MentorId | str) -> str:
        return self._pick(self.get_profile(mentor).patterns.emphasis)

    def get_conclusion(self, mentor: MentorId | str) -> str:
        return self._pick(self.get_profile(mentor).patterns.conclusions)

    # ========================================
    # Template rendering
    # ========================================

    def _resolvers(
        self,
        mentor: MentorId | str,
        context: VoiceContext | None,
        correct: bool | None,
    ) -> dict[str, Callable[[], str | None]]:
        def feedback() -> str | None:
            if correct is None:
                return None
            return self.get_correct_feedback(mentor) if correct else self.get_incorrect_feedback(mentor)

        return {
            Placeholder.MENTOR_NAME.value: lambda: self.get_profile(mentor).name,
            Placeholder.MENTOR_INTRO.value: lambda: self.get_intro(mentor, context),
            Placeholder.MENTOR_INQUIRY.value: lambda: self.get_inquiry(mentor, context),
            Placeholder.MENTOR_TRANSITION.value: lambda: self.get_transition(mentor),
            Placeholder.MENTOR_EMPHASIS.value: lambda: self.get_emphasis(mentor),
            Placeholder.MENTOR_CONCLUSION.value: lambda: self.get_conclusion(mentor),
            Placeholder.MENTOR_FEEDBACK.value: feedback,
            Placeholder.DOMAIN_PHRASE.value: (
                lambda: self.get_domain_phrase(mentor, context.domain) if context else None
            ),
            Placeholder.DIFFICULTY_PHRASE.value: (
                lambda: self.get_difficulty_phrase(mentor, context.tier) if context else None
            ),
        }

    def render(
        self,
        template: str,
        mentor: MentorId | str,
        context: VoiceContext | None = None,
        correct: bool | None = None,
        values: Mapping[str, str] | None = None,
    ) -> str:
        """
        Fill every token of a template in one pass.

        Args:
            template: Text with ``{placeholder}`` tokens
            mentor: Mentor whose phrases are used
            context: Voice context for intro/inquiry and domain/tier phrases
            correct: Selects correct or incorrect ``{mentorFeedback}``; None leaves it
            values: Extra known tokens (e.g. drawn calculation variables)

        Returns:
            The rendered text

        Raises:
            TemplateError: Unknown token while strict templates are enabled
            UnknownMentorError: If the mentor has no profile
        """
        if not template:
            return ""

        self.get_profile(mentor)
        resolvers = self._resolvers(mentor, context, correct)
        values = values or {}
        resolved: dict[str, str | None] = {}

        def substitute(match: re.Match) -> str:
            name = match.group(1)
            if name in values:
                return str(values[name])
            if name not in resolvers:
                if self.strict:
                    raise TemplateError(f"Unknown placeholder {{{name}}} in template {template!r}")
                logger.warning(f"Unknown placeholder {{{name}}} left in template")
                return match.group(0)
            if name not in resolved:
                resolved[name] = resolvers[name]()
            phrase = resolved[name]
            return match.group(0) if phrase is None else phrase

        return _TOKEN_RE.sub(substitute, template)

    def apply_voice(
        self,
        template: str,
        mentor: MentorId | str,
        context: VoiceContext,
        values: Mapping[str, str] | None = None,
    ) -> str:
        """Voice a question prompt for a mentor."""
        return self.render(template, mentor, context=context, values=values)

    def apply_feedback(
        self,
        template: str,
        mentor: MentorId | str,
        correct: bool,
        context: VoiceContext | None = None,
    ) -> str:
        """Voice a feedback template; ``{mentorFeedback}`` follows correctness."""
        return self.render(template, mentor, context=context, correct=correct)

    def find_best_mentor(self, domain: KnowledgeDomain | str, tier: DifficultyTier | int) -> MentorId:
        """
        Score each mentor for a domain and tier and return the best one.

        Specialty match scores 3, a domain phrase list 2 and a difficulty
        phrase list 1. Ties go to the earlier profile.
        """
        domain = KnowledgeDomain(domain)
        tier = DifficultyTier(tier)
        best: MentorId | None = None
        best_score = -1
        for mentor_id, profile in self.profiles.items():
            score = 0
            if domain in profile.specialties:
                score += 3
            if profile.patterns.domain_phrases.get(domain):
                score += 2
            if profile.patterns.difficulty_phrases.get(tier):
                score += 1
            if score > best_score:
                best, best_score = mentor_id, score
        if best is None:
            raise UnknownMentorError("No mentor profiles configured")
        return best
