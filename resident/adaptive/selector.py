"""
Adaptive question selection.

Picks a bounded, duplicate-free, mastery-aware set of questions:

1. Gather the pool (questions of a topic node, or all questions of a domain)
2. Narrow by allowed variants, then by subtopic while it still supplies enough
3. Skip recently used questions while enough fresh ones remain
4. Split the count across tiers by the learner's mastery band
5. Sample each tier, then fill any shortfall from the remaining candidates

With a mentor, candidates are grouped (mentor match, no mentor, other
mentor) and selection runs group by group, so a scarce mentor never starves
the session.
"""

from __future__ import annotations

import math
import random
from collections import Counter, OrderedDict
from enum import Enum
from typing import Iterable, Sequence

from loguru import logger

from resident.content.models import AnyQuestion, DifficultyTier, KnowledgeDomain, MentorId, QuestionType
from resident.content.repository import ContentRepository


class MasteryBand(str, Enum):
    NOVICE = "novice"            # below 25%
    DEVELOPING = "developing"    # 25-50%
    PROFICIENT = "proficient"    # 50-75%
    EXPERT = "expert"            # 75% and up

    @classmethod
    def from_percentage(cls, mastery_percentage: float) -> "MasteryBand":
        if mastery_percentage < 25:
            return cls.NOVICE
        if mastery_percentage < 50:
            return cls.DEVELOPING
        if mastery_percentage < 75:
            return cls.PROFICIENT
        return cls.EXPERT


# Share of each tier in a selection, per mastery band
DIFFICULTY_DISTRIBUTION: dict[MasteryBand, dict[DifficultyTier, float]] = {
    MasteryBand.NOVICE: {
        DifficultyTier.BEGINNER: 0.7,
        DifficultyTier.INTERMEDIATE: 0.3,
        DifficultyTier.ADVANCED: 0.0,
    },
    MasteryBand.DEVELOPING: {
        DifficultyTier.BEGINNER: 0.3,
        DifficultyTier.INTERMEDIATE: 0.5,
        DifficultyTier.ADVANCED: 0.2,
    },
    MasteryBand.PROFICIENT: {
        DifficultyTier.BEGINNER: 0.1,
        DifficultyTier.INTERMEDIATE: 0.5,
        DifficultyTier.ADVANCED: 0.4,
    },
    MasteryBand.EXPERT: {
        DifficultyTier.BEGINNER: 0.0,
        DifficultyTier.INTERMEDIATE: 0.3,
        DifficultyTier.ADVANCED: 0.7,
    },
}


class ActivityDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    NONE = "none"


# (mastery percentage, bias) per activity difficulty
ACTIVITY_MASTERY: dict[ActivityDifficulty, tuple[float, float]] = {
    ActivityDifficulty.EASY: (25, -10),
    ActivityDifficulty.MEDIUM: (50, 0),
    ActivityDifficulty.HARD: (75, 15),
}
DEFAULT_ACTIVITY_MASTERY = 40


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def tier_targets(count: int, mastery_percentage: float) -> dict[DifficultyTier, int]:
    """
    Per-tier target counts for a selection.

    Beginner and intermediate are rounded shares of the count; advanced
    takes the remainder (never negative).
    """
    mix = DIFFICULTY_DISTRIBUTION[MasteryBand.from_percentage(mastery_percentage)]
    beginner = round_half_up(count * mix[DifficultyTier.BEGINNER])
    intermediate = round_half_up(count * mix[DifficultyTier.INTERMEDIATE])
    return {
        DifficultyTier.BEGINNER: beginner,
        DifficultyTier.INTERMEDIATE: intermediate,
        DifficultyTier.ADVANCED: max(0, count - beginner - intermediate),
    }


class RecentQuestionCache:
    """
    Capped, ordered set of recently used question ids.

    Adding an id already present refreshes it; overflow evicts the oldest.
    """

    def __init__(self, capacity: int = 50):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._ids: OrderedDict[str, None] = OrderedDict()

    def add(self, question_id: str) -> None:
        if question_id in self._ids:
            self._ids.move_to_end(question_id)
        else:
            self._ids[question_id] = None
        while len(self._ids) > self.capacity:
            self._ids.popitem(last=False)

    def extend(self, question_ids: Iterable[str]) -> None:
        for question_id in question_ids:
            self.add(question_id)

    def ids(self) -> list[str]:
        """Tracked ids, oldest first."""
        return list(self._ids)

    def clear(self) -> None:
        self._ids.clear()

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)


def _dedupe(questions: Iterable[AnyQuestion]) -> list[AnyQuestion]:
    seen: set[str] = set()
    unique = []
    for question in questions:
        if question.id not in seen:
            seen.add(question.id)
            unique.append(question)
    return unique


def group_by_mentor(questions: Sequence[AnyQuestion], mentor: MentorId) -> list[list[AnyQuestion]]:
    """Split candidates into mentor match, unspecified and other-mentor groups."""
    matching, unspecified, other = [], [], []
    for question in questions:
        if question.tags.mentor == mentor:
            matching.append(question)
        elif question.tags.mentor is None:
            unspecified.append(question)
        else:
            other.append(question)
    return [matching, unspecified, other]


class QuestionSelector:
    """
    Mastery-aware selector with process-wide anti-repetition.

    One instance per process; the recent cache is shared by every call.
    """

    def __init__(
        self,
        repository: ContentRepository,
        recent: RecentQuestionCache | None = None,
        rng: random.Random | None = None,
    ):
        self.repository = repository
        self.recent = recent or RecentQuestionCache()
        self.rng = rng or random.Random()

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
        """
        Select up to ``count`` questions.

        Args:
            domain: Knowledge domain
            topic_node: Restrict the pool to questions of this topic node
            mastery_percentage: Learner mastery, 0-100
            count: Desired number of questions
            allowed_types: Only these variants
            mentor: Prefer questions voiced by this mentor
            subtopic: Prefer this subtopic while it supplies enough questions

        Returns:
            At most ``count`` questions with distinct ids
        """
        domain = KnowledgeDomain(domain)
        if count <= 0:
            return []

        if topic_node:
            pool = await self.repository.questions_for_topic_node(topic_node, domains=[domain])
        else:
            pool = await self.repository.all_domain_questions(domain)
        pool = _dedupe(pool)

        if allowed_types:
            allowed = {QuestionType(t) for t in allowed_types}
            pool = [q for q in pool if QuestionType(q.type) in allowed]

        if subtopic:
            narrowed = [q for q in pool if q.tags.subtopic == subtopic]
            if len(narrowed) >= count:
                pool = narrowed
            else:
                logger.warning(
                    f"Subtopic {subtopic!r} has {len(narrowed)} of {count} questions in {domain.value}; ignoring it"
                )

        fresh = [q for q in pool if q.id not in self.recent]
        candidates = fresh if len(fresh) >= count else pool

        selected = self.select_from_pool(
            candidates,
            mastery_percentage,
            count,
            mentor=MentorId(mentor) if mentor is not None else None,
        )
        self.recent.extend(q.id for q in selected)

        if len(selected) < count:
            logger.warning(f"Selected {len(selected)} of {count} questions for {domain.value}")
        return selected

    def select_from_pool(
        self,
        candidates: Sequence[AnyQuestion],
        mastery_percentage: float,
        count: int,
        mentor: MentorId | None = None,
    ) -> list[AnyQuestion]:
        """Tier-balanced random pick from an in-memory pool; does not touch the recent cache."""
        targets = tier_targets(count, mastery_percentage)
        logger.debug(
            f"Tier targets for {mastery_percentage:.0f}% mastery: "
            + ", ".join(f"{tier.label}={n}" for tier, n in targets.items())
        )
        groups = group_by_mentor(candidates, mentor) if mentor is not None else [list(candidates)]

        selected: list[AnyQuestion] = []
        for group in groups:
            need = count - len(selected)
            if need <= 0:
                break
            picked = self._pick_from_group(group, targets, need)
            for question in picked:
                targets[question.tier] = max(0, targets[question.tier] - 1)
            selected.extend(picked)
        return selected

    def _pick_from_group(
        self,
        group: list[AnyQuestion],
        targets: dict[DifficultyTier, int],
        need: int,
    ) -> list[AnyQuestion]:
        picked: list[AnyQuestion] = []
        for tier in DifficultyTier:
            tier_pool = [q for q in group if q.tier == tier]
            picked.extend(self.rng.sample(tier_pool, min(targets[tier], len(tier_pool))))
        picked = picked[:need]

        if len(picked) < need:
            chosen = {q.id for q in picked}
            rest = [q for q in group if q.id not in chosen]
            picked.extend(self.rng.sample(rest, min(need - len(picked), len(rest))))
        return picked

    async def select_activity_questions(
        self,
        domain: KnowledgeDomain | str,
        activity_difficulty: ActivityDifficulty | str,
        count: int = 3,
        allowed_types: Iterable[QuestionType | str] | None = None,
        mentor: MentorId | str | None = None,
    ) -> list[AnyQuestion]:
        """Map a coarse activity difficulty to a mastery percentage and select."""
        difficulty = ActivityDifficulty(activity_difficulty)
        base, bias = ACTIVITY_MASTERY.get(difficulty, (DEFAULT_ACTIVITY_MASTERY, 0))
        mastery = max(0.0, min(100.0, base + bias))
        return await self.select_questions(
            domain,
            mastery_percentage=mastery,
            count=count,
            allowed_types=allowed_types,
            mentor=mentor,
        )

    async def select_boast_question(
        self,
        domain: KnowledgeDomain | str,
        topic_node: str,
    ) -> AnyQuestion | None:
        """A random advanced question for the topic node, or None."""
        questions = await self.repository.questions_for_topic_node(topic_node, domains=[KnowledgeDomain(domain)])
        advanced = [q for q in questions if q.tier == DifficultyTier.ADVANCED]
        if not advanced:
            return None
        return self.rng.choice(advanced)

    async def ensure_type_mix(
        self,
        selected: list[AnyQuestion],
        domain: KnowledgeDomain | str,
        min_types: int = 3,
    ) -> list[AnyQuestion]:
        """
        Swap repeated variants for missing ones until ``min_types`` variants appear.

        The list keeps its length; swaps stop when the domain has nothing new.
        """
        result = list(selected)
        if len({q.type for q in result}) >= min_types:
            return result

        pool = _dedupe(await self.repository.all_domain_questions(domain))
        used_ids = {q.id for q in result}
        for index in range(len(result) - 1, -1, -1):
            type_counts = Counter(q.type for q in result)
            if len(type_counts) >= min_types:
                break
            if type_counts[result[index].type] < 2:
                continue
            replacements = [q for q in pool if q.type not in type_counts and q.id not in used_ids]
            if not replacements:
                break
            replacement = self.rng.choice(replacements)
            logger.debug(f"Swapped {result[index].id} for {replacement.id} to add {replacement.type}")
            used_ids.add(replacement.id)
            result[index] = replacement
        return result
