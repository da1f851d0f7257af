"""
Unit tests for AnswerEvaluator and the mastery gain tables.

Run: pytest tests/unit/test_evaluator.py -v
"""

import dataclasses
import random

import pytest

from resident.content.models import DifficultyTier, QuestionType
from resident.questions.base import (
    GENERIC_FAILURE_FEEDBACK,
    CalculationPayload,
    compute_mastery_gain,
    mastery_gain_range,
)


async def _generate(repository, generator, question_id, **kwargs):
    questions = await repository.all_domain_questions("dosimetry")
    return await generator.generate(next(q for q in questions if q.id == question_id), **kwargs)


class TestGainTables:
    """Test gain ranges and the tier multiplier."""

    @pytest.mark.parametrize(
        "question_type,tier,expected",
        [
            (QuestionType.MULTIPLE_CHOICE, DifficultyTier.BEGINNER, (0.8, 3.2)),
            (QuestionType.MATCHING, DifficultyTier.INTERMEDIATE, (2.0, 5.0)),
            (QuestionType.PROCEDURAL, DifficultyTier.ADVANCED, (4.5, 9.0)),
            (QuestionType.CALCULATION, DifficultyTier.INTERMEDIATE, (5.0, 8.0)),
            (QuestionType.BOAST, DifficultyTier.ADVANCED, (12.0, 18.0)),
        ],
    )
    def test_mastery_gain_range(self, question_type, tier, expected):
        assert mastery_gain_range(question_type, tier) == pytest.approx(expected)

    def test_incorrect_gains_nothing(self):
        assert compute_mastery_gain("calculation", 3, False) == 0.0

    def test_gain_rounded_to_one_decimal(self):
        rng = random.Random(5)
        for _ in range(50):
            gain = compute_mastery_gain("matching", 1, True, rng)
            assert gain == round(gain, 1)
            assert 1.6 <= gain <= 4.0


class TestEvaluateQuestion:
    """Test evaluate_question per variant."""

    @pytest.mark.asyncio
    async def test_correct_multiple_choice(self, repository, generator, evaluator):
        instance = await _generate(repository, generator, "mc-b1")
        result = evaluator.evaluate_question(instance, 0)

        assert result.correct
        assert 0.8 <= result.mastery_gain <= 3.2
        assert result.feedback == "Well done."
        assert result.error is None

    @pytest.mark.asyncio
    async def test_incorrect_multiple_choice(self, repository, generator, evaluator):
        instance = await _generate(repository, generator, "mc-b1")
        result = evaluator.evaluate_question(instance, 2)

        assert not result.correct
        assert result.mastery_gain == 0.0
        assert result.feedback == "Not this time."

    @pytest.mark.asyncio
    async def test_matching_reports_counts(self, repository, generator, evaluator):
        instance = await _generate(repository, generator, "match-1")
        result = evaluator.evaluate_question(instance, {"i1": "m1", "i2": "m2"})

        assert not result.correct
        assert (result.correct_matches, result.total_matches) == (2, 3)
        assert result.mastery_gain == 0.0

    @pytest.mark.asyncio
    async def test_calculation_gain_uses_tier(self, repository, generator, evaluator):
        instance = await _generate(repository, generator, "calc-1", values={"a": 10, "dist": 100, "t": 2})
        result = evaluator.evaluate_question(instance, 50)

        assert result.correct
        assert 5.0 <= result.mastery_gain <= 8.0

    @pytest.mark.asyncio
    async def test_boast_uses_boast_range(self, repository, generator, evaluator):
        instance = await _generate(repository, generator, "boast-1")
        result = evaluator.evaluate_question(instance, 0)

        assert result.correct
        assert 12.0 <= result.mastery_gain <= 18.0
        assert result.feedback == "Boast earned."

    @pytest.mark.asyncio
    async def test_boast_loss(self, repository, generator, evaluator):
        instance = await _generate(repository, generator, "boast-1")
        result = evaluator.evaluate_question(instance, 1)

        assert not result.correct
        assert result.mastery_gain == 0.0
        assert result.feedback == "Boast lost."


class TestEvaluationFailure:
    """Test that internal failures become a generic incorrect result."""

    @pytest.mark.asyncio
    async def test_mismatched_payload(self, repository, generator, evaluator):
        instance = await _generate(repository, generator, "mc-b1")
        broken = dataclasses.replace(
            instance,
            payload=CalculationPayload(values={}, solution=(), answer=0.0, precision=2),
        )
        result = evaluator.evaluate_question(broken, 0)

        assert not result.correct
        assert result.mastery_gain == 0.0
        assert result.feedback == GENERIC_FAILURE_FEEDBACK
        assert result.error
