"""
Answer evaluator.

Dispatches on the question variant, attaches the voiced feedback and the
bounded mastery gain. Evaluation never raises: any internal failure is
reported as an incorrect answer with zero gain and a generic message.
"""

from __future__ import annotations

import random
from typing import Any

from loguru import logger

from . import get_handler
from .base import GENERIC_FAILURE_FEEDBACK, EvaluationResult, GeneratedQuestion, compute_mastery_gain


class AnswerEvaluator:
    """Scores answers against generated questions."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def evaluate_question(self, instance: GeneratedQuestion, answer: Any) -> EvaluationResult:
        """
        Evaluate an answer.

        Args:
            instance: Generated question being answered
            answer: Option index, item->match mapping, step sequence or number

        Returns:
            EvaluationResult; boasts draw their gain from the boast range
        """
        try:
            handler = get_handler(instance.scored.type)
            outcome = handler.check(instance, answer)
        except Exception as e:
            logger.error(f"Evaluation of question {instance.id} failed: {e}")
            return EvaluationResult(
                correct=False,
                mastery_gain=0.0,
                feedback=GENERIC_FAILURE_FEEDBACK,
                error=str(e),
            )

        gain = compute_mastery_gain(instance.type, instance.tier, outcome.correct, self.rng)
        return EvaluationResult(
            correct=outcome.correct,
            mastery_gain=gain,
            feedback=instance.correct_feedback if outcome.correct else instance.incorrect_feedback,
            correct_matches=outcome.correct_matches,
            total_matches=outcome.total_matches,
        )
