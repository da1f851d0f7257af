"""
Adaptive selection of questions by mastery, mentor and variant.
"""

from .selector import (
    ActivityDifficulty,
    DIFFICULTY_DISTRIBUTION,
    MasteryBand,
    QuestionSelector,
    RecentQuestionCache,
    tier_targets,
)

__all__ = [
    "ActivityDifficulty",
    "DIFFICULTY_DISTRIBUTION",
    "MasteryBand",
    "QuestionSelector",
    "RecentQuestionCache",
    "tier_targets",
]
