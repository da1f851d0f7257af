"""
Multi-question challenge sessions.
"""

from .manager import ChallengeManager
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

__all__ = [
    "AnswerOutcome",
    "AnswerRecord",
    "ChallengeConfig",
    "ChallengeDifficulty",
    "ChallengeManager",
    "ChallengeSession",
    "ChallengeStatus",
    "ChallengeSummary",
    "ChallengeType",
]
