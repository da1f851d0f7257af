"""
Mentor personas and the voice templating service.
"""

from .profiles import MENTOR_PROFILES, MentorVoiceProfile, VoicePatterns
from .voice import MentorVoiceService, Placeholder, VoiceContext

__all__ = [
    "MENTOR_PROFILES",
    "MentorVoiceProfile",
    "MentorVoiceService",
    "Placeholder",
    "VoiceContext",
    "VoicePatterns",
]
