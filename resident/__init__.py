"""
Resident - adaptive quiz content core for the residency learning game.

Selects, instantiates, voices and scores quiz questions keyed to a learner's
topic mastery, and sequences them into challenge sessions.
"""

__version__ = "0.3.0"
