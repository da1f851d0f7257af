"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
Content fixtures build a small dosimetry library in memory:

- beginner: 4 multiple choice (node-a), 1 matching (node-a), 1 procedural (node-b)
- intermediate: 3 multiple choice (node-a), 1 calculation (node-b)
- advanced: 2 multiple choice (node-a), 1 legacy boast (node-a)
"""
import random
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from resident.adaptive.selector import QuestionSelector
from resident.challenge.manager import ChallengeManager
from resident.content.repository import ContentRepository
from resident.content.store import InMemoryContentStore
from resident.core.mastery import InMemoryMasteryStore, MasteryIntegrator
from resident.mentors.voice import MentorVoiceService
from resident.questions.evaluator import AnswerEvaluator
from resident.questions.generator import QuestionGenerator

PROJECT_ROOT = Path(__file__).parent.parent

SEED = 1234


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (packaged content on disk)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")
    config.addinivalue_line("markers", "slow: Slow tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


# ========================================
# Document builders
# ========================================


def tags(node="node-a", tier=1, domain="dosimetry", mentor=None, subtopic=None, keywords=()):
    data = {
        "domain": domain,
        "difficulty": tier,
        "knowledgeNode": node,
        "keywords": list(keywords),
    }
    if mentor:
        data["mentor"] = mentor
    if subtopic:
        data["subtopic"] = subtopic
    return data


def feedback(correct="Well done.", incorrect="Not this time."):
    return {"correct": correct, "incorrect": incorrect}


def mc_document(qid, tier=1, node="node-a", mentor=None, subtopic=None, correct_index=0, domain="dosimetry"):
    return {
        "id": qid,
        "type": "multipleChoice",
        "tags": tags(node, tier, domain, mentor, subtopic),
        "question": f"Question {qid}?",
        "options": [
            {"text": f"Option {i}", "isCorrect": i == correct_index}
            for i in range(3)
        ],
        "feedback": feedback(),
    }


def matching_document(qid="match-1", tier=1, node="node-a", bank_ref="bank-m"):
    return {
        "id": qid,
        "type": "matching",
        "tags": tags(node, tier),
        "bankRef": bank_ref,
        "includeItems": [
            {"itemId": "i1", "matchIds": ["m1"]},
            {"itemId": "i2", "matchIds": ["m2"]},
            {"itemId": "i3", "matchIds": ["m3", "m4"]},
        ],
        "feedback": feedback(),
    }


def procedural_document(qid="proc-1", tier=1, node="node-b", bank_ref="bank-p", steps=("s1", "s2", "s3", "s4", "s5")):
    return {
        "id": qid,
        "type": "procedural",
        "tags": tags(node, tier),
        "bankRef": bank_ref,
        "includeSteps": list(steps),
        "feedback": feedback(),
    }


def calculation_document(qid="calc-1", tier=2, node="node-b"):
    return {
        "id": qid,
        "type": "calculation",
        "tags": tags(node, tier),
        "question": "Rate {a} at {dist} for {t}: what dose?",
        "variables": [
            {"name": "a", "min": 5, "max": 15, "step": 1, "unit": "cGy"},
            {"name": "dist", "min": 80, "max": 120, "step": 10, "unit": "cm"},
            {"name": "t", "min": 1, "max": 3, "step": 1, "unit": "min"},
        ],
        "solution": [
            {"step": "Apply the inverse square law.", "isFormula": False},
            {"step": "{a} × 2.5 × (100/{dist})² × {t}", "isFormula": True},
        ],
        "answer": {"formula": "a*2.5*(100/dist)^2*t", "precision": 2},
        "feedback": feedback(),
    }


def boast_document(qid="boast-1", tier=3, node="node-a"):
    # Legacy flat shape
    return {
        "id": qid,
        "type": "boast",
        "tags": tags(node, tier, mentor="Kapoor"),
        "question": "Prove it: which option is right?",
        "options": [
            {"text": "Right", "isCorrect": True},
            {"text": "Wrong", "isCorrect": False},
        ],
        "feedback": feedback("Boast earned.", "Boast lost."),
    }


def collection_document(questions, stars=("node-a", "node-b")):
    return {"metadata": {"stars": list(stars)}, "questions": list(questions)}


def banks_document():
    return {
        "matchingBanks": [
            {
                "bankId": "bank-m",
                "title": "Quantities",
                "items": [
                    {"itemId": "i1", "itemText": "Item one"},
                    {"itemId": "i2", "itemText": "Item two"},
                    {"itemId": "i3", "itemText": "Item three"},
                ],
                "matches": [
                    {"matchId": "m1", "matchText": "Match one"},
                    {"matchId": "m2", "matchText": "Match two"},
                    {"matchId": "m3", "matchText": "Match three"},
                    {"matchId": "m4", "matchText": "Match four"},
                    {"matchId": "m5", "matchText": "Unused"},
                ],
                "relationships": {"i1": ["m1"], "i2": ["m2"], "i3": ["m3", "m4"]},
            }
        ],
        "proceduralBanks": [
            {
                "bankId": "bank-p",
                "title": "Chamber setup",
                "steps": [
                    {"stepId": f"s{i}", "stepText": f"Step {i}"}
                    for i in range(1, 7)
                ],
            }
        ],
    }


def sample_library():
    return {
        "dosimetry/beginner.json": collection_document([
            mc_document("mc-b1", mentor="Kapoor"),
            mc_document("mc-b2", mentor="Garcia"),
            mc_document("mc-b3"),
            mc_document("mc-b4", subtopic="units"),
            matching_document(),
            procedural_document(),
        ]),
        "dosimetry/intermediate.json": collection_document([
            mc_document("mc-i1", tier=2, mentor="Kapoor"),
            mc_document("mc-i2", tier=2),
            mc_document("mc-i3", tier=2, subtopic="units"),
            calculation_document(),
        ]),
        "dosimetry/advanced.json": collection_document(
            [
                mc_document("mc-a1", tier=3),
                mc_document("mc-a2", tier=3, mentor="Jesse"),
                boast_document(),
            ],
            stars=("node-a",),
        ),
        "dosimetry/banks.json": banks_document(),
    }


# ========================================
# Fixtures
# ========================================


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def rng():
    return random.Random(SEED)


@pytest.fixture
def documents():
    """The in-memory dosimetry library as raw documents."""
    return sample_library()


@pytest.fixture
def content_store(documents):
    return InMemoryContentStore(documents)


@pytest.fixture
def repository(content_store):
    return ContentRepository(content_store)


@pytest.fixture
def voice(rng):
    return MentorVoiceService(rng=rng, strict=False)


@pytest.fixture
def generator(repository, voice, rng):
    return QuestionGenerator(repository, voice, rng=rng)


@pytest.fixture
def evaluator(rng):
    return AnswerEvaluator(rng=rng)


@pytest.fixture
def selector(repository, rng):
    return QuestionSelector(repository, rng=rng)


@pytest.fixture
def mastery_store():
    return InMemoryMasteryStore()


@pytest.fixture
def integrator(mastery_store):
    return MasteryIntegrator(mastery_store)


@pytest.fixture
def clock():
    """Deterministic clock advancing ten seconds per call."""
    start = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)
    ticks = iter(range(10_000))
    return lambda: start + timedelta(seconds=10 * next(ticks))


@pytest.fixture
def manager(selector, generator, evaluator, integrator, rng, clock):
    return ChallengeManager(
        selector,
        generator,
        evaluator,
        integrator,
        rng=rng,
        clock=clock,
        default_mastery_percentage=50,
    )


@pytest.fixture
def make_mc():
    """Factory for multiple choice documents."""
    return mc_document


@pytest.fixture
def make_collection():
    """Factory for collection documents."""
    return collection_document
