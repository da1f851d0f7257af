"""
Unit tests for QuestionGenerator.

Run: pytest tests/unit/test_generator.py -v
"""

import pytest
from pydantic import TypeAdapter

from resident.content.models import DifficultyTier, KnowledgeDomain, MentorId, Question
from resident.core.errors import UnknownMentorError
from resident.mentors.profiles import MENTOR_PROFILES

QUESTION = TypeAdapter(Question)
KAPOOR = MENTOR_PROFILES[MentorId.KAPOOR].patterns


def _templated(make_mc, **template):
    data = make_mc("templated", mentor="Kapoor")
    data["template"] = {
        "prompt": "{mentorName} asks: {mentorInquiry}",
        "correctFeedback": "{mentorFeedback}",
        "incorrectFeedback": "{mentorFeedback}",
        **template,
    }
    return QUESTION.validate_python(data)


def _procedural(steps):
    return QUESTION.validate_python({
        "id": "proc-x",
        "type": "procedural",
        "tags": {"domain": "dosimetry", "difficulty": 1, "knowledgeNode": "node-b"},
        "bankRef": "bank-p",
        "includeSteps": list(steps),
        "feedback": {"correct": "Yes", "incorrect": "No"},
    })


class TestResolveMentor:
    """Test mentor resolution order."""

    def test_explicit_mentor_wins(self, generator, make_mc):
        question = QUESTION.validate_python(make_mc("q", mentor="Kapoor"))
        assert generator.resolve_mentor(question, "garcia") is MentorId.GARCIA

    def test_question_mentor(self, generator, make_mc):
        question = QUESTION.validate_python(make_mc("q", mentor="Jesse"))
        assert generator.resolve_mentor(question) is MentorId.JESSE

    def test_best_fit_when_untagged(self, generator, voice, make_mc):
        question = QUESTION.validate_python(make_mc("q"))
        expected = voice.find_best_mentor(KnowledgeDomain.DOSIMETRY, DifficultyTier.BEGINNER)
        assert generator.resolve_mentor(question) is expected

    def test_unknown_explicit_mentor(self, generator, make_mc):
        question = QUESTION.validate_python(make_mc("q"))
        with pytest.raises(UnknownMentorError):
            generator.resolve_mentor(question, "Nobody")


class TestGenerate:
    """Test voiced generation."""

    @pytest.mark.asyncio
    async def test_fixed_text_without_template(self, generator, make_mc):
        instance = await generator.generate(QUESTION.validate_python(make_mc("plain", mentor="Garcia")))

        assert instance.prompt == "Question plain?"
        assert instance.correct_feedback == "Well done."
        assert instance.incorrect_feedback == "Not this time."
        assert instance.mentor is MentorId.GARCIA

    @pytest.mark.asyncio
    async def test_template_is_voiced(self, generator, make_mc):
        instance = await generator.generate(_templated(make_mc))

        assert instance.prompt.startswith("Dr. Kapoor asks: ")
        assert "{" not in instance.prompt
        assert instance.correct_feedback in KAPOOR.correct_feedback
        assert instance.incorrect_feedback in KAPOOR.incorrect_feedback

    @pytest.mark.asyncio
    async def test_template_takes_precedence_over_feedback(self, generator, make_mc):
        instance = await generator.generate(_templated(make_mc, correctFeedback="Templated {mentorName}."))
        assert instance.correct_feedback == "Templated Dr. Kapoor."

    @pytest.mark.asyncio
    async def test_calculation_values_reach_template(self, generator, repository):
        questions = await repository.all_domain_questions("dosimetry")
        calc = next(q for q in questions if q.id == "calc-1")
        data = calc.model_dump(by_alias=True)
        data["template"] = {
            "prompt": "{mentorName}: {a} for {t}",
            "correctFeedback": "{mentorFeedback}",
            "incorrectFeedback": "{mentorFeedback}",
        }
        instance = await generator.generate(QUESTION.validate_python(data), "Kapoor", values={"a": 10, "dist": 100, "t": 2})
        assert instance.prompt == "Dr. Kapoor: 10 cGy for 2 min"

    @pytest.mark.asyncio
    async def test_instance_carries_source_fields(self, generator, repository):
        questions = await repository.all_domain_questions("dosimetry")
        instance = await generator.generate(next(q for q in questions if q.id == "calc-1"))

        assert instance.id == "calc-1"
        assert instance.tier is DifficultyTier.INTERMEDIATE
        assert instance.knowledge_node == "node-b"
        assert not instance.is_boast


class TestAdjustForMastery:
    """Test procedural step trimming."""

    def test_low_mastery_keeps_sixty_to_eighty_percent(self, generator):
        question = _procedural(["s1", "s2", "s3", "s4", "s5"])
        for _ in range(20):
            adjusted = generator.adjust_for_mastery(question, 10)
            assert 3 <= len(adjusted.include_steps) <= 4
            # Order preserved
            assert list(adjusted.include_steps) == sorted(adjusted.include_steps)

    def test_medium_mastery_keeps_at_least_three(self, generator):
        question = _procedural(["s1", "s2", "s3", "s4", "s5"])
        adjusted = generator.adjust_for_mastery(question, 50)
        assert len(adjusted.include_steps) == 4
        assert set(adjusted.include_steps) <= set(question.include_steps)

    def test_high_mastery_unchanged(self, generator):
        question = _procedural(["s1", "s2", "s3", "s4", "s5"])
        assert generator.adjust_for_mastery(question, 70) is question

    def test_short_procedure_not_trimmed_below_minimum(self, generator):
        question = _procedural(["s1", "s2"])
        assert generator.adjust_for_mastery(question, 0).include_steps == ("s1", "s2")

    def test_original_is_not_mutated(self, generator):
        question = _procedural(["s1", "s2", "s3", "s4", "s5"])
        generator.adjust_for_mastery(question, 10)
        assert len(question.include_steps) == 5

    def test_other_variants_unchanged(self, generator, make_mc):
        question = QUESTION.validate_python(make_mc("q"))
        assert generator.adjust_for_mastery(question, 0) is question

    def test_boast_wrapping_procedural_is_trimmed(self, generator):
        boast = QUESTION.validate_python({
            "id": "boast-p",
            "type": "boast",
            "tags": {"domain": "dosimetry", "difficulty": 3, "knowledgeNode": "node-b"},
            "feedback": {"correct": "Yes", "incorrect": "No"},
            "wrapped": {"type": "procedural", "bankRef": "bank-p", "includeSteps": ["s1", "s2", "s3", "s4", "s5", "s6"]},
        })
        adjusted = generator.adjust_for_mastery(boast, 50)
        assert adjusted.id == "boast-p"
        assert len(adjusted.wrapped.include_steps) < 6
