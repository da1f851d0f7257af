"""
Unit tests for question and bank content models.

Run: pytest tests/unit/test_content_models.py -v
"""

import pytest
from pydantic import TypeAdapter, ValidationError

from resident.content.models import (
    BankSet,
    BoastQuestion,
    CalculationQuestion,
    DifficultyTier,
    KnowledgeDomain,
    MentorId,
    MultipleChoiceQuestion,
    Question,
    QuestionCollection,
    underlying,
)

QUESTION = TypeAdapter(Question)


def _tags(**overrides):
    data = {"domain": "dosimetry", "difficulty": 1, "knowledgeNode": "node-a"}
    data.update(overrides)
    return data


def _mc(**overrides):
    data = {
        "id": "q1",
        "type": "multipleChoice",
        "tags": _tags(),
        "question": "Which?",
        "options": [{"text": "A", "isCorrect": True}, {"text": "B"}],
        "feedback": {"correct": "Yes", "incorrect": "No"},
    }
    data.update(overrides)
    return data


class TestEnums:
    """Test enum normalization."""

    def test_domain_accepts_directory_names(self):
        assert KnowledgeDomain("linac-anatomy") is KnowledgeDomain.LINAC_ANATOMY
        assert KnowledgeDomain("DOSIMETRY") is KnowledgeDomain.DOSIMETRY

    def test_domain_directory(self):
        assert KnowledgeDomain.TREATMENT_PLANNING.directory == "treatment-planning"

    def test_mentor_is_case_insensitive(self):
        assert MentorId("kapoor") is MentorId.KAPOOR

    def test_tier_labels(self):
        assert DifficultyTier.ADVANCED.label == "advanced"
        assert DifficultyTier.from_label("Intermediate") is DifficultyTier.INTERMEDIATE


class TestQuestionValidation:
    """Test the question union and per-variant invariants."""

    def test_multiple_choice_parses(self):
        question = QUESTION.validate_python(_mc())
        assert isinstance(question, MultipleChoiceQuestion)
        assert question.tier is DifficultyTier.BEGINNER
        assert question.knowledge_node == "node-a"

    def test_feedback_or_template_required(self):
        data = _mc()
        del data["feedback"]
        with pytest.raises(ValidationError, match="needs feedback or a template"):
            QUESTION.validate_python(data)

    def test_template_alone_is_enough(self):
        data = _mc(question="")
        del data["feedback"]
        data["template"] = {
            "prompt": "{mentorIntro} Which?",
            "correctFeedback": "{mentorFeedback}",
            "incorrectFeedback": "{mentorFeedback}",
        }
        assert QUESTION.validate_python(data).template is not None

    def test_multiple_choice_needs_a_correct_option(self):
        with pytest.raises(ValidationError, match="at least one correct"):
            QUESTION.validate_python(_mc(options=[{"text": "A"}, {"text": "B"}]))

    def test_multiple_choice_needs_two_options(self):
        with pytest.raises(ValidationError, match="at least 2 options"):
            QUESTION.validate_python(_mc(options=[{"text": "A", "isCorrect": True}]))

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            QUESTION.validate_python(_mc(type="essay"))

    def test_difficulty_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            QUESTION.validate_python(_mc(tags=_tags(difficulty=4)))

    def test_matching_single_match_id_is_wrapped(self):
        question = QUESTION.validate_python({
            "id": "m1",
            "type": "matching",
            "tags": _tags(),
            "bankRef": "bank",
            "includeItems": [{"itemId": 1, "matchIds": 2}, {"itemId": "x", "matchIds": ["y"]}],
            "feedback": {"correct": "Yes", "incorrect": "No"},
        })
        assert question.include_items[0].item_id == "1"
        assert question.include_items[0].match_ids == ("2",)

    def test_procedural_numeric_steps_become_strings(self):
        question = QUESTION.validate_python({
            "id": "p1",
            "type": "procedural",
            "tags": _tags(),
            "bankRef": "bank",
            "includeSteps": [1, 2, 3],
            "feedback": {"correct": "Yes", "incorrect": "No"},
        })
        assert question.include_steps == ("1", "2", "3")


class TestCalculationValidation:
    """Test calculation question invariants."""

    def _calc(self, **overrides):
        data = {
            "id": "c1",
            "type": "calculation",
            "tags": _tags(),
            "question": "{a} times {b}?",
            "variables": [{"name": "a", "min": 1, "max": 2}, {"name": "b", "range": [3, 4], "step": 0.5}],
            "solution": [{"step": "{a} × {b}", "isFormula": True}],
            "answer": {"formula": "a*b"},
            "feedback": {"correct": "Yes", "incorrect": "No"},
        }
        data.update(overrides)
        return data

    def test_legacy_range_becomes_bounds(self):
        question = QUESTION.validate_python(self._calc())
        assert isinstance(question, CalculationQuestion)
        assert (question.variables[1].minimum, question.variables[1].maximum) == (3, 4)
        assert question.answer.precision == 2

    def test_undeclared_formula_variable_rejected(self):
        with pytest.raises(ValidationError, match="undeclared"):
            QUESTION.validate_python(self._calc(answer={"formula": "a*c"}))

    def test_unparsable_formula_rejected(self):
        with pytest.raises(ValidationError):
            QUESTION.validate_python(self._calc(answer={"formula": "a*"}))

    def test_inverted_bounds_rejected(self):
        with pytest.raises(ValidationError, match="min greater than max"):
            QUESTION.validate_python(self._calc(variables=[{"name": "a", "min": 5, "max": 1}, {"name": "b", "min": 0, "max": 1}]))


class TestBoastValidation:
    """Test boast wrapping."""

    def test_legacy_flat_boast_is_wrapped(self):
        question = QUESTION.validate_python(_mc(type="boast", id="b1"))
        assert isinstance(question, BoastQuestion)
        assert isinstance(question.wrapped, MultipleChoiceQuestion)
        assert question.wrapped.id == "b1"
        assert underlying(question) is question.wrapped

    def test_wrapped_inherits_shared_fields(self):
        question = QUESTION.validate_python({
            "id": "b2",
            "type": "boast",
            "tags": _tags(difficulty=3),
            "feedback": {"correct": "Yes", "incorrect": "No"},
            "wrapped": {"type": "procedural", "bankRef": "bank", "includeSteps": ["a", "b"]},
        })
        assert question.wrapped.tags.difficulty is DifficultyTier.ADVANCED
        assert question.wrapped.id == "b2"


class TestCollections:
    """Test collection and bank documents."""

    def test_collection_covers_node(self):
        collection = QuestionCollection.model_validate({"metadata": {"stars": ["node-a"]}, "questions": [_mc()]})
        assert collection.covers_node("node-a")
        assert not collection.covers_node("node-z")

    def test_bank_lookup(self):
        banks = BankSet.model_validate({
            "matchingBanks": [{
                "bankId": "m",
                "items": [{"itemId": 1, "itemText": "One"}],
                "matches": [{"matchId": "a", "matchText": "A"}],
                "relationships": {"1": ["a"]},
            }],
            "proceduralBanks": [{
                "bankId": "p",
                "title": "Steps",
                "steps": [{"stepId": 1, "stepText": "First"}, {"stepId": 2, "stepText": "Second"}],
            }],
        })
        assert banks.matching_banks[0].item("1").item_text == "One"
        assert banks.matching_banks[0].match("missing") is None
        assert banks.procedural_banks[0].step(2).step_text == "Second"

    def test_procedural_bank_needs_two_steps(self):
        with pytest.raises(ValidationError):
            BankSet.model_validate({
                "proceduralBanks": [{"bankId": "p", "title": "T", "steps": [{"stepId": 1, "stepText": "Only"}]}],
            })
