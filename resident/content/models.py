"""
Content models for question collections and banks.

JSON documents use camelCase keys; attributes are snake_case. Every model is
frozen: a loaded collection or bank is never mutated, derived questions are
produced with ``model_copy``.

The question variants form a discriminated union on ``type``:

- multipleChoice: option list with correctness flags and an optional follow-up
- matching: bank reference plus item -> match id pairs
- procedural: bank reference plus the ordered step ids (the correct order)
- calculation: variable ranges, solution steps and an answer formula
- boast: a higher-stakes wrapper around one of the other four
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from resident.core.errors import FormulaError
from resident.core.expression import Formula


# ========================================
# Enumerations
# ========================================


class KnowledgeDomain(str, Enum):
    """Topic domains; each maps to one content directory."""
    DOSIMETRY = "dosimetry"
    LINAC_ANATOMY = "linac_anatomy"
    RADIATION_THERAPY = "radiation_therapy"
    TREATMENT_PLANNING = "treatment_planning"

    @classmethod
    def _missing_(cls, value: object) -> "KnowledgeDomain | None":
        if isinstance(value, str):
            normalized = value.strip().lower().replace("-", "_")
            for member in cls:
                if member.value == normalized:
                    return member
        return None

    @property
    def directory(self) -> str:
        """Directory name under the content root (``linac-anatomy``)."""
        return self.value.replace("_", "-")


class DifficultyTier(IntEnum):
    """Numeric difficulty tier of a question."""
    BEGINNER = 1
    INTERMEDIATE = 2
    ADVANCED = 3

    @property
    def label(self) -> str:
        """Lower-case label, also the collection file stem (``beginner``)."""
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "DifficultyTier":
        return cls[label.strip().upper()]


class MentorId(str, Enum):
    """Mentor personas that voice questions."""
    KAPOOR = "Kapoor"
    GARCIA = "Garcia"
    JESSE = "Jesse"
    QUINN = "Quinn"

    @classmethod
    def _missing_(cls, value: object) -> "MentorId | None":
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        return None


class QuestionType(str, Enum):
    """Question variant tags as they appear in content documents."""
    MULTIPLE_CHOICE = "multipleChoice"
    MATCHING = "matching"
    PROCEDURAL = "procedural"
    CALCULATION = "calculation"
    BOAST = "boast"


def _to_identifier(value: Any) -> Any:
    # Bank match and step ids are numbers in older documents
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value)) if float(value).is_integer() else str(value)
    return value


Identifier = Annotated[str, BeforeValidator(_to_identifier)]


class ContentModel(BaseModel):
    """Base for all content documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# ========================================
# Shared question parts
# ========================================


class QuestionTags(ContentModel):
    """Question metadata used for selection and mastery bookkeeping."""

    domain: KnowledgeDomain
    difficulty: DifficultyTier
    knowledge_node: str = Field(..., min_length=1, description="Topic node the question feeds")
    keywords: tuple[str, ...] = ()
    mentor: MentorId | None = None
    subtopic: str | None = None


class Feedback(ContentModel):
    correct: str = Field(..., min_length=1)
    incorrect: str = Field(..., min_length=1)


class QuestionTemplate(ContentModel):
    """Placeholder-bearing texts voiced per mentor at generation time."""

    prompt: str = Field(..., min_length=1)
    correct_feedback: str = Field(..., min_length=1)
    incorrect_feedback: str = Field(..., min_length=1)


class QuestionBase(ContentModel):
    id: str = Field(..., min_length=1)
    tags: QuestionTags
    feedback: Feedback | None = None
    template: QuestionTemplate | None = None

    @model_validator(mode="after")
    def _require_feedback(self):
        if self.feedback is None and self.template is None:
            raise ValueError(f"Question {self.id} needs feedback or a template")
        return self

    @property
    def tier(self) -> DifficultyTier:
        return self.tags.difficulty

    @property
    def domain(self) -> KnowledgeDomain:
        return self.tags.domain

    @property
    def knowledge_node(self) -> str:
        return self.tags.knowledge_node


class MultipleChoiceOption(ContentModel):
    text: str = Field(..., min_length=1)
    is_correct: bool = False


def _check_options(options: tuple[MultipleChoiceOption, ...], label: str) -> None:
    if len(options) < 2:
        raise ValueError(f"{label} must have at least 2 options")
    if not any(option.is_correct for option in options):
        raise ValueError(f"{label} must have at least one correct option")


class FollowUp(ContentModel):
    question: str = Field(..., min_length=1)
    options: tuple[MultipleChoiceOption, ...]

    @model_validator(mode="after")
    def _check(self):
        _check_options(self.options, "Follow-up")
        return self


# ========================================
# Question variants
# ========================================


class MultipleChoiceQuestion(QuestionBase):
    type: Literal["multipleChoice"] = "multipleChoice"
    question: str = ""
    options: tuple[MultipleChoiceOption, ...]
    follow_up: FollowUp | None = None

    @model_validator(mode="after")
    def _check(self):
        if not self.question and self.template is None:
            raise ValueError(f"Multiple choice question {self.id} missing question text")
        _check_options(self.options, f"Multiple choice question {self.id}")
        return self


class MatchingPair(ContentModel):
    item_id: Identifier
    match_ids: tuple[Identifier, ...] = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _single_match(cls, data: Any) -> Any:
        if isinstance(data, dict):
            for key in ("matchIds", "match_ids"):
                if key in data and not isinstance(data[key], (list, tuple)):
                    data = {**data, key: [data[key]]}
        return data


class MatchingQuestion(QuestionBase):
    type: Literal["matching"] = "matching"
    question: str = ""
    bank_ref: str = Field(..., min_length=1)
    include_items: tuple[MatchingPair, ...] = Field(..., min_length=2)


class ProceduralQuestion(QuestionBase):
    type: Literal["procedural"] = "procedural"
    question: str = ""
    bank_ref: str = Field(..., min_length=1)
    include_steps: tuple[Identifier, ...] = Field(..., min_length=2)


class CalculationVariable(ContentModel):
    """A variable drawn uniformly on its stepped grid."""

    name: str = Field(..., min_length=1)
    minimum: float = Field(..., alias="min")
    maximum: float = Field(..., alias="max")
    step: float | None = Field(default=None, gt=0)
    unit: str = ""

    @model_validator(mode="before")
    @classmethod
    def _legacy_range(cls, data: Any) -> Any:
        if isinstance(data, dict) and "range" in data and "min" not in data:
            low, high = data["range"]
            data = {key: value for key, value in data.items() if key != "range"}
            data.update({"min": low, "max": high})
        return data

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.minimum > self.maximum:
            raise ValueError(f"Variable {self.name} has min greater than max")
        return self


class SolutionStep(ContentModel):
    step: str = Field(..., min_length=1)
    is_formula: bool = False


class CalculationAnswer(ContentModel):
    formula: str = Field(..., min_length=1)
    precision: int = Field(default=2, ge=0, le=10)
    accepted_ranges: tuple[tuple[float, float], ...] = ()

    @model_validator(mode="after")
    def _check_formula(self):
        try:
            Formula(self.formula)
        except FormulaError as e:
            raise ValueError(str(e)) from e
        for low, high in self.accepted_ranges:
            if low > high:
                raise ValueError(f"Accepted range [{low}, {high}] is inverted")
        return self


class CalculationQuestion(QuestionBase):
    type: Literal["calculation"] = "calculation"
    question: str = Field(..., min_length=1)
    variables: tuple[CalculationVariable, ...]
    solution: tuple[SolutionStep, ...] = Field(..., min_length=1)
    answer: CalculationAnswer

    @model_validator(mode="after")
    def _check_references(self):
        declared = {variable.name for variable in self.variables}
        unknown = Formula(self.answer.formula).names - declared
        if unknown:
            raise ValueError(f"Calculation question {self.id} formula uses undeclared {sorted(unknown)}")
        return self


WrappedQuestion = Annotated[
    Union[MultipleChoiceQuestion, MatchingQuestion, ProceduralQuestion, CalculationQuestion],
    Field(discriminator="type"),
]


class BoastQuestion(QuestionBase):
    """High-stakes wrapper; scored like its wrapped question with boast gains."""

    type: Literal["boast"] = "boast"
    wrapped: WrappedQuestion

    @model_validator(mode="before")
    @classmethod
    def _wrap_legacy(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        shared = {key: data[key] for key in ("id", "tags", "feedback", "template") if key in data}
        if "wrapped" not in data:
            # Flat boast documents are shaped like multiple choice
            wrapped = {key: value for key, value in data.items() if key != "type"}
            wrapped["type"] = QuestionType.MULTIPLE_CHOICE.value
            return {**shared, "type": QuestionType.BOAST.value, "wrapped": wrapped}
        wrapped = data["wrapped"]
        if isinstance(wrapped, dict):
            data = {**data, "wrapped": {**shared, **wrapped}}
        return data


Question = Annotated[
    Union[MultipleChoiceQuestion, MatchingQuestion, ProceduralQuestion, CalculationQuestion, BoastQuestion],
    Field(discriminator="type"),
]

AnyQuestion = Union[MultipleChoiceQuestion, MatchingQuestion, ProceduralQuestion, CalculationQuestion, BoastQuestion]


def underlying(question: AnyQuestion) -> AnyQuestion:
    """The question that carries the scored payload (unwraps boasts)."""
    return question.wrapped if isinstance(question, BoastQuestion) else question


# ========================================
# Collections
# ========================================


class CollectionMetadata(ContentModel):
    domain: str | None = None
    difficulty: str | None = None
    stars: tuple[str, ...] = ()
    contributors: tuple[str, ...] = ()
    last_updated: str | None = None


class QuestionCollection(ContentModel):
    """One document per (domain, tier)."""

    metadata: CollectionMetadata
    questions: tuple[Question, ...] = ()

    def covers_node(self, node_id: str) -> bool:
        return node_id in self.metadata.stars


# ========================================
# Banks
# ========================================


class MatchingItem(ContentModel):
    item_id: Identifier
    item_text: str


class MatchingOption(ContentModel):
    match_id: Identifier
    match_text: str


class MatchingBank(ContentModel):
    bank_id: str = Field(..., min_length=1)
    title: str | None = None
    items: tuple[MatchingItem, ...] = Field(..., min_length=1)
    matches: tuple[MatchingOption, ...] = Field(..., min_length=1)
    relationships: dict[Identifier, tuple[Identifier, ...]] = Field(..., min_length=1)

    def item(self, item_id: str) -> MatchingItem | None:
        return next((item for item in self.items if item.item_id == str(item_id)), None)

    def match(self, match_id: str) -> MatchingOption | None:
        return next((match for match in self.matches if match.match_id == str(match_id)), None)


class ProceduralStep(ContentModel):
    step_id: Identifier
    step_text: str
    explanation: str = ""


class ProceduralBank(ContentModel):
    bank_id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    description: str = ""
    steps: tuple[ProceduralStep, ...] = Field(..., min_length=2)

    def step(self, step_id: str) -> ProceduralStep | None:
        return next((step for step in self.steps if step.step_id == str(step_id)), None)


class BankSet(ContentModel):
    """One document per domain."""

    matching_banks: tuple[MatchingBank, ...] = ()
    procedural_banks: tuple[ProceduralBank, ...] = ()
