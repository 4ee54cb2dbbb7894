"""Pydantic models for quiz data structures."""

import base64
import random
import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class QuestionType(str, Enum):
    """Kinds of question the generator may produce."""

    MULTIPLE_CHOICE = "multiple_choice"
    TRUE_FALSE = "true_false"
    FILL_IN_BLANK = "fill_in_blank"
    SHORT_ANSWER = "short_answer"
    MATCHING = "matching"
    SEQUENCING = "sequencing"


class QuizDifficulty(str, Enum):
    """Quiz difficulty levels."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


# Payload field required by each kind; kinds not listed carry no payload.
PAYLOAD_FIELDS: dict[QuestionType, str] = {
    QuestionType.MULTIPLE_CHOICE: "options",
    QuestionType.MATCHING: "matching_pairs",
    QuestionType.SEQUENCING: "sequencing_items",
}

MIN_PAYLOAD_ITEMS = 2


class UploadedDocument(BaseModel):
    """A lesson document encoded for transport to the generation backend."""

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Identifier, unique within a session",
    )
    name: str = Field(..., min_length=1, description="Display name")
    base64: str = Field(..., description="Base64-encoded file content")
    mime_type: str = Field(
        default="application/octet-stream",
        description="Content-type tag of the original file",
    )

    model_config = {"frozen": True}

    def decoded(self) -> bytes:
        """Return the raw file content."""
        return base64.b64decode(self.base64)

    @property
    def is_text(self) -> bool:
        """Whether the content can be inlined into a prompt as plain text."""
        return self.mime_type.startswith("text/") or self.mime_type in {
            "application/json",
            "application/xml",
        }


class QuizConfiguration(BaseModel):
    """Everything the upload step collects before a quiz is generated.

    Range checks (at least one document, at least one question, a non-empty
    type selection when auto-detect is off) are made by the generation
    orchestrator so they surface as a generation failure.
    """

    documents: list[UploadedDocument] = Field(default_factory=list)
    num_questions: int = Field(default=5, description="Requested question count")
    selected_types: list[QuestionType] = Field(
        default_factory=lambda: [QuestionType.MULTIPLE_CHOICE],
        description="Allowed question kinds",
    )
    auto_detect: bool = Field(
        default=False,
        description="Let the generator choose kinds instead of selected_types",
    )
    difficulty: QuizDifficulty = Field(default=QuizDifficulty.MEDIUM)
    custom_instructions: Optional[str] = Field(
        None, description="Free-text instructions passed to the generator"
    )
    time_limit: int = Field(
        default=0, ge=0, description="Time limit in seconds, 0 means unlimited"
    )

    @field_validator("selected_types")
    @classmethod
    def dedupe_types(cls, v: list[QuestionType]) -> list[QuestionType]:
        """Keep the first occurrence of each kind, in order."""
        return list(dict.fromkeys(v))

    @field_validator("custom_instructions")
    @classmethod
    def blank_instructions_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v.strip()


class MatchingPair(BaseModel):
    """One left/right pair of a matching question."""

    left: str
    right: str


def payload_problems(
    question_type: QuestionType,
    options: Optional[list[str]],
    matching_pairs: Optional[list[MatchingPair]],
    sequencing_items: Optional[list[str]],
) -> list[str]:
    """
    List every way a question's payload disagrees with its kind.

    Args:
        question_type: Kind tag of the question
        options: Multiple-choice options, if any
        matching_pairs: Matching pairs, if any
        sequencing_items: Sequencing items, if any

    Returns:
        Human readable problems, empty when the payload is consistent
    """
    present = {
        "options": options,
        "matching_pairs": matching_pairs,
        "sequencing_items": sequencing_items,
    }
    required = PAYLOAD_FIELDS.get(question_type)
    problems = []

    for field_name, value in present.items():
        if field_name == required:
            if not value:
                problems.append(f"{question_type.value} question is missing {field_name}")
            elif len(value) < MIN_PAYLOAD_ITEMS:
                problems.append(
                    f"{question_type.value} question needs at least "
                    f"{MIN_PAYLOAD_ITEMS} {field_name}"
                )
        elif value:
            problems.append(f"{question_type.value} question must not carry {field_name}")

    return problems


class PublicQuestion(BaseModel):
    """A question as shown during the quiz, with answer-bearing fields removed."""

    id: int
    question_type: QuestionType
    question_text: str
    options: Optional[list[str]] = None
    matching_left: Optional[list[str]] = None
    matching_right: Optional[list[str]] = None
    sequencing_items: Optional[list[str]] = None

    model_config = {"frozen": True}


class Question(BaseModel):
    """A single generated quiz question."""

    id: int = Field(..., ge=0, description="Identifier, unique within a quiz")
    question_type: QuestionType = Field(..., description="Kind of question")
    question_text: str = Field(..., min_length=1, description="The prompt text")
    options: Optional[list[str]] = Field(
        None, description="Choices for multiple-choice questions"
    )
    matching_pairs: Optional[list[MatchingPair]] = Field(
        None, description="Left/right pairs for matching questions"
    )
    sequencing_items: Optional[list[str]] = Field(
        None, description="Items in the correct order for sequencing questions"
    )
    correct_answer: Optional[str] = Field(
        None, description="Canonical answer, hidden from the quiz taker"
    )

    @field_validator("options", "matching_pairs", "sequencing_items", mode="before")
    @classmethod
    def empty_payload_to_none(cls, v):
        if v is not None and len(v) == 0:
            return None
        return v

    @model_validator(mode="after")
    def validate_payload(self) -> "Question":
        """Ensure the payload fields are exactly those required by the kind."""
        problems = payload_problems(
            self.question_type,
            self.options,
            self.matching_pairs,
            self.sequencing_items,
        )
        if problems:
            raise ValueError("; ".join(problems))
        return self

    def public_view(self, rng: Optional[random.Random] = None) -> PublicQuestion:
        """
        Strip the canonical answer and hide orderings that reveal it.

        Args:
            rng: Random source used to shuffle matching and sequencing items

        Returns:
            PublicQuestion safe to show before submission
        """
        rng = rng or random.Random()
        matching_left = matching_right = sequencing = None

        if self.matching_pairs:
            matching_left = [pair.left for pair in self.matching_pairs]
            matching_right = [pair.right for pair in self.matching_pairs]
            rng.shuffle(matching_right)

        if self.sequencing_items:
            sequencing = list(self.sequencing_items)
            rng.shuffle(sequencing)

        return PublicQuestion(
            id=self.id,
            question_type=self.question_type,
            question_text=self.question_text,
            options=list(self.options) if self.options else None,
            matching_left=matching_left,
            matching_right=matching_right,
            sequencing_items=sequencing,
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "id": 1,
                "question_type": "multiple_choice",
                "question_text": "Which organelle produces most of a cell's ATP?",
                "options": ["Nucleus", "Mitochondrion", "Ribosome", "Golgi body"],
                "correct_answer": "Mitochondrion",
            }
        }
    }


class UserAnswer(BaseModel):
    """The respondent's answer to one question, serialized as a string."""

    question_id: int
    answer: str = ""


class GradedQuestion(Question):
    """A question together with the submitted answer and its assessment."""

    user_answer: str = ""
    is_correct: bool = False
    score: float = Field(default=0.0, ge=0.0, le=1.0)
    explanation: str = ""
    ai_correction: str = Field(
        default="", description="Specific correction, or an affirmation when correct"
    )

    model_config = {"frozen": True}


class QuizResult(BaseModel):
    """Outcome of grading one quiz attempt."""

    total_score: float = Field(..., ge=0.0)
    max_score: float = Field(..., ge=0.0)
    graded_questions: list[GradedQuestion] = Field(default_factory=list)
    overall_feedback: str = ""

    model_config = {"frozen": True}

    @property
    def correct_count(self) -> int:
        """Number of questions graded as correct."""
        return sum(1 for q in self.graded_questions if q.is_correct)

    @property
    def percentage(self) -> float:
        """Score as a percentage of the maximum."""
        if self.max_score <= 0:
            return 0.0
        return round(self.total_score / self.max_score * 100, 1)


class GenerationRequest(BaseModel):
    """Input handed to the generation collaborator."""

    documents: list[UploadedDocument]
    num_questions: int
    question_types: list[QuestionType]
    auto_detect: bool
    difficulty: QuizDifficulty
    custom_instructions: Optional[str] = None

    @classmethod
    def from_configuration(cls, config: QuizConfiguration) -> "GenerationRequest":
        return cls(
            documents=list(config.documents),
            num_questions=config.num_questions,
            question_types=list(config.selected_types),
            auto_detect=config.auto_detect,
            difficulty=config.difficulty,
            custom_instructions=config.custom_instructions,
        )


# Structured output models for LLM responses


class GeneratedQuestion(BaseModel):
    """Question draft as emitted by the generation model."""

    id: int = Field(..., description="Sequential question number starting at 1")
    question_type: QuestionType = Field(..., description="Kind of question")
    question_text: str = Field(..., description="The question prompt")
    options: Optional[list[str]] = Field(
        None, description="Only for multiple_choice: the answer choices"
    )
    matching_pairs: Optional[list[MatchingPair]] = Field(
        None, description="Only for matching: the correct left/right pairs"
    )
    sequencing_items: Optional[list[str]] = Field(
        None, description="Only for sequencing: the items in the correct order"
    )
    correct_answer: Optional[str] = Field(
        None, description="The canonical answer for the question"
    )


class GeneratedQuiz(BaseModel):
    """List of questions from the generation model."""

    questions: list[GeneratedQuestion] = Field(
        ..., description="Generated questions in presentation order"
    )


class QuestionGrade(BaseModel):
    """Assessment of a single answer."""

    question_id: int
    is_correct: bool
    score: float = Field(..., ge=0.0, le=1.0)
    explanation: str
    ai_correction: str = Field(
        ..., description="The specific correction, or 'Correct' when right"
    )


class GradingReport(BaseModel):
    """Grades from the grading model."""

    grades: list[QuestionGrade] = Field(..., description="One grade per question")
    overall_feedback: str = Field(..., description="Summary feedback for the learner")
