"""Shared test fixtures and configuration for pytest."""

import base64
import random
from typing import Any, Optional, Sequence

import pytest

from quizgenius.models.quiz import (
    GenerationRequest,
    GradedQuestion,
    MatchingPair,
    Question,
    QuestionType,
    QuizConfiguration,
    QuizDifficulty,
    QuizResult,
    UploadedDocument,
    UserAnswer,
)


class FakeGenerator:
    """Generation collaborator returning canned questions."""

    def __init__(self, questions: Sequence[Question]):
        self.questions = list(questions)
        self.error: Optional[Exception] = None
        self.requests: list[GenerationRequest] = []

    async def generate_questions(self, request: GenerationRequest) -> list[Question]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return list(self.questions)


class FakeGrader:
    """Grading collaborator marking exact matches with the canonical answer."""

    def __init__(self):
        self.errors: list[Optional[Exception]] = []
        self.result: Optional[QuizResult] = None
        self.calls: list[tuple[list[Question], list[UserAnswer]]] = []

    async def grade_answers(
        self, questions: Sequence[Question], answers: Sequence[UserAnswer]
    ) -> QuizResult:
        self.calls.append((list(questions), list(answers)))
        if self.errors:
            error = self.errors.pop(0)
            if error is not None:
                raise error
        if self.result is not None:
            return self.result

        by_id = {a.question_id: a.answer for a in answers}
        graded = []
        for question in questions:
            answer = by_id.get(question.id, "")
            correct = answer == question.correct_answer
            graded.append(
                GradedQuestion(
                    **question.model_dump(),
                    user_answer=answer,
                    is_correct=correct,
                    score=1.0 if correct else 0.0,
                    explanation=f"The answer is {question.correct_answer}.",
                    ai_correction="Correct" if correct else f"It should be {question.correct_answer}.",
                )
            )
        return QuizResult(
            total_score=sum(q.score for q in graded),
            max_score=float(len(questions)),
            graded_questions=graded,
            overall_feedback="Good effort.",
        )


class FakeChatModel:
    """Stand-in for a LangChain chat model with structured output."""

    def __init__(self, response: Any = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.schemas: list[type] = []
        self.calls: list[list] = []

    def with_structured_output(self, schema: type) -> "FakeChatModel":
        self.schemas.append(schema)
        return self

    async def ainvoke(self, messages: list) -> Any:
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return self.response


def make_document(name: str, content: bytes, mime_type: str) -> UploadedDocument:
    return UploadedDocument(
        name=name,
        base64=base64.b64encode(content).decode("ascii"),
        mime_type=mime_type,
    )


@pytest.fixture
def sample_documents() -> list[UploadedDocument]:
    """Two lesson documents: a text note and a PDF."""
    return [
        make_document(
            "photosynthesis.md",
            b"# Photosynthesis\nPlants convert light energy into chemical energy.",
            "text/markdown",
        ),
        make_document("cells.pdf", b"%PDF-1.4 fake pdf bytes", "application/pdf"),
    ]


@pytest.fixture
def sample_config(sample_documents: list[UploadedDocument]) -> QuizConfiguration:
    """Configuration for three easy multiple-choice questions, untimed."""
    return QuizConfiguration(
        documents=sample_documents,
        num_questions=3,
        selected_types=[QuestionType.MULTIPLE_CHOICE],
        auto_detect=False,
        difficulty=QuizDifficulty.EASY,
        time_limit=0,
    )


@pytest.fixture
def sample_questions() -> list[Question]:
    """Three multiple-choice questions."""
    return [
        Question(
            id=1,
            question_type=QuestionType.MULTIPLE_CHOICE,
            question_text="What do plants convert light energy into?",
            options=["Heat", "Chemical energy", "Sound", "Motion"],
            correct_answer="Chemical energy",
        ),
        Question(
            id=2,
            question_type=QuestionType.MULTIPLE_CHOICE,
            question_text="Which organelle hosts photosynthesis?",
            options=["Chloroplast", "Nucleus", "Ribosome"],
            correct_answer="Chloroplast",
        ),
        Question(
            id=3,
            question_type=QuestionType.MULTIPLE_CHOICE,
            question_text="Which gas do plants absorb?",
            options=["Oxygen", "Nitrogen", "Carbon dioxide"],
            correct_answer="Carbon dioxide",
        ),
    ]


@pytest.fixture
def mixed_questions() -> list[Question]:
    """One question of every kind."""
    return [
        Question(
            id=1,
            question_type=QuestionType.MULTIPLE_CHOICE,
            question_text="Which organelle hosts photosynthesis?",
            options=["Chloroplast", "Nucleus", "Ribosome"],
            correct_answer="Chloroplast",
        ),
        Question(
            id=2,
            question_type=QuestionType.TRUE_FALSE,
            question_text="Plants release oxygen.",
            correct_answer="True",
        ),
        Question(
            id=3,
            question_type=QuestionType.FILL_IN_BLANK,
            question_text="Photosynthesis takes place in the ____.",
            correct_answer="chloroplast",
        ),
        Question(
            id=4,
            question_type=QuestionType.SHORT_ANSWER,
            question_text="Why do leaves look green?",
            correct_answer="Chlorophyll reflects green light.",
        ),
        Question(
            id=5,
            question_type=QuestionType.MATCHING,
            question_text="Match each input to its source.",
            matching_pairs=[
                MatchingPair(left="Water", right="Roots"),
                MatchingPair(left="Carbon dioxide", right="Stomata"),
                MatchingPair(left="Light", right="Sun"),
            ],
        ),
        Question(
            id=6,
            question_type=QuestionType.SEQUENCING,
            question_text="Order the stages.",
            sequencing_items=["Light absorption", "Water splitting", "Sugar synthesis"],
        ),
    ]


@pytest.fixture
def fake_generator(sample_questions: list[Question]) -> FakeGenerator:
    """Generator returning the three sample questions."""
    return FakeGenerator(sample_questions)


@pytest.fixture
def fake_grader() -> FakeGrader:
    """Grader that checks answers against the canonical answer."""
    return FakeGrader()


@pytest.fixture
def fake_chat_model() -> FakeChatModel:
    """Structured-output chat model with no response queued."""
    return FakeChatModel()


@pytest.fixture
def seeded_rng() -> random.Random:
    return random.Random(7)
