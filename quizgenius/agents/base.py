"""Collaborator interfaces consumed by the orchestrators."""

from typing import Protocol, Sequence

from quizgenius.models.quiz import GenerationRequest, Question, QuizResult, UserAnswer


class QuestionGenerator(Protocol):
    """Produces an ordered question set from lesson documents."""

    async def generate_questions(self, request: GenerationRequest) -> Sequence[Question]:
        ...


class AnswerGrader(Protocol):
    """Grades a full set of answers against the questions they respond to."""

    async def grade_answers(
        self, questions: Sequence[Question], answers: Sequence[UserAnswer]
    ) -> QuizResult:
        ...
