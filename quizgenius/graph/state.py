"""State definitions for the generation and grading workflows."""

from typing import Optional, Sequence, TypedDict

from quizgenius.models.quiz import Question, QuizConfiguration, QuizResult, UserAnswer


class GenerationState(TypedDict):
    """State passed between the nodes of the generation workflow."""

    config: QuizConfiguration
    questions: list[Question]
    error: Optional[str]
    cause: Optional[BaseException]


class GradingState(TypedDict):
    """State passed between the nodes of the grading workflow."""

    questions: list[Question]
    submitted_answers: list[UserAnswer]
    answers: list[UserAnswer]
    result: Optional[QuizResult]
    error: Optional[str]
    cause: Optional[BaseException]


def create_generation_state(config: QuizConfiguration) -> GenerationState:
    """
    Create the initial state for one generation run.

    Args:
        config: Configuration submitted by the upload step

    Returns:
        Initialized GenerationState
    """
    return GenerationState(
        config=config,
        questions=[],
        error=None,
        cause=None,
    )


def create_grading_state(
    questions: Sequence[Question], answers: Sequence[UserAnswer]
) -> GradingState:
    """
    Create the initial state for one grading run.

    Args:
        questions: Question set of the attempt
        answers: Answers as submitted

    Returns:
        Initialized GradingState
    """
    return GradingState(
        questions=list(questions),
        submitted_answers=list(answers),
        answers=[],
        result=None,
        error=None,
        cause=None,
    )
