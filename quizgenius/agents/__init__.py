"""AI collaborators for quiz generation and grading."""

from .base import AnswerGrader, QuestionGenerator
from .generator import QuestionGeneratorAgent
from .grader import QuizGraderAgent

__all__ = [
    "QuestionGenerator",
    "AnswerGrader",
    "QuestionGeneratorAgent",
    "QuizGraderAgent",
]
