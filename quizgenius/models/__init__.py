"""Data models for quiz generation, administration and grading."""

from .quiz import (
    GeneratedQuestion,
    # Structured output models
    GeneratedQuiz,
    GenerationRequest,
    GradedQuestion,
    GradingReport,
    MatchingPair,
    PublicQuestion,
    Question,
    QuestionGrade,
    QuestionType,
    QuizConfiguration,
    QuizDifficulty,
    QuizResult,
    UploadedDocument,
    UserAnswer,
    payload_problems,
)

__all__ = [
    "QuestionType",
    "QuizDifficulty",
    "UploadedDocument",
    "QuizConfiguration",
    "MatchingPair",
    "Question",
    "PublicQuestion",
    "UserAnswer",
    "GradedQuestion",
    "QuizResult",
    "GenerationRequest",
    "GeneratedQuestion",
    "GeneratedQuiz",
    "QuestionGrade",
    "GradingReport",
    "payload_problems",
]
