"""Failure results and exceptions shared across the quiz lifecycle."""

from dataclasses import dataclass
from typing import ClassVar, Optional


@dataclass(frozen=True)
class GenerationFailure:
    """Generation did not produce a usable question set."""

    reason: str
    cause: Optional[BaseException] = None

    user_message: ClassVar[str] = (
        "Failed to generate quiz. Please ensure your files are readable and try again."
    )


@dataclass(frozen=True)
class GradingFailure:
    """Grading did not produce a usable result."""

    reason: str
    cause: Optional[BaseException] = None

    user_message: ClassVar[str] = "Failed to grade quiz. Please try again."


class InvalidTransitionError(RuntimeError):
    """An operation was requested in a lifecycle phase that does not allow it."""


class UnknownQuestionError(ValueError):
    """An answer referenced a question that is not part of the session."""


class DocumentError(ValueError):
    """A file could not be turned into an uploadable document."""


class GenerationResponseError(ValueError):
    """The generation model returned output that cannot be used."""


class GradingResponseError(ValueError):
    """The grading model returned output that cannot be used."""


class QuizExpiredError(InvalidTransitionError):
    """An answer was recorded after the time limit ran out."""
