"""Upload step - Reads lesson files and assembles a quiz configuration."""

import base64
import logging
import mimetypes
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from quizgenius.errors import DocumentError
from quizgenius.models.quiz import (
    QuestionType,
    QuizConfiguration,
    QuizDifficulty,
    UploadedDocument,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_BYTES = 20 * 1024 * 1024

# Lesson formats mimetypes does not always know about
EXTRA_MIME_TYPES = {
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
}


def guess_mime_type(path: Path) -> str:
    """
    Guess the content type of a lesson file from its extension.

    Args:
        path: File path

    Returns:
        MIME type, application/octet-stream when unknown
    """
    suffix = path.suffix.lower()
    if suffix in EXTRA_MIME_TYPES:
        return EXTRA_MIME_TYPES[suffix]
    mime_type, _ = mimetypes.guess_type(path.name)
    return mime_type or "application/octet-stream"


def load_document(
    path: Union[str, Path], max_bytes: int = DEFAULT_MAX_BYTES
) -> UploadedDocument:
    """
    Read a file into an uploadable document.

    Args:
        path: Path to the lesson file
        max_bytes: Largest accepted file size

    Returns:
        UploadedDocument with base64 content

    Raises:
        DocumentError: if the file is missing, empty or too large
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentError(f"File not found: {file_path}")

    size = file_path.stat().st_size
    if size == 0:
        raise DocumentError(f"File is empty: {file_path}")
    if size > max_bytes:
        raise DocumentError(f"File is too large ({size} bytes, limit {max_bytes}): {file_path}")

    content = file_path.read_bytes()

    document = UploadedDocument(
        name=file_path.name,
        base64=base64.b64encode(content).decode("ascii"),
        mime_type=guess_mime_type(file_path),
    )
    logger.debug("Loaded %s (%s, %d bytes)", document.name, document.mime_type, len(content))
    return document


def load_documents(
    paths: Iterable[Union[str, Path]], max_bytes: int = DEFAULT_MAX_BYTES
) -> list[UploadedDocument]:
    """Load several files, keeping their order."""
    return [load_document(path, max_bytes) for path in paths]


def build_configuration(
    paths: Sequence[Union[str, Path]],
    num_questions: int,
    selected_types: Optional[Sequence[QuestionType]] = None,
    auto_detect: bool = False,
    difficulty: QuizDifficulty = QuizDifficulty.MEDIUM,
    custom_instructions: Optional[str] = None,
    time_limit: int = 0,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> QuizConfiguration:
    """
    Read lesson files and assemble the configuration for generation.

    Args:
        paths: Lesson files, in the order they should be presented
        num_questions: Requested question count
        selected_types: Allowed question kinds
        auto_detect: Let the generator choose question kinds
        difficulty: Quiz difficulty
        custom_instructions: Extra free-text instructions
        time_limit: Seconds allowed, 0 for unlimited
        max_bytes: Largest accepted file size

    Returns:
        QuizConfiguration ready to submit
    """
    return QuizConfiguration(
        documents=load_documents(paths, max_bytes),
        num_questions=num_questions,
        selected_types=list(selected_types or []),
        auto_detect=auto_detect,
        difficulty=difficulty,
        custom_instructions=custom_instructions,
        time_limit=time_limit,
    )
