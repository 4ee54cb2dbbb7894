"""Question Generator Agent - Generates quiz questions from lesson documents."""

import logging
from typing import Any, Optional

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage

from quizgenius.config.settings import get_settings
from quizgenius.errors import GenerationResponseError
from quizgenius.models.quiz import (
    GeneratedQuiz,
    GenerationRequest,
    Question,
    QuestionType,
    UploadedDocument,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert educator who writes quizzes from lesson material.
Read the attached documents and write questions that test understanding of them.

Question kinds and the fields each one uses:
- multiple_choice: "options" with 3-5 choices; "correct_answer" is the exact text of the right option
- true_false: no options; "correct_answer" is "True" or "False"
- fill_in_blank: the question text contains "____"; "correct_answer" is the missing word or phrase
- short_answer: "correct_answer" is a model answer of one or two sentences
- matching: "matching_pairs" with 3-6 correct left/right pairs; no options
- sequencing: "sequencing_items" with 3-6 items listed in the CORRECT order; no options

Rules:
- Only fill the payload field of the question's own kind; leave the others empty
- Number questions sequentially starting at 1
- Every question must be answerable from the documents alone

Difficulty levels:
- Easy: recall of facts stated directly in the material
- Medium: understanding and applying the concepts
- Hard: analysis, comparison and multi-step reasoning"""


def describe_question_types(request: GenerationRequest) -> str:
    """
    Describe which question kinds the model may use.

    Args:
        request: Generation request

    Returns:
        Instruction line for the prompt
    """
    if request.auto_detect or not request.question_types:
        return (
            "Choose the most suitable question kinds for this material "
            "(any mix of: " + ", ".join(t.value for t in QuestionType) + ")."
        )
    return "Use only these question kinds: " + ", ".join(
        t.value for t in request.question_types
    ) + "."


def build_user_prompt(request: GenerationRequest) -> str:
    """
    Build the instruction text of the generation prompt.

    Args:
        request: Generation request

    Returns:
        Prompt text placed before the documents
    """
    names = ", ".join(doc.name for doc in request.documents)
    prompt = f"""Generate exactly {request.num_questions} quiz questions from the attached documents ({names}).

Difficulty level: {request.difficulty.value}
{describe_question_types(request)}"""

    if request.custom_instructions:
        prompt += f"\n\nAdditional instructions from the instructor:\n{request.custom_instructions}"

    return prompt


def document_content_block(document: UploadedDocument) -> dict[str, Any]:
    """
    Convert an uploaded document into a multimodal message content block.

    Args:
        document: Uploaded document

    Returns:
        Content block understood by LangChain chat models
    """
    if document.is_text:
        text = document.decoded().decode("utf-8", errors="replace")
        return {"type": "text", "text": f"--- Document: {document.name} ---\n{text}"}

    if document.mime_type.startswith("image/"):
        return {
            "type": "image",
            "source_type": "base64",
            "mime_type": document.mime_type,
            "data": document.base64,
        }

    return {
        "type": "file",
        "source_type": "base64",
        "mime_type": document.mime_type,
        "data": document.base64,
        "filename": document.name,
    }


def build_messages(request: GenerationRequest) -> list:
    """Assemble system and user messages, documents attached to the user turn."""
    content: list[dict[str, Any]] = [{"type": "text", "text": build_user_prompt(request)}]
    content.extend(document_content_block(doc) for doc in request.documents)

    return [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(content=content),
    ]


class QuestionGeneratorAgent:
    """Generation collaborator backed by a Claude chat model."""

    def __init__(self, llm: Optional[Any] = None):
        """
        Args:
            llm: Chat model supporting ``with_structured_output``; built from
                settings on first use when omitted
        """
        self._llm = llm

    def _structured_llm(self):
        if self._llm is None:
            settings = get_settings()
            self._llm = ChatAnthropic(
                model=settings.model_name,
                temperature=settings.generation_temperature,
                api_key=settings.anthropic_api_key,
            )
        # Use structured output to automatically generate and validate the schema
        return self._llm.with_structured_output(GeneratedQuiz)

    async def generate_questions(self, request: GenerationRequest) -> list[Question]:
        """
        Ask the model for questions and convert the drafts into Questions.

        Args:
            request: Documents and generation options

        Returns:
            Questions in presentation order

        Raises:
            GenerationResponseError: if the model returns nothing usable
            pydantic.ValidationError: if a draft's payload does not match its kind
        """
        logger.info(
            "Requesting %d questions from %d document(s)",
            request.num_questions,
            len(request.documents),
        )
        generated = await self._structured_llm().ainvoke(build_messages(request))

        if generated is None or not generated.questions:
            raise GenerationResponseError("Model returned no questions")

        return [Question.model_validate(draft.model_dump()) for draft in generated.questions]
