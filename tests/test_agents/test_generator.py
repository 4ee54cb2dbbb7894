"""Tests for the Question Generator agent."""

import pytest
from langchain_core.messages import HumanMessage, SystemMessage
from pydantic import ValidationError

from quizgenius.agents.generator import (
    QuestionGeneratorAgent,
    build_messages,
    build_user_prompt,
    describe_question_types,
    document_content_block,
)
from quizgenius.errors import GenerationResponseError
from quizgenius.models.quiz import (
    GeneratedQuestion,
    GeneratedQuiz,
    GenerationRequest,
    MatchingPair,
    QuestionType,
    UploadedDocument,
)


@pytest.fixture
def sample_request(sample_config) -> GenerationRequest:
    return GenerationRequest.from_configuration(sample_config)


class TestPrompt:
    """Test prompt construction."""

    def test_prompt_contains_count_and_difficulty(self, sample_request):
        """Test that the requested count and difficulty are stated."""
        prompt = build_user_prompt(sample_request)

        assert "Generate exactly 3 quiz questions" in prompt
        assert "Difficulty level: Easy" in prompt
        assert "photosynthesis.md" in prompt

    def test_selected_types_listed(self, sample_request):
        """Test that only the selected kinds are offered."""
        line = describe_question_types(sample_request)

        assert line == "Use only these question kinds: multiple_choice."

    def test_auto_detect_offers_every_kind(self, sample_request):
        """Test that auto-detect lets the model choose from all kinds."""
        request = sample_request.model_copy(update={"auto_detect": True})

        line = describe_question_types(request)

        for kind in QuestionType:
            assert kind.value in line

    def test_custom_instructions_included(self, sample_request):
        """Test that free-text instructions are appended."""
        request = sample_request.model_copy(
            update={"custom_instructions": "Focus on the light reactions"}
        )

        assert "Focus on the light reactions" in build_user_prompt(request)

    def test_no_instructions_section_without_instructions(self, sample_request):
        assert "Additional instructions" not in build_user_prompt(sample_request)


class TestDocumentBlocks:
    """Test document conversion into message content."""

    def test_text_document_inlined(self, sample_documents):
        block = document_content_block(sample_documents[0])

        assert block["type"] == "text"
        assert block["text"].startswith("--- Document: photosynthesis.md ---")
        assert "Plants convert light energy" in block["text"]

    def test_pdf_document_attached(self, sample_documents):
        block = document_content_block(sample_documents[1])

        assert block["type"] == "file"
        assert block["mime_type"] == "application/pdf"
        assert block["data"] == sample_documents[1].base64
        assert block["filename"] == "cells.pdf"

    def test_image_document_attached(self):
        image = UploadedDocument(name="diagram.png", base64="iVBORw0K", mime_type="image/png")

        block = document_content_block(image)

        assert block["type"] == "image"
        assert block["data"] == "iVBORw0K"

    def test_messages_carry_every_document(self, sample_request):
        messages = build_messages(sample_request)

        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        # Prompt text plus one block per document
        assert len(messages[1].content) == 3


class TestQuestionGeneratorAgent:
    """Test the agent against a fake chat model."""

    @pytest.mark.asyncio
    async def test_converts_drafts_to_questions(self, fake_chat_model, sample_request):
        """Test that structured output becomes validated questions."""
        fake_chat_model.response = GeneratedQuiz(
            questions=[
                GeneratedQuestion(
                    id=1,
                    question_type=QuestionType.MULTIPLE_CHOICE,
                    question_text="Which gas do plants absorb?",
                    options=["Oxygen", "Carbon dioxide"],
                    correct_answer="Carbon dioxide",
                ),
                GeneratedQuestion(
                    id=2,
                    question_type=QuestionType.MATCHING,
                    question_text="Match the inputs.",
                    options=[],
                    matching_pairs=[
                        MatchingPair(left="Water", right="Roots"),
                        MatchingPair(left="Light", right="Sun"),
                    ],
                ),
            ]
        )

        questions = await QuestionGeneratorAgent(fake_chat_model).generate_questions(
            sample_request
        )

        assert [q.id for q in questions] == [1, 2]
        assert questions[1].options is None
        assert fake_chat_model.schemas == [GeneratedQuiz]
        assert len(fake_chat_model.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_output_raises(self, fake_chat_model, sample_request):
        fake_chat_model.response = GeneratedQuiz(questions=[])

        with pytest.raises(GenerationResponseError):
            await QuestionGeneratorAgent(fake_chat_model).generate_questions(sample_request)

    @pytest.mark.asyncio
    async def test_mismatched_payload_raises(self, fake_chat_model, sample_request):
        """Test that a sequencing draft without items is rejected."""
        fake_chat_model.response = GeneratedQuiz(
            questions=[
                GeneratedQuestion(
                    id=1,
                    question_type=QuestionType.SEQUENCING,
                    question_text="Order these.",
                )
            ]
        )

        with pytest.raises(ValidationError):
            await QuestionGeneratorAgent(fake_chat_model).generate_questions(sample_request)

    @pytest.mark.asyncio
    async def test_model_error_propagates(self, fake_chat_model, sample_request):
        fake_chat_model.error = RuntimeError("throttled")

        with pytest.raises(RuntimeError, match="throttled"):
            await QuestionGeneratorAgent(fake_chat_model).generate_questions(sample_request)
