"""Tests for Pydantic models."""

import random

import pytest
from pydantic import ValidationError

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
    payload_problems,
)


class TestUploadedDocument:
    """Test UploadedDocument model."""

    def test_decoded_returns_raw_bytes(self, sample_documents):
        """Test that base64 content decodes back to the file bytes."""
        assert sample_documents[1].decoded() == b"%PDF-1.4 fake pdf bytes"

    def test_ids_are_unique(self):
        """Test that each document gets its own id."""
        a = UploadedDocument(name="a.txt", base64="YQ==", mime_type="text/plain")
        b = UploadedDocument(name="a.txt", base64="YQ==", mime_type="text/plain")
        assert a.id != b.id

    @pytest.mark.parametrize(
        "mime_type,expected",
        [
            ("text/plain", True),
            ("text/markdown", True),
            ("application/json", True),
            ("application/pdf", False),
            ("image/png", False),
        ],
    )
    def test_is_text(self, mime_type, expected):
        """Test which content types are inlined as text."""
        doc = UploadedDocument(name="f", base64="YQ==", mime_type=mime_type)
        assert doc.is_text is expected

    def test_name_required(self):
        """Test that an empty name is rejected."""
        with pytest.raises(ValidationError):
            UploadedDocument(name="", base64="YQ==")


class TestQuizConfiguration:
    """Test QuizConfiguration model."""

    def test_defaults(self):
        """Test the documented defaults."""
        config = QuizConfiguration()
        assert config.num_questions == 5
        assert config.selected_types == [QuestionType.MULTIPLE_CHOICE]
        assert config.auto_detect is False
        assert config.difficulty == QuizDifficulty.MEDIUM
        assert config.time_limit == 0

    def test_selected_types_deduplicated_in_order(self):
        """Test that repeated kinds collapse to their first occurrence."""
        config = QuizConfiguration(
            selected_types=[
                QuestionType.MATCHING,
                QuestionType.TRUE_FALSE,
                QuestionType.MATCHING,
            ]
        )
        assert config.selected_types == [QuestionType.MATCHING, QuestionType.TRUE_FALSE]

    def test_blank_instructions_become_none(self):
        """Test that whitespace-only instructions are dropped."""
        assert QuizConfiguration(custom_instructions="   ").custom_instructions is None
        assert (
            QuizConfiguration(custom_instructions="  focus on dates ").custom_instructions
            == "focus on dates"
        )

    def test_negative_time_limit_rejected(self):
        """Test that a negative time limit is invalid."""
        with pytest.raises(ValidationError):
            QuizConfiguration(time_limit=-1)

    def test_difficulty_accepts_value(self):
        """Test that difficulty parses from its display value."""
        assert QuizConfiguration(difficulty="Hard").difficulty == QuizDifficulty.HARD


class TestPayloadProblems:
    """Test kind/payload consistency checks."""

    def test_consistent_payloads(self):
        """Test that well-formed payloads report no problems."""
        assert payload_problems(QuestionType.MULTIPLE_CHOICE, ["a", "b"], None, None) == []
        assert payload_problems(QuestionType.TRUE_FALSE, None, None, None) == []
        assert (
            payload_problems(
                QuestionType.MATCHING,
                None,
                [MatchingPair(left="a", right="1"), MatchingPair(left="b", right="2")],
                None,
            )
            == []
        )

    def test_missing_payload(self):
        """Test that a kind without its payload is reported."""
        problems = payload_problems(QuestionType.SEQUENCING, None, None, None)
        assert problems == ["sequencing question is missing sequencing_items"]

    def test_foreign_payload(self):
        """Test that a payload belonging to another kind is reported."""
        problems = payload_problems(QuestionType.SHORT_ANSWER, ["a", "b"], None, None)
        assert problems == ["short_answer question must not carry options"]

    def test_too_few_items(self):
        """Test that single-item payloads are rejected."""
        problems = payload_problems(QuestionType.MULTIPLE_CHOICE, ["only"], None, None)
        assert len(problems) == 1
        assert "at least 2" in problems[0]


class TestQuestion:
    """Test Question model."""

    def test_create_valid_question(self, sample_questions):
        """Test creating a valid question."""
        question = sample_questions[0]
        assert question.id == 1
        assert question.question_type == QuestionType.MULTIPLE_CHOICE
        assert question.correct_answer == "Chemical energy"

    def test_multiple_choice_requires_options(self):
        """Test that multiple choice without options is invalid."""
        with pytest.raises(ValidationError):
            Question(
                id=1,
                question_type=QuestionType.MULTIPLE_CHOICE,
                question_text="Pick one",
                correct_answer="A",
            )

    def test_true_false_rejects_options(self):
        """Test that true/false questions cannot carry options."""
        with pytest.raises(ValidationError):
            Question(
                id=1,
                question_type=QuestionType.TRUE_FALSE,
                question_text="Sky is blue.",
                options=["True", "False"],
                correct_answer="True",
            )

    def test_empty_payload_treated_as_absent(self):
        """Test that an empty list counts as no payload."""
        question = Question(
            id=1,
            question_type=QuestionType.SHORT_ANSWER,
            question_text="Explain.",
            options=[],
            sequencing_items=[],
        )
        assert question.options is None
        assert question.sequencing_items is None

    def test_negative_id_rejected(self):
        """Test that ids must be non-negative."""
        with pytest.raises(ValidationError):
            Question(id=-1, question_type=QuestionType.TRUE_FALSE, question_text="x")

    def test_public_view_hides_answer(self, sample_questions):
        """Test that the public view carries no canonical answer."""
        view = sample_questions[0].public_view()
        assert not hasattr(view, "correct_answer")
        assert view.options == sample_questions[0].options

    def test_public_view_shuffles_matching_right_items(self, mixed_questions):
        """Test that right items are a permutation and left items keep order."""
        matching = mixed_questions[4]
        view = matching.public_view(random.Random(1))
        assert view.matching_left == ["Water", "Carbon dioxide", "Light"]
        assert sorted(view.matching_right) == sorted(["Roots", "Stomata", "Sun"])
        assert not hasattr(view, "matching_pairs")

    def test_public_view_shuffles_sequencing_items(self, mixed_questions):
        """Test that sequencing items are a permutation of the original."""
        sequencing = mixed_questions[5]
        view = sequencing.public_view(random.Random(3))
        assert sorted(view.sequencing_items) == sorted(sequencing.sequencing_items)
        # The stored order is untouched
        assert sequencing.sequencing_items[0] == "Light absorption"


class TestQuizResult:
    """Test QuizResult model."""

    def _graded(self, question, correct, score):
        return GradedQuestion(
            **question.model_dump(),
            user_answer="x",
            is_correct=correct,
            score=score,
        )

    def test_correct_count_and_percentage(self, sample_questions):
        """Test the derived summary properties."""
        result = QuizResult(
            total_score=1.5,
            max_score=3,
            graded_questions=[
                self._graded(sample_questions[0], True, 1.0),
                self._graded(sample_questions[1], False, 0.5),
                self._graded(sample_questions[2], False, 0.0),
            ],
        )
        assert result.correct_count == 1
        assert result.percentage == 50.0

    def test_percentage_with_zero_max(self):
        """Test that an empty result reports zero percent."""
        assert QuizResult(total_score=0, max_score=0).percentage == 0.0

    def test_score_bounds(self, sample_questions):
        """Test that per-question scores stay within 0..1."""
        with pytest.raises(ValidationError):
            self._graded(sample_questions[0], True, 1.5)


class TestGenerationRequest:
    """Test GenerationRequest model."""

    def test_from_configuration(self, sample_config):
        """Test that the request mirrors the configuration."""
        request = GenerationRequest.from_configuration(sample_config)
        assert request.documents == sample_config.documents
        assert request.num_questions == 3
        assert request.question_types == [QuestionType.MULTIPLE_CHOICE]
        assert request.difficulty == QuizDifficulty.EASY
        assert request.custom_instructions is None
