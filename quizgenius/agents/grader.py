"""Quiz Grader Agent - Grades submitted answers and writes feedback."""

import json
import logging
from typing import Any, Optional, Sequence

from langchain_anthropic import ChatAnthropic
from langchain_core.messages import HumanMessage, SystemMessage

from quizgenius.config.settings import get_settings
from quizgenius.errors import GradingResponseError
from quizgenius.models.quiz import (
    GradedQuestion,
    GradingReport,
    Question,
    QuizResult,
    UserAnswer,
)

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a fair and encouraging instructor grading a quiz.

For each question, compare the student's answer with the canonical answer:
- multiple_choice, true_false: correct only if the chosen option matches
- fill_in_blank: accept spelling variants and synonyms with the same meaning
- short_answer: judge the meaning, award partial credit between 0 and 1
- matching: answers look like "left => right; left => right"; score is the fraction of correct pairs
- sequencing: answers look like "a -> b -> c"; score is the fraction of items in the correct position
- An empty answer is always incorrect with score 0

For every question give:
- is_correct and a score between 0 and 1
- an explanation of why the answer is right or wrong
- ai_correction: the specific correction, or "Correct" when the answer is right

Finish with short overall feedback naming strengths and topics to review."""


def format_question_for_grading(question: Question, answer: str) -> dict[str, Any]:
    """
    Format a question and its answer for the grading prompt.

    Args:
        question: Question including its canonical answer
        answer: The student's serialized answer

    Returns:
        JSON-ready dictionary
    """
    entry: dict[str, Any] = {
        "question_id": question.id,
        "type": question.question_type.value,
        "question": question.question_text,
    }
    if question.options:
        entry["options"] = question.options
    if question.matching_pairs:
        entry["correct_pairs"] = [
            f"{pair.left} => {pair.right}" for pair in question.matching_pairs
        ]
    if question.sequencing_items:
        entry["correct_order"] = " -> ".join(question.sequencing_items)
    if question.correct_answer:
        entry["canonical_answer"] = question.correct_answer
    entry["student_answer"] = answer
    return entry


def build_user_prompt(questions: Sequence[Question], answers: Sequence[UserAnswer]) -> str:
    """Render questions and answers as a JSON list for the model."""
    by_id = {answer.question_id: answer.answer for answer in answers}
    entries = [format_question_for_grading(q, by_id.get(q.id, "")) for q in questions]
    return f"""Grade these {len(entries)} answers:

{json.dumps(entries, indent=2, ensure_ascii=False)}

Return exactly one grade per question_id."""


def assemble_result(
    questions: Sequence[Question],
    answers: Sequence[UserAnswer],
    report: GradingReport,
) -> QuizResult:
    """
    Merge model grades back onto the questions.

    Args:
        questions: Questions in quiz order
        answers: Answers that were graded
        report: Structured grading output

    Returns:
        QuizResult in question order

    Raises:
        GradingResponseError: if a question has no grade
    """
    grades = {grade.question_id: grade for grade in report.grades}
    by_id = {answer.question_id: answer.answer for answer in answers}
    graded = []

    for question in questions:
        grade = grades.get(question.id)
        if grade is None:
            raise GradingResponseError(f"No grade returned for question {question.id}")
        graded.append(
            GradedQuestion(
                **question.model_dump(),
                user_answer=by_id.get(question.id, ""),
                is_correct=grade.is_correct,
                score=grade.score,
                explanation=grade.explanation,
                ai_correction=grade.ai_correction,
            )
        )

    return QuizResult(
        total_score=sum(q.score for q in graded),
        max_score=float(len(questions)),
        graded_questions=graded,
        overall_feedback=report.overall_feedback,
    )


class QuizGraderAgent:
    """Grading collaborator backed by a Claude chat model."""

    def __init__(self, llm: Optional[Any] = None):
        self._llm = llm

    def _structured_llm(self):
        if self._llm is None:
            settings = get_settings()
            self._llm = ChatAnthropic(
                model=settings.model_name,
                temperature=settings.grading_temperature,
                api_key=settings.anthropic_api_key,
            )
        return self._llm.with_structured_output(GradingReport)

    async def grade_answers(
        self, questions: Sequence[Question], answers: Sequence[UserAnswer]
    ) -> QuizResult:
        """
        Grade every answer with the model and build the quiz result.

        Args:
            questions: Full question set including canonical answers
            answers: One answer per question

        Returns:
            QuizResult with per-question feedback
        """
        messages = [
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=build_user_prompt(questions, answers)),
        ]
        logger.info("Requesting grades for %d answers", len(answers))
        report = await self._structured_llm().ainvoke(messages)

        if report is None:
            raise GradingResponseError("Model returned no grading report")

        return assemble_result(questions, answers, report)
