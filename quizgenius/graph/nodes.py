"""Workflow nodes for quiz generation and grading.

Each node receives the workflow state and returns the keys it updates. A node
that cannot continue records ``error`` (and ``cause`` when an exception was
involved); the workflow routes straight to the end from there.
"""

import logging
from typing import Any, Literal

from quizgenius.agents.base import AnswerGrader, QuestionGenerator
from quizgenius.graph.state import GenerationState, GradingState
from quizgenius.models.quiz import (
    GenerationRequest,
    GradedQuestion,
    QuizConfiguration,
    QuizResult,
    UserAnswer,
    payload_problems,
)

logger = logging.getLogger(__name__)


def route_on_error(state: dict[str, Any]) -> Literal["failed", "continue"]:
    """Stop the workflow once a node has recorded an error."""
    if state.get("error"):
        return "failed"
    return "continue"


# Generation


def configuration_problems(config: QuizConfiguration) -> list[str]:
    """
    Check a configuration against the generation input constraints.

    Args:
        config: Configuration to check

    Returns:
        Problems found, empty when the configuration is usable
    """
    problems = []
    if not config.documents:
        problems.append("at least one document is required")
    if config.num_questions < 1:
        problems.append("num_questions must be at least 1")
    if not config.auto_detect and not config.selected_types:
        problems.append("select at least one question type or enable auto-detect")
    return problems


def check_configuration(state: GenerationState) -> dict[str, Any]:
    """Reject configurations the generator must never see."""
    problems = configuration_problems(state["config"])
    if problems:
        message = "Invalid quiz configuration: " + "; ".join(problems)
        logger.warning(message)
        return {"error": message}
    return {}


async def request_questions(
    state: GenerationState, generator: QuestionGenerator
) -> dict[str, Any]:
    """
    Call the generation collaborator exactly once.

    Args:
        state: Current generation state
        generator: Generation collaborator

    Returns:
        Dictionary with questions, or error and cause
    """
    request = GenerationRequest.from_configuration(state["config"])
    try:
        questions = await generator.generate_questions(request)
    except Exception as e:
        logger.exception("Question generation failed")
        return {"error": f"Question generation failed: {e}", "cause": e}

    return {"questions": list(questions or [])}


def check_questions(state: GenerationState) -> dict[str, Any]:
    """
    Verify the generated set before it is administered.

    Fails on an empty set, duplicate ids or a payload that does not match the
    question kind. A count that differs from the request, or kinds outside the
    selection, are only logged.
    """
    questions = state["questions"]
    config = state["config"]

    if not questions:
        return {"error": "Generator returned no questions"}

    seen: set[int] = set()
    for question in questions:
        if question.id in seen:
            return {"error": f"Generator returned duplicate question id {question.id}"}
        seen.add(question.id)

        problems = payload_problems(
            question.question_type,
            question.options,
            question.matching_pairs,
            question.sequencing_items,
        )
        if problems:
            return {
                "error": f"Question {question.id} is malformed: " + "; ".join(problems)
            }

    if len(questions) != config.num_questions:
        logger.warning(
            "Requested %d questions, generator returned %d",
            config.num_questions,
            len(questions),
        )

    if not config.auto_detect:
        allowed = set(config.selected_types)
        foreign = sorted({q.question_type.value for q in questions if q.question_type not in allowed})
        if foreign:
            logger.warning("Generator used unselected question types: %s", ", ".join(foreign))

    return {}


# Grading


def reconcile_answers(state: GradingState) -> dict[str, Any]:
    """
    Produce exactly one answer per question, in question order.

    Later answers for the same question replace earlier ones, answers to
    unknown questions are dropped, and unanswered questions get "".
    """
    question_ids = [q.id for q in state["questions"]]
    known = set(question_ids)
    latest: dict[int, str] = {}
    duplicates = 0
    unknown = 0

    for answer in state["submitted_answers"]:
        if answer.question_id not in known:
            unknown += 1
            continue
        if answer.question_id in latest:
            duplicates += 1
        latest[answer.question_id] = answer.answer

    missing = len(known) - len(latest)
    if duplicates or unknown or missing:
        logger.warning(
            "Reconciled answers: %d duplicate, %d unknown, %d missing",
            duplicates,
            unknown,
            missing,
        )

    return {
        "answers": [
            UserAnswer(question_id=qid, answer=latest.get(qid, "")) for qid in question_ids
        ]
    }


async def request_grading(state: GradingState, grader: AnswerGrader) -> dict[str, Any]:
    """
    Call the grading collaborator exactly once.

    Args:
        state: Current grading state
        grader: Grading collaborator

    Returns:
        Dictionary with result, or error and cause
    """
    try:
        result = await grader.grade_answers(state["questions"], state["answers"])
    except Exception as e:
        logger.exception("Grading failed")
        return {"error": f"Grading failed: {e}", "cause": e}

    if result is None:
        return {"error": "Grader returned no result"}
    return {"result": result}


def check_grading(state: GradingState) -> dict[str, Any]:
    """
    Align the grader's result with the question set.

    Graded questions are rebuilt from the questions that were asked, in question
    order, with the reconciled answer and the grader's assessment. Blank answers
    score zero. The total is recomputed from the per-question scores.
    """
    result = state["result"]
    questions = state["questions"]
    answers = {a.question_id: a.answer for a in state["answers"]}

    graded_by_id = {}
    for graded in result.graded_questions:
        if graded.id in graded_by_id:
            return {"error": f"Grader returned question {graded.id} twice"}
        graded_by_id[graded.id] = graded

    expected = [q.id for q in questions]
    missing = [qid for qid in expected if qid not in graded_by_id]
    unexpected = sorted(set(graded_by_id) - set(expected))
    if missing or unexpected:
        return {
            "error": f"Grader result does not match the quiz "
            f"(missing {missing}, unexpected {unexpected})"
        }

    normalized = []
    for question in questions:
        answer = answers.get(question.id, "")
        graded = graded_by_id[question.id]
        blank = not answer.strip()
        normalized.append(
            GradedQuestion(
                **question.model_dump(),
                user_answer=answer,
                is_correct=False if blank else graded.is_correct,
                score=0.0 if blank else graded.score,
                explanation=graded.explanation,
                ai_correction=graded.ai_correction,
            )
        )

    max_score = result.max_score if result.max_score > 0 else float(len(questions))

    return {
        "result": QuizResult(
            total_score=sum(q.score for q in normalized),
            max_score=max_score,
            graded_questions=normalized,
            overall_feedback=result.overall_feedback,
        )
    }
