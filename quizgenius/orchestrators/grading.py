"""Grading Orchestrator - Grades a finished quiz attempt."""

import logging
from typing import Sequence, Union

from quizgenius.agents.base import AnswerGrader
from quizgenius.errors import GradingFailure
from quizgenius.graph.state import create_grading_state
from quizgenius.graph.workflow import compile_grading_workflow
from quizgenius.models.quiz import Question, QuizResult, UserAnswer

logger = logging.getLogger(__name__)


class GradingOrchestrator:
    """Request/response adapter around the grading collaborator."""

    def __init__(self, grader: AnswerGrader):
        self._workflow = compile_grading_workflow(grader)

    async def grade(
        self, questions: Sequence[Question], answers: Sequence[UserAnswer]
    ) -> Union[QuizResult, GradingFailure]:
        """
        Grade answers against the question set of the current attempt.

        Mismatched answer lists are tolerated: missing answers are graded as
        empty, unknown ones are ignored, and for duplicates the last wins.

        Args:
            questions: Questions most recently produced by generation
            answers: Answers collected by the administration session

        Returns:
            QuizResult in question order, or GradingFailure
        """
        try:
            final_state = await self._workflow.ainvoke(
                create_grading_state(questions, answers)
            )
        except Exception as e:
            logger.exception("Grading workflow crashed")
            return GradingFailure(reason=str(e), cause=e)

        if final_state.get("error"):
            return GradingFailure(
                reason=final_state["error"], cause=final_state.get("cause")
            )

        result = final_state["result"]
        logger.info("Graded quiz: %.2f / %.2f", result.total_score, result.max_score)
        return result
