"""Generation Orchestrator - Turns a configuration into a question set."""

import logging
from typing import Union

from quizgenius.agents.base import QuestionGenerator
from quizgenius.errors import GenerationFailure
from quizgenius.graph.state import create_generation_state
from quizgenius.graph.workflow import compile_generation_workflow
from quizgenius.models.quiz import Question, QuizConfiguration

logger = logging.getLogger(__name__)


class GenerationOrchestrator:
    """Request/response adapter around the generation collaborator."""

    def __init__(self, generator: QuestionGenerator):
        self._workflow = compile_generation_workflow(generator)

    async def generate(
        self, config: QuizConfiguration
    ) -> Union[list[Question], GenerationFailure]:
        """
        Validate the configuration and generate questions.

        Args:
            config: Configuration submitted by the upload step

        Returns:
            Non-empty question list with unique ids, or GenerationFailure
        """
        try:
            final_state = await self._workflow.ainvoke(create_generation_state(config))
        except Exception as e:
            logger.exception("Generation workflow crashed")
            return GenerationFailure(reason=str(e), cause=e)

        if final_state.get("error"):
            return GenerationFailure(
                reason=final_state["error"], cause=final_state.get("cause")
            )

        questions = final_state["questions"]
        logger.info("Generated %d questions", len(questions))
        return questions
