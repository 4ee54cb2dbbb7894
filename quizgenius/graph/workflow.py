"""LangGraph workflow definitions for quiz generation and grading."""

from langgraph.graph import END, StateGraph

from quizgenius.agents.base import AnswerGrader, QuestionGenerator
from quizgenius.graph.nodes import (
    check_configuration,
    check_grading,
    check_questions,
    reconcile_answers,
    request_grading,
    request_questions,
    route_on_error,
)
from quizgenius.graph.state import GenerationState, GradingState


def create_generation_workflow(generator: QuestionGenerator) -> StateGraph:
    """
    Create the LangGraph workflow for question generation.

    The workflow follows this structure:
    1. Check configuration - Reject unusable input before any AI call
    2. Request questions - Single call to the generation collaborator
    3. Check questions - Verify ids and kind/payload consistency

    Any step that records an error ends the run.

    Args:
        generator: Generation collaborator

    Returns:
        Uncompiled StateGraph
    """
    workflow = StateGraph(GenerationState)

    async def request_questions_node(state: GenerationState) -> dict:
        return await request_questions(state, generator)

    workflow.add_node("check_configuration", check_configuration)
    workflow.add_node("request_questions", request_questions_node)
    workflow.add_node("check_questions", check_questions)

    workflow.set_entry_point("check_configuration")

    workflow.add_conditional_edges(
        "check_configuration",
        route_on_error,
        {"continue": "request_questions", "failed": END},
    )
    workflow.add_conditional_edges(
        "request_questions",
        route_on_error,
        {"continue": "check_questions", "failed": END},
    )
    workflow.add_edge("check_questions", END)

    return workflow


def create_grading_workflow(grader: AnswerGrader) -> StateGraph:
    """
    Create the LangGraph workflow for grading.

    The workflow follows this structure:
    1. Reconcile answers - One answer per question, in question order
    2. Request grading - Single call to the grading collaborator
    3. Check grading - Order, coverage and score totals

    Args:
        grader: Grading collaborator

    Returns:
        Uncompiled StateGraph
    """
    workflow = StateGraph(GradingState)

    async def request_grading_node(state: GradingState) -> dict:
        return await request_grading(state, grader)

    workflow.add_node("reconcile_answers", reconcile_answers)
    workflow.add_node("request_grading", request_grading_node)
    workflow.add_node("check_grading", check_grading)

    workflow.set_entry_point("reconcile_answers")
    workflow.add_edge("reconcile_answers", "request_grading")

    workflow.add_conditional_edges(
        "request_grading",
        route_on_error,
        {"continue": "check_grading", "failed": END},
    )
    workflow.add_edge("check_grading", END)

    return workflow


def compile_generation_workflow(generator: QuestionGenerator):
    """Compile the generation workflow, ready for ``ainvoke``."""
    return create_generation_workflow(generator).compile()


def compile_grading_workflow(grader: AnswerGrader):
    """Compile the grading workflow, ready for ``ainvoke``."""
    return create_grading_workflow(grader).compile()
