"""LangGraph workflows and state for generation and grading."""

# Note: Avoid importing workflow here to prevent circular imports
# Import directly from modules as needed:
# from quizgenius.graph.state import GenerationState, create_generation_state
# from quizgenius.graph.workflow import compile_generation_workflow
