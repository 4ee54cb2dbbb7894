"""Orchestrators wrapping the generation and grading collaborators."""

from .generation import GenerationOrchestrator
from .grading import GradingOrchestrator

__all__ = ["GenerationOrchestrator", "GradingOrchestrator"]
