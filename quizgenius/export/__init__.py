"""Export functionality for quiz result reports."""

from .docx_generator import export_result_to_docx

__all__ = ["export_result_to_docx"]
