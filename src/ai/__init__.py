"""
AI collaborators - OpenAI-backed diagnostic generation and answer grading.

Both fail loudly (GenerationError / GradingError); neither invents a result.
"""

from src.ai.diagnostic_generator import OpenAIDiagnosticGenerator
from src.ai.answer_grader import OpenAIAnswerGrader

__all__ = [
    "OpenAIDiagnosticGenerator",
    "OpenAIAnswerGrader",
]
