"""AI agents built on the resilient completion client."""

from .analyst import analyze_results
from .explainer import explain
from .generator import generate_questions

__all__ = [
    "explain",
    "generate_questions",
    "analyze_results",
]
