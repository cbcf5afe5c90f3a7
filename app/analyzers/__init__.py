"""Code analyzers package."""

from app.analyzers.code_analyzer import (
    CodeAnalyzer,
    LLMClient,
    NO_COMMIT_MESSAGE,
    NO_SUGGESTIONS,
    parse_commit_analysis,
)

__all__ = [
    "CodeAnalyzer",
    "LLMClient",
    "NO_COMMIT_MESSAGE",
    "NO_SUGGESTIONS",
    "parse_commit_analysis",
]
