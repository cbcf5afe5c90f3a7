"""
Data models for the analysis engine.

Per-file review mode produces a plain string per file; commit-analysis mode
produces a CommitAnalysis for the whole change set.
"""

from typing import List

from pydantic import BaseModel, Field


class CommitAnalysis(BaseModel):
    """Commit message, docstring and test-case suggestions for a change set."""

    commit_message: str
    docstrings: List[str] = Field(default_factory=list)
    test_cases: List[str] = Field(default_factory=list)


class CommitAnalysisRequest(BaseModel):
    """Body of a direct commit-analysis request."""

    repository: str = Field(..., description="Repository in 'owner/repo' form")
    changed_files: List[str] = Field(default_factory=list, description="Changed file paths")


class CommitAnalysisResponse(CommitAnalysis):
    """Body returned by the commit-analysis endpoint."""
