"""Data models for the GitHub PR review webhook service."""

from .analysis import CommitAnalysis, CommitAnalysisRequest, CommitAnalysisResponse
from .api_response import PipelineReport, PublishOutcome
from .error import ErrorRecord
from .file_change import ChangedFile
from .pr_event import ActionTarget

__all__ = [
    # PR event models
    "ActionTarget",
    # File change models
    "ChangedFile",
    # Analysis models
    "CommitAnalysis",
    "CommitAnalysisRequest",
    "CommitAnalysisResponse",
    # Error models
    "ErrorRecord",
    # API response models
    "PublishOutcome",
    "PipelineReport",
]
