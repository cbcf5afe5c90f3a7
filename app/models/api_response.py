"""API response data models."""

from typing import List

from pydantic import BaseModel, Field

from app.models.error import ErrorRecord


class PublishOutcome(BaseModel):
    """Status and body returned by the comment-post call."""

    status_code: int
    body: str = ""

    @property
    def success(self) -> bool:
        return self.status_code == 201


class PipelineReport(BaseModel):
    """Summary of what one webhook delivery produced."""

    repo: str
    pr_number: int
    files_total: int = 0
    files_skipped: int = 0
    comments_published: int = 0
    publish_failures: int = 0
    errors: List[ErrorRecord] = Field(default_factory=list)
    degradations: List[str] = Field(default_factory=list)
