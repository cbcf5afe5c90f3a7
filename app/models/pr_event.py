"""Pull request event data models."""

from pydantic import BaseModel


class ActionTarget(BaseModel):
    """Pull request a webhook delivery asks us to review."""

    repo: str  # 'owner/repo'
    pr_number: int
    action: str  # 'opened', 'synchronize'
