"""Error tracking data models."""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


class ErrorRecord(BaseModel):
    """Error record for a failed per-file or per-fetch operation."""

    phase: str  # 'fetch_files', 'analyze', 'publish'
    error_type: str
    message: str
    filename: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
