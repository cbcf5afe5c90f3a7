"""File change data models."""

from typing import Optional

from pydantic import BaseModel


class ChangedFile(BaseModel):
    """One entry of the pull request files listing."""

    filename: str
    patch: Optional[str] = None
    status: Optional[str] = None
    additions: Optional[int] = None
    deletions: Optional[int] = None

    @property
    def has_patch(self) -> bool:
        """Binary and rename-only files come back without a patch."""
        return bool(self.patch)
