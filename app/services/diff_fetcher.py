"""
Diff Fetcher component.

Retrieves the changed files of a GitHub pull request, together with each
file's unified diff, from the REST API.
"""

from typing import Any, List, Optional

import httpx

from app.config import Settings
from app.exceptions import UpstreamError
from app.models.file_change import ChangedFile
from app.services.github_client import create_github_client
from app.utils.logging import get_logger
from app.utils.metrics import MetricsCollector, emit_metric, track_api_call

logger = get_logger(__name__)

SHAPE_MISMATCH_METRIC = "diff_fetch.shape_mismatch"


class DiffFetcher:
    """
    Lists the files a pull request touches.

    The response is parsed leniently: a body that is not a JSON array, for
    example the error object GitHub returns with a 404, yields an empty list
    rather than an error. Only transport failures raise.
    """

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the Diff Fetcher.

        Args:
            settings: Application settings
            http_client: Optional shared GitHub client (created from settings if omitted)
        """
        self.settings = settings
        self.http_client = http_client or create_github_client(settings)

    async def fetch_changed_files(
        self,
        repo: str,
        pr_number: int,
        metrics: Optional[MetricsCollector] = None,
    ) -> List[ChangedFile]:
        """
        Fetch the changed files of a pull request.

        Args:
            repo: Repository full name ('owner/repo')
            pr_number: Pull request number
            metrics: Optional collector for latency and degradations

        Returns:
            Changed files in the order GitHub lists them

        Raises:
            UpstreamError: If the HTTP call itself fails
        """
        path = f"/repos/{repo}/pulls/{pr_number}/files"
        log = logger.with_context(repo=repo, pr_number=pr_number)

        try:
            async with track_api_call(metrics, "github", log, path, "GET"):
                response = await self.http_client.get(path)
        except httpx.RequestError as e:
            raise UpstreamError("github", "fetch_changed_files", str(e)) from e

        if not response.is_success:
            log.warning(
                f"GitHub returned {response.status_code} listing files",
                extra={"status_code": response.status_code}
            )

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not isinstance(payload, list):
            self._degrade(log, metrics, f"expected a JSON array, got {type(payload).__name__}")
            return []

        files = []
        for entry in payload:
            changed = self._parse_entry(entry)
            if changed is None:
                self._degrade(log, metrics, "dropped file entry without a filename")
                continue
            files.append(changed)

        log.info(f"Fetched {len(files)} changed files")
        return files

    @staticmethod
    def _parse_entry(entry: Any) -> Optional[ChangedFile]:
        if not isinstance(entry, dict):
            return None
        filename = entry.get("filename")
        if not isinstance(filename, str) or not filename:
            return None

        patch = entry.get("patch")
        status = entry.get("status")
        additions = entry.get("additions")
        deletions = entry.get("deletions")
        return ChangedFile(
            filename=filename,
            patch=patch if isinstance(patch, str) else None,
            status=status if isinstance(status, str) else None,
            additions=additions if isinstance(additions, int) and not isinstance(additions, bool) else None,
            deletions=deletions if isinstance(deletions, int) and not isinstance(deletions, bool) else None,
        )

    @staticmethod
    def _degrade(log, metrics: Optional[MetricsCollector], reason: str) -> None:
        log.warning(f"Unexpected files listing shape: {reason}")
        emit_metric(SHAPE_MISMATCH_METRIC, 1, reason=reason)
        if metrics:
            metrics.record_degradation(SHAPE_MISMATCH_METRIC)
