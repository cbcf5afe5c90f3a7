"""
Comment Publisher component.

Posts review comments to GitHub pull requests as issue comments. Each
publish is a single attempt; a rejected comment is logged and reported, never
retried.
"""

from typing import Optional

import httpx

from app.config import Settings
from app.exceptions import UpstreamError
from app.models.analysis import CommitAnalysis
from app.models.api_response import PublishOutcome
from app.services.github_client import create_github_client
from app.utils.logging import get_logger
from app.utils.metrics import MetricsCollector, track_api_call

logger = get_logger(__name__)


class CommentPublisher:
    """Publishes review comments to GitHub pull requests."""

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None):
        """
        Initialize the Comment Publisher.

        Args:
            settings: Application settings
            http_client: Optional shared GitHub client (created from settings if omitted)
        """
        self.settings = settings
        self.http_client = http_client or create_github_client(settings)

    async def publish_comment(
        self,
        repo: str,
        pr_number: int,
        filename: str,
        comment_text: str,
        metrics: Optional[MetricsCollector] = None,
    ) -> PublishOutcome:
        """
        Publish the review of one file.

        Args:
            repo: Repository full name ('owner/repo')
            pr_number: Pull request number
            filename: File the review is about
            comment_text: Review text
            metrics: Optional collector for latency

        Returns:
            PublishOutcome with the status and body GitHub returned

        Raises:
            UpstreamError: If the HTTP call itself fails
        """
        body = self._format_file_comment(filename, comment_text)
        return await self.post_issue_comment(repo, pr_number, body, metrics=metrics, filename=filename)

    async def post_issue_comment(
        self,
        repo: str,
        pr_number: int,
        body: str,
        metrics: Optional[MetricsCollector] = None,
        filename: Optional[str] = None,
    ) -> PublishOutcome:
        """
        Post an already formatted comment to the PR conversation.

        Args:
            repo: Repository full name
            pr_number: Pull request number
            body: Markdown comment body
            metrics: Optional collector for latency
            filename: File the comment concerns, for log context only

        Returns:
            PublishOutcome

        Raises:
            UpstreamError: If the HTTP call itself fails
        """
        path = f"/repos/{repo}/issues/{pr_number}/comments"
        log = logger.with_context(repo=repo, pr_number=pr_number)
        if filename:
            log = log.with_context(file=filename)

        try:
            async with track_api_call(metrics, "github", log, path, "POST"):
                response = await self.http_client.post(path, json={"body": body})
        except httpx.RequestError as e:
            raise UpstreamError("github", "post_issue_comment", str(e)) from e

        outcome = PublishOutcome(status_code=response.status_code, body=response.text)

        log.debug(
            f"GitHub API response: status {outcome.status_code}",
            extra={"status_code": outcome.status_code, "response_body": outcome.body}
        )
        if not outcome.success:
            log.error(
                f"GitHub rejected comment with status {outcome.status_code}",
                extra={"status_code": outcome.status_code, "response_body": outcome.body}
            )

        return outcome

    def _format_file_comment(self, filename: str, comment_text: str) -> str:
        return f"🔍 AI Code Review for `{filename}`:\n{comment_text}"

    def format_commit_analysis(self, analysis: CommitAnalysis) -> str:
        """
        Format a commit analysis for display on the PR.

        Args:
            analysis: Commit analysis to format

        Returns:
            Markdown comment body; empty sections are left out
        """
        parts = [
            "📝 **Suggested commit message**",
            "",
            analysis.commit_message,
        ]

        if analysis.docstrings:
            parts.extend(["", "**Missing docstrings:**"])
            parts.extend(analysis.docstrings)

        if analysis.test_cases:
            parts.extend(["", "**Suggested test cases:**"])
            parts.extend(analysis.test_cases)

        return "\n".join(parts)
