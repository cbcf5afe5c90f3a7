"""
PR Monitor component.

Drives the review pipeline for one webhook delivery: classify the event,
fetch the changed files, analyze them and publish the results. Every external
call failure is contained here; nothing propagates back to the webhook.
"""

import asyncio
from typing import Any, List, Optional

from app.analyzers.code_analyzer import CodeAnalyzer
from app.config import Settings
from app.exceptions import UpstreamError
from app.models.api_response import PipelineReport
from app.models.error import ErrorRecord
from app.models.file_change import ChangedFile
from app.models.pr_event import ActionTarget
from app.services.comment_publisher import CommentPublisher
from app.services.diff_fetcher import DiffFetcher
from app.services.event_classifier import classify
from app.utils.logging import (
    get_logger,
    log_error_with_context,
    log_phase_transition,
    log_pr_event,
)
from app.utils.metrics import MetricsCollector

logger = get_logger(__name__)


class PRMonitor:
    """Runs the fetch / analyze / publish fan-out for pull request events."""

    def __init__(
        self,
        settings: Settings,
        diff_fetcher: DiffFetcher,
        analyzer: CodeAnalyzer,
        publisher: CommentPublisher,
    ):
        """
        Initialize the PR Monitor.

        Args:
            settings: Application settings
            diff_fetcher: Lists the changed files of a PR
            analyzer: Produces review text
            publisher: Posts comments back to GitHub
        """
        self.settings = settings
        self.diff_fetcher = diff_fetcher
        self.analyzer = analyzer
        self.publisher = publisher

    async def handle_event(
        self,
        payload: Any,
        delivery_id: Optional[str] = None,
    ) -> Optional[PipelineReport]:
        """
        Classify a webhook body and process it if it is actionable.

        Args:
            payload: Decoded webhook body
            delivery_id: GitHub delivery id, for log correlation

        Returns:
            PipelineReport, or None when the event was ignored
        """
        target = classify(payload)
        if target is None:
            return None
        return await self.process_pr_event(target, delivery_id=delivery_id)

    async def process_pr_event(
        self,
        target: ActionTarget,
        delivery_id: Optional[str] = None,
    ) -> PipelineReport:
        """
        Review a pull request and publish the results.

        Args:
            target: Repository and PR number to review
            delivery_id: GitHub delivery id, for log correlation

        Returns:
            PipelineReport describing what was published and what failed
        """
        log = logger.with_context(repo=target.repo, pr_number=target.pr_number)
        if delivery_id:
            log = log.with_context(delivery_id=delivery_id)
        log_pr_event(log, target.repo, target.pr_number, target.action)

        metrics = MetricsCollector(target.repo, target.pr_number, delivery_id)
        metrics.start()
        report = PipelineReport(repo=target.repo, pr_number=target.pr_number)

        log_phase_transition(log, target.pr_number, "fetch_files", "started")
        try:
            files = await self.diff_fetcher.fetch_changed_files(
                target.repo, target.pr_number, metrics=metrics
            )
        except UpstreamError as e:
            log_error_with_context(log, f"Failed to fetch changed files: {e}", e, phase="fetch_files")
            report.errors.append(self._error_record("fetch_files", e))
            metrics.complete(status="failed")
            report.degradations = list(metrics.degradations)
            return report
        log_phase_transition(log, target.pr_number, "fetch_files", "completed", files=len(files))

        reviewable = [f for f in files if f.has_patch]
        metrics.record_files(total=len(files), skipped=len(files) - len(reviewable))
        report.files_total = len(files)
        report.files_skipped = len(files) - len(reviewable)

        if self.settings.analysis_mode == "commit":
            await self._run_commit_analysis(target, reviewable, report, metrics, log)
        else:
            await asyncio.gather(
                *(self._review_file(target, f, report, metrics, log) for f in reviewable)
            )

        report.degradations = list(metrics.degradations)
        metrics.complete(status="completed" if not report.errors else "partial")

        if report.errors:
            log.warning(
                f"Partial failure: {report.comments_published}/{len(reviewable)} comments published",
                extra={"failed_items": len(report.errors)}
            )
        return report

    async def _review_file(
        self,
        target: ActionTarget,
        changed: ChangedFile,
        report: PipelineReport,
        metrics: MetricsCollector,
        log,
    ) -> None:
        """Analyze and publish one file; failures stay inside this file's task."""
        file_log = log.with_context(file=changed.filename)
        file_log.info(
            f"Reviewing {changed.filename}",
            extra={"status": changed.status, "additions": changed.additions, "deletions": changed.deletions}
        )

        try:
            review = await self.analyzer.analyze_file(changed.filename, changed.patch, metrics=metrics)
        except Exception as e:
            log_error_with_context(file_log, f"Analysis failed for {changed.filename}: {e}", e, phase="analyze")
            metrics.record_analysis_failure()
            report.errors.append(self._error_record("analyze", e, changed.filename))
            return

        try:
            outcome = await self.publisher.publish_comment(
                target.repo, target.pr_number, changed.filename, review, metrics=metrics
            )
        except Exception as e:
            log_error_with_context(file_log, f"Publishing failed for {changed.filename}: {e}", e, phase="publish")
            metrics.record_publish_failure()
            report.publish_failures += 1
            report.errors.append(self._error_record("publish", e, changed.filename))
            return

        if outcome.success:
            metrics.record_published()
            report.comments_published += 1
        else:
            metrics.record_publish_failure()
            report.publish_failures += 1

    async def _run_commit_analysis(
        self,
        target: ActionTarget,
        reviewable: List[ChangedFile],
        report: PipelineReport,
        metrics: MetricsCollector,
        log,
    ) -> None:
        """Analyze the whole change set at once and publish a single comment."""
        if not reviewable:
            log.info("No files with a patch, skipping commit analysis")
            return

        filenames = [f.filename for f in reviewable]
        try:
            analysis = await self.analyzer.analyze_commit(filenames, metrics=metrics)
        except Exception as e:
            log_error_with_context(log, f"Commit analysis failed: {e}", e, phase="analyze")
            metrics.record_analysis_failure()
            report.errors.append(self._error_record("analyze", e))
            return

        log.info(f"AI generated commit message: {analysis.commit_message}")
        body = self.publisher.format_commit_analysis(analysis)
        try:
            outcome = await self.publisher.post_issue_comment(
                target.repo, target.pr_number, body, metrics=metrics
            )
        except Exception as e:
            log_error_with_context(log, f"Publishing commit analysis failed: {e}", e, phase="publish")
            metrics.record_publish_failure()
            report.publish_failures += 1
            report.errors.append(self._error_record("publish", e))
            return

        if outcome.success:
            metrics.record_published()
            report.comments_published += 1
        else:
            metrics.record_publish_failure()
            report.publish_failures += 1

    @staticmethod
    def _error_record(phase: str, error: Exception, filename: Optional[str] = None) -> ErrorRecord:
        return ErrorRecord(
            phase=phase,
            error_type=type(error).__name__,
            message=str(error),
            filename=filename,
        )
