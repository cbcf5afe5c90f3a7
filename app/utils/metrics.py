"""
Metrics collection and emission for observability.

This module provides metrics tracking for:
- Pipeline execution time per webhook delivery
- Files seen, skipped, analyzed and commented on
- API call counts and latency per upstream service
- Shape-mismatch degradations (lenient parsing that fell back to a default)
"""

import time
from datetime import datetime, timezone
from typing import Optional, Dict, Any, List
from contextlib import asynccontextmanager

from app.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class MetricsCollector:
    """
    Collects metrics while one webhook delivery is processed.

    Tracks:
    - Execution start/end time
    - File counts (total, skipped, published, failed)
    - API call counts and latency
    - Degradations
    """

    def __init__(self, repo: str, pr_number: int, delivery_id: Optional[str] = None):
        """
        Initialize metrics collector.

        Args:
            repo: Repository full name
            pr_number: Pull request number
            delivery_id: GitHub delivery id, when the webhook carried one
        """
        self.repo = repo
        self.pr_number = pr_number
        self.delivery_id = delivery_id

        # Timing metrics
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.duration_ms: Optional[int] = None

        # Pipeline metrics
        self.files_total: int = 0
        self.files_skipped: int = 0
        self.comments_published: int = 0
        self.publish_failures: int = 0
        self.analysis_failures: int = 0
        self.degradations: List[str] = []

        # API metrics
        self.api_calls: Dict[str, int] = {}
        self.api_latencies: Dict[str, list[float]] = {}

        self.status: str = "running"

    def start(self) -> None:
        """Mark pipeline start."""
        self.start_time = datetime.now(timezone.utc)
        self.status = "running"

    def complete(self, status: str = "completed") -> None:
        """
        Mark pipeline completion and log the summary.

        Args:
            status: Final status ('completed', 'failed')
        """
        self.end_time = datetime.now(timezone.utc)
        self.status = status

        if self.start_time:
            duration = (self.end_time - self.start_time).total_seconds()
            self.duration_ms = int(duration * 1000)

        logger.info(
            f"Pipeline {status} for {self.repo}#{self.pr_number}",
            extra=self.get_metrics_summary()
        )

    def record_files(self, total: int, skipped: int) -> None:
        self.files_total = total
        self.files_skipped = skipped

    def record_published(self) -> None:
        self.comments_published += 1

    def record_publish_failure(self) -> None:
        self.publish_failures += 1

    def record_analysis_failure(self) -> None:
        self.analysis_failures += 1

    def record_degradation(self, name: str) -> None:
        """
        Record a lenient-parse fallback.

        Args:
            name: Diagnostic name, e.g. 'diff_fetch.shape_mismatch'
        """
        self.degradations.append(name)

    def record_api_call(self, service: str, duration_ms: float) -> None:
        """
        Record API call and latency.

        Args:
            service: Service name ('github', 'openai')
            duration_ms: Call duration in milliseconds
        """
        self.api_calls[service] = self.api_calls.get(service, 0) + 1
        self.api_latencies.setdefault(service, []).append(duration_ms)

    def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected metrics.

        Returns:
            Dictionary of metrics
        """
        summary = {
            "repo": self.repo,
            "pr_number": self.pr_number,
            "delivery_id": self.delivery_id,
            "status": self.status,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_ms": self.duration_ms,
            "files_total": self.files_total,
            "files_skipped": self.files_skipped,
            "comments_published": self.comments_published,
            "publish_failures": self.publish_failures,
            "analysis_failures": self.analysis_failures,
            "degradations": list(self.degradations),
            "api_calls": dict(self.api_calls),
        }

        if self.api_latencies:
            latency_stats = {}
            for service, latencies in self.api_latencies.items():
                if latencies:
                    latency_stats[service] = {
                        "count": len(latencies),
                        "min_ms": round(min(latencies), 2),
                        "max_ms": round(max(latencies), 2),
                        "avg_ms": round(sum(latencies) / len(latencies), 2),
                    }
            summary["api_latencies"] = latency_stats

        return summary


@asynccontextmanager
async def track_api_call(
    metrics_collector: Optional[MetricsCollector],
    service: str,
    logger_adapter,
    endpoint: str = "",
    method: str = "",
):
    """
    Context manager to time an outbound API call.

    Usage:
        async with track_api_call(metrics, "github", logger, url, "GET"):
            response = await client.get(url)

    Args:
        metrics_collector: Metrics collector (optional)
        service: Service name
        logger_adapter: Logger for logging API calls
        endpoint: Endpoint being called
        method: HTTP method

    Yields:
        None
    """
    start_time = time.perf_counter()
    error = None

    try:
        yield
    except Exception as e:
        error = e
        raise
    finally:
        duration_ms = (time.perf_counter() - start_time) * 1000

        if metrics_collector:
            metrics_collector.record_api_call(service, duration_ms)

        log_api_call(
            logger_adapter,
            service=service,
            endpoint=endpoint,
            method=method,
            duration_ms=duration_ms,
            error=str(error) if error else None
        )


def emit_metric(metric_name: str, value: float, **tags: Any) -> None:
    """
    Emit a metric as a structured log record.

    Args:
        metric_name: Metric name
        value: Metric value
        **tags: Metric tags/labels
    """
    logger.info(
        f"Metric: {metric_name}",
        extra={
            "metric_name": metric_name,
            "metric_value": value,
            "metric_tags": tags,
        }
    )
