"""
Utility modules for the PR review webhook service.
"""

from app.utils.logging import (
    get_logger,
    setup_logging,
    log_pr_event,
    log_phase_transition,
    log_api_call,
    log_error_with_context,
)
from app.utils.metrics import (
    MetricsCollector,
    track_api_call,
    emit_metric,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_pr_event",
    "log_phase_transition",
    "log_api_call",
    "log_error_with_context",
    "MetricsCollector",
    "track_api_call",
    "emit_metric",
]
