"""Business logic services package."""

from app.services.comment_publisher import CommentPublisher
from app.services.diff_fetcher import DiffFetcher
from app.services.event_classifier import classify
from app.services.github_client import create_github_client
from app.services.pr_monitor import PRMonitor

__all__ = [
    'CommentPublisher',
    'DiffFetcher',
    'classify',
    'create_github_client',
    'PRMonitor',
]
