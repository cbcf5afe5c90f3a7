"""
Event Classifier component.

Decides whether a decoded webhook body is a pull request event worth
reviewing. The body is schema-less: anything unexpected is a no-op.
"""

from typing import Any, Optional

from app.models.pr_event import ActionTarget
from app.utils.logging import get_logger

logger = get_logger(__name__)

ACTIONABLE_ACTIONS = frozenset({"opened", "synchronize"})


def _get(payload: Any, key: str) -> Any:
    if isinstance(payload, dict):
        return payload.get(key)
    return None


def classify(event: Any) -> Optional[ActionTarget]:
    """
    Extract the review target from a webhook body.

    Args:
        event: Decoded JSON body, of any shape

    Returns:
        ActionTarget for 'opened'/'synchronize' events that carry a PR number
        and repository name, None otherwise
    """
    action = _get(event, "action")
    if not isinstance(action, str) or action not in ACTIONABLE_ACTIONS:
        logger.debug(f"Ignoring webhook action: {action!r}")
        return None

    pr_number = _get(_get(event, "pull_request"), "number")
    repo = _get(_get(event, "repository"), "full_name")

    # bool is an int subclass; a `true` PR number is not a PR number
    if not isinstance(pr_number, int) or isinstance(pr_number, bool):
        logger.info(f"Ignoring {action} event without a usable pull_request.number")
        return None
    if not isinstance(repo, str) or not repo:
        logger.info(f"Ignoring {action} event without a usable repository.full_name")
        return None

    return ActionTarget(repo=repo, pr_number=pr_number, action=action)
