"""
Webhook endpoint for GitHub pull request events.
"""

from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, Request
from fastapi.responses import PlainTextResponse

from app.config import Settings
from app.services.pr_monitor import PRMonitor
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

WEBHOOK_ACK = "Webhook received"


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_pr_monitor(request: Request) -> PRMonitor:
    return request.app.state.pr_monitor


async def process_pr_event_async(
    pr_monitor: PRMonitor,
    payload: Any,
    delivery_id: Optional[str] = None,
) -> None:
    """
    Run the review pipeline, logging anything it lets escape.

    Args:
        pr_monitor: Pipeline driver
        payload: Decoded webhook body
        delivery_id: GitHub delivery id
    """
    try:
        await pr_monitor.handle_event(payload, delivery_id=delivery_id)
    except Exception as e:
        logger.error(
            f"Error processing webhook delivery: {e}",
            extra={"delivery_id": delivery_id},
            exc_info=True
        )


@router.post("/webhook", response_class=PlainTextResponse)
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
    pr_monitor: PRMonitor = Depends(get_pr_monitor),
    x_github_event: Optional[str] = Header(None, alias="X-GitHub-Event"),
    x_github_delivery: Optional[str] = Header(None, alias="X-GitHub-Delivery"),
) -> PlainTextResponse:
    """
    Receive a GitHub webhook delivery.

    Every delivery is acknowledged with 200 OK, whatever its content and
    whatever happens downstream. Actionable pull request events are reviewed
    either in the background (default) or before the acknowledgment is sent,
    depending on `process_in_background`.

    Args:
        request: FastAPI request object
        background_tasks: FastAPI background tasks
        settings: Application settings
        pr_monitor: Pipeline driver
        x_github_event: Event type header, logged only
        x_github_delivery: Delivery id header, logged only

    Returns:
        Plain text acknowledgment
    """
    logger.info(
        "Received GitHub webhook event",
        extra={"event_type": x_github_event, "delivery_id": x_github_delivery}
    )

    try:
        payload: Any = await request.json()
    except ValueError:
        logger.warning("Webhook body is not valid JSON, ignoring", extra={"delivery_id": x_github_delivery})
        payload = None

    if payload is not None:
        if settings.process_in_background:
            background_tasks.add_task(process_pr_event_async, pr_monitor, payload, x_github_delivery)
        else:
            await process_pr_event_async(pr_monitor, payload, x_github_delivery)

    return PlainTextResponse(WEBHOOK_ACK)
