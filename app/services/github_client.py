"""
Shared GitHub REST plumbing for the diff fetcher and the comment publisher.
"""

from typing import Dict, Optional

import httpx

from app.config import Settings


def github_headers(settings: Settings) -> Dict[str, str]:
    """Headers every GitHub REST call carries."""
    return {
        "Authorization": f"token {settings.github_token}",
        "User-Agent": settings.github_user_agent,
        "Accept": "application/vnd.github.v3+json",
    }


def create_github_client(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Build the AsyncClient used for all GitHub calls.

    Args:
        settings: Application settings (token, base URL, timeout)
        transport: Optional transport override, used by tests

    Returns:
        Configured httpx.AsyncClient; the caller owns closing it
    """
    return httpx.AsyncClient(
        base_url=settings.github_api_url,
        headers=github_headers(settings),
        timeout=settings.request_timeout_seconds,
        transport=transport,
    )
