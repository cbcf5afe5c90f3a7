"""
FastAPI application entry point.
"""

import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from pydantic import ValidationError

from app.analyzers.code_analyzer import CodeAnalyzer, LLMClient
from app.api import commits, webhooks
from app.config import Settings
from app.services.comment_publisher import CommentPublisher
from app.services.diff_fetcher import DiffFetcher
from app.services.github_client import create_github_client
from app.services.pr_monitor import PRMonitor
from app.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

VERSION = "0.1.0"


def create_app(
    settings: Settings,
    github_transport: Optional[httpx.AsyncBaseTransport] = None,
    llm_client: Optional[LLMClient] = None,
) -> FastAPI:
    """
    Build the application and wire its components.

    Args:
        settings: Application settings, loaded once by the caller
        github_transport: Optional httpx transport for GitHub calls (tests)
        llm_client: Optional LLM client (tests)

    Returns:
        Configured FastAPI application
    """
    github_client = create_github_client(settings, transport=github_transport)
    analyzer = CodeAnalyzer(settings, llm_client=llm_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Log startup and close the shared upstream clients on shutdown."""
        logger.info(
            f"Starting GitHub PR Review Webhook in {settings.analysis_mode} mode",
            extra={"model": settings.openai_model}
        )

        yield

        logger.info("Shutting down GitHub PR Review Webhook")
        await github_client.aclose()
        await analyzer.llm_client.close()

    app = FastAPI(
        title="GitHub PR Review Webhook",
        description="Reviews GitHub pull requests with an OpenAI model and comments the results",
        version=VERSION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.github_client = github_client
    app.state.analyzer = analyzer
    app.state.pr_monitor = PRMonitor(
        settings,
        diff_fetcher=DiffFetcher(settings, http_client=github_client),
        analyzer=analyzer,
        publisher=CommentPublisher(settings, http_client=github_client),
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint for container orchestration."""
        return {"status": "healthy", "version": VERSION, "analysis_mode": settings.analysis_mode}

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "GitHub PR Review Webhook API",
            "version": VERSION,
            "docs": "/docs"
        }

    app.include_router(webhooks.router)
    app.include_router(commits.router)

    return app


def load_settings() -> Settings:
    """
    Load settings from the environment, exiting if a required one is missing.

    Returns:
        Settings
    """
    try:
        return Settings()
    except ValidationError as e:
        missing = [".".join(str(part) for part in err["loc"]).upper() for err in e.errors()]
        setup_logging("INFO")
        logger.critical(f"Invalid or missing configuration: {', '.join(missing)}")
        sys.exit(1)


def main() -> None:
    """Console entry point: serve the webhook on the configured host and port."""
    settings = load_settings()
    setup_logging(settings.log_level)

    app = create_app(settings)
    logger.info(f"GitHub webhook listener running on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    main()
