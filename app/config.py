"""
Application configuration management.
"""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Constructed once at startup and handed to every component that needs a
    credential or a tunable; nothing else reads the environment.
    """

    # GitHub
    github_token: str
    github_api_url: str = "https://api.github.com"
    github_user_agent: str = "pr-review-webhook"

    # OpenAI
    openai_api_key: str
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4"
    openai_max_tokens: int = 500
    openai_temperature: float = 0.3

    # Pipeline
    analysis_mode: Literal["review", "commit"] = "review"
    request_timeout_seconds: float = 30.0
    process_in_background: bool = True

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Application
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
