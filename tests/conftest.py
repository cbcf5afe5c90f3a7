"""Shared fixtures for the unit tests."""

import json
from typing import Callable, List, Optional

import httpx
import pytest
from openai import AsyncOpenAI

from app.config import Settings
from app.services.github_client import create_github_client


@pytest.fixture
def settings() -> Settings:
    """Settings with test credentials and no .env lookup."""
    return Settings(
        github_token="gh-test-token",
        openai_api_key="sk-test-key",
        _env_file=None,
    )


class GitHubStub:
    """
    Records GitHub requests and answers them from canned responses.

    `files` is what the files listing returns (any JSON value, or raw bytes);
    `comment_status` is the status returned for comment posts.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.files = []
        self.comment_status = 201
        self.fail_on: Callable[[httpx.Request], bool] = lambda request: False
        self.failure: Callable[[httpx.Request], Exception] = (
            lambda request: httpx.ConnectError("connection refused", request=request)
        )

    @property
    def comment_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def comment_bodies(self) -> List[str]:
        return [json.loads(r.content)["body"] for r in self.comment_requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_on(request):
            raise self.failure(request)

        if request.method == "GET" and request.url.path.endswith("/files"):
            if isinstance(self.files, bytes):
                return httpx.Response(200, content=self.files)
            return httpx.Response(200, json=self.files)

        if request.method == "POST" and request.url.path.endswith("/comments"):
            return httpx.Response(self.comment_status, json={"id": len(self.requests)})

        return httpx.Response(404, json={"message": "Not Found"})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def github_stub() -> GitHubStub:
    return GitHubStub()


@pytest.fixture
def github_client(settings, github_stub):
    return create_github_client(settings, transport=github_stub.transport())


def chat_completion(content):
    """A chat completion body as the API returns it."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4",
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": "stop",
        }],
    }


class OpenAIStub:
    """
    Answers chat completion requests from a canned response.

    `body` is sent as JSON unless it is bytes, in which case it is sent raw
    with `content_type`. `failure`, when set, is raised instead of answering.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status = 200
        self.body = chat_completion("Looks fine.")
        self.content_type = "application/json"
        self.failure: Optional[Callable[[httpx.Request], Exception]] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.failure:
            raise self.failure(request)

        if isinstance(self.body, bytes):
            return httpx.Response(
                self.status, content=self.body, headers={"content-type": self.content_type}
            )
        return httpx.Response(self.status, json=self.body)

    def reply(self, content) -> None:
        """Answer with a well-formed completion carrying `content`."""
        self.body = chat_completion(content)

    def client(self, settings: Settings) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            max_retries=0,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(self.handler)),
        )


@pytest.fixture
def openai_stub() -> OpenAIStub:
    return OpenAIStub()
