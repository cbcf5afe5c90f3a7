"""
Unit tests for Code Analyzer component.
"""

import json

import httpx
import openai
import pytest
from unittest.mock import AsyncMock, MagicMock

from app.analyzers.code_analyzer import (
    NO_COMMIT_MESSAGE,
    NO_SUGGESTIONS,
    CodeAnalyzer,
    LLMClient,
    extract_message_content,
    parse_commit_analysis,
)
from app.exceptions import UpstreamError
from app.utils.metrics import MetricsCollector


def completion(content):
    """Build an object shaped like a chat completion response."""
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=completion("Looks fine."))
    return client


@pytest.fixture
def llm_client(settings, openai_client):
    return LLMClient(settings, client=openai_client)


@pytest.fixture
def code_analyzer(settings, llm_client):
    return CodeAnalyzer(settings, llm_client=llm_client)


class TestParseCommitAnalysis:
    """Positional splitting of commit-analysis completions."""

    def test_three_segments(self):
        result = parse_commit_analysis("msg\n\ndoc\n\ntest")

        assert result.commit_message == "msg"
        assert result.docstrings == ["doc"]
        assert result.test_cases == ["test"]

    def test_no_separators(self):
        result = parse_commit_analysis("Refactor the parser\nand its tests")

        assert result.commit_message == "Refactor the parser\nand its tests"
        assert result.docstrings == []
        assert result.test_cases == []

    def test_two_segments(self):
        result = parse_commit_analysis("msg\n\ndoc")

        assert result.commit_message == "msg"
        assert result.docstrings == ["doc"]
        assert result.test_cases == []

    def test_extra_blank_lines_stay_in_test_cases(self):
        result = parse_commit_analysis("msg\n\ndoc\n\ntest one\n\ntest two")

        assert result.test_cases == ["test one\n\ntest two"]

    def test_empty_text_uses_placeholder(self):
        result = parse_commit_analysis("")

        assert result.commit_message == NO_COMMIT_MESSAGE
        assert result.docstrings == []
        assert result.test_cases == []


class TestExtractMessageContent:
    """Lenient extraction of the first choice's content."""

    def test_content_present(self):
        assert extract_message_content(completion("text")) == "text"

    def test_no_choices(self):
        response = MagicMock()
        response.choices = []
        assert extract_message_content(response) is None

    def test_null_content(self):
        assert extract_message_content(completion(None)) is None

    def test_unexpected_object(self):
        assert extract_message_content(object()) is None


class TestLLMClient:
    """Test suite for LLMClient."""

    @pytest.mark.asyncio
    async def test_request_parameters(self, llm_client, openai_client):
        """Test that model, prompt, token budget and temperature come from settings."""
        await llm_client.complete("Review this")

        openai_client.chat.completions.create.assert_awaited_once_with(
            model="gpt-4",
            messages=[{"role": "user", "content": "Review this"}],
            max_tokens=500,
            temperature=0.3,
        )

    @pytest.mark.asyncio
    async def test_connection_error_raises_upstream_error(self, llm_client, openai_client):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        openai_client.chat.completions.create.side_effect = openai.APIConnectionError(request=request)

        with pytest.raises(UpstreamError) as exc_info:
            await llm_client.complete("prompt")

        assert exc_info.value.service == "openai"

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_error(self, llm_client, openai_client):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        openai_client.chat.completions.create.side_effect = openai.APITimeoutError(request=request)

        with pytest.raises(UpstreamError):
            await llm_client.complete("prompt")

    @pytest.mark.asyncio
    async def test_error_status_degrades_to_none(self, llm_client, openai_client):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(429, request=request, json={"error": {"message": "rate limited"}})
        openai_client.chat.completions.create.side_effect = openai.RateLimitError(
            "rate limited", response=response, body=None
        )
        metrics = MetricsCollector("acme/widgets", 42)

        assert await llm_client.complete("prompt", metrics=metrics) is None
        assert metrics.degradations == ["analysis.shape_mismatch"]


class TestCodeAnalyzer:
    """Test suite for CodeAnalyzer."""

    @pytest.mark.asyncio
    async def test_analyze_file_returns_content(self, code_analyzer, openai_client):
        openai_client.chat.completions.create.return_value = completion("  Possible overflow.\n")

        result = await code_analyzer.analyze_file("a.rs", "+let x = y + 1;")

        assert result == "Possible overflow."

    @pytest.mark.asyncio
    async def test_analyze_file_prompt_mentions_file_and_diff(self, code_analyzer, openai_client):
        await code_analyzer.analyze_file("src/auth.py", "+password = 'hunter2'")

        prompt = openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert "src/auth.py" in prompt
        assert "+password = 'hunter2'" in prompt
        assert "bugs" in prompt
        assert "Security" in prompt

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "   "])
    async def test_analyze_file_placeholder_without_content(self, code_analyzer, openai_client, content):
        openai_client.chat.completions.create.return_value = completion(content)

        assert await code_analyzer.analyze_file("a.rs", "diff") == NO_SUGGESTIONS

    @pytest.mark.asyncio
    async def test_analyze_file_placeholder_without_choices(self, code_analyzer, openai_client):
        response = MagicMock()
        response.choices = []
        openai_client.chat.completions.create.return_value = response

        assert await code_analyzer.analyze_file("a.rs", "diff") == "No suggestions found."

    @pytest.mark.asyncio
    async def test_analyze_commit(self, code_analyzer, openai_client):
        openai_client.chat.completions.create.return_value = completion("msg\n\ndoc\n\ntest")

        result = await code_analyzer.analyze_commit(["src/main.rs", "README.md"])

        assert result.commit_message == "msg"
        assert result.docstrings == ["doc"]
        assert result.test_cases == ["test"]
        prompt = openai_client.chat.completions.create.call_args.kwargs["messages"][0]["content"]
        assert "- src/main.rs" in prompt
        assert "- README.md" in prompt

    @pytest.mark.asyncio
    async def test_analyze_commit_without_content(self, code_analyzer, openai_client):
        openai_client.chat.completions.create.return_value = completion(None)

        result = await code_analyzer.analyze_commit(["a.py"])

        assert result.commit_message == NO_COMMIT_MESSAGE
        assert result.docstrings == []
        assert result.test_cases == []


class TestCompletionResponses:
    """The SDK's own response handling, driven over a mocked HTTP transport."""

    @pytest.fixture
    def analyzer(self, settings, openai_stub):
        return CodeAnalyzer(settings, llm_client=LLMClient(settings, client=openai_stub.client(settings)))

    @pytest.mark.asyncio
    async def test_valid_completion(self, analyzer, openai_stub):
        openai_stub.reply("  Check the bounds on line 3.\n")

        assert await analyzer.analyze_file("a.rs", "diff") == "Check the bounds on line 3."

        request = openai_stub.requests[0]
        assert request.url.path == "/v1/chat/completions"
        assert request.headers["Authorization"] == "Bearer sk-test-key"
        assert json.loads(request.content)["model"] == "gpt-4"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"choices": []}, {"choices": [{"message": {"content": None}}]}])
    async def test_unexpected_shape_uses_placeholder(self, analyzer, openai_stub, body):
        openai_stub.body = body

        assert await analyzer.analyze_file("a.rs", "diff") == NO_SUGGESTIONS

    @pytest.mark.asyncio
    async def test_non_json_body_uses_placeholder(self, analyzer, openai_stub):
        openai_stub.body = b"<html>Bad Gateway</html>"
        openai_stub.content_type = "text/html"

        assert await analyzer.analyze_file("a.rs", "diff") == NO_SUGGESTIONS

    @pytest.mark.asyncio
    async def test_malformed_json_body_uses_placeholder(self, analyzer, openai_stub):
        openai_stub.body = b"{not json"
        metrics = MetricsCollector("acme/widgets", 42)

        assert await analyzer.analyze_file("a.rs", "diff", metrics=metrics) == NO_SUGGESTIONS
        assert metrics.degradations == ["analysis.shape_mismatch"]

    @pytest.mark.asyncio
    async def test_malformed_json_body_in_commit_mode(self, analyzer, openai_stub):
        openai_stub.body = b"{not json"

        result = await analyzer.analyze_commit(["a.py"])

        assert result.commit_message == NO_COMMIT_MESSAGE
        assert result.docstrings == []
        assert result.test_cases == []

    @pytest.mark.asyncio
    async def test_rate_limited_uses_placeholder(self, analyzer, openai_stub):
        openai_stub.status = 429
        openai_stub.body = {"error": {"message": "Rate limit reached", "type": "requests"}}

        assert await analyzer.analyze_file("a.rs", "diff") == NO_SUGGESTIONS
        assert len(openai_stub.requests) == 1

    @pytest.mark.asyncio
    async def test_connection_failure_raises_upstream_error(self, analyzer, openai_stub):
        openai_stub.failure = lambda request: httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamError) as exc_info:
            await analyzer.analyze_file("a.rs", "diff")

        assert exc_info.value.service == "openai"

    @pytest.mark.asyncio
    async def test_timeout_raises_upstream_error(self, analyzer, openai_stub):
        openai_stub.failure = lambda request: httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamError):
            await analyzer.analyze_file("a.rs", "diff")
