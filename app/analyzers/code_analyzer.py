"""
Code Analyzer component.

Turns pull request diffs into review text using an OpenAI chat completion
model. Two modes are supported:

- per-file review: one completion per changed file, returned verbatim
- commit analysis: one completion for the whole change set, split into a
  commit message, docstring suggestions and test-case suggestions
"""

from typing import Any, List, Optional

import openai
from openai import AsyncOpenAI

from app.config import Settings
from app.exceptions import UpstreamError
from app.models.analysis import CommitAnalysis
from app.utils.logging import get_logger
from app.utils.metrics import MetricsCollector, emit_metric, track_api_call

logger = get_logger(__name__)

NO_SUGGESTIONS = "No suggestions found."
NO_COMMIT_MESSAGE = "No commit message generated."
SHAPE_MISMATCH_METRIC = "analysis.shape_mismatch"


def parse_commit_analysis(text: str) -> CommitAnalysis:
    """
    Split a commit-analysis completion into its three parts.

    The text is cut at the first two blank-line boundaries; whatever follows
    the second one belongs to the test cases. Missing or blank parts fall back
    to a placeholder message or an empty list.

    Args:
        text: Raw completion text

    Returns:
        CommitAnalysis
    """
    segments = [segment.strip() for segment in text.split("\n\n", 2)]

    def segment(index: int) -> str:
        return segments[index] if index < len(segments) else ""

    commit_message = segment(0) or NO_COMMIT_MESSAGE
    docstrings = [segment(1)] if segment(1) else []
    test_cases = [segment(2)] if segment(2) else []

    return CommitAnalysis(
        commit_message=commit_message,
        docstrings=docstrings,
        test_cases=test_cases,
    )


def extract_message_content(response: Any) -> Optional[str]:
    """
    Pull the first choice's message content out of a completion response.

    Returns:
        The content, or None if the response does not have that shape
    """
    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, KeyError, TypeError):
        return None
    if not isinstance(content, str):
        return None
    return content


class LLMClient:
    """Wrapper for the OpenAI chat completions API."""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        """
        Initialize LLM client from settings.

        Args:
            settings: Application settings (key, base URL, model, sampling)
            client: Optional preconfigured AsyncOpenAI client
        """
        self.settings = settings
        self.model = settings.openai_model
        self.client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout_seconds,
            max_retries=0,
        )
        logger.info(f"Initialized OpenAI client for model {self.model}")

    async def complete(
        self,
        prompt: str,
        metrics: Optional[MetricsCollector] = None,
    ) -> Optional[str]:
        """
        Send one single-message completion request.

        Args:
            prompt: User prompt
            metrics: Optional collector for latency and degradations

        Returns:
            The first choice's content, or None when the response carries
            none (error status, empty choices, null content)

        Raises:
            UpstreamError: On connection failure or timeout
        """
        try:
            async with track_api_call(metrics, "openai", logger, "/chat/completions", "POST"):
                response = await self.client.chat.completions.create(
                    model=self.model,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=self.settings.openai_max_tokens,
                    temperature=self.settings.openai_temperature,
                )
        except openai.APIConnectionError as e:
            raise UpstreamError("openai", "chat.completions", str(e)) from e
        except openai.APIStatusError as e:
            self._degrade(metrics, f"completion API returned status {e.status_code}")
            return None
        except (ValueError, openai.APIResponseValidationError):
            self._degrade(metrics, "completion response is not valid JSON")
            return None

        content = extract_message_content(response)
        if content is None:
            self._degrade(metrics, "completion response has no message content")
        return content

    async def close(self) -> None:
        await self.client.close()

    @staticmethod
    def _degrade(metrics: Optional[MetricsCollector], reason: str) -> None:
        logger.warning(f"Falling back to placeholder: {reason}")
        emit_metric(SHAPE_MISMATCH_METRIC, 1, reason=reason)
        if metrics:
            metrics.record_degradation(SHAPE_MISMATCH_METRIC)


class CodeAnalyzer:
    """
    Produces review text for pull request changes.

    Uses an LLMClient for inference; prompt construction and response
    parsing live here.
    """

    def __init__(self, settings: Settings, llm_client: Optional[LLMClient] = None):
        """
        Initialize Code Analyzer.

        Args:
            settings: Application settings
            llm_client: Optional LLMClient instance (will be created if not provided)
        """
        self.settings = settings
        self.llm_client = llm_client if llm_client is not None else LLMClient(settings)

    async def analyze_file(
        self,
        filename: str,
        diff_text: str,
        metrics: Optional[MetricsCollector] = None,
    ) -> str:
        """
        Review the diff of a single file.

        Args:
            filename: Path of the changed file
            diff_text: Unified diff of the file
            metrics: Optional metrics collector

        Returns:
            Review text, or the placeholder when the model returned nothing usable

        Raises:
            UpstreamError: If the completion request fails at transport level
        """
        prompt = self._build_review_prompt(filename, diff_text)
        content = await self.llm_client.complete(prompt, metrics=metrics)
        if content is None or not content.strip():
            return NO_SUGGESTIONS
        return content.strip()

    async def analyze_commit(
        self,
        changed_filenames: List[str],
        metrics: Optional[MetricsCollector] = None,
    ) -> CommitAnalysis:
        """
        Suggest a commit message, docstrings and test cases for a change set.

        Args:
            changed_filenames: Paths of all changed files
            metrics: Optional metrics collector

        Returns:
            CommitAnalysis parsed positionally from the completion

        Raises:
            UpstreamError: If the completion request fails at transport level
        """
        prompt = self._build_commit_prompt(changed_filenames)
        content = await self.llm_client.complete(prompt, metrics=metrics)
        return parse_commit_analysis(content or "")

    def _build_review_prompt(self, filename: str, diff_text: str) -> str:
        return f"""You are an expert code reviewer. Review the following diff of `{filename}`.

Look for:
- Potential bugs and logic errors
- Security issues
- Best practice violations

Give concise, actionable suggestions.

```diff
{diff_text}
```"""

    def _build_commit_prompt(self, changed_filenames: List[str]) -> str:
        file_list = "\n".join(f"- {name}" for name in changed_filenames)
        return f"""The following files were changed in a commit:
{file_list}

Respond with exactly three sections separated by a blank line:
1. A concise commit message describing the change.
2. Docstrings for any functions or classes that are missing them.
3. Suggested test cases for the change.

Do not use blank lines inside a section."""
