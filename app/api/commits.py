"""
Commit analysis endpoint.

Lets a client (a pre-commit hook, CI job, ...) ask for a commit message,
docstrings and test-case suggestions for a list of changed files directly,
without going through a pull request.
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from app.analyzers.code_analyzer import CodeAnalyzer
from app.exceptions import UpstreamError
from app.models.analysis import CommitAnalysisRequest, CommitAnalysisResponse
from app.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/analyze", tags=["analysis"])


def get_analyzer(request: Request) -> CodeAnalyzer:
    return request.app.state.analyzer


@router.post("/commit", response_model=CommitAnalysisResponse)
async def analyze_commit(
    body: CommitAnalysisRequest,
    analyzer: CodeAnalyzer = Depends(get_analyzer),
) -> CommitAnalysisResponse:
    """
    Generate a commit message, docstrings and test cases for changed files.

    Raises:
        HTTPException: 502 if the completion service cannot be reached
    """
    logger.info(f"Processing commit for repository: {body.repository}", extra={"repo": body.repository})

    try:
        analysis = await analyzer.analyze_commit(body.changed_files)
    except UpstreamError as e:
        logger.error(f"Failed to generate commit analysis: {e}", extra={"repo": body.repository}, exc_info=True)
        raise HTTPException(status_code=502, detail="Commit analysis failed") from e

    logger.info(f"AI generated commit message: {analysis.commit_message}", extra={"repo": body.repository})
    return CommitAnalysisResponse(**analysis.model_dump())
