"""Pydantic schemas for API validation"""

from contestjudge.schemas.submission import (
    SampleRunRequest,
    SampleRunResult,
    SubmissionCreate,
    SubmissionResponse,
    SubmissionResultResponse,
    SubmissionStatusResponse,
)
from contestjudge.schemas.contest import (
    ContestCreate,
    ContestResponse,
    LeaderboardEntry,
    RankingEntry,
    FinalizationReportResponse,
)

__all__ = [
    "SampleRunRequest", "SampleRunResult", "SubmissionCreate", "SubmissionResponse", "SubmissionResultResponse", "SubmissionStatusResponse",
    "ContestCreate", "ContestResponse", "LeaderboardEntry", "RankingEntry", "FinalizationReportResponse",
]
