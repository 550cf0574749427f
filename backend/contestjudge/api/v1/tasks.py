"""Task routes - sample runs, code submission and latest status"""

from fastapi import APIRouter, Depends, status
from typing import List
from sqlalchemy.orm import Session

from contestjudge.core.database import get_db
from contestjudge.schemas.submission import (
    SampleRunRequest,
    SampleRunResult,
    SubmissionCreate,
    SubmissionResponse,
    SubmissionStatusResponse,
)
from contestjudge.services.submission_service import submission_service

router = APIRouter()


@router.post("/{slug}/run", response_model=List[SampleRunResult])
def run_samples(
    slug: str,
    run: SampleRunRequest,
    db: Session = Depends(get_db)
):
    """Run code against the sample test cases without recording a submission"""
    return submission_service.run_samples(db, slug.strip(), run)


@router.post("/{slug}/submit", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
def submit_code(
    slug: str,
    submission: SubmissionCreate,
    db: Session = Depends(get_db)
):
    """
    Judge code against every test case of a task

    Args:
        slug: Task slug
        submission: Submission data
        db: Database session

    Returns:
        Judged submission with per test case results
    """
    return submission_service.submit(db, slug.strip(), submission)


@router.get("/{slug}/status", response_model=SubmissionStatusResponse)
def get_status(
    slug: str,
    user_id: int,
    db: Session = Depends(get_db)
):
    """Latest submission of a user for a task"""
    return submission_service.latest_status(db, user_id, slug.strip())
