"""Admin routes - finalizer control and score previews"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from contestjudge.core.database import get_db
from contestjudge.core.exceptions import ResourceNotFoundError
from contestjudge.models.submission import Submission
from contestjudge.schemas.contest import FinalizationReportResponse
from contestjudge.services.finalizer_worker import finalizer_worker
from contestjudge.services.scoring import score_contest_submission
from contestjudge.api.deps import require_admin_token

router = APIRouter(dependencies=[Depends(require_admin_token)])


@router.post("/finalize", response_model=FinalizationReportResponse, status_code=status.HTTP_200_OK)
def finalize_contests():
    """
    Run one contest finalization pass now

    Returns skipped=True when a scheduled pass is already running.
    """
    report = finalizer_worker.tick()
    if report is None:
        return FinalizationReportResponse(skipped=True)
    return FinalizationReportResponse(**report.to_dict())


@router.get("/finalizer")
def get_finalizer_status():
    """Finalizer liveness and the last report"""
    return finalizer_worker.status()


@router.get("/contests/{contest_id}/submissions/{submission_id}/score")
def get_submission_score(
    contest_id: int,
    submission_id: int,
    db: Session = Depends(get_db)
):
    """
    Points a submission earns for a contest problem

    Args:
        contest_id: Contest ID
        submission_id: Submission ID
        db: Database session
    """
    submission = db.get(Submission, submission_id)
    if not submission:
        raise ResourceNotFoundError("Submission")

    return {
        "submission_id": submission.id,
        "contest_id": contest_id,
        "status": submission.status,
        "score": score_contest_submission(db, submission, contest_id),
    }
