"""Contest routes - creation, participation and leaderboards"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List, Optional

from contestjudge.core.database import get_db
from contestjudge.models.contest import Contest
from contestjudge.schemas.contest import ContestCreate, ContestResponse, LeaderboardEntry
from contestjudge.services.contest_service import contest_service, contest_status
from contestjudge.api.deps import require_admin_token

router = APIRouter()


def _to_response(contest: Contest) -> ContestResponse:
    return ContestResponse(
        id=contest.id,
        slug=contest.slug,
        title=contest.title,
        description=contest.description,
        is_public=contest.is_public,
        scoring_type=contest.scoring_type,
        start_at=contest.start_at,
        end_at=contest.end_at,
        freeze_at=contest.freeze_at,
        status=contest_status(contest.start_at, contest.end_at),
    )


@router.get("", response_model=List[ContestResponse])
def list_contests(
    scoring_type: Optional[str] = None,
    db: Session = Depends(get_db)
):
    """
    List contests, newest first

    Args:
        scoring_type: Optional scoring type filter
        db: Database session
    """
    return [_to_response(contest) for contest in contest_service.list_contests(db, scoring_type)]


@router.post(
    "",
    response_model=ContestResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin_token)],
)
def create_contest(
    contest_data: ContestCreate,
    db: Session = Depends(get_db)
):
    """Create a contest (admin only)"""
    return _to_response(contest_service.create_contest(db, contest_data))


@router.post("/{contest_id}/join")
def join_contest(
    contest_id: int,
    user_id: int,
    db: Session = Depends(get_db)
):
    """Join a contest"""
    contest_service.join_contest(db, contest_id, user_id)
    return {"success": True}


@router.get("/{contest_id}/leaderboard", response_model=List[LeaderboardEntry])
def get_leaderboard(
    contest_id: int,
    db: Session = Depends(get_db)
):
    """Contest leaderboard ordered by total score, then penalty"""
    return contest_service.get_leaderboard(db, contest_id)
