"""User routes - global rankings"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from contestjudge.core.database import get_db
from contestjudge.schemas.contest import RankingEntry
from contestjudge.services.contest_service import contest_service

router = APIRouter()


@router.get("/rankings", response_model=List[RankingEntry])
def get_rankings(
    db: Session = Depends(get_db)
):
    """
    Users ordered by the score credited from finalized contests

    Args:
        db: Database session

    Returns:
        Ranked users
    """
    return contest_service.get_rankings(db)
