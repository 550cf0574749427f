"""Contest service - contest creation, participation and standings reads"""

from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from contestjudge.models.contest import Contest, ContestParticipant
from contestjudge.models.user import User
from contestjudge.schemas.contest import ContestCreate
from contestjudge.services.standings import parse_scoring_type, sort_participants
from contestjudge.core.exceptions import BusinessLogicError, ResourceAlreadyExistsError, ResourceNotFoundError

logger = logging.getLogger(__name__)


def contest_status(start_at: datetime, end_at: datetime, now: Optional[datetime] = None) -> str:
    """upcoming, ongoing or ended relative to `now`"""
    now = now or datetime.utcnow()
    if now < start_at:
        return "upcoming"
    if now > end_at:
        return "ended"
    return "ongoing"


class ContestService:
    """Service for contest management"""

    @staticmethod
    def create_contest(db: Session, contest_data: ContestCreate) -> Contest:
        """
        Create a contest

        Raises:
            ResourceAlreadyExistsError: If the slug is taken
        """
        if db.query(Contest).filter(Contest.slug == contest_data.slug).first():
            raise ResourceAlreadyExistsError(f"Contest '{contest_data.slug}'")

        contest = Contest(
            slug=contest_data.slug,
            title=contest_data.title,
            description=contest_data.description,
            start_at=contest_data.start_at,
            end_at=contest_data.end_at,
            freeze_at=contest_data.freeze_at,
            is_public=contest_data.is_public,
            scoring_type=contest_data.scoring_type.value,
        )
        db.add(contest)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ResourceAlreadyExistsError(f"Contest '{contest_data.slug}'")
        db.refresh(contest)

        logger.info(f"Created contest {contest.id} ({contest.slug})")
        return contest

    @staticmethod
    def list_contests(db: Session, scoring_type: Optional[str] = None) -> List[Contest]:
        query = db.query(Contest)
        if scoring_type:
            query = query.filter(Contest.scoring_type == parse_scoring_type(scoring_type).value)
        return query.order_by(Contest.start_at.desc()).all()

    @staticmethod
    def get_contest(db: Session, contest_id: int) -> Contest:
        contest = db.get(Contest, contest_id)
        if not contest:
            raise ResourceNotFoundError("Contest")
        return contest

    @staticmethod
    def join_contest(
        db: Session,
        contest_id: int,
        user_id: int,
        now: Optional[datetime] = None,
    ) -> ContestParticipant:
        """
        Register a user for a contest; joining twice is a no-op

        Ended contests no longer accept participants.
        """
        contest = ContestService.get_contest(db, contest_id)
        if contest_status(contest.start_at, contest.end_at, now) == "ended":
            raise BusinessLogicError("Contest has already ended.")
        if not db.get(User, user_id):
            raise ResourceNotFoundError("User")

        participant = db.get(ContestParticipant, (contest_id, user_id))
        if participant:
            return participant

        participant = ContestParticipant(contest_id=contest_id, user_id=user_id)
        db.add(participant)
        db.commit()
        db.refresh(participant)
        return participant

    @staticmethod
    def get_leaderboard(db: Session, contest_id: int) -> List[Dict[str, Any]]:
        """
        Contest leaderboard, best first

        Uses the same ordering as finalization so the live board and the
        final ranks agree.
        """
        contest = ContestService.get_contest(db, contest_id)
        participants = (
            db.query(ContestParticipant)
            .filter(ContestParticipant.contest_id == contest_id)
            .order_by(ContestParticipant.joined_at.asc(), ContestParticipant.user_id.asc())
            .all()
        )

        return [
            {
                "user_id": participant.user_id,
                "username": participant.user.username,
                "total_score": participant.total_score,
                "penalty": participant.penalty,
                "rank": participant.rank,
            }
            for participant in sort_participants(participants, contest.scoring_type)
        ]

    @staticmethod
    def get_rankings(db: Session) -> List[User]:
        """Users ordered by global score"""
        return db.query(User).order_by(User.score.desc(), User.id.asc()).all()


# Singleton instance
contest_service = ContestService()
