"""Contest finalization - ranks participants of ended contests and credits users"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from contestjudge.config import settings
from contestjudge.core.exceptions import FinalizationError
from contestjudge.models.contest import Contest, ContestParticipant
from contestjudge.models.user import User
from contestjudge.services.standings import FinalizationPlan, plan_finalization

logger = logging.getLogger(__name__)


@dataclass
class FinalizationReport:
    """Outcome of one pass over the eligible contests"""
    finalized: List[int] = field(default_factory=list)
    failed: Dict[int, str] = field(default_factory=dict)
    credited_users: int = 0

    @property
    def processed(self) -> int:
        return len(self.finalized) + len(self.failed)

    def to_dict(self) -> dict:
        return {
            "finalized": list(self.finalized),
            "failed": {str(contest_id): error for contest_id, error in self.failed.items()},
            "credited_users": self.credited_users,
        }


class ContestFinalizer:
    """Applies final standings to contests whose window has closed."""

    def __init__(self, recredit_ranked: Optional[bool] = None) -> None:
        self._recredit_ranked = recredit_ranked

    @property
    def recredit_ranked(self) -> bool:
        if self._recredit_ranked is None:
            return settings.FINALIZER_RECREDIT_RANKED
        return self._recredit_ranked

    def find_eligible_contests(self, db: Session, now: datetime) -> List[Contest]:
        """Contests that ended before `now` and still have an unranked participant."""
        return (
            db.query(Contest)
            .filter(
                Contest.end_at < now,
                Contest.participants.any(ContestParticipant.rank.is_(None)),
            )
            .order_by(Contest.end_at.asc(), Contest.id.asc())
            .all()
        )

    def load_participants(self, db: Session, contest_id: int) -> List[ContestParticipant]:
        # Join order is the tiebreak of last resort
        return (
            db.query(ContestParticipant)
            .filter(ContestParticipant.contest_id == contest_id)
            .order_by(ContestParticipant.joined_at.asc(), ContestParticipant.user_id.asc())
            .all()
        )

    def finalize_contest(self, db: Session, contest: Contest) -> FinalizationPlan:
        """
        Rank every participant of one contest and credit their users.

        All writes for the contest are committed together; on failure the
        session is rolled back so the contest stays eligible for the next run.

        Raises:
            FinalizationError: If any write fails
        """
        contest_id = contest.id
        try:
            participants = self.load_participants(db, contest_id)
            plan = plan_finalization(
                contest_id,
                participants,
                scoring_type=contest.scoring_type,
                recredit_ranked=self.recredit_ranked,
            )
            plan.applied_credits = self._apply_plan(db, plan)
            db.commit()
        except Exception as exc:
            db.rollback()
            raise FinalizationError(contest_id, str(exc)) from exc

        logger.info(
            "Finalized contest %s: %s participants ranked, %s users credited",
            contest_id, len(plan.standings), plan.applied_credits,
        )
        return plan

    def _apply_plan(self, db: Session, plan: FinalizationPlan) -> int:
        credit_amounts = {credit.user_id: credit.amount for credit in plan.credits}
        credited = 0

        for standing in plan.standings:
            query = db.query(ContestParticipant).filter(
                ContestParticipant.contest_id == plan.contest_id,
                ContestParticipant.user_id == standing.user_id,
            )
            if standing.newly_ranked:
                # Compare-and-set: only the run that fills the rank may credit
                claimed = query.filter(ContestParticipant.rank.is_(None)).update(
                    {ContestParticipant.rank: standing.rank},
                    synchronize_session=False,
                )
                if not claimed:
                    logger.warning(
                        "Participant %s of contest %s was ranked concurrently; skipping credit",
                        standing.user_id, plan.contest_id,
                    )
                    continue
            else:
                query.update({ContestParticipant.rank: standing.rank}, synchronize_session=False)

            if standing.user_id in credit_amounts:
                db.query(User).filter(User.id == standing.user_id).update(
                    {
                        User.score: User.score + credit_amounts[standing.user_id],
                        User.attended: User.attended + 1,
                    },
                    synchronize_session=False,
                )
                credited += 1

        return credited

    def finalize_expired_contests(self, db: Session, now: Optional[datetime] = None) -> FinalizationReport:
        """
        Finalize every eligible contest, one at a time.

        A contest that fails is logged and reported; the remaining contests
        are still processed.
        """
        now = now or datetime.utcnow()
        report = FinalizationReport()
        contest_ids = [contest.id for contest in self.find_eligible_contests(db, now)]
        if contest_ids:
            logger.info("Found %s contest(s) to finalize", len(contest_ids))

        for contest_id in contest_ids:
            contest = db.get(Contest, contest_id)
            if contest is None:
                continue
            try:
                plan = self.finalize_contest(db, contest)
            except FinalizationError as exc:
                logger.exception("Contest %s finalization failed", contest_id)
                report.failed[contest_id] = exc.message
                continue
            report.finalized.append(contest_id)
            report.credited_users += plan.applied_credits

        return report


contest_finalizer = ContestFinalizer()
