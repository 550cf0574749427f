"""Contest, contest problem and participant models"""

from enum import Enum

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, Index, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from contestjudge.core.database import Base


class ScoringType(str, Enum):
    """Contest scoring rules. Only SCORE is implemented."""
    SCORE = "SCORE"


class Contest(Base):
    """Contest model - a timed window over a set of problems"""

    __tablename__ = "contests"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    freeze_at = Column(DateTime)
    is_public = Column(Boolean, default=True, nullable=False)
    scoring_type = Column(String(20), default=ScoringType.SCORE.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    problems = relationship(
        "ContestProblem",
        back_populates="contest",
        cascade="all, delete-orphan",
        order_by="ContestProblem.order",
    )
    participants = relationship("ContestParticipant", back_populates="contest", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_contests_end_at', 'end_at'),
        CheckConstraint('end_at > start_at', name='chk_contest_window'),
        CheckConstraint(f"scoring_type IN ('{ScoringType.SCORE.value}')", name='chk_scoring_type'),
    )

    def __repr__(self):
        return f"<Contest(id={self.id}, slug='{self.slug}', end_at={self.end_at})>"

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "id": self.id,
            "slug": self.slug,
            "title": self.title,
            "description": self.description,
            "start_at": self.start_at.isoformat() if self.start_at else None,
            "end_at": self.end_at.isoformat() if self.end_at else None,
            "freeze_at": self.freeze_at.isoformat() if self.freeze_at else None,
            "is_public": self.is_public,
            "scoring_type": self.scoring_type,
        }


class ContestProblem(Base):
    """Problem slot within a contest"""

    __tablename__ = "contest_problems"

    contest_id = Column(Integer, ForeignKey("contests.id", ondelete="CASCADE"), primary_key=True)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), primary_key=True)
    order = Column(Integer, default=0, nullable=False)
    max_score = Column(Integer, default=100, nullable=False)

    contest = relationship("Contest", back_populates="problems")
    problem = relationship("Problem")

    __table_args__ = (
        CheckConstraint('max_score >= 0', name='chk_contest_problem_max_score'),
    )

    def __repr__(self):
        return f"<ContestProblem(contest_id={self.contest_id}, problem_id={self.problem_id}, max_score={self.max_score})>"


class ContestParticipant(Base):
    """A user's standing within one contest"""

    __tablename__ = "contest_participants"

    contest_id = Column(Integer, ForeignKey("contests.id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    total_score = Column(Integer, default=0, nullable=False)
    penalty = Column(Integer, default=0, nullable=False)
    # Null until the contest is finalized
    rank = Column(Integer)
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    contest = relationship("Contest", back_populates="participants")
    user = relationship("User", back_populates="contest_entries")

    __table_args__ = (
        Index('idx_contest_participants_rank', 'contest_id', 'rank'),
        CheckConstraint('rank IS NULL OR rank >= 1', name='chk_participant_rank'),
    )

    def __repr__(self):
        return (
            f"<ContestParticipant(contest_id={self.contest_id}, user_id={self.user_id}, "
            f"total_score={self.total_score}, rank={self.rank})>"
        )

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "contest_id": self.contest_id,
            "user_id": self.user_id,
            "total_score": self.total_score,
            "penalty": self.penalty,
            "rank": self.rank,
        }
