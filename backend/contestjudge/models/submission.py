"""Submission and test result models"""

from sqlalchemy import Column, Integer, String, Text, Float, DateTime, ForeignKey, Boolean, Index, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from contestjudge.core.database import Base
from contestjudge.services.verdict import Verdict

_STATUS_VALUES = ", ".join(f"'{verdict.value}'" for verdict in Verdict)


class Submission(Base):
    """Submission model - one code run against a problem"""

    __tablename__ = "submissions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False)
    language_id = Column(Integer, nullable=False)
    language = Column(String(50), nullable=False)
    code = Column(Text, nullable=False)
    status = Column(String(32), default=Verdict.PENDING.value, nullable=False)
    # Max across test cases; null when no test case reported a value
    execution_time = Column(Float)
    memory_used = Column(Float)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    user = relationship("User", back_populates="submissions")
    problem = relationship("Problem", back_populates="submissions")
    results = relationship("SubmissionResult", back_populates="submission", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_submissions_user_problem', 'user_id', 'problem_id'),
        Index('idx_submissions_status', 'status'),
        Index('idx_submissions_created_at', 'created_at'),
        CheckConstraint('execution_time >= 0', name='chk_execution_time'),
        CheckConstraint('memory_used >= 0', name='chk_memory_used'),
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name='chk_status'),
    )

    def __repr__(self):
        return f"<Submission(id={self.id}, user_id={self.user_id}, problem_id={self.problem_id}, status='{self.status}')>"

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "problem_id": self.problem_id,
            "language_id": self.language_id,
            "language": self.language,
            "status": self.status,
            "execution_time": self.execution_time,
            "memory_used": self.memory_used,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class SubmissionResult(Base):
    """Outcome of one test case for a submission"""

    __tablename__ = "submission_results"

    id = Column(Integer, primary_key=True, index=True)
    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), nullable=False)
    test_case_id = Column(Integer, ForeignKey("test_cases.id", ondelete="CASCADE"), nullable=False)
    actual_output = Column(Text)
    passed = Column(Boolean, nullable=False)
    runtime = Column(Float)

    # Relationships
    submission = relationship("Submission", back_populates="results")

    __table_args__ = (
        Index('idx_submission_results_submission', 'submission_id'),
    )

    def __repr__(self):
        return f"<SubmissionResult(id={self.id}, submission_id={self.submission_id}, passed={self.passed})>"

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "id": self.id,
            "submission_id": self.submission_id,
            "test_case_id": self.test_case_id,
            "actual_output": self.actual_output,
            "passed": self.passed,
            "runtime": self.runtime,
        }
