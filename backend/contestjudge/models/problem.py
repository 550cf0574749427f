"""Problem and test case models"""

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, ForeignKey, JSON, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from contestjudge.core.database import Base


class Problem(Base):
    """Problem model - a task users submit solutions for"""

    __tablename__ = "problems"

    id = Column(Integer, primary_key=True, index=True)
    slug = Column(String(100), unique=True, nullable=False, index=True)
    title = Column(String(200), nullable=False)
    is_published = Column(Boolean, default=False, nullable=False)
    # Judge0 language ids; empty list means every language is allowed
    allowed_language_ids = Column(JSON, default=list, nullable=False)
    participant_count = Column(Integer, default=0, nullable=False)
    success_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    test_cases = relationship(
        "TestCase",
        back_populates="problem",
        cascade="all, delete-orphan",
        order_by="TestCase.id",
    )
    submissions = relationship("Submission", back_populates="problem")

    def __repr__(self):
        return f"<Problem(id={self.id}, slug='{self.slug}')>"


class TestCase(Base):
    """Test case fixture of a problem"""

    __tablename__ = "test_cases"
    __test__ = False

    id = Column(Integer, primary_key=True, index=True)
    problem_id = Column(Integer, ForeignKey("problems.id", ondelete="CASCADE"), nullable=False)
    input = Column(Text, nullable=False, default="")
    output = Column(Text, nullable=False, default="")
    is_sample = Column(Boolean, default=False, nullable=False)

    problem = relationship("Problem", back_populates="test_cases")

    __table_args__ = (
        Index('idx_test_cases_problem', 'problem_id'),
    )

    def __repr__(self):
        return f"<TestCase(id={self.id}, problem_id={self.problem_id}, is_sample={self.is_sample})>"
