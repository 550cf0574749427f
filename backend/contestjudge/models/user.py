"""User model"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Index, CheckConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from contestjudge.core.database import Base


class User(Base):
    """User model with the global ranking score"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    role = Column(String(20), default="participant", nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    score = Column(Integer, default=0, nullable=False)
    attended = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    submissions = relationship("Submission", back_populates="user", cascade="all, delete-orphan")
    contest_entries = relationship("ContestParticipant", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        Index('idx_users_score', 'score'),
        CheckConstraint('attended >= 0', name='chk_users_attended'),
    )

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}', score={self.score})>"

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "is_active": self.is_active,
            "score": self.score,
            "attended": self.attended,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
