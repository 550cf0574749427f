"""Contest schemas"""

from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List, Dict
from datetime import datetime

from contestjudge.models.contest import ScoringType


class ContestCreate(BaseModel):
    """Create contest schema"""
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    is_public: bool = True
    scoring_type: ScoringType
    start_at: datetime
    end_at: datetime
    freeze_at: Optional[datetime] = None

    @field_validator('title')
    @classmethod
    def strip_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Title is required')
        return v

    @field_validator('slug')
    @classmethod
    def normalize_slug(cls, v):
        """Lowercase, dash separated slug"""
        v = "-".join(v.strip().lower().split())
        if not v.replace('-', '').replace('_', '').isalnum():
            raise ValueError('Slug must be alphanumeric (with - or _ allowed)')
        return v

    @model_validator(mode='after')
    def check_window(self):
        """End after start; freeze inside the window"""
        if self.end_at <= self.start_at:
            raise ValueError('End time must be after start time.')
        if self.freeze_at and (self.freeze_at < self.start_at or self.freeze_at > self.end_at):
            raise ValueError('Freeze time must be between start and end time.')
        return self


class ContestResponse(BaseModel):
    """Contest response schema"""
    id: int
    slug: str
    title: str
    description: Optional[str]
    is_public: bool
    scoring_type: str
    start_at: datetime
    end_at: datetime
    freeze_at: Optional[datetime]
    status: str


class LeaderboardEntry(BaseModel):
    """One row of a contest leaderboard"""
    user_id: int
    username: str
    total_score: int
    penalty: int
    rank: Optional[int]


class RankingEntry(BaseModel):
    """One row of the global ranking"""
    id: int
    username: str
    score: int
    attended: int

    class Config:
        from_attributes = True


class FinalizationReportResponse(BaseModel):
    """Result of a finalizer run"""
    skipped: bool = False
    finalized: List[int] = []
    failed: Dict[str, str] = {}
    credited_users: int = 0
