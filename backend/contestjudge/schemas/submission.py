"""Submission schemas"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime


class SubmissionCreate(BaseModel):
    """Create submission schema"""
    user_id: int = Field(..., gt=0)
    language_id: int = Field(..., gt=0)
    language: str = Field(..., min_length=1, max_length=50)
    code: str = Field(..., min_length=1, max_length=51200)

    @field_validator('language', 'code')
    @classmethod
    def strip_required_text(cls, v):
        """Reject whitespace-only values"""
        v = v.replace('\x00', '').strip()
        if not v:
            raise ValueError('must not be blank')
        return v


class SubmissionResultResponse(BaseModel):
    """Per test case result schema"""
    id: int
    test_case_id: int
    actual_output: Optional[str]
    passed: bool
    runtime: Optional[float]

    class Config:
        from_attributes = True


class SubmissionResponse(BaseModel):
    """Submission response schema"""
    id: int
    status: str
    execution_time: Optional[float] = None
    memory_used: Optional[float] = None
    created_at: Optional[datetime] = None
    results: Optional[List[SubmissionResultResponse]] = None

    class Config:
        from_attributes = True


class SubmissionStatusResponse(BaseModel):
    """Latest submission of a user for a problem"""
    has_submission: bool
    status: Optional[str] = None
    execution_time: Optional[float] = None
    memory_used: Optional[float] = None
    created_at: Optional[datetime] = None


class SampleRunRequest(BaseModel):
    """Run code against the sample test cases only"""
    language_id: int = Field(..., gt=0)
    code: str = Field(..., min_length=1, max_length=51200)

    @field_validator('code')
    @classmethod
    def strip_code(cls, v):
        v = v.replace('\x00', '').strip()
        if not v:
            raise ValueError('must not be blank')
        return v


class SampleRunResult(BaseModel):
    """Outcome of one sample test case"""
    test_case_id: int
    actual_output: Optional[str] = None
    passed: bool
    judge_status: str
