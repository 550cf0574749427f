"""Database models"""

from contestjudge.models.user import User
from contestjudge.models.problem import Problem, TestCase
from contestjudge.models.submission import Submission, SubmissionResult
from contestjudge.models.contest import Contest, ContestProblem, ContestParticipant, ScoringType

__all__ = [
    "User",
    "Problem",
    "TestCase",
    "Submission",
    "SubmissionResult",
    "Contest",
    "ContestProblem",
    "ContestParticipant",
    "ScoringType",
]
