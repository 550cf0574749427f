"""Score calculation for accepted contest submissions"""

import logging
import math
from typing import Dict, Mapping, Optional

from sqlalchemy.orm import Session

from contestjudge.config import ROUNDING_MODES, settings
from contestjudge.core.exceptions import InvalidArgumentError, ResourceNotFoundError
from contestjudge.models.contest import ContestProblem
from contestjudge.models.submission import Submission
from contestjudge.services.verdict import Verdict

logger = logging.getLogger(__name__)

# (upper bound in seconds, factor)
TIME_FACTOR_STEPS = ((1.0, 1.0), (2.0, 0.9), (3.0, 0.8), (5.0, 0.7))
TIME_FACTOR_SLOWEST = 0.5
TIME_FACTOR_UNKNOWN = 0.5

# (upper bound in MB, factor)
MEMORY_FACTOR_STEPS = ((64.0, 1.0), (128.0, 0.9), (256.0, 0.8))
MEMORY_FACTOR_LARGEST = 0.7
MEMORY_FACTOR_UNKNOWN = 0.7

# Keyed by Judge0 language id
LANGUAGE_FACTORS: Dict[int, float] = {
    50: 1.0,   # C
    54: 1.0,   # C++
    62: 0.95,  # Java
    63: 0.9,   # JavaScript
    93: 0.9,   # JavaScript
    70: 0.85,  # Python 2
    71: 0.85,  # Python 3
}
DEFAULT_LANGUAGE_FACTOR = 0.9


def _is_missing(value: Optional[float]) -> bool:
    return value is None or math.isnan(value)


def time_factor(execution_time: Optional[float]) -> float:
    if _is_missing(execution_time):
        return TIME_FACTOR_UNKNOWN
    for limit, factor in TIME_FACTOR_STEPS:
        if execution_time <= limit:
            return factor
    return TIME_FACTOR_SLOWEST


def memory_factor(memory_used_kb: Optional[float]) -> float:
    if _is_missing(memory_used_kb):
        return MEMORY_FACTOR_UNKNOWN
    memory_mb = memory_used_kb / 1024
    for limit, factor in MEMORY_FACTOR_STEPS:
        if memory_mb <= limit:
            return factor
    return MEMORY_FACTOR_LARGEST


def language_factor(language_id: int, factors: Optional[Mapping[int, float]] = None) -> float:
    if factors is None:
        factors = {**LANGUAGE_FACTORS, **settings.LANGUAGE_FACTOR_OVERRIDES}
    return factors.get(language_id, DEFAULT_LANGUAGE_FACTOR)


def round_score(raw_score: float, mode: str) -> int:
    """Round to the nearest integer; `mode` decides what happens at .5"""
    if mode == "half_up":
        return math.floor(raw_score + 0.5)
    if mode == "half_even":
        return round(raw_score)
    raise InvalidArgumentError(
        f"Unknown rounding mode '{mode}'",
        details={"allowed": list(ROUNDING_MODES)},
    )


def compute_score(
    max_score: int,
    execution_time: Optional[float],
    memory_used_kb: Optional[float],
    language_id: int,
    rounding: Optional[str] = None,
    language_factors: Optional[Mapping[int, float]] = None,
) -> int:
    """
    Score an accepted submission against a problem's maximum.

    Args:
        max_score: Problem maximum within the contest
        execution_time: Slowest test case runtime in seconds, if known
        memory_used_kb: Peak memory in KB, if known
        language_id: Judge0 language id
        rounding: "half_up" or "half_even"; defaults to SCORE_ROUNDING
        language_factors: Override for the language factor table

    Returns:
        Non-negative integer score
    """
    raw_score = (
        max_score
        * time_factor(execution_time)
        * memory_factor(memory_used_kb)
        * language_factor(language_id, language_factors)
    )
    return max(0, round_score(raw_score, rounding or settings.SCORE_ROUNDING))


def score_contest_submission(db: Session, submission: Submission, contest_id: int) -> int:
    """
    Points a submission is worth for a contest problem.

    Only ACCEPTED submissions score; everything else is worth 0.

    Raises:
        ResourceNotFoundError: If the problem is not part of the contest
    """
    contest_problem = (
        db.query(ContestProblem)
        .filter(
            ContestProblem.contest_id == contest_id,
            ContestProblem.problem_id == submission.problem_id,
        )
        .first()
    )
    if not contest_problem:
        raise ResourceNotFoundError(f"Problem {submission.problem_id} in contest {contest_id}")

    if submission.status != Verdict.ACCEPTED.value:
        return 0

    score = compute_score(
        contest_problem.max_score,
        submission.execution_time,
        submission.memory_used,
        submission.language_id,
    )
    logger.debug(
        "Submission %s scored %s/%s in contest %s",
        submission.id, score, contest_problem.max_score, contest_id,
    )
    return score
