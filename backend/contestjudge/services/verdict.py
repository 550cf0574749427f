"""Judge status classification and per-submission verdict reduction"""

from enum import Enum
from typing import Iterable

from contestjudge.core.exceptions import InvalidArgumentError


class Verdict(str, Enum):
    """Normalized outcome of judging one test case (or a whole submission)"""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    WRONG_ANSWER = "WRONG_ANSWER"
    TIME_LIMIT_EXCEEDED = "TIME_LIMIT_EXCEEDED"
    COMPILATION_ERROR = "COMPILATION_ERROR"
    RUNTIME_ERROR = "RUNTIME_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    EXEC_FORMAT_ERROR = "EXEC_FORMAT_ERROR"


# Judge0 status ids. 1 = In Queue, 2 = Processing, 7-12 are the runtime
# error variants (SIGSEGV, SIGXFSZ, SIGFPE, SIGABRT, NZEC, Other).
JUDGE_STATUS_VERDICTS = {
    1: Verdict.PENDING,
    2: Verdict.PENDING,
    3: Verdict.ACCEPTED,
    4: Verdict.WRONG_ANSWER,
    5: Verdict.TIME_LIMIT_EXCEEDED,
    6: Verdict.COMPILATION_ERROR,
    7: Verdict.RUNTIME_ERROR,
    8: Verdict.RUNTIME_ERROR,
    9: Verdict.RUNTIME_ERROR,
    10: Verdict.RUNTIME_ERROR,
    11: Verdict.RUNTIME_ERROR,
    12: Verdict.RUNTIME_ERROR,
    13: Verdict.INTERNAL_ERROR,
    14: Verdict.EXEC_FORMAT_ERROR,
}

# Checked in order; the first verdict present wins.
FAILURE_PRIORITY = (
    Verdict.INTERNAL_ERROR,
    Verdict.COMPILATION_ERROR,
    Verdict.EXEC_FORMAT_ERROR,
    Verdict.RUNTIME_ERROR,
    Verdict.TIME_LIMIT_EXCEEDED,
    Verdict.WRONG_ANSWER,
)


def map_status(status_code: int) -> Verdict:
    """Translate a judge status id into a verdict. Unknown ids are PENDING."""
    return JUDGE_STATUS_VERDICTS.get(status_code, Verdict.PENDING)


def reduce_verdicts(verdicts: Iterable[Verdict]) -> Verdict:
    """
    Combine per-test-case verdicts into the submission status.

    Failures dominate in FAILURE_PRIORITY order regardless of position.
    ACCEPTED needs every test case accepted; any other mix (for example
    accepted plus still-pending cases) stays PENDING.

    Raises:
        InvalidArgumentError: If no verdicts are given
    """
    collected = [Verdict(verdict) for verdict in verdicts]
    if not collected:
        raise InvalidArgumentError("Cannot reduce an empty verdict sequence")

    present = set(collected)
    for verdict in FAILURE_PRIORITY:
        if verdict in present:
            return verdict

    if present == {Verdict.ACCEPTED}:
        return Verdict.ACCEPTED
    return Verdict.PENDING
