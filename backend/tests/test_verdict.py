import pytest

from contestjudge.core.exceptions import InvalidArgumentError
from contestjudge.services.verdict import Verdict, map_status, reduce_verdicts


@pytest.mark.parametrize("code", [1, 2])
def test_queued_and_processing_are_pending(code):
    assert map_status(code) is Verdict.PENDING


@pytest.mark.parametrize("code", range(7, 13))
def test_runtime_error_variants(code):
    assert map_status(code) is Verdict.RUNTIME_ERROR


def test_single_code_verdicts():
    assert map_status(3) is Verdict.ACCEPTED
    assert map_status(4) is Verdict.WRONG_ANSWER
    assert map_status(5) is Verdict.TIME_LIMIT_EXCEEDED
    assert map_status(6) is Verdict.COMPILATION_ERROR
    assert map_status(13) is Verdict.INTERNAL_ERROR
    assert map_status(14) is Verdict.EXEC_FORMAT_ERROR


@pytest.mark.parametrize("code", [0, -1, 15, 999])
def test_unknown_codes_fall_back_to_pending(code):
    assert map_status(code) is Verdict.PENDING


def test_all_accepted_is_accepted():
    assert reduce_verdicts([Verdict.ACCEPTED, Verdict.ACCEPTED]) is Verdict.ACCEPTED


def test_wrong_answer_beats_accepted():
    assert reduce_verdicts([Verdict.ACCEPTED, Verdict.WRONG_ANSWER]) is Verdict.WRONG_ANSWER


def test_internal_error_wins_regardless_of_position():
    assert reduce_verdicts([Verdict.INTERNAL_ERROR, Verdict.ACCEPTED]) is Verdict.INTERNAL_ERROR
    assert reduce_verdicts([Verdict.ACCEPTED, Verdict.WRONG_ANSWER, Verdict.INTERNAL_ERROR]) is Verdict.INTERNAL_ERROR


def test_accepted_with_pending_stays_pending():
    assert reduce_verdicts([Verdict.ACCEPTED, Verdict.PENDING]) is Verdict.PENDING


def test_failure_priority_order():
    verdicts = [
        Verdict.WRONG_ANSWER,
        Verdict.TIME_LIMIT_EXCEEDED,
        Verdict.RUNTIME_ERROR,
        Verdict.EXEC_FORMAT_ERROR,
        Verdict.COMPILATION_ERROR,
    ]
    assert reduce_verdicts(verdicts) is Verdict.COMPILATION_ERROR
    assert reduce_verdicts(verdicts[:4]) is Verdict.EXEC_FORMAT_ERROR
    assert reduce_verdicts(verdicts[:3]) is Verdict.RUNTIME_ERROR
    assert reduce_verdicts(verdicts[:2]) is Verdict.TIME_LIMIT_EXCEEDED


def test_accepts_any_iterable_and_string_values():
    assert reduce_verdicts(v for v in ["ACCEPTED", "ACCEPTED"]) is Verdict.ACCEPTED


def test_empty_sequence_is_rejected():
    with pytest.raises(InvalidArgumentError):
        reduce_verdicts([])


@pytest.mark.parametrize("verdict", list(Verdict))
def test_single_verdict_reduces_to_itself(verdict):
    assert reduce_verdicts([verdict]) is verdict
