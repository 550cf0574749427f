from types import SimpleNamespace

import pytest

from contestjudge.core.exceptions import UnsupportedScoringTypeError, ValidationError
from contestjudge.models.contest import ScoringType
from contestjudge.services.standings import compute_standings, parse_scoring_type, plan_finalization


def _participant(user_id, total_score, penalty, rank=None):
    return SimpleNamespace(user_id=user_id, total_score=total_score, penalty=penalty, rank=rank)


def test_higher_score_first_then_lower_penalty():
    participants = [
        _participant(1, 50, 0),
        _participant(2, 80, 2),
        _participant(3, 80, 1),
        _participant(4, 30, 0),
    ]
    standings = compute_standings(participants)
    assert [(s.user_id, s.rank) for s in standings] == [(3, 1), (2, 2), (1, 3), (4, 4)]


def test_full_ties_get_distinct_ranks_in_input_order():
    participants = [_participant(7, 10, 3), _participant(5, 10, 3), _participant(9, 10, 3)]
    standings = compute_standings(participants)
    assert [s.user_id for s in standings] == [7, 5, 9]
    assert [s.rank for s in standings] == [1, 2, 3]


def test_plan_credits_every_unranked_participant():
    participants = [_participant(1, 50, 0), _participant(2, 80, 1)]
    plan = plan_finalization(10, participants)
    assert plan.contest_id == 10
    assert sorted((c.user_id, c.amount) for c in plan.credits) == [(1, 50), (2, 80)]


def test_plan_does_not_recredit_already_ranked_participants():
    participants = [_participant(1, 50, 0), _participant(2, 80, 1, rank=1)]
    plan = plan_finalization(10, participants)
    assert [(s.user_id, s.rank, s.newly_ranked) for s in plan.standings] == [(2, 1, False), (1, 2, True)]
    assert [(c.user_id, c.amount) for c in plan.credits] == [(1, 50)]


def test_plan_legacy_mode_recredits_everyone():
    participants = [_participant(1, 50, 0), _participant(2, 80, 1, rank=1)]
    plan = plan_finalization(10, participants, recredit_ranked=True)
    assert sorted(c.user_id for c in plan.credits) == [1, 2]


def test_empty_contest_plans_nothing():
    plan = plan_finalization(3, [])
    assert plan.standings == []
    assert plan.credits == []


def test_parse_scoring_type_accepts_score_only():
    assert parse_scoring_type("SCORE") is ScoringType.SCORE
    with pytest.raises(ValidationError):
        parse_scoring_type("ACM")


def test_ranking_rejects_unknown_scoring_type():
    with pytest.raises(UnsupportedScoringTypeError):
        compute_standings([_participant(1, 1, 0)], scoring_type="ACM")
