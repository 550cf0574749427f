"""Final contest standings: ordering, rank assignment and score credits"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from contestjudge.core.exceptions import UnsupportedScoringTypeError, ValidationError
from contestjudge.models.contest import ScoringType


@dataclass(frozen=True)
class Standing:
    """Rank assigned to one participant"""
    user_id: int
    rank: int
    total_score: int
    penalty: int
    previous_rank: Optional[int] = None

    @property
    def newly_ranked(self) -> bool:
        return self.previous_rank is None


@dataclass(frozen=True)
class ScoreCredit:
    """Increment to a user's global score"""
    user_id: int
    amount: int


@dataclass
class FinalizationPlan:
    """Everything one contest's finalization will write"""
    contest_id: int
    standings: List[Standing] = field(default_factory=list)
    credits: List[ScoreCredit] = field(default_factory=list)
    # Filled in once the plan has been written
    applied_credits: int = 0


def parse_scoring_type(value: Any) -> ScoringType:
    """
    Validate a scoring type coming from user input.

    Raises:
        ValidationError: For anything other than a known scoring type
    """
    try:
        return ScoringType(value)
    except ValueError:
        raise ValidationError(
            "Invalid scoring type.",
            details={"scoring_type": value, "allowed": [member.value for member in ScoringType]},
        )


def _score_sort_key(participant: Any) -> Tuple[int, int]:
    return (-participant.total_score, participant.penalty)


_SORT_KEYS: Dict[ScoringType, Callable[[Any], Tuple]] = {
    ScoringType.SCORE: _score_sort_key,
}


def sort_participants(participants: Sequence[Any], scoring_type: Any = ScoringType.SCORE) -> List[Any]:
    """
    Order participants best first.

    SCORE: higher total_score first, then lower penalty. The sort is stable,
    so remaining ties keep their input order.
    """
    try:
        key = _SORT_KEYS[ScoringType(scoring_type)]
    except (ValueError, KeyError):
        raise UnsupportedScoringTypeError(str(scoring_type))
    return sorted(participants, key=key)


def compute_standings(participants: Sequence[Any], scoring_type: Any = ScoringType.SCORE) -> List[Standing]:
    """
    Assign rank = position + 1 to every participant.

    Tied participants still get distinct ranks; nobody shares a rank value.
    """
    return [
        Standing(
            user_id=participant.user_id,
            rank=position,
            total_score=participant.total_score,
            penalty=participant.penalty,
            previous_rank=participant.rank,
        )
        for position, participant in enumerate(sort_participants(participants, scoring_type), 1)
    ]


def plan_finalization(
    contest_id: int,
    participants: Sequence[Any],
    scoring_type: Any = ScoringType.SCORE,
    recredit_ranked: bool = False,
) -> FinalizationPlan:
    """
    Build the rank and credit writes for one contest.

    Participants that already carry a rank (left over from an interrupted
    run) are re-ranked but not credited again, unless `recredit_ranked`
    restores the legacy behaviour of crediting everyone on every pass.
    """
    standings = compute_standings(participants, scoring_type)
    credits = [
        ScoreCredit(user_id=standing.user_id, amount=standing.total_score)
        for standing in standings
        if standing.newly_ranked or recredit_ranked
    ]
    return FinalizationPlan(contest_id=contest_id, standings=standings, credits=credits)
