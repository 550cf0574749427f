from datetime import datetime, timedelta

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from contestjudge.core.database import Base
from contestjudge.models.contest import Contest, ContestParticipant
from contestjudge.models.user import User
from contestjudge.services.contest_finalizer import ContestFinalizer
from contestjudge.services.standings import plan_finalization

NOW = datetime(2026, 3, 1, 12, 0, 0)


def _make_session():
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    return SessionLocal()


def _make_shared_sessions(tmp_path):
    """Two independent sessions on one database file, like two finalizer processes"""
    engine = create_engine(f"sqlite:///{tmp_path / 'contests.db'}")
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    return SessionLocal(), SessionLocal()


def _seed_contest(db, slug, end_at, entries):
    """entries: (username, total_score, penalty, rank)"""
    contest = Contest(slug=slug, title=slug.title(), start_at=end_at - timedelta(hours=3), end_at=end_at)
    db.add(contest)
    db.commit()

    users = {}
    for username, total_score, penalty, rank in entries:
        user = db.query(User).filter(User.username == username).first()
        if user is None:
            user = User(username=username)
            db.add(user)
            db.commit()
        users[username] = user
        db.add(ContestParticipant(
            contest_id=contest.id,
            user_id=user.id,
            total_score=total_score,
            penalty=penalty,
            rank=rank,
        ))
    db.commit()
    return contest, users


def _ranks(db, contest_id):
    rows = db.query(ContestParticipant).filter(ContestParticipant.contest_id == contest_id).all()
    return {row.user.username: row.rank for row in rows}


def _scores(db):
    return {user.username: user.score for user in db.query(User).all()}


def test_finalizes_with_penalty_tiebreak_and_dense_ranks():
    db = _make_session()
    try:
        contest, _ = _seed_contest(db, "spring", NOW - timedelta(minutes=1), [
            ("ann", 50, 0, None),
            ("bob", 80, 2, None),
            ("cat", 80, 1, None),
            ("dan", 30, 0, None),
        ])

        report = ContestFinalizer(recredit_ranked=False).finalize_expired_contests(db, now=NOW)

        assert report.finalized == [contest.id]
        assert report.failed == {}
        assert report.credited_users == 4
        assert _ranks(db, contest.id) == {"cat": 1, "bob": 2, "ann": 3, "dan": 4}
        assert _scores(db) == {"ann": 50, "bob": 80, "cat": 80, "dan": 30}
        assert {user.username: user.attended for user in db.query(User).all()} == {
            "ann": 1, "bob": 1, "cat": 1, "dan": 1,
        }
    finally:
        db.close()


def test_second_run_is_a_noop():
    db = _make_session()
    try:
        contest, _ = _seed_contest(db, "spring", NOW - timedelta(minutes=1), [
            ("ann", 50, 0, None),
            ("bob", 80, 2, None),
            ("cat", 80, 1, None),
            ("dan", 30, 0, None),
        ])
        finalizer = ContestFinalizer(recredit_ranked=False)

        finalizer.finalize_expired_contests(db, now=NOW)
        second = finalizer.finalize_expired_contests(db, now=NOW + timedelta(minutes=5))

        assert second.finalized == []
        assert second.processed == 0
        assert _scores(db) == {"ann": 50, "bob": 80, "cat": 80, "dan": 30}
    finally:
        db.close()


def test_only_ended_contests_with_unranked_participants_are_eligible():
    db = _make_session()
    try:
        ended, _ = _seed_contest(db, "ended", NOW - timedelta(hours=1), [("ann", 10, 0, None)])
        _seed_contest(db, "running", NOW + timedelta(hours=1), [("bob", 10, 0, None)])
        _seed_contest(db, "boundary", NOW, [("cat", 10, 0, None)])
        _seed_contest(db, "done", NOW - timedelta(days=1), [("dan", 10, 0, 1)])
        _seed_contest(db, "empty", NOW - timedelta(days=1), [])

        eligible = ContestFinalizer().find_eligible_contests(db, NOW)

        assert [contest.slug for contest in eligible] == [ended.slug]
    finally:
        db.close()


def test_partially_ranked_contest_does_not_double_credit():
    db = _make_session()
    try:
        contest, users = _seed_contest(db, "interrupted", NOW - timedelta(minutes=1), [
            ("ann", 50, 0, None),
            ("bob", 80, 1, 1),
        ])
        # bob was ranked and credited by an earlier, interrupted run
        users["bob"].score = 80
        users["bob"].attended = 1
        db.commit()

        report = ContestFinalizer(recredit_ranked=False).finalize_expired_contests(db, now=NOW)

        assert report.finalized == [contest.id]
        assert report.credited_users == 1
        assert _ranks(db, contest.id) == {"bob": 1, "ann": 2}
        assert _scores(db) == {"ann": 50, "bob": 80}
    finally:
        db.close()


def test_legacy_mode_recredits_ranked_participants():
    db = _make_session()
    try:
        contest, users = _seed_contest(db, "interrupted", NOW - timedelta(minutes=1), [
            ("ann", 50, 0, None),
            ("bob", 80, 1, 1),
        ])
        users["bob"].score = 80
        db.commit()

        ContestFinalizer(recredit_ranked=True).finalize_expired_contests(db, now=NOW)

        assert _scores(db) == {"ann": 50, "bob": 160}
    finally:
        db.close()


class _FailingFinalizer(ContestFinalizer):
    """Writes the first standing, then blows up"""

    def __init__(self, fail_slug):
        super().__init__(recredit_ranked=False)
        self.fail_slug = fail_slug

    def _apply_plan(self, db, plan):
        contest = db.get(Contest, plan.contest_id)
        if contest.slug != self.fail_slug:
            return super()._apply_plan(db, plan)
        first = plan.standings[0]
        db.query(ContestParticipant).filter(
            ContestParticipant.contest_id == plan.contest_id,
            ContestParticipant.user_id == first.user_id,
        ).update({ContestParticipant.rank: first.rank}, synchronize_session=False)
        raise RuntimeError("connection lost")


def test_failed_contest_is_rolled_back_and_retried_next_run():
    db = _make_session()
    try:
        broken, _ = _seed_contest(db, "broken", NOW - timedelta(hours=2), [
            ("ann", 50, 0, None),
            ("bob", 80, 1, None),
        ])
        healthy, _ = _seed_contest(db, "healthy", NOW - timedelta(hours=1), [("cat", 40, 0, None)])

        report = _FailingFinalizer("broken").finalize_expired_contests(db, now=NOW)

        assert report.finalized == [healthy.id]
        assert list(report.failed) == [broken.id]
        assert "connection lost" in report.failed[broken.id]
        assert _ranks(db, broken.id) == {"ann": None, "bob": None}
        assert _scores(db) == {"ann": 0, "bob": 0, "cat": 40}

        retry = ContestFinalizer(recredit_ranked=False).finalize_expired_contests(db, now=NOW)

        assert retry.finalized == [broken.id]
        assert _ranks(db, broken.id) == {"bob": 1, "ann": 2}
        assert _scores(db) == {"ann": 50, "bob": 80, "cat": 40}
    finally:
        db.close()


def test_plan_from_a_stale_read_does_not_credit_again(tmp_path):
    first, second = _make_shared_sessions(tmp_path)
    try:
        contest, _ = _seed_contest(first, "race", NOW - timedelta(minutes=1), [
            ("ann", 10, 0, None),
            ("bob", 20, 0, None),
        ])
        finalizer = ContestFinalizer(recredit_ranked=False)

        # Both runs read the contest while every participant is still unranked
        stale_plan = plan_finalization(
            contest.id,
            finalizer.load_participants(first, contest.id),
            scoring_type=contest.scoring_type,
        )
        first.commit()

        winner = finalizer.finalize_contest(second, second.get(Contest, contest.id))
        assert winner.applied_credits == 2

        applied = finalizer._apply_plan(first, stale_plan)
        first.commit()

        assert applied == 0
        first.expire_all()
        assert _scores(first) == {"ann": 10, "bob": 20}
        assert {user.username: user.attended for user in first.query(User).all()} == {"ann": 1, "bob": 1}
        assert _ranks(first, contest.id) == {"bob": 1, "ann": 2}
    finally:
        first.close()
        second.close()
