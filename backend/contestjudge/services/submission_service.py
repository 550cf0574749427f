"""Submission service - judges code against a problem's test cases and records the verdict"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional
import logging
import math

from sqlalchemy.orm import Session

from contestjudge.models.problem import Problem, TestCase
from contestjudge.models.submission import Submission, SubmissionResult
from contestjudge.schemas.submission import SampleRunRequest, SubmissionCreate
from contestjudge.services.judge_client import JudgeResult, judge_client
from contestjudge.services.verdict import Verdict, map_status, reduce_verdicts
from contestjudge.core.exceptions import JudgeUnavailableError, ResourceNotFoundError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class JudgedTestCase:
    """Judge output for one test case of a submission"""
    test_case_id: int
    result: JudgeResult


def _max_ignoring_missing(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [value for value in values if value is not None and not math.isnan(value)]
    return max(present) if present else None


class SubmissionService:
    """Service for judging and recording submissions"""

    @staticmethod
    def get_published_problem(db: Session, slug: str) -> Problem:
        problem = db.query(Problem).filter(Problem.slug == slug).first()
        if not problem or not problem.is_published:
            raise ResourceNotFoundError("Task")
        return problem

    @staticmethod
    def check_language(problem: Problem, language_id: int) -> None:
        allowed = problem.allowed_language_ids or []
        if allowed and language_id not in allowed:
            raise ValidationError(
                "Selected language is not allowed for this task.",
                details={"language_id": language_id, "allowed": allowed},
            )

    @staticmethod
    def submit(
        db: Session,
        problem_slug: str,
        submission_data: SubmissionCreate,
        client=None,
    ) -> Submission:
        """
        Judge code against every test case of a problem

        Args:
            db: Database session
            problem_slug: Problem slug
            submission_data: Validated submission payload
            client: Judge client, defaults to the configured Judge0 client

        Returns:
            The judged submission
        """
        client = client or judge_client
        problem = SubmissionService.get_published_problem(db, problem_slug)

        SubmissionService.check_language(problem, submission_data.language_id)

        test_cases = (
            db.query(TestCase)
            .filter(TestCase.problem_id == problem.id)
            .order_by(TestCase.id.asc())
            .all()
        )
        if not test_cases:
            raise ValidationError("No test cases found for this task.")

        submission = Submission(
            user_id=submission_data.user_id,
            problem_id=problem.id,
            language_id=submission_data.language_id,
            language=submission_data.language,
            code=submission_data.code,
            status=Verdict.PENDING.value,
        )
        db.add(submission)
        db.commit()
        db.refresh(submission)

        judged = []
        for test_case in test_cases:
            try:
                result = client.run(
                    source_code=submission_data.code,
                    language_id=submission_data.language_id,
                    stdin=test_case.input,
                    expected_output=test_case.output,
                )
            except JudgeUnavailableError as exc:
                logger.error("Judge0 submit failed for %s: %s", problem_slug, exc.message)
                raise
            logger.info(
                "Judged submission %s test case %s: status %s",
                submission.id, test_case.id, result.status_id,
            )
            judged.append(JudgedTestCase(test_case_id=test_case.id, result=result))

        return SubmissionService.record_results(db, submission, judged)

    @staticmethod
    def run_samples(
        db: Session,
        problem_slug: str,
        run_data: SampleRunRequest,
        client=None,
    ) -> List[Dict[str, Any]]:
        """
        Judge code against the sample test cases of a problem

        Nothing is stored; hidden test cases are never sent to the judge.

        Returns:
            One result per sample test case, in test case order
        """
        client = client or judge_client
        problem = SubmissionService.get_published_problem(db, problem_slug)
        SubmissionService.check_language(problem, run_data.language_id)

        samples = (
            db.query(TestCase)
            .filter(TestCase.problem_id == problem.id, TestCase.is_sample.is_(True))
            .order_by(TestCase.id.asc())
            .all()
        )
        if not samples:
            raise ValidationError("No sample test cases found for this task.")

        results = []
        for test_case in samples:
            try:
                result = client.run(
                    source_code=run_data.code,
                    language_id=run_data.language_id,
                    stdin=test_case.input,
                    expected_output=test_case.output,
                )
            except JudgeUnavailableError as exc:
                logger.error("Judge0 run failed for %s: %s", problem_slug, exc.message)
                raise
            verdict = map_status(result.status_id)
            results.append({
                "test_case_id": test_case.id,
                "actual_output": result.output,
                "passed": verdict == Verdict.ACCEPTED,
                "judge_status": verdict.value,
            })

        logger.info("Ran %s sample test case(s) for %s", len(results), problem_slug)
        return results

    @staticmethod
    def record_results(db: Session, submission: Submission, judged: List[JudgedTestCase]) -> Submission:
        """
        Store per-test-case results and the reduced submission verdict

        Runtime and memory are the maxima over the test cases that
        reported a value. Results, submission and problem counters are
        committed together.
        """
        verdicts = [map_status(item.result.status_id) for item in judged]
        final_status = reduce_verdicts(verdicts)

        db.add_all([
            SubmissionResult(
                submission_id=submission.id,
                test_case_id=item.test_case_id,
                actual_output=item.result.output,
                passed=verdict == Verdict.ACCEPTED,
                runtime=item.result.time,
            )
            for item, verdict in zip(judged, verdicts)
        ])

        submission.status = final_status.value
        submission.execution_time = _max_ignoring_missing(item.result.time for item in judged)
        submission.memory_used = _max_ignoring_missing(item.result.memory for item in judged)

        problem = db.get(Problem, submission.problem_id)
        if problem is not None:
            problem.participant_count = (problem.participant_count or 0) + 1
            if final_status == Verdict.ACCEPTED:
                problem.success_count = (problem.success_count or 0) + 1

        db.commit()
        db.refresh(submission)

        logger.info("Submission %s finished: %s", submission.id, final_status.value)
        return submission

    @staticmethod
    def latest_status(db: Session, user_id: int, problem_slug: str) -> Dict[str, Any]:
        """Summary of the user's most recent submission for a problem"""
        problem = SubmissionService.get_published_problem(db, problem_slug)
        submission = (
            db.query(Submission)
            .filter(Submission.user_id == user_id, Submission.problem_id == problem.id)
            .order_by(Submission.created_at.desc(), Submission.id.desc())
            .first()
        )
        if not submission:
            return {"has_submission": False}

        return {
            "has_submission": True,
            "status": submission.status,
            "execution_time": submission.execution_time,
            "memory_used": submission.memory_used,
            "created_at": submission.created_at,
        }


# Singleton instance
submission_service = SubmissionService()
