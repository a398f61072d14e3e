"""
Attempt Service

Orchestrates the attempt state machine::

    NOT_STARTED -> IN_PROGRESS -> {SUBMITTED, EXPIRED} -> GRADED

- start_attempt: eligibility check and creation under one transaction,
  guarded by the unique (content, user_id, attempt_number) constraint
- save_responses: buffers in-progress answers
- submit_attempt: validate, score and close an attempt; repeated calls on a
  closed attempt return the stored result unchanged
- expire_attempt: automatic submission of the buffered answers once the
  time limit has run out
- grade_submission: manual grading of assignment attempts

Every state change runs inside ``transaction.atomic()``; a failure rolls
back the whole change so no attempt is ever left half-graded.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import QuerySet
from django.utils import timezone

from ...attempts.models import Attempt, Submission
from ...content.choices import ContentKind
from ...content.models import AssessableContent, signature_hash
from ...exceptions import (
    AttemptsExhausted,
    InvalidAttemptState,
    PersistenceError,
    ResponseValidationError,
    RetryNotAllowed,
    TimeLimitExceeded,
)
from ...signals import send_attempt_finalized
from ..results import AttemptResult, Eligibility, build_result, is_complete, retry_eligibility
from ..scoring import is_passed, score_interactive, score_quiz
from ..validation import ResponseValidator
from .time_limit import TimeLimitEnforcer

logger = logging.getLogger(__name__)


class AttemptService:
    """
    Service for the attempt lifecycle.

    Args:
        clock: Callable returning the current aware datetime (injectable for tests)
        enforcer: Time limit enforcer sharing the same clock
        validator: Response validator
    """

    def __init__(
        self,
        clock: Callable = timezone.now,
        enforcer: Optional[TimeLimitEnforcer] = None,
        validator: Optional[ResponseValidator] = None,
    ):
        self.logger = logger
        self.clock = clock
        self.enforcer = enforcer or TimeLimitEnforcer(clock=clock)
        self.validator = validator or ResponseValidator()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_attempts(self, content_id: int, user_id: int) -> QuerySet:
        """Attempt history of a learner, newest first."""
        return Attempt.objects.filter(content_id=content_id, user_id=user_id).order_by("-attempt_number")

    def get_eligibility(self, content_id: int, user_id: int) -> Eligibility:
        content = AssessableContent.objects.get(pk=content_id)
        attempts = Attempt.objects.filter(content=content, user_id=user_id)
        return retry_eligibility(
            {"max_attempts": content.max_attempts, "allow_replay": content.allow_replay},
            attempts.count(),
            attempts.filter(passed=True).exists(),
        )

    def get_result(self, attempt: Attempt) -> AttemptResult:
        return build_result(attempt)

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------

    def start_attempt(self, content_id: int, user_id: int) -> Attempt:
        """
        Start a new attempt.

        Raises:
            AssessableContent.DoesNotExist: unknown content
            AttemptsExhausted: every attempt slot is used
            RetryNotAllowed: the learner passed and replay is disabled
            PersistenceError: the database failed, or the attempt number kept
                colliding although slots remain
        """
        retries = max(1, getattr(settings, "ASSESSMENT_START_RETRIES", 3))
        max_attempts = None

        for round_number in range(1, retries + 1):
            try:
                with transaction.atomic():
                    content = AssessableContent.objects.select_for_update().get(pk=content_id)
                    max_attempts = content.max_attempts
                    prior = self._count_prior_attempts(content, user_id)
                    self._check_can_start(content, user_id, prior)

                    signature = content.build_signature()
                    attempt = Attempt.objects.create(
                        content=content,
                        user_id=user_id,
                        attempt_number=prior + 1,
                        status=Attempt.Status.IN_PROGRESS,
                        started_at=self.clock(),
                        content_signature=signature,
                        signature_hash=signature_hash(signature),
                    )
            except IntegrityError:
                self.logger.warning(
                    f"Concurrent start for content {content_id} / user {user_id} (round {round_number}/{retries})"
                )
                continue
            except DatabaseError as exc:
                self.logger.error(f"Could not start attempt for content {content_id}", exc_info=True)
                raise PersistenceError(f"Could not start attempt: {exc}") from exc

            self.logger.info(
                f"Started attempt {attempt.attempt_number}/{content.max_attempts} "
                f"for content {content_id} by user {user_id}"
            )
            return attempt

        used = Attempt.objects.filter(content_id=content_id, user_id=user_id).count()
        if max_attempts is not None and used >= max_attempts:
            raise AttemptsExhausted(content_id, max_attempts)
        self.logger.error(
            f"Start for content {content_id} / user {user_id} kept colliding after {retries} rounds "
            f"({used} attempt(s) on record)"
        )
        raise PersistenceError(f"Could not start attempt for content {content_id}: attempt number kept colliding")

    def _count_prior_attempts(self, content: AssessableContent, user_id: int) -> int:
        return Attempt.objects.filter(content=content, user_id=user_id).count()

    def _check_can_start(self, content: AssessableContent, user_id: int, prior: int) -> None:
        any_passed = Attempt.objects.filter(content=content, user_id=user_id, passed=True).exists()
        eligibility = retry_eligibility(
            {"max_attempts": content.max_attempts, "allow_replay": content.allow_replay},
            prior,
            any_passed,
        )
        if eligibility.can_retry:
            return
        self.logger.warning(
            f"Start refused for content {content.pk} / user {user_id}: {eligibility.reason}"
        )
        if eligibility.reason == "attempts_exhausted":
            raise AttemptsExhausted(content.pk, content.max_attempts)
        raise RetryNotAllowed(content.pk)

    # ------------------------------------------------------------------
    # Buffering
    # ------------------------------------------------------------------

    def save_responses(self, attempt_id: int, responses: Any) -> Attempt:
        """
        Buffer in-progress responses.

        Saving onto an overdue attempt expires it first and then raises
        TimeLimitExceeded; the expiry itself is committed.
        """
        overdue = None
        with self._atomic(f"save responses for attempt {attempt_id}"):
            attempt = self._lock(attempt_id)
            if not attempt.is_open:
                raise InvalidAttemptState(attempt.pk, attempt.status, "save responses for")

            now = self.clock()
            try:
                self.enforcer.ensure_open(attempt, now)
            except TimeLimitExceeded as exc:
                self.logger.warning(f"Responses for attempt {attempt.pk} arrived after the deadline")
                self._expire_locked(attempt, now)
                overdue = exc
            else:
                if attempt.kind == ContentKind.ASSIGNMENT:
                    cleaned = self.validator.validate_submission(
                        self._assignment(attempt), responses, now,
                        require_content=False, enforce_due_date=False,
                    )
                    cleaned.pop("is_late")
                else:
                    cleaned = self.validator.validate(self._items(attempt), responses)
                attempt.responses = cleaned
                attempt.save(update_fields=["responses"])

        if overdue is not None:
            raise overdue
        return attempt

    # ------------------------------------------------------------------
    # Submit / expire
    # ------------------------------------------------------------------

    def submit_attempt(
        self, attempt_id: int, responses: Any, time_spent_seconds: Optional[int] = None
    ) -> AttemptResult:
        """
        Validate, score and close an attempt.

        A submission past the time limit is still accepted, with its time
        capped at the limit and ``time_limit_exceeded`` set. Submitting an
        attempt that is no longer in progress returns its stored result.

        Raises:
            ResponseValidationError: malformed response; attempt stays IN_PROGRESS
            PersistenceError: the database failed; nothing is stored
        """
        with self._atomic(f"submit attempt {attempt_id}"):
            attempt = self._lock(attempt_id)
            if not attempt.is_open:
                self.logger.info(f"Duplicate submit for attempt {attempt.pk} ({attempt.status}); returning stored result")
                return self.get_result(attempt)

            now = self.clock()
            if attempt.kind == ContentKind.ASSIGNMENT:
                cleaned = self.validator.validate_submission(self._assignment(attempt), responses, now)
            else:
                cleaned = self.validator.validate(self._items(attempt), responses)

            exceeded = False
            try:
                self.enforcer.check_submission(attempt, time_spent_seconds, now)
            except TimeLimitExceeded as exc:
                self.logger.warning(f"{exc.message}; accepting with time capped at the limit")
                exceeded = True

            time_spent = self.enforcer.capped_seconds(attempt, time_spent_seconds, now)
            result = self._finalize(attempt, cleaned, time_spent, exceeded, now, expired=False)

        return result

    def expire_attempt(self, attempt_id: int) -> AttemptResult:
        """
        Close an attempt whose time ran out, grading the buffered responses.

        Raises:
            InvalidAttemptState: the attempt is still within its time limit
        """
        with self._atomic(f"expire attempt {attempt_id}"):
            attempt = self._lock(attempt_id)
            if not attempt.is_open:
                return self.get_result(attempt)

            now = self.clock()
            if not self.enforcer.is_overdue(attempt, now):
                raise InvalidAttemptState(attempt.pk, attempt.status, "expire")
            return self._expire_locked(attempt, now)

    def expire_overdue(self) -> List[int]:
        """Expire every in-progress attempt past its deadline. Returns their ids."""
        now = self.clock()
        candidates = Attempt.objects.filter(status=Attempt.Status.IN_PROGRESS).only(
            "id", "started_at", "content_signature"
        )
        expired = []
        for attempt in list(candidates):
            if not self.enforcer.is_overdue(attempt, now):
                continue
            self.expire_attempt(attempt.pk)
            expired.append(attempt.pk)
        return expired

    def _expire_locked(self, attempt: Attempt, now) -> AttemptResult:
        if attempt.kind == ContentKind.ASSIGNMENT:
            try:
                cleaned = self.validator.validate_submission(
                    self._assignment(attempt), attempt.responses, now,
                    require_content=False, enforce_due_date=False,
                )
            except ResponseValidationError as exc:
                self.logger.warning(f"Discarding invalid buffered submission of attempt {attempt.pk}: {exc.message}")
                cleaned = {"text": "", "file_reference": "", "file_name": "", "file_size_bytes": None, "is_late": False}
        else:
            cleaned = self.validator.sanitize(self._items(attempt), attempt.responses)

        self.logger.info(f"Expiring attempt {attempt.pk} after {attempt.time_limit_seconds}s")
        return self._finalize(
            attempt, cleaned, attempt.time_limit_seconds, True, now, expired=True
        )

    def _finalize(self, attempt: Attempt, cleaned: Dict[str, Any], time_spent: int,
                  exceeded: bool, now, expired: bool) -> AttemptResult:
        attempt.submitted_at = now
        attempt.time_spent_seconds = time_spent
        attempt.time_limit_exceeded = exceeded

        if attempt.kind == ContentKind.ASSIGNMENT:
            payload = dict(cleaned)
            is_late = payload.pop("is_late", False)
            attempt.responses = payload
            attempt.status = Attempt.Status.EXPIRED if expired else Attempt.Status.SUBMITTED
            attempt.save()
            Submission.objects.create(attempt=attempt, is_late=is_late, **payload)
        else:
            attempt.responses = cleaned
            self._apply_score(attempt, cleaned)
            if expired:
                attempt.status = Attempt.Status.EXPIRED
                attempt.save()
            attempt.status = Attempt.Status.GRADED
            attempt.graded_at = now
            attempt.save()

        result = self.get_result(attempt)
        self.logger.info(
            f"Attempt {attempt.pk} closed as {attempt.status} "
            f"(score={result.score}, passed={result.passed}, time={time_spent}s)"
        )
        send_attempt_finalized(self.__class__, attempt, result, is_complete(attempt.kind, result, attempt.content_signature))
        return result

    def _apply_score(self, attempt: Attempt, responses: Dict[str, Any]) -> None:
        items = self._items(attempt)
        if attempt.kind == ContentKind.QUIZ:
            scored = score_quiz(items, responses)
            entries = scored.per_item
        else:
            scored = score_interactive(items, responses)
            entries = scored.per_element

        by_key = {item["key"]: item for item in items}
        breakdown = []
        for entry in entries:
            row = entry.to_dict()
            row["response"] = responses.get(entry.key)
            row["correct_answer"] = by_key[entry.key]["correct_answer"]
            row["explanation"] = by_key[entry.key].get("explanation", "")
            breakdown.append(row)

        attempt.score = scored.score
        attempt.points_earned = scored.points_earned
        attempt.total_points = scored.total_points
        attempt.passed = is_passed(scored.score, attempt.content_signature.get("passing_score"))
        attempt.breakdown = breakdown
        attempt.pending_review = scored.pending_review

    # ------------------------------------------------------------------
    # Manual grading
    # ------------------------------------------------------------------

    def grade_submission(self, attempt_id: int, grade: Any, feedback: str, grader_id: int) -> Attempt:
        """
        Grade an assignment attempt.

        Raises:
            InvalidAttemptState: not an assignment, or not SUBMITTED/EXPIRED
            ResponseValidationError: grade outside 0..max_points
        """
        with self._atomic(f"grade attempt {attempt_id}"):
            attempt = self._lock(attempt_id)
            if attempt.kind != ContentKind.ASSIGNMENT:
                raise InvalidAttemptState(attempt.pk, attempt.status, "manually grade non-assignment")
            if attempt.status not in (Attempt.Status.SUBMITTED, Attempt.Status.EXPIRED):
                raise InvalidAttemptState(attempt.pk, attempt.status, "grade")

            grade = Decimal(str(grade))
            max_points = self._assignment(attempt)["max_points"]
            if grade < 0 or grade > max_points:
                raise ResponseValidationError("grade", f"grade must be between 0 and {max_points}")

            now = self.clock()
            submission = attempt.submission
            submission.grade = grade
            submission.feedback = feedback or ""
            submission.graded_by_id = grader_id
            submission.graded_at = now
            submission.save()

            attempt.status = Attempt.Status.GRADED
            attempt.graded_at = now
            attempt.save(update_fields=["status", "graded_at"])

            result = self.get_result(attempt)
            send_attempt_finalized(
                self.__class__, attempt, result, is_complete(attempt.kind, result, attempt.content_signature)
            )

        self.logger.info(f"Attempt {attempt.pk} graded {grade}/{max_points} by user {grader_id}")
        return attempt

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock(self, attempt_id: int) -> Attempt:
        return Attempt.objects.select_for_update().get(pk=attempt_id)

    @staticmethod
    def _items(attempt: Attempt) -> List[Dict[str, Any]]:
        return attempt.content_signature.get("items", [])

    @staticmethod
    def _assignment(attempt: Attempt) -> Dict[str, Any]:
        return attempt.content_signature["assignment"]

    def _atomic(self, operation: str):
        return _PersistenceGuard(operation, self.logger)


class _PersistenceGuard:
    """``transaction.atomic()`` that re-raises database failures as PersistenceError."""

    def __init__(self, operation: str, log):
        self.operation = operation
        self.log = log
        self.atomic = transaction.atomic()

    def __enter__(self):
        return self.atomic.__enter__()

    def __exit__(self, exc_type, exc, tb):
        self.atomic.__exit__(exc_type, exc, tb)
        if exc_type is not None and issubclass(exc_type, DatabaseError):
            self.log.error(f"Database failure while trying to {self.operation}", exc_info=(exc_type, exc, tb))
            raise PersistenceError(f"Could not {self.operation}") from exc
        return False
