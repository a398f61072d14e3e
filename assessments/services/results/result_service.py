"""
Result Aggregator

Turns a finished (or in-flight) attempt into the learner-facing result, and
provides the two pure policy functions the rest of the system relies on:

- ``is_complete(kind, result, config)``: completion predicate for the
  external progress tracker
- ``retry_eligibility(config, attempts_used, any_passed)``: whether another
  attempt may be started

Both are functions of their arguments only.

Author: DSP Development Team
Version: 1.0.0
"""

from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Any, Dict, List, Optional

from ...attempts.models import Attempt
from ...content.choices import ContentKind

# Keys of a breakdown entry that are only shown when the content reveals answers
ANSWER_KEYS = ("correct_answer", "explanation")


@dataclass(frozen=True)
class AttemptResult:
    attempt_id: int
    content_id: int
    kind: str
    status: str
    attempt_number: int
    score: Optional[Decimal]
    passed: Optional[bool]
    points_earned: Optional[int]
    total_points: Optional[int]
    per_item_breakdown: List[Dict[str, Any]]
    pending_review: List[str]
    attempts_remaining: int
    time_spent_seconds: Optional[int]
    time_limit_exceeded: bool
    has_submission_content: bool = False
    grade: Optional[Decimal] = None
    feedback: str = ""
    is_late: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["score"] = str(self.score) if self.score is not None else None
        data["grade"] = str(self.grade) if self.grade is not None else None
        return data


@dataclass(frozen=True)
class Eligibility:
    attempts_used: int
    attempts_remaining: int
    can_retry: bool
    reason: str = ""
    passed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _public_breakdown(breakdown: List[Dict[str, Any]], show_answers: bool) -> List[Dict[str, Any]]:
    if show_answers:
        return [dict(entry) for entry in breakdown]
    return [{k: v for k, v in entry.items() if k not in ANSWER_KEYS} for entry in breakdown]


def build_result(attempt) -> AttemptResult:
    """
    Build the learner-facing result of an attempt.

    ``attempts_remaining`` counts from the attempt's own number, so the
    result of a closed attempt stays the same when later attempts start.

    Args:
        attempt: Attempt instance (any status)
    """
    signature = attempt.content_signature
    submission = getattr(attempt, "submission", None) if signature["kind"] == ContentKind.ASSIGNMENT else None

    return AttemptResult(
        attempt_id=attempt.pk,
        content_id=attempt.content_id,
        kind=signature["kind"],
        status=attempt.status,
        attempt_number=attempt.attempt_number,
        score=attempt.score,
        passed=attempt.passed,
        points_earned=attempt.points_earned,
        total_points=attempt.total_points,
        per_item_breakdown=_public_breakdown(attempt.breakdown or [], signature.get("show_correct_answers", False)),
        pending_review=list(attempt.pending_review or []),
        attempts_remaining=max(0, signature["max_attempts"] - attempt.attempt_number),
        time_spent_seconds=attempt.time_spent_seconds,
        time_limit_exceeded=attempt.time_limit_exceeded,
        has_submission_content=bool(submission and submission.has_content),
        grade=submission.grade if submission else None,
        feedback=submission.feedback if submission else "",
        is_late=bool(submission and submission.is_late),
    )


def is_complete(kind: str, result: AttemptResult, config: Dict[str, Any]) -> bool:
    """
    Completion predicate consumed by the progress tracker.

    - quiz: the attempt passed
    - assignment: the attempt was submitted (or graded), or it expired with
      text or a file on record
    - interactive: the attempt passed, or it is graded when no passing score
      is configured
    """
    if kind == ContentKind.QUIZ:
        return result.passed is True

    if kind == ContentKind.ASSIGNMENT:
        if result.status in (Attempt.Status.SUBMITTED, Attempt.Status.GRADED):
            return True
        return result.status == Attempt.Status.EXPIRED and result.has_submission_content

    if kind == ContentKind.INTERACTIVE:
        if config.get("passing_score") is None:
            return result.status == Attempt.Status.GRADED
        return result.passed is True

    return False


def retry_eligibility(config: Dict[str, Any], attempts_used: int, any_passed: bool) -> Eligibility:
    """attempts_used < max_attempts AND (allow_replay OR NOT passed)."""
    max_attempts = config["max_attempts"]
    remaining = max(0, max_attempts - attempts_used)

    if remaining == 0:
        return Eligibility(attempts_used, remaining, False, "attempts_exhausted", any_passed)
    if any_passed and not config.get("allow_replay"):
        return Eligibility(attempts_used, remaining, False, "already_passed", any_passed)
    return Eligibility(attempts_used, remaining, True, "", any_passed)
