"""
Time Limit Enforcer

The countdown shown to learners is advisory only. The authoritative check
happens here, on the server, using the attempt's ``started_at`` and the
time limit pinned in its content signature. Client-reported time is never
trusted to extend an attempt.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Callable, Optional

from django.conf import settings
from django.utils import timezone

from ...exceptions import TimeLimitExceeded

logger = logging.getLogger(__name__)


class TimeLimitEnforcer:
    """
    Deadline arithmetic and enforcement for timed attempts.

    Args:
        grace_seconds: Tolerance before an overrun counts (defaults to
            ``settings.ASSESSMENT_TIME_LIMIT_GRACE_SECONDS``)
        clock: Callable returning the current aware datetime
    """

    def __init__(self, grace_seconds: Optional[int] = None, clock: Callable[[], datetime] = timezone.now):
        if grace_seconds is None:
            grace_seconds = getattr(settings, "ASSESSMENT_TIME_LIMIT_GRACE_SECONDS", 5)
        self.grace_seconds = grace_seconds
        self.clock = clock
        self.logger = logger

    def deadline(self, attempt) -> Optional[datetime]:
        limit = attempt.time_limit_seconds
        if not limit:
            return None
        return attempt.started_at + timedelta(seconds=limit)

    def remaining_seconds(self, attempt, now: Optional[datetime] = None) -> Optional[int]:
        """Seconds left for the client countdown, never negative."""
        deadline = self.deadline(attempt)
        if deadline is None:
            return None
        now = now or self.clock()
        return max(0, math.ceil((deadline - now).total_seconds()))

    def elapsed_seconds(self, attempt, now: Optional[datetime] = None) -> int:
        now = now or self.clock()
        return max(0, int((now - attempt.started_at).total_seconds()))

    def is_overdue(self, attempt, now: Optional[datetime] = None) -> bool:
        """True once wall-clock time since start is past the limit plus grace."""
        deadline = self.deadline(attempt)
        if deadline is None:
            return False
        now = now or self.clock()
        return now > deadline + timedelta(seconds=self.grace_seconds)

    def capped_seconds(self, attempt, reported: Optional[int], now: Optional[datetime] = None) -> int:
        """
        Time to store for a submission.

        Falls back to server-derived elapsed time when the client reports
        nothing. On timed attempts the client can never report less than the
        server measured, and the result never exceeds the limit.
        """
        elapsed = self.elapsed_seconds(attempt, now)
        spent = max(0, int(reported)) if reported is not None else elapsed
        limit = attempt.time_limit_seconds
        if limit:
            spent = min(max(spent, elapsed), limit)
        return spent

    def check_submission(self, attempt, reported: Optional[int], now: Optional[datetime] = None) -> None:
        """
        Raise TimeLimitExceeded when either the reported time or the
        server-derived elapsed time runs past the limit plus grace.
        """
        limit = attempt.time_limit_seconds
        if not limit:
            return
        allowed = limit + self.grace_seconds
        if (reported is not None and reported > allowed) or self.is_overdue(attempt, now):
            raise TimeLimitExceeded(attempt.pk, limit)

    def ensure_open(self, attempt, now: Optional[datetime] = None) -> None:
        """Raise TimeLimitExceeded if the attempt may no longer take responses."""
        if self.is_overdue(attempt, now):
            raise TimeLimitExceeded(attempt.pk, attempt.time_limit_seconds)
