"""
Attempt Services Package

- AttemptService: attempt state machine (start, buffer, submit, expire, grade)
- TimeLimitEnforcer: authoritative server-side deadline checks

Author: DSP Development Team
Version: 1.0.0
"""

from .attempt_service import AttemptService
from .time_limit import TimeLimitEnforcer

__all__ = ["AttemptService", "TimeLimitEnforcer"]
