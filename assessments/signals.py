"""
Assessment Signals
==================

Outbound hook for the course progress tracker. This engine never writes
progress state itself; it announces finished attempts and lets the
progress layer decide what to do with them.

``attempt_finalized`` is sent after the surrounding transaction commits,
so receivers only ever see persisted attempts. Keyword arguments:

- ``attempt``: the Attempt instance
- ``result``: the AttemptResult built for it
- ``completed``: output of the completion predicate
- ``lesson_id``: external lesson reference of the content (may be None)

Receivers connect the usual way::

    @receiver(attempt_finalized)
    def mark_lesson(sender, attempt, result, completed, lesson_id, **kwargs):
        ...
"""

import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

attempt_finalized = Signal()


def send_attempt_finalized(sender, attempt, result, completed: bool) -> None:
    """Queue ``attempt_finalized`` for when the current transaction commits."""
    lesson_id = attempt.content_signature.get("lesson_id")

    def _send():
        logger.info(
            f"Attempt {attempt.pk} finalized (status={attempt.status}, completed={completed}, lesson={lesson_id})"
        )
        attempt_finalized.send(
            sender=sender,
            attempt=attempt,
            result=result,
            completed=completed,
            lesson_id=lesson_id,
        )

    transaction.on_commit(_send)
