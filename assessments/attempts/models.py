"""
Attempt Models

- Attempt: one learner's pass through an AssessableContent, from start to
  grading. Rows are permanent history and drive retry-count enforcement.
- Submission: the assignment payload of an attempt (text and/or an opaque
  file reference) plus the manual grade.

Author: DSP Development Team
Version: 1.0.0
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ..content.models import AssessableContent
from ..exceptions import InvalidAttemptState

__all__ = ["Attempt", "Submission"]


class Attempt(models.Model):
    class Status(models.TextChoices):
        IN_PROGRESS = "in_progress", _("In Progress")
        SUBMITTED = "submitted", _("Submitted")
        EXPIRED = "expired", _("Expired")
        GRADED = "graded", _("Graded")

    # Felder, die nach Abgabe nicht mehr verändert werden dürfen
    SCORED_FIELDS = (
        "responses",
        "score",
        "points_earned",
        "total_points",
        "passed",
        "time_spent_seconds",
        "time_limit_exceeded",
        "breakdown",
        "pending_review",
    )
    LOCKED_STATUSES = (Status.SUBMITTED, Status.GRADED)

    content = models.ForeignKey(
        AssessableContent, on_delete=models.PROTECT, related_name="attempts"
    )
    user_id = models.PositiveIntegerField(db_index=True)
    attempt_number = models.PositiveIntegerField()
    status = models.CharField(
        max_length=15, choices=Status.choices, default=Status.IN_PROGRESS
    )
    started_at = models.DateTimeField(default=timezone.now)
    submitted_at = models.DateTimeField(null=True, blank=True)
    graded_at = models.DateTimeField(null=True, blank=True)

    responses = models.JSONField(default=dict, blank=True)
    content_signature = models.JSONField(
        help_text=_("Items and correct answers pinned when the attempt started.")
    )
    signature_hash = models.CharField(max_length=64)

    score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        help_text=_("Percentage 0-100. Wird automatisch berechnet."),
    )
    points_earned = models.PositiveIntegerField(null=True, blank=True)
    total_points = models.PositiveIntegerField(null=True, blank=True)
    passed = models.BooleanField(null=True, blank=True)
    time_spent_seconds = models.PositiveIntegerField(null=True, blank=True)
    time_limit_exceeded = models.BooleanField(default=False)
    breakdown = models.JSONField(default=list, blank=True)
    pending_review = models.JSONField(default=list, blank=True)

    class Meta:
        verbose_name = _("Attempt")
        verbose_name_plural = _("Attempts")
        unique_together = ("content", "user_id", "attempt_number")
        ordering = ["content", "user_id", "-attempt_number"]
        db_table = "assessments_attempt"

    def __str__(self):
        return f"Attempt {self.attempt_number} on {self.content_signature.get('title', self.content_id)} by user {self.user_id}"

    @property
    def kind(self) -> str:
        return self.content_signature["kind"]

    @property
    def time_limit_seconds(self):
        return self.content_signature.get("time_limit_seconds")

    @property
    def is_open(self) -> bool:
        return self.status == self.Status.IN_PROGRESS

    def save(self, *args, **kwargs):
        if not self._state.adding:
            original = (
                Attempt.objects.filter(pk=self.pk)
                .values("status", "content_signature", "signature_hash", *self.SCORED_FIELDS)
                .first()
            )
            if original is not None:
                self._guard_immutable_fields(original)
        super().save(*args, **kwargs)

    def _guard_immutable_fields(self, original):
        if (
            original["content_signature"] != self.content_signature
            or original["signature_hash"] != self.signature_hash
        ):
            raise InvalidAttemptState(self.pk, original["status"], "re-pin the content of")

        if original["status"] in self.LOCKED_STATUSES:
            changed = [f for f in self.SCORED_FIELDS if original[f] != getattr(self, f)]
            if changed:
                raise InvalidAttemptState(
                    self.pk, original["status"], f"change {', '.join(changed)} of"
                )


class Submission(models.Model):
    attempt = models.OneToOneField(
        Attempt, on_delete=models.PROTECT, related_name="submission"
    )
    text = models.TextField(blank=True)
    file_reference = models.CharField(
        max_length=500,
        blank=True,
        help_text=_("Opaque URL or id returned by the file storage service."),
    )
    file_name = models.CharField(max_length=255, blank=True)
    file_size_bytes = models.PositiveBigIntegerField(null=True, blank=True)
    is_late = models.BooleanField(default=False)

    grade = models.DecimalField(max_digits=7, decimal_places=2, null=True, blank=True)
    feedback = models.TextField(blank=True)
    graded_by_id = models.PositiveIntegerField(null=True, blank=True)
    graded_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = _("Submission")
        verbose_name_plural = _("Submissions")
        ordering = ["-created_at"]
        db_table = "assessments_submission"

    def __str__(self):
        return f"Submission for attempt {self.attempt_id}"

    @property
    def has_content(self) -> bool:
        return bool(self.text.strip() or self.file_reference)
