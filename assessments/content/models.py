"""
Assessable Content Models

Defines the content an attempt can be taken against:

- AssessableContent: a quiz, an assignment or an interactive activity with its
  attempt, time and pass policy
- Item: one ordered, typed question or interactive element with its
  correct-answer specification

Items of quizzes and interactive content are pinned into every attempt at
start (see ``AssessableContent.build_signature``) so that later edits never
change how an existing attempt is graded.

Author: DSP Development Team
Version: 1.0.0
"""

import copy
import hashlib
import json
from typing import Any, Dict

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from . import registry
from .choices import ContentKind, ItemType, ITEM_TYPES_BY_KIND

__all__ = ["AssessableContent", "Item", "ContentKind", "ItemType", "signature_hash"]


def signature_hash(signature: Dict[str, Any]) -> str:
    """SHA-256 over the canonical JSON form of a content signature."""
    canonical = json.dumps(signature, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


class AssessableContent(models.Model):
    """
    A quiz, assignment or interactive activity that learners attempt.

    Attributes:
        kind: Content family (quiz / assignment / interactive)
        title: Display title
        lesson_id: External lesson this content completes
        max_attempts: Attempts a learner may start
        time_limit_seconds: Optional limit per attempt
        passing_score: Optional pass threshold in percent (inclusive)
        allow_replay: Whether a learner who passed may start again
        show_correct_answers: Whether results reveal correct answers

    Assignment settings:
        instructions, allowed_file_types, max_file_size_mb, due_at,
        allow_late_submission and max_points only apply to assignments.
    """

    kind = models.CharField(
        max_length=20,
        choices=ContentKind.choices,
        verbose_name=_("Content Kind"),
    )
    title = models.CharField(max_length=255, verbose_name=_("Title"))
    lesson_id = models.PositiveIntegerField(
        null=True,
        blank=True,
        db_index=True,
        verbose_name=_("Lesson ID"),
        help_text=_("External lesson reference reported with completion signals"),
    )
    max_attempts = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name=_("Max Attempts"),
    )
    time_limit_seconds = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        verbose_name=_("Time Limit (seconds)"),
    )
    passing_score = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        verbose_name=_("Passing Score (%)"),
    )
    allow_replay = models.BooleanField(default=False, verbose_name=_("Allow Replay"))
    show_correct_answers = models.BooleanField(
        default=False, verbose_name=_("Show Correct Answers")
    )

    instructions = models.TextField(blank=True, verbose_name=_("Instructions"))
    allowed_file_types = models.JSONField(
        default=list,
        blank=True,
        verbose_name=_("Allowed File Types"),
        help_text=_('File extensions accepted for assignments, e.g. [".pdf", ".docx"]'),
    )
    max_file_size_mb = models.PositiveIntegerField(
        default=10, verbose_name=_("Max File Size (MB)")
    )
    due_at = models.DateTimeField(null=True, blank=True, verbose_name=_("Due At"))
    allow_late_submission = models.BooleanField(
        default=False, verbose_name=_("Allow Late Submission")
    )
    max_points = models.PositiveIntegerField(
        default=100, verbose_name=_("Max Points"), help_text=_("Upper bound for manual grades")
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Assessable Content")
        verbose_name_plural = _("Assessable Contents")
        ordering = ["title"]
        db_table = "assessments_content"

    def __str__(self) -> str:
        return f"{self.get_kind_display()}: {self.title}"

    @property
    def is_assignment(self) -> bool:
        return self.kind == ContentKind.ASSIGNMENT

    def clean(self):
        """Validate per-kind rules against the items already stored."""
        super().clean()

        if not self.pk:
            return

        items = list(self.items.all())
        if self.kind == ContentKind.ASSIGNMENT and items:
            raise ValidationError("Assignments cannot contain items")

        allowed = ITEM_TYPES_BY_KIND[self.kind]
        foreign = [item.key for item in items if item.item_type not in allowed]
        if foreign:
            raise ValidationError(
                f"Items {', '.join(foreign)} do not belong to {self.get_kind_display()} content"
            )

        if self.kind == ContentKind.QUIZ and items:
            if not any(registry.is_auto_gradable(item.item_type, item.config) for item in items):
                raise ValidationError("A quiz needs at least one automatically gradable item")

    def build_signature(self) -> Dict[str, Any]:
        """
        Snapshot everything grading depends on.

        The returned dict is a deep copy, detached from the live rows, and is
        stored unchanged on the attempt for its whole life.
        """
        signature = {
            "content_id": self.pk,
            "kind": self.kind,
            "title": self.title,
            "lesson_id": self.lesson_id,
            "max_attempts": self.max_attempts,
            "time_limit_seconds": self.time_limit_seconds,
            "passing_score": str(self.passing_score) if self.passing_score is not None else None,
            "allow_replay": self.allow_replay,
            "show_correct_answers": self.show_correct_answers,
        }
        if self.is_assignment:
            signature["assignment"] = {
                "instructions": self.instructions,
                "allowed_file_types": list(self.allowed_file_types or []),
                "max_file_size_mb": self.max_file_size_mb,
                "due_at": self.due_at.isoformat() if self.due_at else None,
                "allow_late_submission": self.allow_late_submission,
                "max_points": self.max_points,
            }
            signature["items"] = []
        else:
            signature["items"] = [item.pinned() for item in self.items.all()]
        return copy.deepcopy(signature)


class Item(models.Model):
    """
    A typed question or interactive element belonging to a content.

    ``config`` holds the type-specific presentation settings (options,
    targets, hotspots, flags such as ``case_sensitive``), ``correct_answer``
    the type-specific correct-answer spec. Both are checked by ``clean()``
    against the registry.
    """

    content = models.ForeignKey(
        AssessableContent,
        related_name="items",
        on_delete=models.CASCADE,
        verbose_name=_("Content"),
    )
    key = models.SlugField(
        max_length=64,
        verbose_name=_("Key"),
        help_text=_("Stable identifier used as response key"),
    )
    item_type = models.CharField(
        max_length=30,
        choices=ItemType.choices,
        verbose_name=_("Item Type"),
    )
    order = models.PositiveIntegerField(default=0, verbose_name=_("Display Order"))
    prompt = models.TextField(blank=True, verbose_name=_("Prompt"))
    points = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)],
        verbose_name=_("Points"),
    )
    config = models.JSONField(default=dict, blank=True, verbose_name=_("Configuration"))
    correct_answer = models.JSONField(
        null=True, blank=True, verbose_name=_("Correct Answer")
    )
    explanation = models.TextField(blank=True, verbose_name=_("Explanation"))

    class Meta:
        verbose_name = _("Item")
        verbose_name_plural = _("Items")
        unique_together = ("content", "key")
        ordering = ["content", "order", "id"]
        db_table = "assessments_item"

    def __str__(self) -> str:
        return f"{self.content.title} - {self.key} ({self.get_item_type_display()})"

    def clean(self):
        """Validate config and correct_answer based on item_type."""
        super().clean()

        if self.content_id and self.item_type not in ITEM_TYPES_BY_KIND[self.content.kind]:
            raise ValidationError(
                f"Item type '{self.item_type}' is not allowed in {self.content.get_kind_display()} content"
            )
        registry.validate_definition(self.item_type, self.config, self.correct_answer)

    def pinned(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "type": self.item_type,
            "prompt": self.prompt,
            "points": self.points,
            "config": copy.deepcopy(self.config or {}),
            "correct_answer": copy.deepcopy(self.correct_answer),
            "explanation": self.explanation,
        }
