"""
Assessments Django Admin Configuration

Content authoring and attempt review through the Django admin (Jazzmin):

- Content Management: assessable content with inline item editing
- Attempt Review: read-only attempt history; attempts are created and
  changed only through the attempt service
- Submissions: read-only view of assignment payloads and grades

Author: DSP Development Team
Version: 1.0.0
"""

from typing import Optional
from django.contrib import admin
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _

from .models import AssessableContent, Item, Attempt, Submission

# --- Content Management ---


class ItemInline(admin.StackedInline):
    """Inline editing of items; ``Item.clean()`` validates each definition."""

    model = Item
    extra = 0
    fields = ("key", "item_type", "order", "prompt", "points", "config", "correct_answer", "explanation")
    ordering = ("order",)


@admin.register(AssessableContent)
class AssessableContentAdmin(admin.ModelAdmin):
    list_display = ("title", "kind", "max_attempts", "time_limit_seconds", "passing_score", "item_count")
    list_filter = ("kind", "allow_replay", "show_correct_answers")
    search_fields = ("title",)
    inlines = [ItemInline]
    fieldsets = (
        (None, {"fields": ("kind", "title", "lesson_id")}),
        (
            _("Attempt Policy"),
            {"fields": ("max_attempts", "time_limit_seconds", "passing_score", "allow_replay", "show_correct_answers")},
        ),
        (
            _("Assignment"),
            {
                "classes": ("collapse",),
                "fields": (
                    "instructions",
                    "allowed_file_types",
                    "max_file_size_mb",
                    "due_at",
                    "allow_late_submission",
                    "max_points",
                ),
            },
        ),
    )

    @admin.display(description=_("Items"))
    def item_count(self, obj: AssessableContent) -> int:
        return obj.items.count()


# --- Attempt Review ---


class SubmissionInline(admin.StackedInline):
    model = Submission
    extra = 0
    can_delete = False
    readonly_fields = (
        "text",
        "file_reference",
        "file_name",
        "file_size_bytes",
        "is_late",
        "grade",
        "feedback",
        "graded_by_id",
        "graded_at",
    )


@admin.register(Attempt)
class AttemptAdmin(admin.ModelAdmin):
    list_display = ("id", "content", "user_id", "attempt_number", "status", "score", "passed", "started_at")
    list_filter = ("status", "passed", "time_limit_exceeded", "content__kind")
    search_fields = ("content__title", "user_id")
    inlines = [SubmissionInline]
    readonly_fields = [field.name for field in Attempt._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: Optional[Attempt] = None) -> bool:
        # Versuche sind permanente Historie
        return False


@admin.register(Submission)
class SubmissionAdmin(admin.ModelAdmin):
    list_display = ("attempt", "is_late", "grade", "graded_at")
    list_filter = ("is_late",)
    readonly_fields = [field.name for field in Submission._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_delete_permission(self, request: HttpRequest, obj: Optional[Submission] = None) -> bool:
        return False
