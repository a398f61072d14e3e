from decimal import Decimal

from rest_framework import serializers

from ..content import registry
from .models import Attempt, Submission


class AttemptSerializer(serializers.ModelSerializer):
    """Attempt history entry (no pinned items, no answers)."""

    content_title = serializers.SerializerMethodField()

    class Meta:
        model = Attempt
        fields = [
            "id",
            "content",
            "content_title",
            "user_id",
            "attempt_number",
            "status",
            "started_at",
            "submitted_at",
            "graded_at",
            "score",
            "points_earned",
            "total_points",
            "passed",
            "time_spent_seconds",
            "time_limit_exceeded",
        ]
        read_only_fields = fields

    def get_content_title(self, obj):
        return obj.content_signature.get("title")


class AttemptDetailSerializer(AttemptSerializer):
    """
    Attempt including its pinned items (without correct answers), the
    buffered responses and the advisory countdown values.

    Expects ``enforcer`` (TimeLimitEnforcer) in the serializer context.
    """

    items = serializers.SerializerMethodField()
    instructions = serializers.SerializerMethodField()
    time_limit_seconds = serializers.SerializerMethodField()
    deadline = serializers.SerializerMethodField()
    remaining_seconds = serializers.SerializerMethodField()

    class Meta(AttemptSerializer.Meta):
        fields = AttemptSerializer.Meta.fields + [
            "responses",
            "items",
            "instructions",
            "time_limit_seconds",
            "deadline",
            "remaining_seconds",
        ]
        read_only_fields = fields

    def get_items(self, obj):
        return [registry.public_item(item) for item in obj.content_signature.get("items", [])]

    def get_instructions(self, obj):
        assignment = obj.content_signature.get("assignment") or {}
        return assignment.get("instructions", "")

    def get_time_limit_seconds(self, obj):
        return obj.time_limit_seconds

    def get_deadline(self, obj):
        deadline = self.context["enforcer"].deadline(obj)
        return deadline.isoformat() if deadline else None

    def get_remaining_seconds(self, obj):
        if not obj.is_open:
            return None
        return self.context["enforcer"].remaining_seconds(obj)


class SubmitAttemptSerializer(serializers.Serializer):
    responses = serializers.JSONField(required=False, default=dict)
    time_spent_seconds = serializers.IntegerField(min_value=0, required=False, allow_null=True, default=None)


class SaveResponsesSerializer(serializers.Serializer):
    responses = serializers.JSONField()


class GradeSubmissionSerializer(serializers.Serializer):
    grade = serializers.DecimalField(max_digits=7, decimal_places=2, min_value=Decimal("0"))
    feedback = serializers.CharField(required=False, allow_blank=True, default="")


class SubmissionSerializer(serializers.ModelSerializer):
    """Grader queue entry."""

    attempt = AttemptSerializer(read_only=True)
    max_points = serializers.SerializerMethodField()

    class Meta:
        model = Submission
        fields = [
            "id",
            "attempt",
            "text",
            "file_reference",
            "file_name",
            "file_size_bytes",
            "is_late",
            "grade",
            "feedback",
            "graded_by_id",
            "graded_at",
            "created_at",
            "max_points",
        ]
        read_only_fields = fields

    def get_max_points(self, obj):
        return obj.attempt.content_signature["assignment"]["max_points"]
