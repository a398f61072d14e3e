from rest_framework import serializers

from .models import AssessableContent


class ContentSummarySerializer(serializers.ModelSerializer):
    """Learner-facing policy of a content; never includes items or answers."""

    class Meta:
        model = AssessableContent
        fields = [
            "id",
            "kind",
            "title",
            "lesson_id",
            "max_attempts",
            "time_limit_seconds",
            "passing_score",
            "allow_replay",
            "instructions",
            "allowed_file_types",
            "max_file_size_mb",
            "due_at",
            "allow_late_submission",
        ]
        read_only_fields = fields
