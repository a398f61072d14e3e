import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="AssessableContent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[("quiz", "Quiz"), ("assignment", "Assignment"), ("interactive", "Interactive Content")],
                        max_length=20,
                        verbose_name="Content Kind",
                    ),
                ),
                ("title", models.CharField(max_length=255, verbose_name="Title")),
                (
                    "lesson_id",
                    models.PositiveIntegerField(
                        blank=True,
                        db_index=True,
                        help_text="External lesson reference reported with completion signals",
                        null=True,
                        verbose_name="Lesson ID",
                    ),
                ),
                (
                    "max_attempts",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Max Attempts",
                    ),
                ),
                (
                    "time_limit_seconds",
                    models.PositiveIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Time Limit (seconds)",
                    ),
                ),
                (
                    "passing_score",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        max_digits=5,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(0),
                            django.core.validators.MaxValueValidator(100),
                        ],
                        verbose_name="Passing Score (%)",
                    ),
                ),
                ("allow_replay", models.BooleanField(default=False, verbose_name="Allow Replay")),
                ("show_correct_answers", models.BooleanField(default=False, verbose_name="Show Correct Answers")),
                ("instructions", models.TextField(blank=True, verbose_name="Instructions")),
                (
                    "allowed_file_types",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text='File extensions accepted for assignments, e.g. [".pdf", ".docx"]',
                        verbose_name="Allowed File Types",
                    ),
                ),
                ("max_file_size_mb", models.PositiveIntegerField(default=10, verbose_name="Max File Size (MB)")),
                ("due_at", models.DateTimeField(blank=True, null=True, verbose_name="Due At")),
                ("allow_late_submission", models.BooleanField(default=False, verbose_name="Allow Late Submission")),
                (
                    "max_points",
                    models.PositiveIntegerField(
                        default=100, help_text="Upper bound for manual grades", verbose_name="Max Points"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Assessable Content",
                "verbose_name_plural": "Assessable Contents",
                "db_table": "assessments_content",
                "ordering": ["title"],
            },
        ),
        migrations.CreateModel(
            name="Item",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "key",
                    models.SlugField(
                        help_text="Stable identifier used as response key", max_length=64, verbose_name="Key"
                    ),
                ),
                (
                    "item_type",
                    models.CharField(
                        choices=[
                            ("multiple_choice", "Multiple Choice"),
                            ("multiple_select", "Multiple Select"),
                            ("true_false", "True / False"),
                            ("fill_blank", "Fill in the Blank"),
                            ("short_answer", "Short Answer"),
                            ("drag_drop", "Drag and Drop"),
                            ("hotspot", "Hotspot"),
                            ("sequence", "Sequence"),
                            ("matching", "Matching"),
                            ("timeline", "Timeline"),
                            ("simulation", "Simulation"),
                        ],
                        max_length=30,
                        verbose_name="Item Type",
                    ),
                ),
                ("order", models.PositiveIntegerField(default=0, verbose_name="Display Order")),
                ("prompt", models.TextField(blank=True, verbose_name="Prompt")),
                (
                    "points",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="Points",
                    ),
                ),
                ("config", models.JSONField(blank=True, default=dict, verbose_name="Configuration")),
                ("correct_answer", models.JSONField(blank=True, null=True, verbose_name="Correct Answer")),
                ("explanation", models.TextField(blank=True, verbose_name="Explanation")),
                (
                    "content",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="assessments.assessablecontent",
                        verbose_name="Content",
                    ),
                ),
            ],
            options={
                "verbose_name": "Item",
                "verbose_name_plural": "Items",
                "db_table": "assessments_item",
                "ordering": ["content", "order", "id"],
                "unique_together": {("content", "key")},
            },
        ),
        migrations.CreateModel(
            name="Attempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("user_id", models.PositiveIntegerField(db_index=True)),
                ("attempt_number", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("in_progress", "In Progress"),
                            ("submitted", "Submitted"),
                            ("expired", "Expired"),
                            ("graded", "Graded"),
                        ],
                        default="in_progress",
                        max_length=15,
                    ),
                ),
                ("started_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                ("responses", models.JSONField(blank=True, default=dict)),
                (
                    "content_signature",
                    models.JSONField(help_text="Items and correct answers pinned when the attempt started."),
                ),
                ("signature_hash", models.CharField(max_length=64)),
                (
                    "score",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Percentage 0-100. Wird automatisch berechnet.",
                        max_digits=5,
                        null=True,
                    ),
                ),
                ("points_earned", models.PositiveIntegerField(blank=True, null=True)),
                ("total_points", models.PositiveIntegerField(blank=True, null=True)),
                ("passed", models.BooleanField(blank=True, null=True)),
                ("time_spent_seconds", models.PositiveIntegerField(blank=True, null=True)),
                ("time_limit_exceeded", models.BooleanField(default=False)),
                ("breakdown", models.JSONField(blank=True, default=list)),
                ("pending_review", models.JSONField(blank=True, default=list)),
                (
                    "content",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="attempts",
                        to="assessments.assessablecontent",
                    ),
                ),
            ],
            options={
                "verbose_name": "Attempt",
                "verbose_name_plural": "Attempts",
                "db_table": "assessments_attempt",
                "ordering": ["content", "user_id", "-attempt_number"],
                "unique_together": {("content", "user_id", "attempt_number")},
            },
        ),
        migrations.CreateModel(
            name="Submission",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("text", models.TextField(blank=True)),
                (
                    "file_reference",
                    models.CharField(
                        blank=True,
                        help_text="Opaque URL or id returned by the file storage service.",
                        max_length=500,
                    ),
                ),
                ("file_name", models.CharField(blank=True, max_length=255)),
                ("file_size_bytes", models.PositiveBigIntegerField(blank=True, null=True)),
                ("is_late", models.BooleanField(default=False)),
                ("grade", models.DecimalField(blank=True, decimal_places=2, max_digits=7, null=True)),
                ("feedback", models.TextField(blank=True)),
                ("graded_by_id", models.PositiveIntegerField(blank=True, null=True)),
                ("graded_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "attempt",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="submission",
                        to="assessments.attempt",
                    ),
                ),
            ],
            options={
                "verbose_name": "Submission",
                "verbose_name_plural": "Submissions",
                "db_table": "assessments_submission",
                "ordering": ["-created_at"],
            },
        ),
    ]
