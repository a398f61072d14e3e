"""
Assessment Engine Application Configuration

This module contains the Django application configuration for the assessment
attempt evaluation engine. The app scores learner responses for quizzes,
assignments and interactive activities, enforces attempt and time limits, and
reports completion to the course progress layer.

Author: DSP Development Team
Version: 1.0.0
"""

from django.apps import AppConfig


class AssessmentsConfig(AppConfig):
    """
    Configuration class for the assessments Django application.

    Attributes:
        default_auto_field: Default primary key field type for models
        name: Application name for Django registration
        verbose_name: Human-readable application name for admin interface
    """

    default_auto_field: str = "django.db.models.BigAutoField"
    name: str = "assessments"
    verbose_name: str = "Assessments"

    def ready(self) -> None:
        """
        Initialize the application when Django starts.

        Imports the signal module so that receivers declared there are
        connected exactly once per process.
        """
        super().ready()
        from . import signals  # noqa: F401
