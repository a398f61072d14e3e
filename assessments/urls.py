"""
Assessment URL Configuration

URL Structure (mounted at /api/assessments/):
- contents/<id>/attempts/: attempt history (GET) and start (POST)
- contents/<id>/eligibility/: retry eligibility of the current learner
- attempts/<id>/...: detail, response buffer, submit, expire, result
- grader/...: manual grading of assignment submissions (staff only)

Author: DSP Development Team
Version: 1.0.0
"""

from typing import List
from django.urls import path, URLPattern

from .attempts import views

app_name = "assessments"

# --- Learner endpoints ---
content_patterns: List[URLPattern] = [
    path("contents/<int:content_id>/attempts/", views.ContentAttemptsView.as_view(), name="content-attempts"),
    path("contents/<int:content_id>/eligibility/", views.EligibilityView.as_view(), name="content-eligibility"),
]

attempt_patterns: List[URLPattern] = [
    path("attempts/<int:attempt_id>/", views.AttemptDetailView.as_view(), name="attempt-detail"),
    path("attempts/<int:attempt_id>/responses/", views.SaveResponsesView.as_view(), name="attempt-responses"),
    path("attempts/<int:attempt_id>/submit/", views.SubmitAttemptView.as_view(), name="attempt-submit"),
    path("attempts/<int:attempt_id>/expire/", views.ExpireAttemptView.as_view(), name="attempt-expire"),
    path("attempts/<int:attempt_id>/result/", views.AttemptResultView.as_view(), name="attempt-result"),
]

# --- Grader endpoints ---
grader_patterns: List[URLPattern] = [
    path("grader/submissions/", views.PendingSubmissionsView.as_view(), name="grader-submissions"),
    path("grader/attempts/<int:attempt_id>/grade/", views.GradeSubmissionView.as_view(), name="grader-grade"),
]

urlpatterns = content_patterns + attempt_patterns + grader_patterns
