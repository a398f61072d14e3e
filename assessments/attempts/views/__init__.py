from .student_views import (
    AttemptDetailView,
    AttemptResultView,
    ContentAttemptsView,
    EligibilityView,
    ExpireAttemptView,
    SaveResponsesView,
    SubmitAttemptView,
)
from .grader_views import GradeSubmissionView, PendingSubmissionsView
