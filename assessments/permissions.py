from rest_framework.permissions import BasePermission, SAFE_METHODS

# ------------------------------------------------------------
# Rollen: ADMIN = is_staff, alle anderen authentifizierten
# Benutzer sind STUDENT.
# ------------------------------------------------------------


def is_grader(user) -> bool:
    """Returns True, wenn der User als Admin/Grader gilt."""
    return bool(user and user.is_authenticated and user.is_staff)


class IsAttemptOwnerOrGrader(BasePermission):
    """Lesen dürfen Besitzer und Grader, Änderungen nur der Besitzer selbst."""

    def has_object_permission(self, request, view, obj):
        if obj.user_id == request.user.pk:
            return True
        return request.method in SAFE_METHODS and is_grader(request.user)
