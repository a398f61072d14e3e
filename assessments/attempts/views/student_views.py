from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from django.shortcuts import get_object_or_404

from ...content.models import AssessableContent
from ...content.serializers import ContentSummarySerializer
from ...permissions import IsAttemptOwnerOrGrader, is_grader
from ...services.attempts import AttemptService
from ..models import Attempt
from ..serializers import (
    AttemptDetailSerializer,
    AttemptSerializer,
    SaveResponsesSerializer,
    SubmitAttemptSerializer,
)


class AttemptServiceMixin:
    """Gives each view one AttemptService and attempt lookup with ownership checks."""

    service_class = AttemptService

    def get_service(self) -> AttemptService:
        if not hasattr(self, "_service"):
            self._service = self.service_class()
        return self._service

    def get_attempt(self, attempt_id) -> Attempt:
        attempt = get_object_or_404(Attempt, pk=attempt_id)
        self.check_object_permissions(self.request, attempt)
        return attempt

    def detail_response(self, attempt, http_status=status.HTTP_200_OK):
        serializer = AttemptDetailSerializer(attempt, context={"enforcer": self.get_service().enforcer})
        return Response(serializer.data, status=http_status)


class ContentAttemptsView(AttemptServiceMixin, APIView):
    """
    GET:  attempt history of the current learner, newest first
          (graders may pass ?user_id=)
    POST: start a new attempt
    """

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, content_id):
        content = get_object_or_404(AssessableContent, pk=content_id)
        user_id = request.user.pk
        requested = request.query_params.get("user_id")
        if requested is not None and is_grader(request.user):
            try:
                user_id = int(requested)
            except ValueError:
                return Response({"error": "user_id must be an integer"}, status=status.HTTP_400_BAD_REQUEST)

        attempts = self.get_service().get_attempts(content.pk, user_id)
        return Response(AttemptSerializer(attempts, many=True).data)

    def post(self, request, content_id):
        content = get_object_or_404(AssessableContent, pk=content_id)
        attempt = self.get_service().start_attempt(content.pk, request.user.pk)
        return self.detail_response(attempt, status.HTTP_201_CREATED)


class EligibilityView(AttemptServiceMixin, APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, content_id):
        content = get_object_or_404(AssessableContent, pk=content_id)
        eligibility = self.get_service().get_eligibility(content.pk, request.user.pk)
        return Response(
            {"content": ContentSummarySerializer(content).data, **eligibility.to_dict()}
        )


class AttemptDetailView(AttemptServiceMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, IsAttemptOwnerOrGrader]

    def get(self, request, attempt_id):
        return self.detail_response(self.get_attempt(attempt_id))


class SaveResponsesView(AttemptServiceMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, IsAttemptOwnerOrGrader]

    def put(self, request, attempt_id):
        attempt = self.get_attempt(attempt_id)
        serializer = SaveResponsesSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        attempt = self.get_service().save_responses(attempt.pk, serializer.validated_data["responses"])
        return self.detail_response(attempt)


class SubmitAttemptView(AttemptServiceMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, IsAttemptOwnerOrGrader]

    def post(self, request, attempt_id):
        attempt = self.get_attempt(attempt_id)
        serializer = SubmitAttemptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = self.get_service().submit_attempt(
            attempt.pk,
            serializer.validated_data["responses"],
            serializer.validated_data["time_spent_seconds"],
        )
        return Response(result.to_dict(), status=status.HTTP_200_OK)


class ExpireAttemptView(AttemptServiceMixin, APIView):
    """Called by the client countdown; the server re-checks the deadline itself."""

    permission_classes = [permissions.IsAuthenticated, IsAttemptOwnerOrGrader]

    def post(self, request, attempt_id):
        attempt = self.get_attempt(attempt_id)
        result = self.get_service().expire_attempt(attempt.pk)
        return Response(result.to_dict(), status=status.HTTP_200_OK)


class AttemptResultView(AttemptServiceMixin, APIView):
    permission_classes = [permissions.IsAuthenticated, IsAttemptOwnerOrGrader]

    def get(self, request, attempt_id):
        attempt = self.get_attempt(attempt_id)
        return Response(self.get_service().get_result(attempt).to_dict())
