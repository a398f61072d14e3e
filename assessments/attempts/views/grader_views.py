from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from django.shortcuts import get_object_or_404

from ...services.attempts import AttemptService
from ..models import Attempt, Submission
from ..serializers import AttemptSerializer, GradeSubmissionSerializer, SubmissionSerializer


class PendingSubmissionsView(generics.ListAPIView):
    """Assignment submissions waiting for a grade, oldest first."""

    serializer_class = SubmissionSerializer
    permission_classes = [permissions.IsAdminUser]

    def get_queryset(self):
        queryset = Submission.objects.filter(
            attempt__status__in=[Attempt.Status.SUBMITTED, Attempt.Status.EXPIRED]
        ).select_related("attempt").order_by("created_at")

        content_id = self.request.query_params.get("content_id")
        if content_id and content_id.isdigit():
            queryset = queryset.filter(attempt__content_id=int(content_id))
        return queryset


class GradeSubmissionView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def post(self, request, attempt_id):
        attempt = get_object_or_404(Attempt, pk=attempt_id)
        serializer = GradeSubmissionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        attempt = AttemptService().grade_submission(
            attempt.pk,
            serializer.validated_data["grade"],
            serializer.validated_data["feedback"],
            request.user.pk,
        )
        return Response(AttemptSerializer(attempt).data, status=status.HTTP_200_OK)
