from decimal import Decimal

from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from assessments.models import Attempt
from assessments.tests.helpers import make_assignment, make_quiz


class AttemptApiTests(TestCase):
    # This setup is only executed once for the entire testfile
    @classmethod
    def setUpTestData(cls):
        cls.learner = User.objects.create_user(username="Max", password="Musterpassword")
        cls.other = User.objects.create_user(username="Erika", password="Musterpassword")
        cls.grader = User.objects.create_user(username="Grader", password="Musterpassword", is_staff=True)
        cls.quiz = make_quiz(max_attempts=2, passing_score=Decimal("70"), time_limit_seconds=300)

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.learner)

    def start(self):
        response = self.client.post(f"/api/assessments/contents/{self.quiz.pk}/attempts/")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        return response.json()

    def test_anonymous_requests_are_rejected(self):
        self.client.force_authenticate(user=None)
        response = self.client.post(f"/api/assessments/contents/{self.quiz.pk}/attempts/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_start_returns_items_without_answers(self):
        body = self.start()

        self.assertEqual(body["attempt_number"], 1)
        self.assertEqual(len(body["items"]), 4)
        self.assertNotIn("correct_answer", body["items"][0])
        self.assertEqual(body["remaining_seconds"], 300)

    def test_start_unknown_content_is_404(self):
        response = self.client.post("/api/assessments/contents/9999/attempts/")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_start_when_exhausted_is_409(self):
        self.start()
        self.start()
        response = self.client.post(f"/api/assessments/contents/{self.quiz.pk}/attempts/")

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.json()["error_code"], "AttemptsExhausted")

    def test_submit_and_fetch_result(self):
        attempt = self.start()
        response = self.client.post(
            f"/api/assessments/attempts/{attempt['id']}/submit/",
            {"responses": {"q1": 1, "q2": 1, "q3": 1, "q4": 0}, "time_spent_seconds": 42},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["score"], "75.00")
        self.assertTrue(response.json()["passed"])

        result = self.client.get(f"/api/assessments/attempts/{attempt['id']}/result/")
        self.assertEqual(result.json(), response.json())

    def test_invalid_response_is_400_with_item_id(self):
        attempt = self.start()
        response = self.client.post(
            f"/api/assessments/attempts/{attempt['id']}/submit/",
            {"responses": {"q1": "B"}},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["details"]["item_id"], "q1")
        self.assertEqual(Attempt.objects.get(pk=attempt["id"]).status, Attempt.Status.IN_PROGRESS)

    def test_other_learner_cannot_submit(self):
        attempt = self.start()
        self.client.force_authenticate(user=self.other)
        response = self.client.post(
            f"/api/assessments/attempts/{attempt['id']}/submit/", {"responses": {}}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_buffer_responses(self):
        attempt = self.start()
        response = self.client.put(
            f"/api/assessments/attempts/{attempt['id']}/responses/",
            {"responses": {"q1": 2}},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["responses"], {"q1": 2})

    def test_expire_before_deadline_is_409(self):
        attempt = self.start()
        response = self.client.post(f"/api/assessments/attempts/{attempt['id']}/expire/")
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_history_and_eligibility(self):
        self.start()
        history = self.client.get(f"/api/assessments/contents/{self.quiz.pk}/attempts/")
        eligibility = self.client.get(f"/api/assessments/contents/{self.quiz.pk}/eligibility/")

        self.assertEqual(len(history.json()), 1)
        self.assertEqual(eligibility.json()["attempts_remaining"], 1)
        self.assertTrue(eligibility.json()["can_retry"])
        self.assertEqual(eligibility.json()["content"]["title"], self.quiz.title)

    def test_grader_can_read_learner_history(self):
        self.start()
        self.client.force_authenticate(user=self.grader)
        response = self.client.get(
            f"/api/assessments/contents/{self.quiz.pk}/attempts/", {"user_id": self.learner.pk}
        )
        self.assertEqual(len(response.json()), 1)


class GraderApiTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.learner = User.objects.create_user(username="Max", password="Musterpassword")
        cls.grader = User.objects.create_user(username="Grader", password="Musterpassword", is_staff=True)
        cls.assignment = make_assignment(max_points=20)

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=self.learner)
        start = self.client.post(f"/api/assessments/contents/{self.assignment.pk}/attempts/")
        self.attempt_id = start.json()["id"]
        self.client.post(
            f"/api/assessments/attempts/{self.attempt_id}/submit/",
            {"responses": {"text": "My essay"}},
            format="json",
        )

    def test_learner_cannot_grade(self):
        response = self.client.post(
            f"/api/assessments/grader/attempts/{self.attempt_id}/grade/", {"grade": "10"}, format="json"
        )
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_grader_queue_and_grading(self):
        self.client.force_authenticate(user=self.grader)

        queue = self.client.get("/api/assessments/grader/submissions/")
        self.assertEqual([entry["attempt"]["id"] for entry in queue.json()], [self.attempt_id])

        response = self.client.post(
            f"/api/assessments/grader/attempts/{self.attempt_id}/grade/",
            {"grade": "18.00", "feedback": "Sehr gut"},
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["status"], Attempt.Status.GRADED)
        self.assertEqual(self.client.get("/api/assessments/grader/submissions/").json(), [])
