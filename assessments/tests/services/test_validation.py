from datetime import datetime, timedelta, timezone as dt_timezone

from django.test import SimpleTestCase

from assessments.content.choices import ItemType
from assessments.exceptions import ResponseValidationError
from assessments.services.validation import ResponseValidator
from assessments.tests.helpers import mc, pinned


class ResponseValidatorTests(SimpleTestCase):
    def setUp(self):
        self.validator = ResponseValidator()
        self.items = [
            mc("q1", 1),
            pinned("ms", ItemType.MULTIPLE_SELECT, [0, 2], config={"options": ["a", "b", "c"]}),
            pinned("fb", ItemType.FILL_BLANK, ["x", "y"]),
            pinned(
                "dd",
                ItemType.DRAG_DROP,
                {"a": 0},
                config={"items": [{"id": "a"}, {"id": "b"}], "targets": ["t1", "t2"]},
            ),
            pinned("m", ItemType.MATCHING, {"1": 3, "2": 4}),
        ]

    def assertRejected(self, responses, item_id):
        with self.assertRaises(ResponseValidationError) as ctx:
            self.validator.validate(self.items, responses)
        self.assertEqual(ctx.exception.item_id, item_id)
        return ctx.exception

    def test_valid_responses_pass_and_null_is_dropped(self):
        cleaned = self.validator.validate(self.items, {"q1": 1, "ms": [0, 2], "fb": None})
        self.assertEqual(cleaned, {"q1": 1, "ms": [0, 2]})

    def test_unknown_item_key(self):
        self.assertRejected({"nope": 1}, "nope")

    def test_multiple_choice_out_of_range(self):
        self.assertRejected({"q1": 4}, "q1")

    def test_boolean_is_not_an_index(self):
        self.assertRejected({"q1": True}, "q1")

    def test_multiple_select_needs_integer_list(self):
        self.assertRejected({"ms": "0,2"}, "ms")
        self.assertRejected({"ms": [0, 5]}, "ms")
        self.assertRejected({"ms": [0, 0]}, "ms")

    def test_fill_blank_length_must_match(self):
        exc = self.assertRejected({"fb": ["x"]}, "fb")
        self.assertIn("2 blank", exc.reason)

    def test_drag_drop_unknown_item_and_target(self):
        self.assertRejected({"dd": {"zzz": 0}}, "dd")
        self.assertRejected({"dd": {"a": 9}}, "dd")

    def test_matching_accepts_numeric_or_string_ids(self):
        cleaned = self.validator.validate(self.items, {"m": {"1": "3", "2": 4}})
        self.assertIn("m", cleaned)

    def test_responses_must_be_an_object(self):
        with self.assertRaises(ResponseValidationError):
            self.validator.validate(self.items, ["q1"])

    def test_sanitize_drops_only_bad_entries(self):
        kept = self.validator.sanitize(self.items, {"q1": 1, "ms": "bad", "ghost": 1})
        self.assertEqual(kept, {"q1": 1})


class SubmissionValidationTests(SimpleTestCase):
    def setUp(self):
        self.validator = ResponseValidator()
        self.now = datetime(2025, 3, 1, 12, 0, tzinfo=dt_timezone.utc)
        self.assignment = {
            "instructions": "Write",
            "allowed_file_types": [".pdf"],
            "max_file_size_mb": 1,
            "due_at": None,
            "allow_late_submission": False,
            "max_points": 10,
        }

    def test_text_only_submission(self):
        cleaned = self.validator.validate_submission(self.assignment, {"text": "My essay"}, self.now)
        self.assertEqual(cleaned["text"], "My essay")
        self.assertFalse(cleaned["is_late"])

    def test_empty_submission_rejected(self):
        with self.assertRaises(ResponseValidationError):
            self.validator.validate_submission(self.assignment, {"text": "   "}, self.now)

    def test_file_type_must_be_allowed(self):
        with self.assertRaises(ResponseValidationError) as ctx:
            self.validator.validate_submission(
                self.assignment, {"file_reference": "s3://bucket/essay.exe", "file_name": "essay.exe"}, self.now
            )
        self.assertEqual(ctx.exception.item_id, "file_reference")

    def test_file_size_limit(self):
        with self.assertRaises(ResponseValidationError):
            self.validator.validate_submission(
                self.assignment,
                {"file_reference": "files/1", "file_name": "essay.pdf", "file_size_bytes": 2 * 1024 * 1024},
                self.now,
            )

    def test_past_due_rejected_unless_late_allowed(self):
        self.assignment["due_at"] = (self.now - timedelta(days=1)).isoformat()
        with self.assertRaises(ResponseValidationError):
            self.validator.validate_submission(self.assignment, {"text": "late"}, self.now)

        self.assignment["allow_late_submission"] = True
        cleaned = self.validator.validate_submission(self.assignment, {"text": "late"}, self.now)
        self.assertTrue(cleaned["is_late"])
