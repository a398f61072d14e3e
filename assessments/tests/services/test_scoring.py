from decimal import Decimal

from django.test import SimpleTestCase

from assessments.content.choices import ItemType
from assessments.services.scoring import is_passed, score_interactive, score_quiz, to_percent
from assessments.tests.helpers import mc, pinned


class QuizScoringTests(SimpleTestCase):
    def test_three_of_four_correct(self):
        items = [mc(f"q{i}", 1) for i in range(1, 5)]
        responses = {"q1": 1, "q2": 1, "q3": 1, "q4": 0}

        result = score_quiz(items, responses)

        self.assertEqual(result.points_earned, 3)
        self.assertEqual(result.total_points, 4)
        self.assertEqual(result.score, Decimal("75.00"))

    def test_points_are_all_or_nothing_per_item(self):
        items = [
            mc("q1", 0, points=3),
            pinned("q2", ItemType.MULTIPLE_SELECT, [0, 1], points=2, config={"options": ["a", "b", "c"]}),
        ]
        result = score_quiz(items, {"q1": 0, "q2": [0]})
        self.assertEqual(result.points_earned, 3)
        self.assertEqual(result.total_points, 5)
        self.assertEqual(result.score, Decimal("60.00"))

    def test_short_answer_without_exact_match_is_excluded(self):
        items = [mc("q1", 0), pinned("essay", ItemType.SHORT_ANSWER, "", points=5)]
        result = score_quiz(items, {"q1": 0, "essay": "long text"})

        self.assertEqual(result.total_points, 1)
        self.assertEqual(result.points_earned, 1)
        self.assertEqual(result.score, Decimal("100.00"))
        self.assertEqual(result.pending_review, ["essay"])

    def test_unanswered_items_count_as_wrong(self):
        items = [mc("q1", 0), mc("q2", 0)]
        result = score_quiz(items, {"q1": 0})
        self.assertEqual(result.score, Decimal("50.00"))

    def test_zero_total_points_scores_zero(self):
        items = [pinned("essay", ItemType.SHORT_ANSWER, "")]
        self.assertEqual(score_quiz(items, {}).score, Decimal("0.00"))

    def test_scoring_has_no_side_effects_on_inputs(self):
        items = [mc("q1", 0)]
        responses = {"q1": 0}
        score_quiz(items, responses)
        self.assertEqual(items, [mc("q1", 0)])
        self.assertEqual(responses, {"q1": 0})


class InteractiveScoringTests(SimpleTestCase):
    def test_sequence_one_of_three_positions(self):
        items = [pinned("steps", ItemType.SEQUENCE, ["A", "B", "C"])]
        result = score_interactive(items, {"steps": ["B", "A", "C"]})

        self.assertEqual(result.score, Decimal("33.33"))
        self.assertEqual(result.points_earned, 0)
        self.assertEqual(result.per_element[0].detail["correct_positions"], 1)

    def test_elements_are_weighted_by_points(self):
        items = [
            pinned("seq", ItemType.SEQUENCE, ["A", "B"], points=1),
            pinned("match", ItemType.MATCHING, {"1": "x", "2": "y"}, points=3),
        ]
        result = score_interactive(items, {"seq": ["A", "B"], "match": {"1": "x", "2": "x"}})

        # (1 * 1 + 3 * 0.5) / 4 = 62.5 %
        self.assertEqual(result.score, Decimal("62.50"))
        self.assertEqual(result.points_earned, 1)
        self.assertEqual(result.total_points, 4)


class PercentAndPassTests(SimpleTestCase):
    def test_percent_rounds_half_up(self):
        from fractions import Fraction

        self.assertEqual(to_percent(Fraction(2, 3)), Decimal("66.67"))
        self.assertEqual(to_percent(Fraction(1, 8)), Decimal("12.50"))

    def test_threshold_is_inclusive(self):
        self.assertTrue(is_passed(Decimal("70.00"), "70"))
        self.assertFalse(is_passed(Decimal("69.99"), "70.00"))

    def test_no_threshold_always_passes(self):
        self.assertTrue(is_passed(Decimal("0.00"), None))
