"""
Comparator registry tests: one section per item type plus id normalization
and authoring validation.
"""

from fractions import Fraction

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase

from assessments.content import registry
from assessments.content.choices import ItemType
from assessments.tests.helpers import mc, pinned


def compare(item, submitted):
    return registry.comparator(item["type"])(item, submitted)


class RegistryDispatchTests(SimpleTestCase):
    def test_every_item_type_has_a_comparator(self):
        self.assertEqual(sorted(registry.registered_types()), sorted(ItemType.values))

    def test_unknown_type_raises_key_error(self):
        with self.assertRaises(KeyError):
            registry.comparator("essay")

    def test_normalize_id(self):
        self.assertEqual(registry.normalize_id(3), "3")
        self.assertEqual(registry.normalize_id(3.0), "3")
        self.assertEqual(registry.normalize_id(" 3 "), "3")
        self.assertEqual(registry.normalize_id("b"), "b")


class SingleChoiceComparatorTests(SimpleTestCase):
    def test_multiple_choice(self):
        item = mc("q1", 2)
        self.assertTrue(compare(item, 2).is_correct)
        self.assertFalse(compare(item, 1).is_correct)

    def test_unanswered_is_incorrect(self):
        result = compare(mc("q1", 2), None)
        self.assertFalse(result.is_correct)
        self.assertEqual(result.fraction, 0)

    def test_true_false(self):
        item = pinned("tf", ItemType.TRUE_FALSE, 1)
        self.assertTrue(compare(item, 1).is_correct)
        self.assertFalse(compare(item, 0).is_correct)


class MultipleSelectComparatorTests(SimpleTestCase):
    def setUp(self):
        self.item = pinned("ms", ItemType.MULTIPLE_SELECT, [0, 2], config={"options": ["a", "b", "c", "d"]})

    def test_exact_set_is_correct(self):
        self.assertTrue(compare(self.item, [0, 2]).is_correct)
        self.assertTrue(compare(self.item, [2, 0]).is_correct)

    def test_subset_is_incorrect(self):
        self.assertFalse(compare(self.item, [0]).is_correct)

    def test_superset_is_incorrect(self):
        result = compare(self.item, [0, 1, 2])
        self.assertFalse(result.is_correct)
        self.assertEqual(result.detail["extra"], [1])


class FillBlankComparatorTests(SimpleTestCase):
    def test_case_insensitive_and_trimmed_by_default(self):
        item = pinned("fb", ItemType.FILL_BLANK, ["Paris", "Berlin"])
        self.assertTrue(compare(item, ["  paris", "BERLIN "]).is_correct)

    def test_all_blanks_must_match(self):
        item = pinned("fb", ItemType.FILL_BLANK, ["Paris", "Berlin"])
        result = compare(item, ["Paris", "Rome"])
        self.assertFalse(result.is_correct)
        self.assertEqual(result.detail["blanks"], [True, False])

    def test_case_sensitive_config(self):
        item = pinned("fb", ItemType.FILL_BLANK, ["Paris"], config={"case_sensitive": True})
        self.assertFalse(compare(item, ["paris"]).is_correct)
        self.assertTrue(compare(item, [" Paris "]).is_correct)


class ShortAnswerComparatorTests(SimpleTestCase):
    def test_without_exact_match_is_pending_review(self):
        item = pinned("sa", ItemType.SHORT_ANSWER, "anything")
        result = compare(item, "my essay")
        self.assertFalse(result.auto_graded)
        self.assertFalse(result.is_correct)

    def test_exact_match(self):
        item = pinned("sa", ItemType.SHORT_ANSWER, "print", config={"exact_match": True})
        self.assertTrue(compare(item, " Print ").is_correct)
        self.assertFalse(compare(item, "println").is_correct)


class InteractiveComparatorTests(SimpleTestCase):
    def test_drag_drop_fraction(self):
        item = pinned(
            "dd",
            ItemType.DRAG_DROP,
            {"a": 0, "b": 1, "c": 1, "d": 0},
            config={"items": [{"id": k} for k in "abcd"], "targets": ["x", "y"]},
        )
        result = compare(item, {"a": 0, "b": 1, "c": 0})
        self.assertEqual(result.fraction, Fraction(2, 4))
        self.assertFalse(result.is_correct)

    def test_hotspot_wrong_picks_do_not_count(self):
        item = pinned("hs", ItemType.HOTSPOT, [0, 2], config={"hotspots": [{}, {}, {}, {}]})
        result = compare(item, [0, 1, 3])
        self.assertEqual(result.fraction, Fraction(1, 2))

    def test_hotspot_all_found(self):
        item = pinned("hs", ItemType.HOTSPOT, [0, 2], config={"hotspots": [{}, {}, {}]})
        self.assertTrue(compare(item, [2, 0, 1]).is_correct)

    def test_sequence_positions(self):
        item = pinned("seq", ItemType.SEQUENCE, ["A", "B", "C"])
        result = compare(item, ["B", "A", "C"])
        self.assertEqual(result.detail["correct_positions"], 1)
        self.assertEqual(result.fraction, Fraction(1, 3))

    def test_matching_normalizes_numeric_and_string_ids(self):
        item = pinned("m", ItemType.MATCHING, {"1": 3, "2": 4})
        result = compare(item, {"1": "3", "2": "4"})
        self.assertTrue(result.is_correct)

    def test_matching_partial(self):
        item = pinned("m", ItemType.MATCHING, {"1": 3, "2": 4})
        self.assertEqual(compare(item, {"1": 4, "2": 4}).fraction, Fraction(1, 2))

    def test_timeline_exact(self):
        item = pinned("t", ItemType.TIMELINE, {"moon": 1969, "wall": "1989-11-09"})
        result = compare(item, {"moon": "1969", "wall": 1990})
        self.assertEqual(result.fraction, Fraction(1, 2))

    def test_timeline_approximate_allows_one_year(self):
        item = pinned(
            "t", ItemType.TIMELINE, {"moon": 1969, "wall": "1989-11-09"}, config={"allow_approximate": True}
        )
        self.assertTrue(compare(item, {"moon": 1970, "wall": "1988-01-01"}).is_correct)

    def test_simulation_counts_correct_choices_without_points(self):
        item = pinned(
            "sim",
            ItemType.SIMULATION,
            {
                "decisions": [
                    {"id": "d1", "choices": [{"id": "a", "correct": True}, {"id": "b"}]},
                    {"id": "d2", "choices": [{"id": "a"}, {"id": "b", "correct": True}]},
                ]
            },
        )
        self.assertEqual(compare(item, {"d1": "a", "d2": "a"}).fraction, Fraction(1, 2))

    def test_simulation_uses_points_when_defined(self):
        item = pinned(
            "sim",
            ItemType.SIMULATION,
            {
                "decisions": [
                    {"id": "d1", "choices": [{"id": "a", "points": 10}, {"id": "b", "points": 5}]},
                    {"id": "d2", "choices": [{"id": "a", "points": 0}, {"id": "b", "points": 10}]},
                ]
            },
        )
        result = compare(item, {"d1": "b", "d2": "b"})
        self.assertEqual(result.fraction, Fraction(15, 20))
        self.assertEqual(result.detail["max_points"], 20.0)


class DefinitionValidationTests(SimpleTestCase):
    def test_multiple_choice_index_out_of_range(self):
        with self.assertRaises(ValidationError):
            registry.validate_definition(ItemType.MULTIPLE_CHOICE, {"options": ["a", "b"]}, 2)

    def test_multiple_choice_valid(self):
        registry.validate_definition(ItemType.MULTIPLE_CHOICE, {"options": ["a", "b"]}, 1)

    def test_drag_drop_unknown_item(self):
        with self.assertRaises(ValidationError):
            registry.validate_definition(
                ItemType.DRAG_DROP, {"items": [{"id": "a"}], "targets": ["x"]}, {"zzz": 0}
            )

    def test_simulation_requires_decisions(self):
        with self.assertRaises(ValidationError):
            registry.validate_definition(ItemType.SIMULATION, {}, {"decisions": []})

    def test_public_item_hides_answers(self):
        item = pinned(
            "sim",
            ItemType.SIMULATION,
            {"decisions": [{"id": "d1", "choices": [{"id": "a", "correct": True, "points": 3, "text": "Go"}]}]},
        )
        public = registry.public_item(item)
        self.assertNotIn("correct_answer", public)
        self.assertEqual(public["config"]["decisions"][0]["choices"], [{"id": "a", "text": "Go"}])
