"""
Content Model Registry

Central dispatch table for the closed set of item types. For every type tag
the registry declares:

- how a correct-answer specification is authored (``validate_definition``),
- how a submitted value is compared against it (``comparator``),
- what a learner may see of the item while answering (``public_item``).

Comparators are pure functions ``(item, submitted) -> Comparison`` where
``item`` is the pinned item dict from an attempt's content signature
(``key``, ``type``, ``points``, ``config``, ``correct_answer``). A ``None``
submission means "unanswered" and always compares as incorrect.

Ids are normalized to one canonical string form before any comparison, so
authoring ``3`` and submitting ``"3"`` (or ``3.0``) compare equal.

Author: DSP Development Team
Version: 1.0.0
"""

import re
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Callable, Dict, List, Optional

from django.core.exceptions import ValidationError
from django.utils.dateparse import parse_date

from .choices import ItemType

ZERO = Fraction(0)
ONE = Fraction(1)

_YEAR_PATTERN = re.compile(r"^-?\d{1,4}$")


@dataclass(frozen=True)
class Comparison:
    """
    Outcome of comparing one submitted value with its correct answer.

    Attributes:
        is_correct: True only for full correctness
        fraction: Share of the element answered correctly (0..1)
        detail: JSON-serializable explanation of the comparison
        auto_graded: False when the item needs manual review instead
    """

    is_correct: bool
    fraction: Fraction
    detail: Dict[str, Any] = field(default_factory=dict)
    auto_graded: bool = True


Comparator = Callable[[Dict[str, Any], Any], Comparison]
DefinitionCheck = Callable[[Dict[str, Any], Any], None]

_COMPARATORS: Dict[str, Comparator] = {}
_DEFINITION_CHECKS: Dict[str, DefinitionCheck] = {}


def register(item_type: str, definition_check: DefinitionCheck):
    """Register the comparator and authoring check for ``item_type``."""

    def decorator(func: Comparator) -> Comparator:
        _COMPARATORS[item_type] = func
        _DEFINITION_CHECKS[item_type] = definition_check
        return func

    return decorator


def comparator(item_type: str) -> Comparator:
    """
    Return the comparator for ``item_type``.

    Raises:
        KeyError: if the type tag is not part of the registry
    """
    try:
        return _COMPARATORS[item_type]
    except KeyError:
        raise KeyError(f"No comparator registered for item type '{item_type}'") from None


def registered_types() -> List[str]:
    return sorted(_COMPARATORS)


def validate_definition(item_type: str, config: Optional[dict], correct_answer: Any) -> None:
    """
    Check that an item's configuration and correct answer fit its type.

    Raises:
        ValidationError: describing the first problem found
    """
    check = _DEFINITION_CHECKS.get(item_type)
    if check is None:
        raise ValidationError(f"Unknown item type '{item_type}'")
    check(config or {}, correct_answer)


def is_auto_gradable(item_type: str, config: Optional[dict]) -> bool:
    if item_type == ItemType.SHORT_ANSWER:
        return bool((config or {}).get("exact_match"))
    return item_type in _COMPARATORS


def normalize_id(value: Any) -> str:
    """Canonical string form of a content id (``3``, ``3.0`` and ``"3"`` are equal)."""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def normalize_mapping(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {normalize_id(k): normalize_id(v) for k, v in value.items() if v is not None}


def extract_year(value: Any) -> Optional[int]:
    """Year of a timeline placement: an int, ``"YYYY"`` or an ISO date string."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if _YEAR_PATTERN.match(text):
            return int(text)
        try:
            parsed = parse_date(text)
        except ValueError:
            return None
        return parsed.year if parsed else None
    return None


def _ratio(hits: int, total: int) -> Fraction:
    if total <= 0:
        return ZERO
    return Fraction(hits, total)


def _unanswered(**detail) -> Comparison:
    return Comparison(is_correct=False, fraction=ZERO, detail={"answered": False, **detail})


def _option_count(config: dict) -> int:
    options = config.get("options")
    return len(options) if isinstance(options, list) else 0


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _ids_of(entries: Any) -> List[str]:
    if not isinstance(entries, list):
        return []
    return [normalize_id(entry.get("id")) for entry in entries if isinstance(entry, dict)]


def _normalize_text(value: str, case_sensitive: bool) -> str:
    text = value.strip()
    return text if case_sensitive else text.casefold()


# ---------------------------------------------------------------------------
# Authoring checks
# ---------------------------------------------------------------------------


def _check_single_choice(config: dict, correct_answer: Any) -> None:
    options = config.get("options")
    if not isinstance(options, list) or len(options) < 2:
        raise ValidationError("Multiple choice items require at least two 'options'")
    if not _is_index(correct_answer):
        raise ValidationError("correct_answer must be an integer (index)")
    if correct_answer < 0 or correct_answer >= len(options):
        raise ValidationError(
            f"correct_answer index {correct_answer} is out of range (0-{len(options) - 1})"
        )


def _check_true_false(config: dict, correct_answer: Any) -> None:
    if correct_answer not in (0, 1) or isinstance(correct_answer, bool):
        raise ValidationError("True/false items use 0 for True and 1 for False")


def _check_multiple_select(config: dict, correct_answer: Any) -> None:
    count = _option_count(config)
    if count < 2:
        raise ValidationError("Multiple select items require at least two 'options'")
    if not isinstance(correct_answer, list) or not correct_answer:
        raise ValidationError("correct_answer must be a non-empty list of option indices")
    if not all(_is_index(index) and 0 <= index < count for index in correct_answer):
        raise ValidationError(f"Every correct index must be within 0-{count - 1}")
    if len(set(correct_answer)) != len(correct_answer):
        raise ValidationError("correct_answer must not repeat an index")


def _check_fill_blank(config: dict, correct_answer: Any) -> None:
    if not isinstance(correct_answer, list) or not correct_answer:
        raise ValidationError("Fill-in-the-blank items need one correct string per blank")
    if not all(isinstance(answer, str) and answer.strip() for answer in correct_answer):
        raise ValidationError("Every blank needs a non-empty correct string")


def _check_short_answer(config: dict, correct_answer: Any) -> None:
    if config.get("exact_match") and not (isinstance(correct_answer, str) and correct_answer.strip()):
        raise ValidationError("Exact-match short answers require a correct_answer string")


def _check_drag_drop(config: dict, correct_answer: Any) -> None:
    targets = config.get("targets")
    if not isinstance(targets, list) or not targets:
        raise ValidationError("Drag and drop items require a list of 'targets'")
    item_ids = set(_ids_of(config.get("items")))
    if not item_ids:
        raise ValidationError("Drag and drop items require 'items' with ids")
    if not isinstance(correct_answer, dict) or not correct_answer:
        raise ValidationError("correct_answer must map item ids to target indices")
    for item_id, target in correct_answer.items():
        if normalize_id(item_id) not in item_ids:
            raise ValidationError(f"Unknown drag item '{item_id}' in correct_answer")
        if not _is_index(target) or not 0 <= target < len(targets):
            raise ValidationError(f"Target for '{item_id}' must be an index within 0-{len(targets) - 1}")


def _check_hotspot(config: dict, correct_answer: Any) -> None:
    hotspots = config.get("hotspots")
    if not isinstance(hotspots, list) or not hotspots:
        raise ValidationError("Hotspot items require a list of 'hotspots'")
    if not isinstance(correct_answer, list) or not correct_answer:
        raise ValidationError("correct_answer must list at least one correct hotspot index")
    if not all(_is_index(index) and 0 <= index < len(hotspots) for index in correct_answer):
        raise ValidationError(f"Every hotspot index must be within 0-{len(hotspots) - 1}")


def _check_sequence(config: dict, correct_answer: Any) -> None:
    item_ids = _ids_of(config.get("items"))
    if not isinstance(correct_answer, list) or len(correct_answer) < 2:
        raise ValidationError("Sequence items need a correct order of at least two ids")
    ordered = [normalize_id(item_id) for item_id in correct_answer]
    if len(set(ordered)) != len(ordered):
        raise ValidationError("The correct order must not repeat an id")
    if item_ids and set(ordered) != set(item_ids):
        raise ValidationError("The correct order must contain exactly the configured items")


def _check_matching(config: dict, correct_answer: Any) -> None:
    if not isinstance(correct_answer, dict) or not correct_answer:
        raise ValidationError("correct_answer must map left ids to right ids")
    left_ids = set(_ids_of(config.get("left_items")))
    right_ids = set(_ids_of(config.get("right_items")))
    for left, right in normalize_mapping(correct_answer).items():
        if left_ids and left not in left_ids:
            raise ValidationError(f"Unknown left item '{left}' in correct_answer")
        if right_ids and right not in right_ids:
            raise ValidationError(f"Unknown right item '{right}' in correct_answer")


def _check_timeline(config: dict, correct_answer: Any) -> None:
    if not isinstance(correct_answer, dict) or not correct_answer:
        raise ValidationError("correct_answer must map event ids to dates")
    for event_id, date in correct_answer.items():
        if extract_year(date) is None:
            raise ValidationError(f"Event '{event_id}' has no valid year or ISO date")


def _check_simulation(config: dict, correct_answer: Any) -> None:
    decisions = correct_answer.get("decisions") if isinstance(correct_answer, dict) else None
    if not isinstance(decisions, list) or not decisions:
        raise ValidationError("Simulations require a list of 'decisions'")
    seen = set()
    for decision in decisions:
        if not isinstance(decision, dict) or decision.get("id") is None:
            raise ValidationError("Every decision needs an 'id'")
        decision_id = normalize_id(decision["id"])
        if decision_id in seen:
            raise ValidationError(f"Decision '{decision_id}' is defined twice")
        seen.add(decision_id)
        choices = decision.get("choices")
        if not isinstance(choices, list) or not choices:
            raise ValidationError(f"Decision '{decision_id}' needs at least one choice")
        for choice in choices:
            if not isinstance(choice, dict) or choice.get("id") is None:
                raise ValidationError(f"Every choice of decision '{decision_id}' needs an 'id'")
            points = choice.get("points")
            if points is not None and (not isinstance(points, (int, float)) or isinstance(points, bool)):
                raise ValidationError(f"Choice points in decision '{decision_id}' must be numeric")


# ---------------------------------------------------------------------------
# Comparators
# ---------------------------------------------------------------------------


@register(ItemType.MULTIPLE_CHOICE, _check_single_choice)
@register(ItemType.TRUE_FALSE, _check_true_false)
def compare_single_choice(item: Dict[str, Any], submitted: Any) -> Comparison:
    if submitted is None:
        return _unanswered()
    correct = submitted == item["correct_answer"]
    return Comparison(is_correct=correct, fraction=ONE if correct else ZERO, detail={"selected": submitted})


@register(ItemType.MULTIPLE_SELECT, _check_multiple_select)
def compare_multiple_select(item: Dict[str, Any], submitted: Any) -> Comparison:
    if submitted is None:
        return _unanswered()
    chosen = set(submitted)
    expected = set(item["correct_answer"])
    correct = chosen == expected
    return Comparison(
        is_correct=correct,
        fraction=ONE if correct else ZERO,
        detail={
            "missing": sorted(expected - chosen),
            "extra": sorted(chosen - expected),
        },
    )


@register(ItemType.FILL_BLANK, _check_fill_blank)
def compare_fill_blank(item: Dict[str, Any], submitted: Any) -> Comparison:
    expected = item["correct_answer"]
    if submitted is None:
        return _unanswered(blanks=[False] * len(expected))
    case_sensitive = bool((item.get("config") or {}).get("case_sensitive"))
    blanks = [
        isinstance(given, str)
        and _normalize_text(given, case_sensitive) == _normalize_text(answer, case_sensitive)
        for given, answer in zip(submitted, expected)
    ]
    correct = len(submitted) == len(expected) and all(blanks)
    return Comparison(is_correct=correct, fraction=ONE if correct else ZERO, detail={"blanks": blanks})


@register(ItemType.SHORT_ANSWER, _check_short_answer)
def compare_short_answer(item: Dict[str, Any], submitted: Any) -> Comparison:
    config = item.get("config") or {}
    if not config.get("exact_match"):
        return Comparison(
            is_correct=False,
            fraction=ZERO,
            detail={"pending_review": True, "answered": submitted is not None},
            auto_graded=False,
        )
    if submitted is None:
        return _unanswered()
    case_sensitive = bool(config.get("case_sensitive"))
    correct = _normalize_text(submitted, case_sensitive) == _normalize_text(
        item["correct_answer"], case_sensitive
    )
    return Comparison(is_correct=correct, fraction=ONE if correct else ZERO)


@register(ItemType.DRAG_DROP, _check_drag_drop)
def compare_drag_drop(item: Dict[str, Any], submitted: Any) -> Comparison:
    expected = normalize_mapping(item["correct_answer"])
    placed = normalize_mapping(submitted)
    hits = sum(1 for item_id, target in expected.items() if placed.get(item_id) == target)
    fraction = _ratio(hits, len(expected))
    return Comparison(
        is_correct=fraction == ONE,
        fraction=fraction,
        detail={"correct_placements": hits, "total": len(expected)},
    )


@register(ItemType.HOTSPOT, _check_hotspot)
def compare_hotspot(item: Dict[str, Any], submitted: Any) -> Comparison:
    expected = {normalize_id(index) for index in item["correct_answer"]}
    found = {normalize_id(index) for index in (submitted or [])}
    hits = len(expected & found)
    fraction = _ratio(hits, len(expected))
    return Comparison(
        is_correct=fraction == ONE,
        fraction=fraction,
        detail={"found": hits, "total": len(expected)},
    )


@register(ItemType.SEQUENCE, _check_sequence)
def compare_sequence(item: Dict[str, Any], submitted: Any) -> Comparison:
    expected = [normalize_id(item_id) for item_id in item["correct_answer"]]
    given = [normalize_id(item_id) for item_id in (submitted or [])]
    positions = [index < len(given) and given[index] == item_id for index, item_id in enumerate(expected)]
    hits = sum(positions)
    fraction = _ratio(hits, len(expected))
    return Comparison(
        is_correct=fraction == ONE,
        fraction=fraction,
        detail={"correct_positions": hits, "total": len(expected), "positions": positions},
    )


@register(ItemType.MATCHING, _check_matching)
def compare_matching(item: Dict[str, Any], submitted: Any) -> Comparison:
    expected = normalize_mapping(item["correct_answer"])
    given = normalize_mapping(submitted)
    hits = sum(1 for left, right in expected.items() if given.get(left) == right)
    fraction = _ratio(hits, len(expected))
    return Comparison(
        is_correct=fraction == ONE,
        fraction=fraction,
        detail={"correct_matches": hits, "total": len(expected)},
    )


@register(ItemType.TIMELINE, _check_timeline)
def compare_timeline(item: Dict[str, Any], submitted: Any) -> Comparison:
    tolerance = 1 if (item.get("config") or {}).get("allow_approximate") else 0
    expected = {normalize_id(event): extract_year(date) for event, date in item["correct_answer"].items()}
    given = {}
    if isinstance(submitted, dict):
        given = {normalize_id(event): extract_year(date) for event, date in submitted.items()}
    hits = 0
    for event, year in expected.items():
        placed = given.get(event)
        if placed is not None and year is not None and abs(placed - year) <= tolerance:
            hits += 1
    fraction = _ratio(hits, len(expected))
    return Comparison(
        is_correct=fraction == ONE,
        fraction=fraction,
        detail={"correct_events": hits, "total": len(expected), "tolerance_years": tolerance},
    )


@register(ItemType.SIMULATION, _check_simulation)
def compare_simulation(item: Dict[str, Any], submitted: Any) -> Comparison:
    decisions = item["correct_answer"]["decisions"]
    chosen = normalize_mapping(submitted)
    uses_points = any("points" in choice for decision in decisions for choice in decision["choices"])

    earned = Fraction(0)
    maximum = Fraction(0)
    correct_choices = 0
    for decision in decisions:
        choices = {normalize_id(choice["id"]): choice for choice in decision["choices"]}
        picked = choices.get(chosen.get(normalize_id(decision["id"])))
        if uses_points:
            maximum += max(Fraction(str(choice.get("points") or 0)) for choice in choices.values())
            if picked is not None:
                earned += Fraction(str(picked.get("points") or 0))
        if picked is not None and picked.get("correct"):
            correct_choices += 1

    if uses_points:
        fraction = min(ONE, max(ZERO, earned / maximum)) if maximum > 0 else ZERO
        detail = {"points_earned": float(earned), "max_points": float(maximum)}
    else:
        fraction = _ratio(correct_choices, len(decisions))
        detail = {"correct_choices": correct_choices, "total": len(decisions)}
    return Comparison(is_correct=fraction == ONE, fraction=fraction, detail=detail)


# ---------------------------------------------------------------------------
# Learner-facing projection
# ---------------------------------------------------------------------------


def public_item(item: Dict[str, Any]) -> Dict[str, Any]:
    """Pinned item without its correct answer, for rendering during an attempt."""
    config = dict(item.get("config") or {})
    if item["type"] == ItemType.SIMULATION:
        config["decisions"] = [
            {
                **{k: v for k, v in decision.items() if k != "choices"},
                "choices": [
                    {k: v for k, v in choice.items() if k not in ("correct", "points")}
                    for choice in decision["choices"]
                ],
            }
            for decision in item["correct_answer"]["decisions"]
        ]
    elif item["type"] == ItemType.FILL_BLANK:
        config["blank_count"] = len(item["correct_answer"])
    return {
        "key": item["key"],
        "type": item["type"],
        "prompt": item.get("prompt", ""),
        "points": item["points"],
        "config": config,
    }
