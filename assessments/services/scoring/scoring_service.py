"""
Scoring Service

Pure, side-effect-free scoring of validated responses against the pinned
items of an attempt. Nothing here touches the database or the clock, so both
entry points can be unit tested on plain dicts.

Points policy:
- A quiz item earns its full points when its comparator reports full
  correctness, else zero. There is no item-level partial credit.
- SHORT_ANSWER items without ``exact_match`` are excluded from both
  ``points_earned`` and ``total_points`` and reported as pending review.
- Interactive elements contribute their fractional correctness, weighted by
  points, to one content-level percentage.

Author: DSP Development Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from fractions import Fraction
from typing import Any, Dict, List, Optional

from ...content import registry

TWO_PLACES = Decimal("0.01")


def to_percent(fraction: Fraction) -> Decimal:
    """Exact fraction to a percentage rounded half-up to two decimals."""
    if fraction <= 0:
        return Decimal("0.00")
    value = Decimal(fraction.numerator * 100) / Decimal(fraction.denominator)
    return min(value, Decimal(100)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def is_passed(score: Optional[Decimal], passing_score: Optional[Any]) -> bool:
    """Inclusive pass rule; content without a threshold always passes."""
    if passing_score is None:
        return True
    if score is None:
        return False
    return score >= Decimal(str(passing_score))


@dataclass(frozen=True)
class ItemScore:
    key: str
    item_type: str
    points: int
    is_correct: bool
    fraction: Fraction
    points_awarded: int
    auto_graded: bool
    detail: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "type": self.item_type,
            "points": self.points,
            "is_correct": self.is_correct,
            "fraction": str(self.fraction),
            "percent": str(to_percent(self.fraction)),
            "points_awarded": self.points_awarded,
            "auto_graded": self.auto_graded,
            "detail": self.detail,
        }


@dataclass(frozen=True)
class QuizScore:
    points_earned: int
    total_points: int
    per_item: List[ItemScore]

    @property
    def score(self) -> Decimal:
        if self.total_points == 0:
            return Decimal("0.00")
        return to_percent(Fraction(self.points_earned, self.total_points))

    @property
    def pending_review(self) -> List[str]:
        return [entry.key for entry in self.per_item if not entry.auto_graded]


@dataclass(frozen=True)
class InteractiveScore:
    score: Decimal
    points_earned: int
    total_points: int
    per_element: List[ItemScore]

    @property
    def pending_review(self) -> List[str]:
        return []


def _score_item(item: Dict[str, Any], responses: Dict[str, Any]) -> ItemScore:
    comparison = registry.comparator(item["type"])(item, responses.get(item["key"]))
    points = int(item["points"])
    awarded = points if comparison.auto_graded and comparison.is_correct else 0
    return ItemScore(
        key=item["key"],
        item_type=item["type"],
        points=points,
        is_correct=comparison.is_correct,
        fraction=comparison.fraction,
        points_awarded=awarded,
        auto_graded=comparison.auto_graded,
        detail=comparison.detail,
    )


def score_quiz(items: List[Dict[str, Any]], responses: Dict[str, Any]) -> QuizScore:
    """
    Score quiz responses.

    Args:
        items: Pinned items of the attempt, in display order
        responses: Validated responses keyed by item key

    Returns:
        QuizScore with points earned, total points and one entry per item
    """
    per_item = [_score_item(item, responses or {}) for item in items]
    graded = [entry for entry in per_item if entry.auto_graded]
    return QuizScore(
        points_earned=sum(entry.points_awarded for entry in graded),
        total_points=sum(entry.points for entry in graded),
        per_item=per_item,
    )


def score_interactive(items: List[Dict[str, Any]], responses: Dict[str, Any]) -> InteractiveScore:
    """
    Score interactive responses as one points-weighted percentage.

    ``points_earned`` counts only fully correct elements; ``score`` uses the
    fractional correctness of each element.
    """
    per_element = [_score_item(item, responses or {}) for item in items]
    total = sum(entry.points for entry in per_element)
    if total == 0:
        weighted = Fraction(0)
    else:
        weighted = sum((entry.fraction * entry.points for entry in per_element), Fraction(0)) / total
    return InteractiveScore(
        score=to_percent(weighted),
        points_earned=sum(entry.points_awarded for entry in per_element),
        total_points=total,
        per_element=per_element,
    )
