from .scoring_service import (
    InteractiveScore,
    ItemScore,
    QuizScore,
    is_passed,
    score_interactive,
    score_quiz,
    to_percent,
)

__all__ = [
    "InteractiveScore",
    "ItemScore",
    "QuizScore",
    "is_passed",
    "score_interactive",
    "score_quiz",
    "to_percent",
]
