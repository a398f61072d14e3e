"""
Shared fixtures for the assessment test suite.
"""

from assessments.content.choices import ContentKind, ItemType
from assessments.content.models import AssessableContent, Item


def pinned(key, item_type, correct_answer, points=1, config=None, explanation=""):
    """Item dict in the shape stored in an attempt's content signature."""
    return {
        "key": key,
        "type": item_type,
        "prompt": f"Question {key}",
        "points": points,
        "config": config or {},
        "correct_answer": correct_answer,
        "explanation": explanation,
    }


def mc(key, correct, options=4, points=1):
    return pinned(
        key,
        ItemType.MULTIPLE_CHOICE,
        correct,
        points=points,
        config={"options": [f"Option {i}" for i in range(options)]},
    )


def make_quiz(title="Python Basics Quiz", questions=4, **policy):
    """Quiz with ``questions`` multiple choice items whose correct index is 1."""
    content = AssessableContent.objects.create(kind=ContentKind.QUIZ, title=title, **policy)
    for index in range(questions):
        Item.objects.create(
            content=content,
            key=f"q{index + 1}",
            item_type=ItemType.MULTIPLE_CHOICE,
            order=index,
            prompt=f"Question {index + 1}",
            config={"options": ["A", "B", "C", "D"]},
            correct_answer=1,
            explanation="B is right",
        )
    return content


def make_sequence_activity(title="Order the steps", **policy):
    content = AssessableContent.objects.create(kind=ContentKind.INTERACTIVE, title=title, **policy)
    Item.objects.create(
        content=content,
        key="steps",
        item_type=ItemType.SEQUENCE,
        config={"items": [{"id": "A"}, {"id": "B"}, {"id": "C"}]},
        correct_answer=["A", "B", "C"],
    )
    return content


def make_assignment(title="Write an essay", **policy):
    defaults = {"allowed_file_types": [".pdf", ".docx"], "max_file_size_mb": 5, "max_points": 20}
    defaults.update(policy)
    return AssessableContent.objects.create(kind=ContentKind.ASSIGNMENT, title=title, **defaults)
