"""
Closed tag sets shared by content models, the comparator registry and the
validator. Kept free of model imports so every layer can depend on it.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class ContentKind(models.TextChoices):
    QUIZ = "quiz", _("Quiz")
    ASSIGNMENT = "assignment", _("Assignment")
    INTERACTIVE = "interactive", _("Interactive Content")


class ItemType(models.TextChoices):
    # Quiz question types
    MULTIPLE_CHOICE = "multiple_choice", _("Multiple Choice")
    MULTIPLE_SELECT = "multiple_select", _("Multiple Select")
    TRUE_FALSE = "true_false", _("True / False")
    FILL_BLANK = "fill_blank", _("Fill in the Blank")
    SHORT_ANSWER = "short_answer", _("Short Answer")
    # Interactive element types
    DRAG_DROP = "drag_drop", _("Drag and Drop")
    HOTSPOT = "hotspot", _("Hotspot")
    SEQUENCE = "sequence", _("Sequence")
    MATCHING = "matching", _("Matching")
    TIMELINE = "timeline", _("Timeline")
    SIMULATION = "simulation", _("Simulation")


QUIZ_ITEM_TYPES = frozenset(
    {
        ItemType.MULTIPLE_CHOICE,
        ItemType.MULTIPLE_SELECT,
        ItemType.TRUE_FALSE,
        ItemType.FILL_BLANK,
        ItemType.SHORT_ANSWER,
    }
)

INTERACTIVE_ITEM_TYPES = frozenset(
    {
        ItemType.DRAG_DROP,
        ItemType.HOTSPOT,
        ItemType.SEQUENCE,
        ItemType.MATCHING,
        ItemType.TIMELINE,
        ItemType.SIMULATION,
    }
)

ITEM_TYPES_BY_KIND = {
    ContentKind.QUIZ: QUIZ_ITEM_TYPES,
    ContentKind.INTERACTIVE: INTERACTIVE_ITEM_TYPES,
    ContentKind.ASSIGNMENT: frozenset(),
}
