"""
Response Validator

Checks the shape of submitted responses against the pinned items of an
attempt before anything is scored. A mismatch raises
``ResponseValidationError(item_id, reason)`` and the whole submission is
rejected; nothing is partially scored.

Responses are a mapping ``{item_key: value}``. A missing key or ``null``
value means "unanswered" and is not a validation error.

Assignment payloads are validated separately by
``ResponseValidator.validate_submission``.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
import os
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from django.conf import settings
from django.utils.dateparse import parse_datetime

from ...content import registry
from ...content.choices import ItemType
from ...exceptions import ResponseValidationError

logger = logging.getLogger(__name__)

ShapeCheck = Callable[[Dict[str, Any], Any], None]


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_id(value: Any) -> bool:
    return isinstance(value, str) or _is_int(value)


def _fail(item: Dict[str, Any], reason: str):
    raise ResponseValidationError(item["key"], reason)


def _config(item: Dict[str, Any]) -> Dict[str, Any]:
    return item.get("config") or {}


def _config_ids(item: Dict[str, Any], config_key: str, fallback) -> set:
    entries = _config(item).get(config_key)
    if isinstance(entries, list) and entries:
        return {registry.normalize_id(entry.get("id")) for entry in entries if isinstance(entry, dict)}
    return {registry.normalize_id(value) for value in fallback}


def _check_index(item: Dict[str, Any], value: Any, upper: int) -> None:
    if not _is_int(value):
        _fail(item, "expected an integer index")
    if not 0 <= value < upper:
        _fail(item, f"index {value} is out of range (0-{upper - 1})")


def _check_index_list(item: Dict[str, Any], value: Any, upper: int) -> None:
    if not isinstance(value, list):
        _fail(item, "expected a list of integer indices")
    for index in value:
        _check_index(item, index, upper)
    if len(set(value)) != len(value):
        _fail(item, "indices must not repeat")


def _check_text(item: Dict[str, Any], value: Any) -> None:
    max_length = getattr(settings, "ASSESSMENT_MAX_TEXT_LENGTH", 10000)
    if not isinstance(value, str):
        _fail(item, "expected a string")
    if len(value) > max_length:
        _fail(item, f"text exceeds {max_length} characters")


def _check_mapping(item: Dict[str, Any], value: Any, keys: set, check_value) -> None:
    if not isinstance(value, dict):
        _fail(item, "expected an object mapping ids to answers")
    for key, answer in value.items():
        if registry.normalize_id(key) not in keys:
            _fail(item, f"unknown id '{key}'")
        if answer is not None:
            check_value(answer)


def _shape_single_choice(item, value):
    options = _config(item).get("options") or []
    _check_index(item, value, len(options))


def _shape_true_false(item, value):
    _check_index(item, value, 2)


def _shape_multiple_select(item, value):
    options = _config(item).get("options") or []
    _check_index_list(item, value, len(options))


def _shape_fill_blank(item, value):
    blanks = len(item["correct_answer"])
    if not isinstance(value, list):
        _fail(item, "expected a list of strings, one per blank")
    if len(value) != blanks:
        _fail(item, f"expected {blanks} blank(s), got {len(value)}")
    for answer in value:
        _check_text(item, answer)


def _shape_short_answer(item, value):
    _check_text(item, value)


def _shape_drag_drop(item, value):
    targets = _config(item).get("targets") or []
    keys = _config_ids(item, "items", item["correct_answer"].keys())

    def check_target(target):
        _check_index(item, target, len(targets))

    _check_mapping(item, value, keys, check_target)


def _shape_hotspot(item, value):
    hotspots = _config(item).get("hotspots") or []
    _check_index_list(item, value, len(hotspots))


def _shape_sequence(item, value):
    known = _config_ids(item, "items", item["correct_answer"])
    if not isinstance(value, list):
        _fail(item, "expected an ordered list of ids")
    if not all(_is_id(entry) for entry in value):
        _fail(item, "ids must be strings or integers")
    normalized = [registry.normalize_id(entry) for entry in value]
    unknown = [entry for entry in normalized if entry not in known]
    if unknown:
        _fail(item, f"unknown id '{unknown[0]}'")
    if len(set(normalized)) != len(normalized):
        _fail(item, "ids must not repeat")


def _shape_matching(item, value):
    left = _config_ids(item, "left_items", item["correct_answer"].keys())
    right = _config_ids(item, "right_items", item["correct_answer"].values())

    def check_right(answer):
        if not _is_id(answer):
            _fail(item, "matched ids must be strings or integers")
        if registry.normalize_id(answer) not in right:
            _fail(item, f"unknown right id '{answer}'")

    _check_mapping(item, value, left, check_right)


def _shape_timeline(item, value):
    events = _config_ids(item, "events", item["correct_answer"].keys())

    def check_date(answer):
        if registry.extract_year(answer) is None:
            _fail(item, f"'{answer}' is not a year or ISO date")

    _check_mapping(item, value, events, check_date)


def _shape_simulation(item, value):
    decisions = {
        registry.normalize_id(decision["id"]): {registry.normalize_id(c["id"]) for c in decision["choices"]}
        for decision in item["correct_answer"]["decisions"]
    }
    if not isinstance(value, dict):
        _fail(item, "expected an object mapping decision ids to choice ids")
    for decision_id, choice_id in value.items():
        choices = decisions.get(registry.normalize_id(decision_id))
        if choices is None:
            _fail(item, f"unknown decision '{decision_id}'")
        if choice_id is None:
            continue
        if not _is_id(choice_id) or registry.normalize_id(choice_id) not in choices:
            _fail(item, f"unknown choice '{choice_id}' for decision '{decision_id}'")


SHAPE_CHECKS: Dict[str, ShapeCheck] = {
    ItemType.MULTIPLE_CHOICE: _shape_single_choice,
    ItemType.TRUE_FALSE: _shape_true_false,
    ItemType.MULTIPLE_SELECT: _shape_multiple_select,
    ItemType.FILL_BLANK: _shape_fill_blank,
    ItemType.SHORT_ANSWER: _shape_short_answer,
    ItemType.DRAG_DROP: _shape_drag_drop,
    ItemType.HOTSPOT: _shape_hotspot,
    ItemType.SEQUENCE: _shape_sequence,
    ItemType.MATCHING: _shape_matching,
    ItemType.TIMELINE: _shape_timeline,
    ItemType.SIMULATION: _shape_simulation,
}


class ResponseValidator:
    """
    Shape validation for quiz, interactive and assignment responses.

    Usage:
        validator = ResponseValidator()
        cleaned = validator.validate(attempt.content_signature["items"], responses)
    """

    def __init__(self):
        self.logger = logger

    def validate(self, items: List[Dict[str, Any]], responses: Any) -> Dict[str, Any]:
        """
        Validate every answered item.

        Returns:
            The answered responses (``null`` entries dropped)

        Raises:
            ResponseValidationError: on the first malformed value or unknown key
        """
        if responses is None:
            return {}
        if not isinstance(responses, dict):
            raise ResponseValidationError("responses", "expected an object keyed by item")

        by_key = {item["key"]: item for item in items}
        for key in responses:
            if key not in by_key:
                raise ResponseValidationError(str(key), "no such item in this attempt")

        cleaned = {}
        for key, value in responses.items():
            if value is None:
                continue
            item = by_key[key]
            SHAPE_CHECKS[item["type"]](item, value)
            cleaned[key] = value
        return cleaned

    def sanitize(self, items: List[Dict[str, Any]], responses: Any) -> Dict[str, Any]:
        """
        Keep only the well-formed entries of a response buffer.

        Used at expiry, when the learner can no longer fix a bad entry.
        """
        if not isinstance(responses, dict):
            return {}
        by_key = {item["key"]: item for item in items}
        kept = {}
        for key, value in responses.items():
            item = by_key.get(key)
            if item is None or value is None:
                continue
            try:
                SHAPE_CHECKS[item["type"]](item, value)
            except ResponseValidationError as exc:
                self.logger.warning(f"Dropping buffered response: {exc.message}")
                continue
            kept[key] = value
        return kept

    def validate_submission(
        self,
        assignment: Dict[str, Any],
        payload: Any,
        now: datetime,
        require_content: bool = True,
        enforce_due_date: bool = True,
    ) -> Dict[str, Any]:
        """
        Validate an assignment payload.

        Args:
            assignment: The ``assignment`` block of a content signature
            payload: ``{"text", "file_reference", "file_name", "file_size_bytes"}``
            now: Submission time, used for the due-date check
            require_content: Demand text and/or a file (false while buffering)
            enforce_due_date: Reject past-due submissions when late ones are not allowed

        Returns:
            Normalized payload including ``is_late``
        """
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise ResponseValidationError("submission", "expected an object")

        unknown = set(payload) - {"text", "file_reference", "file_name", "file_size_bytes"}
        if unknown:
            raise ResponseValidationError(sorted(unknown)[0], "unknown submission field")

        text = payload.get("text") or ""
        file_reference = payload.get("file_reference") or ""
        file_name = payload.get("file_name") or ""
        file_size = payload.get("file_size_bytes")

        max_length = getattr(settings, "ASSESSMENT_MAX_TEXT_LENGTH", 10000)
        if not isinstance(text, str):
            raise ResponseValidationError("text", "expected a string")
        if len(text) > max_length:
            raise ResponseValidationError("text", f"text exceeds {max_length} characters")
        if not isinstance(file_reference, str) or not isinstance(file_name, str):
            raise ResponseValidationError("file_reference", "expected a string reference")

        if require_content and not (text.strip() or file_reference):
            raise ResponseValidationError("submission", "a text answer or a file is required")

        if file_reference:
            self._check_file(assignment, file_reference, file_name, file_size)

        is_late = self._is_late(assignment, now)
        if is_late and enforce_due_date and not assignment.get("allow_late_submission"):
            raise ResponseValidationError("submission", "the due date has passed")

        return {
            "text": text,
            "file_reference": file_reference,
            "file_name": file_name,
            "file_size_bytes": file_size if file_reference else None,
            "is_late": is_late,
        }

    def _check_file(self, assignment, file_reference: str, file_name: str, file_size: Optional[int]):
        allowed = [ext.lower() for ext in assignment.get("allowed_file_types") or []]
        name = file_name or file_reference
        extension = os.path.splitext(name)[1].lower()
        if allowed and extension not in allowed:
            raise ResponseValidationError(
                "file_reference", f"file type '{extension or '?'}' is not allowed ({', '.join(allowed)})"
            )
        if file_size is not None:
            if not _is_int(file_size) or file_size < 0:
                raise ResponseValidationError("file_size_bytes", "expected a non-negative integer")
            max_bytes = assignment.get("max_file_size_mb", 10) * 1024 * 1024
            if file_size > max_bytes:
                raise ResponseValidationError(
                    "file_size_bytes", f"file exceeds {assignment.get('max_file_size_mb', 10)} MB"
                )

    @staticmethod
    def _is_late(assignment, now: datetime) -> bool:
        due_at = assignment.get("due_at")
        if not due_at:
            return False
        return now > parse_datetime(due_at)
