from __future__ import annotations

from typing import Any

SHORT_TEXT = "short_text"
LONG_TEXT = "long_text"
SINGLE_CHOICE = "single_choice"
MULTIPLE_CHOICE = "multiple_choice"
RATING = "rating"
DROPDOWN = "dropdown"

QUESTION_TYPE_LABELS: dict[str, str] = {
    SHORT_TEXT: "Short Text",
    LONG_TEXT: "Long Text",
    SINGLE_CHOICE: "Single Choice",
    MULTIPLE_CHOICE: "Multiple Choice",
    RATING: "Rating (1-5 Stars)",
    DROPDOWN: "Dropdown",
}

VALID_QUESTION_TYPES = frozenset(QUESTION_TYPE_LABELS)
TEXT_TYPES = frozenset({SHORT_TEXT, LONG_TEXT})
CHOICE_TYPES = frozenset({SINGLE_CHOICE, MULTIPLE_CHOICE, DROPDOWN})

DEFAULT_MIN_RATING = 1
DEFAULT_MAX_RATING = 5

# Tags written by the first version of the builder.
LEGACY_TYPE_ALIASES: dict[str, str] = {
    "text": SHORT_TEXT,
    "textarea": LONG_TEXT,
    "radio": SINGLE_CHOICE,
    "checkbox": MULTIPLE_CHOICE,
}


class UnknownQuestionType(ValueError):
    def __init__(self, question_type: Any) -> None:
        super().__init__(f"unknown question type '{question_type}', expected one of {sorted(VALID_QUESTION_TYPES)}")
        self.question_type = question_type


def canonical_question_type(question_type: str) -> str:
    tag = LEGACY_TYPE_ALIASES.get(question_type, question_type)
    if tag not in VALID_QUESTION_TYPES:
        raise UnknownQuestionType(question_type)
    return tag


def question_type_label(question_type: str) -> str:
    if question_type not in VALID_QUESTION_TYPES:
        raise UnknownQuestionType(question_type)
    return QUESTION_TYPE_LABELS[question_type]


def default_payload(question_type: str) -> dict[str, Any]:
    """Payload fields seeded into a freshly added question of ``question_type``.

    Choice questions start with two placeholder options so the author always
    has something to edit; rating questions start on the 1..5 scale.
    """
    if question_type in CHOICE_TYPES:
        return {"options": ["Option 1", "Option 2"]}
    if question_type == RATING:
        return {"min_rating": DEFAULT_MIN_RATING, "max_rating": DEFAULT_MAX_RATING}
    if question_type in TEXT_TYPES:
        return {}
    raise UnknownQuestionType(question_type)


def list_question_types() -> list[dict[str, str]]:
    return [{"type": tag, "label": label} for tag, label in QUESTION_TYPE_LABELS.items()]
