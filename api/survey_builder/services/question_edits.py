from __future__ import annotations

import logging
from typing import Any, Callable

from ..schemas import (
    CONDITION_OPERATORS,
    ChoiceQuestion,
    ConditionalLogic,
    RatingQuestion,
    SurveyDraft,
    SurveyQuestion,
    TextQuestion,
)

logger = logging.getLogger(__name__)

_COMMON_FIELDS = {"title", "description", "required"}
EDITABLE_FIELDS: dict[type, set[str]] = {
    TextQuestion: _COMMON_FIELDS | {"placeholder", "max_length"},
    ChoiceQuestion: _COMMON_FIELDS | {"options"},
    RatingQuestion: _COMMON_FIELDS | {"min_rating", "max_rating"},
}


def _replace(draft: SurveyDraft, question_id: str, fn: Callable[[SurveyQuestion], SurveyQuestion]) -> SurveyDraft:
    changed = False
    out: list[SurveyQuestion] = []
    for q in draft.questions:
        if q.id == question_id:
            updated = fn(q)
            changed = changed or updated is not q
            q = updated
        out.append(q)
    if not changed:
        return draft
    return draft.model_copy(update={"questions": tuple(out)})


def update_question(draft: SurveyDraft, question_id: str, **changes: Any) -> SurveyDraft:
    """Apply field edits to one question, re-validating its payload.

    Numeric fields go through the model's coercion, so ``max_length="abc"``
    simply clears the limit.
    """

    def _apply(q: SurveyQuestion) -> SurveyQuestion:
        allowed = EDITABLE_FIELDS[type(q)]
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"fields {sorted(unknown)} are not editable on {q.type} questions")
        if "options" in changes and not changes["options"]:
            logger.debug("[EDIT] rejected empty option list for %s", q.id)
            return q
        return type(q).model_validate({**q.model_dump(), **changes})

    return _replace(draft, question_id, _apply)


def toggle_required(draft: SurveyDraft, question_id: str) -> SurveyDraft:
    return _replace(draft, question_id, lambda q: q.model_copy(update={"required": not q.required}))


def _choice_edit(draft: SurveyDraft, question_id: str, fn: Callable[[list[str]], list[str] | None]) -> SurveyDraft:
    def _apply(q: SurveyQuestion) -> SurveyQuestion:
        if not isinstance(q, ChoiceQuestion):
            return q
        options = fn(list(q.options))
        if options is None:
            return q
        return q.model_copy(update={"options": tuple(options)})

    return _replace(draft, question_id, _apply)


def add_option(draft: SurveyDraft, question_id: str, label: str | None = None) -> SurveyDraft:
    def _add(options: list[str]) -> list[str]:
        return [*options, label if label is not None else f"Option {len(options) + 1}"]

    return _choice_edit(draft, question_id, _add)


def set_option(draft: SurveyDraft, question_id: str, index: int, label: str) -> SurveyDraft:
    def _set(options: list[str]) -> list[str] | None:
        if not 0 <= index < len(options):
            return None
        options[index] = label
        return options

    return _choice_edit(draft, question_id, _set)


def remove_option(draft: SurveyDraft, question_id: str, index: int) -> SurveyDraft:
    def _remove(options: list[str]) -> list[str] | None:
        if len(options) <= 1:
            logger.debug("[EDIT] refused to remove the last option of %s", question_id)
            return None
        if not 0 <= index < len(options):
            return None
        return [opt for i, opt in enumerate(options) if i != index]

    return _choice_edit(draft, question_id, _remove)


def condition_candidates(draft: SurveyDraft, question_id: str) -> list[SurveyQuestion]:
    """Questions a rule on ``question_id`` may reference: those placed before it."""
    out: list[SurveyQuestion] = []
    for q in draft.questions:
        if q.id == question_id:
            return out
        out.append(q)
    return []


def set_conditional_logic(
    draft: SurveyDraft,
    question_id: str,
    enabled: bool,
    *,
    question_id_ref: str | None = None,
    operator: str | None = None,
    value: str | None = None,
) -> SurveyDraft:
    if operator is not None and operator not in CONDITION_OPERATORS:
        raise ValueError(f"operator must be one of {list(CONDITION_OPERATORS)}")

    candidate_ids = [q.id for q in condition_candidates(draft, question_id)]

    def _apply(q: SurveyQuestion) -> SurveyQuestion:
        current = q.conditional_logic
        if not enabled and current is None:
            return q
        if question_id_ref is not None:
            ref = question_id_ref
        elif current is not None and (current.question_id in candidate_ids or not enabled):
            ref = current.question_id
        else:
            ref = candidate_ids[0] if candidate_ids else ""
        if enabled and ref not in candidate_ids:
            logger.debug("[EDIT] rejected condition on %s referencing %r", q.id, ref)
            return q
        rule = ConditionalLogic(
            enabled=enabled,
            question_id=ref,
            operator=operator or (current.operator if current else "equals"),
            value=value if value is not None else (current.value if current else ""),
        )
        return q.model_copy(update={"conditional_logic": rule})

    return _replace(draft, question_id, _apply)


def clear_conditional_logic(draft: SurveyDraft, question_id: str) -> SurveyDraft:
    def _clear(q: SurveyQuestion) -> SurveyQuestion:
        if q.conditional_logic is None:
            return q
        return q.model_copy(update={"conditional_logic": None})

    return _replace(draft, question_id, _clear)
