from __future__ import annotations

import logging
import random
import string
import time
from typing import Iterable, Sequence

from ..config import DUPLICATE_TITLE_SUFFIX
from ..schemas import SurveyDraft, SurveyQuestion
from .question_types import default_payload
from .rules import stale_condition_ids
from .serialization import QUESTION_ADAPTER

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_question_id(existing: Iterable[str] = ()) -> str:
    taken = set(existing)
    while True:
        suffix = "".join(random.choices(_ID_ALPHABET, k=7))
        candidate = f"q-{int(time.time() * 1000)}-{suffix}"
        if candidate not in taken:
            return candidate


def create_question(question_type: str, order: int, question_id: str) -> SurveyQuestion:
    payload = {
        "id": question_id,
        "type": question_type,
        "title": "",
        "required": False,
        "order": order,
        **default_payload(question_type),
    }
    return QUESTION_ADAPTER.validate_python(payload)


def renumber(questions: Sequence[SurveyQuestion]) -> tuple[SurveyQuestion, ...]:
    return tuple(q if q.order == idx else q.model_copy(update={"order": idx}) for idx, q in enumerate(questions))


def disable_stale_conditions(questions: Sequence[SurveyQuestion]) -> tuple[SurveyQuestion, ...]:
    """Switch off every enabled rule that no longer points at an earlier question.

    The reference itself is kept so the author can re-point the rule.
    """
    stale = set(stale_condition_ids(questions))
    if not stale:
        return tuple(questions)
    logger.info("[ORDERING] disabled %d stale condition(s): %s", len(stale), sorted(stale))
    out: list[SurveyQuestion] = []
    for q in questions:
        if q.id in stale and q.conditional_logic is not None:
            rule = q.conditional_logic.model_copy(update={"enabled": False})
            q = q.model_copy(update={"conditional_logic": rule})
        out.append(q)
    return tuple(out)


def index_of(draft: SurveyDraft, question_id: str) -> int | None:
    for idx, q in enumerate(draft.questions):
        if q.id == question_id:
            return idx
    return None


def _with_questions(draft: SurveyDraft, questions: Sequence[SurveyQuestion]) -> SurveyDraft:
    return draft.model_copy(update={"questions": tuple(questions)})


def _fresh_id(draft: SurveyDraft, requested: str | None) -> str:
    taken = {q.id for q in draft.questions}
    if requested and requested not in taken:
        return requested
    if requested:
        logger.debug("[ORDERING] id %s already in use, generating a new one", requested)
    return new_question_id(taken)


def append_question(draft: SurveyDraft, question_type: str, question_id: str | None = None) -> SurveyDraft:
    qid = _fresh_id(draft, question_id)
    question = create_question(question_type, len(draft.questions), qid)
    return _with_questions(draft, (*draft.questions, question))


def delete_question(draft: SurveyDraft, question_id: str) -> SurveyDraft:
    if index_of(draft, question_id) is None:
        return draft
    remaining = [q for q in draft.questions if q.id != question_id]
    return _with_questions(draft, disable_stale_conditions(renumber(remaining)))


def duplicate_question(draft: SurveyDraft, question_id: str, new_id: str | None = None) -> SurveyDraft:
    idx = index_of(draft, question_id)
    if idx is None:
        return draft
    source = draft.questions[idx]
    clone = source.model_copy(
        update={
            "id": _fresh_id(draft, new_id),
            "title": f"{source.title}{DUPLICATE_TITLE_SUFFIX}",
            "order": len(draft.questions),
        }
    )
    return _with_questions(draft, (*draft.questions, clone))


def move_question(draft: SurveyDraft, source_index: int, target_index: int) -> SurveyDraft:
    """Move one question and re-derive every ``order`` from list position.

    ``target_index`` is clamped to the list; an out-of-range source is a no-op.
    """
    count = len(draft.questions)
    if not 0 <= source_index < count:
        return draft
    target = min(max(target_index, 0), count - 1)
    items = list(draft.questions)
    items.insert(target, items.pop(source_index))
    return _with_questions(draft, disable_stale_conditions(renumber(items)))


def move_question_by_id(draft: SurveyDraft, active_id: str, over_id: str) -> SurveyDraft:
    """Drop ``active_id`` onto the slot currently held by ``over_id``."""
    source = index_of(draft, active_id)
    target = index_of(draft, over_id)
    if source is None or target is None or source == target:
        return draft
    return move_question(draft, source, target)
