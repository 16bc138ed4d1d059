from __future__ import annotations

import json
import re
from typing import Any, Iterable

from pydantic import TypeAdapter

from ..schemas import SurveyDraft, SurveyQuestion
from .question_types import LEGACY_TYPE_ALIASES

QUESTION_ADAPTER = TypeAdapter(SurveyQuestion)

# Keys dropped from the persisted document when they hold no value.
_OMIT_WHEN_UNSET = {"description", "placeholder", "maxLength", "conditionalLogic"}


def question_to_json(question: SurveyQuestion) -> dict[str, Any]:
    doc = question.model_dump(by_alias=True, mode="json")
    return {k: v for k, v in doc.items() if not (v is None and k in _OMIT_WHEN_UNSET)}


def question_from_json(doc: dict[str, Any]) -> SurveyQuestion:
    raw = dict(doc)
    tag = raw.get("type")
    if isinstance(tag, str) and tag in LEGACY_TYPE_ALIASES:
        raw["type"] = LEGACY_TYPE_ALIASES[tag]
    return QUESTION_ADAPTER.validate_python(raw)


def definition_to_json(questions: Iterable[SurveyQuestion]) -> dict[str, Any]:
    ordered = sorted(questions, key=lambda q: q.order)
    return {"questions": [question_to_json(q) for q in ordered]}


def definition_from_json(doc: dict[str, Any] | None) -> tuple[SurveyQuestion, ...]:
    """Parse a stored definition document.

    Type payloads are parsed, but the order and condition-reference invariants
    are trusted as saved; questions keep the sequence of the stored array.
    """
    if not doc:
        return ()
    questions = doc.get("questions") or []
    return tuple(question_from_json(q) for q in questions)


def dumps(questions: Iterable[SurveyQuestion]) -> str:
    return json.dumps(definition_to_json(questions), ensure_ascii=False)


def loads(text: str) -> tuple[SurveyQuestion, ...]:
    return definition_from_json(json.loads(text))


def slugify(title: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", (title or "").lower()).strip("-")


def normalize_slug(slug: str | None) -> str:
    """An author-supplied slug, held to the same shape as a derived one."""
    return slugify(slug or "")


def survey_to_payload(draft: SurveyDraft) -> dict[str, Any]:
    """Full survey record for a wholesale save of ``draft``."""
    return {
        "title": draft.title,
        "description": draft.description,
        "slug": normalize_slug(draft.slug) or slugify(draft.title),
        "status": draft.status,
        "starts_at": draft.starts_at,
        "ends_at": draft.ends_at,
        "definition": definition_to_json(draft.questions),
    }


def definition_document(row: dict[str, Any]) -> dict[str, Any]:
    """The stored definition of a survey row; drivers may hand back JSON text."""
    doc = row.get("definition_json")
    if isinstance(doc, str):
        doc = json.loads(doc)
    return doc if isinstance(doc, dict) else {"questions": []}


def draft_from_record(row: dict[str, Any]) -> SurveyDraft:
    return SurveyDraft(
        survey_id=str(row["id"]) if row.get("id") is not None else None,
        title=row.get("title") or "",
        description=row.get("description") or "",
        slug=row.get("slug") or "",
        status=row.get("status") or "draft",
        starts_at=row.get("starts_at"),
        ends_at=row.get("ends_at"),
        questions=definition_from_json(definition_document(row)),
    )
