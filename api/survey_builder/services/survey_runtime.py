from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..schemas import SurveyQuestion
from .serialization import definition_document, definition_from_json


def _aware(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def unavailable_reason(row: dict[str, Any], now: datetime | None = None) -> str | None:
    """Why a stored survey cannot be answered right now, or ``None`` when it can.

    Only ``active`` surveys are public, and only inside their optional
    ``starts_at``/``ends_at`` window.
    """
    if row.get("status") != "active":
        return "Survey is not available"
    current = _aware(now) or datetime.now(timezone.utc)
    starts_at = _aware(row.get("starts_at"))
    ends_at = _aware(row.get("ends_at"))
    if starts_at and current < starts_at:
        return "Survey has not started yet"
    if ends_at and current > ends_at:
        return "Survey has ended"
    return None


def runtime_questions(row: dict[str, Any]) -> tuple[SurveyQuestion, ...]:
    return definition_from_json(definition_document(row))


def public_survey_view(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(row.get("id")),
        "title": row.get("title"),
        "description": row.get("description"),
        "slug": row.get("slug"),
        "definition": definition_document(row),
    }
