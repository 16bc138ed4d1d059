from typing import Any

from fastapi import APIRouter, HTTPException

from .. import survey_repo
from ..schemas import VisibilityRequest
from ..services.rules import required_question_ids, visible_question_ids
from ..services.survey_runtime import public_survey_view, runtime_questions, unavailable_reason

router = APIRouter()


def _require_available(slug: str) -> dict[str, Any]:
    row = survey_repo.get_survey_by_slug(slug)
    if not row:
        raise HTTPException(status_code=404, detail="Survey not found")
    reason = unavailable_reason(row)
    if reason:
        raise HTTPException(status_code=404, detail=reason)
    return row


@router.get("/public/surveys/{slug}")
def get_public_survey(slug: str) -> dict[str, Any]:
    return public_survey_view(_require_available(slug))


@router.post("/public/surveys/{slug}/visibility")
def evaluate_public_visibility(slug: str, payload: VisibilityRequest) -> dict[str, Any]:
    questions = runtime_questions(_require_available(slug))
    return {
        "visible_question_ids": visible_question_ids(questions, payload.answers),
        "required_question_ids": required_question_ids(questions, payload.answers),
    }
