import logging
import uuid
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError

from .. import survey_repo
from ..deps import parse_survey_id, require_admin
from ..schemas import SURVEY_STATUSES, SurveyPayload, VisibilityRequest
from ..services.rules import prune_hidden_answers, required_question_ids, visible_question_ids
from ..services.serialization import definition_from_json, definition_to_json, normalize_slug, slugify
from ..services.survey_runtime import runtime_questions
from ..services.survey_validation import definition_warnings, validate_survey_definition

logger = logging.getLogger(__name__)

router = APIRouter()


def _json(data: Any) -> Any:
    return jsonable_encoder(data)


def _detail(*, message: str, hint: str | None = None, errors: list[dict[str, Any]] | None = None, trace_id: str | None = None) -> dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "hint": hint,
        "errors": errors or [],
        "trace_id": trace_id or str(uuid.uuid4()),
    }


def _parse_payload(raw: Any, trace_id: str) -> SurveyPayload:
    try:
        return SurveyPayload.model_validate(raw)
    except ValidationError as exc:
        errors = [
            {"path": ".".join(str(p) for p in err.get("loc", ())), "message": str(err.get("msg") or "invalid value")}
            for err in exc.errors()
        ]
        raise HTTPException(
            status_code=400,
            detail=_detail(message="Invalid survey payload", errors=errors, hint="Send {\"title\": ..., \"definition\": {\"questions\": [...]}}", trace_id=trace_id),
        )


def _prepare_record(payload: SurveyPayload, trace_id: str, survey_id: str | None = None) -> dict[str, Any]:
    errors = validate_survey_definition(payload.definition)
    if errors:
        raise HTTPException(status_code=400, detail=_detail(message="Invalid survey definition", errors=errors, trace_id=trace_id))

    slug = normalize_slug(payload.slug) or slugify(payload.title)
    if not slug:
        raise HTTPException(
            status_code=400,
            detail=_detail(message="Survey slug is required", hint="Give the survey a title or an explicit slug", trace_id=trace_id),
        )
    if payload.starts_at and payload.ends_at and payload.ends_at <= payload.starts_at:
        raise HTTPException(status_code=400, detail=_detail(message="endsAt must be later than startsAt", trace_id=trace_id))
    if survey_repo.slug_taken(slug, exclude_id=survey_id):
        raise HTTPException(status_code=409, detail=_detail(message=f"Slug '{slug}' is already used by another survey", trace_id=trace_id))

    return {
        "title": payload.title.strip(),
        "description": payload.description,
        "slug": slug,
        "status": payload.status,
        "starts_at": payload.starts_at,
        "ends_at": payload.ends_at,
        # Stored in canonical form: legacy tags renamed, numeric fields coerced.
        "definition": definition_to_json(definition_from_json(payload.definition)),
    }


@router.get("/admin/surveys")
def admin_list_surveys(status: str | None = None, admin_user: dict[str, Any] = Depends(require_admin)) -> dict[str, Any]:
    _ = admin_user
    if status is not None and status not in SURVEY_STATUSES:
        raise HTTPException(status_code=400, detail=_detail(message=f"status must be one of {list(SURVEY_STATUSES)}"))
    return _json({"surveys": survey_repo.list_surveys(status)})


@router.post("/admin/surveys", status_code=201)
def admin_create_survey(payload: Any = Body(...), admin_user: dict[str, Any] = Depends(require_admin)) -> dict[str, Any]:
    trace_id = str(uuid.uuid4())
    try:
        record = _prepare_record(_parse_payload(payload, trace_id), trace_id)
        created = survey_repo.create_survey(record)
        return _json({"survey": created, "warnings": definition_warnings(record["definition"]), "created_by": admin_user.get("email")})
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("[SURVEY] create failed trace_id=%s", trace_id)
        raise HTTPException(status_code=500, detail=_detail(message="Failed to create survey", hint=str(exc), trace_id=trace_id))


@router.post("/admin/surveys/validate")
def admin_validate_definition(payload: Any = Body(...), admin_user: dict[str, Any] = Depends(require_admin)) -> dict[str, Any]:
    _ = admin_user
    trace_id = str(uuid.uuid4())
    definition = payload.get("definition") if isinstance(payload, dict) and "definition" in payload else payload
    errors = validate_survey_definition(definition)
    if errors:
        raise HTTPException(status_code=400, detail=_detail(message="Validation failed", errors=errors, trace_id=trace_id))
    return {"valid": True, "errors": [], "warnings": definition_warnings(definition)}


@router.get("/admin/surveys/{survey_id}")
def admin_get_survey(survey_id: str, admin_user: dict[str, Any] = Depends(require_admin)) -> dict[str, Any]:
    _ = admin_user
    row = survey_repo.get_survey(parse_survey_id(survey_id))
    if not row:
        raise HTTPException(status_code=404, detail=_detail(message="Survey not found"))
    return _json({"survey": row})


@router.put("/admin/surveys/{survey_id}")
def admin_replace_survey(
    survey_id: str,
    payload: Any = Body(...),
    admin_user: dict[str, Any] = Depends(require_admin),
) -> dict[str, Any]:
    _ = admin_user
    sid = parse_survey_id(survey_id)
    trace_id = str(uuid.uuid4())
    try:
        record = _prepare_record(_parse_payload(payload, trace_id), trace_id, survey_id=sid)
        replaced = survey_repo.replace_survey(sid, record)
        if not replaced:
            raise HTTPException(status_code=404, detail=_detail(message="Survey not found", trace_id=trace_id))
        return _json({"survey": replaced, "warnings": definition_warnings(record["definition"])})
    except HTTPException:
        raise
    except Exception as exc:
        logger.exception("[SURVEY] replace failed id=%s trace_id=%s", sid, trace_id)
        raise HTTPException(status_code=500, detail=_detail(message="Failed to save survey", hint=str(exc), trace_id=trace_id))


@router.delete("/admin/surveys/{survey_id}")
def admin_delete_survey(survey_id: str, admin_user: dict[str, Any] = Depends(require_admin)) -> dict[str, Any]:
    _ = admin_user
    if not survey_repo.delete_survey(parse_survey_id(survey_id)):
        raise HTTPException(status_code=404, detail=_detail(message="Survey not found"))
    return {"deleted": True}


@router.post("/admin/surveys/{survey_id}/preview")
def admin_preview_visibility(
    survey_id: str,
    payload: VisibilityRequest,
    admin_user: dict[str, Any] = Depends(require_admin),
) -> dict[str, Any]:
    _ = admin_user
    row = survey_repo.get_survey(parse_survey_id(survey_id))
    if not row:
        raise HTTPException(status_code=404, detail=_detail(message="Survey not found"))
    questions = runtime_questions(row)
    return {
        "visible_question_ids": visible_question_ids(questions, payload.answers),
        "required_question_ids": required_question_ids(questions, payload.answers),
        "answers": prune_hidden_answers(questions, payload.answers),
    }
