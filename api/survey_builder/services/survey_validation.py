from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ..schemas import RatingQuestion, SurveyQuestion
from .question_types import UnknownQuestionType, canonical_question_type
from .serialization import question_from_json


def _field_errors(exc: ValidationError, path: str, tag: str) -> list[dict[str, Any]]:
    out: list[dict[str, Any]] = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != tag]
        field_path = ".".join([path, *loc])
        if loc and loc[0] == "options" and err.get("type") == "too_short":
            out.append({"code": "empty_options", "path": field_path, "message": "choice questions need at least one option"})
        else:
            out.append({"code": "invalid_question_field", "path": field_path, "message": str(err.get("msg") or "invalid value")})
    return out


def validate_survey_definition(definition: Any) -> list[dict[str, Any]]:
    if not isinstance(definition, dict):
        return [{"code": "invalid_schema", "path": "definition", "message": "definition must be an object"}]

    questions = definition.get("questions")
    if not isinstance(questions, list):
        return [{"code": "invalid_schema", "path": "questions", "message": "questions must be an array"}]

    errors: list[dict[str, Any]] = []
    seen_ids: set[str] = set()
    parsed: list[tuple[int, SurveyQuestion]] = []

    for idx, raw in enumerate(questions):
        path = f"questions[{idx}]"
        if not isinstance(raw, dict):
            errors.append({"code": "invalid_question", "path": path, "message": "question must be an object"})
            continue

        qid = raw.get("id")
        if not isinstance(qid, str) or not qid.strip():
            errors.append({"code": "missing_question_id", "path": f"{path}.id", "message": "question id is required"})
            continue
        if qid in seen_ids:
            errors.append({"code": "duplicate_question_id", "path": f"{path}.id", "message": f"duplicate question id '{qid}'"})
        else:
            seen_ids.add(qid)

        tag = raw.get("type")
        try:
            canonical = canonical_question_type(tag if isinstance(tag, str) else "")
        except UnknownQuestionType as exc:
            errors.append({"code": "invalid_question_type", "path": f"{path}.type", "message": str(exc)})
            continue

        try:
            question = question_from_json(raw)
        except ValidationError as exc:
            errors.extend(_field_errors(exc, path, canonical))
            continue
        parsed.append((idx, question))

        if isinstance(question, RatingQuestion):
            low, high = question.effective_range
            if low >= high:
                errors.append({
                    "code": "invalid_rating_range",
                    "path": f"{path}.maxRating",
                    "message": f"maxRating ({high}) must be greater than minRating ({low})",
                })

    if len(parsed) == len(questions):
        orders = sorted(q.order for _, q in parsed)
        if orders != list(range(len(parsed))):
            errors.append({
                "code": "order_not_dense",
                "path": "questions",
                "message": f"question orders must be exactly 0..{len(parsed) - 1} with no gaps or duplicates",
            })

    order_by_id = {q.id: q.order for _, q in parsed}
    for idx, question in parsed:
        rule = question.conditional_logic
        if rule is None or not rule.enabled:
            continue
        rule_path = f"questions[{idx}].conditionalLogic.questionId"
        target_order = order_by_id.get(rule.question_id)
        if target_order is None:
            errors.append({
                "code": "unknown_condition_question",
                "path": rule_path,
                "message": f"condition question '{rule.question_id}' not found",
            })
        elif target_order >= question.order:
            errors.append({
                "code": "forward_condition_reference",
                "path": rule_path,
                "message": f"condition must reference a question placed before '{question.id}'",
            })

    return errors


def definition_warnings(definition: Any) -> list[dict[str, Any]]:
    """Non-blocking authoring hints for a definition that already validates."""
    questions = definition.get("questions") if isinstance(definition, dict) else None
    warnings: list[dict[str, Any]] = []
    for idx, raw in enumerate(questions if isinstance(questions, list) else []):
        if isinstance(raw, dict) and not str(raw.get("title") or "").strip():
            warnings.append({"code": "missing_title", "path": f"questions[{idx}].title", "message": "question has no title"})
    return warnings
