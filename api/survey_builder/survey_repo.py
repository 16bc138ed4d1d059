from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from sqlalchemy import text

from .database import SessionLocal
from .services.survey_fingerprint import definition_fingerprint

logger = logging.getLogger(__name__)

_COLUMNS = (
    "id, title, slug, description, status, starts_at, ends_at, definition_json, "
    "definition_hash, response_count, created_at, updated_at"
)


def _normalize_row(row: Any) -> dict[str, Any]:
    out = dict(row)
    if out.get("id") is not None:
        out["id"] = str(out["id"])
    if isinstance(out.get("definition_json"), str):
        out["definition_json"] = json.loads(out["definition_json"])
    return out


def _params(payload: dict[str, Any]) -> dict[str, Any]:
    definition = payload.get("definition") or {"questions": []}
    return {
        "title": payload.get("title") or "",
        "slug": payload["slug"],
        "description": payload.get("description"),
        "status": payload.get("status") or "draft",
        "starts_at": payload.get("starts_at"),
        "ends_at": payload.get("ends_at"),
        "definition_json": json.dumps(definition),
        "definition_hash": definition_fingerprint(definition),
    }


def list_surveys(status: str | None = None) -> list[dict[str, Any]]:
    with SessionLocal() as db:
        rows = db.execute(
            text(
                f"""
                SELECT {_COLUMNS}
                FROM survey
                WHERE (CAST(:status AS text) IS NULL OR status = :status)
                ORDER BY created_at DESC
                """
            ),
            {"status": status},
        ).mappings().all()
    return [_normalize_row(r) for r in rows]


def get_survey(survey_id: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(
            text(f"SELECT {_COLUMNS} FROM survey WHERE id=CAST(:id AS uuid) LIMIT 1"),
            {"id": survey_id},
        ).mappings().first()
    return _normalize_row(row) if row else None


def get_survey_by_slug(slug: str) -> dict[str, Any] | None:
    with SessionLocal() as db:
        row = db.execute(
            text(f"SELECT {_COLUMNS} FROM survey WHERE slug=:slug LIMIT 1"),
            {"slug": slug},
        ).mappings().first()
    return _normalize_row(row) if row else None


def slug_taken(slug: str, exclude_id: str | None = None) -> bool:
    with SessionLocal() as db:
        value = db.execute(
            text(
                """
                SELECT COUNT(1) FROM survey
                WHERE slug=:slug AND (CAST(:exclude_id AS uuid) IS NULL OR id <> CAST(:exclude_id AS uuid))
                """
            ),
            {"slug": slug, "exclude_id": exclude_id},
        ).scalar() or 0
    return int(value) > 0


def create_survey(payload: dict[str, Any]) -> dict[str, Any]:
    new_id = str(uuid.uuid4())
    with SessionLocal() as db:
        db.execute(
            text(
                """
                INSERT INTO survey (id, title, slug, description, status, starts_at, ends_at, definition_json, definition_hash)
                VALUES (
                  CAST(:id AS uuid), :title, :slug, :description, :status, :starts_at, :ends_at,
                  CAST(:definition_json AS jsonb), :definition_hash
                )
                """
            ),
            {"id": new_id, **_params(payload)},
        )
        db.commit()
    logger.info("[SURVEY] created id=%s slug=%s", new_id, payload.get("slug"))
    return get_survey(new_id) or {}


def replace_survey(survey_id: str, payload: dict[str, Any]) -> dict[str, Any] | None:
    """Overwrite the whole survey record, definition included. Last write wins."""
    with SessionLocal() as db:
        result = db.execute(
            text(
                """
                UPDATE survey
                SET title=:title,
                    slug=:slug,
                    description=:description,
                    status=:status,
                    starts_at=:starts_at,
                    ends_at=:ends_at,
                    definition_json=CAST(:definition_json AS jsonb),
                    definition_hash=:definition_hash,
                    updated_at=NOW()
                WHERE id=CAST(:id AS uuid)
                """
            ),
            {"id": survey_id, **_params(payload)},
        )
        if not result.rowcount:
            return None
        db.commit()
    logger.info("[SURVEY] replaced id=%s slug=%s", survey_id, payload.get("slug"))
    return get_survey(survey_id)


def delete_survey(survey_id: str) -> bool:
    with SessionLocal() as db:
        result = db.execute(text("DELETE FROM survey WHERE id=CAST(:id AS uuid)"), {"id": survey_id})
        db.commit()
    deleted = bool(result.rowcount)
    if deleted:
        logger.info("[SURVEY] deleted id=%s", survey_id)
    return deleted
