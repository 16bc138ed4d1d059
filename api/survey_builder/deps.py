import uuid
from typing import Any

from fastapi import Header, HTTPException

from . import config


def require_admin(x_admin_token: str | None = Header(default=None, alias="X-Admin-Token")) -> dict[str, Any]:
    admin_token = str(config.ADMIN_TOKEN or "")
    if admin_token and x_admin_token and x_admin_token == admin_token:
        return {"email": "admin-token", "role": "admin"}
    # Local/dev token when no explicit ADMIN_TOKEN is configured.
    if not admin_token and x_admin_token == "dev-admin-token":
        return {"email": "dev-admin-token", "role": "admin"}
    raise HTTPException(status_code=401, detail="Admin authentication required")


def parse_survey_id(raw_survey_id: str) -> str:
    try:
        return str(uuid.UUID(raw_survey_id.strip()))
    except ValueError:
        raise HTTPException(status_code=400, detail="survey id must be a valid UUID")
