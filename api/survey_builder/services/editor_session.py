from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..schemas import SurveyDraft
from .serialization import draft_from_record, survey_to_payload
from .survey_validation import validate_survey_definition

logger = logging.getLogger(__name__)


class SaveInProgress(RuntimeError):
    pass


class SurveyNotFound(LookupError):
    pass


def _save_blocker(payload: dict[str, Any]) -> str | None:
    errors = validate_survey_definition(payload["definition"])
    if errors:
        first = errors[0]
        return f"Invalid survey definition: {first['path']}: {first['message']}"
    if not payload["slug"]:
        return "Survey slug is required"
    return None


@dataclass
class Notification:
    level: str
    message: str


class EditorSession:
    """One author's open survey.

    ``store`` is the persistence collaborator: anything exposing
    ``get_survey(id)``, ``create_survey(payload)`` and
    ``replace_survey(id, payload)`` (the ``survey_repo`` module does).
    The draft only leaves the session through :meth:`save`.
    """

    def __init__(self, store: Any, draft: SurveyDraft | None = None) -> None:
        self.store = store
        self.draft = draft or SurveyDraft()
        self.saving = False
        self.notifications: list[Notification] = []

    @classmethod
    def open(cls, store: Any, survey_id: str) -> "EditorSession":
        row = store.get_survey(survey_id)
        if not row:
            raise SurveyNotFound(f"survey {survey_id} not found")
        return cls(store, draft_from_record(row))

    @property
    def is_new(self) -> bool:
        return self.draft.survey_id is None

    def apply(self, operation: Callable[..., SurveyDraft], *args: Any, **kwargs: Any) -> SurveyDraft:
        self.draft = operation(self.draft, *args, **kwargs)
        return self.draft

    def update_envelope(self, **changes: Any) -> SurveyDraft:
        """Edit title, slug, status and the other survey-level fields."""
        if "questions" in changes or "survey_id" in changes:
            raise ValueError("questions and survey_id change only through draft operations and save")
        envelope = SurveyDraft.model_validate({**self.draft.model_dump(exclude={"questions"}), **changes})
        self.draft = envelope.model_copy(update={"questions": self.draft.questions})
        return self.draft

    def save(self) -> dict[str, Any] | None:
        """Persist the whole draft, replacing whatever was stored before.

        An invalid definition, a missing slug or a failed write leaves the
        draft as it was and records an error notification instead of raising.
        """
        if self.saving:
            raise SaveInProgress("a save is already in flight for this survey")

        payload = survey_to_payload(self.draft)
        problem = _save_blocker(payload)
        if problem:
            logger.info("[EDITOR] save blocked survey_id=%s: %s", self.draft.survey_id, problem)
            self.notifications.append(Notification("error", problem))
            return None

        creating = self.is_new
        self.saving = True
        try:
            if creating:
                row = self.store.create_survey(payload)
            else:
                row = self.store.replace_survey(self.draft.survey_id, payload)
            if not row:
                raise SurveyNotFound(f"survey {self.draft.survey_id} not found")
        except SaveInProgress:
            raise
        except Exception as exc:
            logger.warning("[EDITOR] save failed survey_id=%s: %s", self.draft.survey_id, exc)
            self.notifications.append(Notification("error", str(exc) or "Failed to save survey"))
            return None
        finally:
            self.saving = False

        self.draft = self.draft.model_copy(update={"survey_id": str(row["id"]), "slug": row.get("slug") or payload["slug"]})
        message = "Survey created successfully" if creating else "Survey saved successfully"
        self.notifications.append(Notification("success", message))
        return row
