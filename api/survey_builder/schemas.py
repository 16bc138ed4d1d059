from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .services.question_types import DEFAULT_MAX_RATING, DEFAULT_MIN_RATING

ConditionOperator = Literal["equals", "not_equals", "contains", "not_contains"]
SurveyStatus = Literal["draft", "active", "closed", "archived"]

CONDITION_OPERATORS = ("equals", "not_equals", "contains", "not_contains")
SURVEY_STATUSES = ("draft", "active", "closed", "archived")


def coerce_positive_int(value: Any) -> int | None:
    """Positive integer or ``None``; anything non-numeric is treated as unset."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float):
        return int(value) if value.is_integer() and value > 0 else None
    if isinstance(value, str):
        raw = value.strip()
        if raw.isascii() and raw.isdigit():
            number = int(raw)
            return number if number > 0 else None
    return None


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class ConditionalLogic(_Frozen):
    enabled: bool = False
    question_id: str = Field(default="", alias="questionId")
    operator: ConditionOperator = "equals"
    value: str = ""

    @field_validator("question_id", "value", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class _QuestionBase(_Frozen):
    id: str
    title: str = ""
    description: str | None = None
    required: bool = False
    order: int = 0
    conditional_logic: ConditionalLogic | None = Field(default=None, alias="conditionalLogic")


class TextQuestion(_QuestionBase):
    type: Literal["short_text", "long_text"]
    placeholder: str | None = None
    max_length: int | None = Field(default=None, alias="maxLength")

    @field_validator("max_length", mode="before")
    @classmethod
    def _coerce_max_length(cls, value: Any) -> int | None:
        return coerce_positive_int(value)


class ChoiceQuestion(_QuestionBase):
    type: Literal["single_choice", "multiple_choice", "dropdown"]
    options: tuple[str, ...] = Field(min_length=1)

    @field_validator("options", mode="before")
    @classmethod
    def _labels_as_text(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple)):
            return tuple("" if v is None else str(v) for v in value)
        return value


class RatingQuestion(_QuestionBase):
    type: Literal["rating"]
    min_rating: int | None = Field(default=DEFAULT_MIN_RATING, alias="minRating")
    max_rating: int | None = Field(default=DEFAULT_MAX_RATING, alias="maxRating")

    @field_validator("min_rating", "max_rating", mode="before")
    @classmethod
    def _coerce_bounds(cls, value: Any) -> int | None:
        return coerce_positive_int(value)

    @property
    def effective_range(self) -> tuple[int, int]:
        return (self.min_rating or DEFAULT_MIN_RATING, self.max_rating or DEFAULT_MAX_RATING)


SurveyQuestion = Annotated[Union[TextQuestion, ChoiceQuestion, RatingQuestion], Field(discriminator="type")]


class SurveyDraft(_Frozen):
    """In-memory editor state for one survey; every operation returns a new draft."""

    survey_id: str | None = None
    title: str = ""
    description: str = ""
    slug: str = ""
    status: SurveyStatus = "draft"
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    questions: tuple[SurveyQuestion, ...] = ()


class SurveyPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str | None = None
    slug: str | None = None
    status: SurveyStatus = "draft"
    starts_at: datetime | None = Field(default=None, alias="startsAt")
    ends_at: datetime | None = Field(default=None, alias="endsAt")
    definition: Any = Field(default_factory=lambda: {"questions": []})


class VisibilityRequest(BaseModel):
    answers: dict[str, Any] = Field(default_factory=dict)
