import json

import pytest
from pydantic import ValidationError

from survey_builder.schemas import ChoiceQuestion, RatingQuestion, SurveyDraft, TextQuestion
from survey_builder.services.ordering import append_question
from survey_builder.services.question_edits import set_conditional_logic, update_question
from survey_builder.services.serialization import (
    definition_from_json,
    definition_to_json,
    draft_from_record,
    dumps,
    loads,
    normalize_slug,
    slugify,
    survey_to_payload,
)


def _draft() -> SurveyDraft:
    draft = append_question(SurveyDraft(title="Dubai Visitor Feedback"), "short_text", question_id="q1")
    draft = append_question(draft, "multiple_choice", question_id="q2")
    draft = append_question(draft, "rating", question_id="q3")
    draft = update_question(draft, "q1", title="Name", placeholder="Your name", max_length=80)
    draft = update_question(draft, "q3", title="Overall", max_rating="oops")
    return set_conditional_logic(draft, "q2", True, question_id_ref="q1", operator="contains", value="a")


def test_round_trip_preserves_questions():
    draft = _draft()
    assert loads(dumps(draft.questions)) == draft.questions


def test_persisted_shape_uses_camel_case_and_omits_unset_fields():
    doc = definition_to_json(_draft().questions)
    first, second, third = doc["questions"]

    assert first == {"id": "q1", "title": "Name", "required": False, "order": 0, "type": "short_text", "placeholder": "Your name", "maxLength": 80}
    assert second["options"] == ["Option 1", "Option 2"]
    assert second["conditionalLogic"] == {"enabled": True, "questionId": "q1", "operator": "contains", "value": "a"}
    assert third["minRating"] == 1
    assert third["maxRating"] is None
    json.dumps(doc)


def test_questions_are_tagged_by_type():
    questions = _draft().questions
    assert [type(q) for q in questions] == [TextQuestion, ChoiceQuestion, RatingQuestion]


def test_legacy_type_tags_are_loaded():
    questions = definition_from_json(
        {"questions": [{"id": "a", "type": "radio", "order": 0, "options": ["Yes", "No"]}, {"id": "b", "type": "textarea", "order": 1}]}
    )
    assert [q.type for q in questions] == ["single_choice", "long_text"]


def test_loading_trusts_stored_order():
    questions = definition_from_json(
        {"questions": [{"id": "b", "type": "short_text", "order": 4}, {"id": "a", "type": "short_text", "order": 4}]}
    )
    assert [(q.id, q.order) for q in questions] == [("b", 4), ("a", 4)]


def test_choice_question_without_options_does_not_load():
    with pytest.raises(ValidationError):
        definition_from_json({"questions": [{"id": "a", "type": "dropdown", "order": 0, "options": []}]})


def test_envelope_payload_derives_slug_and_record_round_trips():
    draft = _draft()
    payload = survey_to_payload(draft)
    assert payload["slug"] == "dubai-visitor-feedback"
    assert payload["status"] == "draft"

    row = {"id": "5b0c", "title": draft.title, "slug": payload["slug"], "status": "draft", "definition_json": json.dumps(payload["definition"])}
    loaded = draft_from_record(row)
    assert loaded.survey_id == "5b0c"
    assert loaded.questions == draft.questions


def test_slugify():
    assert slugify("  Best of Abu Dhabi: 2026! ") == "best-of-abu-dhabi-2026"
    assert slugify("") == ""


def test_explicit_slug_collapses_like_derived_slug():
    assert normalize_slug("a  b") == "a-b"
    assert normalize_slug(" Desert--Safari / 2026 ") == "desert-safari-2026"
    assert normalize_slug("Best of Abu Dhabi: 2026!") == slugify("Best of Abu Dhabi: 2026!")
    assert normalize_slug(None) == ""
