from survey_builder.services.survey_fingerprint import definition_fingerprint
from survey_builder.services.survey_validation import definition_warnings, validate_survey_definition


def _codes(errors):
    return {e["code"] for e in errors}


def _valid_definition():
    return {
        "questions": [
            {"id": "q1", "type": "single_choice", "title": "Visited?", "required": True, "order": 0, "options": ["Yes", "No"]},
            {
                "id": "q2",
                "type": "short_text",
                "title": "",
                "required": False,
                "order": 1,
                "conditionalLogic": {"enabled": True, "questionId": "q1", "operator": "equals", "value": "Yes"},
            },
        ]
    }


def test_valid_definition_has_no_errors_but_warns_on_missing_title():
    definition = _valid_definition()
    assert validate_survey_definition(definition) == []
    assert definition_warnings(definition) == [{"code": "missing_title", "path": "questions[1].title", "message": "question has no title"}]


def test_shape_errors():
    assert _codes(validate_survey_definition("x")) == {"invalid_schema"}
    assert validate_survey_definition({})[0]["path"] == "questions"


def test_structural_errors_are_reported_with_paths():
    definition = {
        "questions": [
            {"id": "q1", "type": "matrix", "order": 0},
            {"id": "q2", "type": "dropdown", "order": 1, "options": []},
            {"id": "q2", "type": "rating", "order": 2, "minRating": 5, "maxRating": 3},
            {"type": "short_text", "order": 3},
        ]
    }
    errors = validate_survey_definition(definition)
    assert _codes(errors) == {"invalid_question_type", "empty_options", "duplicate_question_id", "invalid_rating_range", "missing_question_id"}
    empty = next(e for e in errors if e["code"] == "empty_options")
    assert empty["path"] == "questions[1].options"


def test_order_must_be_dense():
    definition = _valid_definition()
    definition["questions"][1]["order"] = 3
    assert "order_not_dense" in _codes(validate_survey_definition(definition))


def test_conditions_must_point_backward_at_existing_questions():
    definition = _valid_definition()
    definition["questions"][0]["conditionalLogic"] = {"enabled": True, "questionId": "q2", "operator": "equals", "value": "x"}
    definition["questions"][1]["conditionalLogic"]["questionId"] = "ghost"
    errors = validate_survey_definition(definition)
    assert _codes(errors) == {"forward_condition_reference", "unknown_condition_question"}


def test_disabled_conditions_are_not_checked():
    definition = _valid_definition()
    definition["questions"][1]["conditionalLogic"] = {"enabled": False, "questionId": "ghost", "operator": "equals", "value": ""}
    assert validate_survey_definition(definition) == []


def test_fingerprint_ignores_key_order_but_not_question_order():
    a = {"questions": [{"id": "q1", "type": "short_text"}, {"id": "q2", "type": "short_text"}]}
    b = {"questions": [{"type": "short_text", "id": "q1"}, {"type": "short_text", "id": "q2"}]}
    c = {"questions": list(reversed(a["questions"]))}
    assert definition_fingerprint(a) == definition_fingerprint(b)
    assert definition_fingerprint(a) != definition_fingerprint(c)
