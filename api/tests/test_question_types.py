import pytest

from survey_builder.services.question_types import (
    UnknownQuestionType,
    canonical_question_type,
    default_payload,
    list_question_types,
    question_type_label,
)


def test_choice_types_seed_two_options():
    for tag in ("single_choice", "multiple_choice", "dropdown"):
        assert default_payload(tag) == {"options": ["Option 1", "Option 2"]}


def test_rating_seeds_one_to_five_and_text_seeds_nothing():
    assert default_payload("rating") == {"min_rating": 1, "max_rating": 5}
    assert default_payload("short_text") == {}
    assert default_payload("long_text") == {}


def test_labels_and_listing_cover_closed_set():
    assert question_type_label("rating") == "Rating (1-5 Stars)"
    assert [t["type"] for t in list_question_types()] == [
        "short_text",
        "long_text",
        "single_choice",
        "multiple_choice",
        "rating",
        "dropdown",
    ]


def test_unknown_type_is_rejected():
    with pytest.raises(UnknownQuestionType):
        default_payload("matrix")
    with pytest.raises(UnknownQuestionType):
        question_type_label("text")


def test_legacy_tags_map_to_canonical_names():
    assert canonical_question_type("radio") == "single_choice"
    assert canonical_question_type("checkbox") == "multiple_choice"
    assert canonical_question_type("textarea") == "long_text"
    assert canonical_question_type("dropdown") == "dropdown"
