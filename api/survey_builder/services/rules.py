from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from ..schemas import SurveyQuestion

logger = logging.getLogger(__name__)


def _answer_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _answer_texts(answer: Any) -> list[str]:
    if isinstance(answer, (list, tuple, set)):
        return [_answer_text(v) for v in answer] or [""]
    return [_answer_text(answer)]


def evaluate_condition(operator: str, answer: Any, value: str) -> bool:
    """Compare a respondent answer against a rule literal.

    Answers compare as strings. A multi-select answer matches when any selected
    option matches; the ``not_*`` operators are exact negations.
    """
    texts = _answer_texts(answer)
    if operator == "equals":
        return any(t == value for t in texts)
    if operator == "not_equals":
        return not any(t == value for t in texts)
    if operator == "contains":
        return any(value in t for t in texts)
    if operator == "not_contains":
        return not any(value in t for t in texts)
    return False


def references_earlier_question(question: SurveyQuestion, positions: dict[str, int]) -> bool:
    rule = question.conditional_logic
    if rule is None:
        return True
    target = positions.get(rule.question_id)
    own = positions.get(question.id)
    return target is not None and own is not None and target < own


def stale_condition_ids(questions: Sequence[SurveyQuestion]) -> list[str]:
    """Ids of questions whose enabled rule does not point at a strictly earlier question."""
    positions = {q.id: idx for idx, q in enumerate(questions)}
    return [
        q.id
        for q in questions
        if q.conditional_logic is not None
        and q.conditional_logic.enabled
        and not references_earlier_question(q, positions)
    ]


def visible_question_ids(questions: Iterable[SurveyQuestion], answers: dict[str, Any]) -> list[str]:
    ordered = sorted(questions, key=lambda q: q.order)
    positions = {q.id: idx for idx, q in enumerate(ordered)}
    shown_answers: dict[str, Any] = {}
    visible: list[str] = []

    for question in ordered:
        rule = question.conditional_logic
        if rule is not None and rule.enabled:
            if not references_earlier_question(question, positions):
                # Forward, self or dangling references never hold.
                logger.debug("[VISIBILITY] %s has a non-backward condition on %s", question.id, rule.question_id)
                continue
            if not evaluate_condition(rule.operator, shown_answers.get(rule.question_id), rule.value):
                continue
        visible.append(question.id)
        if question.id in answers:
            shown_answers[question.id] = answers[question.id]

    return visible


def required_question_ids(questions: Iterable[SurveyQuestion], answers: dict[str, Any]) -> list[str]:
    questions = list(questions)
    visible = set(visible_question_ids(questions, answers))
    return [q.id for q in sorted(questions, key=lambda q: q.order) if q.required and q.id in visible]


def prune_hidden_answers(questions: Iterable[SurveyQuestion], answers: dict[str, Any]) -> dict[str, Any]:
    visible = visible_question_ids(questions, answers)
    return {qid: answers[qid] for qid in visible if qid in answers}
