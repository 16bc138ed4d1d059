import json

from survey_builder import survey_repo
from survey_builder.services.survey_fingerprint import definition_fingerprint


class FakeResult:
    def __init__(self, rows=None, scalar=None, rowcount=0):
        self.rows = rows or []
        self._scalar = scalar
        self.rowcount = rowcount

    def mappings(self):
        return self

    def first(self):
        return self.rows[0] if self.rows else None

    def all(self):
        return list(self.rows)

    def scalar(self):
        return self._scalar


class FakeSession:
    def __init__(self, results):
        self.results = results
        self.calls = []
        self.committed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, stmt, params):
        self.calls.append((str(stmt), params))
        return self.results.pop(0) if self.results else FakeResult()

    def commit(self):
        self.committed = True


def _install(monkeypatch, *results):
    session = FakeSession(list(results))
    monkeypatch.setattr(survey_repo, "SessionLocal", lambda: session)
    return session


def test_get_survey_normalizes_id_and_json_text(monkeypatch):
    row = {"id": "5f0c", "slug": "trip", "definition_json": json.dumps({"questions": []})}
    session = _install(monkeypatch, FakeResult(rows=[row]))

    out = survey_repo.get_survey("5f0c")
    assert out["definition_json"] == {"questions": []}
    sql, params = session.calls[0]
    assert "FROM survey WHERE id=CAST(:id AS uuid)" in sql
    assert params == {"id": "5f0c"}


def test_create_survey_stores_definition_and_hash(monkeypatch):
    definition = {"questions": [{"id": "q1", "type": "short_text", "order": 0}]}
    session = _install(monkeypatch, FakeResult(rowcount=1), FakeResult(rows=[{"id": "abc", "slug": "trip"}]))

    created = survey_repo.create_survey({"title": "Trip", "slug": "trip", "definition": definition})
    assert created == {"id": "abc", "slug": "trip"}
    sql, params = session.calls[0]
    assert "INSERT INTO survey" in sql
    assert json.loads(params["definition_json"]) == definition
    assert params["definition_hash"] == definition_fingerprint(definition)
    assert params["status"] == "draft"
    assert session.committed


def test_replace_survey_returns_none_when_nothing_matched(monkeypatch):
    session = _install(monkeypatch, FakeResult(rowcount=0))

    assert survey_repo.replace_survey("missing", {"slug": "x", "definition": {"questions": []}}) is None
    assert "UPDATE survey" in session.calls[0][0]
    assert not session.committed


def test_slug_taken_excludes_own_record(monkeypatch):
    session = _install(monkeypatch, FakeResult(scalar=0))

    assert survey_repo.slug_taken("trip", exclude_id="abc") is False
    assert session.calls[0][1] == {"slug": "trip", "exclude_id": "abc"}


def test_list_surveys_filters_by_status(monkeypatch):
    session = _install(monkeypatch, FakeResult(rows=[{"id": "a"}, {"id": "b"}]))

    assert [r["id"] for r in survey_repo.list_surveys("active")] == ["a", "b"]
    assert session.calls[0][1] == {"status": "active"}


def test_delete_survey_reports_rowcount(monkeypatch):
    _install(monkeypatch, FakeResult(rowcount=1))
    assert survey_repo.delete_survey("abc") is True
