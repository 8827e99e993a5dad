"""Tests for the portal HTTP API."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from ges_annex.constants.network_constants import SESSION_COOKIE
from ges_annex.core.news_feed import NewsFeed
from ges_annex.server.api_server import SessionRegistry, create_api_app

from conftest import AUTHOR_EMAIL, PASSWORD, STUDENT_EMAIL

QUIZ_PAYLOAD = {
    "title": "Basic Science",
    "timer_seconds": 60,
    "questions": [
        {"question_text": "Water freezes at?", "options": ["0", "10", "50", "100"], "correct_answer": "0"},
        {"question_text": "Closest star?", "options": ["Moon", "Sun", "Mars", "Venus"], "correct_answer": "Sun"},
    ],
}


@pytest.fixture
def news_dir(tmp_path: Path) -> Path:
    (tmp_path / "2025-02-01-open-day.md").write_text(
        "---\ntitle: Open day\ndate: 2025-02-01 10:00:00\n---\nCome **visit** us.\n",
        encoding="utf-8",
    )
    return tmp_path


@pytest.fixture
def registry(store, directory, countdowns):
    registry = SessionRegistry(store, directory, countdowns)
    yield registry
    registry.close_all()


@pytest.fixture
def app(registry, news_dir):
    return create_api_app(registry, NewsFeed(news_dir))


@pytest.fixture
def author(app):
    with TestClient(app) as client:
        response = client.post("/auth/signup", json={"email": AUTHOR_EMAIL, "password": PASSWORD})
        assert response.status_code == 201
        yield client


@pytest.fixture
def student(app):
    with TestClient(app) as client:
        response = client.post("/auth/signup", json={"email": STUDENT_EMAIL, "password": PASSWORD})
        assert response.status_code == 201
        yield client


@pytest.fixture
def quiz_id(author) -> str:
    response = author.post("/quizzes", json=QUIZ_PAYLOAD)
    assert response.status_code == 201
    return response.json()["id"]


def test_landing_page_served(app):
    with TestClient(app) as client:
        response = client.get("/")
    assert response.status_code == 200
    assert "GES Annex" in response.text


def test_identity_without_cookie_opens_no_session(app, registry):
    with TestClient(app) as client:
        response = client.get("/identity")

    assert SESSION_COOKIE not in response.cookies
    body = response.json()
    assert body["signed_in"] is False
    assert body["can_author"] is False
    assert len(registry) == 0


def test_sign_up_sets_session_cookie(app, registry):
    with TestClient(app) as client:
        response = client.post("/auth/signup", json={"email": STUDENT_EMAIL, "password": PASSWORD})
        identity = client.get("/identity").json()

    assert SESSION_COOKIE in response.cookies
    assert identity["email"] == STUDENT_EMAIL
    assert len(registry) == 1


def test_sign_in_with_wrong_password_is_401(app, author):
    with TestClient(app) as client:
        response = client.post("/auth/signin", json={"email": AUTHOR_EMAIL, "password": "nope-nope"})
    assert response.status_code == 401


def test_duplicate_sign_up_is_422(app, author):
    with TestClient(app) as client:
        response = client.post("/auth/signup", json={"email": AUTHOR_EMAIL, "password": PASSWORD})
    assert response.status_code == 422


def test_author_creates_quiz_listed_for_everyone(app, quiz_id):
    with TestClient(app) as client:
        quizzes = client.get("/quizzes").json()

    assert [(quiz["id"], quiz["question_count"]) for quiz in quizzes] == [(quiz_id, 2)]


def test_invalid_quiz_reports_field(author):
    payload = {**QUIZ_PAYLOAD, "questions": [{**QUIZ_PAYLOAD["questions"][0], "options": ["0", "10", "", "100"]}]}

    response = author.post("/quizzes", json=payload)

    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "questions[0].options[2]"
    assert author.get("/quizzes").json() == []


def test_student_cannot_create_quiz(student):
    assert student.post("/quizzes", json=QUIZ_PAYLOAD).status_code == 403


def test_anonymous_cannot_create_quiz(app):
    with TestClient(app) as client:
        assert client.post("/quizzes", json=QUIZ_PAYLOAD).status_code == 401


def test_anonymous_cannot_start_attempt(app, quiz_id):
    with TestClient(app) as client:
        response = client.post("/attempts", json={"quiz_id": quiz_id})
    assert response.status_code == 401


def test_full_attempt_flow(student, author, quiz_id):
    started = student.post("/attempts", json={"quiz_id": quiz_id})
    assert started.status_code == 201
    attempt = started.json()
    assert attempt["status"] == "in_progress"
    assert attempt["options"] == ["0", "10", "50", "100"]
    assert "correct_answer" not in attempt

    not_selected = student.post("/attempts/current/advance").json()
    assert not_selected["advanced"] is False

    assert student.post("/attempts/current/answer", json={"option": "0"}).json()["selected_answer"] == "0"
    moved = student.post("/attempts/current/advance").json()
    assert moved["advanced"] is True
    assert moved["attempt"]["question_index"] == 1
    assert moved["attempt"]["selected_answer"] is None

    student.post("/attempts/current/answer", json={"option": "Mars"})
    finished = student.post("/attempts/current/advance").json()["attempt"]
    assert finished["status"] == "completed"
    assert finished["score"] == 1
    assert finished["result"]["total_questions"] == 2

    results = author.get(f"/quizzes/{quiz_id}/results")
    assert results.status_code == 200
    assert [(row["student_email"], row["score"]) for row in results.json()] == [(STUDENT_EMAIL, 1)]

    assert student.delete("/attempts/current").status_code == 204
    assert student.get("/attempts/current").json() == {"status": "not_started"}


def test_starting_twice_conflicts(student, quiz_id):
    student.post("/attempts", json={"quiz_id": quiz_id})

    assert student.post("/attempts", json={"quiz_id": quiz_id}).status_code == 409


def test_unknown_quiz_is_404(student):
    assert student.post("/attempts", json={"quiz_id": "missing"}).status_code == 404


def test_answer_without_attempt_conflicts(student):
    assert student.post("/attempts/current/answer", json={"option": "0"}).status_code == 409
    assert student.post("/attempts/current/advance").status_code == 409


def test_results_are_gated(app, student, author, quiz_id):
    assert student.get(f"/quizzes/{quiz_id}/results").status_code == 403
    with TestClient(app) as client:
        assert client.get(f"/quizzes/{quiz_id}/results").status_code == 401
    missing = author.get("/quizzes/missing/results")
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Unknown quiz missing"


def test_sign_out_returns_anonymous_session(author):
    body = author.post("/auth/signout").json()

    assert body["is_anonymous"] is True
    assert author.post("/quizzes", json=QUIZ_PAYLOAD).status_code == 401


def test_news_endpoints(app):
    with TestClient(app) as client:
        listing = client.get("/news").json()
        article = client.get("/news/open-day")
        missing = client.get("/news/nothing-here")

    assert [item["slug"] for item in listing] == ["open-day"]
    assert "<strong>visit</strong>" in article.json()["body_html"]
    assert missing.status_code == 404


def test_materials_endpoint(app):
    with TestClient(app) as client:
        jhs = client.get("/materials", params={"level": "JHS"})
        everything = client.get("/materials")
        unknown = client.get("/materials", params={"level": "University"})

    assert jhs.status_code == 200
    assert {item["level"] for item in jhs.json()} == {"JHS"}
    assert len(everything.json()) > len(jhs.json())
    assert unknown.status_code == 422


def test_signing_in_mid_attempt_closes_it(app, student, author, quiz_id):
    with TestClient(app) as other:
        other.post("/auth/signup", json={"email": "yaa@school.edu.gh", "password": PASSWORD})
    student.post("/attempts", json={"quiz_id": quiz_id})
    student.post("/attempts/current/answer", json={"option": "0"})

    signed_in = student.post("/auth/signin", json={"email": "yaa@school.edu.gh", "password": PASSWORD})

    assert signed_in.json()["email"] == "yaa@school.edu.gh"
    assert student.get("/attempts/current").json() == {"status": "not_started"}
    assert student.post("/attempts/current/advance").status_code == 409
    assert author.get(f"/quizzes/{quiz_id}/results").json() == []


def test_read_only_routes_share_one_catalog(app, registry, author):
    with TestClient(app) as client:
        for _ in range(20):
            assert client.get("/quizzes").status_code == 200
        client.get("/news")
        client.get("/materials")
        client.get("/attempts/current")

        quiz_id = author.post("/quizzes", json=QUIZ_PAYLOAD).json()["id"]
        listed = [quiz["id"] for quiz in client.get("/quizzes").json()]

    assert listed == [quiz_id]
    assert len(registry) == 1


def test_registry_evicts_least_recently_used_session(store, directory, countdowns, stored_quiz):
    registry = SessionRegistry(
        store, directory, countdowns, allow_anonymous_attempts=True, max_sessions=2
    )
    quiz = stored_quiz(["A"])
    first_token, first = registry.create()
    first.portal.start_quiz(quiz.id)
    second_token, _ = registry.create()
    registry.get(first_token)

    registry.create()

    assert len(registry) == 2
    assert registry.get(second_token) is None
    assert registry.get(first_token) is first
    registry.create()
    registry.create()
    assert registry.get(first_token) is None
    assert countdowns.created[0].cancelled
    registry.close_all()


def test_registry_expires_idle_sessions(store, directory, countdowns):
    now = [0.0]
    registry = SessionRegistry(store, directory, countdowns, idle_seconds=60, clock=lambda: now[0])
    token, _ = registry.create()

    now[0] = 59.0
    assert registry.get(token) is not None
    now[0] = 120.0
    assert registry.get(token) is None
    assert len(registry) == 0
    registry.close_all()


def test_expired_cookie_gets_a_fresh_session(store, directory, countdowns, news_dir):
    now = [0.0]
    registry = SessionRegistry(store, directory, countdowns, idle_seconds=60, clock=lambda: now[0])
    app = create_api_app(registry, NewsFeed(news_dir))
    with TestClient(app) as client:
        client.post("/auth/signup", json={"email": STUDENT_EMAIL, "password": PASSWORD})
        now[0] = 500.0

        assert client.get("/identity").json()["signed_in"] is False
        assert client.post("/auth/signin", json={"email": STUDENT_EMAIL, "password": PASSWORD}).status_code == 200
        assert client.get("/identity").json()["email"] == STUDENT_EMAIL
    registry.close_all()
