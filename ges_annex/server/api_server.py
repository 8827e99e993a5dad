"""FastAPI server that exposes the portal to browsers."""

from __future__ import annotations

from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass
import logging
import secrets
from threading import Lock, Thread
import time
from typing import Callable, Iterator

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field
import uvicorn

from ges_annex.constants.about import APP_NAME, APP_VERSION
from ges_annex.constants.network_constants import (
    DEFAULT_HOST,
    DEFAULT_MAX_SESSIONS,
    DEFAULT_PORT,
    DEFAULT_SESSION_IDLE_SECONDS,
    SESSION_COOKIE,
    SESSION_COOKIE_MAX_AGE,
)
from ges_annex.constants.quiz_constants import DEFAULT_AUTHOR_ROLE
from ges_annex.core.errors import PermissionDenied, Unauthenticated, ValidationError
from ges_annex.core.markdown_math_renderer import renderer
from ges_annex.core.materials import MaterialsCatalog
from ges_annex.core.models import (
    AttemptStatus,
    NewsArticle,
    QuestionDraft,
    QuizDefinition,
    QuizDraft,
    QuizResult,
    Subject,
)
from ges_annex.core.news_feed import NewsFeed
from ges_annex.core.quiz_portal import QuizPortal
from ges_annex.core.services.content_store import ContentStore
from ges_annex.core.services.countdown import CountdownFactory, ThreadCountdown
from ges_annex.core.services.identity_provider import AccountDirectory, IdentityProvider
from ges_annex.core.services.quiz_catalog import QuizCatalog

logger = logging.getLogger(__name__)

_LANDING_PAGE_HTML = """<!doctype html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <title>GES Annex Quizzes</title>
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #f6f7fb; color: #1f2937; }
      body { margin: 0; padding: 1.5rem; display: flex; flex-direction: column; gap: 1rem; max-width: 48rem; margin-inline: auto; }
      .card { background: #fff; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.25rem 1rem rgba(15, 23, 42, 0.08); }
      .hidden { display: none; }
      .primary-button { border: none; border-radius: 0.75rem; padding: 0.75rem 1.25rem; font-size: 1rem; background: #006b3f; color: #fff; cursor: pointer; }
      .primary-button:disabled { opacity: 0.6; cursor: not-allowed; }
      .option-button { display: block; width: 100%; text-align: left; border: 2px solid #d1d5db; border-radius: 0.75rem; padding: 0.85rem; margin-bottom: 0.5rem; font-size: 1rem; background: #fff; cursor: pointer; }
      .option-button.selected { border-color: #006b3f; background: #e7f5ee; }
      input { padding: 0.6rem; border-radius: 0.5rem; border: 1px solid #d1d5db; margin-right: 0.5rem; }
      #timer { font-weight: 600; color: #b45309; }
      #status { min-height: 1.25rem; color: #b91c1c; }
    </style>
    <script>
      window.MathJax = { tex: { inlineMath: [['$','$']], displayMath: [['$$','$$']] }, svg: { fontCache: 'global' } };
    </script>
    <script defer src=\"https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-mml-chtml.js\"></script>
  </head>
  <body>
    <section class=\"card\" id=\"auth-card\">
      <h1>GES Annex Quizzes</h1>
      <p id=\"identity\"></p>
      <div id=\"auth-form\">
        <input id=\"email\" type=\"email\" placeholder=\"Email\" />
        <input id=\"password\" type=\"password\" placeholder=\"Password\" />
        <button class=\"primary-button\" onclick=\"authenticate('signin')\">Sign In</button>
        <button class=\"primary-button\" onclick=\"authenticate('signup')\">Sign Up</button>
      </div>
      <button id=\"signout\" class=\"primary-button hidden\" onclick=\"signOut()\">Sign Out</button>
    </section>
    <section class=\"card\" id=\"list-card\">
      <h2>Available quizzes</h2>
      <div id=\"quiz-list\">Loading…</div>
    </section>
    <section class=\"card hidden\" id=\"quiz-card\">
      <h2 id=\"quiz-title\"></h2>
      <p><span id=\"progress\"></span> · <span id=\"timer\"></span></p>
      <div id=\"question\"></div>
      <div id=\"options\"></div>
      <button id=\"next\" class=\"primary-button\" onclick=\"advance()\">Next</button>
    </section>
    <section class=\"card hidden\" id=\"result-card\">
      <h2>Quiz complete</h2>
      <p id=\"result-text\"></p>
      <button class=\"primary-button\" onclick=\"closeAttempt()\">Back to quizzes</button>
    </section>
    <p id=\"status\"></p>
    <script>
      const statusEl = document.getElementById('status');
      let pollHandle = null;
      let renderedQuestion = null;

      function show(id, visible) {
        document.getElementById(id).classList.toggle('hidden', !visible);
      }

      async function call(method, url, body) {
        const response = await fetch(url, {
          method,
          headers: { 'Content-Type': 'application/json' },
          body: body ? JSON.stringify(body) : undefined
        });
        const payload = await response.json().catch(() => ({}));
        if (!response.ok) {
          statusEl.textContent = payload.detail || 'Request failed.';
          return null;
        }
        statusEl.textContent = '';
        return payload;
      }

      async function loadIdentity() {
        const payload = await call('GET', '/identity');
        if (!payload) return;
        const signedIn = payload.signed_in && !payload.is_anonymous;
        document.getElementById('identity').textContent = signedIn ? `Signed in as ${payload.email}` : 'Not signed in.';
        show('auth-form', !signedIn);
        show('signout', signedIn);
      }

      async function authenticate(mode) {
        const email = document.getElementById('email').value;
        const password = document.getElementById('password').value;
        if (await call('POST', `/auth/${mode}`, { email, password })) {
          await loadIdentity();
        }
      }

      async function signOut() {
        await call('POST', '/auth/signout');
        await loadIdentity();
      }

      async function loadQuizzes() {
        const quizzes = await call('GET', '/quizzes');
        const list = document.getElementById('quiz-list');
        if (!quizzes) return;
        if (!quizzes.length) {
          list.textContent = 'No quizzes yet.';
          return;
        }
        list.innerHTML = '';
        quizzes.forEach(quiz => {
          const button = document.createElement('button');
          button.className = 'option-button';
          button.textContent = `${quiz.title} (${quiz.question_count} questions, ${quiz.timer_seconds}s)`;
          button.addEventListener('click', () => startQuiz(quiz.id));
          list.appendChild(button);
        });
      }

      async function startQuiz(quizId) {
        if (await call('POST', '/attempts', { quiz_id: quizId })) {
          renderedQuestion = null;
          await refreshAttempt();
          pollHandle = setInterval(refreshAttempt, 1000);
        }
      }

      function renderAttempt(attempt) {
        if (attempt.status === 'not_started') {
          show('quiz-card', false);
          show('result-card', false);
          show('list-card', true);
          return;
        }
        show('list-card', false);
        if (attempt.status === 'completed') {
          clearInterval(pollHandle);
          show('quiz-card', false);
          show('result-card', true);
          document.getElementById('result-text').textContent =
            `You scored ${attempt.score} / ${attempt.question_count} in ${attempt.result.time_taken}s.`;
          return;
        }
        show('quiz-card', true);
        document.getElementById('quiz-title').textContent = attempt.quiz_title;
        document.getElementById('progress').textContent = `Question ${attempt.question_index + 1} of ${attempt.question_count}`;
        document.getElementById('timer').textContent = `${attempt.time_remaining_seconds}s left`;
        if (renderedQuestion !== attempt.question_index) {
          renderedQuestion = attempt.question_index;
          document.getElementById('question').innerHTML = attempt.question_html;
        }
        const options = document.getElementById('options');
        options.innerHTML = '';
        attempt.options.forEach(option => {
          const button = document.createElement('button');
          button.className = 'option-button' + (option === attempt.selected_answer ? ' selected' : '');
          button.textContent = option;
          button.addEventListener('click', () => selectAnswer(option));
          options.appendChild(button);
        });
        document.getElementById('next').textContent = attempt.is_last_question ? 'Submit' : 'Next';
        if (window.MathJax && window.MathJax.typesetPromise) {
          window.MathJax.typesetPromise([document.getElementById('quiz-card')]);
        }
      }

      async function refreshAttempt() {
        const attempt = await call('GET', '/attempts/current');
        if (attempt) renderAttempt(attempt);
      }

      async function selectAnswer(option) {
        const attempt = await call('POST', '/attempts/current/answer', { option });
        if (attempt) renderAttempt(attempt);
      }

      async function advance() {
        const payload = await call('POST', '/attempts/current/advance');
        if (!payload) return;
        if (!payload.advanced) {
          statusEl.textContent = 'Please select an answer.';
        }
        renderAttempt(payload.attempt);
      }

      async function closeAttempt() {
        await fetch('/attempts/current', { method: 'DELETE' });
        renderedQuestion = null;
        await refreshAttempt();
        await loadQuizzes();
      }

      loadIdentity();
      loadQuizzes();
      refreshAttempt();
    </script>
  </body>
</html>
"""


class CredentialsPayload(BaseModel):
    """Payload schema for sign-up and sign-in."""

    email: str
    password: str


class QuestionPayload(BaseModel):
    question_text: str
    options: list[str]
    correct_answer: str


class QuizPayload(BaseModel):
    """Payload schema for publishing a quiz."""

    title: str
    timer_seconds: int
    questions: list[QuestionPayload] = Field(min_length=1)


class StartAttemptPayload(BaseModel):
    quiz_id: str


class AnswerPayload(BaseModel):
    option: str


@dataclass(slots=True)
class ClientSession:
    """Identity and portal belonging to one browser cookie."""

    identity: IdentityProvider
    portal: QuizPortal
    last_seen: float = 0.0


class SessionRegistry:
    """Maps session cookies to per-client portals.

    Sessions idle for longer than ``idle_seconds`` are closed, and once
    ``max_sessions`` are open the least recently used one makes room for a
    new one. All portals read quizzes through one shared catalog.
    """

    def __init__(
        self,
        content_store: ContentStore,
        directory: AccountDirectory,
        countdown_factory: CountdownFactory = ThreadCountdown,
        *,
        allow_anonymous_attempts: bool = False,
        author_role: str = DEFAULT_AUTHOR_ROLE,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        idle_seconds: float = DEFAULT_SESSION_IDLE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1.")
        self._store = content_store
        self._directory = directory
        self._countdown_factory = countdown_factory
        self._allow_anonymous_attempts = allow_anonymous_attempts
        self._author_role = author_role
        self._max_sessions = max_sessions
        self._idle_seconds = idle_seconds
        self._clock = clock
        self._lock = Lock()
        self._sessions: OrderedDict[str, ClientSession] = OrderedDict()
        self.catalog = QuizCatalog(content_store)

    def get(self, token: str | None) -> ClientSession | None:
        if not token:
            return None
        now = self._clock()
        expired: list[ClientSession] = []
        with self._lock:
            session = self._sessions.get(token)
            if session is not None and now - session.last_seen > self._idle_seconds:
                expired.append(self._sessions.pop(token))
                session = None
            if session is not None:
                session.last_seen = now
                self._sessions.move_to_end(token)
        self._close_sessions(expired)
        return session

    def create(self) -> tuple[str, ClientSession]:
        identity = IdentityProvider(self._directory, anonymous_fallback=True)
        portal = QuizPortal(
            self._store,
            identity,
            self._countdown_factory,
            allow_anonymous_attempts=self._allow_anonymous_attempts,
            author_role=self._author_role,
            catalog=self.catalog,
        )
        token = secrets.token_urlsafe(32)
        now = self._clock()
        session = ClientSession(identity=identity, portal=portal, last_seen=now)
        with self._lock:
            evicted = self._evict_locked(now)
            self._sessions[token] = session
            active = len(self._sessions)
        self._close_sessions(evicted)
        logger.info("Opened client session (%d active)", active)
        return token, session

    def close_all(self) -> None:
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        self._close_sessions(sessions)
        self.catalog.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict_locked(self, now: float) -> list[ClientSession]:
        evicted = [
            token
            for token, session in self._sessions.items()
            if now - session.last_seen > self._idle_seconds
        ]
        sessions = [self._sessions.pop(token) for token in evicted]
        while len(self._sessions) >= self._max_sessions:
            _, session = self._sessions.popitem(last=False)
            sessions.append(session)
        return sessions

    @staticmethod
    def _close_sessions(sessions: list[ClientSession]) -> None:
        for session in sessions:
            session.portal.close()
        if sessions:
            logger.info("Closed %d client session(s)", len(sessions))


@contextmanager
def _translate_errors() -> Iterator[None]:
    try:
        yield
    except Unauthenticated as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except PermissionDenied as exc:
        raise HTTPException(status_code=403, detail=str(exc)) from exc
    except (ValidationError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except KeyError as exc:
        detail = exc.args[0] if exc.args else "Not found."
        raise HTTPException(status_code=404, detail=str(detail)) from exc
    except RuntimeError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc


def _subject_payload(subject: Subject | None) -> dict[str, object]:
    if subject is None:
        return {"signed_in": False, "subject_id": None, "email": None, "is_anonymous": False, "roles": []}
    return {
        "signed_in": True,
        "subject_id": subject.id,
        "email": subject.email,
        "is_anonymous": subject.is_anonymous,
        "roles": sorted(subject.roles),
    }


def _quiz_summary(quiz: QuizDefinition) -> dict[str, object]:
    return {
        "id": quiz.id,
        "title": quiz.title,
        "timer_seconds": quiz.timer_seconds,
        "question_count": quiz.question_count,
        "created_at": quiz.created_at.isoformat(),
    }


def _result_payload(result: QuizResult) -> dict[str, object]:
    return {
        "id": result.id,
        "quiz_id": result.quiz_id,
        "quiz_title": result.quiz_title,
        "student_id": result.student_id,
        "student_email": result.student_email,
        "score": result.score,
        "total_questions": result.total_questions,
        "time_taken": result.time_taken,
        "completed_at": result.completed_at.isoformat(),
    }


def _attempt_payload(portal: QuizPortal) -> dict[str, object]:
    state = portal.get_attempt()
    if state is None:
        return {"status": AttemptStatus.NOT_STARTED.value}
    payload: dict[str, object] = {
        "status": portal.get_attempt_status().value,
        "quiz_id": state.quiz.id,
        "quiz_title": state.quiz.title,
        "question_index": state.current_question_index,
        "question_count": state.quiz.question_count,
        "score": state.score,
        "time_remaining_seconds": state.time_remaining_seconds,
        "completed": state.completed,
        "result": _result_payload(state.result) if state.result else None,
    }
    if not state.completed:
        question = state.current_question
        # The correct answer never leaves the server while the attempt runs.
        payload.update(
            question_html=renderer.render_fragment(question.question_text),
            options=list(question.options),
            selected_answer=state.selected_answer,
            is_last_question=state.is_last_question,
        )
    return payload


def _article_payload(article: NewsArticle, include_body: bool = False) -> dict[str, object]:
    payload: dict[str, object] = {
        "slug": article.slug,
        "title": article.title,
        "published_at": article.published_at.isoformat(),
        "image": article.image,
        "image_alt": article.image_alt,
    }
    if include_body:
        payload["body_html"] = NewsFeed.render_body(article)
    return payload


def _draft_from_payload(payload: QuizPayload) -> QuizDraft:
    return QuizDraft(
        title=payload.title,
        timer_seconds=payload.timer_seconds,
        questions=[
            QuestionDraft(
                question_text=question.question_text,
                options=list(question.options),
                correct_answer=question.correct_answer,
            )
            for question in payload.questions
        ],
    )


def create_api_app(
    registry: SessionRegistry,
    news_feed: NewsFeed | None = None,
    materials: MaterialsCatalog | None = None,
) -> FastAPI:
    """Create a FastAPI application serving the portal through ``registry``."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    materials = materials or MaterialsCatalog()

    def existing_session(request: Request) -> ClientSession | None:
        return registry.get(request.cookies.get(SESSION_COOKIE))

    def client_session(request: Request, response: Response) -> ClientSession:
        session = existing_session(request)
        if session is not None:
            return session
        token, session = registry.create()
        response.set_cookie(
            key=SESSION_COOKIE,
            value=token,
            max_age=SESSION_COOKIE_MAX_AGE,
            samesite="lax",
            httponly=True,
        )
        return session

    def signed_in_session(
        session: ClientSession | None = Depends(existing_session),
    ) -> ClientSession:
        if session is None:
            raise HTTPException(status_code=401, detail="Please sign in first.")
        return session

    @app.get("/", response_class=HTMLResponse)
    def serve_landing_page() -> str:
        return _LANDING_PAGE_HTML

    @app.get("/identity")
    def get_identity(session: ClientSession | None = Depends(existing_session)) -> dict[str, object]:
        if session is None:
            payload = _subject_payload(None)
            payload["can_author"] = False
            return payload
        payload = _subject_payload(session.portal.current_subject())
        payload["can_author"] = session.portal.can_author()
        return payload

    # --- Authentication ---

    @app.post("/auth/signup", status_code=201)
    def sign_up(
        payload: CredentialsPayload,
        session: ClientSession = Depends(client_session),
    ) -> dict[str, object]:
        with _translate_errors():
            subject = session.portal.sign_up(payload.email, payload.password)
        return _subject_payload(subject)

    @app.post("/auth/signin")
    def sign_in(
        payload: CredentialsPayload,
        session: ClientSession = Depends(client_session),
    ) -> dict[str, object]:
        with _translate_errors():
            subject = session.portal.sign_in(payload.email, payload.password)
        return _subject_payload(subject)

    @app.post("/auth/signout")
    def sign_out(session: ClientSession | None = Depends(existing_session)) -> dict[str, object]:
        if session is None:
            return _subject_payload(None)
        session.portal.sign_out()
        return _subject_payload(session.portal.current_subject())

    # --- Quizzes ---

    @app.get("/quizzes")
    def list_quizzes() -> list[dict[str, object]]:
        return [_quiz_summary(quiz) for quiz in registry.catalog.get_quizzes()]

    @app.post("/quizzes", status_code=201)
    def create_quiz(
        payload: QuizPayload,
        session: ClientSession = Depends(signed_in_session),
    ) -> dict[str, object]:
        authoring = session.portal.authoring
        with _translate_errors():
            authoring.require_author()
            authoring.load_draft(_draft_from_payload(payload))
            try:
                quiz_id = authoring.save()
            except ValidationError as exc:
                authoring.reset()
                detail = {"message": str(exc), "field": exc.field}
                raise HTTPException(status_code=422, detail=detail) from exc
        return {"id": quiz_id}

    @app.get("/quizzes/{quiz_id}/results")
    def quiz_results(
        quiz_id: str,
        session: ClientSession = Depends(signed_in_session),
    ) -> list[dict[str, object]]:
        portal = session.portal
        with _translate_errors():
            owned = {quiz.id for quiz in portal.results.authored_quizzes()}
            if quiz_id not in owned:
                raise KeyError(f"Unknown quiz {quiz_id}")
            return [_result_payload(result) for result in portal.results_for(quiz_id)]

    # --- Attempts ---

    @app.post("/attempts", status_code=201)
    def start_attempt(
        payload: StartAttemptPayload,
        session: ClientSession = Depends(client_session),
    ) -> dict[str, object]:
        with _translate_errors():
            session.portal.start_quiz(payload.quiz_id)
        return _attempt_payload(session.portal)

    @app.get("/attempts/current")
    def current_attempt(session: ClientSession | None = Depends(existing_session)) -> dict[str, object]:
        if session is None:
            return {"status": AttemptStatus.NOT_STARTED.value}
        return _attempt_payload(session.portal)

    def attempt_in_progress(
        session: ClientSession | None = Depends(existing_session),
    ) -> QuizPortal:
        if session is None or session.portal.get_attempt_status() is not AttemptStatus.IN_PROGRESS:
            raise HTTPException(status_code=409, detail="No quiz attempt in progress.")
        return session.portal

    @app.post("/attempts/current/answer")
    def select_answer(
        payload: AnswerPayload,
        portal: QuizPortal = Depends(attempt_in_progress),
    ) -> dict[str, object]:
        portal.select_answer(payload.option)
        return _attempt_payload(portal)

    @app.post("/attempts/current/advance")
    def advance(portal: QuizPortal = Depends(attempt_in_progress)) -> dict[str, object]:
        advanced = portal.advance()
        return {"advanced": advanced, "attempt": _attempt_payload(portal)}

    @app.delete("/attempts/current", status_code=204)
    def close_attempt(session: ClientSession | None = Depends(existing_session)) -> Response:
        if session is not None:
            session.portal.close_attempt()
        return Response(status_code=204)

    # --- News and materials ---

    @app.get("/news")
    def list_news() -> list[dict[str, object]]:
        if news_feed is None:
            return []
        return [_article_payload(article) for article in news_feed.list_articles()]

    @app.get("/news/{slug}")
    def get_news_article(slug: str) -> dict[str, object]:
        article = news_feed.get_article(slug) if news_feed is not None else None
        if article is None:
            raise HTTPException(status_code=404, detail="Article not found.")
        return _article_payload(article, include_body=True)

    @app.get("/materials")
    def list_materials(level: str | None = Query(default=None)) -> list[dict[str, str]]:
        with _translate_errors():
            entries = materials.list_materials(level)
        return [
            {
                "level": entry.level,
                "subject": entry.subject,
                "title": entry.title,
                "description": entry.description,
            }
            for entry in entries
        ]

    return app


def start_api_server(
    registry: SessionRegistry,
    news_feed: NewsFeed | None = None,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
    log_level: str = "info",
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(registry, news_feed)
    config = uvicorn.Config(app=app, host=host, port=port, log_level=log_level.lower())
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="PortalApiServer", daemon=True)
    thread.start()
    logger.info("API server listening on http://%s:%d", host, port)
    return thread
