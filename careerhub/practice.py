"""Timed interview-practice session.

States::

    NOT_STARTED -> IN_PROGRESS -> COMPLETING -> COMPLETED
                        |
                        +-> EXITED   (session discarded, nothing persisted)

The per-question timer is advisory: hitting zero never advances or locks
the question. Answers are buffered in memory per question id and flushed to
the server only when the last question is submitted.
"""
from __future__ import annotations

import threading
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from careerhub.errors import ApiError, InvalidTransition
from careerhub.interview import InterviewApi
from careerhub.log import get_logger
from careerhub.models import PracticeSession, Question, QuestionCategory, SessionFeedback, SessionType

log = get_logger(__name__)


class PracticeState(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETING = "completing"
    COMPLETED = "completed"
    EXITED = "exited"


def format_time(seconds: int) -> str:
    seconds = max(0, seconds)
    return f"{seconds // 60}:{seconds % 60:02d}"


class Countdown:
    """Calls *on_tick* every *interval* seconds on a daemon thread.

    Nothing stops it implicitly: the owner must call :meth:`cancel`.
    """

    def __init__(self, on_tick: Callable[[], None], interval: float = 1.0) -> None:
        self.on_tick = on_tick
        self.interval = interval
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="practice-countdown", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.on_tick()

    def cancel(self) -> None:
        self._stop.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.interval * 2)
        self._thread = None


class PracticeRunner:
    def __init__(
        self,
        interview: InterviewApi,
        *,
        auto_tick: bool = False,
        countdown_factory: Callable[[Callable[[], None]], Countdown] = Countdown,
    ) -> None:
        self.interview = interview
        self.state = PracticeState.NOT_STARTED
        self.session: PracticeSession | None = None
        self.feedback: SessionFeedback | None = None
        self.error: str | None = None
        self.question_index = 0
        self.time_remaining = 0
        self.draft = ""
        self._answers: dict[str, str] = {}
        self._submitted: dict[str, str] = {}
        self._lock = threading.RLock()
        self._countdown = countdown_factory(self.tick) if auto_tick else None

    # ── read-only views ──────────────────────────────────────────────

    @property
    def questions(self) -> list[Question]:
        return self.session.questions if self.session else []

    @property
    def current_question(self) -> Question | None:
        if self.state is not PracticeState.IN_PROGRESS or not self.questions:
            return None
        return self.questions[self.question_index]

    @property
    def is_last_question(self) -> bool:
        return bool(self.questions) and self.question_index == len(self.questions) - 1

    @property
    def progress(self) -> float:
        if not self.questions:
            return 0.0
        return (self.question_index + 1) / len(self.questions)

    @property
    def answers(self) -> dict[str, str]:
        return dict(self._answers)

    # ── transitions ──────────────────────────────────────────────────

    def start(
        self,
        session_type: SessionType,
        categories: list[QuestionCategory] | None = None,
        question_count: int | None = None,
        company_id: str | None = None,
    ) -> bool:
        with self._lock:
            self._require(PracticeState.NOT_STARTED, "start")
        try:
            session = self.interview.start_session(session_type, categories, question_count, company_id)
        except ApiError as exc:
            log.error("Could not start %s session: %s", session_type.value, exc)
            self.error = str(exc)
            return False
        if not session.questions:
            log.error("Session %s came back without questions", session.id)
            self.error = "Failed to start session"
            return False
        with self._lock:
            self.session = session
            self.error = None
            self.state = PracticeState.IN_PROGRESS
            self._enter(0)
        if self._countdown is not None:
            self._countdown.start()
        log.info("Practice session %s started (%d questions)", session.id, len(session.questions))
        return True

    def tick(self) -> int:
        with self._lock:
            if self.state is PracticeState.IN_PROGRESS and self.time_remaining > 0:
                self.time_remaining -= 1
            return self.time_remaining

    def set_answer(self, text: str) -> None:
        with self._lock:
            self._require(PracticeState.IN_PROGRESS, "edit an answer")
            self.draft = text

    def next(self, text: str | None = None) -> PracticeState:
        with self._lock:
            self._require(PracticeState.IN_PROGRESS, "advance")
            self._buffer(text)
            if not self.is_last_question:
                self._enter(self.question_index + 1)
                return self.state
            self.state = PracticeState.COMPLETING
        return self._complete()

    def previous(self, text: str | None = None) -> PracticeState:
        with self._lock:
            self._require(PracticeState.IN_PROGRESS, "go back")
            if self.question_index == 0:
                raise InvalidTransition("already at the first question")
            self._buffer(text)
            self._enter(self.question_index - 1)
            return self.state

    def exit(self) -> None:
        """Abandon the session; buffered answers are dropped unsent."""
        with self._lock:
            if self.state is PracticeState.COMPLETED:
                return
            self._stop_timer()
            self.state = PracticeState.EXITED
            self._answers.clear()
            self.draft = ""
        log.info("Practice session %s exited", self.session.id if self.session else "-")

    # ── internals ────────────────────────────────────────────────────

    def _require(self, state: PracticeState, what: str) -> None:
        if self.state is not state:
            raise InvalidTransition(f"cannot {what} while {self.state.value}")

    def _buffer(self, text: str | None) -> None:
        if text is not None:
            self.draft = text
        self._answers[self.questions[self.question_index].id] = self.draft

    def _enter(self, index: int) -> None:
        self.question_index = index
        question = self.questions[index]
        self.time_remaining = question.time_limit
        self.draft = self._answers.get(question.id, "")

    def _stop_timer(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()

    def _complete(self) -> PracticeState:
        session = self.session
        if session is None:
            raise InvalidTransition("no session to complete")
        try:
            for question in session.questions:
                text = self._answers.get(question.id, "")
                if not text.strip() or self._submitted.get(question.id) == text:
                    continue
                self.interview.submit_answer(session.id, question.id, text)
                self._submitted[question.id] = text
            feedback = self.interview.complete_session(session.id)
        except ApiError as exc:
            with self._lock:
                if self.state is not PracticeState.COMPLETING:
                    return self.state
                log.error("Completing session %s failed: %s", session.id, exc)
                self.error = str(exc)
                self.state = PracticeState.IN_PROGRESS
                return self.state

        with self._lock:
            if self.state is not PracticeState.COMPLETING:
                log.debug("Ignoring feedback for session %s after exit", session.id)
                return self.state
            self._stop_timer()
            self.feedback = feedback
            session.feedback = feedback
            session.score = feedback.overall_score
            session.completed_at = datetime.now(timezone.utc).isoformat()
            self.error = None
            self.state = PracticeState.COMPLETED
        log.info("Session %s completed: %s", session.id, feedback.percent)
        return self.state
