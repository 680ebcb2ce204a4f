"""Per-browser quiz state.

A ``QuizSession`` owns everything the UI mutates: the current quiz, the
answer map, the quiz timer, the loading indicator and the display toggles.
Handlers call its methods; nothing else holds quiz state.
"""
from __future__ import annotations

import threading
import uuid
from collections import OrderedDict
from typing import Mapping, Optional

from loguru import logger

from ..schemas import AnswerState, AnswerValue, Quiz
from ..settings import settings
from .render import collect_answers
from .scoring import ScoreResult, score_quiz
from .timer import LoadingProgress, QuizTimer


class QuizSession:
    def __init__(self, session_id: Optional[str] = None):
        self.id = session_id or uuid.uuid4().hex
        self.quiz: Optional[Quiz] = None
        self.answers: AnswerState = {}
        self.timer = QuizTimer()
        self.progress = LoadingProgress()
        self.result: Optional[ScoreResult] = None
        self.show_answers = False
        self.show_explanations = False
        self.source_mode: Optional[str] = None
        self.source_note: Optional[str] = None
        self.error: Optional[str] = None
        self.raw: Optional[str] = None

    @property
    def submitted(self) -> bool:
        return self.result is not None

    def load(self, quiz: Quiz, raw: Optional[str] = None,
             source_mode: Optional[str] = None, source_note: Optional[str] = None) -> None:
        """Install a freshly generated quiz; earlier answers are dropped."""
        self.quiz = quiz
        self.answers = {}
        self.result = None
        self.raw = raw
        self.error = None
        self.source_mode = source_mode
        self.source_note = source_note
        self.timer.reset()
        self.timer.start()

    def set_failure(self, error: str, raw: Optional[str] = None) -> None:
        self.error = error
        self.raw = raw

    def record_answer(self, question_id: str, value: AnswerValue) -> None:
        if self.quiz is None or all(q.id != question_id for q in self.quiz.questions):
            raise KeyError(question_id)
        self.answers[question_id] = value

    def record_form(self, form: Mapping[str, str]) -> None:
        if self.quiz is not None:
            self.answers = collect_answers(self.quiz, form)

    def set_toggles(self, show_answers: bool, show_explanations: bool) -> None:
        self.show_answers = show_answers
        self.show_explanations = show_explanations

    def reset_answers(self) -> None:
        self.answers = {}
        self.result = None

    def submit(self) -> ScoreResult:
        if self.quiz is None:
            raise RuntimeError("No quiz loaded")
        self.timer.stop()
        self.result = score_quiz(self.quiz, self.answers)
        return self.result

    def clear(self) -> None:
        self.progress.cancel()
        self.quiz = None
        self.answers = {}
        self.result = None
        self.error = None
        self.raw = None
        self.source_mode = None
        self.source_note = None
        self.timer.reset()


class SessionStore:
    """In-memory sessions, oldest dropped first once ``max_sessions`` is hit."""

    def __init__(self, max_sessions: Optional[int] = None):
        self.max_sessions = max_sessions or settings.MAX_SESSIONS
        self._sessions: "OrderedDict[str, QuizSession]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: Optional[str]) -> Optional[QuizSession]:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is not None:
                self._sessions.move_to_end(session_id)
            return session

    def create(self) -> QuizSession:
        session = QuizSession()
        with self._lock:
            self._sessions[session.id] = session
            while len(self._sessions) > self.max_sessions:
                old_id, old = self._sessions.popitem(last=False)
                old.clear()
                logger.debug(f"[ui] pruned session {old_id}")
        return session

    def get_or_create(self, session_id: Optional[str]) -> QuizSession:
        return self.get(session_id) or self.create()
