import asyncio
import random

import pytest

from quizforge.services.session import QuizSession, SessionStore
from quizforge.services.timer import LoadingProgress, QuizTimer


class FakeClock:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def test_timer_accumulates_and_formats():
    clock = FakeClock()
    timer = QuizTimer(clock=clock)
    timer.start()
    clock.now += 65
    assert timer.display() == "1:05"
    timer.stop()
    clock.now += 30
    assert timer.elapsed() == 65
    timer.start()
    clock.now += 10
    assert timer.display() == "1:15"
    timer.reset()
    assert timer.elapsed() == 0
    assert not timer.running


def test_progress_tick_is_capped():
    p = LoadingProgress(rng=random.Random(7))
    for _ in range(200):
        p.tick()
    assert p.percent == 95.0


def test_progress_restart_cancels_previous_ticker_and_finish_is_final():
    async def scenario():
        p = LoadingProgress(interval=0.01, rng=random.Random(3))
        p.start()
        first = p._task
        p.start()
        await asyncio.sleep(0.05)
        assert first.cancelled()
        assert p.running
        assert p.visible
        assert 0 < p.percent <= 95
        p.finish()
        await asyncio.sleep(0.03)
        return p

    p = asyncio.run(scenario())
    assert not p.running
    assert p.snapshot() == {"percent": 100, "visible": False, "label": "Loading 100%"}


def test_load_replaces_answers_and_starts_timer(quiz):
    session = QuizSession()
    session.load(quiz, raw="{}")
    session.record_answer("q1", 2)
    assert session.answers == {"q1": 2}
    session.load(quiz, raw="{}", source_mode="text", source_note="note")
    assert session.answers == {}
    assert session.timer.running
    assert session.source_mode == "text"


def test_record_answer_rejects_unknown_question(quiz):
    session = QuizSession()
    with pytest.raises(KeyError):
        session.record_answer("q1", 0)
    session.load(quiz)
    with pytest.raises(KeyError):
        session.record_answer("nope", 0)


def test_submit_scores_and_stops_timer(quiz):
    session = QuizSession()
    session.load(quiz)
    session.record_form({"q1": "2", "q3": "dns"})
    result = session.submit()
    assert result.total_score == 2
    assert session.submitted
    assert not session.timer.running
    assert session.submit() == result


def test_reset_and_clear(quiz):
    session = QuizSession()
    session.load(quiz, raw="raw")
    session.record_form({"q1": "2"})
    session.submit()
    session.reset_answers()
    assert session.answers == {}
    assert not session.submitted
    assert session.quiz is quiz
    session.clear()
    assert session.quiz is None
    assert session.raw is None
    with pytest.raises(RuntimeError):
        session.submit()


def test_failure_keeps_raw():
    session = QuizSession()
    session.set_failure("Invalid JSON output: boom", raw="{not json")
    assert session.error.startswith("Invalid JSON output")
    assert session.raw == "{not json"


def test_store_prunes_oldest():
    store = SessionStore(max_sessions=2)
    a, b = store.create(), store.create()
    store.get(a.id)  # a becomes most recent
    c = store.create()
    assert len(store) == 2
    assert store.get(b.id) is None
    assert store.get(a.id) is a
    assert store.get(c.id) is c
    assert store.get_or_create("missing") is not None
    assert store.get(None) is None
