"""Scoring of collected answers against a quiz's answer key.

Everything here is pure: neither the quiz nor the answers are mutated, so
results can be recomputed freely (e.g. whenever a display toggle changes).
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import List, Optional

from ..schemas import (
    AnswerState,
    AnswerValue,
    FillBlankQuestion,
    IdentificationQuestion,
    MatchingQuestion,
    MCQQuestion,
    Quiz,
)


@dataclass(frozen=True)
class QuestionResult:
    id: str
    correct: bool
    score: int
    total: int
    correct_answer: str
    explanation: str


@dataclass(frozen=True)
class ScoreResult:
    results: List[QuestionResult] = field(default_factory=list)
    total_score: int = 0
    total_possible: int = 0

    @property
    def percent(self) -> int:
        if not self.total_possible:
            return 0
        # half up, so 12.5 -> 13
        return int(math.floor(100 * self.total_score / self.total_possible + 0.5))


def normalize_answer(value: str) -> str:
    return re.sub(r"\s+", " ", value.strip()).lower()


def _score_mcq(q: MCQQuestion, answer: Optional[AnswerValue]) -> QuestionResult:
    ok = isinstance(answer, int) and not isinstance(answer, bool) and answer == q.answer_index
    return QuestionResult(
        id=q.id,
        correct=ok,
        score=1 if ok else 0,
        total=1,
        correct_answer=q.choices[q.answer_index],
        explanation=q.explanation,
    )


def _score_text(q, answer: Optional[AnswerValue]) -> QuestionResult:
    given = normalize_answer(answer) if isinstance(answer, str) else None
    ok = given is not None and any(normalize_answer(a) == given for a in q.answers)
    return QuestionResult(
        id=q.id,
        correct=ok,
        score=1 if ok else 0,
        total=1,
        correct_answer=" / ".join(q.answers),
        explanation=q.explanation,
    )


def _score_matching(q: MatchingQuestion, answer: Optional[AnswerValue]) -> QuestionResult:
    selected = answer if isinstance(answer, dict) else {}
    score = 0
    for idx, pair in enumerate(q.pairs):
        choice = selected.get(str(idx))
        if isinstance(choice, str) and normalize_answer(choice) == normalize_answer(pair.right):
            score += 1
    return QuestionResult(
        id=q.id,
        correct=score == len(q.pairs),
        score=score,
        total=len(q.pairs),
        correct_answer="; ".join(f"{p.left} → {p.right}" for p in q.pairs),
        explanation=q.explanation,
    )


def score_question(question, answer: Optional[AnswerValue]) -> QuestionResult:
    if isinstance(question, MCQQuestion):
        return _score_mcq(question, answer)
    if isinstance(question, (FillBlankQuestion, IdentificationQuestion)):
        return _score_text(question, answer)
    if isinstance(question, MatchingQuestion):
        return _score_matching(question, answer)
    raise TypeError(f"Unsupported question type: {type(question).__name__}")


def score_quiz(quiz: Quiz, answers: AnswerState) -> ScoreResult:
    results = [score_question(q, answers.get(q.id)) for q in quiz.questions]
    return ScoreResult(
        results=results,
        total_score=sum(r.score for r in results),
        total_possible=sum(r.total for r in results),
    )
