import json, re
from dataclasses import dataclass
from typing import Optional
from pydantic import ValidationError
from ..schemas import Quiz

_FENCE = re.compile(r"^```(?:json|JSON)?\s*\n?(.*?)\n?```$", re.S)


@dataclass(frozen=True)
class QuizParseResult:
    ok: bool
    raw: str
    quiz: Optional[Quiz] = None
    error: Optional[str] = None


def _clean(s: str) -> str:
    s = (s or "").strip()
    m = _FENCE.match(s)
    return m.group(1).strip() if m else s


def _describe(e: ValidationError) -> str:
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or str(e)


def parse_quiz(raw: str) -> QuizParseResult:
    """Parse model output into a Quiz. Never raises; ``raw`` is kept as given."""
    try:
        data = json.loads(_clean(raw))
    except json.JSONDecodeError as e:
        return QuizParseResult(ok=False, raw=raw, error=f"Invalid JSON output: {e}")
    try:
        quiz = Quiz.model_validate(data)
    except ValidationError as e:
        return QuizParseResult(ok=False, raw=raw, error=f"Invalid JSON output: {_describe(e)}")
    return QuizParseResult(ok=True, raw=raw, quiz=quiz)
