"""System and user prompts for quiz generation.

Everything here is a pure function of its arguments; identical inputs give
byte-identical prompts. The JSON shape embedded in the user prompt is built
from the pydantic models in ``schemas.py``, so the prompt and the validator
cannot drift apart.
"""
from __future__ import annotations

import json
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union, get_args, get_origin

from pydantic import BaseModel

from ..schemas import Quiz, QuizType, SourceMode

SYSTEM_PROMPT = (
    "You are a quiz generator. You must output valid JSON only. No markdown. "
    "Do not invent facts. Use ONLY the attached files or provided SOURCE PACK. "
    "If information is insufficient, reduce the number of questions and state that in source_summary. "
    "Render math using LaTeX delimiters: inline \\( ... \\) and block \\[ ... \\]. "
    "Keep questions exam-ready and unambiguous. Provide short explanations."
)

MATCHING_MIN_PAIRS = 4
MATCHING_MAX_PAIRS = 10


def _models(annotation: Any) -> Tuple[type, ...]:
    origin = get_origin(annotation)
    if origin is Annotated:
        return _models(get_args(annotation)[0])
    if origin is Union:
        return tuple(m for arg in get_args(annotation) for m in _models(arg))
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return (annotation,)
    return ()


def _type_label(annotation: Any, depth: int) -> str:
    origin = get_origin(annotation)
    if origin is Annotated:
        return _type_label(get_args(annotation)[0], depth)
    if origin is list or origin is List:
        inner = get_args(annotation)[0]
        models = _models(inner)
        if models:
            return _object_list(models, depth)
        return f"{_type_label(inner, depth)}[]"
    if origin is Literal:
        return "|".join(json.dumps(v) for v in get_args(annotation))
    if annotation is str:
        return "string"
    if annotation is int or annotation is float:
        return "number"
    if annotation is bool:
        return "boolean"
    models = _models(annotation)
    if len(models) == 1:
        return _object(models[0], depth)
    raise TypeError(f"No prompt label for {annotation!r}")


def _object(model: type, depth: int) -> str:
    pad = "  " * depth
    inner = "  " * (depth + 1)
    lines = [
        f'{inner}"{name}": {_type_label(f.annotation, depth + 1)}'
        for name, f in model.model_fields.items()
    ]
    return "{\n" + ",\n".join(lines) + "\n" + pad + "}"


def _object_list(models: Tuple[type, ...], depth: int) -> str:
    pad = "  " * depth
    inner = "  " * (depth + 1)
    items = [inner + _object(m, depth + 1) for m in models]
    return "[\n" + ",\n".join(items) + "\n" + pad + "]"


def quiz_json_shape() -> str:
    """Literal JSON shape of a quiz, as shown to the model."""
    return _object(Quiz, 0)


def matching_pair_range(question_count: int) -> Tuple[int, int]:
    high = max(MATCHING_MIN_PAIRS, min(MATCHING_MAX_PAIRS, question_count // 2))
    return MATCHING_MIN_PAIRS, high


def build_system_prompt() -> str:
    return SYSTEM_PROMPT


def build_user_prompt(
    quiz_type: QuizType,
    question_count: int,
    difficulty: Optional[str] = None,
    source_mode: SourceMode = "files",
    source_note: Optional[str] = None,
) -> str:
    difficulty = (difficulty or "").strip()
    low, high = matching_pair_range(question_count)
    pair_hint = f"{low}" if low == high else f"{low}-{high}"

    lines = [
        "Generate a quiz with the following requirements.",
        "",
        f"Quiz type: {quiz_type}",
        f"Requested question count: {question_count}",
        f"Difficulty: {difficulty}" if difficulty else "Difficulty: not specified",
        f"Source mode: {source_mode}",
    ]
    if source_note:
        lines.append(f"Source note: {source_note}")
    lines += [
        "",
        "Strict JSON schema (no markdown, no extra keys):",
        quiz_json_shape(),
        "",
        "Rules:",
        "1) Use ONLY information found in the provided files or SOURCE PACK.",
        "2) If sources are insufficient, reduce question_count accordingly and explain in source_summary.",
        "3) No hallucinations. Omit any uncertain question.",
        "4) Output MUST be valid JSON only.",
        "5) All math must use LaTeX delimiters (\\( \\) and \\[ \\]).",
        "6) Keep questions exam-ready and unambiguous; avoid trick wording.",
        "7) Ensure MCQ distractors are plausible.",
        f"8) Matching pairs should be {MATCHING_MIN_PAIRS}-{MATCHING_MAX_PAIRS} pairs depending on "
        f"the requested question count (use {pair_hint} here); do not repeat.",
        "9) Keep explanations short and grounded.",
        "10) Never include copyrighted exam answer keys verbatim; paraphrase into practice questions.",
        "",
        "Return JSON only and ensure it parses.",
    ]
    return "\n".join(lines)


def build_messages(system_prompt: str, user_content: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_content},
    ]
