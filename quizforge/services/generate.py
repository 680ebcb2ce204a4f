"""Quiz generation: pick a source path, call the model once, validate.

Two paths, tried in order with a single attempt each:

* ``files``: every upload is registered with the provider and referenced by id.
  If any registration fails the whole path is dropped, so a request never
  mixes file ids with extracted text.
* ``text``: uploads are converted to a SOURCE PACK and inlined as text.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger
from openai import OpenAIError

from ..schemas import GenerateQuizFailure, GenerateQuizSuccess, Quiz, QuizType, SourceMode
from .extract import SourcePack, build_source_pack
from .llm import create_response, extract_output_text, upload_file
from .parse import parse_quiz
from .prompts import build_messages, build_system_prompt, build_user_prompt

NOTE_FALLBACK = "Some files could not be attached; using SOURCE PACK text instead."
NOTE_NO_TEXT = "No extractable text found; quiz may be empty."


@dataclass(frozen=True)
class SourcePlan:
    mode: SourceMode
    note: Optional[str]
    content_parts: Tuple[Dict[str, str], ...]
    pack: Optional[SourcePack] = field(default=None, compare=False)

    @classmethod
    def from_file_ids(cls, file_ids: Sequence[str]) -> "SourcePlan":
        parts = tuple({"type": "input_file", "file_id": fid} for fid in file_ids)
        return cls(mode="files", note=None, content_parts=parts)

    @classmethod
    def from_source_pack(cls, pack: SourcePack) -> "SourcePlan":
        note = NOTE_NO_TEXT if pack.is_empty else NOTE_FALLBACK
        parts = ({"type": "input_text", "text": f"SOURCE PACK\n{pack.text}"},)
        return cls(mode="text", note=note, content_parts=parts, pack=pack)


@dataclass(frozen=True)
class GenerationResult:
    ok: bool
    raw: str
    source_mode: SourceMode
    source_note: Optional[str] = None
    quiz: Optional[Quiz] = None
    error: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        if self.ok:
            return GenerateQuizSuccess(quiz=self.quiz, raw=self.raw).model_dump()
        return GenerateQuizFailure(error=self.error or "Unknown error", raw=self.raw).model_dump()


async def register_files(files: Sequence) -> List[str]:
    """Upload all files concurrently; the first failure propagates."""
    return list(await asyncio.gather(*(upload_file(str(f.path), f.filename) for f in files)))


async def plan_sources(files: Sequence) -> SourcePlan:
    try:
        file_ids = await register_files(files)
    except (OpenAIError, OSError) as e:
        logger.warning(f"[generate] file attach failed, falling back to text extraction: {e}")
        pack = await asyncio.to_thread(build_source_pack, files)
        return SourcePlan.from_source_pack(pack)
    return SourcePlan.from_file_ids(file_ids)


def build_request(
    plan: SourcePlan,
    quiz_type: QuizType,
    question_count: int,
    difficulty: Optional[str],
) -> List[Dict[str, Any]]:
    user_prompt = build_user_prompt(
        quiz_type=quiz_type,
        question_count=question_count,
        difficulty=difficulty,
        source_mode=plan.mode,
        source_note=plan.note,
    )
    user_content = [{"type": "input_text", "text": user_prompt}, *plan.content_parts]
    return build_messages(build_system_prompt(), user_content)


async def generate_quiz(
    files: Sequence,
    quiz_type: QuizType,
    question_count: int,
    difficulty: Optional[str] = None,
) -> GenerationResult:
    plan = await plan_sources(files)
    messages = build_request(plan, quiz_type, question_count, difficulty)

    logger.info(f"[generate] type={quiz_type} count={question_count} files={len(files)} mode={plan.mode}")
    response = await create_response(messages)
    raw = extract_output_text(response)

    parsed = parse_quiz(raw)
    if not parsed.ok:
        logger.warning(f"[generate] model output rejected: {parsed.error}")
    return GenerationResult(
        ok=parsed.ok,
        raw=raw,
        source_mode=plan.mode,
        source_note=plan.note,
        quiz=parsed.quiz,
        error=parsed.error,
    )
