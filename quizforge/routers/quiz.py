from typing import List, Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from loguru import logger
from openai import OpenAIError

from ..limiter import limiter
from ..services.generate import GenerationResult, generate_quiz
from ..services.uploads import stored_uploads
from ..services.validation import (
    InputError,
    normalize_difficulty,
    validate_file_count,
    validate_file_sizes,
    validate_question_count,
    validate_quiz_type,
)
from ..settings import settings

router = APIRouter()


def _fail(status: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"ok": False, "error": error})


async def run_generation(
    files: List[UploadFile],
    quiz_type: Optional[str],
    question_count: Optional[str],
    difficulty: Optional[str],
) -> GenerationResult:
    """Validate form input, store uploads for the request and generate.

    Raises InputError for bad parameters; provider errors propagate.
    Stored uploads are removed before this returns or raises.
    """
    qtype = validate_quiz_type(quiz_type)
    count = validate_question_count(question_count)
    level = normalize_difficulty(difficulty)
    validate_file_count(len(files))

    async with stored_uploads(files) as stored:
        validate_file_sizes(stored)
        return await generate_quiz(stored, qtype, count, level)


@router.post("/generate-quiz")
@limiter.limit(settings.RATE_LIMIT)
async def generate(
    request: Request,
    quizType: Optional[str] = Form(None),
    questionCount: Optional[str] = Form(None),
    difficulty: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
):
    try:
        result = await run_generation(files or [], quizType, questionCount, difficulty)
        return result.to_response()
    except InputError as e:
        return _fail(400, str(e))
    except OpenAIError as e:
        logger.error(f"[generate] provider error: {e}")
        return _fail(502, f"Model provider error: {getattr(e, 'message', str(e))}")
    except Exception as e:
        logger.exception("[generate] unexpected failure")
        return _fail(500, str(e))
