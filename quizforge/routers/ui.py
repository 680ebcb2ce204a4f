"""Server-rendered browser UI.

A cookie ties each browser to one ``QuizSession``; every handler below is a
thin event callback that mutates that session and re-renders from it.
"""
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from loguru import logger
from openai import OpenAIError

from ..limiter import limiter
from ..schemas import QUIZ_TYPES
from ..services.render import highlight_css, render_quiz
from ..services.session import QuizSession, SessionStore
from ..services.validation import InputError
from ..settings import settings
from .quiz import run_generation

router = APIRouter()

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[1] / "templates"))
sessions = SessionStore()

COOKIE = "quizforge_session"
COUNT_PRESETS = (5, 10, 20, 30, 50, 100)
QUIZ_TYPE_LABELS = {
    "mcq": "Multiple Choice",
    "fill_blank": "Fill in the Blank",
    "identification": "Identification",
    "matching": "Matching",
    "mixed": "Mixed",
}


def _session(request: Request) -> QuizSession:
    return sessions.get_or_create(request.cookies.get(COOKIE))


def _bind(response, session: QuizSession):
    response.set_cookie(COOKIE, session.id, httponly=True, samesite="lax")
    return response


def _redirect(url: str, session: QuizSession) -> RedirectResponse:
    return _bind(RedirectResponse(url, status_code=303), session)


def _page(request: Request, name: str, session: QuizSession, **context) -> HTMLResponse:
    context.update(
        session=session,
        highlight_css=highlight_css(),
        settings=settings,
    )
    return _bind(templates.TemplateResponse(request, name, context), session)


@router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    session = _session(request)
    return _page(
        request,
        "index.html",
        session,
        quiz_types=[(t, QUIZ_TYPE_LABELS[t]) for t in QUIZ_TYPES],
        count_presets=COUNT_PRESETS,
    )


@router.post("/quiz")
@limiter.limit(settings.RATE_LIMIT)
async def create_quiz(
    request: Request,
    quizType: Optional[str] = Form(None),
    questionCount: Optional[str] = Form(None),
    difficulty: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
):
    session = _session(request)
    session.progress.start()
    try:
        result = await run_generation(files or [], quizType, questionCount, difficulty)
    except InputError as e:
        session.set_failure(str(e))
    except OpenAIError as e:
        logger.error(f"[ui] provider error: {e}")
        session.set_failure(f"Model provider error: {getattr(e, 'message', str(e))}")
    except Exception as e:
        logger.exception("[ui] generation failed")
        session.set_failure(str(e))
    else:
        if result.ok:
            session.load(result.quiz, raw=result.raw,
                         source_mode=result.source_mode, source_note=result.source_note)
            logger.info(f"[ui] session {session.id[:8]} loaded {len(result.quiz.questions)} question(s)")
        else:
            session.set_failure(result.error, raw=result.raw)
    finally:
        session.progress.finish()
    return _redirect("/" if session.error else "/quiz", session)


@router.get("/quiz", response_class=HTMLResponse)
async def show_quiz(request: Request):
    session = _session(request)
    if session.quiz is None:
        return _redirect("/", session)
    return _page(
        request,
        "quiz.html",
        session,
        quiz=session.quiz,
        questions_html=render_quiz(session.quiz, session.answers),
        result=session.result,
        elapsed=session.timer.display(),
    )


@router.post("/quiz/answers")
@limiter.exempt
async def record_answers(request: Request):
    session = _session(request)
    session.record_form(await request.form())
    return _bind(JSONResponse({"ok": True, "answered": len(session.answers)}), session)


@router.post("/quiz/submit")
async def submit_quiz(request: Request):
    session = _session(request)
    if session.quiz is None:
        return _redirect("/", session)
    form = await request.form()
    session.record_form(form)
    session.set_toggles(
        show_answers=form.get("show_answers") == "on",
        show_explanations=form.get("show_explanations") == "on",
    )
    result = session.submit()
    logger.info(f"[ui] session {session.id[:8]} scored {result.total_score}/{result.total_possible}")
    return _redirect("/quiz#results", session)


@router.post("/quiz/reset")
async def reset_answers(request: Request):
    session = _session(request)
    session.reset_answers()
    return _redirect("/quiz", session)


@router.post("/quiz/clear")
async def clear_quiz(request: Request):
    session = _session(request)
    session.clear()
    return _redirect("/", session)


@router.get("/quiz/progress")
@limiter.exempt
async def progress(request: Request):
    session = _session(request)
    return _bind(JSONResponse(session.progress.snapshot()), session)
