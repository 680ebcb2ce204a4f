from __future__ import annotations

import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler

from .limiter import limiter
from .settings import settings
from .routers import quiz, ui

# ---------- logging ----------
logger.remove()
logger.add(
    sys.stderr,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}",
    level=settings.LOG_LEVEL,
)

# ---------- app ----------
app = FastAPI(title="QuizForge API", version="1.0.0")
app.state.limiter = limiter

# ---------- CORS ----------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# SlowAPI middleware + handler
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ---------- health ----------
@app.get("/health")
def health():
    return {
        "ok": True,
        "mock": settings.MOCK_MODE,
        "model": settings.XAI_MODEL,
        "rate_limit": settings.RATE_LIMIT,
        "max_files": settings.MAX_FILES,
        "max_upload_mb": settings.MAX_UPLOAD_MB,
    }

# ---------- routers ----------
app.include_router(quiz.router, tags=["quiz"])
app.include_router(ui.router, tags=["ui"])
