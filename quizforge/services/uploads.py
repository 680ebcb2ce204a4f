"""Transient on-disk storage for uploaded files.

Uploads live only for one request: ``stored_uploads`` writes them under
``UPLOAD_DIR`` and removes every file on exit, whatever happened inside.
"""
from __future__ import annotations

import os
import re
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Iterable, List

from fastapi import UploadFile
from loguru import logger

from ..settings import settings


@dataclass(frozen=True)
class StoredFile:
    path: Path
    filename: str
    size: int


def _safe_name(name: str) -> str:
    base = Path(name or "upload").name
    return re.sub(r"[^A-Za-z0-9._-]+", "_", base) or "upload"


async def store_upload(upload: UploadFile, directory: Path) -> StoredFile:
    data = await upload.read()
    filename = upload.filename or "upload"
    path = directory / f"{uuid.uuid4().hex}-{_safe_name(filename)}"
    path.write_bytes(data)
    return StoredFile(path=path, filename=filename, size=len(data))


def cleanup_files(paths: Iterable[Path]) -> None:
    for p in paths:
        try:
            os.remove(p)
        except OSError as e:
            logger.debug(f"[uploads] cleanup failed for {p}: {e}")


@asynccontextmanager
async def stored_uploads(uploads: Iterable[UploadFile]) -> AsyncIterator[List[StoredFile]]:
    directory = Path(settings.UPLOAD_DIR)
    directory.mkdir(parents=True, exist_ok=True)
    stored: List[StoredFile] = []
    try:
        for upload in uploads:
            stored.append(await store_upload(upload, directory))
        yield stored
    finally:
        cleanup_files(s.path for s in stored)
