"""Plain-text extraction for uploaded files.

Used when files cannot be attached to the model request directly: every
upload is turned into text (or a skip reason) and the results are joined
into a single SOURCE PACK that goes into the prompt verbatim.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

import docx
import fitz  # PyMuPDF
from loguru import logger
from pptx import Presentation

TEXT_EXTENSIONS = {".txt", ".md", ".csv", ".json"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

SKIP_IMAGE = "Image OCR not enabled yet."
SKIP_EMPTY = "No extractable text found."

FILE_SEPARATOR = "\n\n---\n\n"


@dataclass
class ExtractedSource:
    filename: str
    text: str
    skipped_reason: Optional[str] = None

    def render(self) -> str:
        if self.text:
            return f"FILE: {self.filename}\n{self.text}"
        return f"FILE: {self.filename}\n[SKIPPED] {self.skipped_reason or 'No text'}"


@dataclass
class SourcePack:
    text: str
    sources: List[ExtractedSource] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.text.strip()


def extract_text(path: str) -> str:
    return Path(path).read_text(encoding="utf-8")


def extract_pdf(path: str) -> str:
    with fitz.open(path) as doc:
        pages = [(p.get_text() or "") for p in doc]
    return "\n".join(re.sub(r"[ \t]+", " ", t).strip() for t in pages)


def extract_docx(path: str) -> str:
    document = docx.Document(path)
    lines = [p.text for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.extend(cell.text for cell in row.cells)
    return "\n".join(line for line in lines if line.strip())


def _shape_paragraphs(shape) -> Iterable[str]:
    if getattr(shape, "shapes", None) is not None:  # group shape
        for child in shape.shapes:
            yield from _shape_paragraphs(child)
        return
    if getattr(shape, "has_text_frame", False) and shape.has_text_frame:
        for para in shape.text_frame.paragraphs:
            yield "".join(run.text for run in para.runs)
    if getattr(shape, "has_table", False) and shape.has_table:
        for row in shape.table.rows:
            for cell in row.cells:
                yield cell.text


def extract_pptx(path: str) -> str:
    prs = Presentation(path)
    out = []
    for idx, slide in enumerate(prs.slides, start=1):
        for shape in slide.shapes:
            for text in _shape_paragraphs(shape):
                if text.strip():
                    out.append(f"Slide {idx}: {text}")
    return "\n".join(out)


def extract_text_from_file(path: str) -> str:
    """Dispatch on the file suffix; unknown types give an empty string."""
    ext = Path(path).suffix.lower()
    if ext in TEXT_EXTENSIONS:
        return extract_text(path)
    if ext == ".pdf":
        return extract_pdf(path)
    if ext == ".docx":
        return extract_docx(path)
    if ext == ".pptx":
        return extract_pptx(path)
    return ""


def extract_source(path: str, filename: str) -> ExtractedSource:
    """Extract one file, turning every failure into a skip reason."""
    if Path(filename).suffix.lower() in IMAGE_EXTENSIONS:
        return ExtractedSource(filename=filename, text="", skipped_reason=SKIP_IMAGE)
    try:
        text = extract_text_from_file(path)
    except Exception as e:
        logger.warning(f"[extract] {filename}: {e}")
        return ExtractedSource(filename=filename, text="", skipped_reason=f"Extraction failed: {e}")
    if not text.strip():
        return ExtractedSource(filename=filename, text="", skipped_reason=SKIP_EMPTY)
    return ExtractedSource(filename=filename, text=text)


def build_source_pack(files) -> SourcePack:
    """Build the SOURCE PACK for a batch of stored uploads (``.path``/``.filename``)."""
    extracted = [extract_source(str(f.path), f.filename) for f in files]
    skipped = [s.filename for s in extracted if s.skipped_reason]
    if skipped:
        logger.info(f"[extract] skipped {len(skipped)}/{len(extracted)} file(s): {skipped}")
    return SourcePack(
        text=FILE_SEPARATOR.join(s.render() for s in extracted),
        sources=extracted,
    )
