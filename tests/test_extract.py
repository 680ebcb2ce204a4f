from pathlib import Path

import docx
import fitz
import pytest
from pptx import Presentation
from pptx.util import Inches

from quizforge.services import extract
from quizforge.services.extract import (
    SKIP_EMPTY,
    SKIP_IMAGE,
    SourcePack,
    build_source_pack,
    extract_source,
    extract_text_from_file,
)
from quizforge.services.uploads import StoredFile


def _stored(path: Path, name: str = None) -> StoredFile:
    return StoredFile(path=path, filename=name or path.name, size=path.stat().st_size)


def test_plain_text_read_verbatim(tmp_path: Path):
    p = tmp_path / "notes.md"
    p.write_text("# Cells\n\nMitochondria make ATP.\n", encoding="utf-8")
    assert extract_text_from_file(str(p)) == "# Cells\n\nMitochondria make ATP.\n"


@pytest.mark.parametrize("name", ["photo.png", "scan.JPG", "a.jpeg", "b.gif", "c.webp"])
def test_images_always_skip(tmp_path: Path, name):
    p = tmp_path / name
    p.write_text("this is actually readable text", encoding="utf-8")
    src = extract_source(str(p), name)
    assert src.text == ""
    assert src.skipped_reason == SKIP_IMAGE


def test_unknown_extension_is_skipped(tmp_path: Path):
    p = tmp_path / "data.xyz"
    p.write_text("something", encoding="utf-8")
    assert extract_text_from_file(str(p)) == ""
    assert extract_source(str(p), "data.xyz").skipped_reason == SKIP_EMPTY


def test_blank_text_file_is_skipped(tmp_path: Path):
    p = tmp_path / "empty.txt"
    p.write_text("  \n\t", encoding="utf-8")
    src = extract_source(str(p), "empty.txt")
    assert src.skipped_reason == SKIP_EMPTY
    assert src.text == ""


def test_pdf_text_layer(tmp_path: Path):
    p = tmp_path / "bio.pdf"
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Mitochondria make ATP")
    doc.save(str(p))
    doc.close()
    assert "Mitochondria make ATP" in extract_text_from_file(str(p))


def test_docx_raw_text(tmp_path: Path):
    p = tmp_path / "essay.docx"
    d = docx.Document()
    d.add_paragraph("First paragraph.")
    d.add_paragraph("Second paragraph.")
    d.save(str(p))
    text = extract_text_from_file(str(p))
    assert "First paragraph." in text
    assert "Second paragraph." in text


def test_pptx_prefixes_each_line_with_slide_number(tmp_path: Path):
    p = tmp_path / "deck.pptx"
    prs = Presentation()
    for title, body in [("Photosynthesis", "Chlorophyll absorbs light"), ("Respiration", "Glucose is oxidised")]:
        slide = prs.slides.add_slide(prs.slide_layouts[5])
        slide.shapes.title.text = title
        box = slide.shapes.add_textbox(Inches(1), Inches(2), Inches(6), Inches(1))
        box.text_frame.text = body
    prs.save(str(p))
    lines = extract_text_from_file(str(p)).splitlines()
    assert "Slide 1: Photosynthesis" in lines
    assert "Slide 1: Chlorophyll absorbs light" in lines
    assert "Slide 2: Glucose is oxidised" in lines


def test_failure_is_isolated_per_file(tmp_path: Path, monkeypatch):
    def boom(path):
        raise RuntimeError("corrupt xref table")

    monkeypatch.setattr(extract, "extract_pdf", boom)
    bad = tmp_path / "broken.pdf"
    bad.write_bytes(b"%PDF-garbage")
    good = tmp_path / "notes.txt"
    good.write_text("Paris is the capital of France.", encoding="utf-8")

    pack = build_source_pack([_stored(bad), _stored(good)])
    assert pack.sources[0].skipped_reason == "Extraction failed: corrupt xref table"
    assert pack.sources[1].text == "Paris is the capital of France."
    assert not pack.is_empty


def test_source_pack_layout(tmp_path: Path):
    txt = tmp_path / "notes.txt"
    txt.write_text("Paris is the capital of France.", encoding="utf-8")
    png = tmp_path / "map.png"
    png.write_bytes(b"\x89PNG\r\n\x1a\n")

    pack = build_source_pack([_stored(txt), _stored(png)])
    assert pack.text == (
        "FILE: notes.txt\nParis is the capital of France."
        "\n\n---\n\n"
        "FILE: map.png\n[SKIPPED] Image OCR not enabled yet."
    )
    assert [s.filename for s in pack.sources] == ["notes.txt", "map.png"]


def test_skip_markers_count_as_pack_text(tmp_path: Path):
    png = tmp_path / "map.png"
    png.write_bytes(b"\x89PNG")
    pack = build_source_pack([_stored(png)])
    assert "[SKIPPED]" in pack.text
    assert not pack.is_empty


def test_pack_is_empty_only_when_text_is_blank():
    assert build_source_pack([]).is_empty
    assert SourcePack(text=" \n\t ").is_empty


def test_original_filename_decides_image_skip(tmp_path: Path):
    stored = tmp_path / "abc123-upload.bin"
    stored.write_text("text", encoding="utf-8")
    assert extract_source(str(stored), "diagram.PNG").skipped_reason == SKIP_IMAGE
