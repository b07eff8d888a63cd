"""Deterministic PDF fixture builders for tests."""

from __future__ import annotations

from io import BytesIO
from pathlib import Path

from pypdf import PageObject, PdfWriter
from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject

PAGE_WIDTH = 612
PAGE_HEIGHT = 792
PDF_HEADER = b"%PDF-1.4\n"


def create_pdf_with_pages(texts: list[str], padding: int = 0) -> bytes:
    """Build a PDF with one text page per entry.

    ``padding`` adds that many bytes of content-stream comment to the first
    page, which inflates the file without changing what it renders.
    """
    writer = PdfWriter()
    for page_index, text in enumerate(texts):
        page = PageObject.create_blank_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        filler = b"%" + b"x" * padding + b"\n" if padding and page_index == 0 else b""
        _apply_text_content(page, text, filler=filler)
        writer.add_page(page)

    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def write_pdf_with_pages(destination: Path, texts: list[str], padding: int = 0) -> Path:
    """Write a synthetic PDF to disk and return its path."""
    destination.write_bytes(create_pdf_with_pages(texts, padding=padding))
    return destination


def write_sized_file(destination: Path, size: int) -> Path:
    """Write a file of exactly ``size`` bytes that starts like a PDF."""
    payload = (PDF_HEADER + b"0" * max(0, size - len(PDF_HEADER)))[:size]
    destination.write_bytes(payload)
    return destination


def _apply_text_content(page: PageObject, text: str, filler: bytes = b"") -> None:
    page[NameObject("/Resources")] = _font_resources_dictionary()
    escaped_text = _escape_pdf_text(text)
    content = filler + f"BT /F1 12 Tf 72 700 Td ({escaped_text}) Tj ET".encode("ascii")
    stream = DecodedStreamObject()
    stream.set_data(content)
    page.replace_contents(stream)


def _font_resources_dictionary() -> DictionaryObject:
    return DictionaryObject(
        {
            NameObject("/Font"): DictionaryObject(
                {
                    NameObject("/F1"): DictionaryObject(
                        {
                            NameObject("/Type"): NameObject("/Font"),
                            NameObject("/Subtype"): NameObject("/Type1"),
                            NameObject("/BaseFont"): NameObject("/Helvetica"),
                        }
                    )
                }
            )
        }
    )


def _escape_pdf_text(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
