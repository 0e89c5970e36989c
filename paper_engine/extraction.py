"""
Text extraction for submitted documents

Handles:
1. PDF files (PyMuPDF): text of every page, title from PDF metadata
2. Plain-text formats: UTF-8 with latin-1 fallback, title is the path

A document's title is its key in the index. PDFs without a usable title in
their metadata fall back to the file path, like text files do.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import pymupdf

logger = logging.getLogger(__name__)

PDF_FORMATS = {".pdf"}
TEXT_FORMATS = {
    ".txt",
    ".md",
    ".markdown",
    ".rst",
    ".log",
    ".csv",
    ".tex",
    ".html",
}


class ExtractionError(ValueError):
    """Document cannot be read"""


@dataclass
class ExtractedDocument:
    title: str
    path: str
    text: str


def extract_text_from_pdf(path: str) -> ExtractedDocument:
    """
    Extract text and title from a PDF file

    Args:
        path: Path to PDF file

    Returns:
        ExtractedDocument with the concatenated text of all pages
    """
    try:
        doc = pymupdf.open(path)
    except Exception as e:
        raise ExtractionError(f"Could not open file: {path!r}: {e}") from e

    try:
        title = (doc.metadata or {}).get("title") or path
        logger.debug(f"PDF has {len(doc)} pages, extracting text...")
        text = "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()

    logger.debug(f"Extracted {len(text)} chars from {path}")
    return ExtractedDocument(title=title, path=path, text=text)


def extract_text_from_txt(path: str) -> ExtractedDocument:
    """
    Read a plain-text file

    Args:
        path: Path to text file

    Returns:
        ExtractedDocument titled by its path
    """
    content = Path(path).read_bytes()
    try:
        text = content.decode('utf-8')
    except UnicodeDecodeError:
        # Fallback to latin-1 (never fails)
        logger.warning(f"UTF-8 decode failed for {path}, using latin-1")
        text = content.decode('latin-1', errors='replace')
    return ExtractedDocument(title=path, path=path, text=text)


def extract_document(path: Union[str, Path]) -> ExtractedDocument:
    """
    Extract a document from disk by file extension

    Raises:
        ExtractionError: Path is not a file, has an unsupported extension,
            or the PDF cannot be opened
    """
    path = str(path)
    if not Path(path).is_file():
        raise ExtractionError(f"{path!r} is not a file")

    extension = Path(path).suffix.lower()
    if extension in PDF_FORMATS:
        return extract_text_from_pdf(path)
    if extension in TEXT_FORMATS:
        return extract_text_from_txt(path)

    supported = ", ".join(sorted(PDF_FORMATS | TEXT_FORMATS))
    raise ExtractionError(f"Unsupported file type {extension!r} for {path!r} (supported: {supported})")
